"""Rule that links API resource classes to the model they wrap.

Laravel's ``JsonResource`` proxies property access to the wrapped model,
which static analysers cannot follow. Adding ``@mixin \\App\\Models\\X``
to the resource's DocBlock lets them resolve those properties.
"""

import dataclasses
from typing import Optional

from src.parsers.structure import (
    DOC_CLOSE,
    DOC_LINE_PREFIX,
    DOC_OPEN,
    ClassDeclarationNode,
    DocBlock,
)
from src.rules.base import Rule
from src.rules.resolvers import (
    ClassHierarchyTypeResolver,
    NameResolver,
    NodeNameResolver,
    TypeResolver,
)
from src.utils.config import ResourceRuleConfig

MIXIN_TAG = "@mixin"


class AddApiResourcePhpDocRule(Rule):
    """Adds a ``@mixin`` annotation pointing at the resource's model.

    A class qualifies when it extends the configured JSON resource base
    type or its name ends with the resource suffix. The model name is
    the class name with one trailing suffix removed. Every condition
    that cannot be decided safely leaves the node unchanged.
    """

    name = "add_api_resource_phpdoc"
    description = "Add @mixin model annotations to API resource classes"
    node_types = (ClassDeclarationNode,)

    def __init__(
        self,
        config: Optional[ResourceRuleConfig] = None,
        type_resolver: Optional[TypeResolver] = None,
        name_resolver: Optional[NameResolver] = None,
    ) -> None:
        """Initialize the rule.

        Args:
            config: Base type, model namespace, and suffix to use.
                Defaults to the Laravel conventions.
            type_resolver: Oracle for supertype matching. Defaults to a
                resolver that only looks at the declared supertype.
            name_resolver: Oracle for short names.
        """
        self.config = config or ResourceRuleConfig()
        self.type_resolver = (
            type_resolver if type_resolver is not None else ClassHierarchyTypeResolver()
        )
        self.name_resolver = (
            name_resolver if name_resolver is not None else NodeNameResolver()
        )

    def transform(self, node: ClassDeclarationNode) -> Optional[ClassDeclarationNode]:
        if node.is_anonymous:
            return None

        short_name = self.name_resolver.get_short_name(node)
        if not short_name:
            return None

        suffix = self.config.resource_suffix
        extends_base = self.type_resolver.is_object_type(node, self.config.base_type)
        has_suffix = bool(suffix) and short_name.endswith(suffix)
        if not extends_base and not has_suffix:
            return None

        model_name = short_name[: -len(suffix)] if has_suffix else short_name
        if not model_name:
            return None

        annotation = f"{MIXIN_TAG} \\{self.model_reference(model_name)}"

        doc_text = node.doc_block.text if node.doc_block else DocBlock.skeleton().text
        if annotation in doc_text:
            return None

        return dataclasses.replace(
            node, doc_block=DocBlock(text=add_annotation(doc_text, annotation))
        )

    def model_reference(self, model_name: str) -> str:
        """Build the fully-qualified model name, without a leading separator."""
        namespace = self.config.model_namespace.strip("\\")
        return f"{namespace}\\{model_name}" if namespace else model_name


def add_annotation(doc_text: str, annotation: str) -> str:
    """Insert an annotation line just before a DocBlock's closing line.

    Compact single-line blocks and blocks whose last line is not the
    closing delimiter are replaced by a fresh three-line block.

    Args:
        doc_text: Existing DocBlock text.
        annotation: Tag and value to add, e.g. ``@mixin \\App\\Models\\User``.

    Returns:
        The new DocBlock text.
    """
    lines = doc_text.split("\n")
    last = len(lines) - 1
    if last == 0 or lines[last].strip() != "*/":
        return "\n".join([DOC_OPEN, DOC_LINE_PREFIX + annotation, DOC_CLOSE])

    lines.insert(last, DOC_LINE_PREFIX + annotation)
    return "\n".join(lines)
