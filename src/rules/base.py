"""Base class for AST rewrite rules.

A rule declares which node types it wants to see and transforms one
node at a time. The rule engine takes care of walking files, offering
nodes, and writing the replacements back into source text.
"""

from abc import ABC, abstractmethod
from typing import Optional

from src.parsers.structure import ClassDeclarationNode


class Rule(ABC):
    """A pure, stateless node transformation.

    Subclasses must not keep state between calls to transform, so a
    single instance can be shared across files and threads.
    """

    name: str = ""
    description: str = ""
    node_types: tuple[type, ...] = ()

    def accepts(self, node: object) -> bool:
        """Check whether the node is one of the declared node types."""
        return isinstance(node, self.node_types)

    @abstractmethod
    def transform(self, node: ClassDeclarationNode) -> Optional[ClassDeclarationNode]:
        """Return an updated copy of the node, or None for no change."""
