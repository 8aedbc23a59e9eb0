"""PHP parser using tree-sitter.

Extracts class declarations, their DocBlocks, namespaces, and resolved
``extends`` targets from PHP source files into the shared data models.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import tree_sitter
import tree_sitter_php as tsphp

from src.parsers.structure import ClassDeclarationNode, DocBlock, ModuleInfo

logger = logging.getLogger(__name__)

_PHP_LANGUAGE = tree_sitter.Language(tsphp.language_php())

_NAME_TYPES = {"name", "qualified_name", "relative_name"}
_ANONYMOUS_TYPES = {"anonymous_class"}
_USE_CLAUSE_TYPES = {"namespace_use_clause", "namespace_use_group_clause"}
_IMPORT_TARGET_TYPES = _NAME_TYPES | {"namespace_name"}


@dataclass
class _Scope:
    """Name-resolution state for the statements being walked."""

    namespace: str = ""
    imports: dict[str, str] = field(default_factory=dict)


class PhpParser:
    """Parses PHP source files using tree-sitter.

    Walks the whole syntax tree so that classes declared inside
    namespace blocks, conditionals, or method bodies are all found.
    """

    def parse_file(self, file_path: str) -> ModuleInfo:
        """Parse a PHP file and extract its class declarations.

        Args:
            file_path: Path to the PHP file to parse.

        Returns:
            A ModuleInfo object containing all extracted classes.

        Raises:
            FileNotFoundError: If the file does not exist.
        """
        path = Path(file_path)
        if not path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")

        source = path.read_text(encoding="utf-8")
        return self.parse_source(source, file_path)

    def parse_source(self, source: str, file_path: str = "<string>") -> ModuleInfo:
        """Parse PHP source code and extract its class declarations.

        Args:
            source: PHP source code, including the opening ``<?php`` tag.
            file_path: Optional file path for reference.

        Returns:
            A ModuleInfo object containing all extracted classes.
        """
        parser = tree_sitter.Parser(_PHP_LANGUAGE)
        source_bytes = source.encode("utf-8")
        tree = parser.parse(source_bytes)
        root = tree.root_node

        module = ModuleInfo(
            file_path=file_path,
            line_count=len(source.splitlines()),
            has_errors=root.has_error,
        )
        self._walk(root, _Scope(), module, source_bytes)

        logger.debug(
            "Parsed %s: %d classes%s",
            file_path,
            len(module.classes),
            " (with syntax errors)" if module.has_errors else "",
        )
        return module

    def _walk(
        self,
        node: tree_sitter.Node,
        scope: _Scope,
        module: ModuleInfo,
        source_bytes: bytes,
    ) -> None:
        """Visit the children of a node, collecting class declarations.

        Args:
            node: Parent tree-sitter node.
            scope: Namespace and imports in effect. Statement-form
                namespace declarations update it in place.
            module: The ModuleInfo to populate.
            source_bytes: Source as bytes for text extraction.
        """
        for child in node.children:
            node_type = child.type

            if node_type == "namespace_definition":
                name_node = child.child_by_field_name("name")
                namespace = (
                    self._node_text(name_node, source_bytes) if name_node else ""
                )
                body = child.child_by_field_name("body")
                if body is None:
                    # namespace Foo; applies to every following statement
                    scope.namespace = namespace
                    scope.imports = {}
                else:
                    self._walk(body, _Scope(namespace=namespace), module, source_bytes)

            elif node_type == "namespace_use_declaration":
                self._collect_imports(child, scope, source_bytes)

            elif node_type == "class_declaration":
                cls = self._extract_class(child, scope, module, source_bytes)
                if cls:
                    module.classes.append(cls)
                self._walk(child, scope, module, source_bytes)

            elif node_type in _ANONYMOUS_TYPES:
                module.classes.append(
                    self._extract_anonymous_class(child, scope, module, source_bytes)
                )
                self._walk(child, scope, module, source_bytes)

            else:
                self._walk(child, scope, module, source_bytes)

    def _extract_class(
        self,
        node: tree_sitter.Node,
        scope: _Scope,
        module: ModuleInfo,
        source_bytes: bytes,
    ) -> Optional[ClassDeclarationNode]:
        """Extract a named class declaration.

        Args:
            node: A class_declaration tree-sitter node.
            scope: Namespace and imports in effect.
            module: The module being populated.
            source_bytes: Source as bytes.

        Returns:
            A ClassDeclarationNode, or None if the node has no name.
        """
        name_node = node.child_by_field_name("name")
        if not name_node:
            return None

        short_name = self._node_text(name_node, source_bytes)
        fqcn = f"{scope.namespace}\\{short_name}" if scope.namespace else short_name

        return ClassDeclarationNode(
            short_name=short_name,
            fqcn=fqcn,
            supertype=self._extract_supertype(node, scope, source_bytes),
            doc_block=self._extract_doc_block(node, source_bytes),
            file_path=module.file_path,
            line_number=node.start_point.row + 1,
            start_byte=node.start_byte,
            end_byte=node.end_byte,
        )

    def _extract_anonymous_class(
        self,
        node: tree_sitter.Node,
        scope: _Scope,
        module: ModuleInfo,
        source_bytes: bytes,
    ) -> ClassDeclarationNode:
        """Extract a ``new class ... {}`` expression."""
        return ClassDeclarationNode(
            supertype=self._extract_supertype(node, scope, source_bytes),
            doc_block=self._extract_doc_block(node, source_bytes),
            is_anonymous=True,
            file_path=module.file_path,
            line_number=node.start_point.row + 1,
            start_byte=node.start_byte,
            end_byte=node.end_byte,
        )

    def _extract_supertype(
        self, node: tree_sitter.Node, scope: _Scope, source_bytes: bytes
    ) -> Optional[str]:
        """Resolve the first name of the ``extends`` clause.

        Args:
            node: A class-like tree-sitter node.
            scope: Namespace and imports in effect.
            source_bytes: Source as bytes.

        Returns:
            The fully-qualified parent name, or None.
        """
        for child in node.children:
            if child.type != "base_clause":
                continue
            for sub in child.children:
                if sub.type in _NAME_TYPES:
                    return self._resolve_name(self._node_text(sub, source_bytes), scope)
        return None

    def _extract_doc_block(
        self, node: tree_sitter.Node, source_bytes: bytes
    ) -> Optional[DocBlock]:
        """Extract the DocBlock preceding a node.

        Ordinary comments between the DocBlock and the node are skipped;
        the nearest ``/**`` comment in the run of comments wins.

        Args:
            node: The tree-sitter node to find a DocBlock for.
            source_bytes: Source as bytes.

        Returns:
            The DocBlock with its source span, or None if not found.
        """
        prev = node.prev_sibling
        while prev is not None and prev.type == "comment":
            text = self._node_text(prev, source_bytes)
            if text.startswith("/**"):
                return DocBlock(
                    text=text, start_byte=prev.start_byte, end_byte=prev.end_byte
                )
            prev = prev.prev_sibling
        return None

    def _collect_imports(
        self, node: tree_sitter.Node, scope: _Scope, source_bytes: bytes
    ) -> None:
        """Record class imports from a ``use`` declaration.

        Handles plain, aliased, and grouped imports. ``use function`` and
        ``use const`` declarations are ignored.

        Args:
            node: A namespace_use_declaration node.
            scope: Scope to record the imports in.
            source_bytes: Source as bytes.
        """
        if any(c.type in ("function", "const") for c in node.children):
            return

        prefix = ""
        for child in node.children:
            if child.type == "namespace_name":
                prefix = self._node_text(child, source_bytes).lstrip("\\")
            elif child.type in _USE_CLAUSE_TYPES:
                self._record_import(child, "", scope, source_bytes)
            elif child.type == "namespace_use_group":
                for clause in child.children:
                    if clause.type in _USE_CLAUSE_TYPES:
                        self._record_import(clause, prefix, scope, source_bytes)

    def _record_import(
        self,
        clause: tree_sitter.Node,
        prefix: str,
        scope: _Scope,
        source_bytes: bytes,
    ) -> None:
        """Record a single use clause, honoring ``as`` aliases."""
        if any(c.type in ("function", "const") for c in clause.children):
            return

        target = None
        alias = None
        alias_node = clause.child_by_field_name("alias")
        for child in clause.children:
            if alias_node is not None and child == alias_node:
                continue
            if child.type in _IMPORT_TARGET_TYPES and target is None:
                target = self._node_text(child, source_bytes).lstrip("\\")
            elif child.type == "namespace_aliasing_clause":
                for sub in child.children:
                    if sub.type == "name":
                        alias = self._node_text(sub, source_bytes)

        if alias_node is not None:
            alias = self._node_text(alias_node, source_bytes)
        if not target:
            return

        if prefix:
            target = f"{prefix}\\{target}"
        alias = alias or target.rsplit("\\", 1)[-1]
        scope.imports[alias.lower()] = target

    def _resolve_name(self, raw: str, scope: _Scope) -> str:
        """Resolve a class reference to a fully-qualified name.

        Args:
            raw: The name as written in source.
            scope: Namespace and imports in effect.

        Returns:
            The fully-qualified name without a leading backslash.
        """
        if raw.startswith("\\"):
            return raw[1:]

        if raw.lower().startswith("namespace\\"):
            relative = raw[len("namespace\\"):]
            return f"{scope.namespace}\\{relative}" if scope.namespace else relative

        first, sep, rest = raw.partition("\\")
        imported = scope.imports.get(first.lower())
        if imported:
            return f"{imported}\\{rest}" if sep else imported

        return f"{scope.namespace}\\{raw}" if scope.namespace else raw

    def _node_text(self, node: tree_sitter.Node, source_bytes: bytes) -> str:
        """Extract the text content of a tree-sitter node.

        Args:
            node: A tree-sitter Node.
            source_bytes: Source as bytes.

        Returns:
            The text content of the node.
        """
        return source_bytes[node.start_byte : node.end_byte].decode("utf-8")
