"""Name and type resolution services consumed by rewrite rules.

Rules treat these as oracles: they ask for a node's short name and
whether its declared supertype matches a named type, without knowing
how the answer is computed. The defaults answer from the parsed nodes
and a class-hierarchy index built from every scanned file.
"""

from typing import Mapping, Optional, Protocol

from src.parsers.structure import ClassDeclarationNode


class NameResolver(Protocol):
    """Resolves a node's short identifier."""

    def get_short_name(self, node: ClassDeclarationNode) -> Optional[str]:
        ...


class TypeResolver(Protocol):
    """Answers whether a node's declared supertype matches a named type."""

    def is_object_type(self, node: ClassDeclarationNode, type_name: str) -> bool:
        ...


def normalize_type_name(name: str) -> str:
    """Normalize a class name for comparison.

    PHP class names are case-insensitive and may be written with a
    leading namespace separator.
    """
    return name.lstrip("\\").lower()


class NodeNameResolver:
    """Reads the short name straight off the parsed node."""

    def get_short_name(self, node: ClassDeclarationNode) -> Optional[str]:
        if node.is_anonymous:
            return None
        if node.short_name:
            return node.short_name
        if node.fqcn:
            return node.fqcn.rsplit("\\", 1)[-1] or None
        return None


class ClassHierarchyTypeResolver:
    """Matches supertypes by walking a class-to-parent index.

    A node matches a type when its declared supertype, or any ancestor
    of it recorded in the index, names that type.
    """

    def __init__(self, hierarchy: Optional[Mapping[str, str]] = None) -> None:
        """Initialize the resolver.

        Args:
            hierarchy: Map of class FQCN to parent FQCN. Keys and values
                are normalized on insert.
        """
        self._parents: dict[str, str] = {}
        if hierarchy:
            self.update(hierarchy)

    def update(self, hierarchy: Mapping[str, str]) -> None:
        """Record class-to-parent pairs, overwriting earlier entries."""
        for child, parent in hierarchy.items():
            self._parents[normalize_type_name(child)] = normalize_type_name(parent)

    @property
    def parent_count(self) -> int:
        """Number of classes whose parent is known."""
        return len(self._parents)

    def is_object_type(self, node: ClassDeclarationNode, type_name: str) -> bool:
        if not node.supertype:
            return False

        target = normalize_type_name(type_name)
        current: Optional[str] = normalize_type_name(node.supertype)
        seen: set[str] = set()
        while current and current not in seen:
            if current == target:
                return True
            seen.add(current)
            current = self._parents.get(current)
        return False
