"""Data models for representing parsed PHP structures.

Defines the immutable class-declaration nodes and DocBlocks that the PHP
parser produces and that rewrite rules consume. These models form the
shared vocabulary between the parser, the rules, and the rule engine.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

DOC_OPEN = "/**"
DOC_CLOSE = " */"
DOC_LINE_PREFIX = " * "


@dataclass(frozen=True)
class DocBlock:
    """A structured ``/** ... */`` comment attached to a declaration.

    Attributes:
        text: Raw comment text, lines joined by ``\\n``.
        start_byte: Offset of the comment in the parsed source, or None
            for blocks that were synthesized rather than parsed.
        end_byte: End offset of the comment in the parsed source.
    """

    text: str
    start_byte: Optional[int] = None
    end_byte: Optional[int] = None

    @classmethod
    def skeleton(cls) -> DocBlock:
        """Build an empty two-line block."""
        return cls(text=f"{DOC_OPEN}\n{DOC_CLOSE}")

    @property
    def lines(self) -> list[str]:
        return self.text.split("\n")

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a dictionary.

        Returns:
            Dictionary representation of this DocBlock.
        """
        return {
            "text": self.text,
            "start_byte": self.start_byte,
            "end_byte": self.end_byte,
        }


@dataclass(frozen=True)
class ClassDeclarationNode:
    """Represents a parsed class declaration.

    Instances are never mutated; rules return a copy that differs only in
    its DocBlock.

    Attributes:
        short_name: Local class identifier, None for anonymous classes.
        fqcn: Fully-qualified class name, None for anonymous classes.
        supertype: Fully-qualified name of the ``extends`` target, if any.
        doc_block: DocBlock immediately preceding the declaration.
        is_anonymous: Whether this is a ``new class`` expression.
        file_path: Path of the source file the node was parsed from.
        line_number: Starting line number in the source file.
        start_byte: Offset of the declaration in the source.
        end_byte: End offset of the declaration in the source.
    """

    short_name: Optional[str] = None
    fqcn: Optional[str] = None
    supertype: Optional[str] = None
    doc_block: Optional[DocBlock] = None
    is_anonymous: bool = False
    file_path: str = "<string>"
    line_number: int = 0
    start_byte: int = 0
    end_byte: int = 0

    @property
    def display_name(self) -> str:
        if self.is_anonymous:
            return f"class@anonymous:{self.line_number}"
        return self.fqcn or self.short_name or "<unknown>"

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a dictionary.

        Returns:
            Dictionary representation of this class declaration.
        """
        return {
            "short_name": self.short_name,
            "fqcn": self.fqcn,
            "supertype": self.supertype,
            "doc_block": self.doc_block.to_dict() if self.doc_block else None,
            "is_anonymous": self.is_anonymous,
            "file_path": self.file_path,
            "line_number": self.line_number,
        }


@dataclass
class ModuleInfo:
    """Represents a fully parsed PHP source file.

    Attributes:
        file_path: Path to the source file.
        line_count: Total number of lines.
        classes: Class declarations in source order, anonymous included.
        has_errors: Whether the syntax tree contained parse errors.
    """

    file_path: str
    line_count: int = 0
    classes: list[ClassDeclarationNode] = field(default_factory=list)
    has_errors: bool = False

    @property
    def hierarchy(self) -> dict[str, str]:
        """Map of named class FQCN to the FQCN of its declared parent."""
        return {
            cls.fqcn: cls.supertype
            for cls in self.classes
            if cls.fqcn and cls.supertype
        }
