"""Rule engine that applies rewrite rules to PHP source files.

Parses files, offers each class declaration to every enabled rule, and
splices the DocBlocks returned by the rules back into the source text.
All files are indexed before any is rewritten so that a resource whose
parent class lives in another file is still recognized.
"""

import difflib
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional

from src.parsers.php_parser import PhpParser
from src.parsers.structure import ClassDeclarationNode, ModuleInfo
from src.rules.base import Rule
from src.rules.registry import build_rules
from src.rules.resolvers import ClassHierarchyTypeResolver
from src.utils.config import AppConfig

logger = logging.getLogger(__name__)


@dataclass
class AppliedChange:
    """A single rule application.

    Attributes:
        rule: Name of the rule that changed the node.
        class_name: Display name of the changed class.
        line_number: Line of the class declaration in the original source.
    """

    rule: str
    class_name: str
    line_number: int


@dataclass
class ScanEntry:
    """What the enabled rules would do to one class declaration.

    Attributes:
        node: The class declaration as parsed.
        updated: The node after all rules ran, or None if unchanged.
        rules: Names of the rules that changed it.
    """

    node: ClassDeclarationNode
    updated: Optional[ClassDeclarationNode] = None
    rules: list[str] = field(default_factory=list)


@dataclass
class FileResult:
    """Outcome of processing one source file.

    Attributes:
        file_path: Path of the processed file.
        original: Source text before rewriting.
        rewritten: Source text after rewriting.
        changes: Rule applications, in source order.
        skipped: Whether the file was left alone because it did not parse.
    """

    file_path: str
    original: str
    rewritten: str
    changes: list[AppliedChange] = field(default_factory=list)
    skipped: bool = False

    @property
    def changed(self) -> bool:
        return self.rewritten != self.original

    def diff(self) -> str:
        """Render the change as a unified diff.

        Returns:
            The diff text, empty when nothing changed.
        """
        return "".join(
            difflib.unified_diff(
                self.original.splitlines(keepends=True),
                self.rewritten.splitlines(keepends=True),
                fromfile=f"a/{self.file_path}",
                tofile=f"b/{self.file_path}",
            )
        )


@dataclass
class _Edit:
    start: int
    end: int
    replacement: bytes


class RuleEngine:
    """Drives rewrite rules over PHP sources.

    The engine owns a class-hierarchy resolver and hands it to the rules
    it builds from config, filling it as modules are parsed.
    """

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        rules: Optional[list[Rule]] = None,
        type_resolver: Optional[ClassHierarchyTypeResolver] = None,
        parser: Optional[PhpParser] = None,
    ) -> None:
        """Initialize the engine.

        Args:
            config: Application config. Uses defaults if not provided.
            rules: Rules to apply. Built from the enabled rules in config
                when not provided.
            type_resolver: Hierarchy resolver to fill while indexing.
            parser: PHP parser. Creates a default instance if not provided.
        """
        self.config = config or AppConfig()
        self.type_resolver = (
            type_resolver if type_resolver is not None else ClassHierarchyTypeResolver()
        )
        self.rules = (
            rules
            if rules is not None
            else build_rules(self.config.rules, self.type_resolver)
        )
        self.parser = parser if parser is not None else PhpParser()

    def index_module(self, module: ModuleInfo) -> None:
        """Record the parent of every named class in the module."""
        self.type_resolver.update(module.hierarchy)

    def scan_module(self, module: ModuleInfo) -> list[ScanEntry]:
        """Run the rules over a module's classes without touching any text.

        Args:
            module: A parsed module. Its classes are indexed first.

        Returns:
            One entry per class declaration, in source order.
        """
        self.index_module(module)
        entries = []
        for node in module.classes:
            current = node
            applied = []
            for rule in self.rules:
                if not rule.accepts(current):
                    continue
                updated = rule.transform(current)
                if updated is not None:
                    current = updated
                    applied.append(rule.name)
            entries.append(
                ScanEntry(
                    node=node,
                    updated=current if applied else None,
                    rules=applied,
                )
            )
        return entries

    def process_source(self, source: str, file_path: str = "<string>") -> FileResult:
        """Apply the rules to a source string.

        Args:
            source: PHP source code.
            file_path: Optional file path for reference.

        Returns:
            A FileResult holding the original and rewritten text.
        """
        module = self.parser.parse_source(source, file_path)
        return self._rewrite(source, module)

    def process_paths(
        self, paths: Iterable[str], dry_run: bool = False
    ) -> list[FileResult]:
        """Apply the rules to every source file under the given paths.

        Args:
            paths: Files or directories to process.
            dry_run: If True, compute the results without writing files.

        Returns:
            One FileResult per readable file.
        """
        parsed: list[tuple[Path, str, ModuleInfo]] = []
        for file_path in self.collect_files(paths):
            try:
                source = file_path.read_bytes().decode("utf-8")
            except (OSError, UnicodeDecodeError) as e:
                logger.warning("Skipping %s: %s", file_path, e)
                continue
            module = self.parser.parse_source(source, str(file_path))
            self.index_module(module)
            parsed.append((file_path, source, module))

        logger.info(
            "Indexed %d files, %d class parents known",
            len(parsed),
            self.type_resolver.parent_count,
        )

        results = []
        for file_path, source, module in parsed:
            result = self._rewrite(source, module)
            if result.changed and not dry_run:
                file_path.write_bytes(result.rewritten.encode("utf-8"))
                logger.info("Updated %s (%d changes)", file_path, len(result.changes))
            results.append(result)
        return results

    def collect_files(self, paths: Iterable[str]) -> list[Path]:
        """Collect all source files from files and directories.

        Args:
            paths: File or directory paths to scan.

        Returns:
            Sorted, de-duplicated list of source file paths.
        """
        extensions = tuple(self.config.parser.extensions)
        exclude = set(self.config.parser.exclude_patterns)
        files: set[Path] = set()
        for path in paths:
            root = Path(path)
            if root.is_file():
                files.add(root)
                continue
            for ext in extensions:
                for f in root.rglob(f"*{ext}"):
                    if f.is_file() and not any(part in exclude for part in f.parts):
                        files.add(f)
        return sorted(files)

    def _rewrite(self, source: str, module: ModuleInfo) -> FileResult:
        """Apply the rules to a parsed module and splice the results in."""
        if module.has_errors:
            logger.warning(
                "Skipping %s: source contains syntax errors", module.file_path
            )
            return FileResult(
                file_path=module.file_path,
                original=source,
                rewritten=source,
                skipped=True,
            )

        source_bytes = source.encode("utf-8")
        newline = "\r\n" if b"\r\n" in source_bytes else "\n"
        edits: list[_Edit] = []
        changes: list[AppliedChange] = []

        for entry in self.scan_module(module):
            if entry.updated is None:
                continue
            for rule_name in entry.rules:
                changes.append(
                    AppliedChange(
                        rule=rule_name,
                        class_name=entry.node.display_name,
                        line_number=entry.node.line_number,
                    )
                )
                logger.debug(
                    "%s: %s changed %s",
                    module.file_path,
                    rule_name,
                    entry.node.display_name,
                )
            edits.append(_doc_edit(entry.node, entry.updated, source_bytes, newline))

        for edit in sorted(edits, key=lambda e: e.start, reverse=True):
            source_bytes = (
                source_bytes[: edit.start] + edit.replacement + source_bytes[edit.end :]
            )

        return FileResult(
            file_path=module.file_path,
            original=source,
            rewritten=source_bytes.decode("utf-8"),
            changes=changes,
        )


def _line_indent(source_bytes: bytes, offset: int) -> str:
    """Return the whitespace between the start of the line and offset.

    Returns an empty string when other code precedes offset on its line.
    """
    line_start = source_bytes.rfind(b"\n", 0, offset) + 1
    prefix = source_bytes[line_start:offset].decode("utf-8")
    return prefix if not prefix.strip() else ""


def _format_block(text: str, indent: str, keep: set[str], newline: str) -> str:
    """Indent the interior lines of a DocBlock for its position in the file.

    Lines in keep are emitted verbatim; they already carry their
    original indentation.
    """
    lines = [line.rstrip("\r") for line in text.split("\n")]
    formatted = [lines[0]]
    for line in lines[1:]:
        formatted.append(line if line in keep else indent + line)
    return newline.join(formatted)


def _doc_edit(
    original: ClassDeclarationNode,
    updated: ClassDeclarationNode,
    source_bytes: bytes,
    newline: str,
) -> _Edit:
    """Build the text edit that swaps in the updated node's DocBlock."""
    doc_text = updated.doc_block.text if updated.doc_block else ""
    old_doc = original.doc_block

    if old_doc is not None and old_doc.start_byte is not None:
        indent = _line_indent(source_bytes, old_doc.start_byte)
        keep = {line.rstrip("\r") for line in old_doc.lines}
        block = _format_block(doc_text, indent, keep, newline)
        end = old_doc.end_byte if old_doc.end_byte is not None else old_doc.start_byte
        return _Edit(old_doc.start_byte, end, block.encode("utf-8"))

    indent = _line_indent(source_bytes, original.start_byte)
    block = _format_block(doc_text, indent, set(), newline) + newline + indent
    return _Edit(original.start_byte, original.start_byte, block.encode("utf-8"))
