"""Core types shared by the editor analyzers and the editing surface."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

Language = Literal["java", "python"]

SUPPORTED_LANGUAGES: tuple[Language, ...] = ("java", "python")

SpanStyle = Literal[
    "plain",
    "keyword",
    "string",
    "comment",
    "type",
    "number",
    "builtin",
    "annotation",
    "error",
    "warning",
]

Severity = Literal["error", "warning"]

SuggestionKind = Literal["import", "keyword", "method"]


@dataclass
class SourceDocument:
    """The editor buffer: text, language, caret and selection."""

    text: str = ""
    language: Language = "java"
    caret_offset: int = 0
    selection: tuple[int, int] = (0, 0)

    @property
    def has_selection(self) -> bool:
        return self.selection[0] != self.selection[1]

    @property
    def lines(self) -> list[str]:
        return self.text.split("\n")


@dataclass
class StyledSpan:
    """A contiguous styled run of source text. Never crosses a newline."""

    text: str
    style: SpanStyle
    start: int
    end: int
    line: int  # 1-based


@dataclass
class Diagnostic:
    """A line-addressed error or warning annotation."""

    line: int  # 1-based
    severity: Severity
    message: str
    context: str = ""


@dataclass
class ImportFinding:
    """A known library class used without a matching import."""

    class_name: str
    import_statement: str
    affected_lines: set[int] = field(default_factory=set)


@dataclass
class UnusedImport:
    line: int
    statement: str
    class_name: str


@dataclass
class ImportAnalysis:
    missing: list[ImportFinding] = field(default_factory=list)
    unused: list[UnusedImport] = field(default_factory=list)

    @property
    def warning_lines(self) -> set[int]:
        """Lines that carry an import warning (missing usages and unused imports)."""
        lines: set[int] = set()
        for finding in self.missing:
            lines |= finding.affected_lines
        lines |= {u.line for u in self.unused}
        return lines

    @property
    def missing_classes(self) -> list[str]:
        return [f.class_name for f in self.missing]


@dataclass
class SuggestionItem:
    """A single completion candidate."""

    text: str
    label: str
    kind: SuggestionKind
    description: str | None = None


@dataclass
class BracketPair:
    open_offset: int
    close_offset: int
    open_char: str
    close_char: str

    def is_valid(self, text: str) -> bool:
        """Check the recorded characters are still at both offsets."""
        return (
            0 <= self.open_offset < len(text)
            and 0 <= self.close_offset < len(text)
            and text[self.open_offset] == self.open_char
            and text[self.close_offset] == self.close_char
        )


# ---------------------------------------------------------------------------
# Offset helpers
# ---------------------------------------------------------------------------


def offset_to_position(text: str, offset: int) -> tuple[int, int]:
    """Convert a character offset into a 0-based ``(line, column)``."""
    offset = max(0, min(offset, len(text)))
    line = text.count("\n", 0, offset)
    line_start = text.rfind("\n", 0, offset) + 1
    return line, offset - line_start


def position_to_offset(text: str, line: int, column: int) -> int:
    """Convert a 0-based ``(line, column)`` into an offset, clamping both."""
    lines = text.split("\n")
    line = max(0, min(line, len(lines) - 1))
    offset = sum(len(lines[i]) + 1 for i in range(line))
    return offset + max(0, min(column, len(lines[line])))


def line_bounds(text: str, offset: int) -> tuple[int, int]:
    """Return ``(start, end)`` offsets of the line holding ``offset`` (end excludes the newline)."""
    start = text.rfind("\n", 0, offset) + 1
    end = text.find("\n", offset)
    if end == -1:
        end = len(text)
    return start, end
