"""Missing/unused import analysis for Java sources."""

from __future__ import annotations

import logging
import re

from codelab.editor.languages import CLASS_TO_IMPORT
from codelab.editor.tokenizer import iter_identifiers
from codelab.editor.types import (
    ImportAnalysis,
    ImportFinding,
    Language,
    UnusedImport,
)

logger = logging.getLogger(__name__)

_IMPORT_RE = re.compile(r"^\s*import\s+(static\s+)?([\w$.]+?)(\.\*)?\s*;")

# Always resolvable without an import.
IGNORED_CLASSES = frozenset({"Main", "System"})


def _is_comment_line(stripped: str) -> bool:
    return stripped.startswith(("//", "/*", "*"))


def _parse_import(line: str) -> tuple[str, bool, bool] | None:
    """Return ``(name, is_static, is_wildcard)`` for an import line."""
    m = _IMPORT_RE.match(line)
    if not m:
        return None
    return m.group(2), bool(m.group(1)), bool(m.group(3))


def _qualified_name(statement: str) -> str:
    parsed = _parse_import(statement)
    return parsed[0] if parsed else ""


def _header_lines(lines: list[str]) -> set[int]:
    """1-based numbers of package and import lines."""
    result: set[int] = set()
    for number, line in enumerate(lines, start=1):
        stripped = line.strip()
        if stripped.startswith("package ") or _parse_import(line):
            result.add(number)
    return result


def _body_identifiers(text: str) -> list[tuple[str, int]]:
    header = _header_lines(text.split("\n"))
    return [(name, line) for name, line in iter_identifiers(text, "java") if line not in header]


def find_missing_imports(text: str) -> list[ImportFinding]:
    """Known library classes used in the body without a covering import.

    An import covers a class when it names it exactly or is a wildcard import
    of its package. One finding per class, in first-seen order.
    """
    imported: set[str] = set()
    wildcard_packages: set[str] = set()
    for line in text.split("\n"):
        parsed = _parse_import(line)
        if parsed is None:
            continue
        name, is_static, is_wildcard = parsed
        if is_static:
            continue
        if is_wildcard:
            wildcard_packages.add(name)
        else:
            imported.add(name)

    findings: dict[str, ImportFinding] = {}
    for name, line in _body_identifiers(text):
        if name in IGNORED_CLASSES:
            continue
        statement = CLASS_TO_IMPORT.get(name)
        if statement is None:
            continue
        qualified = _qualified_name(statement)
        package = qualified.rpartition(".")[0]
        if qualified in imported or package in wildcard_packages:
            continue
        finding = findings.get(name)
        if finding is None:
            finding = findings[name] = ImportFinding(name, statement)
        finding.affected_lines.add(line)
    return list(findings.values())


def find_unused_imports(text: str) -> list[UnusedImport]:
    """Single-type imports whose simple name never appears in the body.

    Wildcard and static imports are never reported.
    """
    used = {name for name, _ in _body_identifiers(text)}
    unused: list[UnusedImport] = []
    for number, line in enumerate(text.split("\n"), start=1):
        parsed = _parse_import(line)
        if parsed is None:
            continue
        name, is_static, is_wildcard = parsed
        if is_static or is_wildcard:
            continue
        simple = name.rpartition(".")[2]
        if simple not in used:
            unused.append(UnusedImport(number, line.strip(), simple))
    return unused


def analyze_imports(text: str, language: Language) -> ImportAnalysis:
    if language != "java":
        return ImportAnalysis()
    return ImportAnalysis(
        missing=find_missing_imports(text),
        unused=find_unused_imports(text),
    )


def has_import(text: str, statement: str) -> bool:
    target = statement.strip()
    return any(line.strip() == target for line in text.split("\n"))


def insert_import(text: str, statement: str) -> tuple[str, int | None]:
    """Insert an import statement after the file's package/import header.

    Returns ``(new_text, insert_offset)``. When the statement is already
    present the text is returned unchanged with an offset of ``None``. With no
    header the statement goes at the top, followed by a blank line.
    """
    statement = statement.strip()
    if has_import(text, statement):
        return text, None

    lines = text.split("\n")
    last_header: int | None = None
    for index, line in enumerate(lines):
        stripped = line.strip()
        if not stripped or _is_comment_line(stripped):
            continue
        if stripped.startswith("package ") or stripped.startswith("import "):
            last_header = index
            continue
        break

    if last_header is None:
        logger.debug("No import header, inserting %r at top", statement)
        return f"{statement}\n\n{text}", 0

    line_end = sum(len(line) + 1 for line in lines[: last_header + 1]) - 1
    if line_end < len(text):
        offset = line_end + 1
        return text[:offset] + statement + "\n" + text[offset:], offset
    return text + "\n" + statement, line_end
