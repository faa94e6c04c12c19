"""Per-language tokenizer driving syntax highlighting and line diagnostics.

The scan runs left to right over the whole document so that block comments
and triple-quoted strings carry across lines. Tokens are then cut at line
breaks into StyledSpans; each newline becomes its own ``plain`` span so that
joining every span's text reproduces the document exactly.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator

from codelab.editor.languages import (
    JAVA_CONSTANTS,
    JAVA_KEYWORDS,
    JAVA_TYPES,
    PYTHON_BUILTIN_FUNCTIONS,
    PYTHON_KEYWORDS,
    PYTHON_TYPES,
)
from codelab.editor.types import Diagnostic, Language, Severity, SpanStyle, StyledSpan

_NUMBER_RE = re.compile(
    r"0[xX][0-9a-fA-F_]+[lL]?"
    r"|0[bB][01_]+[lL]?"
    r"|(?:\d[\d_]*(?:\.[\d_]*)?|\.\d[\d_]*)(?:[eE][+-]?\d[\d_]*)?[fFdDlLjJ]?"
)
_JAVA_IDENT_RE = re.compile(r"[A-Za-z_$][\w$]*")
_PYTHON_IDENT_RE = re.compile(r"[A-Za-z_]\w*")
_PYTHON_STRING_PREFIX_RE = re.compile(r"(?:[rRbBuUfF]{1,2})(?=['\"])")
_JAVA_ANNOTATION_RE = re.compile(r"@[A-Za-z_$][\w$]*(?:\.[A-Za-z_$][\w$]*)*")
_PYTHON_DECORATOR_RE = re.compile(r"@[A-Za-z_]\w*(?:\.[A-Za-z_]\w*)*")

# (start, end, style, is_identifier)
_Token = tuple[int, int, SpanStyle, bool]


# ---------------------------------------------------------------------------
# Scanning
# ---------------------------------------------------------------------------


def _scan_quoted(text: str, pos: int, quote: str) -> int:
    """Return the end offset of a single-line string starting at ``pos``.

    Backslash escapes are honoured. An unterminated literal stops at the end
    of its line.
    """
    i = pos + 1
    n = len(text)
    while i < n:
        ch = text[i]
        if ch == "\\" and i + 1 < n and text[i + 1] != "\n":
            i += 2
            continue
        if ch == "\n":
            return i
        if ch == quote:
            return i + 1
        i += 1
    return n


def _scan_triple_quoted(text: str, pos: int, quote: str) -> int:
    delimiter = quote * 3
    i = pos + 3
    n = len(text)
    while i < n:
        if text[i] == "\\":
            i += 2
            continue
        if text.startswith(delimiter, i):
            return i + 3
        i += 1
    return n


def _classify_java(word: str) -> SpanStyle:
    if word in JAVA_KEYWORDS or word in JAVA_CONSTANTS:
        return "keyword"
    if word in JAVA_TYPES or word[0].isupper():
        return "type"
    return "plain"


def _classify_python(word: str) -> SpanStyle:
    if word in PYTHON_KEYWORDS:
        return "keyword"
    if word in PYTHON_TYPES:
        return "type"
    if word in PYTHON_BUILTIN_FUNCTIONS:
        return "builtin"
    return "plain"


def _scan_java(text: str) -> Iterator[_Token]:
    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        if ch == "\n":
            yield i, i + 1, "plain", False
            i += 1
        elif ch in " \t\r":
            j = i + 1
            while j < n and text[j] in " \t\r":
                j += 1
            yield i, j, "plain", False
            i = j
        elif text.startswith("//", i):
            j = text.find("\n", i)
            j = n if j == -1 else j
            yield i, j, "comment", False
            i = j
        elif text.startswith("/*", i):
            j = text.find("*/", i + 2)
            j = n if j == -1 else j + 2
            yield i, j, "comment", False
            i = j
        elif ch in "\"'":
            j = _scan_quoted(text, i, ch)
            yield i, j, "string", False
            i = j
        elif ch == "@" and (m := _JAVA_ANNOTATION_RE.match(text, i)):
            yield i, m.end(), "annotation", False
            i = m.end()
        elif ch.isdigit() or (ch == "." and i + 1 < n and text[i + 1].isdigit()):
            m = _NUMBER_RE.match(text, i)
            j = m.end() if m else i + 1
            yield i, j, "number", False
            i = j
        elif m := _JAVA_IDENT_RE.match(text, i):
            word = m.group()
            style = _classify_java(word)
            yield i, m.end(), style, style != "keyword"
            i = m.end()
        else:
            yield i, i + 1, "plain", False
            i += 1


def _scan_python(text: str) -> Iterator[_Token]:
    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        if ch == "\n":
            yield i, i + 1, "plain", False
            i += 1
        elif ch in " \t\r":
            j = i + 1
            while j < n and text[j] in " \t\r":
                j += 1
            yield i, j, "plain", False
            i = j
        elif ch == "#":
            j = text.find("\n", i)
            j = n if j == -1 else j
            yield i, j, "comment", False
            i = j
        elif ch in "\"'" or (m := _PYTHON_STRING_PREFIX_RE.match(text, i)):
            quote_pos = i if ch in "\"'" else m.end()
            quote = text[quote_pos]
            if text.startswith(quote * 3, quote_pos):
                j = _scan_triple_quoted(text, quote_pos, quote)
            else:
                j = _scan_quoted(text, quote_pos, quote)
            yield i, j, "string", False
            i = j
        elif ch == "@" and (m := _PYTHON_DECORATOR_RE.match(text, i)):
            yield i, m.end(), "annotation", False
            i = m.end()
        elif ch.isdigit() or (ch == "." and i + 1 < n and text[i + 1].isdigit()):
            m = _NUMBER_RE.match(text, i)
            j = m.end() if m else i + 1
            yield i, j, "number", False
            i = j
        elif m := _PYTHON_IDENT_RE.match(text, i):
            word = m.group()
            style = _classify_python(word)
            yield i, m.end(), style, style != "keyword"
            i = m.end()
        else:
            yield i, i + 1, "plain", False
            i += 1


def _scan(text: str, language: Language) -> Iterator[_Token]:
    if language == "java":
        return _scan_java(text)
    return _scan_python(text)


# ---------------------------------------------------------------------------
# Diagnostics
# ---------------------------------------------------------------------------


def merge_diagnostics(
    errors: Iterable[Diagnostic], warnings: Iterable[Diagnostic]
) -> list[Diagnostic]:
    """Collapse diagnostics to one per line, errors taking precedence."""
    by_line: dict[int, Diagnostic] = {}
    for diag in warnings:
        by_line.setdefault(diag.line, diag)
    for diag in errors:
        existing = by_line.get(diag.line)
        if existing is None or existing.severity != "error":
            by_line[diag.line] = diag
    return [by_line[line] for line in sorted(by_line)]


def _line_severities(diagnostics: Iterable[Diagnostic]) -> dict[int, Severity]:
    severities: dict[int, Severity] = {}
    for diag in diagnostics:
        if severities.get(diag.line) != "error":
            severities[diag.line] = diag.severity
    return severities


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def tokenize(
    text: str,
    language: Language,
    diagnostics: Iterable[Diagnostic] | None = None,
) -> list[StyledSpan]:
    """Split ``text`` into styled spans, one line at a time.

    A line with an ``error`` diagnostic has all of its spans restyled as
    ``error``; otherwise a ``warning`` diagnostic restyles them as
    ``warning``. Newline spans always stay ``plain``.
    """
    severities = _line_severities(diagnostics or ())
    spans: list[StyledSpan] = []
    line = 1

    for start, end, style, _ in _scan(text, language):
        pos = start
        while pos < end:
            if text[pos] == "\n":
                spans.append(StyledSpan("\n", "plain", pos, pos + 1, line))
                line += 1
                pos += 1
                continue
            stop = text.find("\n", pos, end)
            stop = end if stop == -1 else stop
            span_style: SpanStyle = severities.get(line, style)
            spans.append(StyledSpan(text[pos:stop], span_style, pos, stop, line))
            pos = stop

    return spans


def iter_identifiers(text: str, language: Language) -> Iterator[tuple[str, int]]:
    """Yield ``(name, line)`` for every code identifier.

    Keywords and anything inside strings or comments are skipped. Annotation
    names are reported without their ``@``.
    """
    line = 1
    last = 0
    for start, end, style, is_identifier in _scan(text, language):
        if not is_identifier and style != "annotation":
            continue
        line += text.count("\n", last, start)
        last = start
        if is_identifier:
            yield text[start:end], line
        else:
            for part in text[start + 1 : end].split("."):
                yield part, line
