"""Turn compiler and interpreter stderr into line diagnostics."""

from __future__ import annotations

import re

from codelab.editor.types import Diagnostic

_JAVA_ERROR_RE = re.compile(r"(\w+\.java):(\d+):\s*(error|warning):\s*(.+)")
_JAVA_FILE_RE = re.compile(r"\w+\.java:")
_PYTHON_FRAME_RE = re.compile(r'File "(.+)", line (\d+)')
_LINE_RE = re.compile(r"line (\d+)")

# Lines following a reported error that may hold its source context.
CONTEXT_LINES = 3


def parse_java_errors(stderr: str) -> list[Diagnostic]:
    """Parse ``javac`` output of the form ``Main.java:14: error: message``.

    Up to three following lines (skipping ``symbol:``/``location:`` notes and
    other file references) are joined into the diagnostic's context.
    """
    errors: list[Diagnostic] = []
    lines = stderr.split("\n")

    for i, line in enumerate(lines):
        m = _JAVA_ERROR_RE.search(line)
        if not m:
            continue
        _, line_number, severity, message = m.groups()

        context: list[str] = []
        for following in lines[i + 1 : i + 1 + CONTEXT_LINES]:
            stripped = following.strip()
            if (
                stripped
                and not _JAVA_FILE_RE.search(stripped)
                and not stripped.startswith(("symbol:", "location:"))
            ):
                context.append(stripped)

        errors.append(
            Diagnostic(
                line=int(line_number),
                severity="warning" if severity == "warning" else "error",
                message=message.strip(),
                context=" ".join(context),
            )
        )
    return errors


def parse_python_errors(stderr: str) -> list[Diagnostic]:
    """Parse a Python traceback into one diagnostic per ``File ..., line N`` frame.

    The message is the first following ``...Error:``/``...Exception:`` line,
    else the line right after the frame. With no frames, a ``SyntaxError``
    falls back to the first ``line N`` mention.
    """
    errors: list[Diagnostic] = []
    lines = stderr.split("\n")

    for i, line in enumerate(lines):
        m = _PYTHON_FRAME_RE.search(line)
        if not m:
            continue

        message = ""
        context = ""
        for following in lines[i + 1 : i + 1 + CONTEXT_LINES]:
            stripped = following.strip()
            if not stripped or _PYTHON_FRAME_RE.search(stripped):
                continue
            if "Error:" in stripped or "Exception:" in stripped:
                message = stripped
                break
            if not context:
                context = stripped

        if not message and i + 1 < len(lines):
            message = lines[i + 1].strip()

        errors.append(Diagnostic(int(m.group(2)), "error", message or "Python Error", context))

    if not errors and "SyntaxError" in stderr:
        m = _LINE_RE.search(stderr)
        if m:
            caret_line = next((text for text in lines if "^" in text), "")
            errors.append(Diagnostic(int(m.group(1)), "error", "SyntaxError", caret_line))

    return errors
