"""Tests for codelab.sandbox.diagnostics."""

from codelab.editor.types import Diagnostic
from codelab.sandbox.diagnostics import parse_java_errors, parse_python_errors

# ---------------------------------------------------------------------------
# javac
# ---------------------------------------------------------------------------


class TestJavaErrors:
    def test_error_with_context(self):
        stderr = "Main.java:5: error: ';' expected\n        int x = 1\n                 ^\n1 error\n"
        assert parse_java_errors(stderr) == [Diagnostic(5, "error", "';' expected", "int x = 1 ^ 1 error")]

    def test_symbol_and_location_notes_are_skipped(self):
        stderr = (
            "Main.java:3: error: cannot find symbol\n"
            "        Scanner s;\n"
            "        ^\n"
            "  symbol:   class Scanner\n"
            "  location: class Main\n"
        )
        (error,) = parse_java_errors(stderr)
        assert error.line == 3
        assert error.message == "cannot find symbol"
        assert error.context == "Scanner s; ^"

    def test_following_error_is_not_context(self):
        stderr = "Main.java:2: error: first\nMain.java:4: error: second\n"
        errors = parse_java_errors(stderr)
        assert [(e.line, e.message, e.context) for e in errors] == [(2, "first", ""), (4, "second", "")]

    def test_warning(self):
        (diag,) = parse_java_errors("Main.java:7: warning: [removal] Integer(int) is deprecated\n")
        assert diag.severity == "warning"

    def test_no_errors(self):
        assert parse_java_errors("") == []
        assert parse_java_errors("Note: Main.java uses unchecked operations.") == []


# ---------------------------------------------------------------------------
# Python
# ---------------------------------------------------------------------------


class TestPythonErrors:
    def test_traceback(self):
        stderr = (
            "Traceback (most recent call last):\n"
            '  File "/tmp/run/main.py", line 3, in <module>\n'
            "    print(1 / 0)\n"
            "          ~~^~~\n"
            "ZeroDivisionError: division by zero\n"
        )
        assert parse_python_errors(stderr) == [
            Diagnostic(3, "error", "ZeroDivisionError: division by zero", "print(1 / 0)")
        ]

    def test_one_diagnostic_per_frame(self):
        stderr = (
            "Traceback (most recent call last):\n"
            '  File "main.py", line 5, in <module>\n'
            "    f()\n"
            '  File "main.py", line 2, in f\n'
            "    raise ValueError('bad')\n"
            "ValueError: bad\n"
        )
        errors = parse_python_errors(stderr)
        assert [e.line for e in errors] == [5, 2]
        assert errors[1].message == "ValueError: bad"

    def test_syntax_error_frame(self):
        stderr = '  File "main.py", line 1\n    def f(\n         ^\nSyntaxError: \'(\' was never closed\n'
        (error,) = parse_python_errors(stderr)
        assert error.line == 1
        assert error.message == "SyntaxError: '(' was never closed"
        assert error.context == "def f("

    def test_frame_without_error_line_uses_next_line(self):
        (error,) = parse_python_errors('File "main.py", line 2\n    foo\n')
        assert error.message == "foo"

    def test_syntax_error_without_frame(self):
        stderr = "SyntaxError: invalid syntax (line 4)\n    x = = 1\n        ^\n"
        (error,) = parse_python_errors(stderr)
        assert error.line == 4
        assert error.message == "SyntaxError"
        assert error.context.strip() == "^"

    def test_plain_output_has_no_errors(self):
        assert parse_python_errors("Killed\n") == []
