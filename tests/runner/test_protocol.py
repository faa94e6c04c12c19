"""Tests for codelab.runner.protocol."""

from codelab.editor.types import Diagnostic
from codelab.runner.protocol import (
    CompilationErrorEvent,
    ErrorEvent,
    ExitEvent,
    KillMessage,
    OutputEvent,
    RunMessage,
    StdinMessage,
    compilation_error_message,
    error_message,
    exit_message,
    kill_message,
    output_message,
    parse_client_message,
    parse_server_event,
    run_message,
    stdin_message,
)

# ---------------------------------------------------------------------------
# Client messages
# ---------------------------------------------------------------------------


class TestClientMessages:
    def test_builders_use_camel_case(self):
        assert run_message("s1", "java", "code") == {
            "type": "run",
            "sessionId": "s1",
            "language": "java",
            "code": "code",
        }
        assert stdin_message("s1", "42") == {"type": "stdin", "sessionId": "s1", "input": "42"}
        assert kill_message("s1") == {"type": "kill", "sessionId": "s1"}

    def test_parse_run(self):
        msg = parse_client_message(run_message("s1", "python", "print(1)"))
        assert msg == RunMessage(session_id="s1", language="python", code="print(1)")

    def test_parse_accepts_snake_case_id(self):
        assert parse_client_message({"type": "kill", "session_id": "s2"}) == KillMessage(session_id="s2")

    def test_parse_stdin(self):
        assert parse_client_message(stdin_message("s1", "x")) == StdinMessage(session_id="s1", input="x")

    def test_parse_unknown(self):
        assert parse_client_message({"type": "launch"}) is None
        assert parse_client_message({}) is None


# ---------------------------------------------------------------------------
# Server events
# ---------------------------------------------------------------------------


class TestServerEvents:
    def test_output(self):
        event = parse_server_event(output_message("s1", "stderr", "boom"))
        assert event == OutputEvent(session_id="s1", stream="stderr", data="boom")

    def test_compilation_error(self):
        errors = [Diagnostic(3, "error", "';' expected", "int x = 1")]
        event = parse_server_event(compilation_error_message("s1", errors))
        assert isinstance(event, CompilationErrorEvent)
        assert event.errors == errors

    def test_compilation_error_defaults(self):
        event = parse_server_event(
            {"type": "compilation_error", "sessionId": "s1", "errors": [{"line": "4", "severity": "fatal"}]}
        )
        assert event.errors == [Diagnostic(4, "error", "", "")]

    def test_exit_with_and_without_code(self):
        assert parse_server_event(exit_message("s1", 2)) == ExitEvent(session_id="s1", code=2)
        assert parse_server_event(exit_message("s1", None)).code is None

    def test_error(self):
        assert parse_server_event(error_message("Invalid JSON")) == ErrorEvent(message="Invalid JSON")

    def test_unknown(self):
        assert parse_server_event({"type": "heartbeat"}) is None
