"""Execution channel message protocol definitions.

Messages travel as JSON objects with camelCase keys. The dataclasses are the
parsed forms; the ``*_message`` functions build wire dicts.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from codelab.editor.types import Diagnostic


# --- Client -> Server messages ---


@dataclass
class RunMessage:
    type: str = "run"
    session_id: str = ""
    language: str = ""
    code: str = ""


@dataclass
class StdinMessage:
    type: str = "stdin"
    session_id: str = ""
    input: str = ""


@dataclass
class KillMessage:
    type: str = "kill"
    session_id: str = ""


def _session_id(data: dict[str, Any]) -> str:
    return data.get("sessionId", data.get("session_id", ""))


def parse_client_message(data: dict[str, Any]) -> Any:
    """Parse a raw dict into a typed client message."""
    msg_type = data.get("type", "")
    match msg_type:
        case "run":
            return RunMessage(
                session_id=_session_id(data),
                language=data.get("language", ""),
                code=data.get("code", ""),
            )
        case "stdin":
            return StdinMessage(session_id=_session_id(data), input=data.get("input", ""))
        case "kill":
            return KillMessage(session_id=_session_id(data))
        case _:
            return None


def run_message(session_id: str, language: str, code: str) -> dict[str, Any]:
    return {"type": "run", "sessionId": session_id, "language": language, "code": code}


def stdin_message(session_id: str, text: str) -> dict[str, Any]:
    return {"type": "stdin", "sessionId": session_id, "input": text}


def kill_message(session_id: str) -> dict[str, Any]:
    return {"type": "kill", "sessionId": session_id}


# --- Server -> Client events ---


@dataclass
class OutputEvent:
    type: str = "output"
    session_id: str = ""
    stream: str = "stdout"
    data: str = ""


@dataclass
class CompilationErrorEvent:
    type: str = "compilation_error"
    session_id: str = ""
    errors: list[Diagnostic] = field(default_factory=list)


@dataclass
class ExitEvent:
    type: str = "exit"
    session_id: str = ""
    code: int | None = None


@dataclass
class ErrorEvent:
    type: str = "error"
    message: str = ""


ServerEvent = OutputEvent | CompilationErrorEvent | ExitEvent | ErrorEvent


def _parse_diagnostic(raw: dict[str, Any]) -> Diagnostic:
    severity = raw.get("severity", "error")
    return Diagnostic(
        line=int(raw.get("line", 1)),
        severity="warning" if severity == "warning" else "error",
        message=str(raw.get("message", "")),
        context=str(raw.get("context", "")),
    )


def parse_server_event(data: dict[str, Any]) -> ServerEvent | None:
    """Parse a raw dict into a typed server event."""
    msg_type = data.get("type", "")
    match msg_type:
        case "output":
            return OutputEvent(
                session_id=_session_id(data),
                stream=data.get("stream", "stdout"),
                data=data.get("data", ""),
            )
        case "compilation_error":
            return CompilationErrorEvent(
                session_id=_session_id(data),
                errors=[_parse_diagnostic(e) for e in data.get("errors", [])],
            )
        case "exit":
            return ExitEvent(session_id=_session_id(data), code=data.get("code"))
        case "error":
            return ErrorEvent(message=data.get("message", ""))
        case _:
            return None


def diagnostic_to_dict(diag: Diagnostic) -> dict[str, Any]:
    return {
        "line": diag.line,
        "severity": diag.severity,
        "message": diag.message,
        "context": diag.context,
    }


def output_message(session_id: str, stream: str, data: str) -> dict[str, Any]:
    return {"type": "output", "sessionId": session_id, "stream": stream, "data": data}


def compilation_error_message(session_id: str, errors: list[Diagnostic]) -> dict[str, Any]:
    return {
        "type": "compilation_error",
        "sessionId": session_id,
        "errors": [diagnostic_to_dict(e) for e in errors],
    }


def exit_message(session_id: str, code: int | None) -> dict[str, Any]:
    return {"type": "exit", "sessionId": session_id, "code": code}


def error_message(message: str) -> dict[str, Any]:
    return {"type": "error", "message": message}
