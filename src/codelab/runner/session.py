"""Execution session: one remote program run per document at a time.

States move ``idle -> running -> stopped`` and back to ``running`` on the
next run. Only events tagged with the live session id are accepted, and
only while running, so output from a killed or superseded run never lands
in the console.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Literal

from codelab.editor.keybindings import KeyId, get_editor_keybindings
from codelab.editor.types import Diagnostic, Language
from codelab.runner.channel import ChannelError, ExecutionChannel
from codelab.runner.protocol import (
    CompilationErrorEvent,
    ErrorEvent,
    ExitEvent,
    OutputEvent,
    ServerEvent,
    kill_message,
    run_message,
    stdin_message,
)

logger = logging.getLogger(__name__)

SessionState = Literal["idle", "running", "stopped"]
OutputKind = Literal["stdout", "stderr", "stdin", "info", "error"]

_STREAM_KINDS: dict[str, OutputKind] = {
    "stdout": "stdout",
    "stderr": "stderr",
    "info": "info",
    "success": "info",
    "error": "error",
}


@dataclass
class OutputChunk:
    session_id: str
    kind: OutputKind
    text: str


# --- Session events ---


@dataclass
class OutputAppendedEvent:
    chunk: OutputChunk
    type: Literal["output_appended"] = "output_appended"


@dataclass
class StateChangedEvent:
    state: SessionState
    session_id: str | None = None
    exit_code: int | None = None
    type: Literal["state_changed"] = "state_changed"


@dataclass
class CompileErrorsEvent:
    errors: list[Diagnostic] = field(default_factory=list)
    type: Literal["compile_errors"] = "compile_errors"


SessionEvent = OutputAppendedEvent | StateChangedEvent | CompileErrorsEvent
SessionListener = Callable[[SessionEvent], None]


def new_session_id() -> str:
    return str(uuid.uuid4())


class ExecutionSession:
    """Runs code through an execution channel and collects its output."""

    def __init__(
        self,
        channel: ExecutionChannel,
        language: Language = "java",
        id_factory: Callable[[], str] = new_session_id,
    ) -> None:
        self.language: Language = language
        self.session_id: str | None = None
        self.state: SessionState = "idle"
        self.output: list[OutputChunk] = []
        self.compile_errors: list[Diagnostic] = []
        self.exit_code: int | None = None
        self._channel = channel
        self._id_factory = id_factory
        self._listeners: set[SessionListener] = set()
        self._unsubscribe_channel = channel.subscribe(self.handle_event)
        self.console = ConsoleInput(self)

    @property
    def is_running(self) -> bool:
        return self.state == "running"

    @property
    def output_text(self) -> str:
        return "".join(chunk.text for chunk in self.output)

    def subscribe(self, fn: SessionListener) -> Callable[[], None]:
        """Subscribe to session events. Returns an unsubscribe function."""
        self._listeners.add(fn)

        def unsubscribe() -> None:
            self._listeners.discard(fn)

        return unsubscribe

    def _emit(self, event: SessionEvent) -> None:
        for listener in list(self._listeners):
            listener(event)

    def _set_state(self, state: SessionState) -> None:
        self.state = state
        self._emit(StateChangedEvent(state, self.session_id, self.exit_code))

    def _append(self, kind: OutputKind, text: str) -> None:
        chunk = OutputChunk(self.session_id or "", kind, text)
        self.output.append(chunk)
        self._emit(OutputAppendedEvent(chunk))

    # --- Commands ---

    async def run(self, code: str) -> bool:
        """Start a run of ``code``. Returns False if one is already running."""
        if self.is_running:
            return False

        self.session_id = self._id_factory()
        self.output = []
        self.compile_errors = []
        self.exit_code = None
        self.console.clear()
        self._set_state("running")

        try:
            await self._channel.send(run_message(self.session_id, self.language, code))
        except ChannelError as e:
            logger.warning("Run request for %s failed: %s", self.session_id, e)
            self._append("error", "Error: Not connected to server\n")
            self._set_state("stopped")
            return False

        logger.debug("Started %s run %s", self.language, self.session_id)
        return True

    async def stop(self) -> bool:
        """Kill the live run. Late output for it is discarded from here on."""
        if not self.is_running or self.session_id is None:
            return False
        session_id = self.session_id
        self._set_state("stopped")
        try:
            await self._channel.send(kill_message(session_id))
        except ChannelError as e:
            logger.warning("Kill request for %s failed: %s", session_id, e)
        return True

    async def send_input(self, text: str) -> bool:
        """Forward one stdin line to the live run and echo it."""
        if not self.is_running or self.session_id is None:
            return False
        try:
            await self._channel.send(stdin_message(self.session_id, text))
        except ChannelError as e:
            logger.warning("Stdin for %s failed: %s", self.session_id, e)
            self._append("error", f"Error: {e}\n")
            return False
        self._append("stdin", text + "\n")
        return True

    def reset(self) -> None:
        """Return a finished session to idle, dropping its output."""
        if self.is_running:
            return
        self.output = []
        self.compile_errors = []
        self.exit_code = None
        self.session_id = None
        self._set_state("idle")

    def close(self) -> None:
        self._unsubscribe_channel()

    # --- Server events ---

    def handle_event(self, event: ServerEvent) -> None:
        if isinstance(event, ErrorEvent):
            if self.is_running:
                self._append("error", f"Error: {event.message}\n")
            return

        if event.session_id != self.session_id or not self.is_running:
            logger.debug("Dropping %s event for session %s", event.type, event.session_id)
            return

        match event:
            case OutputEvent():
                self._append(_STREAM_KINDS.get(event.stream, "info"), event.data)
            case CompilationErrorEvent():
                self.compile_errors = list(event.errors)
                self._emit(CompileErrorsEvent(list(event.errors)))
            case ExitEvent():
                self.exit_code = event.code
                self._set_state("stopped")


class ConsoleInput:
    """Line buffer for keyboard input typed into the console while a run is live."""

    def __init__(self, session: ExecutionSession) -> None:
        self._session = session
        self.buffer = ""

    def clear(self) -> None:
        self.buffer = ""

    async def handle_key(self, key: KeyId) -> bool:
        """Feed one key. Returns False when the key was not consumed."""
        if not self._session.is_running:
            return False
        kb = get_editor_keybindings()

        if kb.matches(key, "newLine"):
            line, self.buffer = self.buffer, ""
            if line.strip():
                await self._session.send_input(line)
            return True
        if kb.matches(key, "deleteCharBackward"):
            self.buffer = self.buffer[:-1]
            return True
        if len(key) == 1 and key.isprintable():
            self.buffer += key
            return True
        return False
