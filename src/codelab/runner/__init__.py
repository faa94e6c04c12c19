"""codelab runner: execution protocol client and sessions."""

from codelab.runner.channel import ChannelError, ExecutionChannel, WebSocketChannel
from codelab.runner.libraries import LibraryInfo
from codelab.runner.session import (
    CompileErrorsEvent,
    ConsoleInput,
    ExecutionSession,
    OutputAppendedEvent,
    OutputChunk,
    SessionEvent,
    StateChangedEvent,
)

__all__ = [
    "ChannelError",
    "CompileErrorsEvent",
    "ConsoleInput",
    "ExecutionChannel",
    "ExecutionSession",
    "LibraryInfo",
    "OutputAppendedEvent",
    "OutputChunk",
    "SessionEvent",
    "StateChangedEvent",
    "WebSocketChannel",
]
