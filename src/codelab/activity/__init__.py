"""codelab activity: timed coding challenges, hints and the compiler workspace."""

from codelab.activity.api import ActivityBackend, ActivityClient, ApiError, ApiResult
from codelab.activity.config import ActivityConfig
from codelab.activity.hints import HintChannel, HintUpdateEvent
from codelab.activity.timed import (
    Phase,
    PhaseChangedEvent,
    SubmissionEvent,
    SubmissionRecord,
    TickEvent,
    TimedActivitySession,
)
from codelab.activity.workspace import CompilerWorkspace

__all__ = [
    "ActivityBackend",
    "ActivityClient",
    "ActivityConfig",
    "ApiError",
    "ApiResult",
    "CompilerWorkspace",
    "HintChannel",
    "HintUpdateEvent",
    "Phase",
    "PhaseChangedEvent",
    "SubmissionEvent",
    "SubmissionRecord",
    "TickEvent",
    "TimedActivitySession",
]
