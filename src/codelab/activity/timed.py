"""Timed activity session: countdown, unsaved-change tracking and exactly-once submission.

Phases::

    not_started -> running -> submitted
                           -> expired -> auto_submitted

``submitted`` is a one-way latch, set only by a successful submission. When
the countdown reaches zero one automatic submission is attempted; whether or
not it succeeds the session moves on to ``auto_submitted`` and is never
retried. A manual submission still in flight at expiry is awaited first, and
the automatic one is only made if it failed.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Literal

from codelab.activity.api import ActivityBackend, ApiError
from codelab.activity.hints import HintChannel
from codelab.editor.surface import EditingSurface, SurfaceEvent, TextChangedEvent

logger = logging.getLogger(__name__)

Phase = Literal["not_started", "running", "submitted", "expired", "auto_submitted"]

_CLOSED_PHASES: frozenset[Phase] = frozenset({"submitted", "expired", "auto_submitted"})


@dataclass
class SubmissionRecord:
    """One submission attempt."""

    activity_id: str
    code: str
    automatic: bool
    ok: bool
    error: str | None = None
    submitted_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


# --- Events ---


@dataclass
class TickEvent:
    remaining_seconds: int
    type: Literal["tick"] = "tick"


@dataclass
class PhaseChangedEvent:
    phase: Phase
    type: Literal["phase_changed"] = "phase_changed"


@dataclass
class SubmissionEvent:
    record: SubmissionRecord
    type: Literal["submission"] = "submission"


TimedEvent = TickEvent | PhaseChangedEvent | SubmissionEvent
TimedListener = Callable[[TimedEvent], None]


class TimedActivitySession:
    """Wraps an editing surface with a countdown and submission rules."""

    def __init__(
        self,
        activity_id: str,
        backend: ActivityBackend,
        surface: EditingSurface,
        *,
        total_seconds: int = 0,
        project_title: str = "",
        hints: HintChannel | None = None,
        tick_interval: float = 1.0,
    ) -> None:
        self.activity_id = activity_id
        self.total_seconds = total_seconds
        self.remaining_seconds = 0
        self.project_title = project_title
        self.tick_interval = tick_interval
        self.has_unsaved_changes = False
        self.submitted = False
        self.phase: Phase = "not_started"
        self.submissions: list[SubmissionRecord] = []
        self.last_error: str | None = None

        self._backend = backend
        self._surface = surface
        self._hints = hints
        self._pending: asyncio.Task[SubmissionRecord] | None = None
        self._expiring = False
        self._countdown: asyncio.Task[None] | None = None
        self._listeners: set[TimedListener] = set()
        self._unsubscribe_surface = surface.subscribe(self._on_surface_event)

    # --- Listeners ---

    def subscribe(self, fn: TimedListener) -> Callable[[], None]:
        """Subscribe to session events. Returns an unsubscribe function."""
        self._listeners.add(fn)

        def unsubscribe() -> None:
            self._listeners.discard(fn)

        return unsubscribe

    def _emit(self, event: TimedEvent) -> None:
        for listener in list(self._listeners):
            listener(event)

    def _set_phase(self, phase: Phase) -> None:
        self.phase = phase
        logger.info("Activity %s: %s", self.activity_id, phase)
        self._emit(PhaseChangedEvent(phase))

    def _on_surface_event(self, event: SurfaceEvent) -> None:
        if isinstance(event, TextChangedEvent):
            self.has_unsaved_changes = True

    # --- State ---

    @property
    def countdown_active(self) -> bool:
        return self._countdown is not None and not self._countdown.done()

    @property
    def submission_in_flight(self) -> bool:
        return self._pending is not None and not self._pending.done()

    @property
    def successful_submissions(self) -> list[SubmissionRecord]:
        return [r for r in self.submissions if r.ok]

    # --- Lifecycle ---

    def start(self) -> None:
        """Enter ``running``; starts the countdown when a duration is set."""
        if self.phase != "not_started":
            return
        self._set_phase("running")
        if self.total_seconds > 0:
            self.remaining_seconds = self.total_seconds
            self._countdown = asyncio.create_task(self._run_countdown())
        if self._hints is not None:
            self._hints.start()

    async def _run_countdown(self) -> None:
        while self.phase == "running" and self.remaining_seconds > 0:
            await asyncio.sleep(self.tick_interval)
            await self.tick()

    def _stop_countdown(self) -> None:
        task = self._countdown
        if task is not None and task is not asyncio.current_task() and not task.done():
            task.cancel()

    async def tick(self) -> None:
        """Advance the clock by one second."""
        if self.phase != "running" or self.remaining_seconds <= 0:
            return
        self.remaining_seconds -= 1
        self._emit(TickEvent(self.remaining_seconds))
        if self.remaining_seconds == 0:
            await self._expire()

    async def _expire(self) -> None:
        self._expiring = True
        pending = self._pending
        if pending is not None and not pending.done():
            # A manual submission that lands first is the only submission.
            await asyncio.shield(pending)
        if self.submitted:
            self._latch_submitted()
            return
        self._stop_countdown()
        self._set_phase("expired")
        self._pending = asyncio.create_task(self._submit(automatic=True))
        await self._pending
        self._set_phase("auto_submitted")

    # --- Submission ---

    async def submit(self, *, confirmed: bool = False) -> SubmissionRecord | None:
        """Submit the current code.

        Returns None without contacting the backend when not confirmed,
        already submitted, another submission is in flight, or time is up.
        """
        if not confirmed or self.submitted or self.submission_in_flight:
            return None
        if self._expiring or self.phase in _CLOSED_PHASES:
            return None

        self._pending = asyncio.create_task(self._submit(automatic=False))
        record = await asyncio.shield(self._pending)
        if record.ok:
            self._latch_submitted()
        return record

    def _latch_submitted(self) -> None:
        if self.phase in _CLOSED_PHASES:
            return
        self._set_phase("submitted")
        self._stop_countdown()

    async def _submit(self, *, automatic: bool) -> SubmissionRecord:
        code = self._surface.text
        try:
            await self._backend.submit_activity(self.activity_id, code)
        except ApiError as e:
            logger.warning("Submission of %s failed: %s", self.activity_id, e.message)
            self.last_error = e.message
            record = SubmissionRecord(self.activity_id, code, automatic, ok=False, error=e.message)
        else:
            self.submitted = True
            self.has_unsaved_changes = False
            self.last_error = None
            record = SubmissionRecord(self.activity_id, code, automatic, ok=True)

        self.submissions.append(record)
        self._emit(SubmissionEvent(record))
        return record

    async def save(self) -> bool:
        """Save progress; clears the unsaved flag on success."""
        try:
            await self._backend.save_progress(self.project_title, self._surface.text)
        except ApiError as e:
            logger.warning("Saving %s failed: %s", self.activity_id, e.message)
            self.last_error = e.message
            return False
        self.has_unsaved_changes = False
        self.last_error = None
        return True

    def request_leave(self) -> bool:
        """True when leaving should first be confirmed by the user."""
        return self.has_unsaved_changes

    async def close(self) -> None:
        """Cancel the countdown and the hint loop."""
        self._stop_countdown()
        if self._countdown is not None:
            try:
                await self._countdown
            except asyncio.CancelledError:
                pass
            self._countdown = None
        if self._hints is not None:
            await self._hints.stop()
        self._unsubscribe_surface()
