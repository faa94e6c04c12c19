"""Tests for codelab.activity.timed."""

import asyncio

import pytest

from codelab.activity.hints import HintChannel
from codelab.activity.timed import PhaseChangedEvent, TickEvent, TimedActivitySession
from codelab.editor.surface import EditingSurface


@pytest.fixture
def surface():
    return EditingSurface("public class Main {}", "java")


@pytest.fixture
async def make_session(backend, surface):
    sessions = []

    def _make(**kwargs):
        session = TimedActivitySession("act-1", backend, surface, **kwargs)
        sessions.append(session)
        return session

    yield _make
    for session in sessions:
        await session.close()


def phases(events):
    return [e.phase for e in events if isinstance(e, PhaseChangedEvent)]


# ---------------------------------------------------------------------------
# Manual submission
# ---------------------------------------------------------------------------


class TestSubmit:
    async def test_requires_confirmation(self, make_session, backend):
        session = make_session()
        session.start()
        assert await session.submit() is None
        assert backend.submits == []

    async def test_success_latches_submitted(self, make_session, backend, surface):
        session = make_session()
        session.start()
        record = await session.submit(confirmed=True)
        assert record.ok and not record.automatic
        assert record.code == surface.text
        assert session.submitted
        assert session.phase == "submitted"
        assert backend.submits == [("act-1", "public class Main {}")]

    async def test_second_submit_is_refused(self, make_session, backend):
        session = make_session()
        session.start()
        await session.submit(confirmed=True)
        assert await session.submit(confirmed=True) is None
        assert len(backend.submits) == 1

    async def test_failure_can_be_retried(self, make_session, backend):
        session = make_session()
        session.start()
        backend.fail_submit = True
        record = await session.submit(confirmed=True)
        assert not record.ok
        assert record.error == "Submission failed"
        assert session.last_error == "Submission failed"
        assert session.phase == "running"
        assert not session.submitted

        backend.fail_submit = False
        assert (await session.submit(confirmed=True)).ok
        assert session.last_error is None
        assert len(session.successful_submissions) == 1

    async def test_concurrent_submit_is_refused(self, make_session, backend, wait_until):
        session = make_session()
        session.start()
        backend.gate = asyncio.Event()
        first = asyncio.create_task(session.submit(confirmed=True))
        await wait_until(lambda: session.submission_in_flight)
        assert await session.submit(confirmed=True) is None
        backend.gate.set()
        assert (await first).ok
        assert len(backend.submits) == 1
        assert not session.submission_in_flight


# ---------------------------------------------------------------------------
# Countdown
# ---------------------------------------------------------------------------


class TestCountdown:
    async def test_no_countdown_without_duration(self, make_session):
        session = make_session()
        session.start()
        assert session.phase == "running"
        assert not session.countdown_active

    async def test_expiry_submits_exactly_once(self, make_session, backend, wait_until):
        session = make_session(total_seconds=2, tick_interval=0.01)
        events = []
        session.subscribe(events.append)
        session.start()
        await wait_until(lambda: session.phase == "auto_submitted")

        assert [e.remaining_seconds for e in events if isinstance(e, TickEvent)] == [1, 0]
        assert phases(events) == ["running", "expired", "auto_submitted"]
        assert len(backend.submits) == 1
        assert session.submissions[0].automatic
        assert session.submitted
        assert await session.submit(confirmed=True) is None
        assert len(backend.submits) == 1

    async def test_manual_ticks(self, make_session, backend):
        session = make_session(total_seconds=2, tick_interval=3600)
        session.start()
        assert session.countdown_active
        await session.tick()
        assert session.remaining_seconds == 1
        await session.tick()
        assert session.phase == "auto_submitted"
        await session.tick()
        assert session.remaining_seconds == 0
        assert len(backend.submits) == 1

    async def test_failed_auto_submit_is_not_retried(self, make_session, backend):
        backend.fail_submit = True
        session = make_session(total_seconds=1, tick_interval=3600)
        session.start()
        await session.tick()
        assert session.phase == "auto_submitted"
        assert not session.submitted
        assert session.last_error == "Submission failed"
        assert len(backend.submits) == 1

    async def test_expiry_waits_for_manual_submission_in_flight(self, make_session, backend, wait_until):
        session = make_session(total_seconds=1, tick_interval=3600)
        events = []
        session.subscribe(events.append)
        session.start()
        backend.gate = asyncio.Event()
        manual = asyncio.create_task(session.submit(confirmed=True))
        await wait_until(lambda: len(backend.submits) == 1)

        expiry = asyncio.create_task(session.tick())
        await wait_until(lambda: session.remaining_seconds == 0)
        assert await session.submit(confirmed=True) is None
        backend.gate.set()
        assert (await manual).ok
        await expiry

        assert len(backend.submits) == 1
        assert len(session.successful_submissions) == 1
        assert not session.submissions[0].automatic
        assert session.phase == "submitted"
        assert phases(events) == ["running", "submitted"]

    async def test_expiry_auto_submits_after_failed_manual_submission(self, make_session, backend, wait_until):
        session = make_session(total_seconds=1, tick_interval=3600)
        session.start()
        backend.fail_submit = True
        backend.gate = asyncio.Event()
        manual = asyncio.create_task(session.submit(confirmed=True))
        await wait_until(lambda: len(backend.submits) == 1)

        expiry = asyncio.create_task(session.tick())
        await wait_until(lambda: session.remaining_seconds == 0)
        backend.gate.set()
        assert not (await manual).ok
        await expiry

        assert len(backend.submits) == 2
        assert [r.automatic for r in session.submissions] == [False, True]
        assert session.phase == "auto_submitted"

    async def test_submit_stops_countdown(self, make_session, backend, wait_until):
        session = make_session(total_seconds=60, tick_interval=3600)
        session.start()
        await session.submit(confirmed=True)
        await wait_until(lambda: not session.countdown_active)
        await session.tick()
        assert session.remaining_seconds == 60

    async def test_ticks_before_start_do_nothing(self, make_session):
        session = make_session(total_seconds=5)
        await session.tick()
        assert session.phase == "not_started"

    async def test_start_is_idempotent(self, make_session):
        session = make_session(total_seconds=5, tick_interval=3600)
        events = []
        session.subscribe(events.append)
        session.start()
        session.start()
        assert phases(events) == ["running"]


# ---------------------------------------------------------------------------
# Unsaved changes / save
# ---------------------------------------------------------------------------


class TestUnsavedChanges:
    async def test_edit_marks_unsaved(self, make_session, surface):
        session = make_session()
        assert not session.request_leave()
        surface.type_char("x")
        assert session.has_unsaved_changes
        assert session.request_leave()

    async def test_caret_moves_do_not_mark_unsaved(self, make_session, surface):
        session = make_session()
        surface.set_caret(5)
        assert not session.has_unsaved_changes

    async def test_save_clears_flag(self, make_session, backend, surface):
        session = make_session(project_title="Calculator")
        surface.type_char("x")
        assert await session.save()
        assert backend.saves == [("Calculator", surface.text)]
        assert not session.request_leave()

    async def test_save_failure_keeps_flag(self, make_session, backend, surface):
        session = make_session()
        surface.type_char("x")
        backend.fail_save = True
        assert not await session.save()
        assert session.has_unsaved_changes
        assert session.last_error == "Network error: offline"

    async def test_successful_submit_clears_flag(self, make_session, surface):
        session = make_session()
        session.start()
        surface.type_char("x")
        await session.submit(confirmed=True)
        assert not session.request_leave()


# ---------------------------------------------------------------------------
# Hints and close
# ---------------------------------------------------------------------------


class TestLifecycle:
    async def test_start_and_close_drive_hints(self, make_session, backend, surface):
        hints = HintChannel(backend, surface, interval=3600)
        session = make_session(total_seconds=10, tick_interval=3600, hints=hints)
        session.start()
        assert hints.running
        await session.close()
        assert not hints.running
        assert not session.countdown_active

    async def test_close_detaches_from_surface(self, make_session, surface):
        session = make_session()
        await session.close()
        surface.type_char("x")
        assert not session.has_unsaved_changes
