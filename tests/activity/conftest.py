import asyncio

import pytest

from codelab.activity.api import ApiError, ApiResult


class FakeBackend:
    """In-memory ActivityBackend recording every call.

    Set ``gate`` to an unset asyncio.Event to hold calls in flight until the
    test releases them.
    """

    def __init__(self) -> None:
        self.submits: list[tuple[str, str]] = []
        self.saves: list[tuple[str, str]] = []
        self.analyze_calls: list[tuple[str, str, object, str]] = []
        self.fail_submit = False
        self.fail_save = False
        self.fail_analyze = False
        self.analyze_error: Exception | None = None
        self.hint = "Try a loop."
        self.gate: asyncio.Event | None = None

    async def _wait_gate(self) -> None:
        if self.gate is not None:
            await self.gate.wait()

    async def submit_activity(self, activity_id: str, code: str) -> ApiResult:
        self.submits.append((activity_id, code))
        await self._wait_gate()
        if self.fail_submit:
            raise ApiError("Submission failed", 500)
        return ApiResult(success=True, message="Submitted")

    async def save_progress(self, project_title: str, code: str) -> ApiResult:
        self.saves.append((project_title, code))
        await self._wait_gate()
        if self.fail_save:
            raise ApiError("Network error: offline")
        return ApiResult(success=True, message="Saved")

    async def analyze_code(self, code, project_title, requirements, language) -> str:
        self.analyze_calls.append((code, project_title, requirements, language))
        await self._wait_gate()
        if self.analyze_error is not None:
            raise self.analyze_error
        if self.fail_analyze:
            raise ApiError("Hint service unavailable", 503)
        return self.hint


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()
