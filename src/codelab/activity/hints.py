"""Periodic natural-language hints, revealed one character at a time."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Literal

from codelab.activity.api import ActivityBackend, ApiError
from codelab.activity.config import ActivityConfig
from codelab.editor.surface import EditingSurface
from codelab.runner.session import ExecutionSession

logger = logging.getLogger(__name__)


@dataclass
class HintUpdateEvent:
    revealed_text: str
    complete: bool
    type: Literal["hint_update"] = "hint_update"


HintListener = Callable[[HintUpdateEvent], None]


class HintChannel:
    """Asks the backend for a hint every ``interval`` seconds.

    A request is skipped while another is in flight, while a reveal is still
    animating, or while the execution session is running. A new reveal
    replaces the one in progress.
    """

    def __init__(
        self,
        backend: ActivityBackend,
        surface: EditingSurface,
        *,
        project_title: str = "",
        requirements: str | list[str] = "",
        execution: ExecutionSession | None = None,
        interval: float = 30.0,
        reveal_interval: float = 0.03,
    ) -> None:
        self._backend = backend
        self._surface = surface
        self._execution = execution
        self.project_title = project_title
        self.requirements = requirements
        self.interval = interval
        self.reveal_interval = reveal_interval

        self.hint_text = ""
        self.revealed_text = ""
        self.last_error: str | None = None
        self._in_flight = False
        self._loop_task: asyncio.Task[None] | None = None
        self._reveal_task: asyncio.Task[None] | None = None
        self._listeners: set[HintListener] = set()

    @classmethod
    def from_config(
        cls,
        config: ActivityConfig,
        backend: ActivityBackend,
        surface: EditingSurface,
        **kwargs: Any,
    ) -> HintChannel:
        return cls(
            backend,
            surface,
            interval=config.hint_interval,
            reveal_interval=config.reveal_interval,
            **kwargs,
        )

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    @property
    def revealing(self) -> bool:
        return self._reveal_task is not None and not self._reveal_task.done()

    @property
    def running(self) -> bool:
        return self._loop_task is not None and not self._loop_task.done()

    def subscribe(self, fn: HintListener) -> Callable[[], None]:
        """Subscribe to reveal updates. Returns an unsubscribe function."""
        self._listeners.add(fn)

        def unsubscribe() -> None:
            self._listeners.discard(fn)

        return unsubscribe

    def _emit(self, event: HintUpdateEvent) -> None:
        for listener in list(self._listeners):
            listener(event)

    # --- Loop ---

    def start(self) -> None:
        """Start the periodic loop. At most one loop runs at a time."""
        if self.running:
            return
        self._loop_task = asyncio.create_task(self._loop())

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                await self.request_hint()
            except Exception as e:
                logger.exception("Hint request raised")
                self.last_error = f"Hint request failed: {e}"

    async def request_hint(self) -> bool:
        """Fetch and reveal one hint. Returns False when skipped or failed."""
        if self._in_flight or self.revealing:
            return False
        if self._execution is not None and self._execution.is_running:
            return False

        self._in_flight = True
        try:
            hint = await self._backend.analyze_code(
                self._surface.text,
                self.project_title,
                self.requirements,
                self._surface.language,
            )
        except ApiError as e:
            logger.info("Hint request failed: %s", e.message)
            self.last_error = e.message
            return False
        finally:
            self._in_flight = False

        self.last_error = None
        if hint:
            self.reveal(hint)
        return True

    # --- Reveal ---

    def reveal(self, text: str) -> None:
        """Start revealing ``text``, cancelling any reveal in progress."""
        if self._reveal_task is not None and not self._reveal_task.done():
            self._reveal_task.cancel()
        self.hint_text = text
        self.revealed_text = ""
        self._reveal_task = asyncio.create_task(self._animate(text))

    async def _animate(self, text: str) -> None:
        for i in range(1, len(text) + 1):
            self.revealed_text = text[:i]
            self._emit(HintUpdateEvent(self.revealed_text, i == len(text)))
            if i < len(text):
                await asyncio.sleep(self.reveal_interval)

    async def wait_revealed(self) -> None:
        """Wait for the current reveal to finish (or be replaced)."""
        task = self._reveal_task
        if task is None:
            return
        try:
            await task
        except asyncio.CancelledError:
            if not task.cancelled():
                raise

    async def stop(self) -> None:
        """Cancel the loop and any reveal in progress."""
        for task in (self._loop_task, self._reveal_task):
            if task is not None and not task.done():
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
        self._loop_task = None
        self._reveal_task = None
