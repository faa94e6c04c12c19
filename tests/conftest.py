import asyncio
from collections.abc import Callable
from typing import Any

import pytest

from codelab.editor.keybindings import EditorKeybindingsManager, set_editor_keybindings
from codelab.runner.channel import ChannelError


class FakeChannel:
    """In-memory execution channel: records sent messages, lets tests push events."""

    def __init__(self, *, fail: bool = False) -> None:
        self.sent: list[dict[str, Any]] = []
        self.fail = fail
        self._listeners: set[Callable[[Any], None]] = set()

    async def send(self, message: dict[str, Any]) -> None:
        if self.fail:
            raise ChannelError("Not connected to server")
        self.sent.append(message)

    def subscribe(self, fn: Callable[[Any], None]) -> Callable[[], None]:
        self._listeners.add(fn)
        return lambda: self._listeners.discard(fn)

    def push(self, event: Any) -> None:
        for fn in list(self._listeners):
            fn(event)

    def sent_of_type(self, msg_type: str) -> list[dict[str, Any]]:
        return [m for m in self.sent if m["type"] == msg_type]


@pytest.fixture
def channel() -> FakeChannel:
    return FakeChannel()


@pytest.fixture
def failing_channel() -> FakeChannel:
    return FakeChannel(fail=True)


@pytest.fixture(autouse=True)
def default_keybindings():
    """Every test starts from the default global keybindings."""
    set_editor_keybindings(EditorKeybindingsManager())
    yield
    set_editor_keybindings(EditorKeybindingsManager())


@pytest.fixture
def wait_until():
    """Poll ``predicate`` until it is truthy or ``timeout`` seconds pass."""

    async def _wait(predicate: Callable[[], Any], timeout: float = 10.0) -> None:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while not predicate():
            if loop.time() > deadline:
                raise AssertionError("condition not met before timeout")
            await asyncio.sleep(0.01)

    return _wait
