"""WebSocket channel to the execution sandbox."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Callable
from typing import Any, Protocol

import aiohttp

from codelab.runner.protocol import ServerEvent, parse_server_event

logger = logging.getLogger(__name__)

EventListener = Callable[[ServerEvent], None]


class ChannelError(Exception):
    """Raised when a message cannot be delivered to the sandbox."""


class ExecutionChannel(Protocol):
    """What an execution session needs from its transport."""

    async def send(self, message: dict[str, Any]) -> None: ...

    def subscribe(self, fn: EventListener) -> Callable[[], None]: ...


class WebSocketChannel:
    """JSON-over-WebSocket channel backed by an aiohttp client session.

    A background reader task parses each text frame into a server event and
    hands it to every subscriber.
    """

    def __init__(self, session: aiohttp.ClientSession | None = None) -> None:
        self._session = session
        self._owns_session = session is None
        self._ws: aiohttp.ClientWebSocketResponse | None = None
        self._reader: asyncio.Task[None] | None = None
        self._listeners: set[EventListener] = set()

    @property
    def connected(self) -> bool:
        return self._ws is not None and not self._ws.closed

    def subscribe(self, fn: EventListener) -> Callable[[], None]:
        """Subscribe to server events. Returns an unsubscribe function."""
        self._listeners.add(fn)

        def unsubscribe() -> None:
            self._listeners.discard(fn)

        return unsubscribe

    def _emit(self, event: ServerEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Channel listener failed for %s event", event.type)

    async def connect(self, url: str) -> None:
        if self.connected:
            return
        if self._session is None:
            self._session = aiohttp.ClientSession()
        try:
            self._ws = await self._session.ws_connect(url, heartbeat=30)
        except (aiohttp.ClientError, OSError) as e:
            raise ChannelError(f"Could not connect to {url}: {e}") from e
        logger.info("Connected to execution sandbox at %s", url)
        self._reader = asyncio.create_task(self._read_loop())

    async def _read_loop(self) -> None:
        assert self._ws is not None
        async for msg in self._ws:
            if msg.type == aiohttp.WSMsgType.TEXT:
                try:
                    data = json.loads(msg.data)
                except json.JSONDecodeError:
                    logger.warning("Dropping malformed frame: %.80s", msg.data)
                    continue
                event = parse_server_event(data) if isinstance(data, dict) else None
                if event is None:
                    logger.debug("Ignoring unknown message: %s", data)
                    continue
                self._emit(event)
            elif msg.type == aiohttp.WSMsgType.ERROR:
                logger.warning("WebSocket error: %s", self._ws.exception())
                break
        logger.info("Execution channel closed")

    async def send(self, message: dict[str, Any]) -> None:
        if not self.connected:
            raise ChannelError("Not connected to server")
        assert self._ws is not None
        try:
            await self._ws.send_json(message)
        except (aiohttp.ClientError, ConnectionError, RuntimeError) as e:
            raise ChannelError(f"Send failed: {e}") from e

    async def close(self) -> None:
        if self._ws is not None:
            await self._ws.close()
            self._ws = None
        if self._reader is not None:
            self._reader.cancel()
            try:
                await self._reader
            except asyncio.CancelledError:
                pass
            self._reader = None
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None
