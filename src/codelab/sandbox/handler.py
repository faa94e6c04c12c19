"""WebSocket endpoint handler."""

from __future__ import annotations

import json
import logging
from typing import Any

from starlette.websockets import WebSocket, WebSocketDisconnect

from codelab.runner.protocol import (
    KillMessage,
    RunMessage,
    StdinMessage,
    error_message,
    parse_client_message,
)
from codelab.sandbox.config import Config
from codelab.sandbox.process import ProcessManager

logger = logging.getLogger(__name__)


async def websocket_handler(websocket: WebSocket, config: Config) -> None:
    """Main WebSocket handler - one per client connection."""
    await websocket.accept()

    async def send_json(data: dict[str, Any]) -> None:
        try:
            await websocket.send_json(data)
        except (WebSocketDisconnect, RuntimeError):
            logger.debug("Dropping %s message for closed socket", data.get("type"))

    manager = ProcessManager(config, send_json)

    try:
        while True:
            raw = await websocket.receive_text()
            try:
                data = json.loads(raw)
            except json.JSONDecodeError:
                await send_json(error_message("Invalid JSON"))
                continue

            msg = parse_client_message(data) if isinstance(data, dict) else None
            if msg is None:
                kind = data.get("type") if isinstance(data, dict) else None
                await send_json(error_message(f"Unknown message type: {kind}"))
                continue

            match msg:
                case RunMessage():
                    if not msg.session_id:
                        await send_json(error_message("Missing sessionId"))
                        continue
                    logger.info("Run %s (%s)", msg.session_id, msg.language)
                    await manager.start(msg.session_id, msg.language, msg.code)

                case StdinMessage():
                    await manager.write_stdin(msg.session_id, msg.input)

                case KillMessage():
                    await manager.kill(msg.session_id)

    except WebSocketDisconnect:
        logger.info("WebSocket disconnected")
    except Exception:
        logger.exception("WebSocket error")
    finally:
        await manager.shutdown()
