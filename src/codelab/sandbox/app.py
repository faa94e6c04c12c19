"""FastAPI application factory."""

from __future__ import annotations

import logging
import shutil
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from fastapi import FastAPI, WebSocket

from codelab.sandbox.config import Config
from codelab.sandbox.handler import websocket_handler
from codelab.sandbox.libraries import list_libraries

logger = logging.getLogger(__name__)


def create_app(config: Config | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    config = config or Config()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> Any:
        work_dir = Path(config.work_dir)
        work_dir.mkdir(parents=True, exist_ok=True)
        logger.info("Sandbox work dir %s, libraries from %s", work_dir, config.libs_dir)
        if shutil.which(config.javac_executable) is None:
            logger.warning("%s not found; Java runs will fail", config.javac_executable)
        yield
        logger.info("Sandbox shutting down")

    app = FastAPI(title="codelab-sandbox", lifespan=lifespan)

    # --- WebSocket endpoint ---

    @app.websocket("/ws")
    async def ws_endpoint(websocket: WebSocket) -> None:
        await websocket_handler(websocket, config)

    # --- REST API endpoints ---

    @app.get("/api/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/api/libraries")
    async def libraries() -> dict[str, Any]:
        libs = list_libraries(config.libs_dir)
        return {
            "success": True,
            "libraries": [lib.model_dump() for lib in libs],
            "count": len(libs),
        }

    return app
