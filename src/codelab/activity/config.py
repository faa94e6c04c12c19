"""Configuration for activity sessions."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

DEFAULT_API_URL = "http://localhost:5000/api"
DEFAULT_SANDBOX_URL = "ws://localhost:8010/ws"


@dataclass
class ActivityConfig:
    """Where the collaborator API and execution sandbox live, plus timing knobs."""

    api_url: str = DEFAULT_API_URL
    token: str | None = None
    sandbox_url: str = DEFAULT_SANDBOX_URL
    request_timeout: float = 30.0
    hint_interval: float = 30.0  # seconds between hint requests
    reveal_interval: float = 0.03  # seconds per revealed character

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ActivityConfig:
        """Build a config from ``CODELAB_*`` environment variables."""
        env = os.environ if environ is None else environ
        return cls(
            api_url=env.get("CODELAB_API_URL") or DEFAULT_API_URL,
            token=env.get("CODELAB_TOKEN") or None,
            sandbox_url=env.get("CODELAB_SANDBOX_URL") or DEFAULT_SANDBOX_URL,
        )
