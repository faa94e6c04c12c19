"""Configuration for the execution sandbox server."""

from __future__ import annotations

import sys
import tempfile
from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class Config:
    """Server configuration."""

    host: str = "0.0.0.0"
    port: int = 8010
    work_dir: str = field(default_factory=lambda: str(Path(tempfile.gettempdir()) / "codelab-sandbox"))
    libs_dir: str = field(default_factory=lambda: str(Path.cwd() / "libs"))
    python_executable: str = field(default_factory=lambda: sys.executable)
    javac_executable: str = "javac"
    java_executable: str = "java"
