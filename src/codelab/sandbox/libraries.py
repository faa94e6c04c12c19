"""Bundled Java libraries available on the sandbox classpath."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from codelab.runner.libraries import LibraryInfo

logger = logging.getLogger(__name__)


def parse_jar_name(filename: str) -> LibraryInfo:
    """Split ``name-version.jar`` on its last dash."""
    stem = filename.removesuffix(".jar")
    name, sep, version = stem.rpartition("-")
    if not sep:
        return LibraryInfo(filename=filename, name=stem)
    return LibraryInfo(filename=filename, name=name, version=version)


def list_jars(libs_dir: str | Path) -> list[Path]:
    path = Path(libs_dir)
    if not path.is_dir():
        return []
    return sorted(p for p in path.iterdir() if p.suffix == ".jar")


def list_libraries(libs_dir: str | Path) -> list[LibraryInfo]:
    libraries = [parse_jar_name(p.name) for p in list_jars(libs_dir)]
    logger.debug("Found %d libraries in %s", len(libraries), libs_dir)
    return libraries


def build_classpath(libs_dir: str | Path) -> str:
    """``.`` followed by every bundled jar, joined with the platform separator."""
    return os.pathsep.join([".", *(str(p.resolve()) for p in list_jars(libs_dir))])
