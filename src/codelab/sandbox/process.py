"""Compile and run submitted programs, streaming their output.

One ProcessManager serves one WebSocket connection. Each run works in its
own temporary directory, which is removed when the run ends.
"""

from __future__ import annotations

import asyncio
import codecs
import logging
import os
import re
import shutil
import signal
import tempfile
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from codelab.editor.types import Diagnostic
from codelab.runner.protocol import (
    compilation_error_message,
    error_message,
    exit_message,
    output_message,
)
from codelab.sandbox.config import Config
from codelab.sandbox.diagnostics import parse_java_errors, parse_python_errors
from codelab.sandbox.libraries import build_classpath

logger = logging.getLogger(__name__)

SendFn = Callable[[dict[str, Any]], Awaitable[None]]

_PUBLIC_CLASS_RE = re.compile(r"public\s+class\s+(\w+)")

READ_CHUNK = 4096


@dataclass
class ActiveRun:
    session_id: str
    work_dir: Path
    proc: asyncio.subprocess.Process | None = None
    task: asyncio.Task[None] | None = None
    killed: bool = False
    stderr: list[str] = field(default_factory=list)

    @property
    def alive(self) -> bool:
        return self.proc is not None and self.proc.returncode is None


def _kill_process_tree(pid: int | None) -> None:
    if pid is None:
        return
    try:
        os.killpg(pid, signal.SIGKILL)
    except (ProcessLookupError, PermissionError):
        try:
            os.kill(pid, signal.SIGKILL)
        except (ProcessLookupError, PermissionError):
            pass


class ProcessManager:
    """Tracks the runs started over a single connection."""

    def __init__(self, config: Config, send: SendFn) -> None:
        self._config = config
        self._send = send
        self._runs: dict[str, ActiveRun] = {}

    @property
    def active_sessions(self) -> list[str]:
        return list(self._runs)

    # --- Commands ---

    async def start(self, session_id: str, language: str, code: str) -> None:
        """Begin a run in the background, replacing any run for the same id."""
        await self._discard(session_id)

        root = Path(self._config.work_dir)
        root.mkdir(parents=True, exist_ok=True)
        work_dir = Path(tempfile.mkdtemp(prefix=f"session_{session_id[:8]}_", dir=root))
        run = ActiveRun(session_id, work_dir)
        self._runs[session_id] = run
        run.task = asyncio.create_task(self._execute(run, language, code))

    async def write_stdin(self, session_id: str, text: str) -> bool:
        run = self._runs.get(session_id)
        if run is None or not run.alive or run.killed:
            return False
        assert run.proc is not None and run.proc.stdin is not None
        try:
            run.proc.stdin.write((text + "\n").encode("utf-8"))
            await run.proc.stdin.drain()
        except (BrokenPipeError, ConnectionResetError):
            logger.debug("stdin closed for session %s", session_id)
            return False
        return True

    async def kill(self, session_id: str) -> bool:
        """Terminate a run at the user's request."""
        run = self._runs.get(session_id)
        if run is None or run.killed:
            return False
        run.killed = True
        if run.alive:
            assert run.proc is not None
            _kill_process_tree(run.proc.pid)
        await self._send(output_message(session_id, "info", "\n\nProcess terminated by user\n"))
        await self._send(exit_message(session_id, None))
        logger.info("Session %s terminated by user", session_id)
        return True

    async def shutdown(self) -> None:
        """Kill every run and wait for their cleanup."""
        for session_id in list(self._runs):
            await self._discard(session_id)

    async def _discard(self, session_id: str) -> None:
        run = self._runs.get(session_id)
        if run is None:
            return
        run.killed = True
        if run.alive:
            assert run.proc is not None
            _kill_process_tree(run.proc.pid)
        if run.task is not None and not run.task.done():
            run.task.cancel()
            try:
                await run.task
            except asyncio.CancelledError:
                pass

    # --- Execution ---

    async def _execute(self, run: ActiveRun, language: str, code: str) -> None:
        try:
            match language:
                case "java":
                    await self._run_java(run, code)
                case "python":
                    await self._run_python(run, code)
                case _:
                    await self._send(error_message(f"Unsupported language: {language}"))
                    await self._send(exit_message(run.session_id, None))
        except OSError as e:
            logger.warning("Execution failed for session %s: %s", run.session_id, e)
            await self._send(output_message(run.session_id, "error", f"Execution Error: {e}"))
            await self._send(exit_message(run.session_id, None))
        finally:
            if run.alive:
                assert run.proc is not None
                _kill_process_tree(run.proc.pid)
            shutil.rmtree(run.work_dir, ignore_errors=True)
            if self._runs.get(run.session_id) is run:
                del self._runs[run.session_id]

    async def _run_java(self, run: ActiveRun, code: str) -> None:
        sid = run.session_id
        m = _PUBLIC_CLASS_RE.search(code)
        if not m:
            await self._send(
                compilation_error_message(sid, [Diagnostic(1, "error", "No public class found")])
            )
            await self._send(output_message(sid, "error", "Invalid Java code: No public class found"))
            await self._send(exit_message(sid, None))
            return

        class_name = m.group(1)
        (run.work_dir / f"{class_name}.java").write_text(code, encoding="utf-8")
        classpath = build_classpath(self._config.libs_dir)

        await self._send(output_message(sid, "info", "Compiling...\n"))
        compile_code = await self._spawn(
            run,
            [self._config.javac_executable, "-cp", classpath, f"{class_name}.java"],
            stream=False,
        )
        if run.killed:
            return
        if compile_code != 0:
            stderr = "".join(run.stderr)
            errors = parse_java_errors(stderr)
            if errors:
                await self._send(compilation_error_message(sid, errors))
            await self._send(output_message(sid, "error", f"Compilation Error:\n{stderr}"))
            await self._send(exit_message(sid, compile_code))
            return

        await self._send(compilation_error_message(sid, []))
        await self._send(output_message(sid, "info", "Compilation successful. Running...\n\n"))
        run.stderr.clear()
        exit_code = await self._spawn(
            run, [self._config.java_executable, "-cp", classpath, class_name]
        )
        await self._finish(run, exit_code)

    async def _run_python(self, run: ActiveRun, code: str) -> None:
        sid = run.session_id
        (run.work_dir / "main.py").write_text(code, encoding="utf-8")

        await self._send(output_message(sid, "info", "Running Python...\n"))
        exit_code = await self._spawn(run, [self._config.python_executable, "-u", "main.py"])
        if run.killed:
            return

        stderr = "".join(run.stderr)
        if exit_code != 0 and stderr:
            errors = parse_python_errors(stderr)
            if errors:
                await self._send(compilation_error_message(sid, errors))
        else:
            await self._send(compilation_error_message(sid, []))
        await self._finish(run, exit_code)

    async def _finish(self, run: ActiveRun, exit_code: int) -> None:
        if run.killed:
            return
        await self._send(
            output_message(run.session_id, "info", f"\n\nProcess exited with code {exit_code}\n")
        )
        await self._send(exit_message(run.session_id, exit_code))
        logger.info("Session %s exited with code %d", run.session_id, exit_code)

    async def _spawn(self, run: ActiveRun, argv: list[str], *, stream: bool = True) -> int:
        """Run ``argv`` in the run's directory. stderr is always collected;
        with ``stream`` both pipes are also forwarded as output events."""
        proc = await asyncio.create_subprocess_exec(
            *argv,
            cwd=run.work_dir,
            stdin=asyncio.subprocess.PIPE,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            start_new_session=True,
        )
        run.proc = proc
        if run.killed:
            _kill_process_tree(proc.pid)

        async def pump(reader: asyncio.StreamReader | None, name: str) -> None:
            if reader is None:
                return
            decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
            while True:
                chunk = await reader.read(READ_CHUNK)
                text = decoder.decode(chunk, final=not chunk)
                if text:
                    if name == "stderr":
                        run.stderr.append(text)
                    if stream and not run.killed:
                        await self._send(output_message(run.session_id, name, text))
                if not chunk:
                    break

        await asyncio.gather(pump(proc.stdout, "stdout"), pump(proc.stderr, "stderr"))
        return await proc.wait()
