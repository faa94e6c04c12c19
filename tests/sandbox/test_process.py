"""Tests for codelab.sandbox.process: real subprocesses in a temp work dir."""

from __future__ import annotations

import asyncio
import shutil
import sys
from typing import Any

import pytest

from codelab.sandbox.config import Config
from codelab.sandbox.process import ProcessManager

requires_javac = pytest.mark.skipif(shutil.which("javac") is None, reason="javac not installed")


class Recorder:
    """Collects everything the manager sends to the client."""

    def __init__(self) -> None:
        self.messages: list[dict[str, Any]] = []

    async def __call__(self, message: dict[str, Any]) -> None:
        self.messages.append(message)

    def of_type(self, msg_type: str) -> list[dict[str, Any]]:
        return [m for m in self.messages if m["type"] == msg_type]

    def text(self, stream: str) -> str:
        return "".join(m["data"] for m in self.of_type("output") if m["stream"] == stream)

    @property
    def exited(self) -> bool:
        return bool(self.of_type("exit"))


@pytest.fixture
def config(tmp_path):
    return Config(
        work_dir=str(tmp_path / "work"),
        libs_dir=str(tmp_path / "libs"),
        python_executable=sys.executable,
    )


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
async def manager(config, recorder):
    mgr = ProcessManager(config, recorder)
    yield mgr
    await mgr.shutdown()


async def feed_stdin(manager: ProcessManager, session_id: str, text: str) -> None:
    async def attempt() -> None:
        while not await manager.write_stdin(session_id, text):
            await asyncio.sleep(0.01)

    await asyncio.wait_for(attempt(), timeout=10)


# ---------------------------------------------------------------------------
# Python
# ---------------------------------------------------------------------------


class TestPythonRuns:
    async def test_hello(self, manager, recorder, config, wait_until):
        await manager.start("s1", "python", "print('hello')")
        await wait_until(lambda: recorder.exited)

        assert recorder.text("stdout") == "hello\n"
        assert recorder.messages[0] == {
            "type": "output",
            "sessionId": "s1",
            "stream": "info",
            "data": "Running Python...\n",
        }
        assert recorder.of_type("compilation_error") == [
            {"type": "compilation_error", "sessionId": "s1", "errors": []}
        ]
        assert "Process exited with code 0" in recorder.text("info")
        assert recorder.messages[-1] == {"type": "exit", "sessionId": "s1", "code": 0}

    async def test_work_dir_is_removed(self, manager, recorder, config, wait_until, tmp_path):
        await manager.start("s1", "python", "print(1)")
        await wait_until(lambda: not manager.active_sessions)
        assert list((tmp_path / "work").iterdir()) == []

    async def test_runtime_error_reports_diagnostics(self, manager, recorder, wait_until):
        await manager.start("s1", "python", "x = 1\nraise ValueError('bad')")
        await wait_until(lambda: recorder.exited)

        (report,) = recorder.of_type("compilation_error")
        assert report["errors"][0]["line"] == 2
        assert report["errors"][0]["message"] == "ValueError: bad"
        assert "ValueError: bad" in recorder.text("stderr")
        assert recorder.of_type("exit")[0]["code"] == 1

    async def test_stdin(self, manager, recorder, wait_until):
        await manager.start("s1", "python", "name = input()\nprint('hi ' + name)")
        await feed_stdin(manager, "s1", "Ada")
        await wait_until(lambda: recorder.exited)
        assert recorder.text("stdout") == "hi Ada\n"

    async def test_stdin_for_unknown_session(self, manager):
        assert not await manager.write_stdin("nope", "x")

    async def test_missing_interpreter(self, config, recorder, wait_until):
        config.python_executable = "/nonexistent/python3"
        manager = ProcessManager(config, recorder)
        await manager.start("s1", "python", "print(1)")
        await wait_until(lambda: recorder.exited)
        assert recorder.text("error").startswith("Execution Error:")
        assert recorder.of_type("exit")[0]["code"] is None


# ---------------------------------------------------------------------------
# Kill / restart / shutdown
# ---------------------------------------------------------------------------

LONG_RUNNING = "print('ready', flush=True)\nimport time\ntime.sleep(30)"


class TestLifecycle:
    async def test_kill(self, manager, recorder, wait_until):
        await manager.start("s1", "python", LONG_RUNNING)
        await wait_until(lambda: "ready" in recorder.text("stdout"))

        assert await manager.kill("s1")
        await wait_until(lambda: not manager.active_sessions)

        assert recorder.of_type("exit") == [{"type": "exit", "sessionId": "s1", "code": None}]
        assert "Process terminated by user" in recorder.text("info")
        assert "Process exited with code" not in recorder.text("info")

    async def test_kill_twice_or_unknown(self, manager, recorder, wait_until):
        assert not await manager.kill("nope")
        await manager.start("s1", "python", LONG_RUNNING)
        await wait_until(lambda: "ready" in recorder.text("stdout"))
        assert await manager.kill("s1")
        assert not await manager.kill("s1")

    async def test_restart_replaces_previous_run(self, manager, recorder, wait_until):
        await manager.start("s1", "python", LONG_RUNNING)
        await wait_until(lambda: "ready" in recorder.text("stdout"))
        await manager.start("s1", "python", "print('second')")
        await wait_until(lambda: recorder.exited)
        assert recorder.of_type("exit") == [{"type": "exit", "sessionId": "s1", "code": 0}]
        assert "second\n" in recorder.text("stdout")

    async def test_shutdown_stops_everything(self, manager, recorder, wait_until):
        await manager.start("a", "python", LONG_RUNNING)
        await manager.start("b", "python", LONG_RUNNING)
        await wait_until(lambda: recorder.text("stdout").count("ready") == 2)
        await manager.shutdown()
        assert manager.active_sessions == []

    async def test_unsupported_language(self, manager, recorder, wait_until):
        await manager.start("s1", "ruby", "puts 1")
        await wait_until(lambda: recorder.exited)
        assert recorder.messages == [
            {"type": "error", "message": "Unsupported language: ruby"},
            {"type": "exit", "sessionId": "s1", "code": None},
        ]


# ---------------------------------------------------------------------------
# Java
# ---------------------------------------------------------------------------


class TestJavaRuns:
    async def test_no_public_class(self, manager, recorder, wait_until):
        await manager.start("s1", "java", "class Foo {}")
        await wait_until(lambda: recorder.exited)
        assert recorder.of_type("compilation_error")[0]["errors"] == [
            {"line": 1, "severity": "error", "message": "No public class found", "context": ""}
        ]
        assert recorder.text("error") == "Invalid Java code: No public class found"
        assert recorder.of_type("exit")[0]["code"] is None

    @requires_javac
    async def test_compile_and_run(self, manager, recorder, wait_until):
        code = 'public class Hello { public static void main(String[] a) { System.out.println("hi"); } }'
        await manager.start("s1", "java", code)
        await wait_until(lambda: recorder.exited, timeout=60)
        assert recorder.text("stdout") == "hi\n"
        assert "Compilation successful" in recorder.text("info")
        assert recorder.of_type("exit")[0]["code"] == 0

    @requires_javac
    async def test_compile_error(self, manager, recorder, wait_until):
        code = "public class Main {\n    int x = \n}"
        await manager.start("s1", "java", code)
        await wait_until(lambda: recorder.exited, timeout=60)
        (report,) = recorder.of_type("compilation_error")
        assert report["errors"]
        assert recorder.text("error").startswith("Compilation Error:\n")
        assert recorder.of_type("exit")[0]["code"] != 0
