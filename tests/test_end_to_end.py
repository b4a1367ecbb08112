"""Headless end-to-end runs: real shell, real pty, the whole pipeline."""

from __future__ import annotations

import asyncio
import shutil
import time

import pytest

from termide.config import TerminalConfig
from termide.pty.manager import PTYManager
from termide.pty.session import SpawnFailure

needs_bash = pytest.mark.skipif(shutil.which("bash") is None, reason="bash not installed")

_BASH = ["bash", "--norc", "--noprofile"]


@needs_bash
class TestRunPipe:
    def test_command_output_reaches_display(self) -> None:
        from termide.cli import run_pipe

        config = TerminalConfig(shell=_BASH, terminate_on_close=True)
        output = asyncio.run(run_pipe(["echo $((6*7))"], config, timeout=1.0))
        # The typed line echoes back unevaluated, so 42 only comes from the shell
        assert b"42" in output
        assert b"\n" not in output
        assert b"\x1b" not in output

    def test_exit_finishes_before_timeout(self) -> None:
        from termide.cli import run_pipe

        config = TerminalConfig(shell=_BASH)
        started = time.monotonic()
        asyncio.run(run_pipe(["exit"], config, timeout=10.0))
        assert time.monotonic() - started < 5.0

    def test_missing_shell(self) -> None:
        from termide.cli import run_pipe

        config = TerminalConfig(shell=["/nonexistent/shell"])
        with pytest.raises(SpawnFailure):
            asyncio.run(run_pipe(["echo hi"], config, timeout=0.1))


@needs_bash
class TestPTYManager:
    def test_spawn_list_and_cleanup(self) -> None:
        async def _run() -> tuple[int, int, bool]:
            manager = PTYManager()
            chunks: list[bytes] = []

            async def _on_output(data: bytes) -> None:
                chunks.append(data)

            session = await manager.spawn(_BASH, on_output=_on_output, title="t")
            listed = len(manager.list_sessions())
            await manager.cleanup(terminate=True)
            return listed, len(manager), session.closed

        listed, remaining, closed = asyncio.run(_run())
        assert listed == 1
        assert remaining == 0
        assert closed is True

    def test_close_unknown_session(self) -> None:
        manager = PTYManager()
        manager.close("missing")
        assert len(manager) == 0
