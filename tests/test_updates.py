"""Tests for termide.session.updates.UpdateQueue."""

from __future__ import annotations

import asyncio

from termide.session.updates import UpdateQueue


class TestUpdateQueueOrdering:
    def test_applies_in_submission_order(self) -> None:
        async def _run() -> list[int]:
            applied: list[int] = []
            queue = UpdateQueue(maxsize=8)
            drain = asyncio.create_task(queue.drain())
            for i in range(100):
                await queue.submit(lambda i=i: applied.append(i))
            queue.close()
            await drain
            return applied

        assert asyncio.run(_run()) == list(range(100))

    def test_counters(self) -> None:
        async def _run() -> UpdateQueue:
            queue = UpdateQueue()
            drain = asyncio.create_task(queue.drain())
            for _ in range(5):
                await queue.submit(lambda: None)
            queue.close()
            await drain
            return queue

        queue = asyncio.run(_run())
        assert queue.submitted == 5
        assert queue.applied == 5

    def test_failing_update_does_not_stop_drain(self) -> None:
        async def _run() -> list[str]:
            applied: list[str] = []
            queue = UpdateQueue()
            drain = asyncio.create_task(queue.drain())

            def _boom() -> None:
                raise RuntimeError("boom")

            await queue.submit(lambda: applied.append("a"))
            await queue.submit(_boom)
            await queue.submit(lambda: applied.append("b"))
            queue.close()
            await drain
            return applied

        assert asyncio.run(_run()) == ["a", "b"]


class TestUpdateQueueBackpressure:
    def test_submit_waits_when_full(self) -> None:
        async def _run() -> tuple[bool, bool]:
            queue = UpdateQueue(maxsize=1)
            await queue.submit(lambda: None)
            pending = asyncio.create_task(queue.submit(lambda: None))
            await asyncio.sleep(0.01)
            blocked = not pending.done()
            drain = asyncio.create_task(queue.drain())
            await asyncio.wait_for(pending, timeout=1.0)
            queue.close()
            await drain
            return blocked, pending.done()

        blocked, finished = asyncio.run(_run())
        assert blocked is True
        assert finished is True

    def test_submit_nowait(self) -> None:
        async def _run() -> list[str]:
            applied: list[str] = []
            queue = UpdateQueue()
            queue.submit_nowait(lambda: applied.append("x"))
            queue.close()
            await queue.drain()
            return applied

        assert asyncio.run(_run()) == ["x"]


class TestUpdateQueueClose:
    def test_submit_after_close_is_dropped(self) -> None:
        async def _run() -> list[str]:
            applied: list[str] = []
            queue = UpdateQueue()
            queue.close()
            await queue.submit(lambda: applied.append("late"))
            await queue.drain()
            return applied

        assert asyncio.run(_run()) == []

    def test_close_is_idempotent(self) -> None:
        async def _run() -> bool:
            queue = UpdateQueue()
            queue.close()
            queue.close()
            await asyncio.wait_for(queue.drain(), timeout=1.0)
            return queue.closed

        assert asyncio.run(_run()) is True

    def test_close_when_full_still_drains_backlog(self) -> None:
        async def _run() -> list[int]:
            applied: list[int] = []
            queue = UpdateQueue(maxsize=2)
            await queue.submit(lambda: applied.append(1))
            await queue.submit(lambda: applied.append(2))
            queue.close()
            await asyncio.wait_for(queue.drain(), timeout=1.0)
            return applied

        assert asyncio.run(_run()) == [1, 2]
