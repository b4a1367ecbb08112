"""Serialized display updates.

The display is owned by the UI loop.  Producers (the output pump, mostly)
never mutate it directly; they submit zero-argument callables to an
``UpdateQueue`` and a single consumer applies them one at a time, in the
order they were submitted.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Protocol

logger = logging.getLogger(__name__)

Update = Callable[[], None]


class DisplayAdapter(Protocol):
    """The only way the core reaches the on-screen terminal."""

    async def submit(self, update: Update) -> None: ...

    def set_colors(self, background: str, foreground: str) -> None: ...


class UpdateQueue:
    """Bounded FIFO of display updates with a single consumer.

    ``submit()`` waits while the queue is full, so a fast producer is held
    back instead of growing memory without limit.  After ``close()`` new
    submissions are dropped and ``drain()`` returns once everything queued
    before the close has been applied.
    """

    def __init__(self, maxsize: int = 256) -> None:
        self._queue: asyncio.Queue[Update | None] = asyncio.Queue(maxsize=maxsize)
        self._closed = False
        self.submitted = 0
        self.applied = 0

    async def submit(self, update: Update) -> None:
        if self._closed:
            return
        self.submitted += 1
        await self._queue.put(update)

    def submit_nowait(self, update: Update) -> None:
        """Enqueue from the UI loop itself. Raises ``asyncio.QueueFull``."""
        if self._closed:
            return
        self._queue.put_nowait(update)
        self.submitted += 1

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self._queue.put_nowait(None)
        except asyncio.QueueFull:
            # drain() stops on the closed flag once the backlog is applied
            pass

    @property
    def closed(self) -> bool:
        return self._closed

    async def drain(self) -> None:
        """Apply updates in submission order until the queue is closed."""
        while True:
            if self._closed and self._queue.empty():
                return
            update = await self._queue.get()
            if update is None:
                return
            try:
                update()
            except Exception:
                logger.exception("Display update failed")
            finally:
                self.applied += 1
