"""Output pump — move pty output through the filter to the display."""

from __future__ import annotations

import asyncio
import errno
import logging
import os
from typing import TYPE_CHECKING, Awaitable, Callable

from termide.pty.filter import EscapeFilter

if TYPE_CHECKING:
    from termide.pty.session import PTYSession
    from termide.session.wire import Wire

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024


def _running_loop() -> asyncio.AbstractEventLoop | None:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None


class OutputPump:
    """Read loop for one session, running as its own asyncio task.

    Each chunk read from the pty is filtered and handed to ``submit`` (the
    display's serialized update channel).  The pump never touches the
    display itself and does not wait for an update to be applied before the
    next read; ordering is the channel's job.

    The loop ends on end of stream or on any read error; there is no retry.
    Either way the session's completion signal is closed exactly once.
    """

    def __init__(
        self,
        session: PTYSession,
        submit: Callable[[bytes], Awaitable[None]],
        chunk_size: int = CHUNK_SIZE,
        sticky: bool = False,
        wire: Wire | None = None,
        on_exit: Callable[[PTYSession], None] | None = None,
    ) -> None:
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        self._session = session
        self._submit = submit
        self._filter = EscapeFilter(sticky=sticky)
        self._wire = wire
        self._on_exit = on_exit
        self.chunk_size = chunk_size
        self._task: asyncio.Task | None = None

    def start(self) -> asyncio.Task:
        """Launch ``run()`` on the running event loop."""
        if self._task is None:
            self._task = asyncio.create_task(
                self.run(), name=f"pty-pump-{self._session.id}"
            )
        return self._task

    def stop(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()

    @property
    def task(self) -> asyncio.Task | None:
        return self._task

    async def run(self) -> None:
        try:
            while True:
                try:
                    data = await self._read_chunk()
                except OSError as e:
                    if e.errno == errno.EIO or self._session.closed:
                        # Linux reports a hung-up pty slave as EIO
                        logger.info("PTY session %s reached end of stream", self._session.id)
                    else:
                        logger.warning(
                            "Error reading from PTY session %s: %s", self._session.id, e
                        )
                        if self._wire is not None:
                            self._wire.send_read_error(self._session.id, str(e))
                    return

                if not data:
                    logger.info("PTY session %s reached end of stream", self._session.id)
                    return

                filtered = self._filter.feed(data)
                if filtered:
                    await self._submit(filtered)
        finally:
            self._finish()

    async def _read_chunk(self) -> bytes:
        """Wait until the pty is readable, then read up to one chunk.

        Returns b"" once the session's handle has been released, including
        when ``session.close()`` happens while the pump is waiting.
        """
        fd = self._session.fd
        if fd < 0:
            return b""

        loop = asyncio.get_running_loop()
        ready: asyncio.Future[None] = loop.create_future()
        registered = True

        def _on_readable() -> None:
            if not ready.done():
                ready.set_result(None)

        def _unregister() -> None:
            nonlocal registered
            if registered:
                registered = False
                loop.remove_reader(fd)
            _on_readable()

        def _on_close() -> None:
            # Runs inside session.close(), before the fd is released
            if _running_loop() is loop:
                _unregister()
            else:
                loop.call_soon_threadsafe(_unregister)

        loop.add_reader(fd, _on_readable)
        self._session.add_close_hook(_on_close)
        try:
            await ready
        finally:
            self._session.remove_close_hook(_on_close)
            _unregister()

        # The fd number may already belong to someone else
        if self._session.closed:
            return b""
        return os.read(fd, self.chunk_size)

    def _finish(self) -> None:
        self._session.mark_exited()
        if not self._session.completion.close():
            return
        logger.debug("PTY session %s read side finished", self._session.id)
        if self._on_exit is not None:
            try:
                self._on_exit(self._session)
            except Exception:
                logger.exception("Error in on_exit callback for session %s", self._session.id)
