"""PTY session — one shell process attached to a pseudo-terminal."""

from __future__ import annotations

import asyncio
import enum
import fcntl
import logging
import os
import pty
import signal
import subprocess
import termios
import threading
import uuid
from dataclasses import dataclass, field
from typing import Callable

logger = logging.getLogger(__name__)


class PTYError(Exception):
    """Base class for pty session errors."""


class SpawnFailure(PTYError):
    """The pty could not be allocated or the command could not be started."""


class WriteFailure(PTYError):
    """Writing to the pty failed."""


class PTYStatus(enum.Enum):
    """Lifecycle states for a PTY session."""

    RUNNING = "running"
    CLOSED = "closed"  # Handle released by us, child left alone
    EXITED = "exited"  # Read side hit end of stream or a read error
    KILLED = "killed"  # Process group terminated by us


class Completion:
    """One-shot signal closed when a session's read side terminates.

    ``close()`` may be called from any thread any number of times; only the
    first call closes the signal and returns True.
    """

    def __init__(self) -> None:
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._waiters: list[tuple[asyncio.AbstractEventLoop, asyncio.Future[None]]] = []

    def close(self) -> bool:
        with self._lock:
            if self._event.is_set():
                return False
            self._event.set()
            waiters, self._waiters = self._waiters, []
        for loop, fut in waiters:
            try:
                loop.call_soon_threadsafe(_resolve, fut)
            except RuntimeError:
                # The waiter's loop is already closed
                pass
        return True

    @property
    def closed(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: float | None = None) -> bool:
        """Block until closed. Returns False if ``timeout`` expired first."""
        return self._event.wait(timeout)

    async def wait_async(self, timeout: float | None = None) -> bool:
        """Wait on the running loop without tying up a thread."""
        loop = asyncio.get_running_loop()
        fut: asyncio.Future[None] = loop.create_future()
        waiter = (loop, fut)
        with self._lock:
            if self._event.is_set():
                return True
            self._waiters.append(waiter)
        try:
            done, _ = await asyncio.wait({fut}, timeout=timeout)
            return bool(done)
        finally:
            with self._lock:
                if waiter in self._waiters:
                    self._waiters.remove(waiter)
            fut.cancel()


def _resolve(fut: asyncio.Future[None]) -> None:
    if not fut.done():
        fut.set_result(None)


def _acquire_controlling_tty() -> None:
    # Runs in the child after setsid(); fd 0 is the pty slave.
    fcntl.ioctl(0, termios.TIOCSCTTY, 0)


@dataclass
class PTYSession:
    """A shell running on the slave side of a pty.

    The session owns the master fd and the child process.  Reading the
    master is the output pump's job; the session only exposes ``write()``
    and ``close()``.  Closing releases the fd but does not signal or reap
    the child; call ``terminate()`` for that.
    """

    id: str = field(default_factory=lambda: uuid.uuid4().hex[:8])
    command: list[str] = field(default_factory=lambda: ["bash"])
    cwd: str = field(default_factory=os.getcwd)
    env: dict[str, str] = field(default_factory=dict)
    title: str = ""

    completion: Completion = field(default_factory=Completion, init=False)
    _master_fd: int = field(default=-1, init=False)
    _proc: subprocess.Popen | None = field(default=None, init=False)
    _pgid: int = field(default=0, init=False)
    _status: PTYStatus = field(default=PTYStatus.RUNNING, init=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False)
    _close_hooks: list[Callable[[], None]] = field(default_factory=list, init=False)

    def start(self) -> None:
        """Open a pty pair and spawn the command on its slave side.

        Raises:
            SpawnFailure: the pty could not be opened or the command failed
                to start.
        """
        try:
            master_fd, slave_fd = pty.openpty()
        except OSError as e:
            raise SpawnFailure(f"failed to open pty: {e}") from e

        env = {**os.environ, **self.env}

        try:
            self._proc = subprocess.Popen(
                self.command,
                stdin=slave_fd,
                stdout=slave_fd,
                stderr=slave_fd,
                start_new_session=True,
                preexec_fn=_acquire_controlling_tty,
                env=env,
                cwd=self.cwd,
            )
        except (OSError, subprocess.SubprocessError) as e:
            os.close(master_fd)
            raise SpawnFailure(
                f"failed to start {' '.join(self.command)!r}: {e}"
            ) from e
        finally:
            os.close(slave_fd)

        self._master_fd = master_fd
        self._pgid = os.getpgid(self._proc.pid)
        self._status = PTYStatus.RUNNING

        logger.info(
            "PTY session %s started: pid=%d pgid=%d cmd=%s",
            self.id,
            self._proc.pid,
            self._pgid,
            " ".join(self.command),
        )

    def write(self, data: bytes) -> None:
        """Write raw bytes to the pty's input side.

        Raises:
            WriteFailure: the handle is released or the write failed.
        """
        if self.closed:
            raise WriteFailure(f"PTY session {self.id} is closed")
        view = memoryview(data)
        try:
            while view:
                n = os.write(self._master_fd, view)
                view = view[n:]
        except OSError as e:
            raise WriteFailure(str(e)) from e

    def add_close_hook(self, hook: Callable[[], None]) -> None:
        """Run ``hook`` when the handle is released, before the fd is closed."""
        with self._lock:
            self._close_hooks.append(hook)

    def remove_close_hook(self, hook: Callable[[], None]) -> None:
        with self._lock:
            if hook in self._close_hooks:
                self._close_hooks.remove(hook)

    def close(self) -> None:
        """Release the pty handle. The child process is left running.

        Close hooks run first, so a reader waiting on the fd is woken and
        unregistered while the fd number still belongs to this session.
        """
        with self._lock:
            if self._master_fd < 0:
                return
            fd, self._master_fd = self._master_fd, -1
            if self._status in (PTYStatus.RUNNING, PTYStatus.EXITED):
                self._status = PTYStatus.CLOSED
            hooks, self._close_hooks = self._close_hooks, []
        for hook in hooks:
            try:
                hook()
            except Exception:
                logger.exception("Close hook failed for PTY session %s", self.id)
        try:
            os.close(fd)
        except OSError as e:
            logger.debug("Error closing PTY session %s: %s", self.id, e)
        logger.info("PTY session %s closed", self.id)

    def terminate(self, timeout: float = 2.0) -> None:
        """Kill the process group, reap the child and release the handle."""
        if self._proc is None or self._status is PTYStatus.KILLED:
            self.close()
            return
        try:
            os.killpg(self._pgid, signal.SIGKILL)
            logger.info("Killed PTY session %s (pgid=%d)", self.id, self._pgid)
        except ProcessLookupError:
            logger.debug("Process group already gone: %d", self._pgid)
        except OSError as e:
            logger.warning("Error killing PTY session %s: %s", self.id, e)

        try:
            self._proc.wait(timeout=timeout)
        except subprocess.TimeoutExpired:
            logger.warning("PTY session %s did not exit after SIGKILL", self.id)

        self.close()
        self._status = PTYStatus.KILLED

    def mark_exited(self) -> None:
        """Record that the read side has ended (called by the output pump)."""
        if self._status is PTYStatus.RUNNING:
            self._status = PTYStatus.EXITED

    @property
    def fd(self) -> int:
        return self._master_fd

    @property
    def pid(self) -> int:
        return self._proc.pid if self._proc is not None else 0

    @property
    def closed(self) -> bool:
        return self._master_fd < 0

    @property
    def alive(self) -> bool:
        return self._status == PTYStatus.RUNNING

    @property
    def status(self) -> PTYStatus:
        return self._status

    @property
    def exit_code(self) -> int | None:
        if self._proc is None:
            return None
        return self._proc.poll()
