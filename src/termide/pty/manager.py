"""PTY Manager — owns the sessions and their output pumps."""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, TYPE_CHECKING

from termide.pty.pump import CHUNK_SIZE, OutputPump
from termide.pty.session import PTYSession

if TYPE_CHECKING:
    from termide.session.wire import Wire

logger = logging.getLogger(__name__)


class PTYManager:
    """Manages the lifecycle of pty sessions.

    - Sessions are tracked and can be looked up by ID
    - Each session gets exactly one output pump
    - Start and exit notifications are fired via Wire (if attached)
    - ``cleanup()`` releases every handle; children are only killed when
      asked to
    """

    def __init__(self, wire: Wire | None = None) -> None:
        self._sessions: dict[str, PTYSession] = {}
        self._pumps: dict[str, OutputPump] = {}
        self._wire = wire

    async def spawn(
        self,
        command: list[str],
        on_output: Callable[[bytes], Awaitable[None]],
        cwd: str | None = None,
        env: dict[str, str] | None = None,
        title: str = "",
        chunk_size: int = CHUNK_SIZE,
        sticky_escapes: bool = False,
    ) -> PTYSession:
        """Spawn a new session and start pumping its output.

        Args:
            command: Command and arguments (e.g., ["bash"]).
            on_output: Receives each filtered chunk; normally the display's
                ``write`` which turns it into a serialized update.
            cwd: Working directory.
            env: Extra environment variables on top of the inherited ones.
            title: Human-readable title for the session.
            chunk_size: Maximum bytes per pty read.
            sticky_escapes: Carry escape-filter state across reads.

        Returns:
            The new PTY session.

        Raises:
            SpawnFailure: the pty or the process could not be created.
        """
        session = PTYSession(
            command=command,
            cwd=cwd or ".",
            env=env or {},
            title=title,
        )
        session.start()

        on_exit = None
        if self._wire:
            wire = self._wire

            def _on_exit(s: PTYSession) -> None:
                wire.send_session_exit(s.id, s.title, s.exit_code)

            on_exit = _on_exit
            wire.send_session_start(session.id, title, command)

        pump = OutputPump(
            session,
            on_output,
            chunk_size=chunk_size,
            sticky=sticky_escapes,
            wire=self._wire,
            on_exit=on_exit,
        )
        pump.start()

        self._sessions[session.id] = session
        self._pumps[session.id] = pump
        return session

    def get(self, session_id: str) -> PTYSession | None:
        """Get a session by ID."""
        return self._sessions.get(session_id)

    def pump(self, session_id: str) -> OutputPump | None:
        return self._pumps.get(session_id)

    def close(self, session_id: str, terminate: bool = False) -> None:
        """Release a session's handle, stop its pump and forget it.

        The child keeps running unless ``terminate`` is set.
        """
        session = self._sessions.pop(session_id, None)
        pump = self._pumps.pop(session_id, None)
        if session is None:
            return
        if terminate:
            session.terminate()
        else:
            session.close()
        if pump is not None:
            pump.stop()

    def list_sessions(self) -> list[dict[str, Any]]:
        """List all tracked sessions."""
        return [
            {
                "id": s.id,
                "title": s.title,
                "command": " ".join(s.command),
                "pid": s.pid,
                "alive": s.alive,
                "status": s.status.value,
            }
            for s in self._sessions.values()
        ]

    async def cleanup(self, terminate: bool = False) -> None:
        """Close all sessions. Called on shutdown."""
        for session_id in list(self._sessions.keys()):
            self.close(session_id, terminate=terminate)
        logger.info("All PTY sessions closed (terminate=%s)", terminate)

    def __len__(self) -> int:
        return len(self._sessions)
