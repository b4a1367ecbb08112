"""Wire protocol — session and workspace events for the UI.

Pty sessions and the editor publish lifecycle and diagnostic events here;
the TUI output pane and the headless CLI subscribe and render them.
Display output does not travel on the wire; it goes through the ordered
update queue (``termide.session.updates``).
"""

from __future__ import annotations

import asyncio
import enum
from dataclasses import dataclass, field
from typing import Any


class EventType(enum.Enum):
    SESSION_START = "session_start"
    SESSION_EXIT = "session_exit"
    READ_ERROR = "read_error"
    WRITE_ERROR = "write_error"
    FILE_LOADED = "file_loaded"
    FILE_SAVED = "file_saved"
    STATUS = "status"
    ERROR = "error"


@dataclass
class WireEvent:
    """An event on the wire."""

    type: EventType
    data: dict[str, Any] = field(default_factory=dict)


class Wire:
    """Async message bus: sessions -> UI subscribers.

    Single-producer, multi-consumer broadcast.
    """

    def __init__(self) -> None:
        self._subscribers: list[asyncio.Queue[WireEvent | None]] = []
        self._closed: bool = False

    def send(self, event: WireEvent) -> None:
        """Send an event to all subscribers.

        Silently drops events after ``close()`` has been called.
        """
        if self._closed:
            return
        for q in self._subscribers:
            q.put_nowait(event)

    def send_status(self, message: str) -> None:
        self.send(WireEvent(type=EventType.STATUS, data={"message": message}))

    def send_error(self, error: str) -> None:
        self.send(WireEvent(type=EventType.ERROR, data={"error": error}))

    def send_session_start(self, session_id: str, title: str, command: list[str]) -> None:
        self.send(
            WireEvent(
                type=EventType.SESSION_START,
                data={
                    "session_id": session_id,
                    "title": title,
                    "command": " ".join(command),
                },
            )
        )

    def send_session_exit(
        self, session_id: str, title: str, exit_code: int | None
    ) -> None:
        """Notify subscribers that a session's read side has ended."""
        self.send(
            WireEvent(
                type=EventType.SESSION_EXIT,
                data={"session_id": session_id, "title": title, "exit_code": exit_code},
            )
        )

    def send_read_error(self, session_id: str, error: str) -> None:
        self.send(
            WireEvent(
                type=EventType.READ_ERROR,
                data={"session_id": session_id, "error": error},
            )
        )

    def send_write_error(self, session_id: str, error: str) -> None:
        self.send(
            WireEvent(
                type=EventType.WRITE_ERROR,
                data={"session_id": session_id, "error": error},
            )
        )

    def send_file_loaded(self, path: str) -> None:
        self.send(WireEvent(type=EventType.FILE_LOADED, data={"path": path}))

    def send_file_saved(self, path: str) -> None:
        self.send(WireEvent(type=EventType.FILE_SAVED, data={"path": path}))

    def subscribe(self) -> asyncio.Queue[WireEvent | None]:
        """Subscribe to events. Returns a queue to read from."""
        q: asyncio.Queue[WireEvent | None] = asyncio.Queue()
        self._subscribers.append(q)
        return q

    def unsubscribe(self, q: asyncio.Queue) -> None:
        """Unsubscribe from events."""
        if q in self._subscribers:
            self._subscribers.remove(q)

    def close(self) -> None:
        """Signal all subscribers that the wire is closing."""
        self._closed = True
        for q in self._subscribers:
            q.put_nowait(None)
