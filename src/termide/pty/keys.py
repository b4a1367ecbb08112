"""Key-event translation — discrete key presses to the bytes a shell reads.

Only a handful of keys are forwarded to the pty:

    printable rune   UTF-8 encoding of the rune
    Enter            0x0A
    Backspace        0x7F
    Tab              0x09
    Escape           0x1B
    Ctrl+A..Ctrl+Z   0x01..0x1A

Everything else produces no bytes and is left for the rest of the UI.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

from termide.pty.session import WriteFailure

if TYPE_CHECKING:
    from termide.pty.session import PTYSession

logger = logging.getLogger(__name__)


class KeyKind(enum.Enum):
    RUNE = "rune"
    ENTER = "enter"
    BACKSPACE = "backspace"
    TAB = "tab"
    ESCAPE = "escape"
    CTRL = "ctrl"
    OTHER = "other"


@dataclass(frozen=True)
class KeyEvent:
    """A single key press.

    ``char`` holds the rune for ``RUNE`` events and the letter for ``CTRL``
    events.  ``name`` is the key name reported by the UI, kept for logging.
    """

    kind: KeyKind
    char: str = ""
    name: str = ""

    @classmethod
    def rune(cls, char: str) -> KeyEvent:
        return cls(kind=KeyKind.RUNE, char=char, name=char)

    @classmethod
    def ctrl(cls, letter: str) -> KeyEvent:
        return cls(kind=KeyKind.CTRL, char=letter, name=f"ctrl+{letter.lower()}")


_FIXED: dict[KeyKind, bytes] = {
    KeyKind.ENTER: b"\n",
    KeyKind.BACKSPACE: b"\x7f",
    KeyKind.TAB: b"\t",
    KeyKind.ESCAPE: b"\x1b",
}


def translate_key(event: KeyEvent) -> bytes | None:
    """Return the bytes for ``event``, or None if the key is not forwarded."""
    if event.kind is KeyKind.RUNE:
        if len(event.char) != 1:
            return None
        return event.char.encode("utf-8")
    if event.kind is KeyKind.CTRL:
        letter = event.char.lower()
        if len(letter) == 1 and "a" <= letter <= "z":
            return bytes([ord(letter) - ord("a") + 1])
        return None
    return _FIXED.get(event.kind)


class KeyTranslator:
    """Forward translated key events to a pty session.

    Holds no state of its own: every mapped event becomes exactly one
    synchronous ``session.write()``.  Write failures never reach the key
    source; they are logged and, if ``on_write_error`` is set, reported.
    """

    def __init__(
        self,
        session: PTYSession,
        on_write_error: Callable[[PTYSession, WriteFailure], None] | None = None,
    ) -> None:
        self._session = session
        self._on_write_error = on_write_error

    def handle(self, event: KeyEvent) -> bool:
        """Write the event's bytes to the pty.

        Returns True when the event was claimed by the terminal, False when
        it should be passed on to other handlers.
        """
        data = translate_key(event)
        if data is None:
            return False
        try:
            self._session.write(data)
        except WriteFailure as e:
            logger.debug("Dropped write to PTY session %s: %s", self._session.id, e)
            if self._on_write_error is not None:
                self._on_write_error(self._session, e)
        return True
