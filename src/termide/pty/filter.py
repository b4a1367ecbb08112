"""Escape-sequence filter — reduce raw pty output to printable bytes.

This is a "printable-or-discard" filter, not a terminal emulator.  Escape
sequences are recognized only well enough to be dropped: everything from
ESC up to and including the next ASCII letter disappears.  All control
bytes are dropped too, line feed and carriage return included, so the
shell's newlines never reach the display.

The state machine restarts in ``NORMAL`` for every chunk.  A sequence
split across two reads therefore leaks its tail (``ESC [`` | ``31mX``
comes out as ``31mX``).  ``EscapeFilter(sticky=True)`` carries the state
over between chunks for callers that want the sequence swallowed whole.
"""

from __future__ import annotations

import enum

ESC = 0x1B
DEL = 0x7F


class FilterState(enum.Enum):
    """Where the filter is within the byte stream."""

    NORMAL = "normal"
    IN_ESCAPE = "in_escape"


def _is_letter(b: int) -> bool:
    return 0x41 <= b <= 0x5A or 0x61 <= b <= 0x7A


def _is_printable(b: int) -> bool:
    return b >= 32 and b != DEL


def _run(data: bytes, state: FilterState) -> tuple[bytes, FilterState]:
    output = bytearray()
    for b in data:
        if state is FilterState.IN_ESCAPE:
            if _is_letter(b):
                state = FilterState.NORMAL
            continue
        if b == ESC:
            state = FilterState.IN_ESCAPE
            continue
        if _is_printable(b):
            output.append(b)
    return bytes(output), state


def filter_output(data: bytes) -> bytes:
    """Filter one chunk of pty output, starting from a fresh ``NORMAL`` state."""
    output, _ = _run(data, FilterState.NORMAL)
    return output


class EscapeFilter:
    """Chunk-by-chunk filter used by the output pump.

    With ``sticky=False`` each ``feed()`` is exactly ``filter_output()``.
    With ``sticky=True`` an unterminated escape sequence at the end of one
    chunk keeps swallowing bytes at the start of the next.
    """

    def __init__(self, sticky: bool = False) -> None:
        self.sticky = sticky
        self._state = FilterState.NORMAL

    @property
    def state(self) -> FilterState:
        return self._state

    def feed(self, data: bytes) -> bytes:
        start = self._state if self.sticky else FilterState.NORMAL
        output, self._state = _run(data, start)
        return output

    def reset(self) -> None:
        self._state = FilterState.NORMAL
