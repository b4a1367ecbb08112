"""Textual key events to terminal key events."""

from __future__ import annotations

from termide.pty.keys import KeyEvent, KeyKind

# Textual reports these control chords under their own names; a terminal
# treats them as the named key.
_NAMED: dict[str, KeyKind] = {
    "enter": KeyKind.ENTER,
    "ctrl+m": KeyKind.ENTER,
    "ctrl+j": KeyKind.ENTER,
    "backspace": KeyKind.BACKSPACE,
    "ctrl+h": KeyKind.BACKSPACE,
    "tab": KeyKind.TAB,
    "ctrl+i": KeyKind.TAB,
    "escape": KeyKind.ESCAPE,
    "ctrl+left_square_bracket": KeyKind.ESCAPE,
}


def key_event_from_textual(key: str, character: str | None) -> KeyEvent:
    kind = _NAMED.get(key)
    if kind is not None:
        return KeyEvent(kind=kind, name=key)

    if key.startswith("ctrl+"):
        letter = key[len("ctrl+") :]
        if len(letter) == 1 and letter.isascii() and letter.isalpha():
            return KeyEvent.ctrl(letter)
        return KeyEvent(kind=KeyKind.OTHER, name=key)

    if character is not None and len(character) == 1 and character.isprintable():
        return KeyEvent(kind=KeyKind.RUNE, char=character, name=key)

    return KeyEvent(kind=KeyKind.OTHER, name=key)
