"""PTY core — the shell pane's session engine.

A shell runs on the slave side of a pseudo-terminal.  An output pump
reads the master side, strips escape sequences and control bytes, and
hands the result to the display through a serialized update queue.  Key
presses travel the other way through the key translator.
"""

from termide.pty.filter import EscapeFilter, FilterState, filter_output
from termide.pty.keys import KeyEvent, KeyKind, KeyTranslator, translate_key
from termide.pty.manager import PTYManager
from termide.pty.pump import OutputPump
from termide.pty.session import (
    Completion,
    PTYError,
    PTYSession,
    PTYStatus,
    SpawnFailure,
    WriteFailure,
)

__all__ = [
    "Completion",
    "EscapeFilter",
    "FilterState",
    "KeyEvent",
    "KeyKind",
    "KeyTranslator",
    "OutputPump",
    "PTYError",
    "PTYManager",
    "PTYSession",
    "PTYStatus",
    "SpawnFailure",
    "WriteFailure",
    "filter_output",
    "translate_key",
]
