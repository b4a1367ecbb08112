"""Terminal pane — the display side of a pty session."""

from __future__ import annotations

import codecs
import logging
from typing import TYPE_CHECKING

from rich.text import Text
from textual import events
from textual.color import Color
from textual.message import Message
from textual.widgets import Static

from termide.tui.colors import parse_color
from termide.tui.keymap import key_event_from_textual

if TYPE_CHECKING:
    from termide.pty.keys import KeyTranslator
    from termide.session.updates import Update, UpdateQueue

logger = logging.getLogger(__name__)

# Oldest output is dropped past this many characters
MAX_CHARS = 200_000


class TerminalView(Static, can_focus=True):
    """Accumulates filtered shell output and forwards key presses.

    ``append()`` must only run inside an update drained from the
    ``UpdateQueue``; nothing else writes to the view.
    """

    DEFAULT_CSS = """
    TerminalView {
        width: 1fr;
        height: auto;
        padding: 0 1;
    }
    """

    class CustomizeRequested(Message):
        """Ctrl+A was pressed while the terminal had focus."""

    def __init__(self, *, id: str | None = None, classes: str | None = None) -> None:
        super().__init__("", id=id, classes=classes)
        self._content = ""
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self.translator: KeyTranslator | None = None

    @property
    def content_text(self) -> str:
        return self._content

    def append(self, data: bytes) -> None:
        self._content += self._decoder.decode(data)
        if len(self._content) > MAX_CHARS:
            self._content = self._content[-MAX_CHARS:]
        self.update(Text(self._content))

    def set_colors(self, background: Color | None, foreground: Color | None) -> None:
        self.styles.background = background
        self.styles.color = foreground

    def on_key(self, event: events.Key) -> None:
        if event.key == "ctrl+a":
            event.stop()
            event.prevent_default()
            self.post_message(self.CustomizeRequested())
            return

        if self.translator is None:
            return
        if self.translator.handle(key_event_from_textual(event.key, event.character)):
            event.stop()
            event.prevent_default()


class TerminalDisplay:
    """Display adapter for one terminal pane.

    The output pump calls ``write()``; each chunk becomes one update on the
    queue, applied in order by the app's drain worker.
    """

    def __init__(self, view: TerminalView, queue: UpdateQueue) -> None:
        self._view = view
        self._queue = queue

    async def submit(self, update: Update) -> None:
        await self._queue.submit(update)

    async def write(self, data: bytes) -> None:
        def _apply() -> None:
            self._view.append(data)
            parent = self._view.parent
            if parent is not None:
                parent.scroll_end(animate=False)

        await self.submit(_apply)

    def set_colors(self, background: str, foreground: str) -> None:
        self._view.set_colors(parse_color(background), parse_color(foreground))
        logger.info("Terminal colors set: background=%r foreground=%r", background, foreground)
