"""Editor document — the file currently open in the editor pane."""

from __future__ import annotations

import logging
import os

logger = logging.getLogger(__name__)


class EditorError(Exception):
    """Loading or saving the current document failed."""


class Document:
    """Tracks which file the editor shows and moves text to and from disk."""

    def __init__(self) -> None:
        self.path: str | None = None

    def load(self, path: str) -> str:
        """Read ``path`` and make it the current file."""
        try:
            with open(path, encoding="utf-8", errors="replace") as f:
                text = f.read()
        except OSError as e:
            raise EditorError(f"failed to read file: {e}") from e
        self.path = path
        logger.info("Loaded %s", path)
        return text

    def save(self, text: str) -> str:
        """Write ``text`` back to the current file. Returns the path."""
        if self.path is None:
            raise EditorError("no file loaded")
        try:
            with open(self.path, "w", encoding="utf-8") as f:
                f.write(text)
        except OSError as e:
            raise EditorError(f"failed to write file: {e}") from e
        logger.info("Saved %s", self.path)
        return self.path

    @property
    def name(self) -> str:
        return os.path.basename(self.path) if self.path else ""
