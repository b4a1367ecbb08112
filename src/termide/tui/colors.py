"""Color strings typed into the customize form."""

from __future__ import annotations

import logging
import re

from textual.color import Color, ColorParseError

logger = logging.getLogger(__name__)

_HEX_RE = re.compile(r"#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})")
_NAME_RE = re.compile(r"[a-zA-Z_]+")


def parse_color(value: str, default: Color | None = None) -> Color | None:
    """Parse a palette name or a hex triple.

    Accepts Textual's named colors ("green", "darkslategray", ...) and
    ``#rgb`` / ``#rrggbb``.  Anything else, including an empty string,
    returns ``default``; an invalid color is never an error.
    """
    text = value.strip()
    if not text:
        return default
    if not (_HEX_RE.fullmatch(text) or _NAME_RE.fullmatch(text)):
        logger.warning("InvalidColor: %r, using default", value)
        return default
    try:
        return Color.parse(text.lower())
    except ColorParseError:
        logger.warning("InvalidColor: %r, using default", value)
        return default
