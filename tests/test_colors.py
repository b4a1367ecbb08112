"""Tests for termide.tui.colors.parse_color."""

from __future__ import annotations

import pytest
from textual.color import Color

from termide.tui.colors import parse_color


class TestParseColor:
    def test_named_color(self) -> None:
        assert parse_color("green") == Color.parse("green")

    def test_named_color_case_insensitive(self) -> None:
        assert parse_color("Red") == Color.parse("red")

    def test_short_hex(self) -> None:
        assert parse_color("#fff") == Color(255, 255, 255)

    def test_long_hex(self) -> None:
        assert parse_color("#00ff00") == Color(0, 255, 0)

    def test_surrounding_whitespace(self) -> None:
        assert parse_color("  blue ") == Color.parse("blue")

    @pytest.mark.parametrize(
        "value",
        ["notacolor", "#12", "#gggggg", "rgb(1,2,3)", "12345", "#ff00ff00"],
    )
    def test_invalid_returns_default(self, value: str) -> None:
        default = Color(1, 2, 3)
        assert parse_color(value, default) == default

    def test_invalid_without_default_is_none(self) -> None:
        assert parse_color("notacolor") is None

    def test_empty_returns_default(self) -> None:
        assert parse_color("", Color(9, 9, 9)) == Color(9, 9, 9)
