"""Tests for the terminal pane widgets (termide.tui.terminal)."""

from __future__ import annotations

import asyncio

from textual.app import App, ComposeResult
from textual.color import Color
from textual.containers import VerticalScroll

from termide.pty.keys import KeyTranslator
from termide.session.updates import UpdateQueue
from termide.tui.terminal import MAX_CHARS, TerminalDisplay, TerminalView


class RecordingSession:
    id = "rec"

    def __init__(self) -> None:
        self.writes: list[bytes] = []

    def write(self, data: bytes) -> None:
        self.writes.append(data)


class TerminalApp(App):
    def __init__(self) -> None:
        super().__init__()
        self.customize_requests = 0

    def compose(self) -> ComposeResult:
        with VerticalScroll():
            yield TerminalView(id="terminal")

    def on_mount(self) -> None:
        self.query_one(TerminalView).focus()

    def on_terminal_view_customize_requested(
        self, message: TerminalView.CustomizeRequested
    ) -> None:
        self.customize_requests += 1


# ---------------------------------------------------------------------------
# TerminalView — output
# ---------------------------------------------------------------------------


class TestTerminalViewOutput:
    def test_append_accumulates(self) -> None:
        async def _run() -> str:
            app = TerminalApp()
            async with app.run_test():
                view = app.query_one(TerminalView)
                view.append(b"hello ")
                view.append(b"world")
                return view.content_text

        assert asyncio.run(_run()) == "hello world"

    def test_split_utf8_sequence(self) -> None:
        async def _run() -> str:
            app = TerminalApp()
            async with app.run_test():
                view = app.query_one(TerminalView)
                data = "héllo".encode()
                view.append(data[:2])
                view.append(data[2:])
                return view.content_text

        assert asyncio.run(_run()) == "héllo"

    def test_oldest_output_dropped(self) -> None:
        async def _run() -> str:
            app = TerminalApp()
            async with app.run_test():
                view = app.query_one(TerminalView)
                view.append(b"a" * MAX_CHARS)
                view.append(b"tail")
                return view.content_text

        text = asyncio.run(_run())
        assert len(text) == MAX_CHARS
        assert text.endswith("tail")


# ---------------------------------------------------------------------------
# TerminalView — keys
# ---------------------------------------------------------------------------


class TestTerminalViewKeys:
    def test_keys_forwarded_to_session(self) -> None:
        session = RecordingSession()

        async def _run() -> None:
            app = TerminalApp()
            async with app.run_test() as pilot:
                app.query_one(TerminalView).translator = KeyTranslator(session)  # type: ignore[arg-type]
                await pilot.press("l", "s", "enter", "ctrl+c")
                await pilot.pause()

        asyncio.run(_run())
        assert session.writes == [b"l", b"s", b"\r", b"\x03"]

    def test_ctrl_a_requests_customize(self) -> None:
        session = RecordingSession()

        async def _run() -> int:
            app = TerminalApp()
            async with app.run_test() as pilot:
                app.query_one(TerminalView).translator = KeyTranslator(session)  # type: ignore[arg-type]
                await pilot.press("ctrl+a")
                await pilot.pause()
                return app.customize_requests

        assert asyncio.run(_run()) == 1
        assert session.writes == []

    def test_no_translator_is_harmless(self) -> None:
        async def _run() -> str:
            app = TerminalApp()
            async with app.run_test() as pilot:
                await pilot.press("x")
                await pilot.pause()
                return app.query_one(TerminalView).content_text

        assert asyncio.run(_run()) == ""


# ---------------------------------------------------------------------------
# TerminalDisplay
# ---------------------------------------------------------------------------


class TestTerminalDisplay:
    def test_writes_applied_in_order(self) -> None:
        async def _run() -> str:
            app = TerminalApp()
            async with app.run_test():
                view = app.query_one(TerminalView)
                queue = UpdateQueue(maxsize=2)
                display = TerminalDisplay(view, queue)
                drain = asyncio.create_task(queue.drain())
                for i in range(10):
                    await display.write(str(i).encode())
                queue.close()
                await drain
                return view.content_text

        assert asyncio.run(_run()) == "0123456789"

    def test_set_colors(self) -> None:
        async def _run() -> tuple[Color, Color]:
            app = TerminalApp()
            async with app.run_test():
                view = app.query_one(TerminalView)
                TerminalDisplay(view, UpdateQueue()).set_colors("black", "#00ff00")
                return view.styles.background, view.styles.color

        background, foreground = asyncio.run(_run())
        assert background == Color.parse("black")
        assert foreground == Color(0, 255, 0)

    def test_invalid_color_clears_style(self) -> None:
        async def _run() -> Color:
            app = TerminalApp()
            async with app.run_test():
                view = app.query_one(TerminalView)
                display = TerminalDisplay(view, UpdateQueue())
                display.set_colors("black", "white")
                display.set_colors("nope", "white")
                return view.styles.background

        assert asyncio.run(_run()) != Color.parse("black")
