"""Customize Terminal form."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Label


class CustomizeScreen(ModalScreen[tuple[str, str] | None]):
    """Ask for background and text colors.

    Dismisses with ``(background, foreground)`` on Save, None on Cancel.
    """

    DEFAULT_CSS = """
    CustomizeScreen {
        align: center middle;
    }

    #customize-form {
        width: 40;
        height: auto;
        border: solid $primary;
        padding: 0 1;
    }

    #customize-buttons {
        height: auto;
        margin-top: 1;
    }
    """

    BINDINGS = [("escape", "cancel", "Cancel")]

    def __init__(self, background: str = "", foreground: str = "") -> None:
        super().__init__()
        self._background = background
        self._foreground = foreground

    def compose(self) -> ComposeResult:
        with Vertical(id="customize-form") as form:
            form.border_title = "Customize Terminal"
            yield Label("Background Color")
            yield Input(value=self._background, id="bg-input")
            yield Label("Text Color")
            yield Input(value=self._foreground, id="fg-input")
            with Horizontal(id="customize-buttons"):
                yield Button("Save", variant="primary", id="save")
                yield Button("Cancel", id="cancel")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "save":
            background = self.query_one("#bg-input", Input).value
            foreground = self.query_one("#fg-input", Input).value
            self.dismiss((background, foreground))
        else:
            self.dismiss(None)

    def action_cancel(self) -> None:
        self.dismiss(None)
