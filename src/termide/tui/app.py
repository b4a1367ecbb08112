"""Main Textual application for termide."""

from __future__ import annotations

import logging
import os

from rich.markup import escape
from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.widgets import DirectoryTree, Log, Static, TextArea

from termide.config import TermideConfig
from termide.editor import Document, EditorError
from termide.pty.keys import KeyTranslator
from termide.pty.manager import PTYManager
from termide.pty.session import PTYSession, SpawnFailure, WriteFailure
from termide.session.updates import UpdateQueue
from termide.session.wire import EventType, Wire, WireEvent
from termide.tui.customize import CustomizeScreen
from termide.tui.terminal import TerminalDisplay, TerminalView

logger = logging.getLogger(__name__)

_MENU = (
    "[yellow]Ctrl+S[/] Save   [yellow]Ctrl+Q[/] Quit   [yellow]Ctrl+T[/] Terminal   "
    "[yellow]Ctrl+E[/] Editor   [yellow]Ctrl+F[/] Files   "
    "[yellow]Ctrl+A[/] Customize Terminal"
)


class TUILogHandler(logging.Handler):
    """Logging handler that captures the last log message for the status bar.

    Writing to stderr would corrupt the Textual display, so the most
    recent record is stored and a status bar refresh is scheduled instead.
    """

    def __init__(self, app: TermideApp) -> None:
        super().__init__()
        self._app = app
        self.last_message: str = ""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.last_message = self.format(record)
            try:
                self._app.call_from_thread(self._app._update_status)
            except RuntimeError:
                # Already on the app's thread
                self._app.call_later(self._app._update_status)
        except Exception:
            pass  # Never let logging crash the TUI


class TermideApp(App):
    """termide: file tree, editor, output and a pty-backed shell."""

    TITLE = "termide"
    CSS = """
    #menu-bar {
        height: 1;
        padding: 0 1;
    }

    #main-layout {
        layout: horizontal;
        height: 1fr;
    }

    #file-tree {
        width: 30;
    }

    #right-panel {
        width: 1fr;
    }

    #editor {
        height: 2fr;
    }

    #output {
        height: 1fr;
        border: solid $secondary;
    }

    #terminal-scroll {
        height: 1fr;
        border: solid $primary;
    }

    #status-bar {
        dock: bottom;
        height: 1;
        background: $surface;
        color: $text-muted;
        padding: 0 1;
    }
    """

    BINDINGS = [
        Binding("ctrl+s", "save", "Save", priority=True),
        Binding("ctrl+q", "quit", "Quit", priority=True),
        Binding("ctrl+t", "focus_pane('terminal')", "Terminal", priority=True),
        Binding("ctrl+e", "focus_pane('editor')", "Editor", priority=True),
        Binding("ctrl+f", "focus_pane('file-tree')", "Files", priority=True),
    ]

    def __init__(
        self,
        config: TermideConfig,
        wire: Wire | None = None,
        manager: PTYManager | None = None,
    ) -> None:
        super().__init__()
        self.config = config
        self.wire = wire or Wire()
        self.manager = manager or PTYManager(wire=self.wire)
        self.document = Document()
        self.updates = UpdateQueue(maxsize=config.terminal.queue_size)
        self.terminal_display: TerminalDisplay | None = None
        self.session: PTYSession | None = None
        self._log_handler: TUILogHandler | None = None

    def compose(self) -> ComposeResult:
        yield Static(_MENU, id="menu-bar")
        with Horizontal(id="main-layout"):
            yield DirectoryTree(self.config.editor.root, id="file-tree")
            with Vertical(id="right-panel"):
                yield TextArea(id="editor")
                yield Log(id="output")
                with VerticalScroll(id="terminal-scroll"):
                    yield TerminalView(id="terminal")
        yield Static(id="status-bar")

    def on_mount(self) -> None:
        self._install_log_handler()

        output = self.query_one("#output", Log)
        output.border_title = "Output"
        self.query_one("#terminal-scroll").border_title = "Terminal"
        self.query_one("#file-tree", DirectoryTree).focus()

        view = self.query_one("#terminal", TerminalView)
        self.terminal_display = TerminalDisplay(view, self.updates)
        self.terminal_display.set_colors(
            self.config.terminal.background, self.config.terminal.foreground
        )

        self._listen_wire()
        self._drain_updates()
        self._start_terminal()
        self._update_status()

    async def on_unmount(self) -> None:
        self.updates.close()
        await self.manager.cleanup(terminate=self.config.terminal.terminate_on_close)
        self.wire.close()

    def _install_log_handler(self) -> None:
        root = logging.getLogger()
        for handler in root.handlers[:]:
            root.removeHandler(handler)
        self._log_handler = TUILogHandler(self)
        self._log_handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
        root.addHandler(self._log_handler)

    # --- Status bar ---

    def _update_status(self) -> None:
        try:
            status = self.query_one("#status-bar", Static)
        except Exception:
            return
        parts = []
        if self.session is not None:
            parts.append(f"Shell: {self.session.status.value} (pid {self.session.pid})")
        else:
            parts.append("Shell: not started")
        if self.document.path:
            parts.append(f"File: {escape(self.document.name)}")
        if self._log_handler and self._log_handler.last_message:
            last_log = self._log_handler.last_message
            if len(last_log) > 80:
                last_log = last_log[:77] + "..."
            parts.append(f"[dim]{escape(last_log)}[/dim]")
        status.update(" | ".join(parts))

    def _show_output(self, message: str) -> None:
        self.query_one("#output", Log).write_line(message)

    # --- Terminal session ---

    @work(exclusive=True, group="terminal")
    async def _start_terminal(self) -> None:
        cfg = self.config.terminal
        if self.terminal_display is None:
            logger.error("Terminal pane is not mounted; shell not started")
            return
        try:
            self.session = await self.manager.spawn(
                cfg.shell,
                on_output=self.terminal_display.write,
                cwd=os.getcwd(),
                env=cfg.env,
                title="terminal",
                chunk_size=cfg.chunk_size,
                sticky_escapes=cfg.sticky_escapes,
            )
        except SpawnFailure as e:
            logger.error("Failed to start terminal: %s", e)
            self._show_output(f"Error starting terminal: {e}")
            self.notify(str(e), title="Terminal", severity="error")
            return

        on_write_error = self._report_write_error if cfg.report_write_errors else None
        view = self.query_one("#terminal", TerminalView)
        view.translator = KeyTranslator(self.session, on_write_error=on_write_error)
        self._update_status()

    def _report_write_error(self, session: PTYSession, error: WriteFailure) -> None:
        self.wire.send_write_error(session.id, str(error))

    @work(exclusive=True, group="display")
    async def _drain_updates(self) -> None:
        await self.updates.drain()

    def on_terminal_view_customize_requested(
        self, message: TerminalView.CustomizeRequested
    ) -> None:
        self.push_screen(
            CustomizeScreen(
                self.config.terminal.background, self.config.terminal.foreground
            ),
            self._apply_colors,
        )

    def _apply_colors(self, result: tuple[str, str] | None) -> None:
        if result is not None and self.terminal_display is not None:
            background, foreground = result
            self.config.terminal.background = background
            self.config.terminal.foreground = foreground
            self.terminal_display.set_colors(background, foreground)
        self.query_one("#terminal", TerminalView).focus()

    # --- Editor ---

    def on_directory_tree_file_selected(
        self, event: DirectoryTree.FileSelected
    ) -> None:
        path = str(event.path)
        try:
            text = self.document.load(path)
        except EditorError as e:
            self._show_output(f"Error loading file: {e}")
            return
        self.query_one("#editor", TextArea).load_text(text)
        self.wire.send_file_loaded(path)
        self._update_status()

    def action_save(self) -> None:
        text = self.query_one("#editor", TextArea).text
        try:
            path = self.document.save(text)
        except EditorError as e:
            self._show_output(f"Error saving file: {e}")
            return
        self.wire.send_file_saved(path)

    def action_focus_pane(self, pane_id: str) -> None:
        self.query_one(f"#{pane_id}").focus()

    # --- Wire event loop ---

    @work(exclusive=True, group="wire")
    async def _listen_wire(self) -> None:
        queue = self.wire.subscribe()
        try:
            while True:
                event = await queue.get()
                if event is None:
                    break
                self._handle_event(event)
        finally:
            self.wire.unsubscribe(queue)

    def _handle_event(self, event: WireEvent) -> None:
        handlers = {
            EventType.SESSION_START: self._on_session_start,
            EventType.SESSION_EXIT: self._on_session_exit,
            EventType.READ_ERROR: self._on_read_error,
            EventType.WRITE_ERROR: self._on_write_error,
            EventType.FILE_LOADED: self._on_file_loaded,
            EventType.FILE_SAVED: self._on_file_saved,
            EventType.STATUS: self._on_status,
            EventType.ERROR: self._on_error,
        }
        handler = handlers.get(event.type)
        if handler:
            handler(event.data)
        self._update_status()

    def _on_session_start(self, data: dict) -> None:
        self._show_output(f"Terminal started: {data.get('command', '')}")

    def _on_session_exit(self, data: dict) -> None:
        exit_code = data.get("exit_code")
        code_str = str(exit_code) if exit_code is not None else "?"
        self._show_output(f"Terminal exited (code={code_str})")

    def _on_read_error(self, data: dict) -> None:
        self._show_output(f"Terminal read error: {data.get('error', '')}")

    def _on_write_error(self, data: dict) -> None:
        self._show_output(f"Terminal write error: {data.get('error', '')}")

    def _on_file_loaded(self, data: dict) -> None:
        self._show_output(f"Loaded file: {data.get('path', '')}")

    def _on_file_saved(self, data: dict) -> None:
        self._show_output(f"File saved: {data.get('path', '')}")

    def _on_status(self, data: dict) -> None:
        message = data.get("message", "")
        if message:
            self._show_output(message)

    def _on_error(self, data: dict) -> None:
        self._show_output(f"ERROR: {data.get('error', 'Unknown error')}")
