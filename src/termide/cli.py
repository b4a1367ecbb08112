"""CLI entry point for termide."""

from __future__ import annotations

import asyncio
import logging
import os
import shlex

import typer

from termide.config import TermideConfig, TerminalConfig

app = typer.Typer(
    name="termide",
    help="A small terminal IDE: file tree, editor and a pty-backed shell.",
    no_args_is_help=True,
)


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _load_config(
    config_file: str | None, shell: str | None, sticky_escapes: bool
) -> TermideConfig:
    config = TermideConfig.load(config_file)
    if shell:
        config.terminal.shell = shlex.split(shell)
    if sticky_escapes:
        config.terminal.sticky_escapes = True
    return config


@app.command()
def run(
    root: str | None = typer.Option(
        None, "--root", "-r", help="Directory shown in the file tree."
    ),
    shell: str | None = typer.Option(
        None, "--shell", "-s", help="Shell command for the terminal pane (default: bash)."
    ),
    sticky_escapes: bool = typer.Option(
        False,
        "--sticky-escapes",
        help="Keep escape-sequence state across pty reads.",
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug logging."
    ),
    config_file: str | None = typer.Option(
        None, "--config", "-c", help="Config file path."
    ),
) -> None:
    """Start the interactive TUI."""
    # No stderr handler here: it would corrupt the Textual display.  The
    # app installs its own handler that routes logs to the status bar.
    logging.getLogger().setLevel(logging.DEBUG if verbose else logging.INFO)
    for h in logging.getLogger().handlers[:]:
        logging.getLogger().removeHandler(h)

    config = _load_config(config_file, shell, sticky_escapes)
    if root:
        config.editor.root = root
    if not os.path.isdir(config.editor.root):
        typer.echo(f"Error: Directory not found: {config.editor.root}", err=True)
        raise typer.Exit(1)

    from termide.tui.app import TermideApp

    TermideApp(config).run()


@app.command()
def pipe(
    commands: list[str] = typer.Argument(help="Lines to type into the shell."),
    shell: str | None = typer.Option(
        None, "--shell", "-s", help="Shell command (default: bash)."
    ),
    timeout: float = typer.Option(
        2.0, "--timeout", "-t", help="Seconds to collect output after the last line."
    ),
    sticky_escapes: bool = typer.Option(
        False,
        "--sticky-escapes",
        help="Keep escape-sequence state across pty reads.",
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug logging."
    ),
    config_file: str | None = typer.Option(
        None, "--config", "-c", help="Config file path."
    ),
) -> None:
    """Type lines into a headless shell session and print the filtered output."""
    setup_logging(verbose)
    config = _load_config(config_file, shell, sticky_escapes)

    from termide.pty.session import SpawnFailure

    try:
        output = asyncio.run(run_pipe(commands, config.terminal, timeout))
    except SpawnFailure as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(output.decode("utf-8", errors="replace"))


async def run_pipe(
    commands: list[str], config: TerminalConfig, timeout: float = 2.0
) -> bytes:
    """Spawn the shell, type each line followed by Enter, collect filtered output.

    Output is collected until the shell exits or ``timeout`` seconds pass
    after the last line, whichever comes first.
    """
    from termide.pty.keys import KeyEvent, KeyKind, KeyTranslator
    from termide.pty.manager import PTYManager
    from termide.session.updates import UpdateQueue
    from termide.session.wire import EventType, Wire

    wire = Wire()
    manager = PTYManager(wire=wire)
    updates = UpdateQueue(maxsize=config.queue_size)
    chunks: list[bytes] = []

    async def _consume_wire() -> None:
        queue = wire.subscribe()
        while True:
            event = await queue.get()
            if event is None:
                break
            d = event.data
            if event.type == EventType.SESSION_START:
                typer.echo(f"[session] started: {d.get('command', '')}", err=True)
            elif event.type == EventType.SESSION_EXIT:
                code = d.get("exit_code")
                typer.echo(
                    f"[session] exited (code={code if code is not None else '?'})",
                    err=True,
                )
            elif event.type in (EventType.READ_ERROR, EventType.WRITE_ERROR):
                typer.echo(f"[{event.type.value}] {d.get('error', '')}", err=True)
        wire.unsubscribe(queue)

    async def _on_output(data: bytes) -> None:
        await updates.submit(lambda: chunks.append(data))

    consumer_task = asyncio.create_task(_consume_wire())
    drain_task = asyncio.create_task(updates.drain())
    # Let the consumer subscribe before the first event goes out
    await asyncio.sleep(0)

    try:
        session = await manager.spawn(
            config.shell,
            on_output=_on_output,
            env=config.env,
            title="pipe",
            chunk_size=config.chunk_size,
            sticky_escapes=config.sticky_escapes,
        )

        on_write_error = None
        if config.report_write_errors:
            on_write_error = lambda s, e: wire.send_write_error(s.id, str(e))
        translator = KeyTranslator(session, on_write_error=on_write_error)

        for line in commands:
            for ch in line:
                translator.handle(KeyEvent.rune(ch))
            translator.handle(KeyEvent(kind=KeyKind.ENTER, name="enter"))

        await session.completion.wait_async(timeout)
    finally:
        await manager.cleanup(terminate=config.terminate_on_close)
        updates.close()
        await drain_task
        wire.close()
        await consumer_task

    return b"".join(chunks)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
