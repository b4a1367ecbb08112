"""Configuration — Pydantic models for termide settings."""

from __future__ import annotations

import json
import os
import shlex
from typing import Any

from dotenv import load_dotenv
from pydantic import BaseModel, Field

_TRUE = {"1", "true", "yes", "on"}


class TerminalConfig(BaseModel):
    """Shell pane configuration.

    The three switches at the bottom keep the historical behavior by
    default; each one opts into the alternative.
    """

    shell: list[str] = Field(
        default_factory=lambda: ["bash"],
        description="Command started in the terminal pane (no extra flags by default)",
    )
    env: dict[str, str] = Field(
        default_factory=dict,
        description="Extra environment for the shell, on top of the inherited one",
    )
    chunk_size: int = Field(default=1024, gt=0, description="Max bytes per pty read")
    queue_size: int = Field(
        default=256, gt=0, description="Pending display updates before the pump waits"
    )
    background: str = Field(default="", description="Terminal background color")
    foreground: str = Field(default="", description="Terminal text color")
    sticky_escapes: bool = Field(
        default=False,
        description=(
            "Carry escape-sequence state across pty reads. Off by default: a "
            "sequence split between two reads leaks its tail onto the screen."
        ),
    )
    report_write_errors: bool = Field(
        default=False,
        description="Publish failed pty writes to the output pane instead of dropping them",
    )
    terminate_on_close: bool = Field(
        default=False,
        description="Kill and reap the shell when the application exits",
    )


class EditorConfig(BaseModel):
    """File tree and editor configuration."""

    root: str = Field(default=".", description="Directory shown in the file tree")


class TermideConfig(BaseModel):
    """Top-level termide configuration."""

    terminal: TerminalConfig = Field(default_factory=TerminalConfig)
    editor: EditorConfig = Field(default_factory=EditorConfig)

    @classmethod
    def load(cls, config_path: str | None = None) -> TermideConfig:
        """Load config from file, env vars, or defaults.

        Priority: env vars > config file > defaults.

        Env vars:
            TERMIDE_SHELL                - Shell command line (split like a shell would)
            TERMIDE_CHUNK_SIZE           - Max bytes per pty read
            TERMIDE_STICKY_ESCAPES       - Carry escape state across reads (1/0)
            TERMIDE_REPORT_WRITE_ERRORS  - Show failed pty writes (1/0)
            TERMIDE_TERMINATE_ON_CLOSE   - Kill the shell on exit (1/0)
            TERMIDE_ROOT                 - Directory shown in the file tree
        """
        load_dotenv(override=True)

        config_data: dict[str, Any] = {}

        if config_path and os.path.exists(config_path):
            with open(config_path) as f:
                config_data = json.load(f)

        terminal = config_data.get("terminal", {})

        env_shell = os.environ.get("TERMIDE_SHELL")
        if env_shell:
            terminal["shell"] = shlex.split(env_shell)

        env_chunk_size = os.environ.get("TERMIDE_CHUNK_SIZE")
        if env_chunk_size:
            terminal["chunk_size"] = int(env_chunk_size)

        for key in ("sticky_escapes", "report_write_errors", "terminate_on_close"):
            value = os.environ.get(f"TERMIDE_{key.upper()}")
            if value:
                terminal[key] = value.strip().lower() in _TRUE

        if terminal:
            config_data["terminal"] = terminal

        env_root = os.environ.get("TERMIDE_ROOT")
        if env_root:
            editor = config_data.get("editor", {})
            editor["root"] = env_root
            config_data["editor"] = editor

        return cls.model_validate(config_data)
