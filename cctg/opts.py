"""Shared Typer options for the cctg commands."""

from __future__ import annotations

import typer

CONFIG_FILE: str | None = typer.Option(
    None,
    "--config",
    help="Path to the YAML config file (default: ./config.yaml, then ~/.config/cctg/config.yaml).",
)
SESSION: str | None = typer.Option(
    None,
    "--session",
    "-s",
    help="Session name. Defaults to the session mapped to the current directory.",
)
TIMEOUT: int = typer.Option(
    0,
    "--timeout",
    "-t",
    help="Seconds to wait for a reply (0 uses the configured default).",
)
LOG_LEVEL: str = typer.Option(
    "info",
    "--log-level",
    help="Logging level (debug, info, warning, error).",
)
PRINT_ARGS: bool = typer.Option(
    False,  # noqa: FBT003
    "--print-args",
    help="Print the command line arguments, including variables taken from the configuration file.",
)
