"""Console and logging helpers shared by the cctg commands."""

from __future__ import annotations

import logging
from typing import Any, NoReturn

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel

console = Console()
err_console = Console(stderr=True)

# Loggers that are too chatty at INFO for a long-running daemon
_NOISY_LOGGERS = ("httpx", "httpcore", "uvicorn.access")


def setup_logging(log_level: str = "info", *, rich_console: Console | None = None) -> None:
    """Configure the root logger to use Rich for consistent, pretty output.

    Uvicorn's own loggers are routed through the same handler so the daemon
    produces one uniform stream.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    handler = RichHandler(
        console=rich_console or err_console,
        show_time=True,
        show_level=True,
        show_path=False,
        rich_tracebacks=True,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for name in ("uvicorn", "uvicorn.error"):
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers.clear()
        uvicorn_logger.addHandler(handler)
        uvicorn_logger.setLevel(level)
        uvicorn_logger.propagate = False

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def print_command_line_args(args: dict[str, Any]) -> None:
    """Print the parsed command line arguments, hiding secrets."""
    lines = []
    for key, value in sorted(args.items()):
        shown = "***" if "token" in key and value else value
        lines.append(f"[bold]{key}[/bold]: {shown}")
    console.print(Panel("\n".join(lines), title="Command line arguments", border_style="dim"))


def exit_with_error(message: str) -> NoReturn:
    """Print an error message and exit with status 1."""
    err_console.print(f"[bold red]Error:[/bold red] {escape(message)}")
    raise typer.Exit(1)


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[bold green]✓[/bold green] {escape(message)}")
