"""Shared CLI functionality for cctg."""

from __future__ import annotations

import typer

from cctg.core.utils import console

app = typer.Typer(
    name="cctg",
    help="Ask a human over Telegram from the command line and wait for the reply.",
    add_completion=True,
    rich_markup_mode="markdown",
)


@app.callback(invoke_without_command=True)
def main(ctx: typer.Context) -> None:
    """Bridge command-line tools with a human on Telegram."""
    if ctx.invoked_subcommand is None:
        console.print("[bold red]No command specified.[/bold red]")
        console.print("[bold yellow]Running --help for your convenience.[/bold yellow]")
        console.print(ctx.get_help())
        raise typer.Exit


# Import commands from other modules to register them
from cctg.commands import chat_id, init, send, serve, session, status  # noqa: E402, F401
