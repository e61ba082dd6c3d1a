"""Manage the session mappings from working directories to Telegram chats."""

from __future__ import annotations

from typing import TYPE_CHECKING, Annotated

import typer
from rich.table import Table

from cctg import opts
from cctg.cli import app as main_app
from cctg.config import SessionConfig, load_config, resolve_config_path
from cctg.core.utils import console, exit_with_error, print_success
from cctg.errors import ConfigError

if TYPE_CHECKING:
    from cctg.config import Config

app = typer.Typer(
    name="session",
    help="""Manage cctg sessions. Sessions map working directories to Telegram chats.

Each session has:

- **name**: unique identifier for the session
- **chat_id**: Telegram chat where messages are sent
- **working_dir**: directory that selects this session for `cctg send`
""",
    rich_markup_mode="markdown",
    no_args_is_help=True,
)
main_app.add_typer(app, name="session")


def _load(config_file: str | None) -> Config:
    try:
        return load_config(config_file)
    except ConfigError as e:
        exit_with_error(f"loading config: {e}")


def _save(config: Config, config_file: str | None) -> None:
    config.save(resolve_config_path(config_file))


def _print_sessions(config: Config) -> None:
    if not config.sessions:
        console.print("no sessions configured")
        return
    table = Table(show_header=True, header_style="bold")
    table.add_column("Name", style="cyan")
    table.add_column("Chat ID", justify="right")
    table.add_column("Working directory", style="dim")
    for session in config.sessions:
        table.add_row(session.name, str(session.chat_id), session.working_dir)
    console.print(table)


@app.command("list")
def list_sessions(config_file: str | None = opts.CONFIG_FILE) -> None:
    """List all configured sessions."""
    _print_sessions(_load(config_file))


@main_app.command("list")
def list_cmd(config_file: str | None = opts.CONFIG_FILE) -> None:
    """List configured sessions."""
    _print_sessions(_load(config_file))


@app.command("create")
def create(
    name: Annotated[str | None, typer.Option("--name", help="Session name")] = None,
    chat_id: Annotated[int | None, typer.Option("--chat-id", help="Telegram chat ID")] = None,
    working_dir: Annotated[
        str | None,
        typer.Option("--working-dir", help="Working directory path"),
    ] = None,
    config_file: str | None = opts.CONFIG_FILE,
) -> None:
    """Create a new session that maps a working directory to a Telegram chat.

    Prompts for any value not given as a flag.

    Examples:
        cctg session create --name api --chat-id 123456789 --working-dir /path/to/project

    """
    config = _load(config_file)

    name = (name or typer.prompt("Session name")).strip()
    if not name:
        exit_with_error("session name is required")
    if config.find_session_by_name(name) is not None:
        exit_with_error(f"session {name!r} already exists")

    if chat_id is None:
        chat_id = typer.prompt("Chat ID", type=int)
    if not chat_id:
        exit_with_error("chat ID is required")

    working_dir = (working_dir or typer.prompt("Working directory")).strip()
    if not working_dir:
        exit_with_error("working directory is required")

    config.sessions.append(SessionConfig(name=name, chat_id=chat_id, working_dir=working_dir))
    _save(config, config_file)
    print_success(f"session {name!r} created")


@app.command("edit")
def edit(
    session_name: Annotated[str, typer.Argument(help="Name of the session to edit")],
    name: Annotated[str | None, typer.Option("--name", help="New session name")] = None,
    chat_id: Annotated[int | None, typer.Option("--chat-id", help="New Telegram chat ID")] = None,
    working_dir: Annotated[
        str | None,
        typer.Option("--working-dir", help="New working directory path"),
    ] = None,
    config_file: str | None = opts.CONFIG_FILE,
) -> None:
    """Edit an existing session.

    Without flags, prompts for each value showing the current one; press
    Enter to keep it.

    Examples:
        cctg session edit api --chat-id 987654321

        cctg session edit api --name api-v2

    """
    config = _load(config_file)
    session = config.find_session_by_name(session_name)
    if session is None:
        exit_with_error(f"session {session_name!r} not found")

    if name is None and chat_id is None and working_dir is None:
        name = typer.prompt("Name", default=session.name)
        chat_id = typer.prompt("Chat ID", default=session.chat_id, type=int)
        working_dir = typer.prompt("Working directory", default=session.working_dir)

    if name is not None and name != session.name:
        if config.find_session_by_name(name) is not None:
            exit_with_error(f"session {name!r} already exists")
        session.name = name
    if chat_id is not None:
        session.chat_id = chat_id
    if working_dir is not None:
        session.working_dir = working_dir

    _save(config, config_file)
    print_success(f"session {session.name!r} updated")


@app.command("delete")
def delete(
    session_name: Annotated[str, typer.Argument(help="Name of the session to delete")],
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Skip confirmation prompt"),
    ] = False,
    config_file: str | None = opts.CONFIG_FILE,
) -> None:
    """Delete a session from the configuration."""
    config = _load(config_file)
    session = config.find_session_by_name(session_name)
    if session is None:
        exit_with_error(f"session {session_name!r} not found")

    if not force and not typer.confirm(f"Delete session {session_name!r}?"):
        console.print("cancelled")
        return

    config.sessions.remove(session)
    _save(config, config_file)
    print_success(f"session {session_name!r} deleted")
