"""Interactive first-time setup."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from pydantic import ValidationError

from cctg import constants
from cctg.cli import app
from cctg.config import Config, SessionConfig, TelegramConfig, write_env_file
from cctg.core.utils import console, exit_with_error, print_success
from cctg.errors import TelegramSetupError
from cctg.telegram.setup import detect_group_chat, resolve_username


def _ask_user_id(token: str, username: str | None) -> int:
    """Resolve the allowed user from a flag, an @username or a typed id."""
    if username:
        return resolve_username(token, username)
    answer = typer.prompt("Your Telegram user ID or @username").strip()
    if answer.startswith("@"):
        console.print("\nTo resolve the username, send /start to your bot first.")
        typer.prompt("Press Enter after sending /start to the bot", default="", show_default=False)
        return resolve_username(token, answer)
    try:
        return int(answer)
    except ValueError:
        exit_with_error(f"invalid user ID: {answer}")


def _ask_chat_id(token: str, user_id: int) -> int:
    console.print("\nChat ID options:")
    console.print(f"  - Press Enter to use the private chat ({user_id})")
    console.print(
        "  - Type 'group' to detect from a group (add the bot and send a message there first)",
    )
    console.print("  - Enter a chat ID directly")
    answer = typer.prompt("Chat ID", default="", show_default=False).strip()
    if not answer:
        return user_id
    if answer.lower() == "group":
        chat_id = detect_group_chat(token)
        console.print(f"Detected group chat ID: {chat_id}")
        return chat_id
    try:
        return int(answer)
    except ValueError:
        exit_with_error(f"invalid chat ID: {answer}")


@app.command("init")
def init(
    token: Annotated[str | None, typer.Option("--token", help="Telegram bot token")] = None,
    user_id: Annotated[
        int | None,
        typer.Option("--user-id", help="Your Telegram user ID (numeric)"),
    ] = None,
    username: Annotated[
        str | None,
        typer.Option("--username", help="Your Telegram username (e.g., @username)"),
    ] = None,
    session_name: Annotated[
        str | None,
        typer.Option("--session-name", help="Session name"),
    ] = None,
    chat_id: Annotated[int | None, typer.Option("--chat-id", help="Telegram chat ID")] = None,
    working_dir: Annotated[
        str | None,
        typer.Option("--working-dir", help="Working directory for the session"),
    ] = None,
    timeout: Annotated[
        int | None,
        typer.Option("--timeout", help=f"Timeout in seconds (default {constants.DEFAULT_TIMEOUT})"),
    ] = None,
) -> None:
    """Create `~/.config/cctg/.env` and `config.yaml`, prompting for missing values."""
    token = (token or typer.prompt("Bot token (from @BotFather)", hide_input=True)).strip()
    if not token:
        exit_with_error("bot token is required")

    try:
        if user_id is None:
            user_id = _ask_user_id(token, username)
        if chat_id is None:
            chat_id = _ask_chat_id(token, user_id)
    except TelegramSetupError as e:
        exit_with_error(str(e))
    console.print(f"User ID: {user_id}")

    if session_name is None:
        session_name = typer.prompt("Session name (e.g., myproject)", default="default")
    if working_dir is None:
        working_dir = typer.prompt("Working directory", default=str(Path.cwd()))
    if timeout is None:
        timeout = typer.prompt("Timeout in seconds", default=constants.DEFAULT_TIMEOUT, type=int)

    try:
        config = Config(
            telegram=TelegramConfig(allowed_users=[user_id]),
            timeout=timeout,
            sessions=[SessionConfig(name=session_name, chat_id=chat_id, working_dir=working_dir)],
        )
    except ValidationError as e:
        exit_with_error(f"invalid configuration: {e}")
    env_path = write_env_file(token)
    print_success(f"Created {env_path}")
    config_path = config.save()
    print_success(f"Created {config_path}")
    console.print("\nConfiguration complete. Run [bold]cctg serve[/bold] to start the daemon.")
