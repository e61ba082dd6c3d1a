"""Learn the chat id of the next message sent to the bot."""

from __future__ import annotations

import typer

from cctg import constants
from cctg.cli import app
from cctg.config import get_socket_path
from cctg.core.utils import err_console, exit_with_error
from cctg.errors import IPCConnectionError
from cctg.ipc.client import IPCClient
from cctg.ipc.protocol import REQUEST_TYPE_GET_CHAT_ID, IPCRequest


@app.command("chat-id")
def chat_id(
    timeout: int = typer.Option(
        constants.DEFAULT_CAPTURE_TIMEOUT,
        "--timeout",
        "-t",
        help="Seconds to wait for a message.",
    ),
) -> None:
    """Print the chat id of the next message any allowed user sends to the bot.

    Send a message to the bot (privately or in a group it was added to) while
    this command waits. Requires a running daemon.
    """
    client = IPCClient(get_socket_path())
    if not client.is_running():
        exit_with_error("daemon is not running, start it with: cctg serve")

    err_console.print(f"[dim]Waiting up to {timeout}s for a message to the bot...[/dim]")
    try:
        response = client.send(IPCRequest(type=REQUEST_TYPE_GET_CHAT_ID, timeout=timeout))
    except IPCConnectionError as e:
        exit_with_error(str(e))

    if not response.success or response.chat_id is None:
        exit_with_error(response.error or "no chat id received")
    typer.echo(response.chat_id)
