"""Send a question to Telegram and print the human's reply."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import typer

from cctg import constants, opts
from cctg.cli import app
from cctg.config import get_socket_path
from cctg.core.utils import exit_with_error
from cctg.errors import IPCConnectionError
from cctg.ipc.client import IPCClient
from cctg.ipc.protocol import REQUEST_TYPE_SEND, IPCRequest

LOGGER = logging.getLogger(__name__)


def _read_message(words: list[str] | None) -> str:
    if words:
        return " ".join(words)
    if not sys.stdin.isatty():
        return sys.stdin.read().rstrip("\n")
    return ""


@app.command("send")
def send(
    message: list[str] | None = typer.Argument(  # noqa: B008
        None,
        help="Message to send. Read from stdin when omitted.",
        show_default=False,
    ),
    session: str | None = opts.SESSION,
    timeout: int = opts.TIMEOUT,
) -> None:
    """Send a message to Telegram and wait for the user's reply.

    The session is picked from the current working directory unless
    `--session` is given. When the daemon is not running or cannot be
    reached, a cautious default answer is printed instead of failing.

    Examples:
        cctg send "Should I proceed with the refactor?"

        cctg send --session myproject "Deploy to production?"

        echo "Review this change?" | cctg send

    """
    text = _read_message(message)
    if not text:
        exit_with_error('message required: cctg send "your message" or echo "message" | cctg send')

    client = IPCClient(get_socket_path())
    if not client.is_running():
        typer.echo(constants.NO_REPLY_TEXT)
        return

    request = IPCRequest(
        type=REQUEST_TYPE_SEND,
        session=session or "",
        message=text,
        timeout=timeout,
        workdir=str(Path.cwd()),
    )
    try:
        response = client.send(request)
    except IPCConnectionError as e:
        LOGGER.debug("Daemon request failed: %s", e)
        typer.echo(constants.NO_REPLY_TEXT)
        return

    if not response.success:
        exit_with_error(f"send failed: {response.error}")
    typer.echo(response.reply)
