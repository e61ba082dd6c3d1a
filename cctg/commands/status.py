"""Report whether the daemon is running."""

from __future__ import annotations

from cctg.cli import app
from cctg.config import get_socket_path
from cctg.core.utils import console
from cctg.ipc.client import IPCClient


@app.command("status")
def status() -> None:
    """Check if the daemon is running."""
    if IPCClient(get_socket_path()).is_running():
        console.print("daemon is running")
    else:
        console.print("daemon is not running")
