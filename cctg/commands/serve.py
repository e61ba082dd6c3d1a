"""Run the cctg daemon."""

from __future__ import annotations

from cctg import opts
from cctg.cli import app
from cctg.config import get_socket_path, load_config
from cctg.core.utils import console, exit_with_error, print_command_line_args, setup_logging
from cctg.errors import ConfigError


@app.command("serve")
def serve(
    config_file: str | None = opts.CONFIG_FILE,
    log_level: str = opts.LOG_LEVEL,
    print_args: bool = opts.PRINT_ARGS,
) -> None:
    """Run the Telegram bot daemon in the foreground.

    The daemon listens for replies from the allowed Telegram users and
    answers `cctg send` requests over a Unix socket in `~/.config/cctg/`.
    Stop it with Ctrl+C (SIGINT) or SIGTERM.
    """
    if print_args:
        print_command_line_args(locals())

    try:
        config = load_config(config_file, require_token=True)
    except ConfigError as e:
        exit_with_error(f"loading config: {e}")

    setup_logging(log_level)
    socket_path = get_socket_path()
    console.print(f"[bold green]Starting cctg daemon on {socket_path}[/bold green]")

    from cctg.daemon.service import run_daemon  # noqa: PLC0415

    run_daemon(config, socket_path, log_level)
