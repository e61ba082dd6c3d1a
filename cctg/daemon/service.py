"""Wire the store, Telegram bot, router and socket server into one daemon."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from cctg.correlation.store import CorrelationStore
from cctg.daemon.router import DaemonRouter
from cctg.ipc.server import create_app, run_server
from cctg.telegram.bot import TelegramBot

if TYPE_CHECKING:
    from pathlib import Path

    from fastapi import FastAPI

    from cctg.config import Config

LOGGER = logging.getLogger(__name__)


def build_daemon(config: Config) -> FastAPI:
    """Create the daemon app with its own correlation store."""
    store = CorrelationStore()
    bot = TelegramBot(config, store)
    router = DaemonRouter(config, store, bot)
    LOGGER.info(
        "Configured %d session(s), %d allowed user(s), default timeout %ds",
        len(config.sessions),
        len(config.telegram.allowed_users),
        config.timeout,
    )
    return create_app(router, bot)


def run_daemon(config: Config, socket_path: Path, log_level: str = "info") -> None:
    """Run the daemon in the foreground until SIGINT/SIGTERM."""
    run_server(build_daemon(config), socket_path, log_level)
