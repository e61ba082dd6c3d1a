"""FastAPI application served over the daemon's Unix socket."""

from __future__ import annotations

import contextlib
import logging
import os
import socket
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from cctg import __version__
from cctg.ipc.protocol import HEALTH_PATH, REQUEST_PATH, HealthResponse, IPCRequest, IPCResponse

if TYPE_CHECKING:
    from pathlib import Path

    from cctg.daemon.router import DaemonRouter
    from cctg.telegram.bot import TelegramBot

LOGGER = logging.getLogger(__name__)


def create_app(router: DaemonRouter, bot: TelegramBot | None = None) -> FastAPI:
    """Create the daemon app; its lifespan runs the Telegram listener."""

    @asynccontextmanager
    async def lifespan(_app: FastAPI):  # noqa: ANN202
        if bot is not None:
            await bot.start()
        yield
        if bot is not None:
            LOGGER.info("Stopping Telegram listener...")
            await bot.stop()

    app = FastAPI(title="cctg daemon", version=__version__, lifespan=lifespan)

    @app.exception_handler(RequestValidationError)
    async def invalid_request(_request: Request, exc: RequestValidationError) -> JSONResponse:
        LOGGER.warning("Rejected malformed request: %s", exc.errors())
        return JSONResponse(
            status_code=400,
            content=IPCResponse.failure("invalid request format").model_dump(),
        )

    @app.get(HEALTH_PATH, response_model=HealthResponse)
    async def health_check() -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse(status="healthy", version=__version__)

    @app.post(REQUEST_PATH, response_model=IPCResponse)
    async def handle_request(request: IPCRequest) -> IPCResponse:
        """Run one send or capture operation to completion."""
        return await router.handle(request)

    return app


def bind_socket(socket_path: Path) -> socket.socket:
    """Bind a fresh Unix socket that only the current user can connect to."""
    socket_path.parent.mkdir(parents=True, mode=0o700, exist_ok=True)
    with contextlib.suppress(FileNotFoundError):
        socket_path.unlink()
    sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
    sock.bind(str(socket_path))
    os.chmod(socket_path, 0o600)  # noqa: PTH101
    return sock


def run_server(app: FastAPI, socket_path: Path, log_level: str = "info") -> None:
    """Serve ``app`` on ``socket_path`` until interrupted, then remove the socket."""
    import uvicorn  # noqa: PLC0415

    sock = bind_socket(socket_path)
    LOGGER.info("Daemon started, socket: %s", socket_path)
    config = uvicorn.Config(
        app,
        log_level=log_level.lower(),
        log_config=None,
        timeout_graceful_shutdown=5,
    )
    server = uvicorn.Server(config)
    try:
        server.run(sockets=[sock])
    finally:
        sock.close()
        with contextlib.suppress(FileNotFoundError):
            socket_path.unlink()
