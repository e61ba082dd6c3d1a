"""Client side of the daemon socket, used by the short-lived CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError

from cctg import constants
from cctg.errors import IPCConnectionError
from cctg.ipc.protocol import HEALTH_PATH, REQUEST_PATH, IPCRequest, IPCResponse

if TYPE_CHECKING:
    from pathlib import Path

# The host part is ignored when talking over a Unix socket
_BASE_URL = "http://cctg"


class IPCClient:
    """Sends one request per connection to the daemon listening on ``socket_path``."""

    def __init__(self, socket_path: Path) -> None:
        """Initialize the client for the given socket."""
        self._socket_path = socket_path

    @property
    def socket_path(self) -> Path:
        """Path of the daemon socket."""
        return self._socket_path

    def _client(self, timeout: httpx.Timeout) -> httpx.Client:
        transport = httpx.HTTPTransport(uds=str(self._socket_path))
        return httpx.Client(transport=transport, base_url=_BASE_URL, timeout=timeout)

    def send(self, request: IPCRequest) -> IPCResponse:
        """Send ``request`` and block until the daemon answers.

        Raises:
            IPCConnectionError: The daemon could not be reached or answered garbage.

        """
        wait = request.timeout if request.timeout > 0 else None
        read_timeout = None if wait is None else wait + constants.IPC_READ_MARGIN
        timeout = httpx.Timeout(read_timeout, connect=constants.IPC_CONNECT_TIMEOUT)
        try:
            with self._client(timeout) as client:
                response = client.post(REQUEST_PATH, json=request.model_dump())
        except httpx.HTTPError as e:
            msg = f"connecting to daemon: {e.__class__.__name__}"
            raise IPCConnectionError(msg) from e
        try:
            return IPCResponse.model_validate_json(response.content)
        except ValidationError as e:
            msg = f"parsing response: HTTP {response.status_code}"
            raise IPCConnectionError(msg) from e

    def is_running(self) -> bool:
        """Whether a daemon answers health checks on the socket."""
        if not self._socket_path.exists():
            return False
        timeout = httpx.Timeout(constants.IPC_PROBE_TIMEOUT)
        try:
            with self._client(timeout) as client:
                response = client.get(HEALTH_PATH)
        except httpx.HTTPError:
            return False
        return response.is_success
