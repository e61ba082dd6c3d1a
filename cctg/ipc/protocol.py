"""Request and response models exchanged over the daemon socket."""

from __future__ import annotations

from pydantic import BaseModel

REQUEST_TYPE_SEND = "send"
REQUEST_TYPE_GET_CHAT_ID = "get_chat_id"

REQUEST_PATH = "/request"
HEALTH_PATH = "/health"


class IPCRequest(BaseModel):
    """One operation asked of the daemon."""

    type: str
    session: str = ""
    message: str = ""
    timeout: int = 0
    workdir: str = ""


class IPCResponse(BaseModel):
    """The daemon's single answer to an IPCRequest."""

    success: bool
    reply: str = ""
    chat_id: int | None = None
    error: str | None = None

    @classmethod
    def failure(cls, error: str) -> IPCResponse:
        """Build a failed response carrying ``error``."""
        return cls(success=False, error=error)


class HealthResponse(BaseModel):
    """Response model for the health check."""

    status: str
    version: str
