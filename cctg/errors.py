"""Exceptions raised by cctg."""

from __future__ import annotations


class CctgError(Exception):
    """Base class for all cctg errors."""


class ConfigError(CctgError):
    """The configuration file is missing or invalid."""


class SessionNotFoundError(CctgError):
    """No configured session matches the requested name or working directory."""

    def __init__(self, message: str = "session not found") -> None:
        """Initialize with the user-facing message."""
        super().__init__(message)


class MessengerError(CctgError):
    """Sending a message through Telegram failed."""


class CaptureTimeoutError(CctgError):
    """No inbound message arrived while waiting to capture a chat id."""

    def __init__(self, message: str = "timeout waiting for message") -> None:
        """Initialize with the user-facing message."""
        super().__init__(message)


class IPCConnectionError(CctgError):
    """The local daemon socket could not be reached or answered garbage."""


class TelegramSetupError(CctgError):
    """A user or chat could not be resolved from recent bot updates."""
