"""Ask a human over Telegram from the command line and wait for the reply."""

from __future__ import annotations

__version__ = "0.1.0"
