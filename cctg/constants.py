"""Default configuration settings for the cctg package."""

from __future__ import annotations

from pathlib import Path

# --- Paths ---
CONFIG_DIR = Path.home() / ".config" / "cctg"
CONFIG_FILE_NAME = "config.yaml"
ENV_FILE_NAME = ".env"
SOCKET_FILE_NAME = "cctg.sock"
SOCKET_ENV_VAR = "CCTG_SOCKET"

# --- Timeouts (seconds) ---
DEFAULT_TIMEOUT = 300
DEFAULT_CAPTURE_TIMEOUT = 60
IPC_CONNECT_TIMEOUT = 5.0
IPC_PROBE_TIMEOUT = 1.0
# Extra read time on top of the requested wait, so the daemon answers first
IPC_READ_MARGIN = 30.0

# --- Telegram ---
TELEGRAM_API_URL = "https://api.telegram.org"
TELEGRAM_TOKEN_ENV_VAR = "TELEGRAM_BOT_TOKEN"  # noqa: S105
MAX_MESSAGE_LENGTH = 4096
POLL_TIMEOUT = 60
POLL_RETRY_DELAY = 5.0

# --- Fixed texts ---
NO_REPLY_TEXT = (
    "user didn't reply go ahead with caution, don't make huge refactor, "
    "check what you are doing"
)
TIMEOUT_NOTICE_TEXT = "timeout: no reply received"
DAEMON_STARTED_TEXT = "cctg daemon started"
DAEMON_STOPPED_TEXT = "cctg daemon stopped"
