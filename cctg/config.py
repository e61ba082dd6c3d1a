"""Pydantic models for the cctg configuration and config file loading."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

from cctg import constants
from cctg.errors import ConfigError

CONFIG_PATH = constants.CONFIG_DIR / constants.CONFIG_FILE_NAME
CONFIG_PATH_2 = Path(constants.CONFIG_FILE_NAME)
ENV_PATH = constants.CONFIG_DIR / constants.ENV_FILE_NAME


# --- Pydantic Models for Configuration ---


class TelegramConfig(BaseModel):
    """Bot credentials and the users allowed to answer."""

    bot_token: str = ""
    allowed_users: list[int] = Field(default_factory=list)


class SessionConfig(BaseModel):
    """Maps a working directory to the Telegram chat that receives its questions."""

    name: str
    chat_id: int
    working_dir: str = ""

    @field_validator("working_dir", mode="before")
    @classmethod
    def _expand_user_path(cls, v: str | None) -> str:
        if v:
            return str(Path(v).expanduser())
        return ""


class Config(BaseModel):
    """Top-level cctg configuration."""

    telegram: TelegramConfig = Field(default_factory=TelegramConfig)
    timeout: int = constants.DEFAULT_TIMEOUT
    sessions: list[SessionConfig] = Field(default_factory=list)

    @field_validator("timeout")
    @classmethod
    def _positive_timeout(cls, v: int) -> int:
        if v <= 0:
            msg = f"timeout must be positive, got {v}"
            raise ValueError(msg)
        return v

    def find_session_by_name(self, name: str) -> SessionConfig | None:
        """Return the session called ``name``, if any."""
        for session in self.sessions:
            if session.name == name:
                return session
        return None

    def find_session_by_workdir(self, workdir: str) -> SessionConfig | None:
        """Return the session whose working directory is exactly ``workdir``."""
        target = _normalize_dir(workdir)
        for session in self.sessions:
            if session.working_dir and _normalize_dir(session.working_dir) == target:
                return session
        return None

    def find_session(self, name: str | None, workdir: str | None) -> SessionConfig | None:
        """Select a session by explicit name, else by the caller's working directory."""
        if name:
            return self.find_session_by_name(name)
        if workdir:
            return self.find_session_by_workdir(workdir)
        return None

    def save(self, config_path: Path | None = None) -> Path:
        """Write the configuration as YAML, leaving the bot token to the .env file."""
        path = config_path or CONFIG_PATH
        path.parent.mkdir(parents=True, mode=0o700, exist_ok=True)
        data = self.model_dump(mode="json")
        data["telegram"].pop("bot_token", None)
        path.write_text(yaml.safe_dump(data, sort_keys=False))
        path.chmod(0o600)
        return path


def _normalize_dir(path: str) -> str:
    return os.path.normpath(os.path.expanduser(path))  # noqa: PTH111


# --- Config File Loading ---


def resolve_config_path(config_path_str: str | None = None) -> Path:
    """Determine which config file to use."""
    if config_path_str:
        return Path(config_path_str).expanduser()
    if CONFIG_PATH_2.exists():
        return CONFIG_PATH_2
    return CONFIG_PATH


def load_env_file(env_path: Path | None = None) -> None:
    """Load secrets from the cctg .env file without overriding the environment."""
    path = env_path or ENV_PATH
    if path.exists():
        load_dotenv(path, override=False)


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        with path.open() as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as e:
        msg = f"Error parsing config file {path}: {e}"
        raise ConfigError(msg) from e
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        msg = f"Config file {path} must contain a mapping"
        raise ConfigError(msg)
    return raw


def load_config(
    config_path_str: str | None = None,
    *,
    require_token: bool = False,
) -> Config:
    """Load and validate the YAML configuration file.

    The bot token may come from the ``TELEGRAM_BOT_TOKEN`` environment variable
    (usually via ``~/.config/cctg/.env``), which takes precedence over the file.
    """
    load_env_file()
    config_path = resolve_config_path(config_path_str)
    if not config_path.exists():
        msg = f"config file not found at {config_path}"
        raise ConfigError(msg)

    raw = _read_yaml(config_path)
    token = os.environ.get(constants.TELEGRAM_TOKEN_ENV_VAR)
    if token:
        raw.setdefault("telegram", {})
        if raw["telegram"] is None:
            raw["telegram"] = {}
        raw["telegram"]["bot_token"] = token

    try:
        cfg = Config.model_validate(raw)
    except ValidationError as e:
        msg = f"Invalid config file {config_path}: {e}"
        raise ConfigError(msg) from e

    if require_token and not cfg.telegram.bot_token:
        msg = "telegram.bot_token is required"
        raise ConfigError(msg)
    return cfg


def write_env_file(token: str, env_path: Path | None = None) -> Path:
    """Store the bot token in the cctg .env file with owner-only permissions."""
    path = env_path or ENV_PATH
    path.parent.mkdir(parents=True, mode=0o700, exist_ok=True)
    path.write_text(f"{constants.TELEGRAM_TOKEN_ENV_VAR}={token}\n")
    path.chmod(0o600)
    return path


def get_socket_path() -> Path:
    """Return the daemon socket path, honouring ``CCTG_SOCKET``."""
    override = os.environ.get(constants.SOCKET_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return constants.CONFIG_DIR / constants.SOCKET_FILE_NAME
