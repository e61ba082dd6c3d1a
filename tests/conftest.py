"""Shared test fixtures and configuration."""

from __future__ import annotations

import contextlib
from typing import TYPE_CHECKING

import pytest

from cctg import config as config_module
from cctg.config import Config, SessionConfig, TelegramConfig
from cctg.correlation.store import CorrelationStore
from cctg.daemon.router import DaemonRouter
from cctg.errors import MessengerError

if TYPE_CHECKING:
    from pathlib import Path


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    """Set default timeout for all tests."""
    for item in items:
        with contextlib.suppress(AttributeError):
            item.add_marker(pytest.mark.timeout(3))


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the user's real ~/.config/cctg and bot token out of the tests."""
    monkeypatch.delenv("TELEGRAM_BOT_TOKEN", raising=False)
    monkeypatch.delenv("CCTG_SOCKET", raising=False)
    monkeypatch.setattr(config_module, "ENV_PATH", tmp_path / "home" / ".env")
    monkeypatch.setattr(config_module, "CONFIG_PATH", tmp_path / "home" / "config.yaml")
    monkeypatch.setattr(config_module, "CONFIG_PATH_2", tmp_path / "cwd" / "config.yaml")


class FakeMessenger:
    """Records outbound traffic instead of talking to Telegram."""

    def __init__(self) -> None:
        self.sent: list[tuple[int, str, int]] = []
        self.timeouts: list[int] = []
        self.fail = False
        self.fail_timeout_notice = False
        self._next_id = 100

    @property
    def last_message_id(self) -> int:
        return self.sent[-1][2]

    async def send_message(self, chat_id: int, text: str) -> int:
        if self.fail:
            msg = "sendMessage failed: Unauthorized"
            raise MessengerError(msg)
        self._next_id += 1
        self.sent.append((chat_id, text, self._next_id))
        return self._next_id

    async def notify_timeout(self, chat_id: int) -> None:
        if self.fail_timeout_notice:
            msg = "sendMessage failed: Too Many Requests"
            raise MessengerError(msg)
        self.timeouts.append(chat_id)


@pytest.fixture
def cctg_config() -> Config:
    """A config with two sessions and one allowed user."""
    return Config(
        telegram=TelegramConfig(bot_token="123:abc", allowed_users=[7]),
        timeout=1,
        sessions=[
            SessionConfig(name="proj", chat_id=42, working_dir="/work/proj"),
            SessionConfig(name="ops", chat_id=-1001, working_dir="/work/ops"),
        ],
    )


@pytest.fixture
def store() -> CorrelationStore:
    """A fresh, isolated correlation store."""
    return CorrelationStore()


@pytest.fixture
def messenger() -> FakeMessenger:
    """A messenger that records what would be sent."""
    return FakeMessenger()


@pytest.fixture
def router(cctg_config: Config, store: CorrelationStore, messenger: FakeMessenger) -> DaemonRouter:
    """A router wired to the fake messenger."""
    return DaemonRouter(cctg_config, store, messenger)
