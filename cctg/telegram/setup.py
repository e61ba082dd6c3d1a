"""Look up user and chat ids from the bot's recent updates during ``cctg init``."""

from __future__ import annotations

from typing import Any

import httpx

from cctg import constants
from cctg.errors import TelegramSetupError

_GROUP_CHAT_TYPES = ("group", "supergroup")


def _get_updates(token: str, client: httpx.Client | None = None) -> list[dict[str, Any]]:
    url = f"{constants.TELEGRAM_API_URL}/bot{token}/getUpdates"
    http = client or httpx.Client(timeout=10.0)
    try:
        response = http.get(url)
    except httpx.HTTPError as e:
        msg = f"calling telegram API: {e.__class__.__name__}"
        raise TelegramSetupError(msg) from e
    finally:
        if client is None:
            http.close()
    try:
        data = response.json()
    except ValueError as e:
        msg = "parsing response from telegram API"
        raise TelegramSetupError(msg) from e
    if not data.get("ok"):
        msg = "telegram API error"
        raise TelegramSetupError(msg)
    return data.get("result", [])


def resolve_username(token: str, username: str, client: httpx.Client | None = None) -> int:
    """Return the numeric id of ``@username`` from messages sent to the bot."""
    username = username.removeprefix("@")
    for update in _get_updates(token, client):
        sender = update.get("message", {}).get("from", {})
        if sender.get("username", "").lower() == username.lower():
            return sender["id"]
    msg = f"username @{username} not found in recent messages - send /start to the bot first"
    raise TelegramSetupError(msg)


def detect_group_chat(token: str, client: httpx.Client | None = None) -> int:
    """Return the id of the first group chat the bot has seen a message in."""
    for update in _get_updates(token, client):
        chat = update.get("message", {}).get("chat", {})
        if chat.get("type") in _GROUP_CHAT_TYPES:
            return chat["id"]
    msg = "no group chat found - add bot to a group and send a message first"
    raise TelegramSetupError(msg)
