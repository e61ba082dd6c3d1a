"""Telegram Bot API client: sends questions and feeds replies into the store."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import httpx

from cctg import constants
from cctg.correlation.matcher import handle_inbound
from cctg.errors import MessengerError

if TYPE_CHECKING:
    from cctg.config import Config
    from cctg.correlation.store import CorrelationStore, MatchOutcome

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InboundMessage:
    """A text message received by the bot."""

    chat_id: int
    sender_id: int
    text: str
    message_id: int
    reply_to: int | None = None

    @classmethod
    def from_update(cls, update: dict[str, Any]) -> InboundMessage | None:
        """Extract the text message of a ``getUpdates`` entry, if it has one."""
        message = update.get("message")
        if not message or "text" not in message or "from" not in message:
            return None
        reply_to = message.get("reply_to_message")
        return cls(
            chat_id=message["chat"]["id"],
            sender_id=message["from"]["id"],
            text=message["text"],
            message_id=message["message_id"],
            reply_to=reply_to["message_id"] if reply_to else None,
        )


def _describe_error(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        data = None
    description = data.get("description") if isinstance(data, dict) else None
    return description or f"HTTP {response.status_code}"


class TelegramBot:
    """Long-polls Telegram for replies and sends questions to session chats."""

    def __init__(
        self,
        config: Config,
        store: CorrelationStore,
        *,
        client: httpx.AsyncClient | None = None,
        api_url: str = constants.TELEGRAM_API_URL,
        retry_delay: float = constants.POLL_RETRY_DELAY,
    ) -> None:
        """Initialize the bot; no network traffic happens until ``start``."""
        self._config = config
        self._store = store
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=constants.POLL_TIMEOUT + 10)
        self._base_url = f"{api_url}/bot{config.telegram.bot_token}"
        self._retry_delay = retry_delay
        self._offset = 0
        self._poll_task: asyncio.Task[None] | None = None

    async def _call(self, method: str, payload: dict[str, Any]) -> Any:
        """Invoke a Bot API method and return its ``result``."""
        try:
            response = await self._client.post(f"{self._base_url}/{method}", json=payload)
        except httpx.HTTPError as e:
            msg = f"{method} failed: {e.__class__.__name__}"
            raise MessengerError(msg) from e
        if response.is_error:
            msg = f"{method} failed: {_describe_error(response)}"
            raise MessengerError(msg)
        try:
            data = response.json()
        except ValueError as e:
            msg = f"{method} failed: response is not JSON"
            raise MessengerError(msg) from e
        if not isinstance(data, dict):
            msg = f"{method} failed: unexpected response"
            raise MessengerError(msg)
        if not data.get("ok"):
            msg = f"{method} failed: {data.get('description', 'unknown error')}"
            raise MessengerError(msg)
        return data["result"]

    # --- Outbound ---

    async def send_message(self, chat_id: int, text: str) -> int:
        """Send ``text`` to ``chat_id`` and return Telegram's message id."""
        if len(text) > constants.MAX_MESSAGE_LENGTH:
            msg = f"message exceeds {constants.MAX_MESSAGE_LENGTH} character limit"
            raise MessengerError(msg)
        result = await self._call("sendMessage", {"chat_id": chat_id, "text": text})
        return result["message_id"]

    async def notify_timeout(self, chat_id: int) -> None:
        """Tell the chat that the waiting question lapsed."""
        await self.send_message(chat_id, constants.TIMEOUT_NOTICE_TEXT)

    async def notify_all_sessions(self, text: str) -> None:
        """Send ``text`` to every configured session chat, logging failures."""
        for session in self._config.sessions:
            try:
                await self.send_message(session.chat_id, text)
            except MessengerError as e:
                logger.warning("Failed to notify chat %d: %s", session.chat_id, e)

    # --- Inbound ---

    def is_allowed_user(self, user_id: int) -> bool:
        """Only configured users may answer questions."""
        return user_id in self._config.telegram.allowed_users

    def handle_message(self, message: InboundMessage) -> MatchOutcome | None:
        """Pass a message from an allowed user to the reply matcher."""
        if not self.is_allowed_user(message.sender_id):
            logger.debug("Ignoring message from user %d", message.sender_id)
            return None
        return handle_inbound(self._store, message.chat_id, message.text, message.reply_to)

    async def poll_once(self, timeout: int = constants.POLL_TIMEOUT) -> int:
        """Fetch one batch of updates and process it. Returns the batch size."""
        updates = await self._call(
            "getUpdates",
            {"offset": self._offset, "timeout": timeout, "allowed_updates": ["message"]},
        )
        for update in updates:
            self._offset = max(self._offset, update["update_id"] + 1)
            message = InboundMessage.from_update(update)
            if message is not None:
                self.handle_message(message)
        return len(updates)

    async def run(self) -> None:
        """Poll until cancelled; every failure is logged and retried after a delay."""
        while True:
            try:
                await self.poll_once()
            except MessengerError as e:
                logger.warning("Polling Telegram failed: %s (retrying in %ss)", e, self._retry_delay)
                await asyncio.sleep(self._retry_delay)
            except Exception:
                logger.exception(
                    "Unexpected error while polling Telegram (retrying in %ss)",
                    self._retry_delay,
                )
                await asyncio.sleep(self._retry_delay)

    async def start(self) -> None:
        """Announce the daemon and start the polling task."""
        await self.notify_all_sessions(constants.DAEMON_STARTED_TEXT)
        if self._poll_task is None:
            self._poll_task = asyncio.create_task(self.run())
            logger.info("Started Telegram listener")

    async def stop(self) -> None:
        """Stop polling, announce the shutdown and release the HTTP client."""
        if self._poll_task is not None:
            self._poll_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._poll_task
            self._poll_task = None
        await self.notify_all_sessions(constants.DAEMON_STOPPED_TEXT)
        if self._owns_client:
            await self._client.aclose()
