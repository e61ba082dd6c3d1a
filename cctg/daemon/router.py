"""Entry point for daemon requests: send a question and wait, or capture a chat id."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

from cctg import constants
from cctg.correlation.arbiter import wait_for_capture, wait_for_reply
from cctg.errors import CctgError, MessengerError, SessionNotFoundError
from cctg.ipc.protocol import (
    REQUEST_TYPE_GET_CHAT_ID,
    REQUEST_TYPE_SEND,
    IPCRequest,
    IPCResponse,
)

if TYPE_CHECKING:
    from cctg.config import Config
    from cctg.correlation.store import CorrelationStore

logger = logging.getLogger(__name__)


class Messenger(Protocol):
    """The outbound half of the messaging provider."""

    async def send_message(self, chat_id: int, text: str) -> int:
        """Send ``text`` and return the provider's message id."""
        ...

    async def notify_timeout(self, chat_id: int) -> None:
        """Tell the chat that a question lapsed."""
        ...


class DaemonRouter:
    """Drives the correlation store for each local request."""

    def __init__(self, config: Config, store: CorrelationStore, messenger: Messenger) -> None:
        """Initialize the router with its collaborators."""
        self._config = config
        self._store = store
        self._messenger = messenger

    @property
    def store(self) -> CorrelationStore:
        """The correlation store this router drives."""
        return self._store

    async def send_and_wait(
        self,
        message: str,
        *,
        session: str | None = None,
        workdir: str | None = None,
        timeout: float = 0,
    ) -> str:
        """Send ``message`` to the selected session's chat and wait for the answer.

        Returns the reply (with earlier buffered replies prepended), or the
        buffered replies / no-reply text when the wait lapses.

        Raises:
            SessionNotFoundError: No session matches ``session`` or ``workdir``.
            MessengerError: Telegram rejected the message; nothing was registered.

        """
        selected = self._config.find_session(session, workdir)
        if selected is None:
            raise SessionNotFoundError
        chat_id = selected.chat_id

        queued = self._store.drain_buffered(chat_id)
        try:
            message_id = await self._messenger.send_message(chat_id, message)
        except MessengerError:
            self._store.requeue_buffered(chat_id, queued)
            raise
        question = self._store.register(chat_id, message, external_ref=message_id)
        logger.info(
            "Sent question %d to session %r (chat %d), waiting",
            question.id,
            selected.name,
            chat_id,
        )

        async def notify() -> None:
            try:
                await self._messenger.notify_timeout(chat_id)
            except MessengerError as e:
                logger.warning("Failed to send timeout notice to chat %d: %s", chat_id, e)

        wait = timeout if timeout > 0 else self._config.timeout
        outcome = await wait_for_reply(self._store, question, wait, queued, on_timeout=notify)
        return outcome.reply

    async def capture_next_chat(self, timeout: float = 0) -> int:
        """Return the chat id of the next inbound message from an allowed user.

        Raises:
            CaptureTimeoutError: Nothing arrived (or the capture was replaced) in time.

        """
        capture = self._store.start_capture()
        wait = timeout if timeout > 0 else constants.DEFAULT_CAPTURE_TIMEOUT
        return await wait_for_capture(self._store, capture, wait)

    async def handle(self, request: IPCRequest) -> IPCResponse:
        """Serve one local request; failures become a failed response."""
        try:
            if request.type == REQUEST_TYPE_SEND:
                reply = await self.send_and_wait(
                    request.message,
                    session=request.session or None,
                    workdir=request.workdir or None,
                    timeout=request.timeout,
                )
                return IPCResponse(success=True, reply=reply)
            if request.type == REQUEST_TYPE_GET_CHAT_ID:
                chat_id = await self.capture_next_chat(request.timeout)
                return IPCResponse(success=True, chat_id=chat_id)
        except CctgError as e:
            logger.info("Request %r failed: %s", request.type, e)
            return IPCResponse.failure(str(e))
        except Exception:
            logger.exception("Unexpected error handling %r request", request.type)
            return IPCResponse.failure("internal error")
        return IPCResponse.failure("unknown request type")
