"""Thread-safe registry of questions awaiting a Telegram reply.

The store keeps, per chat:

- the questions that were sent and are still waiting for an answer, in the
  order they were registered;
- replies that arrived while no question was waiting, buffered until the next
  question for that chat is sent.

It also holds at most one process-wide chat id capture.

Every state transition happens under one lock. A question's future is only
ever resolved by the critical section that removes the question from the
store, so a question can be answered or withdrawn, never both and never twice.
"""

from __future__ import annotations

import enum
import itertools
import logging
import threading
from concurrent.futures import Future
from dataclasses import dataclass, field
from datetime import UTC, datetime

logger = logging.getLogger(__name__)


class MatchOutcome(enum.Enum):
    """What happened to an inbound reply."""

    BUFFERED = "buffered"
    MATCHED_THREAD = "matched_thread"
    MATCHED_FIFO = "matched_fifo"


@dataclass(eq=False)
class PendingQuestion:
    """A question sent to a chat that is waiting for a reply."""

    id: int
    chat_id: int
    content: str
    external_ref: int | None = None
    resolution: Future[str] = field(default_factory=Future, repr=False)
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))


@dataclass(eq=False)
class ChatCapture:
    """A one-shot request for the chat id of the next inbound message."""

    id: int
    resolution: Future[int] = field(default_factory=Future, repr=False)


class CorrelationStore:
    """Outstanding questions, buffered replies and the chat id capture slot."""

    def __init__(self) -> None:
        """Initialize an empty store."""
        self._lock = threading.Lock()
        self._pending: dict[int, list[PendingQuestion]] = {}
        self._buffered: dict[int, list[str]] = {}
        self._capture: ChatCapture | None = None
        self._ids = itertools.count(1)

    # --- Questions ---

    def register(
        self,
        chat_id: int,
        content: str,
        external_ref: int | None = None,
    ) -> PendingQuestion:
        """Append a new question to the chat's outstanding list."""
        with self._lock:
            question = PendingQuestion(
                id=next(self._ids),
                chat_id=chat_id,
                content=content,
                external_ref=external_ref,
            )
            self._pending.setdefault(chat_id, []).append(question)
        logger.debug(
            "Registered question %d for chat %d (ref=%s)",
            question.id,
            chat_id,
            external_ref,
        )
        return question

    def withdraw(self, chat_id: int, question: PendingQuestion) -> bool:
        """Remove ``question`` if it is still outstanding.

        Returns True if this call removed it, False if a reply got there first
        (or it was already withdrawn).
        """
        with self._lock:
            queue = self._pending.get(chat_id)
            if not queue or question not in queue:
                return False
            queue.remove(question)
            if not queue:
                del self._pending[chat_id]
        logger.debug("Withdrew question %d for chat %d", question.id, chat_id)
        return True

    def has_outstanding(self, chat_id: int) -> bool:
        """Whether any question for the chat is waiting for a reply."""
        with self._lock:
            return bool(self._pending.get(chat_id))

    def outstanding(self, chat_id: int) -> list[PendingQuestion]:
        """Snapshot of the chat's outstanding questions, oldest first."""
        with self._lock:
            return list(self._pending.get(chat_id, ()))

    def resolve_reply(self, chat_id: int, reply_to: int | None, text: str) -> MatchOutcome:
        """Answer one outstanding question with ``text``, or buffer it.

        A reply threaded to a known message answers that question; otherwise
        the oldest outstanding question is answered.
        """
        with self._lock:
            queue = self._pending.get(chat_id)
            if not queue:
                self._buffered.setdefault(chat_id, []).append(text)
                return MatchOutcome.BUFFERED

            index = None
            if reply_to is not None:
                index = next(
                    (i for i, q in enumerate(queue) if q.external_ref == reply_to),
                    None,
                )
            outcome = MatchOutcome.MATCHED_THREAD if index is not None else MatchOutcome.MATCHED_FIFO
            question = queue.pop(index or 0)
            remaining = len(queue)
            if not queue:
                del self._pending[chat_id]
            question.resolution.set_result(text)

        if outcome is MatchOutcome.MATCHED_FIFO and remaining:
            logger.warning(
                "Reply in chat %d is not threaded to a waiting question; "
                "answered the oldest one (%d still waiting)",
                chat_id,
                remaining,
            )
        logger.debug("Resolved question %d for chat %d (%s)", question.id, chat_id, outcome.value)
        return outcome

    # --- Buffered replies ---

    def drain_buffered(self, chat_id: int) -> list[str]:
        """Return and clear all buffered replies for the chat, oldest first."""
        with self._lock:
            return self._buffered.pop(chat_id, [])

    def requeue_buffered(self, chat_id: int, texts: list[str]) -> None:
        """Put previously drained replies back in front of any newer ones."""
        if not texts:
            return
        with self._lock:
            self._buffered[chat_id] = [*texts, *self._buffered.get(chat_id, [])]

    # --- Chat id capture ---

    def start_capture(self) -> ChatCapture:
        """Install a new capture, replacing (and abandoning) any previous one."""
        with self._lock:
            replaced = self._capture
            self._capture = ChatCapture(id=next(self._ids))
            capture = self._capture
        if replaced is not None:
            logger.info("Chat id capture %d replaced by %d", replaced.id, capture.id)
        return capture

    def cancel_capture(self, capture: ChatCapture) -> bool:
        """Clear the capture slot if it still holds ``capture``."""
        with self._lock:
            if self._capture is not capture:
                return False
            self._capture = None
            return True

    def resolve_capture(self, chat_id: int) -> bool:
        """Hand ``chat_id`` to the pending capture, if there is one."""
        with self._lock:
            capture = self._capture
            if capture is None:
                return False
            self._capture = None
            capture.resolution.set_result(chat_id)
        logger.info("Captured chat id %d", chat_id)
        return True
