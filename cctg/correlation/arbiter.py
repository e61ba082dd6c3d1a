"""Race a question's reply against its deadline, settling the episode exactly once."""

from __future__ import annotations

import asyncio
import enum
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from cctg.constants import NO_REPLY_TEXT
from cctg.errors import CaptureTimeoutError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence

    from cctg.correlation.store import ChatCapture, CorrelationStore, PendingQuestion

logger = logging.getLogger(__name__)


class ArbiterState(enum.Enum):
    """States of one question/reply episode."""

    WAITING = "waiting"
    RESOLVED = "resolved"
    TIMED_OUT = "timed_out"


@dataclass(frozen=True)
class ReplyOutcome:
    """Final state of an episode and the text handed back to the caller."""

    state: ArbiterState
    reply: str

    @property
    def timed_out(self) -> bool:
        """Whether the deadline won the race."""
        return self.state is ArbiterState.TIMED_OUT


def combine_messages(queued: Sequence[str], reply: str) -> str:
    """Prepend replies buffered before the question was sent, newline-joined."""
    if not queued:
        return reply
    return "\n".join([*queued, reply])


async def wait_for_reply(
    store: CorrelationStore,
    question: PendingQuestion,
    timeout: float,
    queued: Sequence[str] = (),
    on_timeout: Callable[[], Awaitable[None]] | None = None,
) -> ReplyOutcome:
    """Wait up to ``timeout`` seconds for ``question`` to be answered.

    On the deadline the question is withdrawn from the store, so a late reply
    is buffered instead of resolving a future nobody reads. If the withdraw
    loses to a reply that arrived at the same moment, that reply wins.
    A timeout is not an error: the caller gets the buffered replies, or the
    fixed no-reply text when there are none.
    """
    waiter = asyncio.wrap_future(question.resolution)
    try:
        reply = await asyncio.wait_for(asyncio.shield(waiter), timeout)
    except TimeoutError:
        if not store.withdraw(question.chat_id, question):
            logger.debug("Question %d answered as its deadline fired", question.id)
            return ReplyOutcome(
                ArbiterState.RESOLVED,
                combine_messages(queued, question.resolution.result()),
            )
        logger.info(
            "No reply in chat %d after %ss (question %d)",
            question.chat_id,
            timeout,
            question.id,
        )
        if on_timeout is not None:
            await on_timeout()
        reply = "\n".join(queued) if queued else NO_REPLY_TEXT
        return ReplyOutcome(ArbiterState.TIMED_OUT, reply)

    return ReplyOutcome(ArbiterState.RESOLVED, combine_messages(queued, reply))


async def wait_for_capture(
    store: CorrelationStore,
    capture: ChatCapture,
    timeout: float,
) -> int:
    """Wait up to ``timeout`` seconds for ``capture`` to receive a chat id.

    Raises CaptureTimeoutError on the deadline, including when the capture was
    replaced by a newer one in the meantime.
    """
    waiter = asyncio.wrap_future(capture.resolution)
    try:
        return await asyncio.wait_for(asyncio.shield(waiter), timeout)
    except TimeoutError:
        if not store.cancel_capture(capture) and capture.resolution.done():
            return capture.resolution.result()
        raise CaptureTimeoutError from None
