"""Route an inbound reply to the question it answers."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cctg.correlation.store import CorrelationStore, MatchOutcome

logger = logging.getLogger(__name__)


def handle_inbound(
    store: CorrelationStore,
    chat_id: int,
    text: str,
    reply_to: int | None = None,
) -> MatchOutcome:
    """Feed one inbound message from an allowed sender into the store.

    The message answers at most one outstanding question of its chat (the one
    it is threaded to, else the oldest) or is buffered when nothing is waiting.
    Independently, a pending chat id capture is resolved with ``chat_id``.
    """
    outcome = store.resolve_reply(chat_id, reply_to, text)
    captured = store.resolve_capture(chat_id)
    logger.info(
        "Inbound message in chat %d: %s%s",
        chat_id,
        outcome.value,
        " (captured chat id)" if captured else "",
    )
    return outcome
