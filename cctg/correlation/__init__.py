"""Correlation of outbound questions with inbound Telegram replies."""

from __future__ import annotations

from cctg.correlation.arbiter import (
    ArbiterState,
    ReplyOutcome,
    combine_messages,
    wait_for_capture,
    wait_for_reply,
)
from cctg.correlation.matcher import handle_inbound
from cctg.correlation.store import ChatCapture, CorrelationStore, MatchOutcome, PendingQuestion

__all__ = [
    "ArbiterState",
    "ChatCapture",
    "CorrelationStore",
    "MatchOutcome",
    "PendingQuestion",
    "ReplyOutcome",
    "combine_messages",
    "handle_inbound",
    "wait_for_capture",
    "wait_for_reply",
]
