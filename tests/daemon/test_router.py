"""Tests for the daemon request router."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

import pytest

from cctg.constants import NO_REPLY_TEXT
from cctg.correlation.matcher import handle_inbound
from cctg.errors import CaptureTimeoutError, MessengerError, SessionNotFoundError
from cctg.ipc.protocol import IPCRequest

if TYPE_CHECKING:
    from cctg.correlation.store import CorrelationStore
    from cctg.daemon.router import DaemonRouter


async def _wait_until_sent(messenger: Any, count: int = 1) -> None:
    while len(messenger.sent) < count:
        await asyncio.sleep(0.005)


@pytest.mark.asyncio
async def test_threaded_reply_end_to_end(
    router: DaemonRouter,
    store: CorrelationStore,
    messenger: Any,
) -> None:
    """Send "proceed?" to chat 42, a threaded "yes" arrives before the deadline."""
    task = asyncio.create_task(router.send_and_wait("proceed?", session="proj", timeout=0.5))
    await _wait_until_sent(messenger)
    await asyncio.sleep(0.2)

    chat_id, text, message_id = messenger.sent[0]
    assert (chat_id, text) == (42, "proceed?")
    handle_inbound(store, 42, "yes", reply_to=message_id)

    assert await task == "yes"
    assert not store.has_outstanding(42)
    assert messenger.timeouts == []


@pytest.mark.asyncio
async def test_selects_session_by_workdir(
    router: DaemonRouter,
    store: CorrelationStore,
    messenger: Any,
) -> None:
    """Without a name, the caller's working directory picks the session."""
    task = asyncio.create_task(router.send_and_wait("deploy?", workdir="/work/ops/", timeout=1))
    await _wait_until_sent(messenger)
    handle_inbound(store, -1001, "go")

    assert await task == "go"
    assert messenger.sent[0][0] == -1001


@pytest.mark.asyncio
async def test_buffered_replies_are_prepended(
    router: DaemonRouter,
    store: CorrelationStore,
    messenger: Any,
) -> None:
    """Messages sent before the question come ahead of its answer."""
    handle_inbound(store, 42, "btw the build is broken")
    handle_inbound(store, 42, "and CI is down")

    task = asyncio.create_task(router.send_and_wait("proceed?", session="proj", timeout=1))
    await _wait_until_sent(messenger)
    handle_inbound(store, 42, "no", reply_to=messenger.last_message_id)

    assert await task == "btw the build is broken\nand CI is down\nno"
    assert store.drain_buffered(42) == []


@pytest.mark.asyncio
async def test_timeout_returns_sentinel_and_notifies(
    router: DaemonRouter,
    store: CorrelationStore,
    messenger: Any,
) -> None:
    """A lapsed wait returns the cautious default and tells the chat."""
    reply = await router.send_and_wait("proceed?", session="proj", timeout=0.05)

    assert reply == NO_REPLY_TEXT
    assert messenger.timeouts == [42]
    assert not store.has_outstanding(42)


@pytest.mark.asyncio
async def test_timeout_notice_failure_is_not_fatal(
    router: DaemonRouter,
    messenger: Any,
) -> None:
    """A failing timeout notice does not turn the timeout into an error."""
    messenger.fail_timeout_notice = True

    assert await router.send_and_wait("q?", session="proj", timeout=0.05) == NO_REPLY_TEXT


@pytest.mark.asyncio
async def test_uses_configured_default_timeout(
    router: DaemonRouter,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """A zero timeout falls back to the configured one."""
    seen: list[float] = []

    async def fake_wait(store, question, timeout, queued, on_timeout):  # noqa: ANN001, ANN202, ARG001
        seen.append(timeout)
        return type("Outcome", (), {"reply": "ok"})()

    monkeypatch.setattr("cctg.daemon.router.wait_for_reply", fake_wait)

    assert await router.send_and_wait("q?", session="proj") == "ok"
    assert await router.send_and_wait("q?", session="proj", timeout=9) == "ok"
    assert seen == [1, 9]


@pytest.mark.asyncio
async def test_unknown_session(router: DaemonRouter, messenger: Any) -> None:
    """No matching session is a terminal error and nothing is sent."""
    with pytest.raises(SessionNotFoundError):
        await router.send_and_wait("q?", session="nope")
    with pytest.raises(SessionNotFoundError):
        await router.send_and_wait("q?", workdir="/elsewhere")
    with pytest.raises(SessionNotFoundError):
        await router.send_and_wait("q?")
    assert messenger.sent == []


@pytest.mark.asyncio
async def test_send_failure_registers_nothing_and_keeps_buffer(
    router: DaemonRouter,
    store: CorrelationStore,
    messenger: Any,
) -> None:
    """A failed send surfaces immediately and loses no buffered replies."""
    handle_inbound(store, 42, "earlier")
    messenger.fail = True

    with pytest.raises(MessengerError):
        await router.send_and_wait("q?", session="proj", timeout=1)

    assert not store.has_outstanding(42)
    assert store.drain_buffered(42) == ["earlier"]


@pytest.mark.asyncio
async def test_two_questions_same_chat_are_matched_independently(
    router: DaemonRouter,
    store: CorrelationStore,
    messenger: Any,
) -> None:
    """Concurrent questions to one chat each get their own threaded answer."""
    first = asyncio.create_task(router.send_and_wait("first?", session="proj", timeout=1))
    await _wait_until_sent(messenger, 1)
    second = asyncio.create_task(router.send_and_wait("second?", session="proj", timeout=1))
    await _wait_until_sent(messenger, 2)

    first_ref = messenger.sent[0][2]
    second_ref = messenger.sent[1][2]
    handle_inbound(store, 42, "answer two", reply_to=second_ref)
    handle_inbound(store, 42, "answer one", reply_to=first_ref)

    assert await first == "answer one"
    assert await second == "answer two"


@pytest.mark.asyncio
async def test_capture_next_chat(router: DaemonRouter, store: CorrelationStore) -> None:
    """The capture returns the chat id of the next inbound message."""
    task = asyncio.create_task(router.capture_next_chat(timeout=1))
    await asyncio.sleep(0.01)
    handle_inbound(store, 2024, "hello")

    assert await task == 2024


@pytest.mark.asyncio
async def test_capture_timeout_is_an_error(router: DaemonRouter) -> None:
    """Unlike send, a capture timeout is reported as an error."""
    with pytest.raises(CaptureTimeoutError):
        await router.capture_next_chat(timeout=0.02)


@pytest.mark.asyncio
async def test_handle_send_request(
    router: DaemonRouter,
    store: CorrelationStore,
    messenger: Any,
) -> None:
    """A send request returns the reply in a successful response."""
    request = IPCRequest(type="send", session="proj", message="ok?", timeout=1)
    task = asyncio.create_task(router.handle(request))
    await _wait_until_sent(messenger)
    handle_inbound(store, 42, "sure")

    response = await task
    assert response.success
    assert response.reply == "sure"


@pytest.mark.asyncio
async def test_handle_reports_errors(router: DaemonRouter, messenger: Any) -> None:
    """Known failures become failed responses instead of exceptions."""
    not_found = await router.handle(IPCRequest(type="send", session="nope", message="q?"))
    assert not not_found.success
    assert not_found.error == "session not found"

    messenger.fail = True
    send_failed = await router.handle(IPCRequest(type="send", session="proj", message="q?"))
    assert not send_failed.success
    assert "Unauthorized" in (send_failed.error or "")

    unknown = await router.handle(IPCRequest(type="dance"))
    assert unknown.error == "unknown request type"


@pytest.mark.asyncio
async def test_handle_capture_request_uses_default_timeout(
    router: DaemonRouter,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """A capture timeout comes back as an error response."""
    monkeypatch.setattr("cctg.constants.DEFAULT_CAPTURE_TIMEOUT", 0.02)

    response = await router.handle(IPCRequest(type="get_chat_id", timeout=0))

    assert response.success is False
    assert response.error == "timeout waiting for message"


@pytest.mark.asyncio
async def test_handle_survives_unexpected_errors(
    router: DaemonRouter,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """A bug in one request is reported, not raised into the server."""

    async def boom(*_args: Any, **_kwargs: Any) -> str:
        msg = "boom"
        raise RuntimeError(msg)

    monkeypatch.setattr(router, "send_and_wait", boom)
    response = await router.handle(IPCRequest(type="send", session="proj", message="q?"))

    assert response.success is False
    assert response.error == "internal error"
