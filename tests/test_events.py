from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

import pytest

from localchat.events import AsyncEventBus, ImmediateEventBus
from localchat.lc_types import ChatDeletedEvent, MessageDraft, NewMessageEvent

from .conftest import make_user

if TYPE_CHECKING:
    from localchat.app import ChatApplication
    from localchat.lc_types import Event


def deleted(chat_id: str) -> ChatDeletedEvent:
    return ChatDeletedEvent(chat_id=chat_id, user_id="u")


async def test_delivery_is_delayed() -> None:
    bus = AsyncEventBus(delay=0.05)
    received: list[Event] = []
    bus.subscribe(received.append)

    bus.publish(deleted("1"))
    assert received == []
    assert bus.pending == 1

    await bus.drain()
    assert received == [deleted("1")]
    assert bus.pending == 0


async def test_listeners_called_in_registration_order() -> None:
    bus = AsyncEventBus(delay=0)
    calls: list[str] = []
    bus.subscribe(lambda event: calls.append("first"))
    bus.subscribe(lambda event: calls.append("second"))

    bus.publish(deleted("1"))
    bus.publish(deleted("2"))
    await bus.drain()

    assert calls == ["first", "second", "first", "second"]


async def test_listeners_snapshot_at_dispatch() -> None:
    bus = AsyncEventBus(delay=0.01)
    calls: list[str] = []

    def once(event: Event) -> None:
        calls.append("once")
        bus.unsubscribe(once)

    bus.subscribe(once)
    bus.subscribe(lambda event: calls.append("always"))

    bus.publish(deleted("1"))
    bus.publish(deleted("2"))
    await bus.drain()

    assert calls == ["once", "always", "always"]


async def test_listener_registered_before_delivery_receives_event() -> None:
    bus = AsyncEventBus(delay=0.01)
    received: list[Event] = []

    bus.publish(deleted("1"))
    bus.subscribe(received.append)
    await bus.drain()

    assert received == [deleted("1")]


async def test_failing_listener_does_not_block_others(caplog: pytest.LogCaptureFixture) -> None:
    bus = AsyncEventBus(delay=0)
    received: list[Event] = []

    def broken(event: Event) -> None:
        msg = "boom"
        raise RuntimeError(msg)

    bus.subscribe(broken)
    bus.subscribe(received.append)

    with caplog.at_level(logging.ERROR):
        bus.publish(deleted("1"))
        await bus.drain()

    assert received == [deleted("1")]
    assert "failed on ChatDeletedEvent" in caplog.text


async def test_coroutine_listeners_are_awaited() -> None:
    bus = AsyncEventBus(delay=0)
    received: list[Event] = []

    async def listener(event: Event) -> None:
        await asyncio.sleep(0.01)
        received.append(event)

    async def broken(event: Event) -> None:
        msg = "boom"
        raise RuntimeError(msg)

    bus.subscribe(broken)
    bus.subscribe(listener)
    bus.publish(deleted("1"))
    await bus.drain()

    assert received == [deleted("1")]


def test_unsubscribe_unknown_listener_is_noop() -> None:
    bus = ImmediateEventBus()
    bus.subscribe(print)

    bus.unsubscribe(len)

    assert bus.listeners == (print,)


def test_publish_without_loop_delivers_synchronously(caplog: pytest.LogCaptureFixture) -> None:
    bus = AsyncEventBus()
    received: list[Event] = []
    bus.subscribe(received.append)

    with caplog.at_level(logging.WARNING):
        bus.publish(deleted("1"))

    assert received == [deleted("1")]
    assert bus.pending == 0
    assert "No running event loop" in caplog.text


async def test_send_message_notifies_after_delay(async_app: ChatApplication) -> None:
    alice = make_user(async_app, "Alice")
    bob = make_user(async_app, "Bob")
    received: list[Event] = []
    async_app.messages.subscribe(received.append)

    chat = async_app.messages.create_chat([alice.id, bob.id], "Bob", False, alice.id)
    message = async_app.messages.send_message(
        MessageDraft(chat_id=chat.id, sender_id=alice.id, content="hi"),
    )
    assert received == []

    await async_app.drain()

    assert received[-1] == NewMessageEvent(message=message)
    assert [type(event).__name__ for event in received] == ["NewChatEvent", "NewMessageEvent"]

    async_app.messages.unsubscribe(received.append)
    async_app.messages.delete_chat(chat.id, alice.id)
    await async_app.drain()
    assert len(received) == 2
