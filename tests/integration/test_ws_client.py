"""Realtime transport against a local websockets server."""
from __future__ import annotations

import asyncio
import json

import pytest
from websockets.asyncio.server import ServerConnection, serve

from chat_sync.application.exceptions import TransportError
from chat_sync.domain.events.inbound import InboundEvent, UserTypingChanged
from chat_sync.domain.events.outbound import SetTyping
from chat_sync.domain.value_objects.ids import ConversationId
from chat_sync.infrastructure.ws.client import WebSocketTransport, calc_backoff


class RecordingListener:
    def __init__(self) -> None:
        self.connects: list[bool] = []
        self.disconnects = 0
        self.events: list[InboundEvent] = []
        self.got_event = asyncio.Event()

    async def on_connected(self, reconnected: bool) -> None:
        self.connects.append(reconnected)

    async def on_disconnected(self) -> None:
        self.disconnects += 1

    async def on_event(self, event: InboundEvent) -> None:
        self.events.append(event)
        self.got_event.set()


async def wait_for(predicate, timeout: float = 2.0) -> None:
    async with asyncio.timeout(timeout):
        while not predicate():
            await asyncio.sleep(0.01)


def test_backoff_doubles_up_to_cap():
    assert [calc_backoff(n, 1.0, 30.0) for n in range(7)] == [1, 2, 4, 8, 16, 30, 30]


@pytest.mark.asyncio
async def test_frames_flow_both_ways():
    paths: list[str] = []
    received: list[dict] = []

    async def handler(ws: ServerConnection) -> None:
        paths.append(ws.request.path)
        await ws.send("garbage")
        await ws.send(json.dumps({"type": "user:typing", "data": {"userId": "u-1"}}))
        await ws.send(json.dumps({
            "type": "user:typing",
            "data": {"userId": "u-1", "conversationId": "C1", "isTyping": True},
        }))
        received.append(json.loads(await ws.recv()))

    async with serve(handler, "127.0.0.1", 0) as server:
        port = server.sockets[0].getsockname()[1]
        listener = RecordingListener()
        transport = WebSocketTransport(f"ws://127.0.0.1:{port}/ws/chat", "tok", listener)

        await transport.start()
        async with asyncio.timeout(2):
            await listener.got_event.wait()
        await transport.send(SetTyping(ConversationId("C1"), True))
        await wait_for(lambda: received)
        await transport.stop()

    assert paths == ["/ws/chat?token=tok"]
    assert listener.connects == [False]
    assert listener.events == [UserTypingChanged("u-1", "C1", True)]
    assert received == [{"type": "user:typing", "data": {"conversationId": "C1", "isTyping": True}}]
    assert transport.connected is False


@pytest.mark.asyncio
async def test_reconnects_after_server_error():
    attempts: list[int] = []

    async def handler(ws: ServerConnection) -> None:
        attempts.append(1)
        if len(attempts) == 1:
            await ws.close(code=1011, reason="restart")
            return
        await ws.wait_closed()

    async with serve(handler, "127.0.0.1", 0) as server:
        port = server.sockets[0].getsockname()[1]
        listener = RecordingListener()
        transport = WebSocketTransport(
            f"ws://127.0.0.1:{port}/ws/chat", "tok", listener, base_delay=0.01,
        )

        await transport.start()
        await wait_for(lambda: len(listener.connects) == 2)
        await transport.stop()

    assert listener.connects == [False, True]
    assert listener.disconnects >= 1


@pytest.mark.asyncio
async def test_auth_rejection_stops_reconnecting():
    attempts: list[int] = []

    async def handler(ws: ServerConnection) -> None:
        attempts.append(1)
        await ws.close(code=4001, reason="unauthorized")

    async with serve(handler, "127.0.0.1", 0) as server:
        port = server.sockets[0].getsockname()[1]
        listener = RecordingListener()
        transport = WebSocketTransport(
            f"ws://127.0.0.1:{port}/ws/chat", "bad", listener, base_delay=0.01,
        )

        await transport.start()
        await wait_for(lambda: listener.disconnects == 1)
        await asyncio.sleep(0.2)
        await transport.stop()

    assert len(attempts) == 1
    assert transport.connected is False


@pytest.mark.asyncio
async def test_send_without_connection_raises():
    transport = WebSocketTransport("ws://127.0.0.1:1/ws/chat", "tok", RecordingListener())

    with pytest.raises(TransportError):
        await transport.send(SetTyping(ConversationId("C1"), False))
