"""Shared test fixtures."""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

import jwt
import pytest

from chat_sync.application.dto.conversation import NewConversationDTO
from chat_sync.application.dto.message import MessagePage
from chat_sync.application.exceptions import ApiError, TransportError
from chat_sync.application.ports.transport import TransportListener
from chat_sync.domain.entities.conversation import Conversation, LastMessage
from chat_sync.domain.entities.message import Message
from chat_sync.domain.entities.user import User
from chat_sync.domain.events.outbound import OutboundEvent
from chat_sync.domain.value_objects.ids import ConversationId, MessageId, UserId
from chat_sync.infrastructure.auth.jwt_inspector import UnverifiedJWTInspector
from chat_sync.infrastructure.auth.static_token import StaticTokenProvider
from chat_sync.infrastructure.cache.memory_store import InMemoryCacheStore
from chat_sync.services.message_cache import MessageCache
from chat_sync.services.messenger import Messenger

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)
ME = UserId("u-me")
PEER = UserId("u-peer")


def make_token(sub: str = ME, **claims: object) -> str:
    return jwt.encode({"sub": sub, **claims}, "test-secret", algorithm="HS256")


def make_user(user_id: str = PEER, name: str = "Asha Rao", **kwargs: object) -> User:
    return User(id=UserId(user_id), name=name, **kwargs)  # type: ignore[arg-type]


def make_message(
    message_id: str,
    *,
    conversation_id: str = "C1",
    sender: User | None = None,
    content: str = "hello",
    created_at: datetime | None = None,
) -> Message:
    return Message(
        id=MessageId(message_id),
        conversation_id=ConversationId(conversation_id),
        sender=sender or make_user(),
        content=content,
        created_at=created_at or NOW,
    )


def make_history(count: int, *, conversation_id: str = "C1", prefix: str = "m", step_minutes: int = 1) -> list[Message]:
    """``count`` messages ending at NOW, oldest first."""
    return [
        make_message(
            f"{prefix}{i}",
            conversation_id=conversation_id,
            content=f"message {i}",
            created_at=NOW - timedelta(minutes=step_minutes * (count - i)),
        )
        for i in range(count)
    ]


def make_conversation(
    conversation_id: str = "C1",
    *,
    is_group: bool = False,
    name: str = "",
    participants: tuple[User, ...] | None = None,
    last_message: LastMessage | None = None,
) -> Conversation:
    return Conversation(
        id=ConversationId(conversation_id),
        is_group=is_group,
        name=name,
        participants=participants or (make_user(ME, "Me"), make_user()),
        last_message=last_message,
    )


@dataclass
class FakeClock:
    current: datetime = NOW

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs: float) -> None:
        self.current += timedelta(**kwargs)


@dataclass
class FakeChatApi:
    conversations: list[Conversation] = field(default_factory=list)
    members: list[User] = field(default_factory=list)
    latest: dict[str, MessagePage] = field(default_factory=dict)
    older: dict[str, MessagePage] = field(default_factory=dict)
    gates: dict[str, asyncio.Event] = field(default_factory=dict)
    fail: bool = False
    calls: list[tuple] = field(default_factory=list)
    created: list[NewConversationDTO] = field(default_factory=list)

    async def list_conversations(self) -> list[Conversation]:
        self.calls.append(("list_conversations",))
        if self.fail:
            raise ApiError("boom", status_code=500)
        return list(self.conversations)

    async def create_conversation(self, dto: NewConversationDTO) -> Conversation:
        self.calls.append(("create_conversation", dto))
        if self.fail:
            raise ApiError("boom", status_code=400)
        self.created.append(dto)
        participants = tuple(make_user(uid, f"User {uid}") for uid in dto.participants)
        return make_conversation(
            f"new-{len(self.created)}",
            is_group=dto.is_group,
            name=dto.name,
            participants=(make_user(ME, "Me"), *participants),
        )

    async def list_members(self) -> list[User]:
        self.calls.append(("list_members",))
        if self.fail:
            raise ApiError("boom", status_code=500)
        return list(self.members)

    async def list_messages(
        self,
        conversation_id: ConversationId,
        *,
        before: datetime | None = None,
        limit: int = 50,
    ) -> MessagePage:
        self.calls.append(("list_messages", conversation_id, before, limit))
        gate = self.gates.get(conversation_id)
        if gate is not None:
            await gate.wait()
        if self.fail:
            raise ApiError("boom", status_code=500)
        pages = self.older if before is not None else self.latest
        return pages.get(conversation_id, MessagePage(messages=(), has_more=False))

    def message_calls(self) -> list[tuple]:
        return [c for c in self.calls if c[0] == "list_messages"]


@dataclass
class FakeTransport:
    token: str
    listener: TransportListener
    sent: list[OutboundEvent] = field(default_factory=list)
    connected: bool = False
    stopped: bool = False

    async def start(self) -> None:
        self.connected = True

    async def stop(self) -> None:
        self.connected = False
        self.stopped = True

    async def send(self, event: OutboundEvent) -> None:
        if not self.connected:
            raise TransportError("Socket is not connected")
        self.sent.append(event)


@dataclass
class FakeTransportFactory:
    created: list[FakeTransport] = field(default_factory=list)

    def __call__(self, token: str, listener: TransportListener) -> FakeTransport:
        transport = FakeTransport(token, listener)
        self.created.append(transport)
        return transport

    @property
    def current(self) -> FakeTransport:
        return self.created[-1]


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache_store() -> InMemoryCacheStore:
    return InMemoryCacheStore()


@pytest.fixture
def message_cache(cache_store: InMemoryCacheStore, clock: FakeClock) -> MessageCache:
    return MessageCache(cache_store, clock)


@pytest.fixture
def api() -> FakeChatApi:
    return FakeChatApi()


@pytest.fixture
def transports() -> FakeTransportFactory:
    return FakeTransportFactory()


@pytest.fixture
def tokens() -> StaticTokenProvider:
    return StaticTokenProvider(make_token())


@pytest.fixture
def messenger(
    api: FakeChatApi,
    transports: FakeTransportFactory,
    message_cache: MessageCache,
    tokens: StaticTokenProvider,
    clock: FakeClock,
) -> Messenger:
    return Messenger(
        api,
        transports,
        message_cache,
        tokens,
        UnverifiedJWTInspector(),
        clock=clock,
        typing_idle_seconds=0.05,
    )
