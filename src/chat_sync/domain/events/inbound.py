"""Events pushed by the messaging server over the realtime connection."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TypeAlias

from chat_sync.domain.entities.conversation import LastMessage
from chat_sync.domain.entities.message import Message
from chat_sync.domain.value_objects.ids import ConversationId, MessageId, UserId


@dataclass(frozen=True, slots=True)
class MessageReceived:
    message: Message


@dataclass(frozen=True, slots=True)
class ConversationUpdated:
    conversation_id: ConversationId
    last_message: LastMessage | None


@dataclass(frozen=True, slots=True)
class UserStatusChanged:
    user_id: UserId
    is_online: bool
    last_seen: datetime | None


@dataclass(frozen=True, slots=True)
class UserTypingChanged:
    user_id: UserId
    conversation_id: ConversationId
    is_typing: bool


@dataclass(frozen=True, slots=True)
class MessageReadReceived:
    message_id: MessageId
    user_id: UserId


InboundEvent: TypeAlias = (
    MessageReceived
    | ConversationUpdated
    | UserStatusChanged
    | UserTypingChanged
    | MessageReadReceived
)
