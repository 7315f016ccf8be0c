"""Events the client emits over the realtime connection."""
from __future__ import annotations

from dataclasses import dataclass
from typing import TypeAlias

from chat_sync.domain.value_objects.ids import ConversationId, MessageId


@dataclass(frozen=True, slots=True)
class SendMessage:
    conversation_id: ConversationId
    content: str
    attachments: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class MarkRead:
    conversation_id: ConversationId
    message_id: MessageId


@dataclass(frozen=True, slots=True)
class SetTyping:
    conversation_id: ConversationId
    is_typing: bool


OutboundEvent: TypeAlias = SendMessage | MarkRead | SetTyping
