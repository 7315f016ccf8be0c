"""Realtime envelope models and the closed set of event kinds.

Every frame is ``{"type": <event name>, "data": {...}}``. Inbound frames are
parsed through a discriminated union so each event kind maps to exactly one
domain event; outbound events are encoded the same way.
"""
from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Literal, Union, assert_never

from pydantic import BaseModel, Field, TypeAdapter

from chat_sync.domain.events.inbound import (
    ConversationUpdated,
    InboundEvent,
    MessageReadReceived,
    MessageReceived,
    UserStatusChanged,
    UserTypingChanged,
)
from chat_sync.domain.events.outbound import MarkRead, OutboundEvent, SendMessage, SetTyping
from chat_sync.domain.value_objects.ids import ConversationId, MessageId, UserId
from chat_sync.infrastructure.http.schemas import LastMessageSchema, MessageSchema, WireModel
from chat_sync.infrastructure.mappers import conversation as conversation_mapper
from chat_sync.infrastructure.mappers import message as message_mapper
from chat_sync.infrastructure.mappers import user as user_mapper


class WsEnvelope(BaseModel):
    type: str
    data: dict[str, Any] = {}


# Inbound payloads (server -> client)

class ConversationUpdatePayload(WireModel):
    id: str = Field(alias="_id")
    last_message: LastMessageSchema | None = Field(default=None, alias="lastMessage")


class UserStatusPayload(WireModel):
    user_id: str = Field(alias="userId")
    is_online: bool = Field(alias="isOnline")
    last_seen: datetime | None = Field(default=None, alias="lastSeen")


class UserTypingPayload(WireModel):
    user_id: str = Field(alias="userId")
    conversation_id: str = Field(alias="conversationId")
    is_typing: bool = Field(alias="isTyping")


class MessageReadPayload(WireModel):
    message_id: str = Field(alias="messageId")
    user_id: str = Field(alias="userId")


class MessageReceiveFrame(BaseModel):
    type: Literal["message:receive"]
    data: MessageSchema


class ConversationUpdateFrame(BaseModel):
    type: Literal["conversation:update"]
    data: ConversationUpdatePayload


class UserStatusFrame(BaseModel):
    type: Literal["user:status"]
    data: UserStatusPayload


class UserTypingFrame(BaseModel):
    type: Literal["user:typing"]
    data: UserTypingPayload


class MessageReadFrame(BaseModel):
    type: Literal["message:read"]
    data: MessageReadPayload


InboundFrame = Annotated[
    Union[
        MessageReceiveFrame,
        ConversationUpdateFrame,
        UserStatusFrame,
        UserTypingFrame,
        MessageReadFrame,
    ],
    Field(discriminator="type"),
]

_inbound = TypeAdapter(InboundFrame)

INBOUND_TYPES = frozenset(
    {"message:receive", "conversation:update", "user:status", "user:typing", "message:read"}
)


# Outbound payloads (client -> server)

class SendMessagePayload(WireModel):
    conversation_id: str = Field(alias="conversationId")
    content: str
    attachments: list[str] = []


class MarkReadPayload(WireModel):
    conversation_id: str = Field(alias="conversationId")
    message_id: str = Field(alias="messageId")


class SetTypingPayload(WireModel):
    conversation_id: str = Field(alias="conversationId")
    is_typing: bool = Field(alias="isTyping")


def parse_inbound(raw: str | bytes) -> InboundEvent | None:
    """Decode one frame. Returns None for event kinds this client does not handle.

    Raises pydantic.ValidationError on malformed frames.
    """
    envelope = WsEnvelope.model_validate_json(raw)
    if envelope.type not in INBOUND_TYPES:
        return None
    frame = _inbound.validate_python(envelope.model_dump())
    return _frame_to_event(frame)


def _frame_to_event(frame: InboundFrame) -> InboundEvent:
    match frame:
        case MessageReceiveFrame(data=data):
            return MessageReceived(message_mapper.schema_to_entity(data))
        case ConversationUpdateFrame(data=data):
            return ConversationUpdated(
                conversation_id=ConversationId(data.id),
                last_message=conversation_mapper.last_message_to_entity(data.last_message),
            )
        case UserStatusFrame(data=data):
            return UserStatusChanged(
                user_id=UserId(data.user_id),
                is_online=data.is_online,
                last_seen=user_mapper.as_utc(data.last_seen) if data.last_seen else None,
            )
        case UserTypingFrame(data=data):
            return UserTypingChanged(
                user_id=UserId(data.user_id),
                conversation_id=ConversationId(data.conversation_id),
                is_typing=data.is_typing,
            )
        case MessageReadFrame(data=data):
            return MessageReadReceived(
                message_id=MessageId(data.message_id),
                user_id=UserId(data.user_id),
            )
        case _:
            assert_never(frame)


def encode_outbound(event: OutboundEvent) -> str:
    payload: WireModel
    match event:
        case SendMessage():
            event_type = "message:new"
            payload = SendMessagePayload(
                conversation_id=event.conversation_id,
                content=event.content,
                attachments=list(event.attachments),
            )
        case MarkRead():
            event_type = "message:read"
            payload = MarkReadPayload(
                conversation_id=event.conversation_id,
                message_id=event.message_id,
            )
        case SetTyping():
            event_type = "user:typing"
            payload = SetTypingPayload(
                conversation_id=event.conversation_id,
                is_typing=event.is_typing,
            )
        case _:
            assert_never(event)
    envelope = WsEnvelope(type=event_type, data=payload.model_dump(by_alias=True))
    return envelope.model_dump_json()
