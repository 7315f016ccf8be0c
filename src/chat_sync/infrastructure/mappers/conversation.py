from __future__ import annotations

from chat_sync.domain.entities.conversation import Conversation, LastMessage
from chat_sync.domain.entities.user import User
from chat_sync.domain.value_objects.ids import ConversationId
from chat_sync.infrastructure.http.schemas import ConversationSchema, LastMessageSchema
from chat_sync.infrastructure.mappers import user as user_mapper


def last_message_to_entity(schema: LastMessageSchema | None) -> LastMessage | None:
    if schema is None:
        return None
    return LastMessage(
        content=schema.content,
        created_at=user_mapper.as_utc(schema.created_at) if schema.created_at else None,
        sender_id=user_mapper.ref_to_id(schema.sender),
    )


def schema_to_entity(schema: ConversationSchema) -> Conversation:
    participants: dict[str, User] = {}
    for p in schema.participants:
        participants.setdefault(p.id, user_mapper.schema_to_entity(p))
    return Conversation(
        id=ConversationId(schema.id),
        is_group=schema.is_group,
        name=schema.name,
        participants=tuple(participants.values()),
        last_message=last_message_to_entity(schema.last_message),
        unread_count=schema.unread_count,
    )
