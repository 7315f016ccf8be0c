from __future__ import annotations

from datetime import datetime

from chat_sync.domain.entities.message import Message, ReadReceipt
from chat_sync.domain.value_objects.ids import ConversationId, MessageId
from chat_sync.infrastructure.http.schemas import MessageSchema, ReadReceiptSchema
from chat_sync.infrastructure.mappers import user as user_mapper


def schema_to_entity(schema: MessageSchema) -> Message:
    created_at = user_mapper.as_utc(schema.created_at)
    receipts: list[ReadReceipt] = []
    for r in schema.read_by:
        user_id = user_mapper.ref_to_id(r.user)
        if user_id is None or any(x.user_id == user_id for x in receipts):
            continue
        receipts.append(ReadReceipt(user_id, _read_at(r.read_at, created_at)))
    return Message(
        id=MessageId(schema.id),
        conversation_id=ConversationId(schema.conversation_id),
        sender=user_mapper.schema_to_entity(schema.sender),
        content=schema.content,
        created_at=created_at,
        attachments=tuple(schema.attachments),
        read_by=tuple(receipts),
    )


def entity_to_schema(entity: Message) -> MessageSchema:
    return MessageSchema(
        id=entity.id,
        conversation_id=entity.conversation_id,
        sender=user_mapper.entity_to_schema(entity.sender),
        content=entity.content,
        attachments=list(entity.attachments),
        created_at=entity.created_at,
        read_by=[
            ReadReceiptSchema(user=r.user_id, read_at=r.read_at)
            for r in entity.read_by
        ],
    )


def _read_at(ts: datetime | None, fallback: datetime) -> datetime:
    return user_mapper.as_utc(ts) if ts else fallback
