"""Cache record codec: ``{"messages": [...], "timestamp": <epoch ms>}``."""
from __future__ import annotations

from chat_sync.application.dto.message import CacheEntry
from chat_sync.infrastructure.http.schemas import CacheEntrySchema
from chat_sync.infrastructure.mappers import message as message_mapper


def serialize_entry(entry: CacheEntry) -> str:
    schema = CacheEntrySchema(
        messages=[message_mapper.entity_to_schema(m) for m in entry.messages],
        timestamp=entry.timestamp,
    )
    return schema.model_dump_json(by_alias=True)


def deserialize_entry(raw: str | bytes) -> CacheEntry:
    schema = CacheEntrySchema.model_validate_json(raw)
    return CacheEntry(
        messages=tuple(message_mapper.schema_to_entity(m) for m in schema.messages),
        timestamp=schema.timestamp,
    )
