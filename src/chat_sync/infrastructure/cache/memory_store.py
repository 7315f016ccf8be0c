from __future__ import annotations

from chat_sync.application.dto.message import CacheEntry
from chat_sync.infrastructure.cache.serializer import deserialize_entry, serialize_entry


class InMemoryCacheStore:
    """Process-local CacheStore; keeps serialized records like the Redis store."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    async def load(self, key: str) -> CacheEntry | None:
        raw = self._data.get(key)
        if raw is None:
            return None
        return deserialize_entry(raw)

    async def save(self, key: str, entry: CacheEntry) -> None:
        self._data[key] = serialize_entry(entry)

    async def delete(self, *keys: str) -> None:
        for key in keys:
            self._data.pop(key, None)

    async def keys(self, prefix: str) -> list[str]:
        return [k for k in self._data if k.startswith(prefix)]
