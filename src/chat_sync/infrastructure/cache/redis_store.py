"""Redis-backed durable message cache."""
from __future__ import annotations

import redis.asyncio as aioredis

from chat_sync.application.dto.message import CacheEntry
from chat_sync.infrastructure.cache.serializer import deserialize_entry, serialize_entry


class RedisCacheStore:
    """Implements application.ports.cache.CacheStore."""

    def __init__(self, redis: aioredis.Redis) -> None:
        self._redis = redis

    async def load(self, key: str) -> CacheEntry | None:
        raw = await self._redis.get(key)
        if raw is None:
            return None
        return deserialize_entry(raw)

    async def save(self, key: str, entry: CacheEntry) -> None:
        await self._redis.set(key, serialize_entry(entry))

    async def delete(self, *keys: str) -> None:
        if keys:
            await self._redis.delete(*keys)

    async def keys(self, prefix: str) -> list[str]:
        found: list[str] = []
        async for key in self._redis.scan_iter(match=f"{prefix}*"):
            found.append(key.decode() if isinstance(key, bytes) else key)
        return found
