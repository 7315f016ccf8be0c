from __future__ import annotations

from typing import Protocol

from chat_sync.application.dto.message import CacheEntry


class CacheStore(Protocol):
    """Durable key/value storage for per-conversation message snapshots."""

    async def load(self, key: str) -> CacheEntry | None: ...

    async def save(self, key: str, entry: CacheEntry) -> None: ...

    async def delete(self, *keys: str) -> None: ...

    async def keys(self, prefix: str) -> list[str]: ...
