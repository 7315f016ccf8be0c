"""Freshness and retention policy for the durable per-conversation message cache."""
from __future__ import annotations

import logging
from datetime import timedelta
from typing import Sequence

from chat_sync.application.dto.message import CacheEntry
from chat_sync.application.ports.cache import CacheStore
from chat_sync.application.ports.clock import Clock, SystemClock, epoch_ms
from chat_sync.domain.entities.message import Message
from chat_sync.domain.value_objects.ids import ConversationId

logger = logging.getLogger(__name__)


class MessageCache:
    """Reads and writes cache entries keyed by conversation id.

    An entry is usable for ``ttl_seconds`` after capture. Writes keep only
    messages created within the trailing ``window_days`` and at most
    ``max_messages`` of the newest of those. When more than
    ``max_conversations`` entries exist, the entries captured longest ago
    are evicted.
    """

    def __init__(
        self,
        store: CacheStore,
        clock: Clock | None = None,
        *,
        key_prefix: str = "messages_",
        ttl_seconds: int = 60 * 60,
        window_days: int = 5,
        max_conversations: int = 50,
        max_messages: int = 200,
    ) -> None:
        self._store = store
        self._clock = clock or SystemClock()
        self._prefix = key_prefix
        self._ttl_ms = ttl_seconds * 1000
        self._window = timedelta(days=window_days)
        self._max_conversations = max_conversations
        self._max_messages = max_messages

    def key(self, conversation_id: ConversationId) -> str:
        return f"{self._prefix}{conversation_id}"

    async def load(self, conversation_id: ConversationId) -> list[Message] | None:
        """Cached messages, or None when absent, expired or unreadable."""
        try:
            entry = await self._store.load(self.key(conversation_id))
        except Exception:
            logger.exception("Error retrieving cached messages for %s", conversation_id)
            return None
        if entry is None:
            return None
        age_ms = epoch_ms(self._clock.now()) - entry.timestamp
        if age_ms >= self._ttl_ms:
            logger.debug("Cache for %s expired (age=%dms)", conversation_id, age_ms)
            return None
        return list(entry.messages)

    async def save(self, conversation_id: ConversationId, messages: Sequence[Message]) -> None:
        now = self._clock.now()
        cutoff = now - self._window
        recent = [m for m in messages if m.created_at > cutoff]
        if len(recent) > self._max_messages:
            by_age = sorted(recent, key=lambda m: m.created_at)
            newest = {m.id for m in by_age[-self._max_messages:]}
            recent = [m for m in recent if m.id in newest]
        entry = CacheEntry(messages=tuple(recent), timestamp=epoch_ms(now))
        try:
            await self._store.save(self.key(conversation_id), entry)
            await self._evict(keep=self.key(conversation_id))
        except Exception:
            logger.exception("Error caching messages for %s", conversation_id)

    async def clear(self, conversation_id: ConversationId | None = None) -> None:
        try:
            if conversation_id is not None:
                await self._store.delete(self.key(conversation_id))
                logger.info("Cleared message cache for %s", conversation_id)
            else:
                keys = await self._store.keys(self._prefix)
                await self._store.delete(*keys)
                logger.info("Cleared %d message caches", len(keys))
        except Exception:
            logger.exception("Error clearing message cache")

    async def _evict(self, keep: str) -> None:
        keys = await self._store.keys(self._prefix)
        overflow = len(keys) - self._max_conversations
        if overflow <= 0:
            return
        stamped: list[tuple[int, str]] = []
        for key in keys:
            if key == keep:
                continue
            try:
                entry = await self._store.load(key)
            except Exception:
                logger.warning("Unreadable cache entry %s, evicting first", key)
                entry = None
            stamped.append((entry.timestamp if entry else 0, key))
        stamped.sort()
        victims = [key for _, key in stamped[:overflow]]
        await self._store.delete(*victims)
        logger.debug("Evicted %d cached conversations", len(victims))
