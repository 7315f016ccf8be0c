"""Assembles a Messenger from settings."""
from __future__ import annotations

import httpx
import redis.asyncio as aioredis

from chat_sync.application.ports.auth import TokenProvider
from chat_sync.application.ports.cache import CacheStore
from chat_sync.application.ports.transport import TransportListener
from chat_sync.config import Settings
from chat_sync.infrastructure.auth.jwt_inspector import UnverifiedJWTInspector
from chat_sync.infrastructure.cache.memory_store import InMemoryCacheStore
from chat_sync.infrastructure.cache.redis_store import RedisCacheStore
from chat_sync.infrastructure.http.client import HttpChatApi
from chat_sync.infrastructure.ws.client import WebSocketTransport
from chat_sync.services.message_cache import MessageCache
from chat_sync.services.messenger import Messenger


def build_cache_store(settings: Settings, redis: aioredis.Redis | None = None) -> CacheStore:
    if settings.CACHE_BACKEND == "redis":
        if redis is None:
            raise ValueError("CACHE_BACKEND=redis needs a Redis client")
        return RedisCacheStore(redis)
    return InMemoryCacheStore()


def build_http_client(settings: Settings) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        base_url=settings.CHAT_API_URL,
        timeout=settings.HTTP_TIMEOUT_SECONDS,
    )


def build_messenger(
    settings: Settings,
    *,
    tokens: TokenProvider,
    http_client: httpx.AsyncClient,
    redis: aioredis.Redis | None = None,
) -> Messenger:
    def transport_factory(token: str, listener: TransportListener) -> WebSocketTransport:
        return WebSocketTransport(
            settings.websocket_url,
            token,
            listener,
            base_delay=settings.WS_RECONNECT_BASE_DELAY,
            max_delay=settings.WS_RECONNECT_MAX_DELAY,
        )

    cache = MessageCache(
        build_cache_store(settings, redis),
        key_prefix=settings.CACHE_KEY_PREFIX,
        ttl_seconds=settings.CACHE_TTL_SECONDS,
        window_days=settings.CACHE_WINDOW_DAYS,
        max_conversations=settings.CACHE_MAX_CONVERSATIONS,
        max_messages=settings.CACHE_MAX_MESSAGES,
    )
    return Messenger(
        HttpChatApi(http_client, tokens),
        transport_factory,
        cache,
        tokens,
        UnverifiedJWTInspector(),
        page_size=settings.MESSAGE_PAGE_SIZE,
        typing_idle_seconds=settings.TYPING_IDLE_SECONDS,
    )
