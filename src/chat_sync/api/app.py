from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import redis.asyncio as aioredis
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from chat_sync.api.routers import debug, health
from chat_sync.application.exceptions import NotFoundError
from chat_sync.bootstrap import build_http_client, build_messenger
from chat_sync.config import settings
from chat_sync.infrastructure.auth.static_token import StaticTokenProvider
from chat_sync.services.messenger import Messenger

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup / shutdown lifecycle."""
    if app.state.messenger is not None:
        yield
        return

    app.state.redis = None
    if settings.CACHE_BACKEND == "redis":
        app.state.redis = aioredis.from_url(settings.REDIS_URL, decode_responses=True)
        logger.info("Redis connection pool created")

    http_client = build_http_client(settings)
    messenger = build_messenger(
        settings,
        tokens=StaticTokenProvider(settings.CHAT_AUTH_TOKEN),
        http_client=http_client,
        redis=app.state.redis,
    )
    app.state.messenger = messenger

    async with messenger.session():
        yield

    await http_client.aclose()
    if app.state.redis is not None:
        await app.state.redis.aclose()
        logger.info("Redis connection pool closed")


def create_app(messenger: Messenger | None = None) -> FastAPI:
    app = FastAPI(
        title="Chat Sync Debug Console",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.messenger = messenger
    app.state.redis = None

    _register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(debug.router)

    return app


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(NotFoundError)
    async def _not_found(_req: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": exc.detail})
