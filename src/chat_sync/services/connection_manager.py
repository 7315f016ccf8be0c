"""Lifecycle of the single realtime connection of a user session."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from chat_sync.application.exceptions import TransportError
from chat_sync.application.ports.transport import (
    RealtimeTransport,
    TransportFactory,
    TransportListener,
)
from chat_sync.domain.events.outbound import OutboundEvent

logger = logging.getLogger(__name__)


class ConnectionManager:
    def __init__(self, factory: TransportFactory, listener: TransportListener) -> None:
        self._factory = factory
        self._listener = listener
        self._transport: RealtimeTransport | None = None

    @property
    def is_active(self) -> bool:
        return self._transport is not None

    @property
    def is_connected(self) -> bool:
        return self._transport is not None and self._transport.connected

    async def connect(self, auth_token: str | None) -> bool:
        """Open the session's connection; stays idle without a token."""
        if not auth_token or not auth_token.strip():
            logger.warning("No auth token, socket connection skipped")
            return False
        if self._transport is not None:
            await self.disconnect()
        transport = self._factory(auth_token, self._listener)
        try:
            await transport.start()
        except TransportError:
            logger.exception("Socket connection error")
            return False
        self._transport = transport
        return True

    async def disconnect(self) -> None:
        transport, self._transport = self._transport, None
        if transport is None:
            return
        try:
            await transport.stop()
        except Exception:
            logger.exception("Error while closing socket")

    async def emit(self, event: OutboundEvent) -> bool:
        if self._transport is None:
            logger.debug("Not connected, dropping %s", type(event).__name__)
            return False
        try:
            await self._transport.send(event)
        except TransportError as exc:
            logger.warning("Could not emit %s: %s", type(event).__name__, exc)
            return False
        return True

    @asynccontextmanager
    async def session(self, auth_token: str | None) -> AsyncIterator[ConnectionManager]:
        await self.connect(auth_token)
        try:
            yield self
        finally:
            await self.disconnect()
