from __future__ import annotations

from typing import Callable, Protocol

from chat_sync.domain.events.inbound import InboundEvent
from chat_sync.domain.events.outbound import OutboundEvent


class TransportListener(Protocol):
    """Receives lifecycle and inbound events from a realtime transport."""

    async def on_connected(self, reconnected: bool) -> None: ...

    async def on_disconnected(self) -> None: ...

    async def on_event(self, event: InboundEvent) -> None: ...


class RealtimeTransport(Protocol):
    @property
    def connected(self) -> bool: ...

    async def start(self) -> None: ...

    async def stop(self) -> None: ...

    async def send(self, event: OutboundEvent) -> None: ...


TransportFactory = Callable[[str, TransportListener], RealtimeTransport]
