"""websockets-based realtime transport with reconnect and backoff."""
from __future__ import annotations

import asyncio
import logging
from urllib.parse import urlencode

from pydantic import ValidationError as PydanticValidationError
from websockets.asyncio.client import ClientConnection, connect
from websockets.exceptions import ConnectionClosed

from chat_sync.application.exceptions import TransportError
from chat_sync.application.ports.transport import TransportListener
from chat_sync.domain.events.outbound import OutboundEvent
from chat_sync.infrastructure.ws.protocol import encode_outbound, parse_inbound

logger = logging.getLogger(__name__)

# Server closes with this code when the bearer token is rejected.
AUTH_FAILED_CLOSE_CODE = 4001


def calc_backoff(attempts: int, base: float, maximum: float) -> float:
    return min(base * (2 ** attempts), maximum)


class WebSocketTransport:
    """Implements application.ports.transport.RealtimeTransport."""

    def __init__(
        self,
        url: str,
        token: str,
        listener: TransportListener,
        *,
        base_delay: float = 1.0,
        max_delay: float = 30.0,
    ) -> None:
        self._url = f"{url}{'&' if '?' in url else '?'}{urlencode({'token': token})}"
        self._listener = listener
        self._base_delay = base_delay
        self._max_delay = max_delay
        self._ws: ClientConnection | None = None
        self._task: asyncio.Task[None] | None = None

    @property
    def connected(self) -> bool:
        return self._ws is not None

    async def start(self) -> None:
        if self._task is not None:
            return
        self._task = asyncio.create_task(self._run(), name="ws-transport")

    async def stop(self) -> None:
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
            logger.info("Socket disconnected")

    async def send(self, event: OutboundEvent) -> None:
        ws = self._ws
        if ws is None:
            raise TransportError("Socket is not connected")
        try:
            await ws.send(encode_outbound(event))
        except ConnectionClosed as exc:
            raise TransportError(f"Socket closed while sending: {exc}") from exc

    async def _run(self) -> None:
        attempts = 0
        connected_once = False
        while True:
            try:
                async with connect(self._url) as ws:
                    self._ws = ws
                    attempts = 0
                    logger.info("Socket connected")
                    await self._listener.on_connected(reconnected=connected_once)
                    connected_once = True
                    async for raw in ws:
                        await self._dispatch(raw)
            except ConnectionClosed as exc:
                if exc.rcvd is not None and exc.rcvd.code == AUTH_FAILED_CLOSE_CODE:
                    logger.error("Socket authentication failed, giving up: %s", exc.rcvd.reason)
                    await self._drop()
                    return
                logger.warning("Socket closed: %s", exc)
            except asyncio.CancelledError:
                await self._drop()
                raise
            except (OSError, TimeoutError) as exc:
                logger.error("Socket connection error: %s", exc)
            except Exception:
                logger.exception("Socket connection error")
            await self._drop()

            delay = calc_backoff(attempts, self._base_delay, self._max_delay)
            attempts += 1
            logger.info("Reconnecting in %.1fs (attempt %d)", delay, attempts)
            await asyncio.sleep(delay)

    async def _dispatch(self, raw: str | bytes) -> None:
        try:
            event = parse_inbound(raw)
        except PydanticValidationError:
            logger.warning("Dropping malformed socket frame", exc_info=True)
            return
        if event is None:
            return
        try:
            await self._listener.on_event(event)
        except Exception:
            logger.exception("Error processing socket event %s", type(event).__name__)

    async def _drop(self) -> None:
        if self._ws is None:
            return
        self._ws = None
        try:
            await self._listener.on_disconnected()
        except Exception:
            logger.exception("Error in disconnect handler")
