from __future__ import annotations

from dataclasses import dataclass

from chat_sync.domain.entities.message import Message


@dataclass(frozen=True, slots=True)
class MessagePage:
    """One page of history as returned by the messages endpoint."""

    messages: tuple[Message, ...]
    has_more: bool


@dataclass(frozen=True, slots=True)
class CacheEntry:
    """Locally persisted snapshot of a conversation's recent messages.

    ``timestamp`` is the capture time in epoch milliseconds.
    """

    messages: tuple[Message, ...]
    timestamp: int
