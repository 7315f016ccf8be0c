from __future__ import annotations

from dataclasses import dataclass

from chat_sync.domain.value_objects.ids import UserId


@dataclass(frozen=True, slots=True)
class Principal:
    """Current user as read from the bearer token."""

    user_id: UserId
    token: str
    name: str | None = None
    role: str | None = None
