from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime

from chat_sync.domain.value_objects.ids import UserId


@dataclass(frozen=True, slots=True)
class User:
    id: UserId
    name: str
    profile_picture: str | None = None
    designation: str | None = None
    is_online: bool = False
    last_seen: datetime | None = None

    def with_presence(self, is_online: bool, last_seen: datetime | None) -> User:
        return replace(self, is_online=is_online, last_seen=last_seen)
