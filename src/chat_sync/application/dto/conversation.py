from __future__ import annotations

from dataclasses import dataclass

from chat_sync.domain.value_objects.ids import UserId


@dataclass(frozen=True, slots=True)
class NewConversationDTO:
    name: str
    participants: tuple[UserId, ...]
    is_group: bool = False
