from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime

from chat_sync.domain.entities.user import User
from chat_sync.domain.value_objects.ids import ConversationId, UserId


@dataclass(frozen=True, slots=True)
class LastMessage:
    """Denormalized preview of the newest message in a conversation."""

    content: str
    created_at: datetime | None = None
    sender_id: UserId | None = None


@dataclass(frozen=True, slots=True)
class Conversation:
    id: ConversationId
    is_group: bool
    name: str
    participants: tuple[User, ...]
    last_message: LastMessage | None = None
    unread_count: int = 0

    def has_participant(self, user_id: UserId) -> bool:
        return any(p.id == user_id for p in self.participants)

    def with_last_message(self, last_message: LastMessage | None) -> Conversation:
        return replace(self, last_message=last_message)

    def with_participant_presence(
        self,
        user_id: UserId,
        is_online: bool,
        last_seen: datetime | None,
    ) -> Conversation:
        participants = tuple(
            p.with_presence(is_online, last_seen) if p.id == user_id else p
            for p in self.participants
        )
        return replace(self, participants=participants)
