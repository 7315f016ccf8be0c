from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime

from chat_sync.domain.entities.user import User
from chat_sync.domain.value_objects.ids import ConversationId, MessageId, UserId


@dataclass(frozen=True, slots=True)
class ReadReceipt:
    user_id: UserId
    read_at: datetime


@dataclass(frozen=True, slots=True)
class Message:
    id: MessageId
    conversation_id: ConversationId
    sender: User
    content: str
    created_at: datetime
    attachments: tuple[str, ...] = ()
    read_by: tuple[ReadReceipt, ...] = ()

    def is_read_by(self, user_id: UserId) -> bool:
        return any(r.user_id == user_id for r in self.read_by)

    def with_read_receipt(self, user_id: UserId, read_at: datetime) -> Message:
        """Return a copy carrying a receipt for ``user_id``; unchanged if one exists."""
        if self.is_read_by(user_id):
            return self
        return replace(self, read_by=(*self.read_by, ReadReceipt(user_id, read_at)))
