from __future__ import annotations

from datetime import datetime
from typing import Protocol

from chat_sync.application.dto.conversation import NewConversationDTO
from chat_sync.application.dto.message import MessagePage
from chat_sync.domain.entities.conversation import Conversation
from chat_sync.domain.entities.user import User
from chat_sync.domain.value_objects.ids import ConversationId


class ChatApi(Protocol):
    """REST side of the messaging server."""

    async def list_conversations(self) -> list[Conversation]: ...

    async def create_conversation(self, dto: NewConversationDTO) -> Conversation: ...

    async def list_members(self) -> list[User]: ...

    async def list_messages(
        self,
        conversation_id: ConversationId,
        *,
        before: datetime | None = None,
        limit: int = 50,
    ) -> MessagePage: ...
