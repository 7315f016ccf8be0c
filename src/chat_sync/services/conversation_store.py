from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from chat_sync.application.dto.conversation import NewConversationDTO
from chat_sync.application.ports.api import ChatApi
from chat_sync.domain.entities.conversation import Conversation, LastMessage
from chat_sync.domain.value_objects.ids import ConversationId, UserId

logger = logging.getLogger(__name__)

OnChange = Callable[[str], None]


class ConversationStore:
    """Conversations of the current user, keyed by id, in display order.

    The active conversation is only an id; its view is looked up in the same
    store, so presence and preview updates reach it without a second copy.
    """

    def __init__(self, api: ChatApi, *, on_change: OnChange | None = None) -> None:
        self._api = api
        self._on_change = on_change or (lambda _topic: None)
        self._by_id: dict[ConversationId, Conversation] = {}
        self._order: list[ConversationId] = []

        self.active_id: ConversationId | None = None
        self.loading = False
        self.last_error: str | None = None

    @property
    def conversations(self) -> list[Conversation]:
        return [self._by_id[cid] for cid in self._order]

    @property
    def active(self) -> Conversation | None:
        if self.active_id is None:
            return None
        return self._by_id.get(self.active_id)

    def get(self, conversation_id: ConversationId) -> Conversation | None:
        return self._by_id.get(conversation_id)

    def replace_all(self, conversations: list[Conversation]) -> None:
        self._by_id = {}
        self._order = []
        for conv in conversations:
            if conv.id not in self._by_id:
                self._order.append(conv.id)
            self._by_id[conv.id] = conv
        self._notify()

    def upsert(self, conversation: Conversation) -> None:
        """Store ``conversation``, moving it to the top of the list."""
        if conversation.id in self._by_id:
            self._order.remove(conversation.id)
        self._order.insert(0, conversation.id)
        self._by_id[conversation.id] = conversation
        self._notify()

    async def fetch(self) -> bool:
        self.loading = True
        self._notify()
        try:
            conversations = await self._api.list_conversations()
        except Exception as exc:
            logger.exception("Error fetching conversations")
            self.last_error = str(exc)
            return False
        else:
            self.last_error = None
            self.replace_all(conversations)
            return True
        finally:
            self.loading = False
            self._notify()

    async def create(self, dto: NewConversationDTO) -> Conversation | None:
        try:
            conversation = await self._api.create_conversation(dto)
        except Exception:
            logger.exception("Error creating conversation")
            return None
        self.upsert(conversation)
        logger.info("Created conversation %s", conversation.id)
        return conversation

    def apply_last_message(
        self,
        conversation_id: ConversationId,
        last_message: LastMessage | None,
    ) -> bool:
        conv = self._by_id.get(conversation_id)
        if conv is None:
            logger.debug("Ignoring update for unknown conversation %s", conversation_id)
            return False
        self._by_id[conversation_id] = conv.with_last_message(last_message)
        self._notify()
        return True

    def apply_presence(
        self,
        user_id: UserId,
        is_online: bool,
        last_seen: datetime | None,
    ) -> int:
        """Update the participant in every conversation containing them."""
        touched = 0
        for cid, conv in self._by_id.items():
            if conv.has_participant(user_id):
                self._by_id[cid] = conv.with_participant_presence(user_id, is_online, last_seen)
                touched += 1
        if touched:
            self._notify()
        return touched

    def _notify(self) -> None:
        self._on_change("conversations")
