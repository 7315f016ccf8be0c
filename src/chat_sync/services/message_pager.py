"""In-memory message history for the open conversation.

Hydration is cache-first: a fresh cache entry is shown immediately while the
latest page is fetched in the background and replaces the list wholesale.
Older history is paged in with a ``before`` cursor and merged by message id.
"""
from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Any, Callable, Coroutine, Iterable

from chat_sync.application.ports.api import ChatApi
from chat_sync.domain.entities.message import Message
from chat_sync.domain.value_objects.ids import ConversationId, MessageId, UserId
from chat_sync.services.message_cache import MessageCache

logger = logging.getLogger(__name__)

OnChange = Callable[[str], None]


def oldest_created_at(messages: Iterable[Message]) -> datetime | None:
    return min((m.created_at for m in messages), default=None)


def merge_pages(current: Iterable[Message], older: Iterable[Message]) -> list[Message]:
    """Union of two pages keyed by message id; later duplicates win.

    The result is ordered by ``created_at`` (stable for equal timestamps).
    """
    merged: dict[MessageId, Message] = {}
    for m in (*current, *older):
        merged[m.id] = m
    return sorted(merged.values(), key=lambda m: m.created_at)


class MessagePager:
    def __init__(
        self,
        api: ChatApi,
        cache: MessageCache,
        *,
        page_size: int = 50,
        on_change: OnChange | None = None,
    ) -> None:
        self._api = api
        self._cache = cache
        self._page_size = page_size
        self._on_change = on_change or (lambda _topic: None)
        self._messages: list[Message] = []
        self._generation = 0
        self._background: set[asyncio.Task[None]] = set()

        self.conversation_id: ConversationId | None = None
        self.loading = False
        self.loading_more = False
        self.has_more_messages = True
        self.oldest_message_date: datetime | None = None
        self.last_error: str | None = None

    @property
    def messages(self) -> list[Message]:
        return list(self._messages)

    def reset(self, conversation_id: ConversationId | None) -> None:
        """Drop all per-conversation state; late results for the old one are discarded."""
        self._generation += 1
        self.conversation_id = conversation_id
        self._messages = []
        self.has_more_messages = True
        self.oldest_message_date = None
        self.loading = False
        self.loading_more = False
        self.last_error = None
        self._notify()

    async def fetch_messages(self, conversation_id: ConversationId, use_cache: bool = True) -> None:
        if not conversation_id:
            return
        if conversation_id != self.conversation_id:
            self.reset(conversation_id)
        generation = self._generation
        self.loading = True
        self._notify()

        if use_cache:
            cached = await self._cache.load(conversation_id)
            if generation != self._generation:
                return
            if cached:
                self._messages = cached
                self.oldest_message_date = oldest_created_at(cached)
                self.loading = False
                self._notify()
                self._spawn(self._fetch_latest(conversation_id, generation))
                return

        await self._fetch_latest(conversation_id, generation)

    async def load_more(self) -> None:
        conversation_id = self.conversation_id
        before = self.oldest_message_date
        if (
            conversation_id is None
            or before is None
            or self.loading_more
            or not self.has_more_messages
        ):
            return

        generation = self._generation
        self.loading_more = True
        self._notify()
        try:
            page = await self._api.list_messages(
                conversation_id, before=before, limit=self._page_size,
            )
        except Exception as exc:
            logger.exception("Error fetching older messages for %s", conversation_id)
            if generation == self._generation:
                self.last_error = str(exc)
        else:
            if generation != self._generation:
                logger.debug("Discarding stale history page for %s", conversation_id)
                return
            self._messages = merge_pages(self._messages, page.messages)
            self.has_more_messages = page.has_more
            self.oldest_message_date = oldest_created_at(self._messages)
            self.last_error = None
        finally:
            if generation == self._generation:
                self.loading_more = False
                self._notify()

    async def append(self, message: Message) -> bool:
        """Insert a server-confirmed message once; True if it was new."""
        if message.conversation_id != self.conversation_id:
            return False
        if any(m.id == message.id for m in self._messages):
            return False
        self._messages.append(message)
        if self.oldest_message_date is None:
            self.oldest_message_date = message.created_at
        self._notify()
        await self._cache.save(message.conversation_id, self._messages)
        return True

    async def apply_read(self, message_id: MessageId, user_id: UserId, read_at: datetime) -> bool:
        for i, m in enumerate(self._messages):
            if m.id != message_id:
                continue
            updated = m.with_read_receipt(user_id, read_at)
            if updated is m:
                return False
            self._messages[i] = updated
            self._notify()
            if self.conversation_id is not None:
                await self._cache.save(self.conversation_id, self._messages)
            return True
        return False

    async def wait_idle(self) -> None:
        """Wait for background refreshes started by cache-first hydration."""
        while self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)

    async def close(self) -> None:
        for task in list(self._background):
            task.cancel()
        await asyncio.gather(*list(self._background), return_exceptions=True)

    async def _fetch_latest(self, conversation_id: ConversationId, generation: int) -> None:
        try:
            page = await self._api.list_messages(conversation_id, limit=self._page_size)
        except Exception as exc:
            logger.exception("Error fetching messages from server for %s", conversation_id)
            if generation == self._generation:
                self.last_error = str(exc)
        else:
            if generation != self._generation:
                logger.debug("Discarding stale latest page for %s", conversation_id)
                return
            self._messages = list(page.messages)
            self.has_more_messages = page.has_more
            self.oldest_message_date = oldest_created_at(self._messages)
            self.last_error = None
            await self._cache.save(conversation_id, self._messages)
        finally:
            if generation == self._generation:
                self.loading = False
                self._notify()

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> None:
        task = asyncio.create_task(coro, name="messages-refresh")
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    def _notify(self) -> None:
        self._on_change("messages")
