"""Typing indicators: who is typing where, and debounced local announcements."""
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

from chat_sync.domain.value_objects.ids import ConversationId, UserId

logger = logging.getLogger(__name__)

AnnounceTyping = Callable[[ConversationId, bool], Awaitable[None]]


class TypingTracker:
    """Conversation id -> users currently typing there. Never persisted."""

    def __init__(self) -> None:
        self._typing: dict[ConversationId, set[UserId]] = {}

    def apply(self, conversation_id: ConversationId, user_id: UserId, is_typing: bool) -> bool:
        users = self._typing.setdefault(conversation_id, set())
        if is_typing:
            if user_id in users:
                return False
            users.add(user_id)
            return True
        if user_id not in users:
            return False
        users.discard(user_id)
        if not users:
            del self._typing[conversation_id]
        return True

    def typing_in(self, conversation_id: ConversationId) -> frozenset[UserId]:
        return frozenset(self._typing.get(conversation_id, ()))

    def is_anyone_typing(self, conversation_id: ConversationId) -> bool:
        return bool(self._typing.get(conversation_id))

    def snapshot(self) -> dict[str, list[str]]:
        return {cid: sorted(users) for cid, users in self._typing.items() if users}

    def clear(self) -> None:
        self._typing.clear()


class TypingAnnouncer:
    """Debounces keystrokes into typing=true / typing=false announcements.

    The first keystroke announces typing=true; each keystroke re-arms an idle
    timer, and typing=false is announced once the timer runs out or the
    composer moves to another conversation.
    """

    def __init__(self, announce: AnnounceTyping, idle_seconds: float = 2.0) -> None:
        self._announce = announce
        self._idle_seconds = idle_seconds
        self._conversation_id: ConversationId | None = None
        self._typing = False
        self._timer: asyncio.Task[None] | None = None

    @property
    def is_typing(self) -> bool:
        return self._typing

    async def keystroke(self, conversation_id: ConversationId) -> None:
        if self._conversation_id != conversation_id:
            await self.stop()
            self._conversation_id = conversation_id
        if not self._typing:
            self._typing = True
            await self._announce(conversation_id, True)
        self._cancel_timer()
        self._timer = asyncio.create_task(self._expire(), name="typing-idle")

    async def stop(self) -> None:
        """Announce typing=false if a typing state is still open."""
        self._cancel_timer()
        if self._typing and self._conversation_id is not None:
            self._typing = False
            await self._announce(self._conversation_id, False)

    async def _expire(self) -> None:
        await asyncio.sleep(self._idle_seconds)
        self._timer = None
        try:
            await self.stop()
        except Exception:
            logger.exception("Error announcing typing stop")

    def _cancel_timer(self) -> None:
        if self._timer is not None and self._timer is not asyncio.current_task():
            self._timer.cancel()
        self._timer = None
