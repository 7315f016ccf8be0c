"""Messaging façade: one object owning conversation, message and typing state.

Consumers call the async operations and subscribe to change notifications;
network failures never escape as exceptions, they are logged and leave the
previous state in place.
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable, Iterable, assert_never

from chat_sync.application.dto.conversation import NewConversationDTO
from chat_sync.application.dto.principal import Principal
from chat_sync.application.exceptions import AuthError
from chat_sync.application.ports.api import ChatApi
from chat_sync.application.ports.auth import TokenInspector, TokenProvider
from chat_sync.application.ports.clock import Clock, SystemClock
from chat_sync.application.ports.transport import TransportFactory
from chat_sync.domain.entities.conversation import Conversation
from chat_sync.domain.entities.message import Message
from chat_sync.domain.entities.user import User
from chat_sync.domain.events.inbound import (
    ConversationUpdated,
    InboundEvent,
    MessageReadReceived,
    MessageReceived,
    UserStatusChanged,
    UserTypingChanged,
)
from chat_sync.domain.events.outbound import MarkRead, SendMessage, SetTyping
from chat_sync.domain.value_objects.ids import ConversationId, MessageId, UserId
from chat_sync.services.connection_manager import ConnectionManager
from chat_sync.services.conversation_store import ConversationStore
from chat_sync.services.message_cache import MessageCache
from chat_sync.services.message_pager import MessagePager
from chat_sync.services.typing_indicator import TypingAnnouncer, TypingTracker

logger = logging.getLogger(__name__)

StateListener = Callable[[str], None]


class Messenger:
    def __init__(
        self,
        api: ChatApi,
        transport_factory: TransportFactory,
        cache: MessageCache,
        tokens: TokenProvider,
        inspector: TokenInspector,
        *,
        clock: Clock | None = None,
        page_size: int = 50,
        typing_idle_seconds: float = 2.0,
    ) -> None:
        self._api = api
        self._cache = cache
        self._tokens = tokens
        self._inspector = inspector
        self._clock = clock or SystemClock()
        self._listeners: list[StateListener] = []

        self.principal: Principal | None = None
        self.connection = ConnectionManager(transport_factory, self)
        self.store = ConversationStore(api, on_change=self._notify)
        self.pager = MessagePager(api, cache, page_size=page_size, on_change=self._notify)
        self.typing = TypingTracker()
        self.announcer = TypingAnnouncer(self.set_typing_status, typing_idle_seconds)

    # -- state ---------------------------------------------------------------

    @property
    def current_user_id(self) -> UserId | None:
        return self.principal.user_id if self.principal else None

    @property
    def conversations(self) -> list[Conversation]:
        return self.store.conversations

    @property
    def active_conversation(self) -> Conversation | None:
        return self.store.active

    @property
    def messages(self) -> list[Message]:
        return self.pager.messages

    @property
    def loading(self) -> bool:
        return self.store.loading or self.pager.loading

    @property
    def loading_more(self) -> bool:
        return self.pager.loading_more

    @property
    def has_more_messages(self) -> bool:
        return self.pager.has_more_messages

    @property
    def typing_users(self) -> dict[str, list[str]]:
        return self.typing.snapshot()

    @property
    def last_error(self) -> dict[str, str | None]:
        return {"conversations": self.store.last_error, "messages": self.pager.last_error}

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register ``listener(topic)``; returns a callable that unregisters it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    # -- session -------------------------------------------------------------

    async def start(self) -> bool:
        token = self._tokens.get_auth_token()
        if not token:
            logger.warning("No auth token, messaging not started")
            return False
        try:
            principal = await self._inspector.inspect(token)
        except AuthError as exc:
            logger.warning("Messaging not started: %s", exc)
            return False

        if self.principal is not None and self.principal.user_id != principal.user_id:
            logger.info("User changed, resetting messaging state")
            await self.stop()
            self._reset_state()
        self.principal = principal

        await self.connection.connect(token)
        await self.fetch_conversations()
        return True

    async def stop(self) -> None:
        await self.announcer.stop()
        await self.connection.disconnect()
        await self.pager.close()

    @asynccontextmanager
    async def session(self) -> AsyncIterator[Messenger]:
        await self.start()
        try:
            yield self
        finally:
            await self.stop()

    # -- conversations -------------------------------------------------------

    async def fetch_conversations(self) -> None:
        if self.principal is None:
            return
        await self.store.fetch()

    async def create_conversation(
        self,
        name: str,
        participant_ids: Iterable[UserId],
        is_group: bool = False,
    ) -> Conversation | None:
        if self.principal is None:
            return None
        participants = tuple(dict.fromkeys(participant_ids))
        if not participants:
            logger.warning("Conversation needs at least one participant")
            return None
        if is_group and not name.strip():
            logger.warning("Group conversation needs a name")
            return None
        dto = NewConversationDTO(
            name=name.strip() if is_group else "",
            participants=participants,
            is_group=is_group,
        )
        return await self.store.create(dto)

    async def list_members(self) -> list[User]:
        """Members that can be added to a new conversation."""
        if self.principal is None:
            return []
        try:
            members = await self._api.list_members()
        except Exception:
            logger.exception("Error fetching users")
            return []
        return [m for m in members if m.id != self.principal.user_id]

    async def set_active_conversation_by_id(self, conversation_id: ConversationId) -> bool:
        conversation = self.store.get(conversation_id)
        if conversation is None:
            return False
        await self._activate(conversation.id)
        return True

    async def set_active_conversation(self, conversation: Conversation) -> None:
        if self.store.get(conversation.id) is None:
            self.store.upsert(conversation)
        await self._activate(conversation.id)

    async def _activate(self, conversation_id: ConversationId, use_cache: bool = True) -> None:
        await self.announcer.stop()
        self.store.active_id = conversation_id
        self.pager.reset(conversation_id)
        self._notify("active")
        await self.pager.fetch_messages(conversation_id, use_cache=use_cache)

    # -- messages ------------------------------------------------------------

    async def fetch_messages(self, conversation_id: ConversationId, use_cache: bool = True) -> None:
        """Refresh the active conversation, or switch to ``conversation_id`` first."""
        if self.principal is None or not conversation_id:
            return
        if conversation_id != self.store.active_id:
            if self.store.get(conversation_id) is None:
                logger.debug("Ignoring fetch for unknown conversation %s", conversation_id)
                return
            await self._activate(conversation_id, use_cache=use_cache)
            return
        await self.pager.fetch_messages(conversation_id, use_cache=use_cache)

    async def load_more_messages(self) -> None:
        active_id = self.store.active_id
        if active_id is None or self.pager.conversation_id != active_id:
            return
        await self.pager.load_more()

    async def send_message(
        self,
        conversation_id: ConversationId,
        content: str,
        attachments: Iterable[str] = (),
    ) -> bool:
        """Emit the message; it shows up when the server echoes it back."""
        content = content.strip() if content else ""
        if not conversation_id or not content:
            return False
        return await self.connection.emit(
            SendMessage(conversation_id, content, tuple(attachments)),
        )

    async def mark_read(self, conversation_id: ConversationId, message_id: MessageId) -> bool:
        return await self.connection.emit(MarkRead(conversation_id, message_id))

    async def clear_message_cache(self, conversation_id: ConversationId | None = None) -> None:
        await self._cache.clear(conversation_id)

    # -- typing --------------------------------------------------------------

    async def set_typing_status(self, conversation_id: ConversationId, is_typing: bool) -> None:
        if not conversation_id:
            return
        await self.connection.emit(SetTyping(conversation_id, is_typing))

    async def note_keystroke(self) -> None:
        """Composer input changed in the active conversation."""
        if self.store.active_id is None:
            return
        await self.announcer.keystroke(self.store.active_id)

    # -- transport listener --------------------------------------------------

    async def on_connected(self, reconnected: bool) -> None:
        self._notify("connection")
        if reconnected:
            logger.info("Reconnected, resyncing conversations")
            await self._resync()

    async def on_disconnected(self) -> None:
        self.typing.clear()
        self._notify("connection")
        self._notify("typing")

    async def on_event(self, event: InboundEvent) -> None:
        await self.handle_event(event)

    async def handle_event(self, event: InboundEvent) -> None:
        match event:
            case MessageReceived(message=message):
                appended = await self.pager.append(message)
                if appended and message.conversation_id == self.store.active_id:
                    await self.connection.emit(MarkRead(message.conversation_id, message.id))
            case ConversationUpdated(conversation_id=cid, last_message=last_message):
                self.store.apply_last_message(cid, last_message)
            case UserStatusChanged(user_id=user_id, is_online=is_online, last_seen=last_seen):
                self.store.apply_presence(user_id, is_online, last_seen)
            case UserTypingChanged(user_id=user_id, conversation_id=cid, is_typing=is_typing):
                if self.typing.apply(cid, user_id, is_typing):
                    self._notify("typing")
            case MessageReadReceived(message_id=message_id, user_id=user_id):
                await self.pager.apply_read(message_id, user_id, self._clock.now())
            case _:
                assert_never(event)

    async def _resync(self) -> None:
        await self.store.fetch()
        active_id = self.store.active_id
        if active_id is not None:
            await self.pager.fetch_messages(active_id, use_cache=False)

    def _reset_state(self) -> None:
        self.store.replace_all([])
        self.store.active_id = None
        self.pager.reset(None)
        self.typing.clear()

    def _notify(self, topic: str) -> None:
        for listener in list(self._listeners):
            try:
                listener(topic)
            except Exception:
                logger.exception("State listener failed on %s", topic)
