from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class ConversationSummary(BaseModel):
    id: str
    name: str
    is_group: bool
    participants: int
    unread_count: int
    last_message: str


class DebugStateResponse(BaseModel):
    user_id: str | None
    connected: bool
    active_conversation_id: str | None
    conversations: list[ConversationSummary]
    message_count: int
    loading: bool
    loading_more: bool
    has_more_messages: bool
    oldest_message_date: datetime | None
    typing_users: dict[str, list[str]]
    last_error: dict[str, str | None]


class CacheClearedResponse(BaseModel):
    cleared: str
