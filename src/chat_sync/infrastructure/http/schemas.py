"""Wire models for the messaging server's JSON payloads.

The server speaks camelCase with Mongo-style ``_id`` keys; every model
accepts either the alias or the field name and dumps by alias.
"""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class UserSchema(WireModel):
    id: str = Field(alias="_id")
    name: str = ""
    profile_picture: str | None = Field(default=None, alias="profilePicture")
    designation: str | None = None
    is_online: bool = Field(default=False, alias="isOnline")
    last_seen: datetime | None = Field(default=None, alias="lastSeen")


class ReadReceiptSchema(WireModel):
    user: str | UserSchema
    read_at: datetime | None = Field(default=None, alias="readAt")


class MessageSchema(WireModel):
    id: str = Field(alias="_id")
    conversation_id: str = Field(alias="conversationId")
    sender: UserSchema
    content: str = ""
    attachments: list[str] = []
    created_at: datetime = Field(alias="createdAt")
    read_by: list[ReadReceiptSchema] = Field(default=[], alias="readBy")


class LastMessageSchema(WireModel):
    content: str = ""
    created_at: datetime | None = Field(default=None, alias="createdAt")
    sender: str | UserSchema | None = None


class ConversationSchema(WireModel):
    id: str = Field(alias="_id")
    is_group: bool = Field(default=False, alias="isGroup")
    name: str = ""
    participants: list[UserSchema] = []
    last_message: LastMessageSchema | None = Field(default=None, alias="lastMessage")
    unread_count: int = Field(default=0, alias="unreadCount")


class MessagePageSchema(WireModel):
    messages: list[MessageSchema] = []
    has_more: bool = Field(default=False, alias="hasMore")


class CreateConversationRequest(WireModel):
    name: str
    participants: list[str]
    is_group: bool = Field(default=False, alias="isGroup")


class CacheEntrySchema(WireModel):
    messages: list[MessageSchema] = []
    timestamp: int
