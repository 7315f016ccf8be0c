"""httpx-backed client for the messaging server's REST endpoints."""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

import httpx
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from chat_sync.application.dto.conversation import NewConversationDTO
from chat_sync.application.dto.message import MessagePage
from chat_sync.application.exceptions import ApiError, AuthError
from chat_sync.application.ports.auth import TokenProvider
from chat_sync.domain.entities.conversation import Conversation
from chat_sync.domain.entities.user import User
from chat_sync.domain.value_objects.ids import ConversationId
from chat_sync.infrastructure.http.schemas import (
    ConversationSchema,
    CreateConversationRequest,
    MessagePageSchema,
    UserSchema,
)
from chat_sync.infrastructure.mappers import conversation as conversation_mapper
from chat_sync.infrastructure.mappers import message as message_mapper
from chat_sync.infrastructure.mappers import user as user_mapper

logger = logging.getLogger(__name__)

_conversation_list = TypeAdapter(list[ConversationSchema])
_user_list = TypeAdapter(list[UserSchema])
_conversation = TypeAdapter(ConversationSchema)
_message_page = TypeAdapter(MessagePageSchema)


def format_cursor(ts: datetime) -> str:
    """ISO-8601 UTC with millisecond precision and a ``Z`` suffix."""
    utc = ts.astimezone(timezone.utc) if ts.tzinfo else ts.replace(tzinfo=timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class HttpChatApi:
    """Implements application.ports.api.ChatApi."""

    def __init__(self, client: httpx.AsyncClient, tokens: TokenProvider) -> None:
        self._client = client
        self._tokens = tokens

    async def list_conversations(self) -> list[Conversation]:
        data = await self._request("GET", "/api/conversations")
        schemas = self._parse(_conversation_list, data)
        return [conversation_mapper.schema_to_entity(s) for s in schemas]

    async def create_conversation(self, dto: NewConversationDTO) -> Conversation:
        body = CreateConversationRequest(
            name=dto.name,
            participants=list(dto.participants),
            is_group=dto.is_group,
        )
        data = await self._request(
            "POST", "/api/conversations", json=body.model_dump(by_alias=True),
        )
        schema = self._parse(_conversation, data)
        return conversation_mapper.schema_to_entity(schema)

    async def list_members(self) -> list[User]:
        data = await self._request("GET", "/api/users/members")
        return [user_mapper.schema_to_entity(s) for s in self._parse(_user_list, data)]

    async def list_messages(
        self,
        conversation_id: ConversationId,
        *,
        before: datetime | None = None,
        limit: int = 50,
    ) -> MessagePage:
        params: dict[str, Any] = {"limit": limit}
        if before is not None:
            params["before"] = format_cursor(before)
        data = await self._request("GET", f"/api/messages/{conversation_id}", params=params)
        page = self._parse(_message_page, data)
        return MessagePage(
            messages=tuple(message_mapper.schema_to_entity(m) for m in page.messages),
            has_more=page.has_more,
        )

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        token = self._tokens.get_auth_token()
        if not token:
            raise AuthError("No bearer token available")
        headers = {"Authorization": f"Bearer {token}"}
        try:
            resp = await self._client.request(method, path, headers=headers, **kwargs)
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise ApiError(
                f"{method} {path} failed: {exc.response.status_code}",
                status_code=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            raise ApiError(f"{method} {path} failed: {exc}") from exc
        logger.debug("%s %s -> %d", method, path, resp.status_code)
        try:
            return resp.json()
        except ValueError as exc:
            raise ApiError(f"{method} {path} returned invalid JSON") from exc

    @staticmethod
    def _parse(adapter: TypeAdapter[Any], data: Any) -> Any:
        try:
            return adapter.validate_python(data)
        except PydanticValidationError as exc:
            raise ApiError(f"Unexpected response shape: {exc.error_count()} errors") from exc
