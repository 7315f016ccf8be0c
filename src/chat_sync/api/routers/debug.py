"""Inspection and cache tools for a running messenger."""
from __future__ import annotations

from fastapi import APIRouter

from chat_sync.api.deps import MessengerDep
from chat_sync.api.schemas import CacheClearedResponse, ConversationSummary, DebugStateResponse
from chat_sync.application.exceptions import NotFoundError
from chat_sync.domain.value_objects.ids import ConversationId
from chat_sync.services import presentation

router = APIRouter(prefix="/debug", tags=["debug"])


@router.get("/state", response_model=DebugStateResponse)
async def get_state(messenger: MessengerDep) -> DebugStateResponse:
    me = messenger.current_user_id
    active = messenger.active_conversation
    return DebugStateResponse(
        user_id=me,
        connected=messenger.connection.is_connected,
        active_conversation_id=active.id if active else None,
        conversations=[
            ConversationSummary(
                id=c.id,
                name=presentation.display_name(c, me),
                is_group=c.is_group,
                participants=len(c.participants),
                unread_count=c.unread_count,
                last_message=presentation.last_message_preview(c.last_message),
            )
            for c in messenger.conversations
        ],
        message_count=len(messenger.messages),
        loading=messenger.loading,
        loading_more=messenger.loading_more,
        has_more_messages=messenger.has_more_messages,
        oldest_message_date=messenger.pager.oldest_message_date,
        typing_users=messenger.typing_users,
        last_error=messenger.last_error,
    )


@router.put("/active/{conversation_id}", response_model=DebugStateResponse)
async def set_active(conversation_id: str, messenger: MessengerDep) -> DebugStateResponse:
    found = await messenger.set_active_conversation_by_id(ConversationId(conversation_id))
    if not found:
        raise NotFoundError(f"Conversation {conversation_id} not found")
    return await get_state(messenger)


@router.delete("/cache", response_model=CacheClearedResponse)
async def clear_all_caches(messenger: MessengerDep) -> CacheClearedResponse:
    await messenger.clear_message_cache()
    return CacheClearedResponse(cleared="all")


@router.delete("/cache/{conversation_id}", response_model=CacheClearedResponse)
async def clear_cache(conversation_id: str, messenger: MessengerDep) -> CacheClearedResponse:
    await messenger.clear_message_cache(ConversationId(conversation_id))
    return CacheClearedResponse(cleared=conversation_id)
