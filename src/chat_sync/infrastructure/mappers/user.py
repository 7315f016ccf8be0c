from __future__ import annotations

from datetime import datetime, timezone

from chat_sync.domain.entities.user import User
from chat_sync.domain.value_objects.ids import UserId
from chat_sync.infrastructure.http.schemas import UserSchema


def as_utc(ts: datetime) -> datetime:
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def schema_to_entity(schema: UserSchema) -> User:
    return User(
        id=UserId(schema.id),
        name=schema.name,
        profile_picture=schema.profile_picture,
        designation=schema.designation,
        is_online=schema.is_online,
        last_seen=as_utc(schema.last_seen) if schema.last_seen else None,
    )


def entity_to_schema(entity: User) -> UserSchema:
    return UserSchema(
        id=entity.id,
        name=entity.name,
        profile_picture=entity.profile_picture,
        designation=entity.designation,
        is_online=entity.is_online,
        last_seen=entity.last_seen,
    )


def ref_to_id(ref: str | UserSchema | None) -> UserId | None:
    if ref is None:
        return None
    if isinstance(ref, UserSchema):
        return UserId(ref.id)
    return UserId(ref)
