"""Display rules for conversation lists, headers and message timelines."""
from __future__ import annotations

from datetime import date, datetime, timedelta, tzinfo
from itertools import groupby
from typing import Collection, Iterable

from chat_sync.domain.entities.conversation import Conversation, LastMessage
from chat_sync.domain.entities.message import Message
from chat_sync.domain.entities.user import User
from chat_sync.domain.value_objects.ids import UserId

PREVIEW_LENGTH = 30
NO_MESSAGES = "No messages yet"
TYPING = "Typing..."


def other_participant(conversation: Conversation, current_user_id: UserId | None) -> User | None:
    """The peer of a direct conversation; None for groups."""
    if conversation.is_group:
        return None
    for p in conversation.participants:
        if p.id != current_user_id:
            return p
    return None


def display_name(conversation: Conversation, current_user_id: UserId | None) -> str:
    if conversation.is_group:
        return conversation.name
    peer = other_participant(conversation, current_user_id)
    return peer.name if peer else conversation.name


def filter_conversations(
    conversations: Iterable[Conversation],
    search_term: str,
) -> list[Conversation]:
    """Case-insensitive match on the conversation name or any participant name."""
    needle = search_term.lower()
    if not needle:
        return list(conversations)
    return [
        c for c in conversations
        if needle in c.name.lower() or any(needle in p.name.lower() for p in c.participants)
    ]


def last_message_preview(last_message: LastMessage | None) -> str:
    if last_message is None:
        return NO_MESSAGES
    if len(last_message.content) > PREVIEW_LENGTH:
        return last_message.content[:PREVIEW_LENGTH] + "..."
    return last_message.content


def distance_to_now(ts: datetime, now: datetime) -> str:
    """Rough human distance, e.g. ``"5 minutes ago"`` or ``"about 2 hours ago"``."""
    seconds = (now - ts).total_seconds()
    suffix = " ago" if seconds >= 0 else ""
    prefix = "" if seconds >= 0 else "in "
    seconds = abs(seconds)
    minutes = round(seconds / 60)
    if seconds < 30:
        text = "less than a minute"
    elif minutes < 45:
        text = "1 minute" if minutes <= 1 else f"{minutes} minutes"
    elif minutes < 90:
        text = "about 1 hour"
    elif minutes < 60 * 24:
        text = f"about {round(minutes / 60)} hours"
    elif minutes < 60 * 42:
        text = "1 day"
    elif minutes < 60 * 24 * 30:
        text = f"{round(minutes / (60 * 24))} days"
    elif minutes < 60 * 24 * 45:
        text = "about 1 month"
    elif minutes < 60 * 24 * 365:
        text = f"{round(minutes / (60 * 24 * 30))} months"
    else:
        years = round(minutes / (60 * 24 * 365))
        text = "about 1 year" if years <= 1 else f"about {years} years"
    return f"{prefix}{text}{suffix}"


def format_last_seen(user: User, now: datetime) -> str:
    if user.is_online:
        return "Online"
    if user.last_seen is None:
        return "Offline"
    return f"Last seen {distance_to_now(user.last_seen, now)}"


def header_status(
    conversation: Conversation,
    current_user_id: UserId | None,
    typing_user_ids: Collection[UserId],
    now: datetime,
) -> str:
    """Subtitle under the conversation title; typing wins over presence."""
    if conversation.is_group:
        return f"{len(conversation.participants)} members"
    if typing_user_ids:
        return TYPING
    peer = other_participant(conversation, current_user_id)
    if peer is None:
        return "Offline"
    return format_last_seen(peer, now)


def is_read_by_all(message: Message, conversation: Conversation) -> bool:
    others = [p for p in conversation.participants if p.id != message.sender.id]
    return all(message.is_read_by(p.id) for p in others)


def group_by_date(
    messages: Iterable[Message],
    tz: tzinfo | None = None,
) -> list[tuple[date, list[Message]]]:
    """Consecutive messages bucketed by calendar day in ``tz``, in list order."""
    return [
        (day, list(items))
        for day, items in groupby(messages, key=lambda m: _local(m.created_at, tz).date())
    ]


def _local(ts: datetime, tz: tzinfo | None) -> datetime:
    """Date labels are computed in ``tz``; UTC when not given."""
    return ts.astimezone(tz) if tz is not None else ts


def _in_week_of(day: date, today: date) -> bool:
    """Same Sunday-started week as ``today``, past or upcoming days alike."""
    start = today - timedelta(days=(today.weekday() + 1) % 7)
    return start <= day < start + timedelta(days=7)


def _clock_time(ts: datetime) -> str:
    return ts.strftime("%I:%M %p").lstrip("0")


def format_message_date(ts: datetime, now: datetime, tz: tzinfo | None = None) -> str:
    ts, now = _local(ts, tz), _local(now, tz)
    day, today = ts.date(), now.date()
    if day == today:
        return _clock_time(ts)
    if day == today - timedelta(days=1):
        return "Yesterday"
    if _in_week_of(day, today):
        return ts.strftime("%A")
    if day.year == today.year:
        return f"{ts.strftime('%b')} {day.day}"
    return f"{ts.strftime('%b')} {day.day}, {day.year}"


def format_conversation_time(ts: datetime, now: datetime, tz: tzinfo | None = None) -> str:
    ts, now = _local(ts, tz), _local(now, tz)
    day, today = ts.date(), now.date()
    if day == today:
        return _clock_time(ts)
    if day == today - timedelta(days=1):
        return "Yesterday"
    if _in_week_of(day, today):
        return ts.strftime("%A")
    return ts.strftime("%m/%d/%Y")
