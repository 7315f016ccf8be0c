from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta, timezone

from chat_sync.domain.entities.conversation import LastMessage
from chat_sync.domain.entities.message import ReadReceipt
from chat_sync.domain.value_objects.ids import UserId
from chat_sync.services import presentation
from tests.conftest import ME, NOW, PEER, make_conversation, make_message, make_user

THURSDAY = datetime(2026, 10, 22, 15, 0, tzinfo=timezone.utc)


def test_direct_conversation_shows_peer_name():
    conv = make_conversation()

    assert presentation.display_name(conv, ME) == "Asha Rao"
    assert presentation.other_participant(conv, ME).id == PEER


def test_group_conversation_shows_its_name():
    conv = make_conversation(is_group=True, name="Design")

    assert presentation.display_name(conv, ME) == "Design"
    assert presentation.other_participant(conv, ME) is None


def test_filter_matches_names_case_insensitively():
    convs = [
        make_conversation("C1"),
        make_conversation("G1", is_group=True, name="Release Crew", participants=(make_user("u-3", "Lee"),)),
    ]

    assert [c.id for c in presentation.filter_conversations(convs, "asha")] == ["C1"]
    assert [c.id for c in presentation.filter_conversations(convs, "CREW")] == ["G1"]
    assert len(presentation.filter_conversations(convs, "")) == 2


def test_preview_truncates_long_messages():
    long = LastMessage(content="x" * 40)

    assert presentation.last_message_preview(None) == "No messages yet"
    assert presentation.last_message_preview(LastMessage(content="short")) == "short"
    assert presentation.last_message_preview(long) == "x" * 30 + "..."


def test_last_seen_wording():
    assert presentation.format_last_seen(make_user(is_online=True), NOW) == "Online"
    assert presentation.format_last_seen(make_user(), NOW) == "Offline"
    five_minutes = make_user(last_seen=NOW - timedelta(minutes=5))
    two_hours = make_user(last_seen=NOW - timedelta(hours=2))
    assert presentation.format_last_seen(five_minutes, NOW) == "Last seen 5 minutes ago"
    assert presentation.format_last_seen(two_hours, NOW) == "Last seen about 2 hours ago"


def test_header_prefers_typing_over_presence():
    conv = make_conversation(participants=(make_user(ME, "Me"), make_user(is_online=True)))

    assert presentation.header_status(conv, ME, set(), NOW) == "Online"
    assert presentation.header_status(conv, ME, {PEER}, NOW) == "Typing..."


def test_group_header_counts_members():
    conv = make_conversation(
        is_group=True,
        name="Team",
        participants=(make_user(ME, "Me"), make_user(), make_user("u-3", "Lee")),
    )

    assert presentation.header_status(conv, ME, {PEER}, NOW) == "3 members"


def test_read_by_all_ignores_sender():
    conv = make_conversation()
    sent = make_message("m1", sender=make_user(ME, "Me"))
    read = replace(
        make_message("m2", sender=make_user(ME, "Me")),
        read_by=(ReadReceipt(UserId(PEER), NOW),),
    )

    assert presentation.is_read_by_all(sent, conv) is False
    assert presentation.is_read_by_all(read, conv) is True


def test_group_by_date_keeps_order():
    msgs = [
        make_message("a", created_at=NOW - timedelta(days=1)),
        make_message("b", created_at=NOW - timedelta(hours=1)),
        make_message("c", created_at=NOW),
    ]

    groups = presentation.group_by_date(msgs)

    assert [(day.isoformat(), [m.id for m in items]) for day, items in groups] == [
        ("2026-10-18", ["a"]),
        ("2026-10-19", ["b", "c"]),
    ]


def test_message_date_labels():
    assert presentation.format_message_date(THURSDAY.replace(hour=9, minute=5), THURSDAY) == "9:05 AM"
    assert presentation.format_message_date(THURSDAY - timedelta(days=1), THURSDAY) == "Yesterday"
    assert presentation.format_message_date(THURSDAY - timedelta(days=3), THURSDAY) == "Monday"
    assert presentation.format_message_date(datetime(2026, 3, 2, tzinfo=timezone.utc), THURSDAY) == "Mar 2"
    assert presentation.format_message_date(datetime(2025, 3, 2, tzinfo=timezone.utc), THURSDAY) == "Mar 2, 2025"


def test_conversation_time_labels():
    assert presentation.format_conversation_time(THURSDAY, THURSDAY) == "3:00 PM"
    assert presentation.format_conversation_time(datetime(2026, 3, 2, tzinfo=timezone.utc), THURSDAY) == "03/02/2026"


def test_later_days_of_current_week_show_weekday():
    wednesday = datetime(2026, 10, 21, 9, 0, tzinfo=timezone.utc)

    assert presentation.format_message_date(wednesday, NOW) == "Wednesday"
    assert presentation.format_conversation_time(wednesday, NOW) == "Wednesday"
    assert presentation.format_message_date(datetime(2026, 10, 25, tzinfo=timezone.utc), NOW) == "Oct 25"


def test_labels_follow_given_timezone():
    new_york = timezone(timedelta(hours=-4))
    late = datetime(2026, 10, 22, 2, 30, tzinfo=timezone.utc)

    assert presentation.format_message_date(late, THURSDAY) == "2:30 AM"
    assert presentation.format_message_date(late, THURSDAY, tz=new_york) == "Yesterday"
    assert presentation.format_conversation_time(THURSDAY, THURSDAY, tz=new_york) == "11:00 AM"

    groups = presentation.group_by_date(
        [make_message("a", created_at=late), make_message("b", created_at=THURSDAY)],
        tz=new_york,
    )
    assert [day.isoformat() for day, _ in groups] == ["2026-10-21", "2026-10-22"]
