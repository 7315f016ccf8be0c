from __future__ import annotations

import asyncio

import pytest

from chat_sync.domain.value_objects.ids import ConversationId, UserId
from chat_sync.services.typing_indicator import TypingAnnouncer, TypingTracker

C1 = ConversationId("C1")
C2 = ConversationId("C2")
U1 = UserId("u-1")
U2 = UserId("u-2")


def test_tracker_holds_each_user_once():
    tracker = TypingTracker()

    assert tracker.apply(C1, U1, True) is True
    assert tracker.apply(C1, U1, True) is False
    tracker.apply(C1, U2, True)

    assert tracker.typing_in(C1) == {U1, U2}
    assert tracker.snapshot() == {"C1": ["u-1", "u-2"]}


def test_tracker_removes_user_and_empty_conversation():
    tracker = TypingTracker()
    tracker.apply(C1, U1, True)

    assert tracker.apply(C1, U1, False) is True
    assert tracker.apply(C1, U1, False) is False
    assert tracker.is_anyone_typing(C1) is False
    assert tracker.snapshot() == {}


def test_stop_for_unknown_user_leaves_others():
    tracker = TypingTracker()
    tracker.apply(C1, U1, True)

    tracker.apply(C1, U2, False)
    tracker.apply(C2, U1, False)

    assert tracker.snapshot() == {"C1": ["u-1"]}


class Recorder:
    def __init__(self) -> None:
        self.calls: list[tuple[str, bool]] = []

    async def __call__(self, conversation_id: ConversationId, is_typing: bool) -> None:
        self.calls.append((conversation_id, is_typing))


@pytest.mark.asyncio
async def test_burst_of_keystrokes_announces_once_each_way():
    recorder = Recorder()
    announcer = TypingAnnouncer(recorder, idle_seconds=0.05)

    for _ in range(5):
        await announcer.keystroke(C1)
        await asyncio.sleep(0.01)

    assert recorder.calls == [("C1", True)]
    assert announcer.is_typing is True

    await asyncio.sleep(0.1)

    assert recorder.calls == [("C1", True), ("C1", False)]
    assert announcer.is_typing is False


@pytest.mark.asyncio
async def test_switching_conversation_closes_previous_typing():
    recorder = Recorder()
    announcer = TypingAnnouncer(recorder, idle_seconds=10)

    await announcer.keystroke(C1)
    await announcer.keystroke(C2)

    assert recorder.calls == [("C1", True), ("C1", False), ("C2", True)]
    await announcer.stop()


@pytest.mark.asyncio
async def test_stop_without_typing_announces_nothing():
    recorder = Recorder()
    announcer = TypingAnnouncer(recorder, idle_seconds=10)

    await announcer.stop()

    assert recorder.calls == []


@pytest.mark.asyncio
async def test_explicit_stop_cancels_idle_timer():
    recorder = Recorder()
    announcer = TypingAnnouncer(recorder, idle_seconds=0.05)

    await announcer.keystroke(C1)
    await announcer.stop()
    await asyncio.sleep(0.1)

    assert recorder.calls == [("C1", True), ("C1", False)]
