"""Tests for the bounded conversation log."""

import pytest

from ghost_assistant.agent.conversation import ConversationLog, Role
from ghost_assistant.history_store import ChatMessage, MessageSender

pytestmark = pytest.mark.unit


def _fill(log: ConversationLog, count: int) -> None:
    for index in range(count):
        role = Role.USER if index % 2 == 0 else Role.ASSISTANT
        log.append(role, f"m{index}")


def test_reset_seeds_system_entry() -> None:
    log = ConversationLog()
    log.reset("be helpful")
    assert len(log) == 1
    assert log[0].role is Role.SYSTEM
    assert log[0].content == "be helpful"
    assert log.to_messages() == [{"role": "system", "content": "be helpful"}]


def test_truncate_keeps_system_entry_and_newest_entries() -> None:
    log = ConversationLog(max_entries=5)
    log.reset("sys")
    _fill(log, 8)

    removed = log.truncate()

    assert removed == 4
    assert len(log) == 5
    assert log[0].role is Role.SYSTEM
    assert [entry.content for entry in log.entries[1:]] == ["m4", "m5", "m6", "m7"]


def test_truncate_is_noop_within_cap() -> None:
    log = ConversationLog(max_entries=3)
    log.reset("sys")
    _fill(log, 2)
    assert log.truncate() == 0
    assert len(log) == 3


def test_cap_of_one_keeps_only_system_entry() -> None:
    log = ConversationLog(max_entries=1)
    log.reset("sys")
    _fill(log, 3)
    log.truncate()
    assert [entry.role for entry in log] == [Role.SYSTEM]


def test_invalid_cap_rejected() -> None:
    with pytest.raises(ValueError):
        ConversationLog(max_entries=0)


def test_system_entries_cannot_be_appended() -> None:
    log = ConversationLog()
    log.reset("sys")
    with pytest.raises(ValueError):
        log.append(Role.SYSTEM, "sneaky")


def test_rebuild_from_transcript_keeps_user_and_assistant_messages() -> None:
    log = ConversationLog()
    log.reset("old")
    log.append(Role.USER, "stale")
    transcript = [
        ChatMessage("Welcome", MessageSender.ASSISTANT),
        ChatMessage("hi", MessageSender.USER),
        ChatMessage("Executing tool: x...", MessageSender.SYSTEM),
        ChatMessage("hello", MessageSender.ASSISTANT),
    ]

    log.rebuild_from_transcript("new", transcript)

    assert log.to_messages() == [
        {"role": "system", "content": "new"},
        {"role": "assistant", "content": "Welcome"},
        {"role": "user", "content": "hi"},
        {"role": "assistant", "content": "hello"},
    ]
    assert log[2].timestamp == transcript[1].timestamp


def test_rebuild_truncates_long_transcripts() -> None:
    log = ConversationLog(max_entries=3)
    transcript = [ChatMessage(f"u{i}", MessageSender.USER) for i in range(5)]
    log.rebuild_from_transcript("sys", transcript)
    assert [entry.content for entry in log] == ["sys", "u3", "u4"]
