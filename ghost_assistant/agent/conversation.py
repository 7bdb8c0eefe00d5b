"""Bounded, role-tagged conversation log sent to the completion endpoint."""

from __future__ import annotations

import datetime
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum

from ..history_store import ChatMessage, MessageSender
from ..util.time import local_now

DEFAULT_MAX_ENTRIES = 20


class Role(str, Enum):
    """Role of a conversation log entry."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True, slots=True)
class ExchangeEntry:
    """Single message in the conversation log."""

    role: Role
    content: str
    timestamp: datetime.datetime = field(default_factory=local_now)

    def to_message(self) -> dict[str, str]:
        return {"role": self.role.value, "content": self.content}


class ConversationLog:
    """Ordered log whose first entry is the pinned system message.

    The log never grows past ``max_entries`` after :meth:`truncate`; eviction
    starts right after the system entry and removes as few entries as needed.
    """

    def __init__(self, max_entries: int = DEFAULT_MAX_ENTRIES) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.max_entries = max_entries
        self._entries: list[ExchangeEntry] = []

    # ------------------------------------------------------------------
    def reset(self, system_prompt: str) -> None:
        """Drop all entries and seed the log with *system_prompt*."""
        self._entries = [ExchangeEntry(Role.SYSTEM, system_prompt)]

    def append(self, role: Role, content: str) -> ExchangeEntry:
        """Append a user or assistant entry and return it."""
        if role is Role.SYSTEM:
            raise ValueError("system entries are only created by reset()")
        entry = ExchangeEntry(role, content)
        self._entries.append(entry)
        return entry

    def truncate(self) -> int:
        """Evict the oldest non-system entries over the cap; return how many."""
        excess = len(self._entries) - self.max_entries
        if excess <= 0:
            return 0
        start = 1 if self.has_system_entry else 0
        del self._entries[start : start + excess]
        return excess

    def rebuild_from_transcript(
        self, system_prompt: str, messages: Iterable[ChatMessage]
    ) -> None:
        """Re-seed the log and replay user/assistant *messages* in order."""
        self.reset(system_prompt)
        for message in messages:
            if message.sender is MessageSender.USER:
                self._entries.append(
                    ExchangeEntry(Role.USER, message.text, message.timestamp)
                )
            elif message.sender is MessageSender.ASSISTANT:
                self._entries.append(
                    ExchangeEntry(Role.ASSISTANT, message.text, message.timestamp)
                )
        self.truncate()

    # ------------------------------------------------------------------
    @property
    def has_system_entry(self) -> bool:
        return bool(self._entries) and self._entries[0].role is Role.SYSTEM

    @property
    def entries(self) -> tuple[ExchangeEntry, ...]:
        return tuple(self._entries)

    def to_messages(self) -> list[dict[str, str]]:
        """Return the log as ``{role, content}`` mappings for the LLM client."""
        return [entry.to_message() for entry in self._entries]

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[ExchangeEntry]:
        return iter(self._entries)

    def __getitem__(self, index: int) -> ExchangeEntry:
        return self._entries[index]
