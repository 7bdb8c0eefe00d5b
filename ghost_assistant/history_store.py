"""Chat transcript model and JSON persistence of named chats."""

from __future__ import annotations

import datetime
import json
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from .util.time import local_now, parse_timestamp

logger = logging.getLogger(__name__)

_INVALID_NAME_CHARS = frozenset('<>:"/\\|?*') | frozenset(chr(code) for code in range(32))


class MessageSender(str, Enum):
    """Origin of a message shown in the chat transcript."""

    USER = "User"
    ASSISTANT = "Assistant"
    SYSTEM = "System"


@dataclass(slots=True)
class ChatMessage:
    """Message visible to the user, distinct from conversation log entries."""

    text: str
    sender: MessageSender
    timestamp: datetime.datetime = field(default_factory=local_now)

    def to_dict(self) -> dict[str, Any]:
        """Return representation suitable for JSON storage."""
        return {
            "text": self.text,
            "sender": self.sender.value,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> ChatMessage:
        """Create :class:`ChatMessage` from a stored mapping."""
        text = payload.get("text")
        if not isinstance(text, str):
            raise ValueError("text field missing from chat message payload")
        try:
            sender = MessageSender(payload.get("sender"))
        except ValueError as exc:
            raise ValueError(
                f"unknown sender in chat message payload: {payload.get('sender')!r}"
            ) from exc
        raw_timestamp = payload.get("timestamp")
        timestamp = parse_timestamp(raw_timestamp if isinstance(raw_timestamp, str) else None)
        return cls(text=text, sender=sender, timestamp=timestamp)


def validate_chat_name(name: str) -> str:
    """Return *name* stripped or raise :class:`ValueError` when unusable."""
    if not isinstance(name, str) or not name.strip():
        raise ValueError("Chat name cannot be empty or whitespace.")
    cleaned = name.strip()
    if cleaned in {".", ".."} or any(char in _INVALID_NAME_CHARS for char in cleaned):
        raise ValueError(f"Chat name '{name}' contains invalid characters.")
    return cleaned


class ChatHistoryStore:
    """Save and load named chat transcripts as JSON files in a directory."""

    def __init__(self, directory: Path | str) -> None:
        self._directory = Path(directory).expanduser()

    @property
    def directory(self) -> Path:
        return self._directory

    def _chat_path(self, name: str) -> Path:
        return self._directory / f"{validate_chat_name(name)}.json"

    # ------------------------------------------------------------------
    def save_chat(self, messages: Iterable[ChatMessage], name: str) -> Path:
        """Write *messages* under *name*, replacing any previous chat."""
        path = self._chat_path(name)
        payload = [message.to_dict() for message in messages]
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            json.dumps(payload, ensure_ascii=False, indent=2),
            encoding="utf-8",
        )
        logger.info("Saved chat %s (%d messages) to %s", name, len(payload), path)
        return path

    def load_chat(self, name: str) -> list[ChatMessage] | None:
        """Return messages saved under *name*.

        ``None`` signals a missing or unreadable chat; an empty file yields an
        empty list.
        """
        path = self._chat_path(name)
        if not path.is_file():
            return None
        try:
            raw = path.read_text(encoding="utf-8")
        except OSError:
            logger.exception("Failed to read chat %s from %s", name, path)
            return None
        if not raw.strip():
            return []
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError:
            logger.exception("Chat file %s is not valid JSON", path)
            return None
        if payload is None:
            return []
        if not isinstance(payload, list):
            logger.error("Chat file %s does not contain a message list", path)
            return None
        try:
            return [ChatMessage.from_dict(item) for item in payload if isinstance(item, Mapping)]
        except ValueError:
            logger.exception("Chat file %s contains a malformed message", path)
            return None

    def list_chats(self) -> list[str]:
        """Return names of saved chats sorted alphabetically."""
        if not self._directory.is_dir():
            return []
        try:
            return sorted(
                path.stem
                for path in self._directory.glob("*.json")
                if path.is_file() and path.stem.strip()
            )
        except OSError:
            logger.exception("Failed to list chats in %s", self._directory)
            return []

    def delete_chat(self, name: str) -> bool:
        """Remove chat *name*; return ``True`` when a file was deleted."""
        path = self._chat_path(name)
        if not path.is_file():
            return False
        path.unlink()
        logger.info("Deleted chat %s", name)
        return True
