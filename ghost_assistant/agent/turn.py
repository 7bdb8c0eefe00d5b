"""Turn lifecycle states and results reported by the orchestrator."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from ..history_store import ChatMessage
from .extractor import ToolCall


class TurnState(str, Enum):
    """Stage of the turn currently being processed."""

    IDLE = "idle"
    AWAITING_COMPLETION = "awaiting_completion"
    DIRECT = "direct"
    PENDING_APPROVAL = "pending_approval"
    EXECUTING = "executing"
    RESOLVED = "resolved"


class TurnOutcome(str, Enum):
    """How a completed turn was resolved."""

    NO_CALL = "no_call"
    UNKNOWN_TOOL = "unknown_tool"
    DENIED = "denied"
    EXECUTED = "executed"
    FAILED = "failed"
    COMPLETION_ERROR = "completion_error"


@dataclass(slots=True)
class TurnResult:
    """Summary of one user send.

    ``messages`` holds every transcript message produced during the turn,
    starting with the user's own message. ``tool_results`` lists the result
    strings folded back into the conversation, one per tool round.
    """

    outcome: TurnOutcome
    reply: str | None = None
    call: ToolCall | None = None
    tool_results: list[str] = field(default_factory=list)
    messages: list[ChatMessage] = field(default_factory=list)
    error: str | None = None
