"""Tool-calling chat orchestration."""

from .conversation import ConversationLog, ExchangeEntry, Role
from .extractor import ToolCall, extract_tool_call
from .orchestrator import ChatOrchestrator
from .turn import TurnOutcome, TurnResult, TurnState

__all__ = [
    "ChatOrchestrator",
    "ConversationLog",
    "ExchangeEntry",
    "Role",
    "ToolCall",
    "TurnOutcome",
    "TurnResult",
    "TurnState",
    "extract_tool_call",
]
