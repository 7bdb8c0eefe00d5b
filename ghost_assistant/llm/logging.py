"""Logging helpers for LLM interactions."""

from __future__ import annotations

from copy import deepcopy
from typing import Any
from collections.abc import Mapping

from ..telemetry import log_debug_payload, log_event

__all__ = ["log_request", "log_response"]

_PROMPT_PLACEHOLDER_TEXT = (
    "System prompt was elided by the logging system for brevity, "
    "but was sent to the LLM unchanged."
)


class _PromptLogState:
    """Remember system prompts already emitted to the logs."""

    def __init__(self) -> None:
        self._seen: set[str] = set()

    def register(self, prompt: str) -> bool:
        """Return ``True`` when *prompt* was logged before."""
        if not prompt:
            return False
        if prompt in self._seen:
            return True
        self._seen.add(prompt)
        return False

    def reset(self) -> None:
        """Forget previously seen prompts (testing helper)."""
        self._seen.clear()


_PROMPT_STATE = _PromptLogState()


def _reset_prompt_log_state() -> None:
    """Reset internal cache used to de-duplicate prompt logging."""
    _PROMPT_STATE.reset()


def log_request(payload: Mapping[str, Any]) -> None:
    """Record telemetry for an outbound LLM request."""
    prepared = _prepare_request_payload(payload)
    log_debug_payload("LLM_REQUEST", prepared)
    log_event("LLM_REQUEST", prepared)


def log_response(payload: Mapping[str, Any], *, start_time: float | None = None) -> None:
    """Record telemetry for an inbound LLM response."""
    log_event("LLM_RESPONSE", payload, start_time=start_time)
    log_debug_payload("LLM_RESPONSE", dict(payload))


def _prepare_request_payload(payload: Mapping[str, Any]) -> dict[str, Any]:
    """Return a deep-copied payload with a repeated system prompt collapsed."""
    prepared = deepcopy(dict(payload))
    messages = prepared.get("messages")
    if not isinstance(messages, list):
        return prepared
    for message in messages:
        if not isinstance(message, dict) or message.get("role") != "system":
            continue
        content = message.get("content")
        if isinstance(content, str) and _PROMPT_STATE.register(content):
            message["content"] = _PROMPT_PLACEHOLDER_TEXT
    return prepared
