"""Structured events for LLM, search and tool traffic.

Every event is logged under its name (``LLM_REQUEST``, ``SEARCH_RESPONSE``,
``TOOL_DENIED`` ...) with the structured record attached as ``extra["json"]``
so :class:`~ghost_assistant.log.JsonlHandler` writes it verbatim. Credentials
such as the OpenRouter key or the Serper ``X-API-KEY`` header never reach the
log files.
"""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Mapping, Sequence
from typing import Any

from .log import logger
from .util.json import make_json_safe

SENSITIVE_KEYS = frozenset(
    {
        "api_key",
        "authorization",
        "password",
        "secret",
        "serper_api_key",
        "token",
        "x-api-key",
    }
)

REDACTED = "[REDACTED]"


def _is_sensitive(key: object) -> bool:
    return isinstance(key, str) and key.lower() in SENSITIVE_KEYS


def _redact(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {
            key: REDACTED if _is_sensitive(key) else _redact(item)
            for key, item in value.items()
        }
    if isinstance(value, (list, tuple)):
        return type(value)(_redact(item) for item in value)
    return value


def sanitize(data: Mapping[str, Any]) -> dict[str, Any]:
    """Return a copy of *data* with credential values replaced by ``[REDACTED]``.

    Keys are matched case-insensitively at any nesting depth, including
    mappings inside lists.
    """
    return _redact(dict(data))


def _payload_size(payload: Any) -> int:
    return len(json.dumps(payload, ensure_ascii=False).encode("utf-8"))


def log_event(
    event: str,
    payload: Mapping[str, Any] | None = None,
    *,
    start_time: float | None = None,
    level: int = logging.INFO,
) -> None:
    """Emit *event* with a redacted, JSON-safe copy of *payload*.

    The record carries ``size_bytes`` of the serialised payload and, when
    *start_time* (a :func:`time.monotonic` reading) is given, the elapsed
    ``duration_ms``.
    """
    safe = make_json_safe(sanitize(payload)) if payload else {}
    record: dict[str, Any] = {
        "event": event,
        "payload": safe,
        "size_bytes": _payload_size(safe) if payload else 0,
    }
    if start_time is not None:
        record["duration_ms"] = int((time.monotonic() - start_time) * 1000)
    logger.log(level, event, extra={"json": record})


def log_debug_payload(
    event: str,
    payload: Mapping[str, Any] | Sequence[Any] | str | None = None,
) -> None:
    """Log the full *payload* of *event* at ``DEBUG`` level only."""
    if not logger.isEnabledFor(logging.DEBUG):
        return
    record: dict[str, Any] = {"event": event, "level": "DEBUG"}
    message = event
    if payload is not None:
        if isinstance(payload, (str, bytes, bytearray)):
            safe: Any = make_json_safe(payload)
        else:
            safe = make_json_safe(_redact(payload))
        record["payload"] = safe
        message = f"{event} {json.dumps(safe, ensure_ascii=False)}"
    logger.debug(message, extra={"json": record})
