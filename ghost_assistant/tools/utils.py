"""Shared helpers for tool implementations."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..log import logger
from ..telemetry import sanitize
from ..util.time import utc_now_iso


def log_tool(
    tool: str,
    params: Mapping[str, Any],
    result: Any,
    *,
    max_result_length: int | None = 1000,
) -> Any:
    """Log tool invocation in JSONL and return *result*.

    Parameters
    ----------
    tool:
        Name of the tool being invoked.
    params:
        Parameters passed to the tool; sensitive keys are redacted and
        injected context values (keys starting with ``_``) are omitted.
    result:
        Result returned by the tool.  If *max_result_length* is set and the
        textual representation of the result exceeds this limit it will be
        truncated with an ellipsis in the log entry.  The original *result* is
        still returned unmodified.
    max_result_length:
        Maximum number of characters from the result to include in the log.
        ``None`` disables truncation.
    """
    visible = {key: value for key, value in params.items() if not key.startswith("_")}
    entry: dict[str, Any] = {
        "timestamp": utc_now_iso(),
        "tool": tool,
        "params": sanitize(visible),
    }
    if isinstance(result, str) and result.startswith("Error"):
        entry["error"] = result
    else:
        entry["result"] = result

    key = "error" if "error" in entry else "result"
    res = entry[key]
    if max_result_length is not None and isinstance(res, str) and len(res) > max_result_length:
        entry[key] = res[:max_result_length] + "..."

    logger.info("tool %s", tool, extra={"json": entry})
    return result


def format_size(size: int) -> str:
    """Return *size* in bytes as a short human-readable string."""
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    if size < 1024 * 1024 * 1024:
        return f"{size / (1024 * 1024):.1f} MB"
    return f"{size / (1024 * 1024 * 1024):.2f} GB"
