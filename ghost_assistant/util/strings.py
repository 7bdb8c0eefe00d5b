"""Text shortening helpers for notices and log entries."""

from __future__ import annotations

ELLIPSIS = "…"

__all__ = ["ELLIPSIS", "preview"]


def preview(text: str, limit: int) -> str:
    """Return *text* stripped and shortened to *limit* characters.

    The last kept character is replaced by :data:`ELLIPSIS` when the text had
    to be cut, so the result never exceeds *limit*.
    """
    snippet = text.strip()
    if limit <= 0:
        return ""
    if len(snippet) > limit:
        return snippet[: limit - 1] + ELLIPSIS
    return snippet
