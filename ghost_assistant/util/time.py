"""Time-related helpers for Ghost Assistant."""

from __future__ import annotations

import datetime


def utc_now_iso() -> str:
    """Return current UTC time in ISO format without sub-second precision."""
    return datetime.datetime.now(datetime.UTC).isoformat(timespec="seconds")


def local_now() -> datetime.datetime:
    """Return the current local time as an aware datetime."""
    return datetime.datetime.now(datetime.UTC).astimezone()


def format_timestamp(value: datetime.datetime) -> str:
    """Return *value* in ``YYYY-MM-DD HH:MM:SS`` format."""
    return value.strftime("%Y-%m-%d %H:%M:%S")


def parse_timestamp(value: str | None) -> datetime.datetime:
    """Parse an ISO timestamp produced by :func:`datetime.isoformat`.

    Empty input falls back to :func:`local_now`. Invalid values raise
    :class:`ValueError`.
    """

    if not value:
        return local_now()
    try:
        return datetime.datetime.fromisoformat(value)
    except ValueError as exc:
        raise ValueError(f"Invalid datetime: {value}") from exc
