"""Tests for small shared helpers."""

import datetime
import enum
import json
from pathlib import Path

import pytest

from ghost_assistant.util.json import make_json_safe
from ghost_assistant.util.strings import preview
from ghost_assistant.util.time import format_timestamp, parse_timestamp

pytestmark = pytest.mark.unit


class Color(enum.Enum):
    RED = "red"


def test_make_json_safe_converts_unsupported_values() -> None:
    stamp = datetime.datetime(2024, 1, 2, 3, 4, 5)
    value = {
        1: (Color.RED, {"b", "a"}),
        "when": stamp,
        "where": Path("a") / "b.txt",
        "other": object(),
    }
    safe = make_json_safe(value)
    json.dumps(safe)
    assert safe["1"] == ["red", ["a", "b"]]
    assert safe["when"] == "2024-01-02T03:04:05"
    assert safe["where"] == str(Path("a") / "b.txt")
    assert safe["other"].startswith("<object object")


def test_preview_shortens_with_ellipsis() -> None:
    assert preview("  short  ", 10) == "short"
    assert preview("abcdefghij", 5) == "abcd…"
    assert preview("anything", 0) == ""


def test_timestamps_roundtrip() -> None:
    stamp = parse_timestamp("2024-05-01T12:30:00+00:00")
    assert format_timestamp(stamp) == "2024-05-01 12:30:00"
    assert parse_timestamp(None).tzinfo is not None
    with pytest.raises(ValueError):
        parse_timestamp("yesterday")
