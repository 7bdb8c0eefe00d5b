"""JSON serialisation helpers."""

from __future__ import annotations

import datetime
import enum
from collections.abc import Mapping
from pathlib import PurePath
from typing import Any


def make_json_safe(value: Any) -> Any:
    """Return *value* converted into something :func:`json.dumps` accepts.

    Mapping keys become strings, tuples and sets become lists (sets sorted by
    ``repr``), enums collapse to their value and datetimes to ISO strings.
    Objects exposing ``to_dict()`` are serialised through it; anything else is
    replaced by its ``repr``.
    """
    if value is None or isinstance(value, (str, bool, int, float)):
        return value
    if isinstance(value, enum.Enum):
        return make_json_safe(value.value)
    if isinstance(value, Mapping):
        return {str(key): make_json_safe(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [make_json_safe(item) for item in value]
    if isinstance(value, (set, frozenset)):
        return [make_json_safe(item) for item in sorted(value, key=repr)]
    if isinstance(value, (datetime.datetime, datetime.date)):
        return value.isoformat()
    if isinstance(value, PurePath):
        return str(value)
    to_dict = getattr(value, "to_dict", None)
    if callable(to_dict):
        return make_json_safe(to_dict())
    return repr(value)


__all__ = ["make_json_safe"]
