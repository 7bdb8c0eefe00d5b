"""Command-line interface package for Ghost Assistant.

The function :func:`main` is exposed via attribute access
(``from ghost_assistant.cli import main``).  The implementation lives in
:mod:`ghost_assistant.cli.main` and is imported lazily to avoid shadowing that
module when importing ``ghost_assistant.cli.main`` directly.
"""

from importlib import import_module
from typing import Any


def __getattr__(name: str) -> Any:
    if name == "main":
        return import_module(".main", __name__).main
    raise AttributeError(f"module {__name__!r} has no attribute {name}")


__all__ = ["main"]
