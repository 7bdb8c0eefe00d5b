"""LLM integration utilities."""

from typing import TYPE_CHECKING, Any

__all__ = ["CompletionError", "LLMClient"]

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from .client import CompletionError, LLMClient


def __getattr__(name: str) -> Any:
    """Lazily expose the client module so importing the package stays cheap."""
    if name in __all__:
        from . import client

        return getattr(client, name)
    raise AttributeError(f"module 'ghost_assistant.llm' has no attribute {name!r}")
