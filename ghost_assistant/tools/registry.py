"""Name-keyed tool catalog."""

from __future__ import annotations

from collections.abc import Iterator

from ..settings import AppSettings
from .base import Tool
from .files import FILE_TOOLS
from .process import GetAttachedProcessInfoTool
from .web import FetchWebPageTool, OpenUrlTool, SearchWebTool, WebSearchTool


class ToolRegistry:
    """Hold one tool instance per name in registration order."""

    def __init__(self) -> None:
        self._tools: dict[str, Tool] = {}

    def register(self, tool: Tool) -> None:
        """Add *tool* to the catalog; names must be unique."""
        name = tool.name
        if name in self._tools:
            raise ValueError(f"duplicate tool registered: {name}")
        self._tools[name] = tool

    def resolve(self, name: str) -> Tool | None:
        """Return the tool registered under *name* or ``None``."""
        return self._tools.get(name)

    def list(self) -> list[tuple[str, str]]:
        """Return ``(name, description)`` pairs in registration order."""
        return [(tool.name, tool.description) for tool in self._tools.values()]

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __iter__(self) -> Iterator[Tool]:
        return iter(self._tools.values())

    def __len__(self) -> int:
        return len(self._tools)


def build_default_registry(settings: AppSettings | None = None) -> ToolRegistry:
    """Return a registry populated with the full tool catalog."""
    settings = settings or AppSettings()
    search = settings.search
    registry = ToolRegistry()
    for tool_cls in FILE_TOOLS:
        registry.register(tool_cls())
    registry.register(
        WebSearchTool(
            lambda: search.serper_api_key,
            endpoint=search.endpoint,
            result_count=search.result_count,
            timeout=search.fetch_timeout_seconds,
        )
    )
    registry.register(
        FetchWebPageTool(
            timeout=search.fetch_timeout_seconds,
            max_chars=search.fetch_max_chars,
        )
    )
    registry.register(SearchWebTool())
    registry.register(OpenUrlTool())
    registry.register(GetAttachedProcessInfoTool())
    return registry
