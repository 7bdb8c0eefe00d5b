"""Tests for the tool registry and the default catalog."""

import pytest

from ghost_assistant.settings import AppSettings
from ghost_assistant.tools import Tool, ToolRegistry, build_default_registry

from tests.llm_utils import RecordingTool

pytestmark = pytest.mark.unit

CATALOG_ORDER = [
    "create_file",
    "read_file_content",
    "write_file",
    "list_directory",
    "create_directory",
    "move_file",
    "copy_file",
    "delete_file",
    "get_file_info",
    "web_search",
    "fetch_webpage",
    "search_web",
    "open_url_in_browser",
    "get_attached_process_info",
]


def test_register_and_resolve() -> None:
    registry = ToolRegistry()
    tool = RecordingTool("echo", description="Echo things")
    registry.register(tool)
    assert registry.resolve("echo") is tool
    assert registry.resolve("missing") is None
    assert "echo" in registry
    assert registry.list() == [("echo", "Echo things")]


def test_duplicate_name_rejected() -> None:
    registry = ToolRegistry()
    registry.register(RecordingTool("echo"))
    with pytest.raises(ValueError, match="duplicate"):
        registry.register(RecordingTool("echo"))
    assert len(registry) == 1


def test_list_preserves_registration_order() -> None:
    registry = ToolRegistry()
    for name in ("b", "a", "c"):
        registry.register(RecordingTool(name))
    assert [name for name, _ in registry.list()] == ["b", "a", "c"]


def test_default_catalog_order_and_protocol() -> None:
    registry = build_default_registry(AppSettings())
    assert [name for name, _ in registry.list()] == CATALOG_ORDER
    for tool in registry:
        assert isinstance(tool, Tool)
        assert tool.description.strip()


def test_only_process_tool_needs_attached_process() -> None:
    registry = build_default_registry()
    needing = [tool.name for tool in registry if tool.needs_attached_process]
    assert needing == ["get_attached_process_info"]
