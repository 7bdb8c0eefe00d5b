"""Tests for the system prompt builder."""

import pytest

from ghost_assistant.llm.prompt import DEFAULT_PERSONA, TOOL_PROTOCOL, build_system_prompt

pytestmark = pytest.mark.unit


def test_prompt_lists_tools_in_catalog_order() -> None:
    prompt = build_system_prompt([("b_tool", "Does B."), ("a_tool", "Does A.")])
    assert prompt.startswith(DEFAULT_PERSONA)
    assert TOOL_PROTOCOL in prompt
    assert prompt.index("- b_tool: Does B.") < prompt.index("- a_tool: Does A.")


def test_prompt_is_deterministic() -> None:
    catalog = [("x", "X."), ("y", "Y.")]
    assert build_system_prompt(catalog) == build_system_prompt(list(catalog))


def test_custom_prompt_replaces_persona_only() -> None:
    prompt = build_system_prompt([("x", "X.")], "You are terse.")
    assert prompt.startswith("You are terse.")
    assert DEFAULT_PERSONA not in prompt
    assert TOOL_PROTOCOL in prompt
    assert "- x: X." in prompt


def test_empty_catalog_is_marked() -> None:
    assert build_system_prompt([], "   ").endswith("Available tools:\n- (none)")
