"""System prompt rendering for the Ghost persona and tool protocol."""

from __future__ import annotations

from collections.abc import Iterable

DEFAULT_PERSONA = (
    "You are a helpful Ghost assistant, a small companion construct inspired "
    "by the Ghosts of Destiny. You are concise, friendly and a little witty, "
    "and you address the user as Guardian."
)

TOOL_PROTOCOL = (
    "You can use tools to act on the user's computer and the web. To use a "
    "tool, reply with ONLY a JSON object and nothing else, in exactly this "
    "shape:\n"
    '{"tool_name": "<name>", "parameters": {"<parameter>": "<value>"}}\n'
    "Parameter values must be strings, numbers, booleans or null. Do not add "
    "any text before or after the JSON object. After a tool runs you will "
    'receive its result in a message starting with "Tool output:"; use it to '
    "answer the user. When no tool is needed, reply normally in plain text."
)


def build_system_prompt(
    catalog: Iterable[tuple[str, str]],
    custom_prompt: str | None = None,
) -> str:
    """Return the system message for *catalog* of ``(name, description)`` pairs.

    *custom_prompt* replaces the built-in persona paragraph when it contains
    anything other than whitespace; the tool protocol and listing are always
    appended so the model keeps its ability to call tools.
    """
    persona = (custom_prompt or "").strip() or DEFAULT_PERSONA
    lines = [persona, "", TOOL_PROTOCOL, "", "Available tools:"]
    tools = list(catalog)
    if tools:
        lines.extend(f"- {name}: {description}" for name, description in tools)
    else:
        lines.append("- (none)")
    return "\n".join(lines)
