"""Detect a structured tool call embedded in a model reply.

The model is instructed to answer with a bare JSON object of the form
``{"tool_name": "...", "parameters": {...}}`` when it wants to use a tool.
Models frequently wrap that object in a Markdown code fence, so a single
surrounding fence (with an optional language tag) is tolerated. Anything else,
including prose before or after the object, means the reply is plain text.
"""

from __future__ import annotations

import re
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    StrictBool,
    StrictFloat,
    StrictInt,
    StrictStr,
    ValidationError,
    field_validator,
)

from ..log import logger

ParameterValue = StrictStr | StrictInt | StrictFloat | StrictBool | None

_FENCE_RE = re.compile(r"^```[A-Za-z0-9_+.-]*[ \t]*\n?(?P<body>.*?)\n?[ \t]*```$", re.DOTALL)


class ToolCall(BaseModel):
    """Tool invocation requested by the model."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    tool_name: StrictStr
    parameters: dict[str, ParameterValue]

    @field_validator("tool_name")
    @classmethod
    def _require_name(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("tool_name must not be blank")
        return value

    def with_context(self, context: dict[str, Any]) -> dict[str, Any]:
        """Return parameters merged with injected *context* values."""
        merged: dict[str, Any] = dict(self.parameters)
        merged.update(context)
        return merged


def strip_code_fence(text: str) -> str:
    """Remove one surrounding triple-backtick fence from *text* if present."""
    match = _FENCE_RE.match(text)
    if match is None:
        return text
    return match.group("body").strip()


def extract_tool_call(reply: str | None) -> ToolCall | None:
    """Return the :class:`ToolCall` encoded in *reply* or ``None``.

    Never raises: malformed or ambiguous replies are treated as ordinary text.
    """
    text = (reply or "").strip()
    if not text:
        return None
    text = strip_code_fence(text)
    if not text:
        return None
    if not (text.startswith("{") and text.endswith("}")):
        return None
    try:
        call = ToolCall.model_validate_json(text)
    except ValidationError as exc:
        logger.debug("reply is not a tool call: %s", exc.errors()[0].get("msg", exc))
        return None
    return call
