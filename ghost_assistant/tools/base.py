"""Shared tool protocol, errors and parameter validation."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Annotated, Any, Protocol, TypeVar, runtime_checkable

from pydantic import BaseModel, ConfigDict, StringConstraints, ValidationError

ATTACHED_PROCESS_KEY = "_attached_process"

NonBlankStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class ToolExecutionError(Exception):
    """Expected tool failure whose message is reported back to the model."""


class ToolParameterError(ToolExecutionError):
    """Raised when tool parameters are missing or have the wrong type."""


@runtime_checkable
class Tool(Protocol):
    """Interface implemented by every capability in the catalog."""

    name: str
    description: str
    needs_attached_process: bool

    def execute(self, parameters: Mapping[str, Any]) -> str:
        """Run the tool and return a human-readable result."""


class ToolParameters(BaseModel):
    """Base model for tool parameters.

    Unknown keys, including injected context such as the attached process,
    are ignored so each tool only sees the values it declares.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)


_ModelT = TypeVar("_ModelT", bound=ToolParameters)


def _describe_error(model: type[ToolParameters], error: Mapping[str, Any]) -> str:
    loc = error.get("loc") or ()
    field_name = str(loc[0]) if loc else "parameters"
    field = model.model_fields.get(field_name)
    if field is not None and field.is_required() and field.annotation is str:
        return f"'{field_name}' parameter is required and must be a non-empty string."
    if field is not None and not field.is_required():
        return f"'{field_name}' parameter, if provided, must be a string."
    return f"Invalid '{field_name}' parameter: {error.get('msg', 'invalid value')}."


def validate_parameters(
    model: type[_ModelT], parameters: Mapping[str, Any]
) -> _ModelT:
    """Validate *parameters* against *model* raising :class:`ToolParameterError`."""
    try:
        return model.model_validate(dict(parameters))
    except ValidationError as exc:
        errors = exc.errors()
        message = _describe_error(model, errors[0]) if errors else str(exc)
        raise ToolParameterError(message) from exc
