"""Capabilities the assistant may invoke on the user's behalf."""

from .base import Tool, ToolExecutionError, ToolParameterError
from .registry import ToolRegistry, build_default_registry

__all__ = [
    "Tool",
    "ToolExecutionError",
    "ToolParameterError",
    "ToolRegistry",
    "build_default_registry",
]
