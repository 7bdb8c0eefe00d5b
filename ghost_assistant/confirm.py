"""Confirmation callbacks and the approval policy for side-effecting tools."""

from __future__ import annotations

import asyncio
import json
import threading
from collections.abc import Callable, Mapping
from typing import Any, Literal, ParamSpec, TypeVar

from .log import logger

ConfirmCallback = Callable[[str], bool]
ApprovalMode = Literal["prompt", "never"]

_callback: ConfirmCallback | None = None

_T = TypeVar("_T")
_P = ParamSpec("_P")

APPROVAL_REQUIRED_TOOLS: frozenset[str] = frozenset(
    {
        "create_file",
        "write_file",
        "create_directory",
        "move_file",
        "copy_file",
        "delete_file",
    }
)


def set_confirm(callback: ConfirmCallback) -> None:
    """Register confirmation *callback* returning True to proceed."""
    global _callback
    _callback = callback


def confirm(message: str) -> bool:
    """Invoke registered confirmation callback with *message*.

    Raises ``RuntimeError`` if no callback configured.
    """
    if _callback is None:
        raise RuntimeError("Confirmation callback not configured")
    return _callback(message)


def requires_approval(tool_name: str) -> bool:
    """Return ``True`` when *tool_name* mutates the file system."""
    return tool_name in APPROVAL_REQUIRED_TOOLS


def _format_parameter(value: Any) -> str:
    try:
        return json.dumps(value, ensure_ascii=False)
    except TypeError:
        return repr(value)


def format_approval_prompt(tool_name: str, parameters: Mapping[str, Any]) -> str:
    """Return the confirmation text shown before running *tool_name*."""
    lines = [f"Ghost Assistant wants to use tool: '{tool_name}'.", ""]
    visible = {
        key: value for key, value in parameters.items() if not key.startswith("_")
    }
    if visible:
        lines.append("Parameters:")
        lines.extend(
            f"- {key}: {_format_parameter(value)}" for key, value in visible.items()
        )
    else:
        lines.append("Parameters: (none)")
    lines.extend(["", "Do you approve?"])
    return "\n".join(lines)


class ApprovalGate:
    """Decide whether a tool call may run and ask the user when needed.

    The gate holds a static policy (:data:`APPROVAL_REQUIRED_TOOLS`) and a
    blocking confirmation callback. When no callback is supplied the module
    level one registered through :func:`set_confirm` is used.
    """

    def __init__(
        self,
        callback: ConfirmCallback | None = None,
        *,
        mode: ApprovalMode = "prompt",
    ) -> None:
        self._callback = callback
        self.mode: ApprovalMode = mode

    def requires_approval(self, tool_name: str) -> bool:
        if self.mode == "never":
            return False
        return requires_approval(tool_name)

    def request_approval(self, tool_name: str, parameters: Mapping[str, Any]) -> bool:
        """Render the prompt for *tool_name* and block until the user answers."""
        if self.mode == "never":
            return True
        message = format_approval_prompt(tool_name, parameters)
        callback = self._callback if self._callback is not None else confirm
        approved = bool(callback(message))
        logger.info(
            "approval for tool %s: %s",
            tool_name,
            "granted" if approved else "denied",
        )
        return approved

    async def request_approval_async(
        self, tool_name: str, parameters: Mapping[str, Any]
    ) -> bool:
        """Run :meth:`request_approval` in a worker thread."""
        return await asyncio.to_thread(self.request_approval, tool_name, parameters)


def _call_in_wx_main_thread(
    func: Callable[_P, _T], /, *args: _P.args, **kwargs: _P.kwargs
) -> _T:
    """Execute *func* on the wx main thread and return its result."""
    import wx  # type: ignore

    is_main_thread = True
    if hasattr(wx, "IsMainThread"):
        is_main_thread = bool(wx.IsMainThread())
    if is_main_thread:
        return func(*args, **kwargs)

    app = wx.GetApp() if hasattr(wx, "GetApp") else None
    if app is None:
        return func(*args, **kwargs)

    done = threading.Event()
    result: dict[str, Any] = {}

    def _invoke() -> None:
        try:
            result["value"] = func(*args, **kwargs)
        except Exception as exc:  # pragma: no cover - re-raised below
            result["error"] = exc
        finally:
            done.set()

    wx.CallAfter(_invoke)
    done.wait()

    if "error" in result:
        raise result["error"]
    return result["value"]


def wx_confirm(message: str) -> bool:
    """GUI confirmation dialog using wxWidgets."""

    def _show_dialog() -> bool:
        import wx  # type: ignore

        parent = wx.GetActiveWindow()
        if not parent:
            windows = wx.GetTopLevelWindows()
            parent = windows[0] if windows else None

        style = wx.YES_NO | wx.NO_DEFAULT | wx.ICON_WARNING
        dialog = wx.MessageDialog(parent, message, "Confirm Tool Execution", style=style)
        try:
            result = dialog.ShowModal()
        finally:
            dialog.Destroy()

        return result in {wx.ID_YES, wx.YES, wx.ID_OK, wx.OK}

    return _call_in_wx_main_thread(_show_dialog)


def console_confirm(message: str) -> bool:
    """Ask for confirmation on the terminal; anything but yes declines."""
    print(message)
    try:
        answer = input("[y/N] ")
    except EOFError:
        return False
    return answer.strip().lower() in {"y", "yes"}


def auto_confirm(_message: str) -> bool:
    """Return ``True`` for every confirmation request."""
    return True


def auto_deny(_message: str) -> bool:
    """Return ``False`` for every confirmation request."""
    return False


__all__ = [
    "APPROVAL_REQUIRED_TOOLS",
    "ApprovalGate",
    "ConfirmCallback",
    "auto_confirm",
    "auto_deny",
    "confirm",
    "console_confirm",
    "format_approval_prompt",
    "requires_approval",
    "set_confirm",
    "wx_confirm",
]
