"""Attached process context and the tool that reports on it."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import psutil

from .base import ATTACHED_PROCESS_KEY, ToolExecutionError

_MAX_TITLE_LENGTH = 50


@dataclass(frozen=True, slots=True)
class ProcessInfo:
    """Description of an external process the user attached to the session."""

    pid: int
    name: str = ""
    window_title: str = ""

    @property
    def display_name(self) -> str:
        name = self.name.strip() or "UnknownProcess"
        title = self.window_title.strip()
        if not title:
            return f"{name} (PID: {self.pid})"
        if len(title) > _MAX_TITLE_LENGTH:
            title = title[:_MAX_TITLE_LENGTH] + "..."
        return f"{name} (PID: {self.pid}) - {title}"

    @classmethod
    def from_pid(cls, pid: int) -> ProcessInfo:
        """Describe the running process *pid*.

        Raises :class:`LookupError` when no such process exists. A process whose
        name cannot be read is still returned, with an empty name.
        """
        try:
            process = psutil.Process(pid)
        except (psutil.NoSuchProcess, ValueError) as exc:
            raise LookupError(f"No process with PID {pid} is running.") from exc
        try:
            name = process.name()
        except psutil.NoSuchProcess as exc:
            raise LookupError(f"Process {pid} exited before it could be attached.") from exc
        except psutil.AccessDenied:
            name = ""
        return cls(pid, name)

    def __str__(self) -> str:
        return self.display_name


class GetAttachedProcessInfoTool:
    name = "get_attached_process_info"
    description = (
        "Returns the name, PID and window title of the process the user "
        "attached to this chat. Parameters: None."
    )
    needs_attached_process = True

    def execute(self, parameters: Mapping[str, Any]) -> str:
        process = parameters.get(ATTACHED_PROCESS_KEY)
        if not isinstance(process, ProcessInfo):
            raise ToolExecutionError(
                "No process seems to be attached or process info is unavailable "
                "for this tool. Please attach to a process first."
            )
        lines = [
            f"Attached process: {process.display_name}",
            f"  Name: {process.name or 'UnknownProcess'}",
            f"  PID: {process.pid}",
            f"  Window title: {process.window_title or '(none)'}",
        ]
        return "\n".join(lines)
