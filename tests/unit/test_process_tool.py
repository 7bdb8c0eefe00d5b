import os

import psutil
import pytest

from ghost_assistant.tools.base import ATTACHED_PROCESS_KEY, ToolExecutionError
from ghost_assistant.tools.process import GetAttachedProcessInfoTool, ProcessInfo

pytestmark = pytest.mark.unit


def test_display_name_variants() -> None:
    assert ProcessInfo(42).display_name == "UnknownProcess (PID: 42)"
    assert ProcessInfo(7, "destiny2.exe", "Destiny 2").display_name == (
        "destiny2.exe (PID: 7) - Destiny 2"
    )
    long_title = "T" * 60
    assert ProcessInfo(1, "app", long_title).display_name.endswith("T" * 50 + "...")


def test_tool_reports_injected_process() -> None:
    process = ProcessInfo(1234, "destiny2.exe", "Destiny 2")
    result = GetAttachedProcessInfoTool().execute({ATTACHED_PROCESS_KEY: process})
    assert result.splitlines()[0] == "Attached process: destiny2.exe (PID: 1234) - Destiny 2"
    assert "  PID: 1234" in result


def test_tool_requires_attached_process() -> None:
    with pytest.raises(ToolExecutionError, match="No process seems to be attached"):
        GetAttachedProcessInfoTool().execute({})


def test_from_pid_reads_running_process() -> None:
    info = ProcessInfo.from_pid(os.getpid())
    assert info.pid == os.getpid()
    assert info.name == psutil.Process(os.getpid()).name()


def test_from_pid_rejects_missing_process(monkeypatch) -> None:
    def gone(pid):
        raise psutil.NoSuchProcess(pid)

    monkeypatch.setattr(psutil, "Process", gone)
    with pytest.raises(LookupError, match="No process with PID 99"):
        ProcessInfo.from_pid(99)


def test_from_pid_tolerates_unreadable_name(monkeypatch) -> None:
    class Guarded:
        def __init__(self, pid):
            self.pid = pid

        def name(self):
            raise psutil.AccessDenied(self.pid)

    monkeypatch.setattr(psutil, "Process", Guarded)
    assert ProcessInfo.from_pid(5).display_name == "UnknownProcess (PID: 5)"
