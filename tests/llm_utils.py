"""Fakes for LLM-related tests."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from types import SimpleNamespace
from typing import Any


def completion(content: str | None) -> SimpleNamespace:
    """Return a minimal chat completion payload carrying *content*."""
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))]
    )


def make_openai_mock(replies: Sequence[object]):
    """Return a ``FakeOpenAI`` class answering with *replies* in order.

    Each entry is either a string (the assistant reply) or an exception raised
    from ``chat.completions.create``. The last entry is reused once the queue
    runs out. Constructor keyword arguments and every request are recorded on
    class attributes so tests can inspect them:

    >>> monkeypatch.setattr("openai.OpenAI", make_openai_mock(["Hi there"]))
    """

    queue = list(replies)

    class _Completions:
        def create(self, **kwargs):
            FakeOpenAI.requests.append(kwargs)
            result = queue.pop(0) if len(queue) > 1 else queue[0]
            if isinstance(result, Exception):
                raise result
            return completion(result)

    class _Chat:
        def __init__(self) -> None:
            self.completions = _Completions()

    class FakeOpenAI:
        init_kwargs: dict[str, Any] = {}
        requests: list[dict[str, Any]] = []

        def __init__(self, *a, **k) -> None:
            FakeOpenAI.init_kwargs = k
            self.chat = _Chat()

    return FakeOpenAI


class ScriptedLLM:
    """Completion client returning canned replies and recording requests."""

    def __init__(self, *replies: object) -> None:
        self._replies = list(replies)
        self.requests: list[list[dict[str, Any]]] = []

    async def complete_async(self, messages: Sequence[Mapping[str, Any]]) -> str:
        self.requests.append([dict(message) for message in messages])
        reply = self._replies.pop(0) if len(self._replies) > 1 else self._replies[0]
        if isinstance(reply, Exception):
            raise reply
        return reply


class RecordingTool:
    """Tool double that records each call and returns a fixed result."""

    needs_attached_process = False

    def __init__(
        self,
        name: str,
        result: str = "ok",
        *,
        description: str = "test tool",
        error: Exception | None = None,
    ) -> None:
        self.name = name
        self.description = description
        self.result = result
        self.error = error
        self.calls: list[dict[str, Any]] = []

    def execute(self, parameters: Mapping[str, Any]) -> str:
        self.calls.append(dict(parameters))
        if self.error is not None:
            raise self.error
        return self.result
