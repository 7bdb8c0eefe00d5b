"""Tests for the OpenAI-compatible completion client."""

from __future__ import annotations

import asyncio

import pytest

from ghost_assistant.llm.client import NO_API_KEY, CompletionError, LLMClient
from ghost_assistant.llm.constants import APP_REFERER, APP_TITLE
from ghost_assistant.settings import LLMSettings

from tests.llm_utils import make_openai_mock

pytestmark = pytest.mark.unit

MESSAGES = [
    {"role": "system", "content": "sys"},
    {"role": "user", "content": "hello"},
]


def test_client_configuration(monkeypatch) -> None:
    fake = make_openai_mock(["ok"])
    monkeypatch.setattr("openai.OpenAI", fake)
    LLMClient(LLMSettings(api_base="http://localhost:8080/v1", timeout_minutes=2))
    assert fake.init_kwargs["base_url"] == "http://localhost:8080/v1"
    assert fake.init_kwargs["api_key"] == NO_API_KEY
    assert fake.init_kwargs["timeout"] == 120
    assert fake.init_kwargs["default_headers"] == {
        "HTTP-Referer": APP_REFERER,
        "X-Title": APP_TITLE,
    }


def test_complete_returns_stripped_text(monkeypatch) -> None:
    fake = make_openai_mock(["  Hi there \n"])
    monkeypatch.setattr("openai.OpenAI", fake)
    client = LLMClient(LLMSettings(api_key="k", model="test/model"))
    assert client.complete(MESSAGES) == "Hi there"
    request = fake.requests[0]
    assert request["model"] == "test/model"
    assert request["messages"] == MESSAGES
    assert "temperature" not in request


def test_custom_temperature_is_sent(monkeypatch) -> None:
    fake = make_openai_mock(["ok"])
    monkeypatch.setattr("openai.OpenAI", fake)
    client = LLMClient(LLMSettings(use_custom_temperature=True, temperature=0.2))
    client.complete(MESSAGES)
    assert fake.requests[0]["temperature"] == pytest.approx(0.2)


@pytest.mark.parametrize("reply", ["", "   ", None])
def test_empty_reply_is_a_completion_error(monkeypatch, reply) -> None:
    monkeypatch.setattr("openai.OpenAI", make_openai_mock([reply]))
    with pytest.raises(CompletionError, match="empty"):
        LLMClient(LLMSettings()).complete(MESSAGES)


def test_transport_errors_become_completion_errors(monkeypatch) -> None:
    monkeypatch.setattr("openai.OpenAI", make_openai_mock([RuntimeError("503 upstream")]))
    with pytest.raises(CompletionError) as excinfo:
        LLMClient(LLMSettings()).complete(MESSAGES)
    assert excinfo.value.message == "503 upstream"


def test_complete_async(monkeypatch) -> None:
    monkeypatch.setattr("openai.OpenAI", make_openai_mock(["async reply"]))
    client = LLMClient(LLMSettings())
    assert asyncio.run(client.complete_async(MESSAGES)) == "async reply"


def test_check_llm(monkeypatch) -> None:
    monkeypatch.setattr("openai.OpenAI", make_openai_mock(["pong"]))
    assert LLMClient(LLMSettings()).check_llm() == {"ok": True}

    monkeypatch.setattr("openai.OpenAI", make_openai_mock([ConnectionError("down")]))
    result = LLMClient(LLMSettings()).check_llm()
    assert result["ok"] is False
    assert result["error"] == {"type": "ConnectionError", "message": "down"}
