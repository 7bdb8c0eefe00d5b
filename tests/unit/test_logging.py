"""Tests for logging configuration, telemetry and tool logging."""

import json
import logging
from pathlib import Path

import pytest

import ghost_assistant.telemetry as telemetry
from ghost_assistant.llm.logging import log_request, log_response
from ghost_assistant.log import (
    ConsoleFormatter,
    JsonlHandler,
    configure_logging,
    get_log_file_paths,
    logger,
)
from ghost_assistant.telemetry import REDACTED, log_event, sanitize
from ghost_assistant.tools.utils import log_tool

pytestmark = pytest.mark.unit


@pytest.fixture
def jsonl_records(tmp_path: Path):
    """Attach a JSONL handler and return a reader for its records."""
    log_file = tmp_path / "capture.jsonl"
    handler = JsonlHandler(str(log_file))
    logger.addHandler(handler)
    prev_level = logger.level
    logger.setLevel(logging.DEBUG)

    def read() -> list[dict]:
        handler.flush()
        return [json.loads(line) for line in log_file.read_text().splitlines()]

    try:
        yield read
    finally:
        logger.setLevel(prev_level)
        logger.removeHandler(handler)
        handler.close()


def test_configure_logging_attaches_handlers_once(reset_logger, tmp_path: Path) -> None:
    configure_logging(log_dir=tmp_path / "logs")
    configure_logging(log_dir=tmp_path / "other")
    assert len(logger.handlers) == 3
    text_log, json_log = get_log_file_paths()
    assert text_log.parent == (tmp_path / "logs").resolve()
    assert text_log.name == "ghost_assistant.log"
    assert json_log.name == "ghost_assistant.jsonl"


def test_console_formatter_appends_event_payload() -> None:
    record = logging.LogRecord("ghost_assistant", logging.INFO, __file__, 1, "EVT", None, None)
    record.json = {"event": "EVT", "payload": {"a": 1}}
    assert ConsoleFormatter().format(record) == 'INFO: EVT {"a": 1}'


def test_sanitize_redacts_nested_sensitive_keys() -> None:
    sanitized = sanitize(
        {
            "X-API-KEY": "k",
            "nested": {"serper_api_key": "s", "value": 1},
            "list": [{"Authorization": "Bearer x"}],
        }
    )
    assert sanitized["X-API-KEY"] == REDACTED
    assert sanitized["nested"] == {"serper_api_key": REDACTED, "value": 1}
    assert sanitized["list"][0]["Authorization"] == REDACTED


def test_log_event_records_size_and_duration(jsonl_records, monkeypatch) -> None:
    monkeypatch.setattr(telemetry.time, "monotonic", lambda: 2.0)
    log_event("TEST_EVENT", {"api_key": "secret", "foo": "bar"}, start_time=1.0)
    entry = jsonl_records()[-1]
    assert entry["event"] == "TEST_EVENT"
    assert entry["payload"] == {"api_key": REDACTED, "foo": "bar"}
    assert entry["duration_ms"] == 1000
    assert entry["size_bytes"] > 0


def test_log_tool_hides_context_and_truncates(jsonl_records) -> None:
    log_tool("read_file_content", {"path": "a", "_attached_process": object()}, "x" * 20,
             max_result_length=5)
    entry = jsonl_records()[-1]
    assert entry["tool"] == "read_file_content"
    assert entry["params"] == {"path": "a"}
    assert entry["result"] == "xxxxx..."


def test_log_tool_records_errors(jsonl_records) -> None:
    result = log_tool("delete_file", {"path": "a"}, "Error: Path not found: 'a'.")
    assert result == "Error: Path not found: 'a'."
    assert jsonl_records()[-1]["error"] == "Error: Path not found: 'a'."


def test_repeated_system_prompt_is_elided(jsonl_records) -> None:
    payload = {"model": "m", "messages": [{"role": "system", "content": "long prompt"}]}
    log_request(payload)
    log_request(payload)
    requests = [
        entry for entry in jsonl_records()
        if entry.get("event") == "LLM_REQUEST" and entry.get("level") != "DEBUG"
    ]
    assert requests[0]["payload"]["messages"][0]["content"] == "long prompt"
    assert requests[1]["payload"]["messages"][0]["content"] != "long prompt"
    assert payload["messages"][0]["content"] == "long prompt"


def test_log_response_keeps_payload_unchanged(jsonl_records) -> None:
    log_response({"message": "hi"})
    responses = [e for e in jsonl_records() if e.get("event") == "LLM_RESPONSE"]
    assert [e["level"] for e in responses] == ["INFO", "DEBUG"]
    assert all(e["payload"] == {"message": "hi"} for e in responses)
