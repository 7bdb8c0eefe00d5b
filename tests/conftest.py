"""Pytest configuration for the Ghost Assistant test suite."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

import ghost_assistant.log as log_module
from ghost_assistant.llm.logging import _reset_prompt_log_state
from ghost_assistant.log import LOG_DIR_ENV, logger
from ghost_assistant.settings import AppSettings


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "unit: fast tests without I/O beyond tmp_path")
    config.addinivalue_line(
        "markers", "integration: tests wiring several components together"
    )


@pytest.fixture(autouse=True)
def _isolate_log_dir(monkeypatch, tmp_path: Path) -> None:
    """Keep log files produced during tests out of the user's home."""
    monkeypatch.setenv(LOG_DIR_ENV, str(tmp_path / "logs"))
    _reset_prompt_log_state()


@pytest.fixture
def reset_logger():
    prev_handlers = list(logger.handlers)
    prev_level = logger.level
    prev_log_dir = log_module._log_dir
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    log_module._log_dir = None
    try:
        yield
    finally:
        for handler in logger.handlers:
            handler.close()
        logger.handlers.clear()
        logger.handlers.extend(prev_handlers)
        logger.setLevel(prev_level)
        log_module._log_dir = prev_log_dir


@pytest.fixture
def app_settings(tmp_path: Path) -> AppSettings:
    """Return default settings with chat history stored under *tmp_path*."""
    settings = AppSettings()
    settings.chat.history_dir = str(tmp_path / "chats")
    return settings
