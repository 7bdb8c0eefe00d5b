"""Application logger for Ghost Assistant.

All modules log through the ``ghost_assistant`` logger. Once
:func:`configure_logging` has run, records go to three sinks:

* the console (stderr), filtered by the requested level;
* ``ghost_assistant.log``, a rotating plain-text log with every record;
* ``ghost_assistant.jsonl``, a rotating JSON-lines log where records emitted
  by :mod:`ghost_assistant.telemetry` keep their structured payload.

The directory defaults to ``~/.ghost_assistant/logs`` and may be overridden
with the ``GHOST_ASSISTANT_LOG_DIR`` environment variable.
"""

from __future__ import annotations

import json
import logging
import os
import sys
import threading
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

from .util.time import utc_now_iso

LOG_DIR_ENV = "GHOST_ASSISTANT_LOG_DIR"
TEXT_LOG_NAME = "ghost_assistant.log"
JSON_LOG_NAME = "ghost_assistant.jsonl"
MAX_LOG_BYTES = 5 * 1024 * 1024
LOG_BACKUPS = 5

logger = logging.getLogger("ghost_assistant")

_log_dir: Path | None = None


def _structured(record: logging.LogRecord) -> dict[str, Any] | None:
    data = getattr(record, "json", None)
    return data if isinstance(data, dict) else None


class ConsoleFormatter(logging.Formatter):
    """Render ``LEVEL: message`` and append the payload of telemetry events."""

    def __init__(self) -> None:
        super().__init__("%(levelname)s: %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        data = _structured(record)
        if data is None or "payload" not in data or record.msg != data.get("event"):
            return text
        return f"{text} {json.dumps(data['payload'], ensure_ascii=False, default=str)}"


class JsonFormatter(logging.Formatter):
    """Serialise a record to one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        data = dict(_structured(record) or {})
        data.setdefault("message", message)
        data.setdefault("level", record.levelname)
        data.setdefault("timestamp", utc_now_iso())
        if record.exc_info and "exc_info" not in data:
            data["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(data, ensure_ascii=False, default=str)


class JsonlHandler(RotatingFileHandler):
    """Rotating handler writing :class:`JsonFormatter` lines to *filename*."""

    def __init__(
        self,
        filename: Path | str,
        *,
        max_bytes: int = MAX_LOG_BYTES,
        backup_count: int = LOG_BACKUPS,
    ) -> None:
        path = Path(filename)
        path.parent.mkdir(parents=True, exist_ok=True)
        super().__init__(
            path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
        )
        self.setFormatter(JsonFormatter())


def _resolve_log_dir(log_dir: str | Path | None) -> Path:
    if log_dir is None:
        log_dir = os.environ.get(LOG_DIR_ENV) or Path.home() / ".ghost_assistant" / "logs"
    path = Path(log_dir).expanduser()
    path.mkdir(parents=True, exist_ok=True)
    return path.resolve()


def configure_logging(
    level: int = logging.WARNING,
    *,
    log_dir: str | Path | None = None,
) -> None:
    """Attach console, text and JSONL handlers to :data:`logger` once.

    Repeated calls are no-ops so the CLI and tests may both call it. Only the
    console honours *level*; the files always capture ``DEBUG`` records.
    """
    global _log_dir

    if logger.handlers:
        if _log_dir is None:
            _log_dir = _resolve_log_dir(log_dir)
        return

    _log_dir = _resolve_log_dir(log_dir)

    if sys.stderr is not None:
        console = logging.StreamHandler()
        console.setLevel(level)
        console.setFormatter(ConsoleFormatter())
        logger.addHandler(console)

    text = RotatingFileHandler(
        _log_dir / TEXT_LOG_NAME,
        maxBytes=MAX_LOG_BYTES,
        backupCount=LOG_BACKUPS,
        encoding="utf-8",
    )
    text.setLevel(logging.DEBUG)
    text.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
    )
    logger.addHandler(text)

    structured = JsonlHandler(_log_dir / JSON_LOG_NAME)
    structured.setLevel(logging.DEBUG)
    logger.addHandler(structured)

    logger.setLevel(logging.DEBUG)


def install_exception_hooks() -> None:
    """Route uncaught exceptions from any thread to :data:`logger`."""

    def _log_uncaught(exc_type, exc_value, exc_traceback) -> None:
        logger.critical(
            "Uncaught exception", exc_info=(exc_type, exc_value, exc_traceback)
        )

    def _log_uncaught_in_thread(args: threading.ExceptHookArgs) -> None:
        logger.critical(
            "Uncaught exception in thread %s",
            getattr(args.thread, "name", None),
            exc_info=(args.exc_type, args.exc_value, args.exc_traceback),
        )

    sys.excepthook = _log_uncaught
    threading.excepthook = _log_uncaught_in_thread


def get_log_directory() -> Path:
    """Return the directory holding the log files, configuring logging if needed."""
    if _log_dir is None:
        configure_logging()
    assert _log_dir is not None
    return _log_dir


def get_log_file_paths() -> tuple[Path, Path]:
    """Return ``(text_log, jsonl_log)`` paths."""
    directory = get_log_directory()
    return directory / TEXT_LOG_NAME, directory / JSON_LOG_NAME


__all__ = [
    "ConsoleFormatter",
    "JSON_LOG_NAME",
    "JsonFormatter",
    "JsonlHandler",
    "LOG_DIR_ENV",
    "TEXT_LOG_NAME",
    "configure_logging",
    "get_log_directory",
    "get_log_file_paths",
    "install_exception_hooks",
    "logger",
]
