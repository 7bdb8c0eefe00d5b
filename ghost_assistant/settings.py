"""Typed application settings with Pydantic validation."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Literal

import tomllib
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .llm.constants import (
    DEFAULT_LLM_BASE_URL,
    DEFAULT_LLM_MODEL,
    DEFAULT_LLM_TEMPERATURE,
)


DEFAULT_MAX_HISTORY_ENTRIES = 20
DEFAULT_SERPER_ENDPOINT = "https://google.serper.dev/search"
DEFAULT_SEARCH_RESULT_COUNT = 10
DEFAULT_FETCH_TIMEOUT_SECONDS = 15.0
DEFAULT_FETCH_MAX_CHARS = 12000
DEFAULT_MAX_TOOL_ROUNDS = 3


def _default_home() -> Path:
    return Path.home() / ".ghost_assistant"


def default_settings_path() -> Path:
    """Return location of the user settings file."""
    return _default_home() / "settings.json"


def default_history_dir() -> str:
    """Return directory used for saved chats when none is configured."""
    return str(_default_home() / "chats")


class LLMSettings(BaseModel):
    """Settings for connecting to an LLM service."""

    model_config = ConfigDict(populate_by_name=True, validate_assignment=True)

    base_url: str = Field(DEFAULT_LLM_BASE_URL, alias="api_base")
    model: str = DEFAULT_LLM_MODEL
    api_key: str | None = None
    max_retries: int = 3
    timeout_minutes: int = 10
    use_custom_temperature: bool = False
    temperature: float = Field(
        DEFAULT_LLM_TEMPERATURE,
        ge=0.0,
        le=2.0,
    )

    @field_validator("model", mode="before")
    @classmethod
    def _normalize_model(cls, value: str | None) -> str:
        """Fall back to the default model for blank values."""
        if value is None:
            return DEFAULT_LLM_MODEL
        text = str(value).strip()
        return text or DEFAULT_LLM_MODEL

    @field_validator("api_key", mode="before")
    @classmethod
    def _normalize_api_key(cls, value: str | None) -> str | None:
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    @field_validator("temperature", mode="before")
    @classmethod
    def _normalize_temperature(cls, value: float | str | None) -> float:
        """Coerce *value* to the supported temperature range."""
        if value is None:
            return DEFAULT_LLM_TEMPERATURE
        if isinstance(value, str):
            raw = value.strip()
            if not raw:
                return DEFAULT_LLM_TEMPERATURE
            try:
                parsed = float(raw)
            except ValueError:  # pragma: no cover - delegated to Pydantic
                return value
        else:
            if isinstance(value, bool):
                raise TypeError("Boolean is not a valid temperature value")
            parsed = float(value)
        if parsed < 0.0:
            return 0.0
        if parsed > 2.0:
            return 2.0
        return parsed


class SearchSettings(BaseModel):
    """Settings for the web search and page fetch tools."""

    model_config = ConfigDict(validate_assignment=True)

    serper_api_key: str | None = None
    endpoint: str = DEFAULT_SERPER_ENDPOINT
    result_count: int = Field(DEFAULT_SEARCH_RESULT_COUNT, ge=1, le=100)
    fetch_timeout_seconds: float = Field(DEFAULT_FETCH_TIMEOUT_SECONDS, gt=0)
    fetch_max_chars: int = Field(DEFAULT_FETCH_MAX_CHARS, ge=1)

    @field_validator("serper_api_key", mode="before")
    @classmethod
    def _normalize_key(cls, value: str | None) -> str | None:
        if value is None:
            return None
        text = str(value).strip()
        return text or None


class ChatSettings(BaseModel):
    """Settings controlling the chat session and tool orchestration."""

    model_config = ConfigDict(validate_assignment=True)

    system_prompt: str | None = None
    max_history_entries: int = Field(DEFAULT_MAX_HISTORY_ENTRIES, ge=1)
    approval_mode: Literal["prompt", "never"] = "prompt"
    follow_up_tool_results: bool = False
    max_tool_rounds: int = Field(DEFAULT_MAX_TOOL_ROUNDS, ge=1)
    history_dir: str = Field(default_factory=default_history_dir)

    @field_validator("system_prompt", mode="before")
    @classmethod
    def _normalise_system_prompt(cls, value: str | None) -> str | None:
        """Treat whitespace-only overrides as "use the built-in persona"."""
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    @field_validator("max_history_entries", mode="before")
    @classmethod
    def _normalise_max_history_entries(cls, value: int | str | None) -> int:
        """Coerce *value* into a positive cap, defaulting when unset."""
        if value is None:
            return DEFAULT_MAX_HISTORY_ENTRIES
        if isinstance(value, str):
            raw = value.strip()
            if not raw:
                return DEFAULT_MAX_HISTORY_ENTRIES
            try:
                return int(raw)
            except ValueError:  # pragma: no cover - delegated to Pydantic
                return value
        if isinstance(value, bool):
            raise TypeError("Boolean is not a valid max_history_entries value")
        return value

    @field_validator("history_dir", mode="before")
    @classmethod
    def _normalize_history_dir(cls, value: str | Path | None) -> str:
        if value is None:
            return default_history_dir()
        text = str(value).strip()
        return text or default_history_dir()


class AppSettings(BaseModel):
    """Aggregate settings for the application."""

    model_config = ConfigDict(validate_assignment=True)

    llm: LLMSettings = Field(default_factory=LLMSettings)
    search: SearchSettings = Field(default_factory=SearchSettings)
    chat: ChatSettings = Field(default_factory=ChatSettings)

    def to_dict(self) -> dict:
        """Return settings as a plain dictionary."""
        return self.model_dump()


def load_app_settings(path: str | Path) -> AppSettings:
    """Load :class:`AppSettings` from *path* with validation.

    Format is detected by file extension: ``.toml`` uses :mod:`tomllib`,
    everything else is treated as JSON.  Any validation errors are wrapped into
    :class:`ValueError` with a human-friendly message.
    """
    p = Path(path)
    with p.open("rb") as fh:
        data = tomllib.load(fh) if p.suffix.lower() == ".toml" else json.load(fh)
    try:
        return AppSettings.model_validate(data)
    except ValidationError as exc:
        raise ValueError(str(exc)) from exc


def save_app_settings(settings: AppSettings, path: str | Path) -> Path:
    """Write *settings* to *path* as JSON and return the resolved path."""
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    payload = settings.model_dump(mode="json")
    p.write_text(
        json.dumps(payload, ensure_ascii=False, indent=2),
        encoding="utf-8",
    )
    return p


def load_or_default(path: str | Path | None = None) -> AppSettings:
    """Return settings from *path* or defaults when the file does not exist."""
    p = Path(path) if path is not None else default_settings_path()
    if not p.exists():
        return AppSettings()
    return load_app_settings(p)
