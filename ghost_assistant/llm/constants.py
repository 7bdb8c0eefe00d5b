"""Shared constants for LLM configuration defaults."""

DEFAULT_LLM_BASE_URL = "https://openrouter.ai/api/v1"
"""OpenRouter-compatible endpoint used when no override is provided."""

DEFAULT_LLM_MODEL = "gryphe/mythomax-l2-13b"
"""Default OpenRouter model used for chat completions."""

DEFAULT_LLM_TEMPERATURE = 0.7
"""Model sampling temperature used when the user enables overrides."""

APP_TITLE = "Destiny Ghost Assistant"
"""Title advertised to OpenRouter through the ``X-Title`` header."""

APP_REFERER = "http://localhost"
"""Referer advertised to OpenRouter through the ``HTTP-Referer`` header."""
