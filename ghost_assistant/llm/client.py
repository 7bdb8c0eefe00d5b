"""Client for interacting with an OpenAI-compatible LLM API."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Mapping, Sequence
from typing import Any

from ..settings import LLMSettings
from .constants import APP_REFERER, APP_TITLE
from .logging import log_request, log_response

# When the backend does not require authentication, the official OpenAI client
# still insists on a non-empty ``api_key``.  Using a harmless placeholder allows
# talking to such endpoints while making it explicit that no real key is
# configured.
NO_API_KEY = "sk-no-key"


class CompletionError(RuntimeError):
    """Raised when the completion endpoint cannot produce a reply.

    The exception carries a single human-readable message which is shown to
    the user verbatim.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class LLMClient:
    """High-level client for chat completions."""

    def __init__(self, settings: LLMSettings) -> None:
        """Initialize client with LLM configuration ``settings``."""
        import openai

        self.settings = settings
        if not self.settings.base_url:
            raise ValueError("LLM base URL is not configured")
        api_key = self.settings.api_key or NO_API_KEY
        self._client = openai.OpenAI(
            base_url=self.settings.base_url,
            api_key=api_key,
            timeout=self.settings.timeout_minutes * 60,
            max_retries=self.settings.max_retries,
            default_headers={"HTTP-Referer": APP_REFERER, "X-Title": APP_TITLE},
        )

    # ------------------------------------------------------------------
    def check_llm(self) -> dict[str, Any]:
        """Perform a minimal request to verify connectivity."""
        request_args = self._build_request_args([{"role": "user", "content": "ping"}])
        start = time.monotonic()
        log_request(request_args)
        try:
            self._chat_completion(**request_args)
        except Exception as exc:  # pragma: no cover - network errors
            payload = {"error": {"type": type(exc).__name__, "message": str(exc)}}
            log_response(payload, start_time=start)
            return {"ok": False, **payload}
        log_response({"ok": True}, start_time=start)
        return {"ok": True}

    async def check_llm_async(self) -> dict[str, Any]:
        """Asynchronous counterpart to :meth:`check_llm`."""
        return await asyncio.to_thread(self.check_llm)

    # ------------------------------------------------------------------
    def complete(self, messages: Sequence[Mapping[str, Any]]) -> str:
        """Send ordered chat *messages* and return the assistant reply text.

        Any transport or protocol failure, including an empty reply, is
        reported as :class:`CompletionError`.
        """
        request_args = self._build_request_args(messages)
        start = time.monotonic()
        log_request(request_args)
        try:
            completion = self._chat_completion(**request_args)
            text = self._extract_text(completion)
        except CompletionError as exc:
            log_response(
                {"error": {"type": type(exc).__name__, "message": exc.message}},
                start_time=start,
            )
            raise
        except Exception as exc:
            log_response(
                {"error": {"type": type(exc).__name__, "message": str(exc)}},
                start_time=start,
            )
            raise CompletionError(str(exc) or type(exc).__name__) from exc
        log_response({"message": text}, start_time=start)
        return text

    async def complete_async(self, messages: Sequence[Mapping[str, Any]]) -> str:
        """Asynchronous counterpart to :meth:`complete`."""
        return await asyncio.to_thread(self.complete, list(messages))

    # ------------------------------------------------------------------
    def _resolve_temperature(self) -> float | None:
        if self.settings.use_custom_temperature:
            return float(self.settings.temperature)
        return None

    def _build_request_args(
        self, messages: Sequence[Mapping[str, Any]]
    ) -> dict[str, Any]:
        request_args: dict[str, Any] = {
            "model": self.settings.model,
            "messages": [
                {"role": str(message["role"]), "content": str(message["content"])}
                for message in messages
            ],
        }
        temperature = self._resolve_temperature()
        if temperature is not None:
            request_args["temperature"] = temperature
        return request_args

    @staticmethod
    def _extract_text(completion: Any) -> str:
        choices = getattr(completion, "choices", None)
        if not choices:
            raise CompletionError("LLM response did not include any choices")
        message = getattr(choices[0], "message", None)
        if message is None:
            raise CompletionError("LLM response did not include an assistant message")
        content = getattr(message, "content", None)
        if not isinstance(content, str) or not content.strip():
            raise CompletionError("LLM response was empty")
        return content.strip()

    def _chat_completion(self, **request_args: Any) -> Any:
        """Call the chat completions endpoint with normalized arguments."""
        try:
            return self._client.chat.completions.create(**request_args)
        except TypeError as exc:
            raise TypeError(
                "LLM client rejected provided arguments; "
                "verify that the backend is OpenAI-compatible."
            ) from exc
