"""Web tools: Serper search, page fetch and browser launchers."""

from __future__ import annotations

import re
import time
import webbrowser
from collections.abc import Callable, Mapping
from typing import Any
from urllib.parse import quote, urlsplit

import httpx
from bs4 import BeautifulSoup, Comment

from ..settings import (
    DEFAULT_FETCH_MAX_CHARS,
    DEFAULT_FETCH_TIMEOUT_SECONDS,
    DEFAULT_SEARCH_RESULT_COUNT,
    DEFAULT_SERPER_ENDPOINT,
)
from ..telemetry import log_debug_payload, log_event
from .base import NonBlankStr, ToolExecutionError, ToolParameters, validate_parameters

USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) DestinyGhostAssistant/1.0"
GOOGLE_SEARCH_URL = "https://www.google.com/search?q={query}"

BrowserOpener = Callable[[str], bool]
ApiKeyProvider = Callable[[], str | None]

_HIDDEN_TAGS = ("script", "style", "noscript", "template")
_BLOCK_TAGS = (
    "br", "p", "div", "h1", "h2", "h3", "h4", "h5", "h6", "li", "tr", "blockquote",
)
_SPACES_RE = re.compile(r"[ \t]+")
_NEWLINES_RE = re.compile(r"\n{3,}")
_MARKUP_BYTES_PER_CHAR = 32


class QueryParameters(ToolParameters):
    query: NonBlankStr


class UrlParameters(ToolParameters):
    url: NonBlankStr


def strip_html(markup: str) -> str:
    """Return readable text extracted from *markup*.

    Scripts, styles and comments are dropped and block-level tags start a new
    line. Inline markup such as ``<b>`` leaves the surrounding words joined.
    """
    soup = BeautifulSoup(markup, "html.parser")
    for tag in soup(_HIDDEN_TAGS):
        tag.decompose()
    for comment in soup.find_all(string=lambda node: isinstance(node, Comment)):
        comment.extract()
    for tag in soup.find_all(_BLOCK_TAGS):
        tag.insert_before("\n")
    lines = (_SPACES_RE.sub(" ", line).strip() for line in soup.get_text().splitlines())
    return _NEWLINES_RE.sub("\n\n", "\n".join(lines)).strip()


def _require_http_url(url: str) -> str:
    parts = urlsplit(url)
    if parts.scheme not in {"http", "https"} or not parts.netloc:
        raise ToolExecutionError(f"'{url}' is not a valid HTTP/HTTPS URL.")
    return url


class WebSearchTool:
    name = "web_search"
    description = (
        "Searches the web using Google via Serper API and returns the top 10 "
        "results. Parameters: 'query' (string, required - the search query). "
        "Returns a list of results with title, link, and snippet for each."
    )
    needs_attached_process = False

    def __init__(
        self,
        api_key_provider: ApiKeyProvider,
        *,
        endpoint: str = DEFAULT_SERPER_ENDPOINT,
        result_count: int = DEFAULT_SEARCH_RESULT_COUNT,
        timeout: float = DEFAULT_FETCH_TIMEOUT_SECONDS,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._api_key_provider = api_key_provider
        self._endpoint = endpoint
        self._result_count = result_count
        self._timeout = timeout
        self._transport = transport

    def execute(self, parameters: Mapping[str, Any]) -> str:
        params = validate_parameters(QueryParameters, parameters)
        api_key = (self._api_key_provider() or "").strip()
        if not api_key:
            raise ToolExecutionError(
                "Serper API key is not configured. Please set it in Settings."
            )

        body = {"q": params.query, "num": self._result_count}
        headers = {"X-API-KEY": api_key, "Content-Type": "application/json"}
        start = time.monotonic()
        log_debug_payload(
            "SEARCH_REQUEST",
            {"endpoint": self._endpoint, "headers": headers, "body": body},
        )
        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                response = client.post(self._endpoint, json=body, headers=headers)
        except httpx.HTTPError as exc:
            log_event("SEARCH_RESPONSE", {"error": str(exc)}, start_time=start)
            raise ToolExecutionError(
                f"Network error during web search: {exc}"
            ) from exc

        log_event(
            "SEARCH_RESPONSE",
            {"status": response.status_code, "query": params.query},
            start_time=start,
        )
        if response.is_error:
            raise ToolExecutionError(
                f"Serper API returned status {response.status_code}. "
                f"Details: {response.text}"
            )
        try:
            payload = response.json()
        except ValueError as exc:
            raise ToolExecutionError(
                f"Failed to parse search results: {exc}"
            ) from exc
        if not isinstance(payload, dict):
            raise ToolExecutionError("Failed to parse search results: unexpected payload")
        return self._format_results(params.query, payload)

    def _format_results(self, query: str, payload: Mapping[str, Any]) -> str:
        sections: list[str] = []

        answer_box = payload.get("answerBox")
        if isinstance(answer_box, Mapping):
            featured = answer_box.get("answer") or answer_box.get("snippet") or ""
            if str(featured).strip():
                sections.append(
                    f"**Featured Answer: {answer_box.get('title') or ''}**\n{featured}\n\n"
                )

        graph = payload.get("knowledgeGraph")
        if isinstance(graph, Mapping):
            description = graph.get("description") or ""
            if str(description).strip():
                sections.append(
                    f"**Knowledge Graph: {graph.get('title') or ''}**\n{description}\n\n"
                )

        results: list[str] = []
        organic = payload.get("organic")
        if isinstance(organic, list):
            for index, item in enumerate(organic[: self._result_count], start=1):
                if not isinstance(item, Mapping):
                    continue
                title = item.get("title") or ""
                link = item.get("link") or ""
                snippet = item.get("snippet") or ""
                results.append(f"**{index}. {title}**\n[{link}]({link})\n{snippet}")

        if not results and not sections:
            return f"No results found for query: '{query}'."
        header = f'Web search results for: "{query}"\n\n'
        return header + "".join(sections) + "\n\n".join(results)


class FetchWebPageTool:
    name = "fetch_webpage"
    description = (
        "Fetches the text content of a web page URL and returns it. Use this to "
        "go in-depth on a specific search result. Parameters: 'url' (string, "
        "required - the full URL to fetch, e.g. https://example.com/page)."
    )
    needs_attached_process = False

    def __init__(
        self,
        *,
        timeout: float = DEFAULT_FETCH_TIMEOUT_SECONDS,
        max_chars: int = DEFAULT_FETCH_MAX_CHARS,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._timeout = timeout
        self._max_chars = max_chars
        self._transport = transport

    def execute(self, parameters: Mapping[str, Any]) -> str:
        params = validate_parameters(UrlParameters, parameters)
        url = _require_http_url(params.url)
        markup, cut_short = self._download(url)
        text = strip_html(markup)
        if cut_short or len(text) > self._max_chars:
            text = (
                text[: self._max_chars]
                + f"\n\n[Content truncated - showing first ~{self._max_chars:,} characters]"
            )
        if not text.strip():
            return f"The page at '{url}' returned no readable text content."
        return f"Content from {url}:\n\n{text}"

    def _download(self, url: str) -> tuple[str, bool]:
        """Return the decoded body of *url* and whether it was cut at the byte limit.

        At most ``max_chars * _MARKUP_BYTES_PER_CHAR`` bytes are read and the
        whole exchange must finish within ``timeout`` seconds.
        """
        byte_limit = self._max_chars * _MARKUP_BYTES_PER_CHAR
        deadline = time.monotonic() + self._timeout
        chunks: list[bytes] = []
        received = 0
        try:
            with httpx.Client(
                timeout=self._timeout,
                transport=self._transport,
                headers={"User-Agent": USER_AGENT},
                follow_redirects=True,
            ) as client:
                with client.stream("GET", url) as response:
                    response.raise_for_status()
                    for chunk in response.iter_bytes():
                        if time.monotonic() > deadline:
                            raise ToolExecutionError(f"Request to '{url}' timed out.")
                        chunks.append(chunk)
                        received += len(chunk)
                        if received > byte_limit:
                            break
                    encoding = response.encoding or "utf-8"
        except httpx.TimeoutException as exc:
            raise ToolExecutionError(f"Request to '{url}' timed out.") from exc
        except httpx.HTTPError as exc:
            raise ToolExecutionError(f"Error fetching '{url}': {exc}") from exc

        body = b"".join(chunks)[:byte_limit]
        return body.decode(encoding, errors="replace"), received > byte_limit


class SearchWebTool:
    name = "search_web"
    description = (
        "Performs a web search using Google in the system's default web browser. "
        "Parameters: 'query' (string, the search term or question)."
    )
    needs_attached_process = False

    def __init__(self, opener: BrowserOpener = webbrowser.open) -> None:
        self._opener = opener

    def execute(self, parameters: Mapping[str, Any]) -> str:
        params = validate_parameters(QueryParameters, parameters)
        search_url = GOOGLE_SEARCH_URL.format(query=quote(params.query, safe=""))
        if not self._opener(search_url):
            raise ToolExecutionError(
                f"Could not open a browser to search for '{params.query}'."
            )
        return f"Successfully requested web search for: '{params.query}'"


class OpenUrlTool:
    name = "open_url_in_browser"
    description = (
        "Opens the specified URL in the system's default web browser. "
        "Parameters: 'url' (string, the full URL to open, e.g., https://www.google.com)."
    )
    needs_attached_process = False

    def __init__(self, opener: BrowserOpener = webbrowser.open) -> None:
        self._opener = opener

    def execute(self, parameters: Mapping[str, Any]) -> str:
        params = validate_parameters(UrlParameters, parameters)
        parts = urlsplit(params.url)
        if parts.scheme not in {"http", "https"} or not parts.netloc:
            raise ToolExecutionError(
                f"Invalid URL provided: '{params.url}'. Please provide a full URL "
                "starting with http:// or https://."
            )
        if not self._opener(params.url):
            raise ToolExecutionError(
                f"Could not open a browser for URL '{params.url}'."
            )
        return f"Successfully requested to open URL: {params.url}"
