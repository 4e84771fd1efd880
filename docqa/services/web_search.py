"""
Web search fallback: Google Custom Search JSON API (default) or DuckDuckGo via ddgs.

Both clients return SearchSnippet records in the provider's order.
"""

import logging

import httpx
from ddgs import DDGS
from ddgs.exceptions import DDGSException
from ddgs.exceptions import TimeoutException as DDGSTimeoutException

from docqa.core.config import (
    GOOGLE_SEARCH_API_KEY,
    GOOGLE_SEARCH_ENGINE_ID,
    GOOGLE_SEARCH_URL,
    WEB_SEARCH_MAX_RESULTS,
    WEB_SEARCH_PAGES,
    WEB_SEARCH_PROVIDER,
    WEB_SEARCH_TIMEOUT,
)
from docqa.core.deadline import Deadline
from docqa.core.errors import ServiceUnavailableError, UpstreamError, UpstreamTimeoutError
from docqa.core.models import SearchSnippet

logger = logging.getLogger(__name__)


class GoogleSearchClient:
    """Google Custom Search, keyed by an API key and a search engine id, paged via `start`."""

    def __init__(
        self,
        api_key: str = GOOGLE_SEARCH_API_KEY,
        engine_id: str = GOOGLE_SEARCH_ENGINE_ID,
        pages: int = WEB_SEARCH_PAGES,
        http_client: httpx.Client | None = None,
    ) -> None:
        self.api_key = api_key
        self.engine_id = engine_id
        self.pages = max(1, pages)
        self._http = http_client

    def _get(self, params: dict, timeout: float) -> httpx.Response:
        if self._http is not None:
            return self._http.get(GOOGLE_SEARCH_URL, params=params, timeout=timeout)
        with httpx.Client(timeout=timeout) as client:
            return client.get(GOOGLE_SEARCH_URL, params=params)

    def search(self, query: str, deadline: Deadline) -> list[SearchSnippet]:
        if not self.api_key or not self.engine_id:
            raise ServiceUnavailableError(
                "web_search", "GOOGLE_SEARCH_API_KEY and GOOGLE_SEARCH_ENGINE_ID must be set in .env"
            )
        logger.info("[web_search:google] IN  query=%r pages=%d", query, self.pages)
        snippets: list[SearchSnippet] = []
        for page in range(self.pages):
            params = {
                "key": self.api_key,
                "cx": self.engine_id,
                "q": query,
                "num": WEB_SEARCH_MAX_RESULTS,
                "start": 1 + page * WEB_SEARCH_MAX_RESULTS,
            }
            try:
                response = self._get(params, deadline.timeout_for("web_search", WEB_SEARCH_TIMEOUT))
            except httpx.TimeoutException as e:
                raise UpstreamTimeoutError("web_search", "search request timed out") from e
            except httpx.HTTPError as e:
                raise UpstreamError("web_search", f"search request failed: {e}") from e
            if response.status_code != 200:
                raise UpstreamError("web_search", f"search API returned {response.status_code}: {response.text[:200]}")
            items = response.json().get("items") or []
            for item in items:
                snippets.append(
                    SearchSnippet(
                        title=(item.get("title") or "").strip(),
                        link=(item.get("link") or "").strip(),
                        snippet=(item.get("snippet") or "").strip(),
                    )
                )
            if len(items) < WEB_SEARCH_MAX_RESULTS:
                break
        logger.info("[web_search:google] OUT results=%d", len(snippets))
        return snippets


class DuckDuckGoSearchClient:
    def __init__(self, max_results: int = WEB_SEARCH_MAX_RESULTS) -> None:
        self.max_results = max_results

    def search(self, query: str, deadline: Deadline) -> list[SearchSnippet]:
        timeout = deadline.timeout_for("web_search", WEB_SEARCH_TIMEOUT)
        logger.info("[web_search:ddgs] IN  query=%r", query)
        try:
            with DDGS(timeout=int(max(1, timeout))) as ddgs:
                results = list(ddgs.text(query, max_results=self.max_results))
        except DDGSTimeoutException as e:
            raise UpstreamTimeoutError("web_search", "ddgs search timed out") from e
        except DDGSException as e:
            # ddgs reports an empty result set as an exception
            if "no results" in str(e).lower():
                logger.info("[web_search:ddgs] OUT results=0")
                return []
            raise UpstreamError("web_search", f"ddgs search failed: {e}") from e
        snippets = [
            SearchSnippet(
                title=(r.get("title") or "").strip(),
                link=(r.get("href") or "").strip(),
                snippet=(r.get("body") or "").strip(),
            )
            for r in results
        ]
        logger.info("[web_search:ddgs] OUT results=%d", len(snippets))
        return snippets


def get_web_search_client(provider: str = WEB_SEARCH_PROVIDER):
    if provider == "google":
        return GoogleSearchClient()
    if provider in ("duckduckgo", "ddgs"):
        return DuckDuckGoSearchClient()
    raise ValueError(f"Unknown WEB_SEARCH_PROVIDER: {provider!r}")
