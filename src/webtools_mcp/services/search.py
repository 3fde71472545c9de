"""Web search service backed by the Tavily API.

Answers are cached per normalised query in the container's search cache so
repeated questions within the TTL do not hit the API again.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Optional

from webtools_mcp.config import Settings
from webtools_mcp.core.cache import TTLCache, generate_key
from webtools_mcp.core.http import HttpClient
from webtools_mcp.core.types import CachedSearchResult, SearchHit
from webtools_mcp.logging_config import log_cache_lookup
from webtools_mcp.safety.approval import (
    ApprovalState,
    ConfirmationDetails,
    confirmation_for,
)
from webtools_mcp.safety.exceptions import (
    FetchTimeoutError,
    MissingApiKeyError,
    WebValidationError,
)

logger = logging.getLogger(__name__)

TIMEOUT_HINT = (
    "The search timed out. Try a simpler query or check your network connection."
)


class WebSearchService:
    """Search the web and summarise results for the model.

    Args:
        http: Shared HTTP client.
        cache: Search cache (query key → ``CachedSearchResult``).
        settings: Server-wide configuration.
        approval: Session approval state.
    """

    def __init__(
        self,
        http: HttpClient,
        cache: TTLCache,
        settings: Settings,
        approval: ApprovalState,
    ):
        self._http = http
        self._cache = cache
        self._settings = settings
        self._approval = approval

    def get_description(self, query: str) -> str:
        return f'Searching the web for: "{query}"'

    def confirmation(self, query: str) -> Optional[ConfirmationDetails]:
        return confirmation_for(
            self._approval, "Confirm Web Search", f'Search the web for: "{query}"'
        )

    def search(self, query: str) -> Dict[str, Any]:
        """Run *query* (cache first) and return the formatted result."""
        if not query or not query.strip():
            raise WebValidationError(
                "The 'query' parameter cannot be empty.", resource_id=query or ""
            )

        api_key = self._settings.tavily_api_key
        if not api_key:
            raise MissingApiKeyError(resource_id=query)

        cache_key = generate_key(query)
        cached = self._cache.get(cache_key)
        log_cache_lookup("search", query, cached is not None, self._cache.size)
        if cached is not None:
            return self.format_result(query, cached, cached=True)

        start = time.time()
        try:
            data = self._execute_search(api_key, query)
        except FetchTimeoutError as e:
            e.suggestions.insert(0, TIMEOUT_HINT)
            raise
        logger.debug("Search completed in %.0fms", (time.time() - start) * 1000)

        result = CachedSearchResult(
            answer=data.get("answer"),
            hits=[
                SearchHit(
                    title=r.get("title") or "",
                    url=r.get("url") or "",
                    content=r.get("content"),
                )
                for r in data.get("results") or []
            ],
        )
        self._cache.set(cache_key, result)
        return self.format_result(query, result, cached=False)

    def format_result(
        self, query: str, data: CachedSearchResult, cached: bool
    ) -> Dict[str, Any]:
        """Build the model-facing text plus the source list."""
        sources: List[Dict[str, str]] = [
            {"title": h.title, "url": h.url} for h in data.hits
        ]

        content = (data.answer or "").strip()
        if not content:
            content = "\n".join(
                f"{i}. {s['title']} - {s['url']}"
                for i, s in enumerate(sources[:3], start=1)
            )
        if sources:
            listing = "\n".join(
                f"[{i}] {s['title'] or 'Untitled'} ({s['url']})"
                for i, s in enumerate(sources, start=1)
            )
            content += f"\n\nSources:\n{listing}"

        if not content.strip():
            return {
                "llm_content": (
                    f'No search results or information found for query: "{query}"'
                ),
                "display": "No information found.",
                "sources": [],
                "cached": cached,
            }

        cache_indicator = " (cached)" if cached else ""
        return {
            "llm_content": f'Web search results for "{query}":\n\n{content}',
            "display": f'Search results for "{query}" returned{cache_indicator}.',
            "sources": sources,
            "cached": cached,
        }

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _execute_search(self, api_key: str, query: str) -> Dict[str, Any]:
        payload = {
            "api_key": api_key,
            "query": query,
            "search_depth": self._settings.search_depth,
            "max_results": self._settings.search_max_results,
            "include_answer": True,
        }
        response = self._http.post_json(
            self._settings.tavily_endpoint,
            payload,
            timeout=self._settings.search_timeout_seconds,
        )
        return response.json()

