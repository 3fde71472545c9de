"""Service layer — one focused module per tool family.

Each service receives the shared ``HttpClient``, its own ``TTLCache`` where
it caches, and the session ``ApprovalState`` via constructor.

``ServiceContainer`` builds the full service graph.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import httpx

from webtools_mcp.config import Settings
from webtools_mcp.core.cache import TTLCache
from webtools_mcp.core.http import HttpClient
from webtools_mcp.safety.approval import ApprovalState

from webtools_mcp.services.fetch import Summarizer, WebFetchService
from webtools_mcp.services.images import ImageFetchService
from webtools_mcp.services.search import WebSearchService
from webtools_mcp.services.session import ContextUsageService, SessionModeService


class ServiceContainer:
    """Holds all service instances with proper dependency wiring."""

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        summarizer: Optional[Summarizer] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.settings = settings or Settings()

        self.http = HttpClient(self.settings, transport=transport)
        self.search_cache = TTLCache(
            ttl=self.settings.search_cache_ttl_seconds,
            max_entries=self.settings.search_cache_max_entries,
        )
        self.content_cache = TTLCache(
            ttl=self.settings.content_cache_ttl_seconds,
            max_entries=self.settings.content_cache_max_entries,
        )
        self.approval = ApprovalState(self.settings.approval_mode)

        self.search = WebSearchService(
            self.http, self.search_cache, self.settings, self.approval
        )
        self.fetch = WebFetchService(
            self.http, self.content_cache, self.settings, self.approval, summarizer
        )
        self.images = ImageFetchService(self.http, self.settings, self.approval)
        self.session = SessionModeService(self.approval)
        self.context_usage = ContextUsageService(self.settings)

    def cache_stats(self) -> Dict[str, Any]:
        return {
            "search_cache": self.search_cache.stats(),
            "content_cache": self.content_cache.stats(),
        }

    def clear_caches(self) -> Dict[str, int]:
        """Clear both caches. Returns counts of entries cleared."""
        cleared = {
            "search_cleared": len(self.search_cache),
            "content_cleared": len(self.content_cache),
        }
        self.search_cache.clear()
        self.content_cache.clear()
        return cleared

    def close(self) -> None:
        self.http.close()


__all__ = [
    "ServiceContainer",
    "WebSearchService",
    "WebFetchService",
    "ImageFetchService",
    "SessionModeService",
    "ContextUsageService",
]
