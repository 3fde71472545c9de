"""Core infrastructure: TTL cache, HTTP client, shared types."""

from webtools_mcp.core.cache import CacheEntry, TTLCache, generate_key
from webtools_mcp.core.http import HttpClient
from webtools_mcp.core.types import (
    SUPPORTED_IMAGE_TYPES,
    CachedSearchResult,
    SearchHit,
    is_private_url,
    mime_type_from_url,
    to_raw_github_url,
    validate_http_url,
)

__all__ = [
    "CacheEntry",
    "TTLCache",
    "generate_key",
    "HttpClient",
    "SUPPORTED_IMAGE_TYPES",
    "CachedSearchResult",
    "SearchHit",
    "is_private_url",
    "mime_type_from_url",
    "to_raw_github_url",
    "validate_http_url",
]
