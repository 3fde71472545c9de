"""Configuration for the Web Tools MCP server.

Centralises cache sizes, timeouts, limits and paths that the tools would
otherwise hardcode.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class Settings:
    """Server-wide configuration — single source of truth.

    Values come from environment variables with sensible defaults.
    """

    # Search provider
    tavily_api_key: str = field(
        default_factory=lambda: os.environ.get("TAVILY_API_KEY", "")
    )
    tavily_endpoint: str = "https://api.tavily.com/search"
    search_depth: str = "basic"
    search_max_results: int = 5

    # Outbound HTTP
    proxy: str = field(
        default_factory=lambda: os.environ.get(
            "WEBTOOLS_MCP_PROXY", os.environ.get("HTTPS_PROXY", "")
        )
    )
    user_agent: str = "Mozilla/5.0 (compatible; webtools-mcp)"
    search_timeout_seconds: float = 8.0
    fetch_timeout_seconds: float = 8.0
    image_timeout_seconds: float = 15.0
    max_retries: int = 2
    retry_delay_seconds: float = 0.5

    # Caching
    search_cache_max_entries: int = 50
    search_cache_ttl_seconds: int = 600  # 10 minutes
    content_cache_max_entries: int = 30
    content_cache_ttl_seconds: int = 900  # 15 minutes

    # Content limits
    max_content_length: int = 100_000
    max_image_bytes: int = 20 * 1024 * 1024  # 20 MB
    svg_text_limit: int = 5_000

    # Session
    approval_mode: str = field(
        default_factory=lambda: os.environ.get(
            "WEBTOOLS_MCP_APPROVAL_MODE", "default"
        ).lower()
    )
    default_context_window: int = 131_072

    # Logging
    log_dir: str = field(
        default_factory=lambda: os.environ.get(
            "WEBTOOLS_MCP_LOG_DIR",
            os.path.expanduser("~/.webtools-mcp/logs"),
        )
    )
    log_level: str = field(
        default_factory=lambda: os.environ.get("LOG_LEVEL", "INFO")
    )

    # Response formatting
    character_limit: int = 25_000

    def ensure_dirs(self) -> None:
        """Create required directories if they don't exist."""
        Path(self.log_dir).mkdir(parents=True, exist_ok=True)
