"""Web Tools MCP Server — web search, page fetch and image tools for LLM agents.

Architecture:
    core/       — TTLCache (bounded LRU + expiry), HttpClient, shared types
    services/   — search, fetch, images, session modes, context usage
    safety/     — Structured exceptions, session approval mode
    tools/      — MCP tool definitions with @web_tool decorator and Pydantic validation
    config.py   — Settings dataclass (single source of truth for configuration)
    logging_config.py — Structured JSON logging with correlation IDs
"""

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "ConfigurationError",
    "Settings",
    "TTLCache",
    "WebToolError",
    "generate_key",
]

from webtools_mcp.config import Settings as Settings
from webtools_mcp.core.cache import TTLCache as TTLCache, generate_key as generate_key
from webtools_mcp.safety.exceptions import (
    ConfigurationError as ConfigurationError,
    WebToolError as WebToolError,
)
