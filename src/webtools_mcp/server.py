"""Web Tools MCP Server - Entry point.

Creates the FastMCP instance, lazily initializes the shared
ServiceContainer, and registers all tool modules.
"""

import atexit
import logging
import threading

from fastmcp import FastMCP

from webtools_mcp.config import Settings
from webtools_mcp.services import ServiceContainer
from webtools_mcp.tools.session import register_session_tools
from webtools_mcp.tools.web import register_web_tools

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Shared configuration
# ---------------------------------------------------------------------------
_settings = Settings()

# ---------------------------------------------------------------------------
# Structured logging (must be set up before any tool calls)
# ---------------------------------------------------------------------------
from webtools_mcp.logging_config import setup_logging  # noqa: E402

setup_logging(_settings)
logger.info("Web Tools MCP structured logging initialized")

# Create the MCP server
mcp = FastMCP("Web Tools MCP")

# ---------------------------------------------------------------------------
# Lazy-initialized services
# ---------------------------------------------------------------------------
_services: ServiceContainer | None = None
_services_lock = threading.Lock()


def get_services() -> ServiceContainer:
    """Get or create the ServiceContainer (lazy init).

    Sync tools run on worker threads, so the first calls may race; the lock
    makes sure they all share one container and one HTTP client.
    """
    global _services
    if _services is None:
        with _services_lock:
            if _services is None:
                services = ServiceContainer(_settings)
                atexit.register(services.close)
                _services = services
    return _services


# ---------------------------------------------------------------------------
# Register all tools with the MCP server
# ---------------------------------------------------------------------------
register_web_tools(mcp, get_services, character_limit=_settings.character_limit)
register_session_tools(mcp, get_services, character_limit=_settings.character_limit)


def main():
    """Entry point for the webtools-mcp CLI command."""
    mcp.run()


if __name__ == "__main__":
    main()
