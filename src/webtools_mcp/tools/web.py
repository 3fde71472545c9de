"""Web MCP tools: search, page fetch, image fetch, and cache administration.

All network tools are read-only and open-world; results from search and
page fetch are served from the per-server TTL caches when possible.
"""

import logging
from typing import Callable, Optional

from fastmcp import FastMCP
from mcp.types import ImageContent, TextContent

from webtools_mcp.tools._decorator import web_tool
from webtools_mcp.tools._response import CHARACTER_LIMIT
from webtools_mcp.tools._models import ReadImageUrlInput, WebFetchInput, WebSearchInput

logger = logging.getLogger(__name__)


def register_web_tools(
    mcp: FastMCP,
    get_services: Callable,
    character_limit: int = CHARACTER_LIMIT,
):
    """Register web search / fetch / image tools and cache tools.

    Dict responses larger than *character_limit* characters are truncated.
    """

    @web_tool(mcp, character_limit=character_limit, read_only=True, open_world=True)
    def web_search(query: str) -> dict:
        """Search the web using the Tavily API and return a concise answer with sources.

        Requires the TAVILY_API_KEY environment variable. Identical queries
        (ignoring case and surrounding whitespace) are answered from a
        10-minute cache.

        Args:
            query: The search query to find information on the web.

        Returns llm_content (answer + numbered sources), sources
        [{title, url}], and cached (whether the cache answered).
        """
        params = WebSearchInput(query=query)
        return get_services().search.search(params.query)

    @web_tool(mcp, character_limit=character_limit, read_only=True, open_world=True)
    def web_fetch(url: str, prompt: str) -> dict:
        """Fetch a URL, convert the page to text, and process it with a prompt.

        - GitHub blob URLs are converted to raw URLs automatically
        - HTML is converted to text (links and images dropped) and capped
          at 100,000 characters
        - Page text is cached for 15 minutes, so follow-up prompts about
          the same page are fast
        - Works with public and private/localhost URLs

        Args:
            url: The fully-formed http(s) URL to fetch.
            prompt: What information you want extracted from the page.
        """
        params = WebFetchInput(url=url, prompt=prompt)
        return get_services().fetch.fetch(params.url, params.prompt)

    @web_tool(mcp, character_limit=character_limit, read_only=True, open_world=True)
    def read_image_url(url: str, description: Optional[str] = None):
        """Fetch an image from a URL and provide it for visual analysis.

        Use this to analyze screenshots, diagrams or charts from the web,
        or to read text from an image.

        Supported formats: JPEG, PNG, GIF, WebP, SVG, BMP. Maximum size 20MB.
        GitHub blob URLs are auto-converted. SVG files also include their
        raw SVG source for text analysis.

        Args:
            url: The URL of the image to fetch and analyze.
            description: Optional note on what to look for in the image.
        """
        params = ReadImageUrlInput(url=url, description=description)
        services = get_services()
        logger.debug(services.images.get_description(params.url, params.description))
        image = services.images.fetch_image(params.url)
        return [
            TextContent(type="text", text=image["text"]),
            ImageContent(type="image", data=image["data"], mimeType=image["mime_type"]),
        ]

    @web_tool(mcp, character_limit=character_limit, read_only=True, idempotent=True)
    def get_cache_stats() -> dict:
        """Show entry counts and capacities of the search and page caches."""
        return get_services().cache_stats()

    @web_tool(mcp, character_limit=character_limit, destructive=True, idempotent=True)
    def clear_web_caches() -> dict:
        """Empty the search and page caches so the next calls hit the network."""
        cleared = get_services().clear_caches()
        return {"status": "success", **cleared}
