"""Session MCP tools: plan / YOLO approval toggles and context usage."""

import logging
from typing import Callable

from fastmcp import FastMCP

from webtools_mcp.tools._decorator import web_tool
from webtools_mcp.tools._response import CHARACTER_LIMIT
from webtools_mcp.tools._models import ContextUsageInput

logger = logging.getLogger(__name__)


def register_session_tools(
    mcp: FastMCP,
    get_services: Callable,
    character_limit: int = CHARACTER_LIMIT,
):
    """Register approval-mode and context usage tools.

    Dict responses larger than *character_limit* characters are truncated.
    """

    @web_tool(mcp, character_limit=character_limit)
    def toggle_plan_mode() -> dict:
        """Toggle Plan mode (read-only analysis) for this session.

        In Plan mode no file edits or commands should run; web tools stay
        available because they only retrieve information. Calling again
        returns to the default approval mode.
        """
        return get_services().session.toggle_plan()

    @web_tool(mcp, character_limit=character_limit)
    def toggle_yolo_mode() -> dict:
        """Toggle YOLO mode (auto-approve all tools) for this session.

        Calling again returns to the default approval mode.
        """
        return get_services().session.toggle_yolo()

    @web_tool(mcp, character_limit=character_limit, read_only=True, idempotent=True)
    def get_approval_mode() -> dict:
        """Show the session approval mode and which web tools need confirmation."""
        services = get_services()
        return {
            "mode": services.session.mode.value,
            "requires_confirmation": {
                "web_search": services.search.confirmation("") is not None,
                "web_fetch": services.fetch.confirmation("", "") is not None,
                "read_image_url": services.images.confirmation("") is not None,
            },
        }

    @web_tool(mcp, character_limit=character_limit, read_only=True, idempotent=True)
    def get_context_usage(prompt_token_count: int, model: str) -> dict:
        """Report how much of the model's context window the prompt uses.

        Args:
            prompt_token_count: Tokens in the current prompt.
            model: Model name, used to look up its context window.

        Returns used/remaining percentages, a usage level (healthy,
        moderate, warning, critical), and short text summaries.
        """
        params = ContextUsageInput(prompt_token_count=prompt_token_count, model=model)
        return get_services().context_usage.report(
            params.prompt_token_count, params.model
        )
