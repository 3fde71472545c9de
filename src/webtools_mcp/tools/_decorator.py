"""@web_tool decorator — shared wrapper for every MCP tool function.

Wraps every tool with:
- Correlation ID + tool name context for structured logs
- Timing (records duration in milliseconds)
- Structured error formatting with recovery suggestions
- Response truncation to the character limit
- Tool annotation registration (read-only, destructive, idempotent hints)
"""

from __future__ import annotations

import functools
import logging
import time
from typing import Any, Callable

from pydantic import ValidationError

from webtools_mcp.logging_config import (
    log_tool_complete,
    log_tool_start,
    start_tool_context,
)
from webtools_mcp.safety.exceptions import WebToolError
from webtools_mcp.tools._response import (
    CHARACTER_LIMIT,
    format_error_response,
    format_validation_error,
    truncate_if_needed,
)

logger = logging.getLogger(__name__)


def web_tool(
    mcp: Any,
    *,
    read_only: bool = False,
    destructive: bool = False,
    idempotent: bool = False,
    open_world: bool = False,
    character_limit: int = CHARACTER_LIMIT,
):
    """Decorator that registers a function as an MCP tool with standard wrappers.

    Args:
        mcp: The FastMCP server instance.
        read_only: Tool only reads data, never modifies.
        destructive: Tool may delete or overwrite data.
        idempotent: Calling the tool twice with the same args has the same effect.
        open_world: Tool may interact with external systems.
        character_limit: Dict responses longer than this (as JSON) are truncated.

    Usage::

        @web_tool(mcp, read_only=True, open_world=True)
        def web_search(query: str) -> dict:
            \"\"\"Search the web.\"\"\"
            return get_services().search.search(query)
    """

    def decorator(fn: Callable) -> Callable:
        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            tool_name = fn.__name__
            start_tool_context(tool_name)
            log_tool_start(tool_name, kwargs)
            start = time.time()

            try:
                result = fn(*args, **kwargs)
            except WebToolError as e:
                log_tool_complete(
                    tool_name,
                    (time.time() - start) * 1000,
                    False,
                    resource_id=e.resource_id,
                    error=str(e),
                    error_type=e.error_type,
                )
                return format_error_response(
                    e,
                    error_type=e.error_type,
                    suggestions=e.suggestions,
                    metadata=e.metadata,
                )
            except ValidationError as e:
                log_tool_complete(
                    tool_name,
                    (time.time() - start) * 1000,
                    False,
                    error=str(e),
                    error_type="validation",
                )
                return format_validation_error(e)
            except Exception as e:
                logger.exception("Unexpected error in %s", tool_name)
                log_tool_complete(
                    tool_name,
                    (time.time() - start) * 1000,
                    False,
                    error=str(e),
                    error_type="unexpected",
                )
                return format_error_response(e)

            duration_ms = (time.time() - start) * 1000
            if isinstance(result, dict):
                log_tool_complete(
                    tool_name,
                    duration_ms,
                    True,
                    cached=result.get("cached"),
                    url=result.get("url", ""),
                )
                result = truncate_if_needed(result, tool_name, character_limit)
            else:
                log_tool_complete(tool_name, duration_ms, True)
            return result

        annotations = {}
        if read_only:
            annotations["readOnlyHint"] = True
        if destructive:
            annotations["destructiveHint"] = True
        if idempotent:
            annotations["idempotentHint"] = True
        if open_world:
            annotations["openWorldHint"] = True

        # Register with FastMCP, passing annotations if supported
        try:
            mcp.tool(wrapper, annotations=annotations)
        except TypeError:
            # Fallback for FastMCP versions without annotations param
            mcp.tool(wrapper)

        return wrapper

    return decorator
