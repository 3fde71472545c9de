"""Response formatting utilities for the MCP tool layer.

Provides truncation and structured error formatting.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

CHARACTER_LIMIT = 25_000

# Text fields that may be shortened when a response is too large
_TEXT_FIELDS = ("llm_content", "text")


def truncate_if_needed(
    result: Dict[str, Any],
    tool_name: str = "",
    limit: int = CHARACTER_LIMIT,
) -> Dict[str, Any]:
    """Truncate oversized dict responses to fit within *limit* characters.

    Long model-facing text is cut first, then the largest list values are
    halved until the serialised response fits.
    """
    try:
        serialized = json.dumps(result, default=str)
    except (TypeError, ValueError):
        return result

    overflow = len(serialized) - limit
    if overflow <= 0:
        return result

    truncated = dict(result)
    for key in _TEXT_FIELDS:
        val = truncated.get(key)
        if isinstance(val, str) and len(val) > 1000:
            keep = max(1000, len(val) - overflow - 500)
            truncated[key] = val[:keep] + "\n... (truncated)"
            break

    for key in sorted(
        truncated,
        key=lambda k: len(json.dumps(truncated[k], default=str))
        if isinstance(truncated[k], list)
        else 0,
        reverse=True,
    ):
        if len(json.dumps(truncated, default=str)) <= limit:
            break
        val = truncated[key]
        while isinstance(val, list) and len(val) > 1:
            val = val[: len(val) // 2]
            truncated[key] = val
            if len(json.dumps(truncated, default=str)) <= limit - 200:
                break

    truncated["_truncated"] = True
    truncated["_note"] = (
        f"Response from {tool_name or 'tool'} exceeded {limit} characters "
        f"and was truncated."
    )
    return truncated


def format_error_response(
    error: Exception,
    error_type: str = "unexpected",
    suggestions: Optional[List[str]] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Build a structured error response dict for MCP clients.

    Args:
        error: The exception that occurred.
        error_type: Machine-readable error category.
        suggestions: Actionable recovery steps.
        metadata: Structured debugging context.
    """
    response: Dict[str, Any] = {
        "isError": True,
        "error_type": error_type,
        "error": str(error),
    }
    if suggestions:
        response["suggestions"] = suggestions
    if metadata:
        response["metadata"] = metadata
    return response


def format_validation_error(error: ValidationError) -> Dict[str, Any]:
    """Flatten a pydantic ValidationError into the standard error shape."""
    messages = []
    for item in error.errors():
        loc = ".".join(str(p) for p in item.get("loc", ()))
        msg = item.get("msg", "invalid value")
        messages.append(f"{loc}: {msg}" if loc else msg)
    return format_error_response(
        error,
        error_type="validation",
        suggestions=messages,
    )
