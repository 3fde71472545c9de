"""JSON-lines logging for web tool calls and cache lookups.

Each record in ``<log_dir>/webtools_mcp.jsonl`` carries the correlation ID and
tool name of the call that produced it, so a search's cache lookup, any
upstream retries and its completion line can be grouped with one filter.
stderr gets plain text; stdout belongs to the MCP transport.
"""

from __future__ import annotations

import contextvars
import json
import logging
import logging.handlers
import os
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from webtools_mcp.config import Settings

LOG_FILE_NAME = "webtools_mcp.jsonl"

_FILE_HANDLER = "webtools_mcp.file"
_STDERR_HANDLER = "webtools_mcp.stderr"

# Record attributes copied into the JSON line when set
_EXTRA_FIELDS = (
    "event",
    "duration_ms",
    "success",
    "params",
    "resource_id",
    "url",
    "cache",
    "cached",
    "cache_size",
    "error_type",
    "error",
)

_correlation_id: contextvars.ContextVar[str] = contextvars.ContextVar(
    "correlation_id", default=""
)
_tool_name: contextvars.ContextVar[str] = contextvars.ContextVar(
    "tool_name", default=""
)

_events = logging.getLogger("webtools_mcp.structured")


def start_tool_context(tool_name: str) -> str:
    """Bind a fresh correlation ID and *tool_name* to the current context."""
    cid = f"cid_{uuid.uuid4().hex[:8]}"
    _correlation_id.set(cid)
    _tool_name.set(tool_name)
    return cid


def get_correlation_id() -> str:
    return _correlation_id.get()


def get_tool_name() -> str:
    return _tool_name.get()


class JsonLineFormatter(logging.Formatter):
    """One JSON object per record: time, level, logger, message, call context
    and whichever of the known extra fields the record carries."""

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        line: Dict[str, Any] = {
            "timestamp": created.isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        context = {
            "correlation_id": _correlation_id.get(),
            "tool_name": _tool_name.get(),
        }
        line.update({k: v for k, v in context.items() if v})
        line.update(
            {
                k: getattr(record, k)
                for k in _EXTRA_FIELDS
                if getattr(record, k, None) is not None
            }
        )
        if record.exc_info:
            line["exception"] = self.formatException(record.exc_info)
        return json.dumps(line, default=str, ensure_ascii=False)


def setup_logging(
    settings: Settings,
    max_bytes: int = 10 * 1024 * 1024,
    backup_count: int = 5,
) -> None:
    """Install the JSONL file handler and the stderr handler on the root logger.

    Calling it again replaces the handlers installed by the previous call.
    """
    settings.ensure_dirs()
    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)
    for handler in list(root.handlers):
        if handler.get_name() in (_FILE_HANDLER, _STDERR_HANDLER):
            root.removeHandler(handler)
            handler.close()

    file_handler = logging.handlers.RotatingFileHandler(
        os.path.join(settings.log_dir, LOG_FILE_NAME),
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    file_handler.set_name(_FILE_HANDLER)
    file_handler.setFormatter(JsonLineFormatter())
    root.addHandler(file_handler)

    stderr_handler = logging.StreamHandler()
    stderr_handler.set_name(_STDERR_HANDLER)
    stderr_handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s")
    )
    root.addHandler(stderr_handler)

    # One line per request at INFO otherwise
    logging.getLogger("httpx").setLevel(logging.WARNING)


def log_tool_start(tool_name: str, params: Optional[Dict[str, Any]] = None) -> None:
    _events.info(
        "%s called",
        tool_name,
        extra={"event": "tool_call_start", "params": _shorten_params(params or {})},
    )


def log_tool_complete(
    tool_name: str,
    duration_ms: float,
    success: bool,
    *,
    cached: Optional[bool] = None,
    url: str = "",
    resource_id: str = "",
    error: str = "",
    error_type: str = "",
) -> None:
    """Record how a tool call ended.

    ``cached`` tells whether a search or fetch was answered from its cache;
    failures are logged at WARNING with the error type.
    """
    extra: Dict[str, Any] = {
        "event": "tool_call_complete",
        "duration_ms": round(duration_ms, 1),
        "success": success,
        "cached": cached,
        "url": url or None,
        "resource_id": resource_id or None,
        "error": error[:500] or None,
        "error_type": error_type or None,
    }
    outcome = "succeeded" if success else "failed"
    _events.log(
        logging.INFO if success else logging.WARNING,
        "%s %s in %.0fms",
        tool_name,
        outcome,
        duration_ms,
        extra=extra,
    )


def log_cache_lookup(
    cache: str, key: str, hit: bool, size: int, url: str = ""
) -> None:
    """Record a search or content cache lookup and the cache's entry count."""
    _events.info(
        "%s cache %s: %s",
        cache,
        "hit" if hit else "miss",
        key,
        extra={
            "event": "cache_hit" if hit else "cache_miss",
            "cache": cache,
            "cached": hit,
            "cache_size": size,
            "resource_id": key,
            "url": url or None,
        },
    )


def _shorten_params(params: Dict[str, Any]) -> Dict[str, Any]:
    """Cut long string arguments (prompts, SVG-sized URLs) to 100 characters."""
    return {
        k: f"{v[:100]}...({len(v)} chars)" if isinstance(v, str) and len(v) > 200 else v
        for k, v in params.items()
    }
