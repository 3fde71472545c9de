"""Tests for JSONL logging of tool calls and cache lookups."""

import json
import logging
import sys
from unittest.mock import MagicMock

import httpx
import pytest

from webtools_mcp.logging_config import (
    LOG_FILE_NAME,
    JsonLineFormatter,
    _shorten_params,
    get_correlation_id,
    get_tool_name,
    log_cache_lookup,
    setup_logging,
    start_tool_context,
)
from webtools_mcp.safety.exceptions import UpstreamHttpError
from webtools_mcp.tools._decorator import web_tool

from conftest import RecordingHandler

TAVILY_RESPONSE = {
    "answer": "Use the walrus operator.",
    "results": [{"title": "PEP 572", "url": "https://peps.python.org/pep-0572/"}],
}


@pytest.fixture
def log_file(settings):
    """Install logging into the test log dir; yields a reader for its events."""
    settings.log_level = "DEBUG"
    setup_logging(settings)
    path = f"{settings.log_dir}/{LOG_FILE_NAME}"

    def read_events():
        with open(path, encoding="utf-8") as f:
            lines = [json.loads(line) for line in f if line.strip()]
        return [line for line in lines if "event" in line]

    yield read_events

    root = logging.getLogger()
    for handler in list(root.handlers):
        if handler.get_name() in ("webtools_mcp.file", "webtools_mcp.stderr"):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(logging.WARNING)


def _record(msg="fetched", **extra):
    record = logging.LogRecord(
        name="webtools_mcp.test", level=logging.INFO, pathname="",
        lineno=0, msg=msg, args=(), exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestToolContext:
    """Tests for per-call correlation context."""

    def test_start_binds_id_and_tool(self):
        cid = start_tool_context("web_fetch")
        assert cid.startswith("cid_") and len(cid) == 12
        assert get_correlation_id() == cid
        assert get_tool_name() == "web_fetch"

    def test_each_call_gets_new_id(self):
        assert start_tool_context("web_search") != start_tool_context("web_search")


class TestJsonLineFormatter:
    """Tests for the JSON line layout."""

    def test_cache_fields_included(self):
        line = json.loads(
            JsonLineFormatter().format(
                _record(event="cache_hit", cache="content", cached=True, cache_size=3)
            )
        )
        assert line["event"] == "cache_hit"
        assert line["cache"] == "content"
        assert line["cached"] is True
        assert line["cache_size"] == 3

    def test_unset_fields_omitted(self):
        line = json.loads(JsonLineFormatter().format(_record(url=None)))
        assert "url" not in line
        assert "cached" not in line

    def test_timestamp_is_utc(self):
        line = json.loads(JsonLineFormatter().format(_record()))
        assert line["timestamp"].endswith("+00:00")

    def test_context_included(self):
        cid = start_tool_context("read_image_url")
        line = json.loads(JsonLineFormatter().format(_record()))
        assert line["correlation_id"] == cid
        assert line["tool_name"] == "read_image_url"

    def test_exception_text(self):
        try:
            raise ValueError("bad svg")
        except ValueError:
            record = _record()
            record.exc_info = sys.exc_info()
        line = json.loads(JsonLineFormatter().format(record))
        assert "ValueError: bad svg" in line["exception"]


class TestSetupLogging:
    """Tests for handler installation."""

    def test_creates_log_dir_and_file(self, settings, log_file):
        log_cache_lookup("search", "q", False, 0)
        assert [e["event"] for e in log_file()] == ["cache_miss"]

    def test_repeat_setup_replaces_handlers(self, settings, log_file):
        setup_logging(settings)
        names = [h.get_name() for h in logging.getLogger().handlers]
        assert names.count("webtools_mcp.file") == 1
        assert names.count("webtools_mcp.stderr") == 1

    def test_quiets_httpx(self, log_file):
        assert logging.getLogger("httpx").level == logging.WARNING


class TestCacheEvents:
    """Cache hit / miss lines written by the search and fetch services."""

    def test_search_miss_then_hit(self, make_services, log_file):
        handler = RecordingHandler(httpx.Response(200, json=TAVILY_RESPONSE))
        services = make_services(handler)
        services.search.search("walrus operator")
        services.search.search("Walrus Operator")

        events = [e for e in log_file() if e.get("cache") == "search"]
        assert [(e["event"], e["cache_size"]) for e in events] == [
            ("cache_miss", 0),
            ("cache_hit", 1),
        ]
        assert events[1]["resource_id"] == "Walrus Operator"

    def test_fetch_lookup_carries_url(self, make_services, log_file):
        handler = RecordingHandler(httpx.Response(200, text="plain"))
        make_services(handler).fetch.get_text("https://docs.test/page")

        (event,) = [e for e in log_file() if e.get("cache") == "content"]
        assert event["event"] == "cache_miss"
        assert event["url"] == "https://docs.test/page"
        assert event["cached"] is False


class TestToolCallEvents:
    """Start / complete lines written by the @web_tool wrapper."""

    def test_complete_line_reports_cache_use(self, log_file):
        @web_tool(MagicMock())
        def web_fetch(url: str, prompt: str) -> dict:
            log_cache_lookup("content", url, True, 1, url=url)
            return {"llm_content": "x", "url": url, "cached": True}

        web_fetch(url="https://docs.test/a", prompt="summarise")

        start, lookup, complete = log_file()
        assert start["event"] == "tool_call_start"
        assert start["params"] == {"url": "https://docs.test/a", "prompt": "summarise"}
        assert complete["event"] == "tool_call_complete"
        assert complete["success"] is True
        assert complete["cached"] is True
        assert complete["url"] == "https://docs.test/a"
        assert start["correlation_id"] == lookup["correlation_id"] == complete["correlation_id"]
        assert complete["tool_name"] == "web_fetch"

    def test_failure_line_has_error_type(self, log_file):
        @web_tool(MagicMock())
        def web_fetch(url: str, prompt: str) -> dict:
            raise UpstreamHttpError(url, 403, "Forbidden")

        web_fetch(url="https://docs.test/private", prompt="q")

        complete = log_file()[-1]
        assert complete["level"] == "WARNING"
        assert complete["success"] is False
        assert complete["error_type"] == "http_error"
        assert complete["resource_id"] == "https://docs.test/private"
        assert "cached" not in complete


class TestShortenParams:
    """Tests for argument shortening in start lines."""

    def test_long_prompt_shortened(self):
        result = _shorten_params({"prompt": "Summarize " + "x" * 300})
        assert result["prompt"].startswith("Summarize ")
        assert result["prompt"].endswith("...(310 chars)")

    def test_other_values_kept(self):
        params = {"url": "https://a.test", "prompt_token_count": 10, "description": None}
        assert _shorten_params(params) == params
