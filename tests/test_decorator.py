"""Tests for the @web_tool decorator and response helpers."""

import logging
from unittest.mock import MagicMock

from pydantic import ValidationError

from webtools_mcp.safety.exceptions import MissingApiKeyError, WebValidationError
from webtools_mcp.tools._decorator import web_tool
from webtools_mcp.tools._models import WebFetchInput
from webtools_mcp.tools._response import (
    format_error_response,
    format_validation_error,
    truncate_if_needed,
)


class TestWebToolDecorator:
    """Tests for the @web_tool decorator."""

    def test_success_returns_result(self):
        mcp = MagicMock()

        @web_tool(mcp, read_only=True)
        def my_tool() -> dict:
            return {"status": "ok"}

        assert my_tool() == {"status": "ok"}

    def test_web_tool_error_returns_structured_response(self):
        mcp = MagicMock()

        @web_tool(mcp)
        def my_tool() -> dict:
            raise MissingApiKeyError()

        result = my_tool()
        assert result["isError"] is True
        assert result["error_type"] == "missing_api_key"
        assert "TAVILY_API_KEY" in result["error"]
        assert len(result["suggestions"]) > 0
        assert result["metadata"]["env_var"] == "TAVILY_API_KEY"

    def test_pydantic_validation_error(self):
        mcp = MagicMock()

        @web_tool(mcp)
        def my_tool(url: str = "") -> dict:
            WebFetchInput(url=url, prompt="q")
            return {}

        result = my_tool(url="ftp://x")
        assert result["isError"] is True
        assert result["error_type"] == "validation"
        assert any("url" in s for s in result["suggestions"])

    def test_unexpected_error_returns_error_dict(self):
        mcp = MagicMock()

        @web_tool(mcp)
        def my_tool() -> dict:
            raise RuntimeError("Something broke")

        result = my_tool()
        assert result["isError"] is True
        assert result["error_type"] == "unexpected"
        assert "Something broke" in result["error"]

    def test_kwargs_passed_through(self):
        mcp = MagicMock()

        @web_tool(mcp)
        def my_tool(query: str = "", limit: int = 10) -> dict:
            return {"query": query, "limit": limit}

        assert my_tool(query="q", limit=5) == {"query": "q", "limit": 5}

    def test_non_dict_result_untouched(self):
        mcp = MagicMock()

        @web_tool(mcp)
        def my_tool():
            return ["text", "image"]

        assert my_tool() == ["text", "image"]

    def test_large_response_truncated(self):
        mcp = MagicMock()

        @web_tool(mcp, character_limit=2000)
        def my_tool() -> dict:
            return {"llm_content": "x" * 10_000}

        result = my_tool()
        assert result["_truncated"] is True
        assert len(result["llm_content"]) < 10_000

    def test_registers_with_mcp(self):
        mcp = MagicMock()
        mcp.tool = MagicMock()

        @web_tool(mcp, read_only=True)
        def my_tool() -> dict:
            """A test tool."""
            return {}

        mcp.tool.assert_called_once()

    def test_annotations_passed(self):
        mcp = MagicMock()
        mcp.tool = MagicMock()

        @web_tool(mcp, read_only=True, open_world=True)
        def my_tool() -> dict:
            return {}

        annotations = mcp.tool.call_args[1]["annotations"]
        assert annotations == {"readOnlyHint": True, "openWorldHint": True}

    def test_destructive_annotation(self):
        mcp = MagicMock()
        mcp.tool = MagicMock()

        @web_tool(mcp, destructive=True, idempotent=True)
        def my_tool() -> dict:
            return {}

        annotations = mcp.tool.call_args[1]["annotations"]
        assert annotations["destructiveHint"] is True
        assert annotations["idempotentHint"] is True

    def test_fallback_without_annotations_support(self):
        calls = []

        class OldMcp:
            def tool(self, fn):
                calls.append(fn)
                return fn

        @web_tool(OldMcp(), read_only=True)
        def my_tool() -> dict:
            return {"ok": True}

        assert len(calls) == 1
        assert my_tool() == {"ok": True}

    def test_wrapper_preserves_name_and_doc(self):
        mcp = MagicMock()

        @web_tool(mcp)
        def web_search(query: str) -> dict:
            """Search the web."""
            return {}

        assert web_search.__name__ == "web_search"
        assert web_search.__doc__ == "Search the web."

    def test_logs_failure(self, caplog):
        mcp = MagicMock()

        @web_tool(mcp)
        def failing_tool() -> dict:
            raise WebValidationError("bad input")

        with caplog.at_level(logging.WARNING, logger="webtools_mcp.structured"):
            failing_tool()
        assert any("failing_tool" in r.getMessage() for r in caplog.records)


class TestResponseHelpers:
    """Tests for truncation and error formatting."""

    def test_small_response_unchanged(self):
        data = {"a": 1}
        assert truncate_if_needed(data, "t", 100) is data

    def test_list_halved_until_under_limit(self):
        data = {"items": [{"n": i, "pad": "y" * 50} for i in range(200)]}
        result = truncate_if_needed(data, "t", 2000)
        assert result["_truncated"] is True
        assert len(result["items"]) < 200
        assert "t" in result["_note"]

    def test_format_error_response_omits_empty(self):
        result = format_error_response(ValueError("boom"))
        assert result == {"isError": True, "error_type": "unexpected", "error": "boom"}

    def test_format_validation_error(self):
        try:
            WebFetchInput(url="https://x.test", prompt="q", extra=1)
        except ValidationError as e:
            result = format_validation_error(e)
        assert result["error_type"] == "validation"
        assert any(s.startswith("extra") for s in result["suggestions"])
