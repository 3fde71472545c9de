"""Pydantic input models for MCP tool validation.

Every tool with parameters gets a model with Field() constraints and
descriptions.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class StrictModel(BaseModel):
    """Base model that rejects extra fields."""

    model_config = ConfigDict(extra="forbid")


def _http_url(v: str) -> str:
    v = v.strip()
    if not v.startswith(("http://", "https://")):
        raise ValueError("URL must start with http:// or https://")
    return v


def _not_blank(v: str) -> str:
    if not v.strip():
        raise ValueError("cannot be empty")
    return v


class WebSearchInput(StrictModel):
    """Input for web_search."""

    query: str = Field(..., min_length=1, max_length=2000, description="The search query")

    @field_validator("query")
    @classmethod
    def query_not_blank(cls, v: str) -> str:
        return _not_blank(v)


class WebFetchInput(StrictModel):
    """Input for web_fetch."""

    url: str = Field(..., min_length=1, description="The URL to fetch content from")
    prompt: str = Field(
        ..., min_length=1, description="The prompt to run on the fetched content"
    )

    @field_validator("url")
    @classmethod
    def url_must_be_http(cls, v: str) -> str:
        return _http_url(v)

    @field_validator("prompt")
    @classmethod
    def prompt_not_blank(cls, v: str) -> str:
        return _not_blank(v)


class ReadImageUrlInput(StrictModel):
    """Input for read_image_url."""

    url: str = Field(..., min_length=1, description="URL of the image to fetch")
    description: Optional[str] = Field(
        None, max_length=500, description="What to look for in the image"
    )

    @field_validator("url")
    @classmethod
    def url_must_be_http(cls, v: str) -> str:
        return _http_url(v)


class ContextUsageInput(StrictModel):
    """Input for get_context_usage."""

    prompt_token_count: int = Field(..., ge=0)
    model: str = Field(..., min_length=1, max_length=256)
