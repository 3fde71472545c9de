"""Fetch a web page, convert it to text, and answer a prompt about it.

Converted page text is cached per normalised URL in the container's content
cache, so several prompts about the same page cost one download.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, Optional

import html2text

from webtools_mcp.config import Settings
from webtools_mcp.core.cache import TTLCache, generate_key
from webtools_mcp.core.http import HttpClient
from webtools_mcp.core.types import is_private_url, to_raw_github_url, validate_http_url
from webtools_mcp.logging_config import log_cache_lookup
from webtools_mcp.safety.approval import (
    ApprovalState,
    ConfirmationDetails,
    confirmation_for,
)
from webtools_mcp.safety.exceptions import SummarizationError, WebValidationError

logger = logging.getLogger(__name__)

# Takes the framed prompt, returns the model's answer
Summarizer = Callable[[str], str]


def html_to_text(html: str) -> str:
    """Convert HTML to plain markdown-ish text without links, images or wrapping."""
    converter = html2text.HTML2Text()
    converter.ignore_links = True
    converter.ignore_images = True
    converter.body_width = 0
    return converter.handle(html).strip()


def build_prompt(prompt: str, url: str, text: str) -> str:
    """Frame the fetched *text* with the user's request."""
    return (
        f'The user requested the following: "{prompt}".\n\n'
        f"I have fetched the content from {url}. "
        f"Please use the following content to answer the user's request.\n\n"
        f"---\n{text}\n---"
    )


class WebFetchService:
    """Download pages and process their text with a prompt.

    Args:
        http: Shared HTTP client.
        cache: Content cache (URL key → converted text).
        settings: Server-wide configuration.
        approval: Session approval state.
        summarizer: Optional callable answering the framed prompt.  Without
            one, the framed prompt itself is returned for the calling model.
    """

    def __init__(
        self,
        http: HttpClient,
        cache: TTLCache,
        settings: Settings,
        approval: ApprovalState,
        summarizer: Optional[Summarizer] = None,
    ):
        self._http = http
        self._cache = cache
        self._settings = settings
        self._approval = approval
        self._summarizer = summarizer

    def get_description(self, url: str, prompt: str) -> str:
        display_prompt = prompt if len(prompt) <= 100 else prompt[:97] + "..."
        return (
            f"Fetching content from {url} and processing with prompt: "
            f'"{display_prompt}"'
        )

    def confirmation(self, url: str, prompt: str) -> Optional[ConfirmationDetails]:
        return confirmation_for(
            self._approval,
            "Confirm Web Fetch",
            f"Fetch content from {url} and process with: {prompt}",
            urls=[url],
        )

    def fetch(self, url: str, prompt: str) -> Dict[str, Any]:
        """Fetch *url* (cache first) and answer *prompt* about its content."""
        error = validate_http_url(url)
        if error:
            raise WebValidationError(error, resource_id=url or "")
        if not prompt or not prompt.strip():
            raise WebValidationError(
                "The 'prompt' parameter cannot be empty.", resource_id=url
            )

        logger.debug(
            "%s URL detected for %s, using direct fetch",
            "Private" if is_private_url(url) else "Public",
            url,
        )

        text, cached = self.get_text(url)
        framed = build_prompt(prompt, url, text)

        if self._summarizer is not None:
            try:
                answer = self._summarizer(framed)
            except Exception as e:
                raise SummarizationError(
                    f"Failed to process content from {url}: {e}",
                    resource_id=url,
                ) from e
        else:
            answer = framed

        cache_indicator = " (cached content)" if cached else ""
        return {
            "llm_content": answer or "",
            "display": f"Content from {url} processed successfully{cache_indicator}.",
            "url": url,
            "content_length": len(text),
            "cached": cached,
        }

    def get_text(self, url: str) -> "tuple[str, bool]":
        """Return ``(converted_text, from_cache)`` for *url*."""
        target = to_raw_github_url(url)
        if target != url:
            logger.debug("Converted GitHub blob URL to raw URL: %s", target)

        cache_key = generate_key(target)
        text = self._cache.get(cache_key)
        log_cache_lookup("content", target, bool(text), self._cache.size, url=target)
        if text:
            return text, True

        start = time.time()
        response = self._http.get(
            target, timeout=self._settings.fetch_timeout_seconds
        )
        body = response.text
        content_type = response.headers.get("content-type", "")
        if "html" in content_type or body.lstrip().startswith("<"):
            text = html_to_text(body)
        else:
            text = body
        text = text[: self._settings.max_content_length]

        self._cache.set(cache_key, text)
        logger.debug(
            "Converted %s to text (%d chars) in %.0fms",
            target,
            len(text),
            (time.time() - start) * 1000,
        )
        return text, False
