"""Fetch remote images and package them for vision-capable models."""

from __future__ import annotations

import base64
import logging
from typing import Any, Dict, Iterable, Optional

from webtools_mcp.config import Settings
from webtools_mcp.core.http import HttpClient
from webtools_mcp.core.types import (
    SUPPORTED_IMAGE_TYPES,
    mime_type_from_url,
    to_raw_github_url,
    validate_http_url,
)
from webtools_mcp.safety.approval import (
    ApprovalState,
    ConfirmationDetails,
    confirmation_for,
)
from webtools_mcp.safety.exceptions import (
    ImageTooLargeError,
    NotAnImageError,
    WebValidationError,
)

logger = logging.getLogger(__name__)

SVG_MIME_TYPE = "image/svg+xml"


class ImageFetchService:
    """Download an image and return it base64-encoded with a caption."""

    def __init__(self, http: HttpClient, settings: Settings, approval: ApprovalState):
        self._http = http
        self._settings = settings
        self._approval = approval

    def get_description(self, url: str, description: Optional[str] = None) -> str:
        suffix = f" ({description})" if description else ""
        return f"Fetching image from {url}{suffix}"

    def confirmation(self, url: str) -> Optional[ConfirmationDetails]:
        return confirmation_for(
            self._approval, "Confirm Image Fetch", f"Fetch image from: {url}", urls=[url]
        )

    def fetch_image(self, url: str) -> Dict[str, Any]:
        """Fetch *url* and return mime type, base64 data and a text caption.

        Raises:
            WebValidationError: Empty or non-http(s) URL.
            NotAnImageError: Neither Content-Type nor extension is a supported image.
            ImageTooLargeError: Declared or actual size exceeds the limit.
        """
        error = validate_http_url(url)
        if error:
            raise WebValidationError(error, resource_id=url or "")

        target = to_raw_github_url(url)
        if target != url:
            logger.debug("Converted GitHub blob URL to raw URL: %s", target)

        limit = self._settings.max_image_bytes
        with self._http.stream(
            "GET",
            target,
            timeout=self._settings.image_timeout_seconds,
            headers={"Accept": "image/*"},
        ) as response:
            mime_type = _detect_mime_type(response.headers, target)

            declared = response.headers.get("content-length")
            if declared and declared.isdigit() and int(declared) > limit:
                raise ImageTooLargeError(target, int(declared), limit)

            data = _read_capped(response.iter_bytes(), target, limit)

        size_kb = f"{len(data) / 1024:.1f}"
        logger.debug("Fetched image (%sKB, %s)", size_kb, mime_type)

        if mime_type == SVG_MIME_TYPE:
            svg_text = data.decode("utf-8", errors="replace")
            cap = self._settings.svg_text_limit
            truncated = "\n... (truncated)" if len(svg_text) > cap else ""
            text = (
                f"Image fetched from {url} (SVG, {size_kb}KB):\n\n"
                f"{svg_text[:cap]}{truncated}"
            )
            display = f"Fetched SVG image: {size_kb}KB"
        else:
            text = f"Image fetched from {url} ({mime_type}, {size_kb}KB):"
            display = f"Fetched image: {size_kb}KB ({mime_type})"

        return {
            "text": text,
            "display": display,
            "mime_type": mime_type,
            "data": base64.b64encode(data).decode("ascii"),
            "size_bytes": len(data),
            "url": target,
        }


def _detect_mime_type(headers: Any, url: str) -> str:
    """Content-Type if it names a supported image, else the URL extension."""
    content_type = headers.get("content-type", "").split(";")[0].strip()
    if content_type in SUPPORTED_IMAGE_TYPES:
        return content_type
    mime_type = mime_type_from_url(url)
    if mime_type is None:
        raise NotAnImageError(url, content_type, list(SUPPORTED_IMAGE_TYPES))
    return mime_type


def _read_capped(chunks: Iterable[bytes], url: str, limit: int) -> bytes:
    """Join body chunks, stopping as soon as more than *limit* bytes arrive."""
    received = 0
    parts = []
    for chunk in chunks:
        received += len(chunk)
        if received > limit:
            raise ImageTooLargeError(url, received, limit)
        parts.append(chunk)
    return b"".join(parts)
