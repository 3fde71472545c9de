"""Shared constants, payload types and URL helpers used across services."""

from __future__ import annotations

import ipaddress
from dataclasses import dataclass, field
from typing import Dict, List, Optional
from urllib.parse import urlparse

# Image MIME types the vision tool accepts, mapped to their file extension
SUPPORTED_IMAGE_TYPES: Dict[str, str] = {
    "image/jpeg": "jpeg",
    "image/jpg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
    "image/svg+xml": "svg",
    "image/bmp": "bmp",
}

# URL extension sniffing, checked in order
_EXTENSION_MIME_TYPES = (
    ((".jpg", ".jpeg"), "image/jpeg"),
    ((".png",), "image/png"),
    ((".gif",), "image/gif"),
    ((".webp",), "image/webp"),
    ((".svg",), "image/svg+xml"),
    ((".bmp",), "image/bmp"),
)


@dataclass
class SearchHit:
    """One search result as stored in the search cache."""

    title: str
    url: str
    content: Optional[str] = None


@dataclass
class CachedSearchResult:
    """Search answer plus hits; the payload type of the search cache."""

    answer: Optional[str] = None
    hits: List[SearchHit] = field(default_factory=list)


def mime_type_from_url(url: str) -> Optional[str]:
    """Guess an image MIME type from extensions appearing in *url*."""
    lowered = url.lower()
    for extensions, mime in _EXTENSION_MIME_TYPES:
        if any(ext in lowered for ext in extensions):
            return mime
    return None


def to_raw_github_url(url: str) -> str:
    """Rewrite a ``github.com/.../blob/...`` URL to its raw-content form."""
    if "github.com" in url and "/blob/" in url:
        return url.replace("github.com", "raw.githubusercontent.com", 1).replace(
            "/blob/", "/", 1
        )
    return url


def is_private_url(url: str) -> bool:
    """Return True if *url* points at localhost or a private/loopback address."""
    host = urlparse(url).hostname or ""
    if not host:
        return False
    if host == "localhost" or host.endswith(".localhost"):
        return True
    try:
        addr = ipaddress.ip_address(host)
    except ValueError:
        return False
    return addr.is_private or addr.is_loopback or addr.is_link_local


def validate_http_url(url: Optional[str]) -> Optional[str]:
    """Return an error message if *url* is empty or not http(s), else None."""
    if not url or not url.strip():
        return "The 'url' parameter cannot be empty."
    if not url.startswith(("http://", "https://")):
        return "The 'url' must be a valid URL starting with http:// or https://."
    return None
