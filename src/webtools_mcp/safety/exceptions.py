"""Structured exception hierarchy for the web tools.

Every exception carries ``error_type``, ``suggestions``, and ``metadata``
so the tool layer can return rich, actionable error responses to MCP clients.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional


class WebToolError(Exception):
    """Base exception for all web tool errors.

    Attributes:
        error_type: Machine-readable error category.
        resource_id: The URL or query involved (if any).
        suggestions: Actionable recovery steps for the MCP client.
        metadata: Structured context for debugging.
    """

    error_type: str = "unknown"

    def __init__(
        self,
        message: str,
        *,
        resource_id: str = "",
        suggestions: Optional[List[str]] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.resource_id = resource_id
        self.suggestions = suggestions or []
        self.metadata = metadata or {}

    def to_dict(self) -> Dict[str, Any]:
        """Serialise for MCP error responses."""
        return {
            "error_type": self.error_type,
            "error": str(self),
            "resource_id": self.resource_id,
            "suggestions": self.suggestions,
            "metadata": self.metadata,
        }


# -----------------------------------------------------------------------
# Concrete exceptions
# -----------------------------------------------------------------------


class ConfigurationError(WebToolError):
    """A component was constructed with invalid settings."""

    error_type = "configuration"


class WebValidationError(WebToolError):
    """Tool parameters failed validation (empty query, non-http URL, etc.)."""

    error_type = "validation"


class MissingApiKeyError(WebToolError):
    """The search provider API key is not configured."""

    error_type = "missing_api_key"

    def __init__(self, provider: str = "Tavily", env_var: str = "TAVILY_API_KEY", **kwargs: Any):
        super().__init__(
            f"Web search is disabled because {env_var} is not configured.",
            suggestions=[
                f"Set the {env_var} environment variable for the server process",
                f"Create a {provider} API key if you do not have one",
            ],
            metadata={"provider": provider, "env_var": env_var},
            **kwargs,
        )


class UpstreamHttpError(WebToolError):
    """A remote server answered with a non-success HTTP status."""

    error_type = "http_error"

    def __init__(self, url: str, status_code: int, reason: str = "", body: str = "", **kwargs: Any):
        message = f"Request failed with status code {status_code} {reason}".rstrip()
        if body:
            message += f" - {body[:500]}"
        super().__init__(
            message,
            resource_id=url,
            metadata={"status_code": status_code},
            **kwargs,
        )
        self.status_code = status_code


class FetchTimeoutError(WebToolError):
    """A request did not complete within its timeout (after retries)."""

    error_type = "timeout"

    def __init__(self, url: str, timeout: float, **kwargs: Any):
        super().__init__(
            f"Request to {url} timed out after {timeout:g}s",
            resource_id=url,
            suggestions=["Try again or check if the URL is accessible."],
            metadata={"timeout_seconds": timeout},
            **kwargs,
        )


class NetworkError(WebToolError):
    """DNS, connection, or TLS failure talking to a remote host."""

    error_type = "network"

    def __init__(self, url: str, cause: BaseException, **kwargs: Any):
        hint = network_error_hint(str(cause))
        super().__init__(
            f"Error during fetch for {url}: {cause}",
            resource_id=url,
            suggestions=[hint] if hint else [],
            metadata={"cause": type(cause).__name__},
            **kwargs,
        )
        self.hint = hint


class NotAnImageError(WebToolError):
    """The fetched resource is not one of the supported image types."""

    error_type = "not_an_image"

    def __init__(self, url: str, content_type: str, supported: List[str], **kwargs: Any):
        super().__init__(
            f"URL does not appear to be an image. Content-Type: {content_type}",
            resource_id=url,
            suggestions=[f"Supported types: {', '.join(supported)}"],
            metadata={"content_type": content_type},
            **kwargs,
        )


class ImageTooLargeError(WebToolError):
    """The image exceeds the configured byte limit."""

    error_type = "image_too_large"

    def __init__(self, url: str, size: int, limit: int, **kwargs: Any):
        super().__init__(
            f"Image too large: {size} bytes (max: {limit} bytes)",
            resource_id=url,
            metadata={"size_bytes": size, "max_bytes": limit},
            **kwargs,
        )


class SummarizationError(WebToolError):
    """The content processor failed to answer the prompt."""

    error_type = "summarization"


def network_error_hint(message: str) -> str:
    """Map low-level connection error text to a short user-facing hint."""
    text = message.lower()
    if "timeout" in text or "timed out" in text or "etimedout" in text:
        return "Try again or check if the URL is accessible."
    if "refused" in text:
        return "The server refused the connection."
    if (
        "name or service not known" in text
        or "nodename nor servname" in text
        or "getaddrinfo" in text
        or "name resolution" in text
    ):
        return "Could not resolve the hostname. Check the URL."
    if "certificate" in text or "ssl" in text or "tls" in text:
        return "SSL/TLS certificate issue. The site may have an invalid certificate."
    if "reset" in text:
        return "Connection was reset by the server."
    return ""
