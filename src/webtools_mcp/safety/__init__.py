"""Safety modules: structured exceptions and session approval policy."""

from webtools_mcp.safety.exceptions import (
    ConfigurationError,
    FetchTimeoutError,
    ImageTooLargeError,
    MissingApiKeyError,
    NetworkError,
    NotAnImageError,
    SummarizationError,
    UpstreamHttpError,
    WebToolError,
    WebValidationError,
)

from webtools_mcp.safety.approval import (
    ApprovalMode,
    ApprovalState,
    ConfirmationDetails,
    ConfirmationOutcome,
    confirmation_for,
)

__all__ = [
    # Exceptions
    "WebToolError",
    "ConfigurationError",
    "WebValidationError",
    "MissingApiKeyError",
    "UpstreamHttpError",
    "FetchTimeoutError",
    "NetworkError",
    "NotAnImageError",
    "ImageTooLargeError",
    "SummarizationError",
    # Approval
    "ApprovalMode",
    "ApprovalState",
    "ConfirmationDetails",
    "ConfirmationOutcome",
    "confirmation_for",
]
