"""
Structured error handling with stable error codes.

No stack traces are exposed to clients. Every failure is rendered as
``{"error": <tag>, "message": <text>, "code": <stable code>}`` so browser
clients can branch on ``code`` while showing ``message``.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Stable error codes for API responses."""

    RATE_LIMIT_EXCEEDED = "rate_limit_exceeded"
    VALIDATION_ERROR = "validation_error"
    UPSTREAM_AUTH_ERROR = "upstream_auth_error"
    UPSTREAM_THROTTLED = "upstream_throttled"
    UPSTREAM_REQUEST_INVALID = "upstream_request_invalid"
    RESPONSE_PARSE_ERROR = "response_parse_error"
    UNKNOWN_FAILURE = "unknown_failure"
    REQUEST_TOO_LARGE = "request_too_large"


@dataclass(frozen=True)
class ErrorResponse:
    """Structured error response for API.

    Format: {error, message, code}
    """

    error: str
    message: str
    code: ErrorCode

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON response."""
        return {
            "error": self.error,
            "message": self.message,
            "code": self.code.value,
        }


class AppError(Exception):
    """Base application error with structured error detail."""

    default_tag = "Request failed"

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        status_code: int = 500,
        tag: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.tag = tag or self.default_tag
        self.details = details
        super().__init__(message)

    def to_response(self, tag: str | None = None) -> ErrorResponse:
        """Create the error body, optionally overriding the short tag."""
        return ErrorResponse(error=tag or self.tag, message=self.message, code=self.code)


class RateLimitExceeded(AppError):
    """Local admission denied (429)."""

    default_tag = "Rate limit exceeded"

    def __init__(
        self,
        message: str = "Too many requests. Please try again in a minute.",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(ErrorCode.RATE_LIMIT_EXCEEDED, message, 429, details=details)


class ValidationError(AppError):
    """Missing or malformed input fields (400)."""

    default_tag = "Missing required fields"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(ErrorCode.VALIDATION_ERROR, message, 400, details=details)


class UpstreamAuthError(AppError):
    """Provider rejected our credentials (401)."""

    default_tag = "Authentication failed"

    def __init__(
        self, message: str = "Invalid OpenAI API key", details: dict[str, Any] | None = None
    ):
        super().__init__(ErrorCode.UPSTREAM_AUTH_ERROR, message, 401, details=details)


class UpstreamThrottled(AppError):
    """Provider-side quota exhausted (429)."""

    default_tag = "OpenAI rate limit"

    def __init__(
        self,
        message: str = "OpenAI rate limit exceeded. Please try again later.",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(ErrorCode.UPSTREAM_THROTTLED, message, 429, details=details)


class UpstreamRequestInvalid(AppError):
    """Provider rejected the constructed request or prompt (400)."""

    default_tag = "Invalid request"

    def __init__(
        self, message: str = "Invalid request to OpenAI", details: dict[str, Any] | None = None
    ):
        super().__init__(ErrorCode.UPSTREAM_REQUEST_INVALID, message, 400, details=details)


class ResponseParseError(AppError):
    """Provider content could not be parsed into the expected shape (500)."""

    default_tag = "Invalid AI response"

    def __init__(
        self, message: str = "Invalid JSON response from AI", details: dict[str, Any] | None = None
    ):
        super().__init__(ErrorCode.RESPONSE_PARSE_ERROR, message, 500, details=details)


class UnknownFailure(AppError):
    """Catch-all failure that preserves the original message (500)."""

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(ErrorCode.UNKNOWN_FAILURE, message, 500, details=details)


class StreamAborted(Exception):
    """An event stream failed after its response headers were sent.

    Not an AppError: there is no body left to render, so the server drops the
    connection and the client sees the stream end without its sentinel.
    """
