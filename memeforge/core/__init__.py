"""Core module with logging, middleware, errors and admission control."""

from memeforge.core.errors import (
    AppError,
    ErrorCode,
    ErrorResponse,
    RateLimitExceeded,
    ResponseParseError,
    StreamAborted,
    UnknownFailure,
    UpstreamAuthError,
    UpstreamRequestInvalid,
    UpstreamThrottled,
    ValidationError,
)
from memeforge.core.exceptions import error_response, setup_exception_handlers
from memeforge.core.logging import current_request_id, get_logger, setup_logging
from memeforge.core.middleware import (
    CORSHeadersMiddleware,
    RequestContextMiddleware,
    RequestSizeLimitMiddleware,
)
from memeforge.core.rate_limit import RateLimiter

__all__ = [
    "AppError",
    "ErrorCode",
    "ErrorResponse",
    "RateLimitExceeded",
    "ResponseParseError",
    "StreamAborted",
    "UnknownFailure",
    "UpstreamAuthError",
    "UpstreamRequestInvalid",
    "UpstreamThrottled",
    "ValidationError",
    "error_response",
    "setup_exception_handlers",
    "current_request_id",
    "get_logger",
    "setup_logging",
    "CORSHeadersMiddleware",
    "RequestContextMiddleware",
    "RequestSizeLimitMiddleware",
    "RateLimiter",
]
