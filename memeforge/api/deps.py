"""Request-scoped dependencies and shared handler steps."""

from __future__ import annotations

import json
import math
from typing import TypeVar

from fastapi import Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from memeforge.config import Settings
from memeforge.core import (
    AppError,
    RateLimiter,
    RateLimitExceeded,
    ValidationError,
    error_response,
    get_logger,
)
from memeforge.services import CompletionGateway

logger = get_logger(__name__)

BodyT = TypeVar("BodyT", bound=BaseModel)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_rate_limiter(request: Request) -> RateLimiter:
    """The process-wide limiter lives on app.state; one per application."""
    return request.app.state.rate_limiter


def get_gateway(request: Request) -> CompletionGateway:
    return CompletionGateway(request.app.state.provider, request.app.state.settings)


def rate_limit_headers(limiter: RateLimiter) -> dict[str, str]:
    reset_in = limiter.reset_in()
    return {
        "Retry-After": str(max(1, math.ceil(reset_in))),
        "X-RateLimit-Limit": str(limiter.max_requests),
        "X-RateLimit-Remaining": str(limiter.remaining()),
        "X-RateLimit-Reset": limiter.snapshot()["resetAt"],
    }


def enforce_rate_limit(limiter: RateLimiter, endpoint: str) -> None:
    """Admission check; runs before the body is even read."""
    if not limiter.check_limit():
        logger.warning(
            "Rate limit exceeded",
            data={"endpoint": endpoint, "limit": limiter.max_requests},
        )
        raise RateLimitExceeded()


async def parse_body(request: Request, model: type[BodyT], message: str) -> BodyT:
    """Decode and validate a JSON body, reporting any problem as ValidationError."""
    try:
        payload = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ValidationError("Request body must be valid JSON") from exc

    try:
        return model.model_validate(payload)
    except PydanticValidationError as exc:
        fields = sorted({".".join(str(part) for part in err["loc"]) for err in exc.errors()})
        raise ValidationError(message, details={"fields": fields}) from exc


def failure_response(exc: AppError, tag: str, limiter: RateLimiter) -> JSONResponse:
    """Map a handler failure to its response, with rate-limit headers on local 429s."""
    headers = rate_limit_headers(limiter) if isinstance(exc, RateLimitExceeded) else None
    return error_response(exc, tag=tag, headers=headers)
