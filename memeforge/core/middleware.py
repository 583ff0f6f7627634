"""Custom middleware for the MemeForge backend."""

import secrets
import time
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from memeforge.core.errors import ErrorCode, ErrorResponse
from memeforge.core.logging import get_logger, request_context

logger = get_logger(__name__)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Middleware to inject request context for logging."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or secrets.token_hex(8)
        start_time = time.perf_counter()

        token = request_context.set(
            {
                "request_id": request_id,
                "path": request.url.path,
                "method": request.method,
            }
        )

        try:
            response = await call_next(request)

            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.info(
                f"{request.method} {request.url.path} -> {response.status_code}",
                data={"duration_ms": round(duration_ms, 2)},
            )

            response.headers["X-Request-ID"] = request_id
            return response

        finally:
            request_context.reset(token)


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """Middleware to limit request body size."""

    def __init__(self, app, max_bytes: int = 1048576):
        super().__init__(app)
        self.max_bytes = max_bytes

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        content_length = request.headers.get("content-length")

        if content_length and content_length.isdigit() and int(content_length) > self.max_bytes:
            logger.warning(
                f"Request too large: {content_length} bytes",
                data={"max_bytes": self.max_bytes},
            )
            body = ErrorResponse(
                error="Request too large",
                message="Request body too large",
                code=ErrorCode.REQUEST_TOO_LARGE,
            )
            return JSONResponse(status_code=413, content=body.to_dict())

        return await call_next(request)


class CORSHeadersMiddleware(BaseHTTPMiddleware):
    """Permissive CORS: answer every preflight and stamp headers on every response.

    Unlike Starlette's CORSMiddleware this does not depend on an ``Origin``
    request header, so error bodies and event streams carry the headers too.
    """

    def __init__(self, app, headers: dict[str, str]):
        super().__init__(app)
        self.cors_headers = dict(headers)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.method == "OPTIONS":
            return JSONResponse({}, headers=self.cors_headers)

        response = await call_next(request)
        for name, value in self.cors_headers.items():
            response.headers[name] = value
        return response
