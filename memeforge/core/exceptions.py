"""Application-wide exception handlers.

Route handlers render their own failures with an endpoint-specific tag; these
handlers are the last line so nothing escapes as an unstructured 500.
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from memeforge.core.errors import AppError, StreamAborted, UnknownFailure, ValidationError
from memeforge.core.logging import get_logger

logger = get_logger(__name__)


def error_response(
    exc: AppError,
    tag: str | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Render an AppError as ``{error, message, code}`` with its status code.

    ``tag`` replaces the generic tag of an UnknownFailure only; specific error
    kinds keep their own tag so clients can tell them apart.
    """
    override = tag if isinstance(exc, UnknownFailure) else None
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_response(override).to_dict(),
        headers=headers,
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register handlers for AppError, request validation and stray exceptions."""

    @app.exception_handler(AppError)
    async def handle_app_error(_request: Request, exc: AppError) -> JSONResponse:
        logger.warning(
            "Request failed",
            data={"code": exc.code.value, "status": exc.status_code, "message": exc.message},
        )
        return error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(
        _request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        error = ValidationError("Invalid request body", details={"errors": exc.errors()})
        return error_response(error)

    @app.exception_handler(Exception)
    async def handle_unexpected(_request: Request, exc: Exception) -> JSONResponse:
        # Logged by the relay; headers are already sent
        if not isinstance(exc, StreamAborted):
            logger.exception("Unhandled exception", exc_info=exc)
        return error_response(UnknownFailure(str(exc) or "An unexpected error occurred"))
