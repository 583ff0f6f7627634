"""
MemeForge AI Backend Application.

FastAPI application with structured logging, error handling, CORS and a
shared sliding-window limiter in front of every upstream AI call.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from memeforge import __version__
from memeforge.api import chat_router, health_router, logo_router, suggest_router
from memeforge.config import Settings, get_settings
from memeforge.core import (
    CORSHeadersMiddleware,
    RateLimiter,
    RequestContextMiddleware,
    RequestSizeLimitMiddleware,
    get_logger,
    setup_exception_handlers,
    setup_logging,
)
from memeforge.providers import BaseProvider, OpenAIProvider

logger = get_logger(__name__)


def build_provider(settings: Settings) -> OpenAIProvider:
    """Construct the upstream client, failing fast when no API key is configured."""
    if not settings.openai_api_key:
        raise RuntimeError("OPENAI_API_KEY is not set in environment variables")
    return OpenAIProvider(
        base_url=settings.openai_base_url,
        api_key=settings.openai_api_key,
        organization=settings.openai_org_id or None,
        timeout=settings.provider_timeout_seconds,
        max_retries=settings.provider_max_retries,
    )


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    settings: Settings = _app.state.settings

    setup_logging(
        level=settings.log_level,
        json_output=not settings.debug,
        log_file=settings.log_file or None,
    )
    logger.info(
        "Starting MemeForge AI backend",
        data={
            "environment": settings.environment,
            "host": settings.host,
            "port": settings.port,
            "debug": settings.debug,
            "api_prefix": settings.api_prefix,
            "rate_limit": {
                "max_requests": settings.rate_limit_max_requests,
                "window_ms": settings.rate_limit_window_ms,
            },
        },
    )

    # Provider may be injected (tests); otherwise build it from settings
    provider_created = False
    if getattr(_app.state, "provider", None) is None:
        _app.state.provider = build_provider(settings)
        provider_created = True

    yield

    logger.info("Shutting down MemeForge AI backend")
    if provider_created:
        await _app.state.provider.aclose()


def create_app(
    settings: Settings | None = None,
    provider: BaseProvider | None = None,
    rate_limiter: RateLimiter | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or get_settings()

    app = FastAPI(
        title="MemeForge AI",
        description="Rate-limited relay to chat and image models for guided memecoin creation",
        version=__version__,
        lifespan=lifespan,
        docs_url=None if settings.is_production else "/docs",
        redoc_url=None if settings.is_production else "/redoc",
    )

    app.state.settings = settings
    app.state.provider = provider
    app.state.rate_limiter = rate_limiter or RateLimiter(
        max_requests=settings.rate_limit_max_requests,
        window_ms=settings.rate_limit_window_ms,
    )

    setup_exception_handlers(app)

    # Middleware (last added = first executed)
    # 1. Request size limit (reject oversized requests early)
    app.add_middleware(RequestSizeLimitMiddleware, max_bytes=settings.max_request_bytes)

    # 2. Request context (inject request ID, log requests)
    app.add_middleware(RequestContextMiddleware)

    # 3. CORS headers on every response, preflight answered directly
    app.add_middleware(CORSHeadersMiddleware, headers=settings.cors_headers)

    app.include_router(health_router)
    app.include_router(chat_router, prefix=settings.api_prefix)
    app.include_router(logo_router, prefix=settings.api_prefix)
    app.include_router(suggest_router, prefix=settings.api_prefix)

    return app


def run() -> None:
    """Serve the application with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "memeforge.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
