"""
Health check endpoint.

Liveness probe for load balancers, plus the current state of the shared
admission window so operators can see throttling at a glance.
"""

from typing import Any

from fastapi import APIRouter, Depends

from memeforge import __version__
from memeforge.api.deps import get_app_settings, get_rate_limiter
from memeforge.config import Settings
from memeforge.core import RateLimiter
from memeforge.core.time import utc_isoformat

router = APIRouter(tags=["health"])


@router.get("/health")
@router.get("/healthz")
async def healthcheck(
    settings: Settings = Depends(get_app_settings),
    limiter: RateLimiter = Depends(get_rate_limiter),
) -> dict[str, Any]:
    """
    Health check endpoint.

    Returns basic service health status and the rate-limit window snapshot.
    """
    return {
        "status": "ok",
        "version": __version__,
        "timestamp": utc_isoformat(),
        "debug": settings.debug,
        "models": {
            "text": settings.gpt_model,
            "image": settings.dalle_model,
        },
        "rateLimit": limiter.snapshot(),
    }
