"""API routers."""

from memeforge.api.chat import router as chat_router
from memeforge.api.health import router as health_router
from memeforge.api.logo import router as logo_router
from memeforge.api.suggest import router as suggest_router

__all__ = [
    "chat_router",
    "health_router",
    "logo_router",
    "suggest_router",
]
