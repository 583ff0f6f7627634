"""AI-powered tokenomics parameter suggestions."""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, StringConstraints

from memeforge.api.deps import (
    enforce_rate_limit,
    failure_response,
    get_gateway,
    get_rate_limiter,
    parse_body,
)
from memeforge.core import AppError, RateLimiter, UnknownFailure, get_logger
from memeforge.core.time import utc_isoformat
from memeforge.services import CompletionGateway

logger = get_logger(__name__)

router = APIRouter(tags=["suggestions"])

FAILURE_TAG = "Parameter suggestion failed"

RequiredText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class SuggestBody(BaseModel):
    theme: RequiredText
    name: RequiredText
    target_audience: str | None = Field(default=None, alias="targetAudience")
    goals: str | list[str] | None = None

    @property
    def goals_text(self) -> str | None:
        if isinstance(self.goals, list):
            return ", ".join(goal for goal in self.goals if goal) or None
        return self.goals


@router.get("/suggest-params")
async def suggest_descriptor() -> dict[str, Any]:
    return {
        "status": "ok",
        "endpoint": "/suggest-params",
        "methods": ["POST"],
        "description": "Generate AI-powered tokenomics parameter suggestions",
    }


@router.post("/suggest-params")
async def suggest_params(
    request: Request,
    limiter: RateLimiter = Depends(get_rate_limiter),
    gateway: CompletionGateway = Depends(get_gateway),
) -> JSONResponse:
    try:
        enforce_rate_limit(limiter, "suggest-params")
        body = await parse_body(request, SuggestBody, "theme and name are required")

        logger.info(
            "Generating parameter suggestions",
            data={"theme": body.theme, "name": body.name, "target_audience": body.target_audience},
        )
        suggestions = await gateway.suggest_params(
            body.theme, body.name, body.target_audience, body.goals_text
        )
        logger.info("Parameter suggestions generated", data={"name": body.name})

        return JSONResponse(
            {
                "success": True,
                "suggestions": suggestions,
                "metadata": {
                    "theme": body.theme,
                    "name": body.name,
                    "targetAudience": body.target_audience,
                    "goals": body.goals,
                    "generatedAt": utc_isoformat(),
                },
            }
        )
    except AppError as exc:
        logger.warning(
            "Parameter suggestion error", data={"code": exc.code.value, "message": exc.message}
        )
        return failure_response(exc, FAILURE_TAG, limiter)
    except Exception as exc:
        logger.exception("Parameter suggestion error", exc_info=exc)
        error = UnknownFailure(str(exc) or "An unexpected error occurred")
        return failure_response(error, FAILURE_TAG, limiter)
