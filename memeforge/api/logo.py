"""Memecoin logo generation: prompt expansion followed by image generation."""

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

router = APIRouter(tags=["logo"])

FAILURE_TAG = "Logo generation failed"

RequiredText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class LogoBody(BaseModel):
    theme: RequiredText
    name: RequiredText
    style: RequiredText
    additional_prompt: str | None = Field(default=None, alias="additionalPrompt")


@router.get("/generate-logo")
async def logo_descriptor() -> dict[str, Any]:
    return {
        "status": "ok",
        "endpoint": "/generate-logo",
        "methods": ["POST"],
        "description": "Generate memecoin logos with an image-generation model",
    }


@router.post("/generate-logo")
async def generate_logo(
    request: Request,
    limiter: RateLimiter = Depends(get_rate_limiter),
    gateway: CompletionGateway = Depends(get_gateway),
) -> JSONResponse:
    try:
        enforce_rate_limit(limiter, "generate-logo")
        body = await parse_body(request, LogoBody, "theme, name, and style are required")

        logger.info(
            "Generating logo",
            data={"theme": body.theme, "name": body.name, "style": body.style},
        )
        result = await gateway.generate_logo(
            body.theme, body.name, body.style, body.additional_prompt
        )
        logger.info("Logo generated", data={"name": body.name})

        return JSONResponse(
            {
                "success": True,
                "imageUrl": result.image_url,
                "prompt": result.prompt,
                "revisedPrompt": result.revised_prompt,
                "metadata": {
                    "theme": body.theme,
                    "name": body.name,
                    "style": body.style,
                    "generatedAt": utc_isoformat(),
                },
            }
        )
    except AppError as exc:
        logger.warning("Logo generation error", data={"code": exc.code.value, "message": exc.message})
        return failure_response(exc, FAILURE_TAG, limiter)
    except Exception as exc:
        logger.exception("Logo generation error", exc_info=exc)
        error = UnknownFailure(str(exc) or "An unexpected error occurred")
        return failure_response(error, FAILURE_TAG, limiter)
