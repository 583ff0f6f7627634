"""AI chat assistant for memecoin creation guidance."""

from __future__ import annotations

from typing import Any, Literal

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import BaseModel, Field

from memeforge.api.deps import (
    enforce_rate_limit,
    failure_response,
    get_gateway,
    get_rate_limiter,
    parse_body,
)
from memeforge.core import AppError, RateLimiter, UnknownFailure, get_logger
from memeforge.core.time import utc_isoformat
from memeforge.providers.base import ChatMessage
from memeforge.services import CompletionGateway, StreamRelay
from memeforge.services.stream_relay import SSE_HEADERS

logger = get_logger(__name__)

router = APIRouter(tags=["chat"])

FAILURE_TAG = "Chat failed"


class ConversationMessage(BaseModel):
    role: Literal["user", "assistant", "system"]
    content: str


class ChatBody(BaseModel):
    messages: list[ConversationMessage] = Field(..., min_length=1)
    stream: bool = False
    context: dict[str, Any] | str | None = None


@router.get("/chat")
async def chat_descriptor() -> dict[str, Any]:
    return {
        "status": "ok",
        "endpoint": "/chat",
        "methods": ["POST"],
        "description": "AI chat assistant for memecoin creation guidance",
        "features": ["regular responses", "streaming responses", "context-aware"],
    }


@router.post("/chat", response_model=None)
async def chat(
    request: Request,
    limiter: RateLimiter = Depends(get_rate_limiter),
    gateway: CompletionGateway = Depends(get_gateway),
) -> JSONResponse | StreamingResponse:
    try:
        enforce_rate_limit(limiter, "chat")
        body = await parse_body(request, ChatBody, "messages array is required")

        conversation = [ChatMessage(role=m.role, content=m.content) for m in body.messages]
        logger.info(
            "Chat request",
            data={
                "message_count": len(conversation),
                "stream": body.stream,
                "has_context": bool(body.context),
            },
        )

        if body.stream:
            chunks = await gateway.stream_chat(conversation, body.context)
            relay = StreamRelay(chunks, stream_label="chat")
            return StreamingResponse(
                relay.events(),
                media_type="text/event-stream",
                headers=SSE_HEADERS,
            )

        response = await gateway.chat(conversation, body.context)
        logger.info("Chat response generated", data={"model": response.model})
        return JSONResponse(
            {
                "success": True,
                "message": response.content,
                "usage": {
                    "promptTokens": response.prompt_tokens,
                    "completionTokens": response.completion_tokens,
                    "totalTokens": response.total_tokens,
                },
                "metadata": {
                    "model": response.model,
                    "generatedAt": utc_isoformat(),
                },
            }
        )
    except AppError as exc:
        logger.warning("Chat error", data={"code": exc.code.value, "message": exc.message})
        return failure_response(exc, FAILURE_TAG, limiter)
    except Exception as exc:
        logger.exception("Chat error", exc_info=exc)
        error = UnknownFailure(str(exc) or "An unexpected error occurred")
        return failure_response(error, FAILURE_TAG, limiter)
