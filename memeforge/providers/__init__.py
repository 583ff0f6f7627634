"""Upstream AI provider interface and the OpenAI adapter."""

from memeforge.providers.base import (
    BaseProvider,
    ChatChunk,
    ChatMessage,
    ChatRequest,
    ChatResponse,
    ImageRequest,
    ImageResult,
)
from memeforge.providers.openai import ChatCompletionStream, OpenAIProvider

__all__ = [
    "BaseProvider",
    "ChatChunk",
    "ChatMessage",
    "ChatRequest",
    "ChatResponse",
    "ImageRequest",
    "ImageResult",
    "ChatCompletionStream",
    "OpenAIProvider",
]
