"""
OpenAI REST adapter.

Talks to ``/chat/completions`` and ``/images/generations`` of an
OpenAI-compatible API with httpx; no vendor SDK is involved.
"""

from __future__ import annotations

import json
from collections.abc import AsyncIterator
from typing import Any

import httpx

from memeforge.core.errors import UnknownFailure
from memeforge.core.logging import get_logger
from memeforge.providers.base import (
    BaseProvider,
    ChatChunk,
    ChatRequest,
    ChatResponse,
    ImageRequest,
    ImageResult,
)
from memeforge.providers.http_client import (
    create_http_client,
    parse_json,
    raise_for_status,
    send_with_retries,
)

logger = get_logger(__name__)

SSE_DATA_PREFIX = "data:"
SSE_DONE = "[DONE]"
_DONE = object()


class ChatCompletionStream:
    """Async iterator over the ``delta`` fragments of an open SSE response.

    Owns the httpx response; ``aclose`` releases the connection whether or not
    iteration ever started.
    """

    def __init__(self, response: httpx.Response):
        self._response = response
        self._lines = response.aiter_lines()
        self._closed = False

    def __aiter__(self) -> "ChatCompletionStream":
        return self

    async def __anext__(self) -> ChatChunk:
        if self._closed:
            raise StopAsyncIteration
        try:
            while True:
                try:
                    line = await self._lines.__anext__()
                except StopAsyncIteration:
                    await self.aclose()
                    raise
                try:
                    chunk = self._parse_line(line)
                except UnknownFailure:
                    await self.aclose()
                    raise
                if chunk is _DONE:
                    await self.aclose()
                    raise StopAsyncIteration
                if chunk is not None:
                    return chunk
        except httpx.HTTPError as exc:
            await self.aclose()
            raise UnknownFailure(f"Provider stream interrupted: {exc}") from exc

    @staticmethod
    def _parse_line(line: str) -> Any:
        line = line.strip()
        if not line.startswith(SSE_DATA_PREFIX):
            return None
        data = line[len(SSE_DATA_PREFIX):].strip()
        if data == SSE_DONE:
            return _DONE
        try:
            payload = json.loads(data)
        except json.JSONDecodeError as exc:
            logger.warning("Malformed stream event", data={"line": line[:200]})
            raise UnknownFailure("Provider sent a malformed stream event") from exc

        if not isinstance(payload, dict):
            logger.warning("Malformed stream event", data={"line": line[:200]})
            raise UnknownFailure("Provider sent a malformed stream event")

        error = payload.get("error")
        if error:
            message = error.get("message") if isinstance(error, dict) else str(error)
            logger.warning("Provider reported a stream error", data={"message": message})
            raise UnknownFailure(message or "Provider stream failed")

        choices = payload.get("choices") or []
        if not choices:
            return None
        choice = choices[0]
        delta = choice.get("delta") or {}
        return ChatChunk(
            content=delta.get("content") or "",
            finish_reason=choice.get("finish_reason"),
            model=payload.get("model"),
        )

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        await self._response.aclose()


class OpenAIProvider(BaseProvider):
    """Provider for the OpenAI chat completion and image generation APIs."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float,
        max_retries: int,
        organization: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {api_key}",
        }
        if organization:
            headers["OpenAI-Organization"] = organization
        self.max_retries = max_retries
        self._client = create_http_client(
            base_url=base_url,
            timeout_seconds=timeout,
            headers=headers,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    @staticmethod
    def _chat_payload(request: ChatRequest, stream: bool) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "model": request.model,
            "messages": [message.to_dict() for message in request.messages],
            "temperature": request.temperature,
            "stream": stream,
        }
        if request.max_tokens is not None:
            payload["max_tokens"] = request.max_tokens
        return payload

    async def chat_once(self, request: ChatRequest) -> ChatResponse:
        response = await send_with_retries(
            self._client,
            "POST",
            "/chat/completions",
            max_retries=self.max_retries,
            json=self._chat_payload(request, stream=False),
        )
        raise_for_status(response)
        data = parse_json(response)

        choices = data.get("choices") or [{}]
        choice = choices[0]
        message = choice.get("message") or {}
        usage = data.get("usage") or {}
        return ChatResponse(
            content=message.get("content") or "",
            model=data.get("model", request.model),
            finish_reason=choice.get("finish_reason"),
            prompt_tokens=usage.get("prompt_tokens"),
            completion_tokens=usage.get("completion_tokens"),
            total_tokens=usage.get("total_tokens"),
        )

    async def chat_stream(self, request: ChatRequest) -> AsyncIterator[ChatChunk]:
        response = await send_with_retries(
            self._client,
            "POST",
            "/chat/completions",
            max_retries=self.max_retries,
            stream=True,
            json=self._chat_payload(request, stream=True),
        )
        if response.status_code >= 400:
            try:
                await response.aread()
            finally:
                await response.aclose()
            raise_for_status(response)
        return ChatCompletionStream(response)

    async def generate_image(self, request: ImageRequest) -> ImageResult:
        response = await send_with_retries(
            self._client,
            "POST",
            "/images/generations",
            max_retries=self.max_retries,
            json={
                "model": request.model,
                "prompt": request.prompt,
                "n": request.n,
                "size": request.size,
                "quality": request.quality,
                "response_format": "url",
            },
        )
        raise_for_status(response)
        data = parse_json(response)

        images = data.get("data") or [{}]
        image = images[0]
        return ImageResult(
            url=image.get("url"),
            revised_prompt=image.get("revised_prompt"),
        )
