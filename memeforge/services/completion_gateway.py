"""Build upstream requests for the MemeForge endpoints and interpret the results."""

from __future__ import annotations

from collections.abc import AsyncIterator, Sequence
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError

from memeforge.config import Settings
from memeforge.core.errors import ResponseParseError, UnknownFailure
from memeforge.core.logging import get_logger
from memeforge.providers.base import (
    BaseProvider,
    ChatChunk,
    ChatMessage,
    ChatRequest,
    ChatResponse,
    ImageRequest,
)
from memeforge.services import prompts
from memeforge.services.json_extract import parse_ai_json

logger = get_logger(__name__)


class ParameterSuggestions(BaseModel):
    """Shape the suggestion prompt asks the model to return."""

    model_config = ConfigDict(extra="allow")

    tokenomics: dict[str, Any]
    distribution: dict[str, Any]
    staking: dict[str, Any]
    governance: dict[str, Any]
    reasoning: dict[str, Any]
    recommendations: list[Any]


@dataclass(frozen=True)
class LogoResult:
    image_url: str
    prompt: str
    revised_prompt: str


class CompletionGateway:
    """Turns validated endpoint input into provider calls.

    The gateway only knows the BaseProvider interface, so tests and
    alternative backends plug in without touching handlers.
    """

    def __init__(self, provider: BaseProvider, settings: Settings):
        self.provider = provider
        self.settings = settings

    def _request(
        self,
        messages: Sequence[ChatMessage],
        policy: prompts.SamplingPolicy,
        stream: bool = False,
    ) -> ChatRequest:
        return ChatRequest(
            messages=tuple(messages),
            model=self.settings.gpt_model,
            temperature=policy.temperature,
            max_tokens=policy.max_tokens,
            stream=stream,
        )

    def build_chat_request(
        self,
        conversation: Sequence[ChatMessage],
        context: dict[str, Any] | str | None = None,
        stream: bool = False,
    ) -> ChatRequest:
        """Persona system prompt followed by the caller's conversation, in order."""
        system = ChatMessage(role="system", content=prompts.chat_system_prompt(context))
        return self._request([system, *conversation], prompts.CHAT_POLICY, stream=stream)

    async def chat(
        self,
        conversation: Sequence[ChatMessage],
        context: dict[str, Any] | str | None = None,
    ) -> ChatResponse:
        response = await self.provider.chat_once(self.build_chat_request(conversation, context))
        if not response.content:
            raise UnknownFailure("No response from AI")
        return response

    async def stream_chat(
        self,
        conversation: Sequence[ChatMessage],
        context: dict[str, Any] | str | None = None,
    ) -> AsyncIterator[ChatChunk]:
        """Open the upstream stream; request-level errors raise here."""
        request = self.build_chat_request(conversation, context, stream=True)
        return await self.provider.chat_stream(request)

    async def enhance_logo_prompt(
        self,
        theme: str,
        name: str,
        style: str,
        additional_details: str | None = None,
    ) -> str:
        """Stage 1: expand the theme/name/style triple into a detailed image prompt."""
        messages = [
            ChatMessage(role="system", content=prompts.LOGO_PROMPT_SYSTEM),
            ChatMessage(
                role="user",
                content=prompts.logo_prompt_request(theme, name, style, additional_details),
            ),
        ]
        response = await self.provider.chat_once(
            self._request(messages, prompts.LOGO_PROMPT_POLICY)
        )
        enhanced = response.content.strip()
        if not enhanced:
            raise UnknownFailure("No logo prompt returned from AI")
        return enhanced

    async def generate_logo(
        self,
        theme: str,
        name: str,
        style: str,
        additional_details: str | None = None,
    ) -> LogoResult:
        enhanced = await self.enhance_logo_prompt(theme, name, style, additional_details)
        logger.info("Enhanced logo prompt", data={"name": name, "prompt": enhanced[:200]})

        image = await self.provider.generate_image(
            ImageRequest(
                prompt=enhanced,
                model=self.settings.dalle_model,
                size=self.settings.dalle_size,
                quality=self.settings.dalle_quality,
            )
        )
        if not image.url:
            raise UnknownFailure("No image URL returned from image model")

        return LogoResult(
            image_url=image.url,
            prompt=enhanced,
            revised_prompt=image.revised_prompt or enhanced,
        )

    async def suggest_params(
        self,
        theme: str,
        name: str,
        target_audience: str | None = None,
        goals: str | None = None,
    ) -> dict[str, Any]:
        messages = [
            ChatMessage(role="system", content=prompts.SUGGESTION_SYSTEM),
            ChatMessage(
                role="user",
                content=prompts.suggestion_request(theme, name, target_audience, goals),
            ),
        ]
        response = await self.provider.chat_once(
            self._request(messages, prompts.SUGGESTION_POLICY)
        )
        if not response.content:
            raise UnknownFailure("No response from AI")

        parsed = parse_ai_json(response.content)
        try:
            suggestions = ParameterSuggestions.model_validate(parsed)
        except PydanticValidationError as exc:
            missing = sorted(
                {str(err["loc"][0]) for err in exc.errors() if err.get("loc")}
            )
            logger.error("AI suggestions missing sections", data={"sections": missing})
            raise ResponseParseError(
                "AI response is missing required sections",
                details={"sections": missing},
            ) from exc
        return suggestions.model_dump()
