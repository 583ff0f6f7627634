"""
Base provider interface.

Defines the narrow contract the gateway needs from an upstream AI service:
a one-shot chat completion, a streamed chat completion and an image
generation call. Everything above this layer is provider-agnostic.
"""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from dataclasses import dataclass


@dataclass(frozen=True)
class ChatMessage:
    """A single chat message."""

    role: str  # "system", "user", "assistant"
    content: str

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass(frozen=True)
class ChatRequest:
    """Request for chat completion."""

    messages: tuple[ChatMessage, ...]
    model: str
    temperature: float = 0.7
    max_tokens: int | None = None
    stream: bool = False


@dataclass
class ChatChunk:
    """A single chunk from streaming response."""

    content: str
    finish_reason: str | None = None
    model: str | None = None


@dataclass
class ChatResponse:
    """Complete chat response (non-streaming)."""

    content: str
    model: str
    finish_reason: str | None = None
    prompt_tokens: int | None = None
    completion_tokens: int | None = None
    total_tokens: int | None = None


@dataclass(frozen=True)
class ImageRequest:
    """Request for a single generated image."""

    prompt: str
    model: str
    size: str = "1024x1024"
    quality: str = "standard"
    n: int = 1


@dataclass
class ImageResult:
    """Generated image reference."""

    url: str | None
    revised_prompt: str | None = None


class BaseProvider(ABC):
    """
    Abstract base class for AI providers.

    Implementations raise the upstream error kinds from ``memeforge.core``
    (UpstreamAuthError, UpstreamThrottled, UpstreamRequestInvalid,
    UnknownFailure) and nothing else.
    """

    async def aclose(self) -> None:
        """Close any underlying resources (optional)."""
        return None

    @abstractmethod
    async def chat_once(self, request: ChatRequest) -> ChatResponse:
        """
        Send a chat request and wait for complete response.

        Args:
            request: ChatRequest with messages and parameters

        Returns:
            Complete ChatResponse
        """
        ...

    @abstractmethod
    async def chat_stream(self, request: ChatRequest) -> AsyncIterator[ChatChunk]:
        """
        Open a streamed chat completion.

        The upstream request is sent and its status checked before this
        coroutine returns, so request-level failures surface here rather than
        halfway through iteration.

        Args:
            request: ChatRequest with messages and parameters

        Returns:
            Async iterator of ChatChunk objects in arrival order. Closing it
            (``aclose``) releases the upstream connection.
        """
        ...

    @abstractmethod
    async def generate_image(self, request: ImageRequest) -> ImageResult:
        """
        Generate one image and return its URL.

        Args:
            request: ImageRequest with prompt and rendering options

        Returns:
            ImageResult with URL and the provider's revised prompt, if any
        """
        ...
