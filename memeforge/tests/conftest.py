"""Shared fixtures: fake provider, controllable clock, and an app wired to both."""

from __future__ import annotations

import asyncio
from collections import deque
from collections.abc import AsyncIterator, Iterable
from typing import Any

import pytest
from fastapi.testclient import TestClient

from memeforge.config import Settings
from memeforge.core import RateLimiter
from memeforge.main import create_app
from memeforge.providers.base import (
    BaseProvider,
    ChatChunk,
    ChatRequest,
    ChatResponse,
    ImageRequest,
    ImageResult,
)

SUGGESTIONS_JSON = """{
  "tokenomics": {"totalSupply": "1000000000", "initialPrice": "0.0001", "maxSupply": "1000000000"},
  "distribution": {"publicSale": "40%", "liquidity": "25%", "team": "10%", "marketing": "15%", "treasury": "10%"},
  "staking": {"minStakePeriod": "7", "maxStakePeriod": "365", "baseAPY": "5%", "maxAPY": "25%"},
  "governance": {"proposalThreshold": "100000", "votingPeriod": "7", "quorumPercentage": "4%"},
  "reasoning": {"tokenomics": "Large supply suits a meme", "distribution": "Community first", "staking": "Rewards holders", "governance": "Low barrier"},
  "recommendations": ["Lock liquidity", "Vest team tokens", "Run gaming tournaments"]
}"""


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeChunkStream:
    """Upstream chunk iterator that records whether it was closed."""

    def __init__(self, steps: Iterable[ChatChunk | Exception], delay: float = 0.0):
        self._steps = deque(steps)
        self._delay = delay
        self.closed = False
        self.consumed = 0

    def __aiter__(self) -> "FakeChunkStream":
        return self

    async def __anext__(self) -> ChatChunk:
        await asyncio.sleep(self._delay)
        if self.closed or not self._steps:
            raise StopAsyncIteration
        step = self._steps.popleft()
        if isinstance(step, Exception):
            raise step
        self.consumed += 1
        return step

    async def aclose(self) -> None:
        self.closed = True


class FakeProvider(BaseProvider):
    """Provider test double with call counters and scripted responses."""

    def __init__(
        self,
        chat_responses: Iterable[ChatResponse | Exception] | None = None,
        stream_steps: Iterable[ChatChunk | Exception] | None = None,
        image: ImageResult | Exception | None = None,
        stream_error: Exception | None = None,
    ):
        self.chat_responses = deque(chat_responses or [])
        self.stream_steps = list(stream_steps or [])
        self.stream_error = stream_error
        self.image = image or ImageResult(
            url="https://images.test/moondoge.png",
            revised_prompt="A cartoon dog astronaut riding a rocket, circular emblem",
        )
        self.chat_calls: list[ChatRequest] = []
        self.stream_calls: list[ChatRequest] = []
        self.image_calls: list[ImageRequest] = []
        self.streams: list[FakeChunkStream] = []
        self.closed = False

    @property
    def call_count(self) -> int:
        return len(self.chat_calls) + len(self.stream_calls) + len(self.image_calls)

    async def aclose(self) -> None:
        self.closed = True

    async def chat_once(self, request: ChatRequest) -> ChatResponse:
        self.chat_calls.append(request)
        if not self.chat_responses:
            return ChatResponse(
                content="Hello from MemeForge AI",
                model="gpt-test",
                finish_reason="stop",
                prompt_tokens=12,
                completion_tokens=5,
                total_tokens=17,
            )
        response = self.chat_responses.popleft()
        if isinstance(response, Exception):
            raise response
        return response

    async def chat_stream(self, request: ChatRequest) -> AsyncIterator[ChatChunk]:
        self.stream_calls.append(request)
        if self.stream_error is not None:
            raise self.stream_error
        stream = FakeChunkStream(self.stream_steps)
        self.streams.append(stream)
        return stream

    async def generate_image(self, request: ImageRequest) -> ImageResult:
        self.image_calls.append(request)
        if isinstance(self.image, Exception):
            raise self.image
        return self.image


def text_response(content: str, model: str = "gpt-test") -> ChatResponse:
    return ChatResponse(content=content, model=model, finish_reason="stop")


def parse_sse_events(body: str) -> list[str]:
    """Return the data field of every SSE event in a response body."""
    events = []
    for block in body.split("\n\n"):
        block = block.strip()
        if block.startswith("data:"):
            events.append(block[len("data:"):].strip())
    return events


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        openai_api_key="test-key",
        rate_limit_max_requests=3,
        rate_limit_window_ms=60000,
        log_level="WARNING",
        debug=True,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def limiter(settings: Settings, clock: FakeClock) -> RateLimiter:
    return RateLimiter(
        max_requests=settings.rate_limit_max_requests,
        window_ms=settings.rate_limit_window_ms,
        clock=clock,
    )


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def app(settings: Settings, provider: FakeProvider, limiter: RateLimiter):
    return create_app(settings=settings, provider=provider, rate_limiter=limiter)


@pytest.fixture
def client(app) -> Any:
    with TestClient(app) as test_client:
        yield test_client
