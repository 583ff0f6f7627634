"""Tests for request construction and result interpretation in the gateway."""

from __future__ import annotations

import pytest

from memeforge.config import Settings
from memeforge.core import ResponseParseError, UnknownFailure
from memeforge.providers.base import ChatMessage, ImageResult
from memeforge.services import CompletionGateway
from memeforge.services import prompts

from conftest import SUGGESTIONS_JSON, FakeProvider, text_response


@pytest.fixture
def gateway(settings) -> CompletionGateway:
    return CompletionGateway(FakeProvider(), settings)


def test_chat_request_puts_persona_first_and_keeps_order(gateway, settings) -> None:
    conversation = [
        ChatMessage(role="user", content="What is a good supply?"),
        ChatMessage(role="assistant", content="One billion is popular."),
        ChatMessage(role="user", content="And staking?"),
    ]

    request = gateway.build_chat_request(conversation)

    assert request.messages[0].role == "system"
    assert request.messages[0].content == prompts.CHAT_PERSONA
    assert list(request.messages[1:]) == conversation
    assert request.model == settings.gpt_model
    assert request.max_tokens == 800
    assert request.temperature == 0.8
    assert request.stream is False


def test_chat_context_is_appended_to_system_prompt(gateway) -> None:
    request = gateway.build_chat_request(
        [ChatMessage(role="user", content="hi")],
        context={"step": "tokenomics", "name": "MoonDoge"},
    )

    system = request.messages[0].content
    assert system.startswith(prompts.CHAT_PERSONA)
    assert "Current Context:" in system
    assert '"step": "tokenomics"' in system
    assert '"name": "MoonDoge"' in system


def test_string_context_is_embedded_as_json_string() -> None:
    prompt = prompts.chat_system_prompt("choosing a logo")
    assert prompt.endswith('Current Context:\n"choosing a logo"')


@pytest.mark.asyncio
async def test_empty_chat_reply_is_an_unknown_failure(settings) -> None:
    provider = FakeProvider(chat_responses=[text_response("")])
    gateway = CompletionGateway(provider, settings)

    with pytest.raises(UnknownFailure, match="No response from AI"):
        await gateway.chat([ChatMessage(role="user", content="hi")])


@pytest.mark.asyncio
async def test_logo_pipeline_makes_two_calls_in_order(settings) -> None:
    provider = FakeProvider(
        chat_responses=[text_response("  A shiba astronaut on a neon moon, circular emblem  ")]
    )
    gateway = CompletionGateway(provider, settings)

    result = await gateway.generate_logo("space dogs", "MoonDoge", "cartoon", "blue and gold")

    assert len(provider.chat_calls) == 1
    assert len(provider.image_calls) == 1
    prompt_request = provider.chat_calls[0]
    assert prompt_request.max_tokens == 500
    assert prompt_request.temperature == 0.7
    assert prompt_request.messages[0].content == prompts.LOGO_PROMPT_SYSTEM
    user_prompt = prompt_request.messages[1].content
    for expected in ("Theme: space dogs", "Name: MoonDoge", "Style: cartoon", "blue and gold"):
        assert expected in user_prompt

    image_request = provider.image_calls[0]
    assert image_request.prompt == "A shiba astronaut on a neon moon, circular emblem"
    assert image_request.model == settings.dalle_model
    assert image_request.size == settings.dalle_size
    assert image_request.quality == settings.dalle_quality

    assert result.image_url == "https://images.test/moondoge.png"
    assert result.prompt == "A shiba astronaut on a neon moon, circular emblem"
    assert result.revised_prompt == "A cartoon dog astronaut riding a rocket, circular emblem"


@pytest.mark.asyncio
async def test_logo_revised_prompt_falls_back_to_enhanced(settings) -> None:
    provider = FakeProvider(
        chat_responses=[text_response("pixel frog king")],
        image=ImageResult(url="https://images.test/frog.png", revised_prompt=None),
    )
    gateway = CompletionGateway(provider, settings)

    result = await gateway.generate_logo("frogs", "Ribbit", "pixel")

    assert result.revised_prompt == "pixel frog king"


@pytest.mark.asyncio
async def test_logo_without_image_url_fails(settings) -> None:
    provider = FakeProvider(
        chat_responses=[text_response("pixel frog king")],
        image=ImageResult(url=None),
    )
    gateway = CompletionGateway(provider, settings)

    with pytest.raises(UnknownFailure):
        await gateway.generate_logo("frogs", "Ribbit", "pixel")


@pytest.mark.asyncio
async def test_suggestions_parse_from_fenced_reply(settings) -> None:
    provider = FakeProvider(
        chat_responses=[text_response(f"Here are my picks:\n```json\n{SUGGESTIONS_JSON}\n```")]
    )
    gateway = CompletionGateway(provider, settings)

    suggestions = await gateway.suggest_params(
        "space dogs", "MoonDoge", target_audience="gamers", goals="community, longevity"
    )

    assert set(prompts.SUGGESTION_SECTIONS) <= set(suggestions)
    assert suggestions["tokenomics"]["totalSupply"] == "1000000000"
    assert len(suggestions["recommendations"]) == 3

    request = provider.chat_calls[0]
    assert request.max_tokens == 1500
    assert request.temperature == 0.7
    assert request.messages[0].content == prompts.SUGGESTION_SYSTEM
    user_prompt = request.messages[1].content
    assert "Target Audience: gamers" in user_prompt
    assert "Goals: community, longevity" in user_prompt


@pytest.mark.asyncio
async def test_suggestions_missing_sections_is_a_parse_error(settings) -> None:
    provider = FakeProvider(chat_responses=[text_response('{"tokenomics": {}}')])
    gateway = CompletionGateway(provider, settings)

    with pytest.raises(ResponseParseError) as exc:
        await gateway.suggest_params("space dogs", "MoonDoge")

    assert "staking" in exc.value.details["sections"]


@pytest.mark.asyncio
async def test_suggestions_prose_reply_is_a_parse_error(settings) -> None:
    provider = FakeProvider(chat_responses=[text_response("I think a billion tokens is great!")])
    gateway = CompletionGateway(provider, settings)

    with pytest.raises(ResponseParseError):
        await gateway.suggest_params("space dogs", "MoonDoge")


@pytest.mark.asyncio
async def test_token_limits_ignore_environment(monkeypatch) -> None:
    monkeypatch.setenv("GPT_MAX_TOKENS", "100")
    settings = Settings(_env_file=None, openai_api_key="test-key")
    provider = FakeProvider(
        chat_responses=[text_response("hi"), text_response(SUGGESTIONS_JSON), text_response("emblem")]
    )
    gateway = CompletionGateway(provider, settings)

    await gateway.chat([ChatMessage(role="user", content="hi")])
    await gateway.suggest_params("space dogs", "MoonDoge")
    await gateway.generate_logo("space dogs", "MoonDoge", "cartoon")

    assert [call.max_tokens for call in provider.chat_calls] == [800, 1500, 500]
