"""Tests for parsing JSON objects out of model output."""

from __future__ import annotations

import pytest

from memeforge.core import ErrorCode, ResponseParseError
from memeforge.services.json_extract import extract_fenced_block, parse_ai_json


def test_parses_plain_json_object() -> None:
    assert parse_ai_json('{"a": 1, "b": [2, 3]}') == {"a": 1, "b": [2, 3]}


def test_parses_json_fenced_block() -> None:
    content = 'Here you go:\n```json\n{"tokenomics": {"totalSupply": "1B"}}\n```\nEnjoy!'
    assert parse_ai_json(content) == {"tokenomics": {"totalSupply": "1B"}}


def test_parses_bare_fenced_block() -> None:
    content = '```\n{"ok": true}\n```'
    assert parse_ai_json(content) == {"ok": True}


def test_extract_fenced_block_returns_none_without_fence() -> None:
    assert extract_fenced_block("no code here") is None


def test_non_json_content_raises_parse_error() -> None:
    with pytest.raises(ResponseParseError) as exc:
        parse_ai_json("Sure! I'd suggest a supply of one billion tokens.")

    assert exc.value.code == ErrorCode.RESPONSE_PARSE_ERROR
    assert exc.value.status_code == 500


def test_invalid_json_inside_fence_raises_parse_error() -> None:
    with pytest.raises(ResponseParseError):
        parse_ai_json("```json\n{not valid}\n```")


def test_top_level_array_is_not_an_object() -> None:
    with pytest.raises(ResponseParseError):
        parse_ai_json("[1, 2, 3]")
