"""Gateway, relay and parsing services."""

from memeforge.services.completion_gateway import (
    CompletionGateway,
    LogoResult,
    ParameterSuggestions,
)
from memeforge.services.json_extract import parse_ai_json
from memeforge.services.stream_relay import DONE_SENTINEL, RelayState, StreamRelay

__all__ = [
    "CompletionGateway",
    "LogoResult",
    "ParameterSuggestions",
    "parse_ai_json",
    "DONE_SENTINEL",
    "RelayState",
    "StreamRelay",
]
