"""Parse JSON objects out of model output.

Models asked for "a valid JSON object" sometimes wrap it in a markdown code
fence. Parsing tries the raw text first, then the first fenced block, and
raises ResponseParseError when neither yields an object.
"""

from __future__ import annotations

import json
import re
from typing import Any

from memeforge.core.errors import ResponseParseError
from memeforge.core.logging import get_logger

logger = get_logger(__name__)

FENCED_BLOCK = re.compile(r"```[ \t]*(?:json|JSON)?[ \t]*\r?\n(.*?)\r?\n?[ \t]*```", re.DOTALL)


def _loads_object(text: str) -> dict[str, Any] | None:
    try:
        value = json.loads(text)
    except (json.JSONDecodeError, TypeError):
        return None
    return value if isinstance(value, dict) else None


def extract_fenced_block(content: str) -> str | None:
    """Return the body of the first ```json (or bare ```) block, if any."""
    match = FENCED_BLOCK.search(content)
    return match.group(1) if match else None


def parse_ai_json(content: str) -> dict[str, Any]:
    """Parse a JSON object from model output, falling back to a fenced block."""
    parsed = _loads_object(content.strip())
    if parsed is not None:
        return parsed

    block = extract_fenced_block(content)
    if block is not None:
        parsed = _loads_object(block.strip())
        if parsed is not None:
            return parsed

    logger.error("Failed to parse AI response", data={"content": content[:500]})
    raise ResponseParseError()
