"""Relay a streamed chat completion to the browser as Server-Sent Events."""

from __future__ import annotations

import asyncio
import json
from collections.abc import AsyncIterator
from enum import Enum
from typing import Any

from memeforge.core.errors import AppError, StreamAborted
from memeforge.core.logging import get_logger
from memeforge.providers.base import ChatChunk

logger = get_logger(__name__)

DONE_SENTINEL = "[DONE]"

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
}


class RelayState(str, Enum):
    OPEN = "open"
    DONE = "done"
    ERROR = "error"
    CANCELLED = "cancelled"


def format_sse_data(payload: dict[str, Any] | str) -> str:
    """Serialize one self-contained SSE event carrying only a data field."""
    data = payload if isinstance(payload, str) else json.dumps(payload, ensure_ascii=False)
    return f"data: {data}\n\n"


class StreamRelay:
    """
    Pass-through from an upstream chunk iterator to SSE events.

    Each non-empty fragment becomes exactly one ``data: {"content": ...}``
    event, in arrival order. Clean exhaustion appends one ``data: [DONE]``
    event. An upstream failure emits no sentinel and raises StreamAborted so
    the server drops the connection instead of ending the chunked body
    cleanly. The upstream iterator is closed in every case.
    """

    def __init__(self, chunks: AsyncIterator[ChatChunk], stream_label: str = "chat"):
        self._chunks = chunks
        self.stream_label = stream_label
        self.state = RelayState.OPEN
        self.events_sent = 0

    async def events(self) -> AsyncIterator[str]:
        if self.state is not RelayState.OPEN:
            raise RuntimeError("StreamRelay can only be consumed once")

        try:
            async for chunk in self._chunks:
                if not chunk.content:
                    continue
                self.events_sent += 1
                yield format_sse_data({"content": chunk.content})
        except (asyncio.CancelledError, GeneratorExit):
            self.state = RelayState.CANCELLED
            logger.info(
                "Stream closed by client",
                data={"stream": self.stream_label, "events_sent": self.events_sent},
            )
            raise
        except AppError as exc:
            self.state = RelayState.ERROR
            logger.warning(
                "Upstream error during stream",
                data={
                    "stream": self.stream_label,
                    "code": exc.code.value,
                    "message": exc.message,
                    "events_sent": self.events_sent,
                },
            )
            raise StreamAborted(exc.message) from exc
        except Exception as exc:
            self.state = RelayState.ERROR
            logger.exception(
                "Unexpected error during stream",
                exc_info=exc,
                data={"stream": self.stream_label, "events_sent": self.events_sent},
            )
            raise StreamAborted(str(exc) or type(exc).__name__) from exc
        finally:
            await self._close_upstream()

        self.state = RelayState.DONE
        yield format_sse_data(DONE_SENTINEL)

    async def _close_upstream(self) -> None:
        aclose = getattr(self._chunks, "aclose", None)
        if aclose is None:
            return
        try:
            await aclose()
        except Exception as exc:  # pragma: no cover - best effort
            logger.warning(
                "Error closing upstream stream",
                data={"stream": self.stream_label, "error": str(exc)},
            )
