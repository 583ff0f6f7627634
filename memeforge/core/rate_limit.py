"""Sliding-window admission control for upstream AI calls.

One limiter instance is shared by every AI endpoint of an application. It
records the timestamps of admitted requests in a deque and admits a new
request only while fewer than ``max_requests`` of them fall inside the
trailing window. Denied requests are not recorded.
"""

from __future__ import annotations

import threading
import time
from collections import deque
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Any

from memeforge.core.time import utc_isoformat, utcnow


class RateLimiter:
    """In-memory sliding-window counter (not a token bucket)."""

    def __init__(
        self,
        max_requests: int = 10,
        window_ms: int = 60000,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        if window_ms < 1:
            raise ValueError("window_ms must be at least 1")
        self.max_requests = max_requests
        self.window_ms = window_ms
        self.window_seconds = window_ms / 1000
        self._clock = clock
        self._requests: deque[float] = deque()
        # Guards purge-and-append; never held across an await.
        self._lock = threading.Lock()

    def _prune(self, now: float) -> None:
        while self._requests and now - self._requests[0] >= self.window_seconds:
            self._requests.popleft()

    def check_limit(self) -> bool:
        """Admit (and record) one request, or return False if the window is full."""
        with self._lock:
            now = self._clock()
            self._prune(now)
            if len(self._requests) >= self.max_requests:
                return False
            self._requests.append(now)
            return True

    def remaining(self) -> int:
        """Admissions still available in the current window."""
        with self._lock:
            self._prune(self._clock())
            return max(0, self.max_requests - len(self._requests))

    def reset_in(self) -> float:
        """Seconds until the oldest recorded request leaves the window (0 if empty)."""
        with self._lock:
            now = self._clock()
            self._prune(now)
            if not self._requests:
                return 0.0
            return max(0.0, self._requests[0] + self.window_seconds - now)

    def reset_at(self) -> datetime:
        """Wall-clock (UTC) time at which capacity next frees up."""
        return utcnow() + timedelta(seconds=self.reset_in())

    def snapshot(self) -> dict[str, Any]:
        """Limit, remaining capacity and reset time for health and headers."""
        return {
            "limit": self.max_requests,
            "remaining": self.remaining(),
            "resetAt": utc_isoformat(self.reset_at()),
        }

    def reset(self) -> None:
        """Forget every recorded request."""
        with self._lock:
            self._requests.clear()
