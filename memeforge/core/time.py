"""Time helpers.

Response timestamps are always UTC and rendered the way browsers print
``Date.toISOString()`` (millisecond precision, ``Z`` suffix).
"""

from __future__ import annotations

from datetime import datetime, timezone


def utcnow() -> datetime:
    """Timezone-aware current UTC datetime."""
    return datetime.now(timezone.utc)


def utc_isoformat(value: datetime | None = None) -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a ``Z`` suffix."""
    value = value or utcnow()
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
