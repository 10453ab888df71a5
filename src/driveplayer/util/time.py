"""UTC timestamps as stored in progress envelopes and cache metadata."""

from __future__ import annotations

from datetime import datetime, timezone

_WIRE_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def normalize_dt(dt: datetime) -> datetime:
    """Return dt in UTC. Naive datetimes are rejected with ValueError."""
    if not isinstance(dt, datetime):
        raise TypeError("dt must be a datetime")
    if dt.tzinfo is None or dt.utcoffset() is None:
        raise ValueError("naive datetime is not allowed; timezone-aware required")
    return dt.astimezone(timezone.utc)


def to_rfc3339(dt: datetime) -> str:
    """Format as `YYYY-MM-DDTHH:MM:SS.ffffffZ` (always UTC, microseconds kept)."""
    return normalize_dt(dt).strftime(_WIRE_FORMAT)


def parse_rfc3339(value: str) -> datetime:
    """
    Parse the timestamps Drive returns and this package writes.

    Both `...Z` and explicit offsets (`+09:00`) are accepted; the result is
    always tz-aware UTC.
    """
    if not isinstance(value, str) or not value.strip():
        raise ValueError("RFC3339 value must be a non-empty string")

    text = value.strip()
    if text[-1] in "zZ":
        text = text[:-1] + "+00:00"
    return normalize_dt(datetime.fromisoformat(text))
