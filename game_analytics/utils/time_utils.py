"""
Clock helpers.

Cache backends take a ``clock`` callable so tests can move time forward
without sleeping; ``utcnow`` is the production clock.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    """Return the current UTC datetime with timezone info.

    Prefer this over ``datetime.utcnow()`` (which returns naive datetimes).
    """
    return datetime.now(tz=timezone.utc)


def expiry_after(created_at: datetime, ttl_seconds: float) -> datetime:
    """Return ``created_at + ttl_seconds``."""
    return created_at + timedelta(seconds=ttl_seconds)


def to_iso(dt: datetime) -> str:
    """Serialize a datetime as fixed-width ISO 8601 in UTC.

    Fixed width keeps SQLite's text comparison in chronological order.
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat(timespec="microseconds")


def from_iso(value: str) -> datetime:
    """Parse an ISO 8601 string written by :func:`to_iso`."""
    dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt
