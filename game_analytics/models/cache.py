"""
Cache entry models.

A ``CacheEntry`` holds the result payload of one (task, canonical filters)
pair. Entries are logically absent once ``now >= expires_at`` even if the
backend still stores them physically; ``clear_expired()`` removes them.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, model_validator

from game_analytics.models.analysis import AnalysisResult


class CacheEntry(BaseModel):
    """One cached analysis result.

    Attributes:
        cache_key: Canonical key from ``build_cache_key()``.
        task_type: Task name the payload was computed for.
        filters: Canonical filter dict (sorted, ``None``-free).
        payload: The cached result rows.
        created_at: UTC time of the write.
        expires_at: ``created_at + ttl``.
    """

    model_config = ConfigDict(frozen=True)

    cache_key: str
    task_type: str
    filters: dict[str, Any]
    payload: list[AnalysisResult]
    created_at: datetime
    expires_at: datetime

    @model_validator(mode="after")
    def validate_expiry(self) -> "CacheEntry":
        if self.expires_at < self.created_at:
            raise ValueError("expires_at must not precede created_at.")
        return self

    def is_live(self, now: datetime) -> bool:
        """True while ``now`` is strictly before ``expires_at``."""
        return now < self.expires_at


class CacheStats(BaseModel):
    """Entry counts reported by a cache backend."""

    model_config = ConfigDict(frozen=True)

    total: int
    valid: int
    expired: int
