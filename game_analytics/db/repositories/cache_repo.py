"""
Repository for the ``analysis_cache`` table.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from datetime import datetime
from typing import Optional

from game_analytics.db.repositories.base import BaseRepository
from game_analytics.models.analysis import ANALYSIS_RESULTS_ADAPTER
from game_analytics.models.cache import CacheEntry
from game_analytics.utils.time_utils import from_iso, to_iso

logger = logging.getLogger(__name__)


class AnalysisCacheRepository(BaseRepository):
    """Read/write access to ``analysis_cache``."""

    table = "analysis_cache"

    def upsert(self, entry: CacheEntry) -> None:
        """Insert or replace the entry for ``entry.cache_key``."""
        self.execute(
            """
            INSERT INTO analysis_cache (
                cache_key, task_type, filters_json, payload_json,
                created_at, expires_at
            ) VALUES (?, ?, ?, ?, ?, ?)
            ON CONFLICT(cache_key) DO UPDATE SET
                task_type    = excluded.task_type,
                filters_json = excluded.filters_json,
                payload_json = excluded.payload_json,
                created_at   = excluded.created_at,
                expires_at   = excluded.expires_at;
            """,
            (
                entry.cache_key,
                entry.task_type,
                json.dumps(entry.filters, sort_keys=True),
                ANALYSIS_RESULTS_ADAPTER.dump_json(entry.payload).decode("utf-8"),
                to_iso(entry.created_at),
                to_iso(entry.expires_at),
            ),
        )

    def get(self, cache_key: str) -> Optional[CacheEntry]:
        """Fetch the stored entry for ``cache_key`` regardless of expiry."""
        row = self.fetchone(
            "SELECT * FROM analysis_cache WHERE cache_key = ?;", (cache_key,)
        )
        return _row_to_entry(row) if row else None

    def delete_expired(self, now: datetime) -> int:
        """Delete entries with ``expires_at <= now``; return the count removed."""
        return self.delete("expires_at <= ?", (to_iso(now),))

    def delete_all(self) -> int:
        return self.delete()

    def count_total(self) -> int:
        return self.count()

    def count_expired(self, now: datetime) -> int:
        return self.count("expires_at <= ?", (to_iso(now),))


def _row_to_entry(row: sqlite3.Row) -> CacheEntry:
    return CacheEntry(
        cache_key=row["cache_key"],
        task_type=row["task_type"],
        filters=json.loads(row["filters_json"]),
        payload=ANALYSIS_RESULTS_ADAPTER.validate_json(row["payload_json"]),
        created_at=from_iso(row["created_at"]),
        expires_at=from_iso(row["expires_at"]),
    )
