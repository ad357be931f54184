"""
Analysis result cache backends.

Contract (``CacheBackend``):
  - ``get(task_type, filters)``  → payload, or ``None`` on miss. An entry
    whose ``expires_at`` has passed is a miss even if still stored.
  - ``put(task_type, filters, payload, ttl_seconds)`` → upsert; resets expiry.
  - ``clear_expired()`` / ``clear_all()`` → number of entries removed.
  - ``stats()`` → ``CacheStats(total, valid, expired)``.

Backends raise ``CacheError`` (or ``CacheUnavailableError``) on storage
failure and never anything else, so callers can degrade with one handler.

Implementations:
  - ``InMemoryCacheBackend`` — process-local dict; expired entries are
    dropped on every ``put``.
  - ``SQLiteCacheBackend``   — ``analysis_cache`` table, survives restarts.

Both take a ``clock`` callable (default ``utcnow``) so expiry can be tested
without sleeping.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, Optional

from pydantic import ValidationError

from game_analytics.cache.errors import CacheError, CacheUnavailableError
from game_analytics.cache.keys import FilterInput, build_cache_key, normalize_filters
from game_analytics.db.connection import get_connection
from game_analytics.db.repositories.cache_repo import AnalysisCacheRepository
from game_analytics.db.schema import apply_schema
from game_analytics.models.analysis import AnalysisResult
from game_analytics.models.cache import CacheEntry, CacheStats
from game_analytics.taxonomy.analysis_taxonomy import TaskType
from game_analytics.utils.time_utils import Clock, expiry_after, utcnow

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 3600


class CacheBackend(ABC):
    """Abstract TTL cache for analysis results."""

    def __init__(self, clock: Clock = utcnow) -> None:
        self.clock = clock

    @abstractmethod
    def get(
        self, task_type: TaskType | str, filters: FilterInput = None
    ) -> Optional[list[AnalysisResult]]:
        ...

    @abstractmethod
    def put(
        self,
        task_type: TaskType | str,
        filters: FilterInput,
        payload: list[AnalysisResult],
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
    ) -> None:
        ...

    @abstractmethod
    def clear_expired(self) -> int:
        ...

    @abstractmethod
    def clear_all(self) -> int:
        ...

    @abstractmethod
    def stats(self) -> CacheStats:
        ...

    def _new_entry(
        self,
        task_type: TaskType | str,
        filters: FilterInput,
        payload: list[AnalysisResult],
        ttl_seconds: float,
    ) -> CacheEntry:
        created_at = self.clock()
        return CacheEntry(
            cache_key=build_cache_key(task_type, filters),
            task_type=str(task_type),
            filters=normalize_filters(filters).canonical(),
            payload=list(payload),
            created_at=created_at,
            expires_at=expiry_after(created_at, ttl_seconds),
        )


class InMemoryCacheBackend(CacheBackend):
    """Dict-backed cache living as long as the process."""

    def __init__(self, clock: Clock = utcnow) -> None:
        super().__init__(clock)
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, task_type, filters=None):
        key = build_cache_key(task_type, filters)
        with self._lock:
            entry = self._entries.get(key)
        if entry is None or not entry.is_live(self.clock()):
            logger.debug("Cache miss: %s", key)
            return None
        logger.debug("Cache hit: %s", key)
        return list(entry.payload)

    def put(self, task_type, filters, payload, ttl_seconds=DEFAULT_TTL_SECONDS):
        entry = self._new_entry(task_type, filters, payload, ttl_seconds)
        with self._lock:
            purged = self._drop_expired(entry.created_at)
            self._entries[entry.cache_key] = entry
        if purged:
            logger.debug("Dropped %d expired cache entries", purged)
        logger.debug("Cache stored: %s (ttl=%ss)", entry.cache_key, ttl_seconds)

    def clear_expired(self) -> int:
        with self._lock:
            removed = self._drop_expired(self.clock())
        logger.info("Cleared %d expired cache entries", removed)
        return removed

    def clear_all(self) -> int:
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
        logger.info("Cleared %d cache entries", count)
        return count

    def stats(self) -> CacheStats:
        now = self.clock()
        with self._lock:
            total = len(self._entries)
            expired = sum(1 for e in self._entries.values() if not e.is_live(now))
        return CacheStats(total=total, valid=total - expired, expired=expired)

    def _drop_expired(self, now: datetime) -> int:
        # caller holds self._lock
        expired = [k for k, e in self._entries.items() if not e.is_live(now)]
        for key in expired:
            del self._entries[key]
        return len(expired)


class SQLiteCacheBackend(CacheBackend):
    """Cache persisted in the ``analysis_cache`` SQLite table.

    Each operation opens its own short-lived connection, so the backend can be
    shared between worker threads. The schema is applied on first use.

    Args:
        db_path: SQLite file path.
        wal_mode: Enable WAL journal mode.
        busy_timeout_ms: Lock wait before failing.
        clock: Time source for expiry.
    """

    def __init__(
        self,
        db_path: str,
        wal_mode: bool = True,
        busy_timeout_ms: int = 5000,
        clock: Clock = utcnow,
    ) -> None:
        super().__init__(clock)
        self.db_path = db_path
        self.wal_mode = wal_mode
        self.busy_timeout_ms = busy_timeout_ms
        self._schema_ready = False

    def get(self, task_type, filters=None):
        key = build_cache_key(task_type, filters)
        with self._repo() as repo:
            entry = repo.get(key)
        if entry is None or not entry.is_live(self.clock()):
            logger.debug("Cache miss: %s", key)
            return None
        logger.debug("Cache hit: %s", key)
        return list(entry.payload)

    def put(self, task_type, filters, payload, ttl_seconds=DEFAULT_TTL_SECONDS):
        entry = self._new_entry(task_type, filters, payload, ttl_seconds)
        with self._repo() as repo:
            repo.upsert(entry)
        logger.debug("Cache stored: %s (ttl=%ss)", entry.cache_key, ttl_seconds)

    def clear_expired(self) -> int:
        with self._repo() as repo:
            count = repo.delete_expired(self.clock())
        logger.info("Cleared %d expired cache entries", count)
        return count

    def clear_all(self) -> int:
        with self._repo() as repo:
            count = repo.delete_all()
        logger.info("Cleared %d cache entries", count)
        return count

    def stats(self) -> CacheStats:
        with self._repo() as repo:
            total = repo.count_total()
            expired = repo.count_expired(self.clock())
        return CacheStats(total=total, valid=total - expired, expired=expired)

    @contextmanager
    def _repo(self) -> Iterator[AnalysisCacheRepository]:
        """Open a connection for one call, mapping storage errors to ``CacheError``."""
        try:
            with get_connection(
                self.db_path, wal_mode=self.wal_mode, busy_timeout_ms=self.busy_timeout_ms
            ) as conn:
                if not self._schema_ready:
                    apply_schema(conn)
                    self._schema_ready = True
                yield AnalysisCacheRepository(conn)
        except (sqlite3.OperationalError, OSError) as exc:
            raise CacheUnavailableError(
                f"Cache database {self.db_path} unavailable: {exc}"
            ) from exc
        except sqlite3.Error as exc:
            raise CacheError(f"Cache operation failed: {exc}") from exc
        except ValidationError as exc:
            raise CacheError(f"Corrupt cache entry: {exc}") from exc
