"""
Query pipeline: Filter Engine → Cache → Aggregation Engine.

Contract for ``query(task_type, filters)``:
  1. Unfiltered query with a cache configured → try the cache; a hit is
     returned as-is (trusted until its TTL runs out).
  2. Miss, filtered query, or no cache → compute over the filtered records.
  3. Cache configured and a non-empty result → write it back.
  4. Any ``CacheError`` on read or write is logged and swallowed: the cache is
     an optimization, never a dependency for a correct answer.

Unknown task names return ``[]`` without touching the cache.

Concurrent misses on the same key each recompute (the computation is pure)
and the last write wins.

Usage::

    pipeline = QueryPipeline(records, cache=InMemoryCacheBackend())
    rows = pipeline.query("platform", {"genre": "RPG"})
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional, Sequence

from game_analytics.analysis.filters import apply_filters
from game_analytics.analysis.tasks import (
    TaskSpec,
    build_task_table,
    parse_task_type,
    run_task,
)
from game_analytics.cache.backends import (
    DEFAULT_TTL_SECONDS,
    CacheBackend,
    InMemoryCacheBackend,
    SQLiteCacheBackend,
)
from game_analytics.cache.errors import CacheError
from game_analytics.cache.keys import FilterInput, normalize_filters
from game_analytics.config import AppConfig
from game_analytics.models.analysis import AnalysisFilters, AnalysisResult
from game_analytics.models.record import GameRecord
from game_analytics.taxonomy.analysis_taxonomy import TaskType

logger = logging.getLogger(__name__)

# Tasks precomputed by warm_cache(); mirrors the charts served on first load.
WARM_TASKS: tuple[TaskType, ...] = (
    TaskType.REGION,
    TaskType.GENRE,
    TaskType.YEARLY,
    TaskType.PLATFORM,
)

# Large or rarely reused payloads that the bulk run does not write to the cache.
BATCH_UNCACHED_TASKS: frozenset[TaskType] = frozenset({
    TaskType.RATING,
    TaskType.PLATFORM_GENRE,
})


def build_cache_backend(config: AppConfig) -> Optional[CacheBackend]:
    """Instantiate the cache backend selected by ``config.cache.backend``."""
    if not config.cache.enabled:
        return None
    if config.cache.backend == "sqlite":
        return SQLiteCacheBackend(
            config.database.db_path,
            wal_mode=config.database.wal_mode,
            busy_timeout_ms=config.database.busy_timeout_ms,
        )
    return InMemoryCacheBackend()


class QueryPipeline:
    """Answers analysis queries over a fixed record collection.

    Attributes:
        records: The full, read-only record collection.
        cache: Optional cache backend; ``None`` means always compute.
        ttl_seconds: TTL applied to cache writes.
        task_table: ``TaskType`` → ``TaskSpec`` bindings.
    """

    def __init__(
        self,
        records: Sequence[GameRecord],
        cache: Optional[CacheBackend] = None,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        task_table: Optional[dict[TaskType, TaskSpec]] = None,
    ) -> None:
        self.records = tuple(records)
        self.cache = cache
        self.ttl_seconds = ttl_seconds
        self.task_table = task_table or build_task_table()

    @classmethod
    def from_config(cls, records: Sequence[GameRecord], config: AppConfig) -> "QueryPipeline":
        return cls(
            records,
            cache=build_cache_backend(config),
            ttl_seconds=config.cache.ttl_seconds,
            task_table=build_task_table(
                yearly_max_year=config.analysis.yearly_max_year,
                publisher_top_n=config.analysis.publisher_top_n,
            ),
        )

    # ── Synchronous API ───────────────────────────────────────────────────────

    def query(
        self,
        task_type: TaskType | str,
        filters: FilterInput = None,
    ) -> list[AnalysisResult]:
        """Answer one query, using the cache when it is safe to."""
        task = parse_task_type(task_type)
        if task is None:
            logger.warning("Unsupported task type %r; returning empty result", task_type)
            return []
        flt = normalize_filters(filters)

        if self.cache is not None and flt.is_empty():
            cached = self._cache_get(task, flt)
            if cached is not None:
                return cached

        result = self._compute(task, flt)

        if self.cache is not None and result:
            self._cache_put(task, flt, result)
        return result

    def run_all_analyses(self) -> dict[str, list[Any]]:
        """Run every task once, unfiltered, caching the cacheable results."""
        results: dict[str, list[Any]] = {}
        for task in TaskType:
            rows = self._compute(task, AnalysisFilters())
            results[task.value] = rows
            if self.cache is not None and rows and task not in BATCH_UNCACHED_TASKS:
                self._cache_put(task, AnalysisFilters(), rows)
        logger.info("Batch analysis complete: %d tasks", len(results))
        return results

    def warm_cache(self) -> int:
        """Precompute and cache the unfiltered results of ``WARM_TASKS``.

        Returns:
            Number of entries written (0 without a cache or when writes fail).
        """
        if self.cache is None:
            return 0
        written = 0
        for task in WARM_TASKS:
            rows = self._compute(task, AnalysisFilters())
            if rows and self._cache_put(task, AnalysisFilters(), rows):
                written += 1
        logger.info("Cache warmed: %d/%d tasks", written, len(WARM_TASKS))
        return written

    # ── Asynchronous API ──────────────────────────────────────────────────────

    async def aquery(
        self,
        task_type: TaskType | str,
        filters: FilterInput = None,
    ) -> list[AnalysisResult]:
        """Coroutine form of ``query()``.

        Cache round trips run in worker threads so other queries keep making
        progress while one waits on the store; computation runs inline.
        """
        task = parse_task_type(task_type)
        if task is None:
            logger.warning("Unsupported task type %r; returning empty result", task_type)
            return []
        flt = normalize_filters(filters)

        if self.cache is not None and flt.is_empty():
            cached = await asyncio.to_thread(self._cache_get, task, flt)
            if cached is not None:
                return cached

        result = self._compute(task, flt)

        if self.cache is not None and result:
            await asyncio.to_thread(self._cache_put, task, flt, result)
        return result

    # ── Internals ─────────────────────────────────────────────────────────────

    def _compute(self, task: TaskType, filters: AnalysisFilters) -> list[AnalysisResult]:
        return run_task(apply_filters(self.records, filters), task, self.task_table)

    def _cache_get(
        self, task: TaskType, filters: AnalysisFilters
    ) -> Optional[list[AnalysisResult]]:
        assert self.cache is not None
        try:
            return self.cache.get(task, filters)
        except CacheError as exc:
            logger.warning("Cache read failed for %s, computing directly: %s", task, exc)
            return None

    def _cache_put(
        self, task: TaskType, filters: AnalysisFilters, rows: list[AnalysisResult]
    ) -> bool:
        assert self.cache is not None
        try:
            self.cache.put(task, filters, rows, ttl_seconds=self.ttl_seconds)
            return True
        except CacheError as exc:
            logger.warning("Cache write failed for %s, result not cached: %s", task, exc)
            return False
