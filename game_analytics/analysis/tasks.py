"""
Predefined analysis tasks.

Each ``TaskType`` is bound once, in ``build_task_table()``, to a ``TaskSpec``
holding its map fn, reduce fn and an optional ``finalize`` step (sorting /
truncation). Callers dispatch through the table; nothing else in the package
switches on task names.

| Task            | map emits                          | reduce        | finalize               |
|-----------------|------------------------------------|---------------|------------------------|
| region          | 4 pairs: NA / EU / JP / Other      | sum           | fixed region order     |
| genre           | (genre, global)                    | sum           | value desc             |
| yearly          | (year, global) if year <= cutoff   | sum           | year asc               |
| platform        | (platform, global)                 | sum           | value desc             |
| publisher       | (publisher, global) if present     | sum           | value desc, top N      |
| platform_genre  | ((platform, genre), global)        | sum + count   | —                      |
| rating          | no map/reduce: direct filter + projection                           |

Python's sort is stable, so ties keep first-occurrence order.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Hashable, Optional, Sequence

from game_analytics.analysis.engine import KeyValuePair, MapFn, MapReduceEngine, ReduceFn
from game_analytics.models.analysis import (
    AnalysisResult,
    CategoryValue,
    PlatformGenreCell,
    RatingPoint,
)
from game_analytics.models.record import GameRecord
from game_analytics.taxonomy.analysis_taxonomy import SalesRegion, TaskType

logger = logging.getLogger(__name__)

DEFAULT_YEARLY_MAX_YEAR = 2016
DEFAULT_PUBLISHER_TOP_N = 10

_REGION_ORDER: dict[str, int] = {region.value: i for i, region in enumerate(SalesRegion)}

Finalize = Callable[[list[AnalysisResult]], list[AnalysisResult]]
DirectFn = Callable[[Sequence[GameRecord]], list[AnalysisResult]]


@dataclass(frozen=True)
class TaskSpec:
    """A task's aggregation recipe.

    Either ``map_fn``/``reduce_fn`` are set (map/group/reduce task) or
    ``direct_fn`` is (tasks that bypass aggregation, like ``rating``).
    """

    task_type: TaskType
    map_fn: Optional[MapFn] = None
    reduce_fn: Optional[ReduceFn] = None
    finalize: Optional[Finalize] = None
    direct_fn: Optional[DirectFn] = None

    def run(self, records: Sequence[GameRecord]) -> list[AnalysisResult]:
        if self.direct_fn is not None:
            return self.direct_fn(records)
        assert self.map_fn is not None and self.reduce_fn is not None
        results = MapReduceEngine(records).execute(self.map_fn, self.reduce_fn)
        if self.finalize is not None:
            results = self.finalize(results)
        return results


# ── Map functions ─────────────────────────────────────────────────────────────

def _map_region(record: GameRecord) -> list[KeyValuePair]:
    return [
        KeyValuePair(SalesRegion.NA.value, record.na_sales),
        KeyValuePair(SalesRegion.EU.value, record.eu_sales),
        KeyValuePair(SalesRegion.JP.value, record.jp_sales),
        KeyValuePair(SalesRegion.OTHER.value, record.other_sales),
    ]


def _map_genre(record: GameRecord) -> KeyValuePair:
    return KeyValuePair(record.genre, record.global_sales)


def _make_map_yearly(max_year: int) -> MapFn:
    def _map_yearly(record: GameRecord) -> Optional[KeyValuePair]:
        year = record.year_of_release
        if year is None or year > max_year:
            return None
        return KeyValuePair(year, record.global_sales)

    return _map_yearly


def _map_platform(record: GameRecord) -> KeyValuePair:
    return KeyValuePair(record.platform, record.global_sales)


def _map_publisher(record: GameRecord) -> Optional[KeyValuePair]:
    if not record.publisher:
        return None
    return KeyValuePair(record.publisher, record.global_sales)


def _map_platform_genre(record: GameRecord) -> KeyValuePair:
    return KeyValuePair((record.platform, record.genre), record.global_sales)


# ── Reduce functions ──────────────────────────────────────────────────────────

def _reduce_sum(key: Hashable, values: list[float]) -> CategoryValue:
    return CategoryValue(category=key, value=sum(values))


def _reduce_platform_genre(
    key: tuple[str, str], values: list[float]
) -> Optional[PlatformGenreCell]:
    if not values:
        return None
    platform, genre = key
    return PlatformGenreCell(
        platform=platform,
        genre=genre,
        total_sales=sum(values),
        count=len(values),
    )


# ── Finalize steps ────────────────────────────────────────────────────────────

def _by_region_order(results: list[CategoryValue]) -> list[CategoryValue]:
    return sorted(results, key=lambda r: _REGION_ORDER.get(str(r.category), len(_REGION_ORDER)))


def _by_value_desc(results: list[CategoryValue]) -> list[CategoryValue]:
    return sorted(results, key=lambda r: r.value, reverse=True)


def _by_category_asc(results: list[CategoryValue]) -> list[CategoryValue]:
    return sorted(results, key=lambda r: r.category)


def _make_top_n(n: int) -> Finalize:
    def _top_n(results: list[CategoryValue]) -> list[CategoryValue]:
        return _by_value_desc(results)[:n]

    return _top_n


# ── Direct tasks ──────────────────────────────────────────────────────────────

def rating_points(records: Sequence[GameRecord]) -> list[RatingPoint]:
    """Scatter points for every title with a positive user score and sales."""
    return [
        RatingPoint(score=r.user_score, sales=r.global_sales)
        for r in records
        if r.user_score is not None and r.user_score > 0 and r.global_sales > 0
    ]


# ── Table ─────────────────────────────────────────────────────────────────────

def build_task_table(
    yearly_max_year: int = DEFAULT_YEARLY_MAX_YEAR,
    publisher_top_n: int = DEFAULT_PUBLISHER_TOP_N,
) -> dict[TaskType, TaskSpec]:
    """Bind every ``TaskType`` to its ``TaskSpec``.

    Args:
        yearly_max_year: Latest release year included in the ``yearly`` task.
        publisher_top_n: Number of publishers kept by the ``publisher`` task.
    """
    return {
        TaskType.REGION: TaskSpec(TaskType.REGION, _map_region, _reduce_sum, _by_region_order),
        TaskType.GENRE: TaskSpec(TaskType.GENRE, _map_genre, _reduce_sum, _by_value_desc),
        TaskType.YEARLY: TaskSpec(
            TaskType.YEARLY, _make_map_yearly(yearly_max_year), _reduce_sum, _by_category_asc
        ),
        TaskType.PLATFORM: TaskSpec(
            TaskType.PLATFORM, _map_platform, _reduce_sum, _by_value_desc
        ),
        TaskType.PUBLISHER: TaskSpec(
            TaskType.PUBLISHER, _map_publisher, _reduce_sum, _make_top_n(publisher_top_n)
        ),
        TaskType.PLATFORM_GENRE: TaskSpec(
            TaskType.PLATFORM_GENRE, _map_platform_genre, _reduce_platform_genre
        ),
        TaskType.RATING: TaskSpec(TaskType.RATING, direct_fn=rating_points),
    }


DEFAULT_TASK_TABLE: dict[TaskType, TaskSpec] = build_task_table()


def parse_task_type(task_type: str | TaskType) -> Optional[TaskType]:
    """Return the ``TaskType`` for a name, or ``None`` if it is not supported."""
    try:
        return TaskType(task_type)
    except ValueError:
        return None


def run_task(
    records: Sequence[GameRecord],
    task_type: str | TaskType,
    table: Optional[dict[TaskType, TaskSpec]] = None,
) -> list[AnalysisResult]:
    """Run one task over ``records``; unknown task names yield ``[]``."""
    parsed = parse_task_type(task_type)
    if parsed is None:
        logger.warning("Unsupported task type %r; returning empty result", task_type)
        return []
    spec = (table or DEFAULT_TASK_TABLE)[parsed]
    results = spec.run(records)
    logger.info("Task [%s]: %d records -> %d results", parsed, len(records), len(results))
    return results


def run_all_analyses(
    records: Sequence[GameRecord],
    table: Optional[dict[TaskType, TaskSpec]] = None,
) -> dict[str, list[Any]]:
    """Run every predefined task once over the full record set."""
    return {task.value: run_task(records, task, table) for task in TaskType}
