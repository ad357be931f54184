"""
Filter engine — composes optional predicates into one record test.

A record passes iff every supplied filter matches:
  - platform / genre  → exact string equality
  - start/end year    → inclusive bounds on ``year_of_release``; a record
                        with no release year fails any supplied year bound
  - min/max sales     → inclusive bounds on ``global_sales``

Unset fields impose no constraint. Because the predicate is a conjunction of
independent tests, applying filters in any order, or twice, selects the same
subset; ``apply_filters`` keeps the input's relative order.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from game_analytics.analysis.tasks import TaskSpec, run_task
from game_analytics.models.analysis import AnalysisFilters, AnalysisResult, FilterOptions
from game_analytics.models.record import GameRecord
from game_analytics.taxonomy.analysis_taxonomy import TaskType

logger = logging.getLogger(__name__)


def matches(record: GameRecord, filters: AnalysisFilters) -> bool:
    """Return True if ``record`` satisfies every set field of ``filters``."""
    if filters.platform is not None and record.platform != filters.platform:
        return False
    if filters.genre is not None and record.genre != filters.genre:
        return False

    year = record.year_of_release
    if filters.start_year is not None and (year is None or year < filters.start_year):
        return False
    if filters.end_year is not None and (year is None or year > filters.end_year):
        return False

    if filters.min_sales is not None and record.global_sales < filters.min_sales:
        return False
    if filters.max_sales is not None and record.global_sales > filters.max_sales:
        return False
    return True


def apply_filters(
    records: Sequence[GameRecord],
    filters: Optional[AnalysisFilters],
) -> list[GameRecord]:
    """Return the records passing ``filters``, in their original order."""
    if filters is None or filters.is_empty():
        return list(records)
    filtered = [r for r in records if matches(r, filters)]
    logger.debug("Filters %s kept %d/%d records", filters.canonical(), len(filtered), len(records))
    return filtered


def analyze_with_filters(
    records: Sequence[GameRecord],
    task_type: str | TaskType,
    filters: Optional[AnalysisFilters] = None,
    table: Optional[dict[TaskType, TaskSpec]] = None,
) -> list[AnalysisResult]:
    """Filter ``records`` then run ``task_type`` over the subset.

    Unsupported task types return an empty list.
    """
    return run_task(apply_filters(records, filters), task_type, table)


def filter_options(records: Sequence[GameRecord]) -> FilterOptions:
    """Distinct platforms and genres (sorted) and the release-year range."""
    years = [r.year_of_release for r in records if r.year_of_release is not None]
    return FilterOptions(
        platforms=sorted({r.platform for r in records}),
        genres=sorted({r.genre for r in records}),
        min_year=min(years) if years else None,
        max_year=max(years) if years else None,
    )
