"""
Canonical cache keys.

A key is ``"<task>:<json>"`` where ``<json>`` is the filter set's canonical
dict (unset fields dropped, values typed by ``AnalysisFilters``) serialized
with sorted keys and compact separators. Equal filter sets therefore map to
the same key no matter the field order or whether ``start_year`` arrived as
``"2005"`` or ``2005``.
"""

from __future__ import annotations

import json
from typing import Any, Mapping, Optional, Union

from game_analytics.models.analysis import AnalysisFilters
from game_analytics.taxonomy.analysis_taxonomy import TaskType

FilterInput = Union[AnalysisFilters, Mapping[str, Any], None]


def normalize_filters(filters: FilterInput) -> AnalysisFilters:
    """Coerce ``None``, a mapping or an ``AnalysisFilters`` to ``AnalysisFilters``.

    Mapping values that are ``None`` or empty strings count as unset.

    Raises:
        pydantic.ValidationError: If a key is not a filter field or a value
            cannot be coerced to its field type.
    """
    if filters is None:
        return AnalysisFilters()
    if isinstance(filters, AnalysisFilters):
        return filters
    cleaned = {k: v for k, v in filters.items() if v is not None and v != ""}
    return AnalysisFilters(**cleaned)


def build_cache_key(task_type: Union[TaskType, str], filters: FilterInput = None) -> str:
    """Return the canonical cache key for a (task, filters) pair."""
    canonical = normalize_filters(filters).canonical()
    encoded = json.dumps(canonical, sort_keys=True, separators=(",", ":"))
    return f"{str(task_type)}:{encoded}"
