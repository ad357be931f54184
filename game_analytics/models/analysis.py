"""
Analysis query models — filters in, results out.

``AnalysisFilters`` is the optional predicate set of a query. Its
``canonical()`` form (``None`` dropped, keys sorted, values coerced to their
declared types) is the only thing cache keys are built from, so two equal
filter sets always address the same cache entry.

Result models are frozen and produced fresh for every query:
  - ``CategoryValue``     — region / genre / yearly / platform / publisher rows.
  - ``RatingPoint``       — rating-vs-sales scatter point.
  - ``PlatformGenreCell`` — platform × genre breakdown cell.
"""

from __future__ import annotations

from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, TypeAdapter


class AnalysisFilters(BaseModel):
    """Optional record predicates; every supplied field must match.

    Unknown keys are rejected rather than ignored: a dropped predicate would
    turn a filtered query into an unfiltered one.

    Attributes:
        platform: Exact platform match.
        genre: Exact genre match.
        start_year: Inclusive lower bound on release year.
        end_year: Inclusive upper bound on release year.
        min_sales: Inclusive lower bound on global sales.
        max_sales: Inclusive upper bound on global sales.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    platform: Optional[str] = None
    genre: Optional[str] = None
    start_year: Optional[int] = None
    end_year: Optional[int] = None
    min_sales: Optional[float] = None
    max_sales: Optional[float] = None

    def is_empty(self) -> bool:
        """True when no filter field is set."""
        return not self.canonical()

    def canonical(self) -> dict[str, Any]:
        """Return the set fields as a key-sorted dict of typed values."""
        return {k: v for k, v in sorted(self.model_dump().items()) if v is not None}


class CategoryValue(BaseModel):
    """One aggregated bucket: a category label and its summed sales."""

    model_config = ConfigDict(frozen=True)

    category: Union[int, str]
    value: float


class RatingPoint(BaseModel):
    """User score against global sales for one title."""

    model_config = ConfigDict(frozen=True)

    score: float
    sales: float


class PlatformGenreCell(BaseModel):
    """Total sales and title count for a (platform, genre) pair."""

    model_config = ConfigDict(frozen=True)

    platform: str
    genre: str
    total_sales: float
    count: int


AnalysisResult = Union[CategoryValue, RatingPoint, PlatformGenreCell]

# Rehydrates cached JSON payloads; the three shapes have disjoint required fields.
ANALYSIS_RESULTS_ADAPTER: TypeAdapter[list[AnalysisResult]] = TypeAdapter(
    list[AnalysisResult]
)


class FilterOptions(BaseModel):
    """Distinct values available for building filters."""

    model_config = ConfigDict(frozen=True)

    platforms: list[str]
    genres: list[str]
    min_year: Optional[int] = None
    max_year: Optional[int] = None
