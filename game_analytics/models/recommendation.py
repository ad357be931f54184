"""
Recommendation models — user actions and preference state in, ranked titles out.

``UserPreferenceProfile`` is the **only** mutable model: its weight maps are
incremented as actions arrive. It is owned by a ``RecommendationEngine``
instance and never shared across engines.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, model_validator

from game_analytics.taxonomy.analysis_taxonomy import (
    ActionType,
    AffinityLevel,
    TrendDirection,
)


class UserAction(BaseModel):
    """A single user interaction.

    Attributes:
        type: What the user did.
        genre: Genre involved, if any.
        platform: Platform involved, if any.
        name: Title involved, if any (views / favourites).
    """

    model_config = ConfigDict(frozen=True)

    type: ActionType
    genre: Optional[str] = None
    platform: Optional[str] = None
    name: Optional[str] = None

    @model_validator(mode="after")
    def validate_favorite_has_genre(self) -> "UserAction":
        if self.type is ActionType.FAVORITE and not self.genre:
            raise ValueError("A favorite action must name a genre.")
        return self


class UserPreferenceProfile(BaseModel):
    """Accumulated genre/platform weights for one user."""

    user_id: str
    genre_weights: dict[str, float] = {}
    platform_weights: dict[str, float] = {}
    created_at: datetime
    updated_at: datetime

    def genre_weight(self, genre: str) -> float:
        return self.genre_weights.get(genre, 0.0)

    def platform_weight(self, platform: str) -> float:
        return self.platform_weights.get(platform, 0.0)


class ContentRecommendation(BaseModel):
    """A title ranked by content score (or popularity when cold)."""

    model_config = ConfigDict(frozen=True)

    name: str
    platform: str
    genre: str
    user_score: Optional[float] = None
    global_sales: float
    recommend_score: float
    reason: str


class SimilarGame(BaseModel):
    """A title ranked by similarity to a reference title."""

    model_config = ConfigDict(frozen=True)

    name: str
    platform: str
    genre: str
    similarity: float      # 0–1
    reason: str

    @property
    def similarity_pct(self) -> float:
        return self.similarity * 100.0


class ColdStartParams(BaseModel):
    """Optional narrowing for a cold-start recommendation."""

    model_config = ConfigDict(frozen=True)

    platform: Optional[str] = None
    genre: Optional[str] = None
    min_score: Optional[float] = 7.0
    limit: int = 10


class YearSales(BaseModel):
    model_config = ConfigDict(frozen=True)

    year: int
    sales: float


class TrendForecast(BaseModel):
    """Least-squares fit of yearly genre sales and a next-year forecast.

    Attributes:
        confidence_pct: ``max(0, 1 - MAE / mean) * 100``; 0 when undefined.
    """

    model_config = ConfigDict(frozen=True)

    genre: str
    historical: list[YearSales]
    slope: float
    intercept: float
    direction: TrendDirection
    predicted_year: int
    predicted_sales: float
    confidence_pct: float


class UserProfileSummary(BaseModel):
    """Top preferences and affinity label for a user."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    favorite_genres: list[str]
    favorite_platforms: list[str]
    affinity: AffinityLevel
    label: str
    top_genre: Optional[str] = None
