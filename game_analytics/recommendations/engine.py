"""
Recommendation engine: per-user preference state plus ranking operations.

The engine instance owns every ``UserPreferenceProfile`` it creates; there is
no module-level state. Profiles are created on a user's first recorded
action and only ever grow. Weight updates take an engine-wide lock so
concurrent actions for one user cannot lose increments.

Operations
----------
record_action        : favourite → genre +2; filter → genre +1 / platform +1.
recommend_by_content : content score ranking, or popularity when the user has
                       no profile yet.
find_similar         : attribute-similarity ranking against a named title.
popular              : best sellers (> 1M) by 0.7*sales + 0.3*score.
cold_start           : best sellers narrowed by platform / genre / min score.
predict_trend        : OLS over yearly genre sales, next-year forecast.
get_user_profile     : top genres/platforms and an affinity label.
"""

from __future__ import annotations

import logging
import threading
from collections import defaultdict
from typing import Optional, Sequence

from game_analytics.config import RecommendationConfig
from game_analytics.models.insight import InsufficientData
from game_analytics.models.record import GameRecord
from game_analytics.models.recommendation import (
    ColdStartParams,
    ContentRecommendation,
    SimilarGame,
    TrendForecast,
    UserAction,
    UserPreferenceProfile,
    UserProfileSummary,
    YearSales,
)
from game_analytics.recommendations.scorer import (
    build_content_reason,
    build_similarity_reason,
    content_score,
    popularity_score,
    similarity,
)
from game_analytics.recommendations.trend import linear_regression, regression_confidence
from game_analytics.taxonomy.analysis_taxonomy import (
    ActionType,
    AffinityLevel,
    TrendDirection,
)
from game_analytics.utils.time_utils import utcnow

logger = logging.getLogger(__name__)

FAVORITE_WEIGHT = 2.0
FILTER_WEIGHT = 1.0
PROFILE_TOP_N = 3
POPULAR_REASON = "Popular pick"


class RecommendationEngine:
    """Ranks titles for users and forecasts genre trends.

    Attributes:
        records: Read-only record collection.
        default_limit: Result size when a caller passes no limit.
        similar_limit: Default size of ``find_similar`` results.
        popular_min_sales: Sales floor (millions) of the popularity fallback.
        cold_start_min_score: Default ``min_score`` for ``cold_start``.
    """

    def __init__(
        self,
        records: Sequence[GameRecord],
        default_limit: int = 10,
        similar_limit: int = 5,
        popular_min_sales: float = 1.0,
        cold_start_min_score: float = 7.0,
    ) -> None:
        self.records = tuple(records)
        self.default_limit = default_limit
        self.similar_limit = similar_limit
        self.popular_min_sales = popular_min_sales
        self.cold_start_min_score = cold_start_min_score
        self._profiles: dict[str, UserPreferenceProfile] = {}
        self._lock = threading.Lock()

    @classmethod
    def from_config(
        cls, records: Sequence[GameRecord], config: RecommendationConfig
    ) -> "RecommendationEngine":
        return cls(
            records,
            default_limit=config.default_limit,
            similar_limit=config.similar_limit,
            popular_min_sales=config.popular_min_sales,
            cold_start_min_score=config.cold_start_min_score,
        )

    # ── Preference state ──────────────────────────────────────────────────────

    def record_action(self, user_id: str, action: UserAction) -> UserPreferenceProfile:
        """Apply one action to ``user_id``'s profile, creating it if needed.

        Returns:
            A snapshot copy of the updated profile.
        """
        with self._lock:
            now = utcnow()
            profile = self._profiles.get(user_id)
            if profile is None:
                profile = UserPreferenceProfile(user_id=user_id, created_at=now, updated_at=now)
                self._profiles[user_id] = profile
                logger.debug("Created preference profile for user %s", user_id)

            if action.type is ActionType.FAVORITE and action.genre:
                _bump(profile.genre_weights, action.genre, FAVORITE_WEIGHT)
            elif action.type is ActionType.FILTER:
                if action.genre:
                    _bump(profile.genre_weights, action.genre, FILTER_WEIGHT)
                if action.platform:
                    _bump(profile.platform_weights, action.platform, FILTER_WEIGHT)
            profile.updated_at = now
            return profile.model_copy(deep=True)

    def get_profile(self, user_id: str) -> Optional[UserPreferenceProfile]:
        """Snapshot of a user's raw profile, or ``None`` if they have none."""
        with self._lock:
            profile = self._profiles.get(user_id)
            return profile.model_copy(deep=True) if profile else None

    # ── Ranking ───────────────────────────────────────────────────────────────

    def recommend_by_content(
        self, user_id: str, limit: Optional[int] = None
    ) -> list[ContentRecommendation]:
        """Top titles by content score; popularity fallback for unknown users."""
        limit = self.default_limit if limit is None else limit
        profile = self.get_profile(user_id)
        if profile is None:
            logger.info("No profile for user %s; using popularity fallback", user_id)
            return self.popular(limit)

        scored = [(content_score(r, profile), r) for r in self.records]
        scored.sort(key=lambda pair: pair[0], reverse=True)
        return [
            ContentRecommendation(
                name=r.name,
                platform=r.platform,
                genre=r.genre,
                user_score=r.user_score,
                global_sales=r.global_sales,
                recommend_score=round(score, 2),
                reason=build_content_reason(r, profile),
            )
            for score, r in scored[:limit]
        ]

    def find_similar(self, name: str, limit: Optional[int] = None) -> list[SimilarGame]:
        """Titles most similar to the first title named ``name``; ``[]`` if unknown."""
        limit = self.similar_limit if limit is None else limit
        target = next((r for r in self.records if r.name == name), None)
        if target is None:
            logger.info("find_similar: no title named %r", name)
            return []

        scored = [(similarity(target, r), r) for r in self.records if r.name != name]
        scored.sort(key=lambda pair: pair[0], reverse=True)
        return [
            SimilarGame(
                name=r.name,
                platform=r.platform,
                genre=r.genre,
                similarity=round(sim, 4),
                reason=build_similarity_reason(target, r),
            )
            for sim, r in scored[:limit]
        ]

    def popular(self, limit: Optional[int] = None) -> list[ContentRecommendation]:
        """Popularity fallback for users without history."""
        limit = self.default_limit if limit is None else limit
        candidates = [r for r in self.records if r.global_sales > self.popular_min_sales]
        candidates.sort(key=popularity_score, reverse=True)
        return [
            ContentRecommendation(
                name=r.name,
                platform=r.platform,
                genre=r.genre,
                user_score=r.user_score,
                global_sales=r.global_sales,
                recommend_score=round(popularity_score(r), 2),
                reason=POPULAR_REASON,
            )
            for r in candidates[:limit]
        ]

    def cold_start(self, params: Optional[ColdStartParams] = None) -> list[ContentRecommendation]:
        """Best sellers narrowed by optional platform, genre and minimum score.

        Titles without a user score never pass a ``min_score`` bound.
        """
        if params is None:
            params = ColdStartParams(min_score=self.cold_start_min_score, limit=self.default_limit)

        candidates = list(self.records)
        if params.platform:
            candidates = [r for r in candidates if r.platform == params.platform]
        if params.genre:
            candidates = [r for r in candidates if r.genre == params.genre]
        if params.min_score is not None:
            candidates = [
                r for r in candidates
                if r.user_score is not None and r.user_score >= params.min_score
            ]
        candidates.sort(key=lambda r: r.global_sales, reverse=True)
        return [
            ContentRecommendation(
                name=r.name,
                platform=r.platform,
                genre=r.genre,
                user_score=r.user_score,
                global_sales=r.global_sales,
                recommend_score=round(r.global_sales, 2),
                reason=POPULAR_REASON,
            )
            for r in candidates[: params.limit]
        ]

    # ── Trend ─────────────────────────────────────────────────────────────────

    def predict_trend(self, genre: str) -> TrendForecast | InsufficientData:
        """Fit yearly sales for ``genre`` and forecast the following year."""
        yearly: dict[int, float] = defaultdict(float)
        for r in self.records:
            if r.genre == genre and r.year_of_release is not None:
                yearly[r.year_of_release] += r.global_sales
        if not yearly:
            return InsufficientData(
                reason=f"No dated titles found for genre '{genre}'", required=1, found=0
            )

        years = sorted(yearly)
        sales = [yearly[y] for y in years]
        slope, intercept = linear_regression(years, sales)
        next_year = years[-1] + 1

        return TrendForecast(
            genre=genre,
            historical=[YearSales(year=y, sales=s) for y, s in zip(years, sales)],
            slope=slope,
            intercept=intercept,
            direction=TrendDirection.RISING if slope > 0 else TrendDirection.FALLING,
            predicted_year=next_year,
            predicted_sales=slope * next_year + intercept,
            confidence_pct=regression_confidence(years, sales, slope, intercept),
        )

    # ── Profile summary ───────────────────────────────────────────────────────

    def get_user_profile(self, user_id: str) -> UserProfileSummary:
        """Top-3 genres and platforms plus an affinity label.

        Users with no genre history (including unknown users) are "new user".
        """
        profile = self.get_profile(user_id)
        genres = _top_keys(profile.genre_weights if profile else {}, PROFILE_TOP_N)
        platforms = _top_keys(profile.platform_weights if profile else {}, PROFILE_TOP_N)

        if not genres:
            return UserProfileSummary(
                user_id=user_id,
                favorite_genres=[],
                favorite_platforms=platforms,
                affinity=AffinityLevel.NEW_USER,
                label=affinity_label(AffinityLevel.NEW_USER),
            )

        assert profile is not None
        top_genre = genres[0]
        top_weight = profile.genre_weights[top_genre]
        if top_weight > 10:
            affinity = AffinityLevel.ENTHUSIAST
        elif top_weight > 5:
            affinity = AffinityLevel.REGULAR
        else:
            affinity = AffinityLevel.CASUAL

        return UserProfileSummary(
            user_id=user_id,
            favorite_genres=genres,
            favorite_platforms=platforms,
            affinity=affinity,
            label=affinity_label(affinity, top_genre),
            top_genre=top_genre,
        )


# ── Helpers ───────────────────────────────────────────────────────────────────

def affinity_label(affinity: AffinityLevel, top_genre: Optional[str] = None) -> str:
    """Display label: "RPG enthusiast", "RPG regular", or the bare level name."""
    if top_genre and affinity in (AffinityLevel.ENTHUSIAST, AffinityLevel.REGULAR):
        return f"{top_genre} {affinity.value}"
    return affinity.value


def _bump(weights: dict[str, float], key: str, amount: float) -> None:
    weights[key] = weights.get(key, 0.0) + amount


def _top_keys(weights: dict[str, float], n: int) -> list[str]:
    return [k for k, _ in sorted(weights.items(), key=lambda kv: kv[1], reverse=True)[:n]]
