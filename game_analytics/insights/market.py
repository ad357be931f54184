"""
Market insights: opportunity scoring, competitive concentration, price tiers.

Opportunity potential (per genre × platform with at least 3 titles)
--------------------------------------------------------------------
    potential = avg_sales
                * (1 + (avg_score - 5) * 0.2)     # score above 5 boosts, below 5 penalises
                * min(ln(count + 1), 3)           # market maturity, capped

avg_score falls back to a neutral 5.0 when no title in the combination has a
user score. Negative or non-finite potential is reported as 0.

    potential > 10   very high
    potential > 5    high
    potential > 2    medium
    potential > 0.5  low
    otherwise        not recommended

Competition (Herfindahl-Hirschman Index)
----------------------------------------
    share_p = sales_p / total_genre_sales
    HHI     = sum(share_p ** 2)

    HHI < 0.15  low concentration
    HHI < 0.25  medium concentration
    otherwise   high concentration (oligopoly)

Price tiers (genre × platform, at least 5 titles)
-------------------------------------------------
    high   : global_sales > 2.0M
    medium : 0.5M < global_sales <= 2.0M
    low    : global_sales <= 0.5M

Band (first match wins):
    high_ratio > 0.4                  premium   ($40-60)
    medium_ratio > 0.5                mid       ($20-40)
    high_ratio + medium_ratio > 0.3   budget    ($10-20)
    otherwise                         free-to-play / bundle
"""

from __future__ import annotations

import logging
import math
from collections import defaultdict
from dataclasses import dataclass
from typing import Optional, Sequence

from game_analytics.analysis.filters import apply_filters
from game_analytics.config import InsightConfig
from game_analytics.models.analysis import AnalysisFilters
from game_analytics.models.insight import (
    CompetitionReport,
    InsufficientData,
    MarketOpportunity,
    PriceStrategyReport,
    PublisherShare,
    SalesBucket,
    YearlyTrendPoint,
)
from game_analytics.models.record import GameRecord
from game_analytics.taxonomy.analysis_taxonomy import (
    ConcentrationLevel,
    OpportunityTier,
    PriceBand,
)

logger = logging.getLogger(__name__)

NEUTRAL_SCORE = 5.0
UNKNOWN_PUBLISHER = "Unknown"

HIGH_SALES_THRESHOLD = 2.0
MEDIUM_SALES_THRESHOLD = 0.5


# ── Pure scoring functions ────────────────────────────────────────────────────

def compute_potential(avg_sales: float, avg_score: float, count: int) -> float:
    """Opportunity potential of a combination; never negative or non-finite."""
    score_bonus = (avg_score - NEUTRAL_SCORE) * 0.2
    maturity = min(math.log(count + 1), 3.0)
    potential = avg_sales * (1.0 + score_bonus) * maturity
    if not math.isfinite(potential):
        return 0.0
    return max(potential, 0.0)


def opportunity_tier(potential: float) -> OpportunityTier:
    if potential > 10:
        return OpportunityTier.VERY_HIGH
    if potential > 5:
        return OpportunityTier.HIGH
    if potential > 2:
        return OpportunityTier.MEDIUM
    if potential > 0.5:
        return OpportunityTier.LOW
    return OpportunityTier.NOT_RECOMMENDED


def herfindahl_index(sales_by_competitor: dict[str, float]) -> float:
    """Sum of squared market shares; 0.0 when total sales are zero."""
    total = sum(sales_by_competitor.values())
    if total <= 0:
        return 0.0
    return sum((sales / total) ** 2 for sales in sales_by_competitor.values())


def interpret_hhi(hhi: float) -> ConcentrationLevel:
    if hhi < 0.15:
        return ConcentrationLevel.LOW
    if hhi < 0.25:
        return ConcentrationLevel.MEDIUM
    return ConcentrationLevel.HIGH


def recommend_price_band(high: int, medium: int, low: int) -> PriceBand:
    """Pick a price band from the sizes of the three sales buckets."""
    total = high + medium + low
    if total == 0:
        return PriceBand.FREE_TO_PLAY
    high_ratio = high / total
    medium_ratio = medium / total
    if high_ratio > 0.4:
        return PriceBand.PREMIUM
    if medium_ratio > 0.5:
        return PriceBand.MID
    if high_ratio + medium_ratio > 0.3:
        return PriceBand.BUDGET
    return PriceBand.FREE_TO_PLAY


def average_user_score(records: Sequence[GameRecord]) -> Optional[float]:
    """Mean user score over records that have one; ``None`` if none do."""
    scores = [r.user_score for r in records if r.user_score is not None]
    if not scores:
        return None
    return sum(scores) / len(scores)


# ── Engine ────────────────────────────────────────────────────────────────────

@dataclass
class _ComboStats:
    genre: str
    platform: str
    total_sales: float = 0.0
    count: int = 0
    total_score: float = 0.0
    score_count: int = 0


class MarketInsightEngine:
    """Derived market metrics computed directly over the record collection.

    Every operation accepts optional ``AnalysisFilters`` to narrow the records
    first (e.g. a year window).
    """

    def __init__(
        self,
        records: Sequence[GameRecord],
        min_combo_count: int = 3,
        opportunity_top_n: int = 10,
        min_price_sample: int = 5,
        trend_years: int = 5,
        top_publishers: int = 5,
    ) -> None:
        self.records = tuple(records)
        self.min_combo_count = min_combo_count
        self.opportunity_top_n = opportunity_top_n
        self.min_price_sample = min_price_sample
        self.trend_years = trend_years
        self.top_publishers = top_publishers

    @classmethod
    def from_config(
        cls, records: Sequence[GameRecord], config: InsightConfig
    ) -> "MarketInsightEngine":
        return cls(
            records,
            min_combo_count=config.min_combo_count,
            opportunity_top_n=config.opportunity_top_n,
            min_price_sample=config.min_price_sample,
            trend_years=config.trend_years,
            top_publishers=config.top_publishers,
        )

    def find_opportunities(
        self, filters: Optional[AnalysisFilters] = None
    ) -> list[MarketOpportunity]:
        """Rank (genre, platform) combinations by potential, top N."""
        combos: dict[tuple[str, str], _ComboStats] = {}
        for r in apply_filters(self.records, filters):
            stats = combos.get((r.genre, r.platform))
            if stats is None:
                stats = combos[(r.genre, r.platform)] = _ComboStats(r.genre, r.platform)
            stats.total_sales += r.global_sales
            stats.count += 1
            if r.user_score is not None:
                stats.total_score += r.user_score
                stats.score_count += 1

        opportunities: list[MarketOpportunity] = []
        for stats in combos.values():
            if stats.count < self.min_combo_count:
                continue
            avg_sales = stats.total_sales / stats.count
            avg_score = (
                stats.total_score / stats.score_count if stats.score_count else NEUTRAL_SCORE
            )
            potential = compute_potential(avg_sales, avg_score, stats.count)
            opportunities.append(
                MarketOpportunity(
                    genre=stats.genre,
                    platform=stats.platform,
                    game_count=stats.count,
                    total_sales=stats.total_sales,
                    avg_sales=avg_sales,
                    avg_score=avg_score,
                    scored_count=stats.score_count,
                    potential=potential,
                    tier=opportunity_tier(potential),
                )
            )

        opportunities.sort(key=lambda o: o.potential, reverse=True)
        logger.info(
            "Opportunities: %d combinations, %d eligible",
            len(combos), len(opportunities),
        )
        return opportunities[: self.opportunity_top_n]

    def analyze_competition(
        self, genre: str, filters: Optional[AnalysisFilters] = None
    ) -> CompetitionReport | InsufficientData:
        """Publisher concentration and recent release trend within ``genre``."""
        genre_records = [r for r in apply_filters(self.records, filters) if r.genre == genre]
        if not genre_records:
            return InsufficientData(
                reason=f"No titles found for genre '{genre}'", required=1, found=0
            )

        yearly: dict[int, list[float]] = defaultdict(list)
        publishers: dict[str, float] = defaultdict(float)
        for r in genre_records:
            if r.year_of_release is not None:
                yearly[r.year_of_release].append(r.global_sales)
            publishers[r.publisher or UNKNOWN_PUBLISHER] += r.global_sales

        total_sales = sum(publishers.values())
        hhi = herfindahl_index(publishers)

        ranked = sorted(publishers.items(), key=lambda kv: kv[1], reverse=True)
        top = [
            PublisherShare(
                publisher=pub,
                sales=sales,
                market_share=(sales / total_sales) if total_sales > 0 else 0.0,
            )
            for pub, sales in ranked[: self.top_publishers]
        ]

        trend = [
            YearlyTrendPoint(year=year, games=len(sales), sales=sum(sales))
            for year, sales in sorted(yearly.items())
        ][-self.trend_years:]

        return CompetitionReport(
            genre=genre,
            total_games=len(genre_records),
            total_sales=total_sales,
            avg_sales_per_game=total_sales / len(genre_records),
            hhi=hhi,
            concentration=interpret_hhi(hhi),
            top_publishers=top,
            yearly_trend=trend,
        )

    def analyze_price_strategy(
        self, genre: str, platform: str, filters: Optional[AnalysisFilters] = None
    ) -> PriceStrategyReport | InsufficientData:
        """Sales-tier distribution and price band for ``genre`` on ``platform``."""
        matched = [
            r for r in apply_filters(self.records, filters)
            if r.genre == genre and r.platform == platform
        ]
        if len(matched) < self.min_price_sample:
            return InsufficientData(
                reason=(
                    f"At least {self.min_price_sample} titles are needed to analyse "
                    f"pricing for {genre} on {platform}"
                ),
                required=self.min_price_sample,
                found=len(matched),
            )

        high = [r for r in matched if r.global_sales > HIGH_SALES_THRESHOLD]
        medium = [
            r for r in matched
            if MEDIUM_SALES_THRESHOLD < r.global_sales <= HIGH_SALES_THRESHOLD
        ]
        low = [r for r in matched if r.global_sales <= MEDIUM_SALES_THRESHOLD]

        return PriceStrategyReport(
            genre=genre,
            platform=platform,
            total_games=len(matched),
            high=SalesBucket(
                name="high",
                description="Blockbuster (>2M sold)",
                count=len(high),
                avg_score=average_user_score(high),
            ),
            medium=SalesBucket(
                name="medium",
                description="Mid-tier (0.5-2M sold)",
                count=len(medium),
                avg_score=average_user_score(medium),
            ),
            low=SalesBucket(
                name="low",
                description="Niche (<=0.5M sold)",
                count=len(low),
                avg_score=average_user_score(low),
            ),
            band=recommend_price_band(len(high), len(medium), len(low)),
        )
