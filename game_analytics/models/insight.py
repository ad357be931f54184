"""
Market insight output models.

Every derived-metric operation returns either its report model or an
``InsufficientData`` marker when the sample is too small — never an
exception. All models are frozen.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict

from game_analytics.taxonomy.analysis_taxonomy import (
    ConcentrationLevel,
    OpportunityTier,
    PriceBand,
)


class InsufficientData(BaseModel):
    """Explicit "not enough records" result.

    Attributes:
        reason: Human-readable explanation.
        required: Minimum number of records the operation needs.
        found: Number of records that matched.
    """

    model_config = ConfigDict(frozen=True)

    error: str = "insufficient_data"
    reason: str
    required: int
    found: int


class MarketOpportunity(BaseModel):
    """Scored (genre, platform) combination."""

    model_config = ConfigDict(frozen=True)

    genre: str
    platform: str
    game_count: int
    total_sales: float
    avg_sales: float
    avg_score: float
    scored_count: int
    potential: float
    tier: OpportunityTier

    @property
    def combination(self) -> str:
        return f"{self.genre} on {self.platform}"


class PublisherShare(BaseModel):
    """A publisher's sales and share within one genre."""

    model_config = ConfigDict(frozen=True)

    publisher: str
    sales: float
    market_share: float   # fraction 0–1

    @property
    def market_share_pct(self) -> float:
        return self.market_share * 100.0


class YearlyTrendPoint(BaseModel):
    """Titles released and sales for one year."""

    model_config = ConfigDict(frozen=True)

    year: int
    games: int
    sales: float


class CompetitionReport(BaseModel):
    """Concentration analysis of one genre."""

    model_config = ConfigDict(frozen=True)

    genre: str
    total_games: int
    total_sales: float
    avg_sales_per_game: float
    hhi: float
    concentration: ConcentrationLevel
    top_publishers: list[PublisherShare]
    yearly_trend: list[YearlyTrendPoint]


class SalesBucket(BaseModel):
    """One sales tier of the price analysis.

    ``avg_score`` is ``None`` when no title in the bucket has a user score.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    count: int
    avg_score: Optional[float] = None


class PriceStrategyReport(BaseModel):
    """Sales-tier distribution and pricing recommendation for a genre/platform."""

    model_config = ConfigDict(frozen=True)

    genre: str
    platform: str
    total_games: int
    high: SalesBucket
    medium: SalesBucket
    low: SalesBucket
    band: PriceBand

    @property
    def recommendation(self) -> str:
        return self.band.description
