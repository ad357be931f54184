"""
Closed enumerations shared by the analysis, insight and recommendation layers.

  - ``TaskType``           — the predefined aggregation tasks a query can name.
  - ``SalesRegion``        — the four regional sales columns, in report order.
  - ``ActionType``         — user actions fed to the recommendation engine.
  - ``OpportunityTier``    — market-opportunity potential buckets.
  - ``ConcentrationLevel`` — HHI interpretation.
  - ``PriceBand``          — pricing recommendation from the sales distribution.
  - ``AffinityLevel``      — coarse user profile label.
  - ``TrendDirection``     — sign of the fitted sales trend.

Usage example::

    from game_analytics.taxonomy.analysis_taxonomy import TaskType

    task = TaskType("platform")

This module has NO imports from any other ``game_analytics`` package.
"""

from enum import StrEnum


class TaskType(StrEnum):
    """Predefined aggregation task; each value is bound to a map/reduce pair."""

    REGION = "region"
    """Total sales per region (NA, EU, JP, Other)."""

    GENRE = "genre"
    """Global sales per genre."""

    YEARLY = "yearly"
    """Global sales per release year, up to the configured cutoff year."""

    PLATFORM = "platform"
    """Global sales per platform."""

    PUBLISHER = "publisher"
    """Global sales per publisher, top N."""

    RATING = "rating"
    """User score vs. global sales scatter points."""

    PLATFORM_GENRE = "platform_genre"
    """Sales and title count per (platform, genre) cell."""


class SalesRegion(StrEnum):
    """Regional sales columns in their fixed report order."""

    NA = "NA"
    EU = "EU"
    JP = "JP"
    OTHER = "Other"


class ActionType(StrEnum):
    """User action recorded against a preference profile."""

    FAVORITE = "favorite"
    """Title marked as favourite; genre weight +2."""

    FILTER = "filter"
    """Filter applied in a query; matching genre/platform weights +1."""

    VIEW = "view"
    """Title viewed; creates the profile but carries no weight."""

    SEARCH = "search"
    """Free-text search; creates the profile but carries no weight."""


class OpportunityTier(StrEnum):
    """Potential bucket for a (genre, platform) combination."""

    VERY_HIGH = "very high"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    NOT_RECOMMENDED = "not recommended"

    @property
    def label(self) -> str:
        if self is OpportunityTier.NOT_RECOMMENDED:
            return "not recommended"
        return f"{self.value} potential"


class ConcentrationLevel(StrEnum):
    """Market concentration derived from the Herfindahl-Hirschman Index."""

    LOW = "low concentration"
    """HHI < 0.15 — fragmented, intense competition."""

    MEDIUM = "medium concentration"
    """0.15 <= HHI < 0.25 — a few major competitors."""

    HIGH = "high concentration"
    """HHI >= 0.25 — oligopoly."""


class PriceBand(StrEnum):
    """Pricing recommendation derived from the sales-tier distribution."""

    PREMIUM = "premium"
    MID = "mid"
    BUDGET = "budget"
    FREE_TO_PLAY = "free_to_play"

    @property
    def description(self) -> str:
        return _PRICE_BAND_DESCRIPTIONS[self]


_PRICE_BAND_DESCRIPTIONS: dict[PriceBand, str] = {
    PriceBand.PREMIUM: "Strong market acceptance; premium pricing ($40-60)",
    PriceBand.MID: "Mid-range pricing is the safe zone ($20-40)",
    PriceBand.BUDGET: "Budget pricing to attract players ($10-20)",
    PriceBand.FREE_TO_PLAY: "Consider free-to-play with in-app purchases or bundling",
}


class AffinityLevel(StrEnum):
    """Coarse label for how strongly a user leans towards their top genre."""

    ENTHUSIAST = "enthusiast"
    REGULAR = "regular"
    CASUAL = "casual"
    NEW_USER = "new user"


class TrendDirection(StrEnum):
    """Sign of the fitted yearly sales slope."""

    RISING = "rising"
    FALLING = "falling"
