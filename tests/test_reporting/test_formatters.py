"""Tests for game_analytics.reporting.formatters."""

from __future__ import annotations

from game_analytics.models.analysis import (
    CategoryValue,
    FilterOptions,
    PlatformGenreCell,
    RatingPoint,
)
from game_analytics.models.cache import CacheStats
from game_analytics.models.insight import (
    InsufficientData,
    MarketOpportunity,
    PriceStrategyReport,
    SalesBucket,
)
from game_analytics.models.recommendation import (
    ContentRecommendation,
    SimilarGame,
    TrendForecast,
    YearSales,
)
from game_analytics.reporting.formatters import (
    format_analysis_result,
    format_cache_stats,
    format_dataset_stats,
    format_filter_options,
    format_insufficient,
    format_opportunities,
    format_price_strategy,
    format_recommendations,
    format_similar,
    format_trend,
)
from game_analytics.taxonomy.analysis_taxonomy import (
    OpportunityTier,
    PriceBand,
    TrendDirection,
)

_INSUFFICIENT = InsufficientData(reason="Need at least 3 titles", required=3, found=1)


# ── format_analysis_result ────────────────────────────────────────────────────


def test_category_rows_table() -> None:
    """Category rows render label and sales in millions."""
    out = format_analysis_result(
        "genre", [CategoryValue(category="Role-Playing", value=3.5)]
    )
    assert "=== genre ===" in out
    assert "Role-Playing" in out
    assert "3.50M" in out


def test_year_category_rendered() -> None:
    out = format_analysis_result("yearly", [CategoryValue(category=2006, value=82.53)])
    assert "2006" in out
    assert "82.53M" in out


def test_empty_rows() -> None:
    """No rows shows a placeholder rather than an empty table."""
    assert "(no results)" in format_analysis_result("genre", [])


def test_top_n_truncation_note() -> None:
    rows = [CategoryValue(category=f"P{i}", value=float(i)) for i in range(5)]
    out = format_analysis_result("platform", rows, top_n=2)
    assert "P1" in out
    assert "P2" not in out
    assert "showing 2 of 5 rows" in out


def test_platform_genre_cells() -> None:
    cell = PlatformGenreCell(platform="Wii", genre="Sports", total_sales=82.53, count=1)
    out = format_analysis_result("platform_genre", [cell])
    assert "Wii" in out
    assert "Sports" in out
    assert "Titles" in out


def test_rating_points_summarised() -> None:
    """Rating points are summarised, not listed one per line."""
    points = [RatingPoint(score=6.3, sales=14.62), RatingPoint(score=9.2, sales=9.72)]
    out = format_analysis_result("rating", points)
    assert "Points:       2" in out
    assert "6.3" in out
    assert "9.2" in out


# ── Dataset / cache ───────────────────────────────────────────────────────────


def test_filter_options_lists_values() -> None:
    options = FilterOptions(platforms=["PS4", "Wii"], genres=["Action"], min_year=1996, max_year=2010)
    out = format_filter_options(options)
    assert "PS4, Wii" in out
    assert "1996" in out


def test_filter_options_without_years() -> None:
    out = format_filter_options(FilterOptions(platforms=[], genres=[]))
    assert "Years:     N/A" in out


def test_dataset_stats() -> None:
    options = FilterOptions(platforms=["PS4"], genres=["Action"])
    out = format_dataset_stats(10, 2, options, source="games.csv")
    assert "games.csv" in out
    assert "Records:    10" in out
    assert "Skipped:    2" in out
    assert "Years:" not in out


def test_cache_stats() -> None:
    out = format_cache_stats(CacheStats(total=3, valid=2, expired=1), "sqlite")
    assert "sqlite" in out
    assert "Expired:  1" in out


# ── Insights ──────────────────────────────────────────────────────────────────


def test_insufficient_line() -> None:
    line = format_insufficient(_INSUFFICIENT)
    assert "[INSUFFICIENT DATA]" in line
    assert "need 3, found 1" in line


def test_opportunities_table() -> None:
    opp = MarketOpportunity(
        genre="Shooter", platform="X360", game_count=12, total_sales=23.2,
        avg_sales=1.93, avg_score=7.6, scored_count=10, potential=12.41,
        tier=OpportunityTier.VERY_HIGH,
    )
    out = format_opportunities([opp])
    assert "Shooter on X360" in out
    assert "very high potential" in out


def test_opportunities_empty() -> None:
    assert "(no combination has enough titles)" in format_opportunities([])


def test_price_strategy_report() -> None:
    report = PriceStrategyReport(
        genre="RPG", platform="PS4", total_games=5,
        high=SalesBucket(name="high", description="> 1M", count=2, avg_score=8.1),
        medium=SalesBucket(name="medium", description="0.1M - 1M", count=3),
        low=SalesBucket(name="low", description="< 0.1M", count=0),
        band=PriceBand.PREMIUM,
    )
    out = format_price_strategy(report)
    assert "RPG on PS4" in out
    assert "Band: premium" in out
    assert PriceBand.PREMIUM.description in out
    assert "N/A" in out


def test_price_strategy_insufficient() -> None:
    assert "[INSUFFICIENT DATA]" in format_price_strategy(_INSUFFICIENT)


# ── Recommendations ───────────────────────────────────────────────────────────


def test_recommendations_table() -> None:
    rec = ContentRecommendation(
        name="Halo 3", platform="X360", genre="Shooter", user_score=None,
        global_sales=12.12, recommend_score=38.1, reason="You like Shooter",
    )
    out = format_recommendations("For u1", [rec])
    assert "=== For u1 ===" in out
    assert "Halo 3" in out
    assert "N/A" in out
    assert "You like Shooter" in out


def test_recommendations_empty() -> None:
    assert "(no matching titles)" in format_recommendations("Cold start", [])


def test_similar_percent() -> None:
    game = SimilarGame(name="Call of Duty", platform="X360", genre="Shooter", similarity=0.825, reason="Same genre")
    out = format_similar("Halo 3", [game])
    assert "Similar to: Halo 3" in out
    assert "82%" in out or "83%" in out


def test_similar_unknown_title() -> None:
    assert "(no title named 'Nope')" in format_similar("Nope", [])


def test_trend_forecast() -> None:
    forecast = TrendForecast(
        genre="RPG",
        historical=[YearSales(year=2010, sales=1.0), YearSales(year=2011, sales=2.0)],
        slope=1.0, intercept=-2009.0, direction=TrendDirection.RISING,
        predicted_year=2012, predicted_sales=3.0, confidence_pct=100.0,
    )
    out = format_trend(forecast)
    assert "rising (+1.000M / year)" in out
    assert "3.00M in 2012" in out
    assert "100.0%" in out


def test_trend_insufficient() -> None:
    assert "[INSUFFICIENT DATA]" in format_trend(_INSUFFICIENT)
