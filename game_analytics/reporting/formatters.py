"""
ASCII terminal formatters for CLI commands.

All formatters accept result models and return plain multi-line strings
suitable for ``typer.echo()``.

No third-party dependencies (no ``rich``, no ``colorama``).

Sales are shown in millions of units with two decimals (``"12.34M"``);
missing user scores render as ``"N/A"`` rather than ``0``.
"""

from __future__ import annotations

from typing import Optional, Sequence

from game_analytics.models.analysis import (
    AnalysisResult,
    CategoryValue,
    FilterOptions,
    PlatformGenreCell,
    RatingPoint,
)
from game_analytics.models.cache import CacheStats
from game_analytics.models.insight import (
    CompetitionReport,
    InsufficientData,
    MarketOpportunity,
    PriceStrategyReport,
)
from game_analytics.models.recommendation import (
    ContentRecommendation,
    SimilarGame,
    TrendForecast,
)


def _sales(value: float) -> str:
    return f"{value:.2f}M"


def _score(value: Optional[float]) -> str:
    return f"{value:.1f}" if value is not None else "N/A"


def _rule(header: str, indent: int = 2) -> str:
    return " " * indent + "-" * (len(header) - indent)


# ── Insufficient data ─────────────────────────────────────────────────────────


def format_insufficient(data: InsufficientData) -> str:
    """One-line notice for an ``InsufficientData`` result."""
    return f"  [INSUFFICIENT DATA] {data.reason} (need {data.required}, found {data.found})"


# ── Analysis results ──────────────────────────────────────────────────────────


def format_analysis_result(
    task: str,
    rows: Sequence[AnalysisResult],
    top_n: int = 25,
) -> str:
    """Format the rows of one analysis task.

    Category rows get a two-column table. Rating points are summarised
    rather than listed, since the scatter has one point per scored title.
    """
    lines: list[str] = ["", f"=== {task} ==="]

    if not rows:
        lines.append("  (no results)")
        return "\n".join(lines)

    first = rows[0]
    if isinstance(first, CategoryValue):
        header = f"  {'Category':<32}  {'Sales':>10}"
        lines.append(header)
        lines.append(_rule(header))
        for row in rows[:top_n]:
            lines.append(f"  {str(row.category)[:32]:<32}  {_sales(row.value):>10}")
    elif isinstance(first, PlatformGenreCell):
        header = f"  {'Platform':<10}  {'Genre':<16}  {'Titles':>6}  {'Sales':>10}"
        lines.append(header)
        lines.append(_rule(header))
        for cell in rows[:top_n]:
            lines.append(
                f"  {cell.platform[:10]:<10}  {cell.genre[:16]:<16}  "
                f"{cell.count:>6}  {_sales(cell.total_sales):>10}"
            )
    elif isinstance(first, RatingPoint):
        scores = [p.score for p in rows]
        sales = [p.sales for p in rows]
        lines.append(f"  Points:       {len(rows)}")
        lines.append(f"  Score range:  {min(scores):.1f} – {max(scores):.1f}")
        lines.append(f"  Sales range:  {_sales(min(sales))} – {_sales(max(sales))}")
        return "\n".join(lines)

    if len(rows) > top_n:
        lines.append(f"  ... showing {top_n} of {len(rows)} rows (use --json for the full set)")
    return "\n".join(lines)


def format_filter_options(options: FilterOptions) -> str:
    lines = ["", "=== Filter Options ==="]
    years = (
        f"{options.min_year} – {options.max_year}"
        if options.min_year is not None else "N/A"
    )
    lines.append(f"  Years:     {years}")
    lines.append(f"  Platforms: {len(options.platforms)}")
    lines.append("    " + ", ".join(options.platforms))
    lines.append(f"  Genres:    {len(options.genres)}")
    lines.append("    " + ", ".join(options.genres))
    return "\n".join(lines)


def format_dataset_stats(
    total: int,
    skipped: int,
    options: FilterOptions,
    source: str = "",
) -> str:
    """Short overview of a loaded dataset."""
    lines = ["", "=== Dataset ==="]
    if source:
        lines.append(f"  Source:     {source}")
    lines.append(f"  Records:    {total}")
    lines.append(f"  Skipped:    {skipped}")
    lines.append(f"  Platforms:  {len(options.platforms)}")
    lines.append(f"  Genres:     {len(options.genres)}")
    if options.min_year is not None:
        lines.append(f"  Years:      {options.min_year} – {options.max_year}")
    return "\n".join(lines)


def format_cache_stats(stats: CacheStats, backend: str) -> str:
    lines = ["", "=== Cache ==="]
    lines.append(f"  Backend:  {backend}")
    lines.append(f"  Entries:  {stats.total}")
    lines.append(f"  Valid:    {stats.valid}")
    lines.append(f"  Expired:  {stats.expired}")
    return "\n".join(lines)


# ── Market insights ───────────────────────────────────────────────────────────


def format_opportunities(opportunities: Sequence[MarketOpportunity]) -> str:
    """Ranked (genre, platform) opportunities.

    ::

        Rank  Combination                 Titles   Avg Sales  Avg Score  Potential  Tier
        ----------------------------------------------------------------------------------
           1  Shooter on X360                 12       1.93M        7.6      12.41  very high potential
    """
    lines = ["", "=== Market Opportunities ==="]
    if not opportunities:
        lines.append("  (no combination has enough titles)")
        return "\n".join(lines)

    header = (
        f"  {'Rank':>4}  {'Combination':<28}  {'Titles':>6}  {'Avg Sales':>10}  "
        f"{'Avg Score':>9}  {'Potential':>9}  Tier"
    )
    lines.append(header)
    lines.append(_rule(header))
    for rank, opp in enumerate(opportunities, start=1):
        lines.append(
            f"  {rank:>4}  {opp.combination[:28]:<28}  {opp.game_count:>6}  "
            f"{_sales(opp.avg_sales):>10}  {opp.avg_score:>9.1f}  "
            f"{opp.potential:>9.2f}  {opp.tier.label}"
        )
    return "\n".join(lines)


def format_competition(report: CompetitionReport | InsufficientData) -> str:
    if isinstance(report, InsufficientData):
        return "\n".join(["", "=== Competition ===", format_insufficient(report)])

    lines = ["", f"=== Competition: {report.genre} ==="]
    lines.append(f"  Titles:         {report.total_games}")
    lines.append(f"  Total sales:    {_sales(report.total_sales)}")
    lines.append(f"  Avg per title:  {_sales(report.avg_sales_per_game)}")
    lines.append(f"  HHI:            {report.hhi:.4f} ({report.concentration.value})")

    lines.append("")
    header = f"  {'Publisher':<32}  {'Sales':>10}  {'Share':>7}"
    lines.append(header)
    lines.append(_rule(header))
    for share in report.top_publishers:
        lines.append(
            f"  {share.publisher[:32]:<32}  {_sales(share.sales):>10}  "
            f"{share.market_share_pct:>6.1f}%"
        )

    if report.yearly_trend:
        lines.append("")
        header = f"  {'Year':>4}  {'Titles':>6}  {'Sales':>10}"
        lines.append(header)
        lines.append(_rule(header))
        for point in report.yearly_trend:
            lines.append(f"  {point.year:>4}  {point.games:>6}  {_sales(point.sales):>10}")
    return "\n".join(lines)


def format_price_strategy(report: PriceStrategyReport | InsufficientData) -> str:
    if isinstance(report, InsufficientData):
        return "\n".join(["", "=== Price Strategy ===", format_insufficient(report)])

    lines = ["", f"=== Price Strategy: {report.genre} on {report.platform} ==="]
    lines.append(f"  Titles: {report.total_games}")
    lines.append("")
    header = f"  {'Tier':<8}  {'Description':<26}  {'Titles':>6}  {'Avg Score':>9}"
    lines.append(header)
    lines.append(_rule(header))
    for bucket in (report.high, report.medium, report.low):
        lines.append(
            f"  {bucket.name:<8}  {bucket.description:<26}  {bucket.count:>6}  "
            f"{_score(bucket.avg_score):>9}"
        )
    lines.append("")
    lines.append(f"  Band: {report.band.value}")
    lines.append(f"  {report.recommendation}")
    return "\n".join(lines)


# ── Recommendations ───────────────────────────────────────────────────────────


def format_recommendations(
    title: str,
    recommendations: Sequence[ContentRecommendation],
) -> str:
    lines = ["", f"=== {title} ==="]
    if not recommendations:
        lines.append("  (no matching titles)")
        return "\n".join(lines)

    header = (
        f"  {'Rank':>4}  {'Title':<36}  {'Platform':<8}  {'Genre':<12}  "
        f"{'Score':>5}  {'Sales':>8}  Reason"
    )
    lines.append(header)
    lines.append(_rule(header))
    for rank, rec in enumerate(recommendations, start=1):
        lines.append(
            f"  {rank:>4}  {rec.name[:36]:<36}  {rec.platform[:8]:<8}  "
            f"{rec.genre[:12]:<12}  {_score(rec.user_score):>5}  "
            f"{_sales(rec.global_sales):>8}  {rec.reason}"
        )
    return "\n".join(lines)


def format_similar(name: str, games: Sequence[SimilarGame]) -> str:
    lines = ["", f"=== Similar to: {name} ==="]
    if not games:
        lines.append(f"  (no title named '{name}')")
        return "\n".join(lines)

    header = (
        f"  {'Rank':>4}  {'Title':<36}  {'Platform':<8}  {'Genre':<12}  "
        f"{'Match':>6}  Reason"
    )
    lines.append(header)
    lines.append(_rule(header))
    for rank, game in enumerate(games, start=1):
        lines.append(
            f"  {rank:>4}  {game.name[:36]:<36}  {game.platform[:8]:<8}  "
            f"{game.genre[:12]:<12}  {game.similarity_pct:>5.0f}%  {game.reason}"
        )
    return "\n".join(lines)


def format_trend(forecast: TrendForecast | InsufficientData) -> str:
    if isinstance(forecast, InsufficientData):
        return "\n".join(["", "=== Trend ===", format_insufficient(forecast)])

    lines = ["", f"=== Trend: {forecast.genre} ==="]
    lines.append(f"  Direction:   {forecast.direction.value} ({forecast.slope:+.3f}M / year)")
    lines.append(
        f"  Forecast:    {_sales(forecast.predicted_sales)} in {forecast.predicted_year}"
    )
    lines.append(f"  Confidence:  {forecast.confidence_pct:.1f}%")
    lines.append("")
    header = f"  {'Year':>4}  {'Sales':>10}"
    lines.append(header)
    lines.append(_rule(header))
    for point in forecast.historical:
        lines.append(f"  {point.year:>4}  {_sales(point.sales):>10}")
    return "\n".join(lines)
