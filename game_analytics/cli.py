"""
Game Sales Analytics — CLI entry point.

All commands follow this pattern:
  1. Load ``AppConfig`` via ``load_config()``.
  2. Configure logging.
  3. Load the record collection from the games CSV (analysis commands).
  4. Run the engine operation.
  5. Print an ASCII report, or JSON with ``--json``.

Install and run::

    pip install -e .
    game-analytics --help
    game-analytics init-db
    game-analytics query genre --start-year 2005 --end-year 2010
    game-analytics batch --json
    game-analytics opportunities
    game-analytics competition Shooter
    game-analytics pricing RPG PS4
    game-analytics similar "Mario Kart Wii"
    game-analytics trend Action
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

import typer

app = typer.Typer(
    name="game-analytics",
    help="Game sales analytics — aggregation, market insight and recommendation CLI.",
    add_completion=False,
)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _load_config_or_exit(config_path: Optional[str] = None):
    """Load AppConfig, printing a friendly error and exiting on failure."""
    from game_analytics.config import load_config

    try:
        cfg_path = Path(config_path) if config_path else None
        return load_config(cfg_path)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except Exception as exc:
        typer.echo(f"[ERROR] Config validation failed: {exc}", err=True)
        raise typer.Exit(code=1)


def _configure_logging(config):
    """Set up logging from config."""
    from game_analytics.utils.logging import configure_logging
    configure_logging(config.logging)


def _load_records_or_exit(config, csv_path: Optional[str] = None):
    """Read the games CSV named by ``--csv`` or the config; exit on failure."""
    from game_analytics.ingestion.games_csv import load_games_csv

    path = Path(csv_path) if csv_path else Path(config.data.games_csv)
    try:
        return load_games_csv(path)
    except (FileNotFoundError, ValueError) as exc:
        typer.echo(f"[ERROR] Could not load games CSV:\n{exc}", err=True)
        raise typer.Exit(code=1)


def _build_filters_or_exit(**fields: Any):
    """Build ``AnalysisFilters`` from CLI options; exit on invalid values."""
    from pydantic import ValidationError

    from game_analytics.cache.keys import normalize_filters

    try:
        return normalize_filters(fields)
    except ValidationError as exc:
        typer.echo(f"[ERROR] Invalid filters: {exc}", err=True)
        raise typer.Exit(code=1)


def _jsonable(value: Any) -> Any:
    from pydantic import BaseModel

    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value


def _echo_json(value: Any) -> None:
    typer.echo(json.dumps(_jsonable(value), indent=2, default=str))


_CONFIG_OPTION = typer.Option(None, "--config", help="Path to TOML config file.")
_CSV_OPTION = typer.Option(None, "--csv", help="Override games CSV path from config.")
_JSON_OPTION = typer.Option(False, "--json", help="Print machine-readable JSON.")


# ── Setup commands ────────────────────────────────────────────────────────────

@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file (default: config/default.toml).",
    ),
    show_full: bool = typer.Option(
        False,
        "--full",
        help="Print full config including all fields.",
    ),
) -> None:
    """Validate the configuration file and print parsed values.

    Exits with code 1 if the config fails validation.
    """
    config = _load_config_or_exit(config_path)

    typer.echo("Configuration validated successfully.")
    typer.echo("")
    typer.echo(f"  Database path:    {config.database.db_path}")
    typer.echo(f"  Games CSV:        {config.data.games_csv}")
    typer.echo(f"  Cache backend:    {config.cache.backend}")
    typer.echo(f"  Cache TTL:        {config.cache.ttl_seconds}s")
    typer.echo(f"  Log level:        {config.logging.level}")
    typer.echo(f"  Debug mode:       {config.debug}")

    if show_full:
        typer.echo("")
        typer.echo("Full config (JSON):")
        typer.echo(json.dumps(config.model_dump(), indent=2, default=str))

    typer.echo("")
    typer.echo("[OK] Config valid.")


@app.command("init-db")
def init_db(
    db_path: Optional[str] = typer.Option(
        None,
        "--db-path",
        help="Override DB path from config (e.g. data/db/test.db).",
    ),
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Initialize the SQLite cache database.

    Safe to run repeatedly: every statement is IF NOT EXISTS.
    """
    from game_analytics.db.connection import open_cache_db
    from game_analytics.db.schema import get_existing_tables

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    target_path = db_path or config.database.db_path
    typer.echo(f"Initializing database at: {target_path}")

    with open_cache_db(config.database, target_path) as conn:
        tables = get_existing_tables(conn)

    typer.echo(f"  Tables: {', '.join(tables)}")
    typer.echo("[OK] Database ready.")


# ── Analysis commands ─────────────────────────────────────────────────────────

@app.command("query")
def query(
    task: str = typer.Argument(
        ...,
        help="Analysis task: region, genre, yearly, platform, publisher, rating, platform_genre.",
    ),
    platform: Optional[str] = typer.Option(None, "--platform", help="Exact platform match."),
    genre: Optional[str] = typer.Option(None, "--genre", help="Exact genre match."),
    start_year: Optional[int] = typer.Option(None, "--start-year", help="Inclusive."),
    end_year: Optional[int] = typer.Option(None, "--end-year", help="Inclusive."),
    min_sales: Optional[float] = typer.Option(None, "--min-sales", help="Millions, inclusive."),
    max_sales: Optional[float] = typer.Option(None, "--max-sales", help="Millions, inclusive."),
    top_n: int = typer.Option(25, "--top-n", help="Rows to print (table output only)."),
    csv_path: Optional[str] = _CSV_OPTION,
    as_json: bool = _JSON_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Run one analysis task, optionally filtered.

    Unfiltered queries are served from the cache when a fresh entry exists.
    """
    from game_analytics.analysis.tasks import parse_task_type
    from game_analytics.pipeline.query import QueryPipeline
    from game_analytics.reporting.formatters import format_analysis_result

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    task_type = parse_task_type(task)
    if task_type is None:
        typer.echo(f"[ERROR] Unknown task '{task}'.", err=True)
        raise typer.Exit(code=1)

    filters = _build_filters_or_exit(
        platform=platform, genre=genre,
        start_year=start_year, end_year=end_year,
        min_sales=min_sales, max_sales=max_sales,
    )
    loaded = _load_records_or_exit(config, csv_path)
    pipeline = QueryPipeline.from_config(loaded.records, config)
    if config.cache.warm_on_start:
        pipeline.warm_cache()

    rows = pipeline.query(task_type, filters)

    if as_json:
        _echo_json(rows)
        return
    typer.echo(format_analysis_result(task_type.value, rows, top_n=top_n))


@app.command("batch")
def batch(
    csv_path: Optional[str] = _CSV_OPTION,
    as_json: bool = _JSON_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Run every analysis task once, unfiltered, and refresh the cache."""
    from game_analytics.pipeline.query import QueryPipeline
    from game_analytics.reporting.formatters import format_analysis_result

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    loaded = _load_records_or_exit(config, csv_path)
    pipeline = QueryPipeline.from_config(loaded.records, config)
    results = pipeline.run_all_analyses()

    if as_json:
        _echo_json(results)
        return
    for task, rows in results.items():
        typer.echo(format_analysis_result(task, rows, top_n=10))
    typer.echo("")
    typer.echo(f"[OK] {len(results)} analyses complete.")


@app.command("filter-options")
def filter_options_cmd(
    csv_path: Optional[str] = _CSV_OPTION,
    as_json: bool = _JSON_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """List the platforms, genres and year range available for filtering."""
    from game_analytics.analysis.filters import filter_options
    from game_analytics.reporting.formatters import format_filter_options

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    loaded = _load_records_or_exit(config, csv_path)
    options = filter_options(loaded.records)

    if as_json:
        _echo_json(options)
        return
    typer.echo(format_filter_options(options))


@app.command("stats")
def stats(
    csv_path: Optional[str] = _CSV_OPTION,
    as_json: bool = _JSON_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Summarise the loaded dataset: record count, skipped rows, coverage."""
    from game_analytics.analysis.filters import filter_options
    from game_analytics.reporting.formatters import format_dataset_stats

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    source = csv_path or config.data.games_csv
    loaded = _load_records_or_exit(config, csv_path)
    options = filter_options(loaded.records)

    if as_json:
        _echo_json({
            "source": source,
            "records": len(loaded.records),
            "skipped": loaded.skipped,
            "options": options,
        })
        return
    typer.echo(format_dataset_stats(len(loaded.records), loaded.skipped, options, source))


# ── Cache commands ────────────────────────────────────────────────────────────

@app.command("cache-stats")
def cache_stats(
    as_json: bool = _JSON_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Show total, valid and expired cache entries."""
    from game_analytics.cache.errors import CacheError
    from game_analytics.pipeline.query import build_cache_backend
    from game_analytics.reporting.formatters import format_cache_stats

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    backend = build_cache_backend(config)
    if backend is None:
        typer.echo("[INFO] Cache is disabled (cache.backend = \"none\").")
        return

    try:
        result = backend.stats()
    except CacheError as exc:
        typer.echo(f"[ERROR] Cache unavailable: {exc}", err=True)
        raise typer.Exit(code=1)

    if as_json:
        _echo_json(result)
        return
    typer.echo(format_cache_stats(result, config.cache.backend))


@app.command("cache-clear")
def cache_clear(
    expired_only: bool = typer.Option(
        False,
        "--expired-only",
        help="Remove only entries whose TTL has run out.",
    ),
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Delete cached analysis results."""
    from game_analytics.cache.errors import CacheError
    from game_analytics.pipeline.query import build_cache_backend

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    backend = build_cache_backend(config)
    if backend is None:
        typer.echo("[INFO] Cache is disabled (cache.backend = \"none\").")
        return

    try:
        removed = backend.clear_expired() if expired_only else backend.clear_all()
    except CacheError as exc:
        typer.echo(f"[ERROR] Cache unavailable: {exc}", err=True)
        raise typer.Exit(code=1)

    scope = "expired " if expired_only else ""
    typer.echo(f"[OK] Removed {removed} {scope}cache entries.")


# ── Market insight commands ───────────────────────────────────────────────────

@app.command("opportunities")
def opportunities(
    start_year: Optional[int] = typer.Option(None, "--start-year", help="Inclusive."),
    end_year: Optional[int] = typer.Option(None, "--end-year", help="Inclusive."),
    csv_path: Optional[str] = _CSV_OPTION,
    as_json: bool = _JSON_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Rank genre × platform combinations by market potential."""
    from game_analytics.insights.market import MarketInsightEngine
    from game_analytics.reporting.formatters import format_opportunities

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    filters = _build_filters_or_exit(start_year=start_year, end_year=end_year)
    loaded = _load_records_or_exit(config, csv_path)
    engine = MarketInsightEngine.from_config(loaded.records, config.insights)
    result = engine.find_opportunities(filters)

    if as_json:
        _echo_json(result)
        return
    typer.echo(format_opportunities(result))


@app.command("competition")
def competition(
    genre: str = typer.Argument(..., help="Genre to analyse (e.g. Shooter)."),
    csv_path: Optional[str] = _CSV_OPTION,
    as_json: bool = _JSON_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Publisher concentration (HHI) and recent trend within a genre."""
    from game_analytics.insights.market import MarketInsightEngine
    from game_analytics.reporting.formatters import format_competition

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    loaded = _load_records_or_exit(config, csv_path)
    engine = MarketInsightEngine.from_config(loaded.records, config.insights)
    report = engine.analyze_competition(genre)

    if as_json:
        _echo_json(report)
        return
    typer.echo(format_competition(report))


@app.command("pricing")
def pricing(
    genre: str = typer.Argument(..., help="Genre (e.g. RPG)."),
    platform: str = typer.Argument(..., help="Platform (e.g. PS4)."),
    csv_path: Optional[str] = _CSV_OPTION,
    as_json: bool = _JSON_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Sales-tier distribution and price band for a genre on a platform."""
    from game_analytics.insights.market import MarketInsightEngine
    from game_analytics.reporting.formatters import format_price_strategy

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    loaded = _load_records_or_exit(config, csv_path)
    engine = MarketInsightEngine.from_config(loaded.records, config.insights)
    report = engine.analyze_price_strategy(genre, platform)

    if as_json:
        _echo_json(report)
        return
    typer.echo(format_price_strategy(report))


# ── Recommendation commands ───────────────────────────────────────────────────

@app.command("similar")
def similar(
    name: str = typer.Argument(..., help="Exact title name."),
    limit: Optional[int] = typer.Option(None, "--limit", help="Number of titles."),
    csv_path: Optional[str] = _CSV_OPTION,
    as_json: bool = _JSON_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Titles most similar to the named one."""
    from game_analytics.recommendations.engine import RecommendationEngine
    from game_analytics.reporting.formatters import format_similar

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    loaded = _load_records_or_exit(config, csv_path)
    engine = RecommendationEngine.from_config(loaded.records, config.recommendations)
    result = engine.find_similar(name, limit)

    if as_json:
        _echo_json(result)
        return
    typer.echo(format_similar(name, result))


@app.command("cold-start")
def cold_start(
    platform: Optional[str] = typer.Option(None, "--platform", help="Exact platform match."),
    genre: Optional[str] = typer.Option(None, "--genre", help="Exact genre match."),
    min_score: Optional[float] = typer.Option(
        None,
        "--min-score",
        help="Minimum user score (default from config).",
    ),
    limit: Optional[int] = typer.Option(None, "--limit", help="Number of titles."),
    csv_path: Optional[str] = _CSV_OPTION,
    as_json: bool = _JSON_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Best sellers for a user with no history, optionally narrowed."""
    from game_analytics.models.recommendation import ColdStartParams
    from game_analytics.recommendations.engine import RecommendationEngine
    from game_analytics.reporting.formatters import format_recommendations

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    params = ColdStartParams(
        platform=platform,
        genre=genre,
        min_score=min_score if min_score is not None else config.recommendations.cold_start_min_score,
        limit=limit or config.recommendations.default_limit,
    )
    loaded = _load_records_or_exit(config, csv_path)
    engine = RecommendationEngine.from_config(loaded.records, config.recommendations)
    result = engine.cold_start(params)

    if as_json:
        _echo_json(result)
        return
    typer.echo(format_recommendations("Cold-Start Picks", result))


@app.command("trend")
def trend(
    genre: str = typer.Argument(..., help="Genre to forecast (e.g. Action)."),
    csv_path: Optional[str] = _CSV_OPTION,
    as_json: bool = _JSON_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Linear trend of yearly genre sales and a next-year forecast."""
    from game_analytics.recommendations.engine import RecommendationEngine
    from game_analytics.reporting.formatters import format_trend

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    loaded = _load_records_or_exit(config, csv_path)
    engine = RecommendationEngine.from_config(loaded.records, config.recommendations)
    result = engine.predict_trend(genre)

    if as_json:
        _echo_json(result)
        return
    typer.echo(format_trend(result))


# ── Entry point ───────────────────────────────────────────────────────────────

if __name__ == "__main__":
    app()
