"""
Configuration for the game-analytics CLI and engines.

Sources, lowest precedence first:
  1. the TOML file passed as ``--config`` (default ``config/default.toml``)
  2. ``local.toml`` next to that file, if present, deep-merged on top
  3. ``.env`` at the project root, loaded into the process environment
  4. ``GAME_ANALYTICS_*`` environment variables (see ``ENV_OVERRIDES``)

``load_config()`` returns a frozen ``AppConfig``. Engines take plain keyword
arguments whose defaults match the section defaults below, so they can be
built without any config file (tests, notebooks).
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Callable, Mapping, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator

# ── Sub-config models ─────────────────────────────────────────────────────────


class DatabaseConfig(BaseModel):
    """SQLite database connection settings (cache store)."""

    model_config = ConfigDict(frozen=True)

    db_path: str = "data/db/game_analytics.db"
    wal_mode: bool = True
    busy_timeout_ms: int = 5000


class DataConfig(BaseModel):
    """Record source location."""

    model_config = ConfigDict(frozen=True)

    games_csv: str = "data/games.csv"


class CacheConfig(BaseModel):
    """Analysis result cache settings.

    ``backend`` selects the store: ``"sqlite"`` (persistent, uses
    ``[database]``), ``"memory"`` (process-local) or ``"none"`` (always
    compute directly).
    """

    model_config = ConfigDict(frozen=True)

    backend: str = "sqlite"
    ttl_seconds: int = 3600
    warm_on_start: bool = False

    @field_validator("backend")
    @classmethod
    def validate_backend(cls, v: str) -> str:
        valid = {"sqlite", "memory", "none"}
        if v.lower() not in valid:
            raise ValueError(f"Cache backend must be one of {sorted(valid)}, got '{v}'.")
        return v.lower()

    @field_validator("ttl_seconds")
    @classmethod
    def validate_ttl(cls, v: int) -> int:
        if v <= 0:
            raise ValueError(f"ttl_seconds must be positive, got {v}.")
        return v

    @property
    def enabled(self) -> bool:
        return self.backend != "none"


class AnalysisConfig(BaseModel):
    """Parameters of the predefined aggregation tasks."""

    model_config = ConfigDict(frozen=True)

    yearly_max_year: int = 2016     # later release years are incomplete in the source data
    publisher_top_n: int = 10


class InsightConfig(BaseModel):
    """Market insight thresholds."""

    model_config = ConfigDict(frozen=True)

    min_combo_count: int = 3
    opportunity_top_n: int = 10
    min_price_sample: int = 5
    trend_years: int = 5
    top_publishers: int = 5


class RecommendationConfig(BaseModel):
    """Recommendation defaults."""

    model_config = ConfigDict(frozen=True)

    default_limit: int = 10
    similar_limit: int = 5
    popular_min_sales: float = 1.0
    cold_start_min_score: float = 7.0


class LoggingConfig(BaseModel):
    """Logging output settings."""

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    log_file: str = "data/logs/game_analytics.log"
    json_format: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"Log level must be one of {sorted(valid)}, got '{v}'.")
        return v.upper()


class AppConfig(BaseModel):
    """All config sections plus the top-level ``debug`` flag."""

    model_config = ConfigDict(frozen=True)

    database: DatabaseConfig = DatabaseConfig()
    data: DataConfig = DataConfig()
    cache: CacheConfig = CacheConfig()
    analysis: AnalysisConfig = AnalysisConfig()
    insights: InsightConfig = InsightConfig()
    recommendations: RecommendationConfig = RecommendationConfig()
    logging: LoggingConfig = LoggingConfig()
    debug: bool = False


# ── Loader ────────────────────────────────────────────────────────────────────

# (variable, section or None for top level, key, parser)
ENV_OVERRIDES: tuple[tuple[str, Optional[str], str, Callable[[str], Any]], ...] = (
    ("GAME_ANALYTICS_DB_PATH", "database", "db_path", str),
    ("GAME_ANALYTICS_GAMES_CSV", "data", "games_csv", str),
    ("GAME_ANALYTICS_CACHE_BACKEND", "cache", "backend", str),
    ("GAME_ANALYTICS_CACHE_TTL_SECONDS", "cache", "ttl_seconds", int),
    ("GAME_ANALYTICS_LOG_LEVEL", "logging", "level", str),
    ("GAME_ANALYTICS_DEBUG", None, "debug", lambda v: v.strip().lower() in ("1", "true", "yes")),
)

_SECTIONS = ("database", "data", "cache", "analysis", "insights", "recommendations", "logging")


def find_project_root() -> Path:
    """Nearest ancestor of this package holding ``pyproject.toml``.

    Falls back to the package's parent directory for non-editable installs.
    """
    here = Path(__file__).resolve().parent
    for candidate in (here, *here.parents):
        if (candidate / "pyproject.toml").exists():
            return candidate
    return here.parent


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """Build an ``AppConfig`` from TOML, ``local.toml``, ``.env`` and the environment.

    Raises:
        FileNotFoundError: If the TOML file does not exist.
        pydantic.ValidationError: If a merged value fails validation.
    """
    root = find_project_root()
    load_dotenv(dotenv_path=root / ".env", override=False)

    path = Path(config_path) if config_path is not None else root / "config" / "default.toml"
    if not path.exists():
        raise FileNotFoundError(
            f"Config file not found: {path}\n"
            "Create config/default.toml or pass --config."
        )

    raw = _read_toml(path)
    local = path.with_name("local.toml")
    if local.exists():
        raw = _deep_merge(raw, _read_toml(local))

    return _build_app_config(_apply_env_overrides(raw, os.environ))


def _read_toml(path: Path) -> dict[str, Any]:
    with open(path, "rb") as f:
        return tomllib.load(f)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, val in override.items():
        current = merged.get(key)
        merged[key] = (
            _deep_merge(current, val)
            if isinstance(current, dict) and isinstance(val, dict)
            else val
        )
    return merged


def _apply_env_overrides(raw: dict[str, Any], environ: Mapping[str, str]) -> dict[str, Any]:
    """Return ``raw`` with every non-empty ``ENV_OVERRIDES`` variable applied."""
    for var, section, key, parse in ENV_OVERRIDES:
        value = environ.get(var)
        if not value:
            continue
        target = raw if section is None else raw.setdefault(section, {})
        target[key] = parse(value)
    return raw


def _build_app_config(raw: dict[str, Any]) -> AppConfig:
    # ``[project] debug`` is the TOML spelling; a top-level ``debug`` wins.
    debug = raw.get("debug", raw.get("project", {}).get("debug", False))
    sections = {name: raw[name] for name in _SECTIONS if name in raw}
    return AppConfig.model_validate({**sections, "debug": debug})
