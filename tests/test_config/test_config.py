"""
Tests for game_analytics.config — TOML loading, local overrides, env overrides.

Every test writes its own TOML file under tmp_path, so the committed
config/default.toml is never read.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from game_analytics.config import AppConfig, CacheConfig, LoggingConfig, load_config

_ENV_VARS = (
    "GAME_ANALYTICS_DB_PATH",
    "GAME_ANALYTICS_GAMES_CSV",
    "GAME_ANALYTICS_CACHE_BACKEND",
    "GAME_ANALYTICS_CACHE_TTL_SECONDS",
    "GAME_ANALYTICS_LOG_LEVEL",
    "GAME_ANALYTICS_DEBUG",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def _write_toml(tmp_path: Path, content: str, name: str = "config.toml") -> Path:
    p = tmp_path / name
    p.write_text(content, encoding="utf-8")
    return p


class TestLoadConfig:
    def test_values_from_file(self, tmp_path):
        path = _write_toml(
            tmp_path,
            '[cache]\nbackend = "memory"\nttl_seconds = 60\n\n'
            "[analysis]\nyearly_max_year = 2010\n",
        )
        config = load_config(path)
        assert config.cache.backend == "memory"
        assert config.cache.ttl_seconds == 60
        assert config.analysis.yearly_max_year == 2010

    def test_missing_sections_use_defaults(self, tmp_path):
        config = load_config(_write_toml(tmp_path, ""))
        assert config == AppConfig()
        assert config.recommendations.cold_start_min_score == pytest.approx(7.0)

    def test_project_debug_flag(self, tmp_path):
        config = load_config(_write_toml(tmp_path, "[project]\ndebug = true\n"))
        assert config.debug is True

    def test_local_toml_overrides(self, tmp_path):
        path = _write_toml(tmp_path, '[cache]\nbackend = "sqlite"\nttl_seconds = 60\n')
        _write_toml(tmp_path, '[cache]\nbackend = "none"\n', name="local.toml")
        config = load_config(path)
        assert config.cache.backend == "none"
        assert config.cache.ttl_seconds == 60

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="Config file not found"):
            load_config(tmp_path / "absent.toml")

    def test_invalid_backend_raises(self, tmp_path):
        with pytest.raises(ValidationError, match="Cache backend"):
            load_config(_write_toml(tmp_path, '[cache]\nbackend = "redis"\n'))


class TestEnvOverrides:
    def test_env_beats_file(self, tmp_path, monkeypatch):
        path = _write_toml(tmp_path, '[cache]\nbackend = "sqlite"\n')
        monkeypatch.setenv("GAME_ANALYTICS_CACHE_BACKEND", "memory")
        monkeypatch.setenv("GAME_ANALYTICS_CACHE_TTL_SECONDS", "30")
        config = load_config(path)
        assert config.cache.backend == "memory"
        assert config.cache.ttl_seconds == 30

    def test_paths_and_debug(self, tmp_path, monkeypatch):
        monkeypatch.setenv("GAME_ANALYTICS_DB_PATH", "/tmp/x.db")
        monkeypatch.setenv("GAME_ANALYTICS_GAMES_CSV", "/tmp/games.csv")
        monkeypatch.setenv("GAME_ANALYTICS_DEBUG", "yes")
        monkeypatch.setenv("GAME_ANALYTICS_LOG_LEVEL", "debug")
        config = load_config(_write_toml(tmp_path, ""))
        assert config.database.db_path == "/tmp/x.db"
        assert config.data.games_csv == "/tmp/games.csv"
        assert config.debug is True
        assert config.logging.level == "DEBUG"


class TestSubConfigs:
    def test_backend_normalised(self):
        assert CacheConfig(backend="MEMORY").backend == "memory"

    def test_cache_enabled(self):
        assert CacheConfig(backend="sqlite").enabled
        assert not CacheConfig(backend="none").enabled

    def test_non_positive_ttl_raises(self):
        with pytest.raises(ValidationError, match="ttl_seconds"):
            CacheConfig(ttl_seconds=0)

    def test_bad_log_level_raises(self):
        with pytest.raises(ValidationError):
            LoggingConfig(level="LOUD")
