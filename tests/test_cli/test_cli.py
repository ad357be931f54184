"""
Tests for the game-analytics CLI (typer app).

Each test points ``--config`` at a TOML file under tmp_path with a memory or
disabled cache, error-level logging and no log file, so stdout carries only
command output.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest
from typer.testing import CliRunner

from game_analytics.cli import app

runner = CliRunner()

_GAMES_CSV = (
    "Name,Platform,Year_of_Release,Genre,Publisher,NA_Sales,EU_Sales,JP_Sales,"
    "Other_Sales,Global_Sales,Critic_Score,Critic_Count,User_Score,User_Count,"
    "Developer,Rating\n"
    "Final Fantasy VII,PS,1997,Role-Playing,Sony,3.01,2.47,3.28,0.96,9.72,92,20,9.2,1282,Square,T\n"
    "Pokemon Red,GB,1996,Role-Playing,Nintendo,11.27,8.89,10.22,1,31.37,,,,,,\n"
    "Halo 3,X360,2007,Shooter,Microsoft,7.97,2.81,0.13,1.21,12.12,94,86,7.8,3712,Bungie,M\n"
    ",GEN,1993,,Acclaim,1.78,0.53,0,0.08,2.39,,,,,,\n"
)


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def _write_config(tmp_path: Path, backend: str = "memory") -> Path:
    p = tmp_path / "config.toml"
    p.write_text(
        f'[database]\ndb_path = "{(tmp_path / "cache.db").as_posix()}"\n\n'
        f'[cache]\nbackend = "{backend}"\nttl_seconds = 60\n\n'
        '[logging]\nlevel = "ERROR"\nlog_file = ""\n',
        encoding="utf-8",
    )
    return p


@pytest.fixture()
def cli_env(tmp_path, monkeypatch):
    """Return (config_path, csv_path) for a tmp workspace."""
    monkeypatch.delenv("GAME_ANALYTICS_CACHE_BACKEND", raising=False)
    csv_path = tmp_path / "games.csv"
    csv_path.write_text(_GAMES_CSV, encoding="utf-8")
    return str(_write_config(tmp_path)), str(csv_path)


class TestValidateConfig:
    def test_valid(self, cli_env):
        config_path, _ = cli_env
        result = runner.invoke(app, ["validate-config", "--config", config_path])
        assert result.exit_code == 0
        assert "Cache backend:    memory" in result.stdout
        assert "[OK] Config valid." in result.stdout

    def test_missing_file(self, tmp_path):
        result = runner.invoke(app, ["validate-config", "--config", str(tmp_path / "none.toml")])
        assert result.exit_code == 1


class TestInitDb:
    def test_creates_cache_table(self, cli_env, tmp_path):
        config_path, _ = cli_env
        db_path = tmp_path / "init" / "cache.db"
        result = runner.invoke(
            app, ["init-db", "--db-path", str(db_path), "--config", config_path]
        )
        assert result.exit_code == 0
        assert "analysis_cache" in result.stdout
        assert db_path.exists()


class TestQuery:
    def test_genre_json(self, cli_env):
        config_path, csv_path = cli_env
        result = runner.invoke(
            app, ["query", "genre", "--json", "--csv", csv_path, "--config", config_path]
        )
        assert result.exit_code == 0
        rows = json.loads(result.stdout)
        assert rows[0]["category"] == "Role-Playing"
        assert rows[0]["value"] == pytest.approx(41.09)
        assert rows[1] == {"category": "Shooter", "value": 12.12}

    def test_filtered_table(self, cli_env):
        config_path, csv_path = cli_env
        result = runner.invoke(
            app,
            ["query", "platform", "--genre", "Shooter", "--csv", csv_path, "--config", config_path],
        )
        assert result.exit_code == 0
        assert "=== platform ===" in result.stdout
        assert "X360" in result.stdout
        assert "GB" not in result.stdout

    def test_unknown_task_exits(self, cli_env):
        config_path, csv_path = cli_env
        result = runner.invoke(
            app, ["query", "revenue", "--csv", csv_path, "--config", config_path]
        )
        assert result.exit_code == 1

    def test_missing_csv_exits(self, cli_env, tmp_path):
        config_path, _ = cli_env
        result = runner.invoke(
            app,
            ["query", "genre", "--csv", str(tmp_path / "nope.csv"), "--config", config_path],
        )
        assert result.exit_code == 1


class TestDatasetCommands:
    def test_stats_counts_skipped(self, cli_env):
        config_path, csv_path = cli_env
        result = runner.invoke(app, ["stats", "--json", "--csv", csv_path, "--config", config_path])
        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert payload["records"] == 3
        assert payload["skipped"] == 1
        assert payload["options"]["min_year"] == 1996

    def test_batch_runs_every_task(self, cli_env):
        config_path, csv_path = cli_env
        result = runner.invoke(app, ["batch", "--csv", csv_path, "--config", config_path])
        assert result.exit_code == 0
        assert "[OK] 7 analyses complete." in result.stdout


class TestCacheCommands:
    def test_stats_disabled(self, cli_env, tmp_path):
        config_path = _write_config(tmp_path, backend="none")
        result = runner.invoke(app, ["cache-stats", "--config", str(config_path)])
        assert result.exit_code == 0
        assert "Cache is disabled" in result.stdout

    def test_stats_memory(self, cli_env):
        config_path, _ = cli_env
        result = runner.invoke(app, ["cache-stats", "--json", "--config", config_path])
        assert result.exit_code == 0
        assert json.loads(result.stdout) == {"total": 0, "valid": 0, "expired": 0}

    def test_clear_sqlite(self, cli_env, tmp_path):
        config_path = _write_config(tmp_path, backend="sqlite")
        result = runner.invoke(app, ["cache-clear", "--config", str(config_path)])
        assert result.exit_code == 0
        assert "[OK] Removed 0 cache entries." in result.stdout


class TestInsightCommands:
    def test_competition_json(self, cli_env):
        config_path, csv_path = cli_env
        result = runner.invoke(
            app, ["competition", "Role-Playing", "--json", "--csv", csv_path, "--config", config_path]
        )
        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert payload["genre"] == "Role-Playing"
        assert payload["total_games"] == 2

    def test_similar(self, cli_env):
        config_path, csv_path = cli_env
        result = runner.invoke(
            app, ["similar", "Pokemon Red", "--csv", csv_path, "--config", config_path]
        )
        assert result.exit_code == 0
        assert "Final Fantasy VII" in result.stdout

    def test_trend_unknown_genre(self, cli_env):
        config_path, csv_path = cli_env
        result = runner.invoke(
            app, ["trend", "Puzzle", "--csv", csv_path, "--config", config_path]
        )
        assert result.exit_code == 0
        assert "[INSUFFICIENT DATA]" in result.stdout
