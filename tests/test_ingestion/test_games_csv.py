"""
Tests for game_analytics.ingestion.games_csv — lenient CSV reader.

Covers:
  - load_games_csv(): valid rows, skipped rows counted with line numbers,
    numeric defaults, "tbd" scores, "N/A" years, blank genre / publisher.
  - Header validation and missing files.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from game_analytics.ingestion.games_csv import (
    REQUIRED_CSV_COLUMNS,
    load_games,
    load_games_csv,
)


# ── Helpers ────────────────────────────────────────────────────────────────────

HEADER = (
    "Name,Platform,Year_of_Release,Genre,Publisher,NA_Sales,EU_Sales,JP_Sales,"
    "Other_Sales,Global_Sales,Critic_Score,Critic_Count,User_Score,User_Count,"
    "Developer,Rating\n"
)


def _write_csv(tmp_path: Path, content: str) -> Path:
    """Write CSV content to a temp file and return the path."""
    p = tmp_path / "games.csv"
    p.write_text(content, encoding="utf-8")
    return p


# ── Valid input ────────────────────────────────────────────────────────────────

class TestLoadGamesCsv:
    def test_full_row(self, tmp_path):
        path = _write_csv(
            tmp_path,
            HEADER + "Wii Sports,Wii,2006,Sports,Nintendo,41.36,28.96,3.77,8.45,82.53,76,51,8,322,Nintendo,E\n",
        )
        result = load_games_csv(path)
        assert result.skipped == 0
        [record] = result.records
        assert record.name == "Wii Sports"
        assert record.year_of_release == 2006
        assert record.na_sales == pytest.approx(41.36)
        assert record.global_sales == pytest.approx(82.53)
        assert record.user_score == pytest.approx(8.0)
        assert record.critic_score == pytest.approx(76.0)

    def test_tbd_score_and_missing_year(self, tmp_path):
        path = _write_csv(
            tmp_path,
            HEADER + "Some Game,DS,N/A,Misc,Unknown Co,0.1,0,0,0,0.1,,,tbd,,,\n",
        )
        [record] = load_games(path)
        assert record.user_score is None
        assert record.critic_score is None
        assert record.year_of_release is None

    def test_float_year(self, tmp_path):
        path = _write_csv(tmp_path, HEADER + "G,PC,2006.0,Action,P,0,0,0,0,0,,,,,,\n")
        assert load_games(path)[0].year_of_release == 2006

    def test_unparseable_sales_default_to_zero(self, tmp_path):
        path = _write_csv(tmp_path, HEADER + "G,PC,2001,Action,P,abc,,0.5,nan,1.0,,,,,,\n")
        [record] = load_games(path)
        assert record.na_sales == 0.0
        assert record.eu_sales == 0.0
        assert record.jp_sales == pytest.approx(0.5)
        assert record.other_sales == 0.0

    def test_blank_genre_and_publisher(self, tmp_path):
        path = _write_csv(tmp_path, HEADER + "G,PC,2001,,,0,0,0,0,0,,,,,,\n")
        [record] = load_games(path)
        assert record.genre == "Unknown"
        assert record.publisher is None

    def test_minimal_header(self, tmp_path):
        path = _write_csv(tmp_path, "Name,Platform\nTetris,GB\n")
        [record] = load_games(path)
        assert record.global_sales == 0.0
        assert record.genre == "Unknown"

    def test_header_only(self, tmp_path):
        result = load_games_csv(_write_csv(tmp_path, HEADER))
        assert result.records == []
        assert result.skipped == 0


# ── Skipped rows ───────────────────────────────────────────────────────────────

class TestSkippedRows:
    def test_missing_name_or_platform_skipped(self, tmp_path):
        path = _write_csv(
            tmp_path,
            HEADER
            + ",GEN,1993,,Acclaim,1.78,0.53,0,0.08,2.39,,,,,,\n"
            + "Good,PS2,2004,Racing,EA,1,1,0,0,2,,,,,,\n"
            + "No Platform,,2004,Racing,EA,1,1,0,0,2,,,,,,\n",
        )
        result = load_games_csv(path)
        assert [r.name for r in result.records] == ["Good"]
        assert result.skipped == 2
        assert result.skipped_lines == [2, 4]

    def test_negative_sales_skipped(self, tmp_path):
        path = _write_csv(tmp_path, HEADER + "Bad,PC,2001,Action,P,-1,0,0,0,0,,,,,,\n")
        result = load_games_csv(path)
        assert result.records == []
        assert result.skipped == 1

    def test_whitespace_name_skipped(self, tmp_path):
        path = _write_csv(tmp_path, "Name,Platform\n   ,PC\n")
        assert load_games_csv(path).skipped == 1


# ── Errors ─────────────────────────────────────────────────────────────────────

class TestErrors:
    def test_required_columns(self):
        assert REQUIRED_CSV_COLUMNS == {"Name", "Platform"}

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_games_csv(tmp_path / "missing.csv")

    def test_missing_required_column(self, tmp_path):
        path = _write_csv(tmp_path, "Name,Genre\nTetris,Puzzle\n")
        with pytest.raises(ValueError, match="Platform"):
            load_games_csv(path)

    def test_empty_file(self, tmp_path):
        with pytest.raises(ValueError, match="no header"):
            load_games_csv(_write_csv(tmp_path, ""))
