"""Tests for the GameRecord model — required text, defaults, sales validation."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from game_analytics.models.record import UNKNOWN_GENRE, GameRecord


class TestGameRecord:
    def test_valid_construction(self, make_record):
        record = make_record(name="Tetris", platform="GB", global_sales=30.26)
        assert record.name == "Tetris"
        assert record.platform == "GB"
        assert record.global_sales == pytest.approx(30.26)

    def test_name_is_stripped(self):
        record = GameRecord(name="  Doom  ", platform=" PC ")
        assert record.name == "Doom"
        assert record.platform == "PC"

    @pytest.mark.parametrize("field", ["name", "platform"])
    def test_blank_required_text_raises(self, field):
        kwargs = {"name": "Doom", "platform": "PC", field: "   "}
        with pytest.raises(ValidationError, match="non-empty"):
            GameRecord(**kwargs)

    def test_blank_genre_defaults_to_unknown(self):
        assert GameRecord(name="X", platform="PC", genre="").genre == UNKNOWN_GENRE
        assert GameRecord(name="X", platform="PC", genre=None).genre == UNKNOWN_GENRE

    def test_blank_publisher_is_none(self):
        assert GameRecord(name="X", platform="PC", publisher="  ").publisher is None

    def test_negative_sales_raises(self):
        with pytest.raises(ValidationError, match="non-negative"):
            GameRecord(name="X", platform="PC", eu_sales=-0.1)

    def test_zero_score_is_not_none(self):
        record = GameRecord(name="X", platform="PC", user_score=0.0)
        assert record.user_score == 0.0
        assert record.user_score is not None

    def test_frozen(self, make_record):
        record = make_record()
        with pytest.raises(ValidationError):
            record.name = "Other"
