"""
Shared pytest fixtures for the Game Sales Analytics test suite.

Provides:
  - ``in_memory_db``: A fresh in-memory SQLite connection with the schema
    applied. Created anew for each test that requests it.
  - ``make_record``: factory for ``GameRecord`` with sensible defaults.
  - ``sample_records``: a small catalogue covering several genres, platforms,
    publishers, a title without a year and titles without scores.
  - ``fake_clock``: a controllable clock for TTL tests.
"""

from __future__ import annotations

import sqlite3
from datetime import datetime, timedelta, timezone
from typing import Callable, Generator

import pytest

from game_analytics.db.schema import apply_schema
from game_analytics.models.record import GameRecord


# ── Database fixture ──────────────────────────────────────────────────────────

@pytest.fixture
def in_memory_db() -> Generator[sqlite3.Connection, None, None]:
    """Yield a fresh in-memory SQLite connection with the schema applied.

    Connection is closed after the test.
    """
    conn = sqlite3.connect(":memory:")
    conn.row_factory = sqlite3.Row
    apply_schema(conn)
    yield conn
    conn.close()


# ── Clock ─────────────────────────────────────────────────────────────────────

class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock(datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc))


# ── Record factories ──────────────────────────────────────────────────────────

@pytest.fixture
def make_record() -> Callable[..., GameRecord]:
    """Factory: ``make_record(name="X", genre="RPG", global_sales=1.0)``."""

    def _make(**overrides) -> GameRecord:
        fields = {
            "name": "Test Game",
            "platform": "PS4",
            "genre": "Action",
            "publisher": "Test Publisher",
            "year_of_release": 2015,
            "global_sales": 1.0,
        }
        fields.update(overrides)
        return GameRecord(**fields)

    return _make


@pytest.fixture
def sample_records() -> list[GameRecord]:
    """Seven titles; Pokemon Red has no scores, Obscure Title no year or publisher."""
    return [
        GameRecord(
            name="Wii Sports", platform="Wii", genre="Sports", publisher="Nintendo",
            year_of_release=2006, na_sales=41.36, eu_sales=28.96, jp_sales=3.77,
            other_sales=8.45, global_sales=82.53, user_score=8.0, critic_score=76.0,
        ),
        GameRecord(
            name="Mario Kart Wii", platform="Wii", genre="Racing", publisher="Nintendo",
            year_of_release=2008, na_sales=15.68, eu_sales=12.76, jp_sales=3.79,
            other_sales=3.29, global_sales=35.52, user_score=8.3, critic_score=82.0,
        ),
        GameRecord(
            name="Call of Duty: Black Ops", platform="X360", genre="Shooter",
            publisher="Activision", year_of_release=2010, na_sales=9.70, eu_sales=3.68,
            jp_sales=0.11, other_sales=1.13, global_sales=14.62, user_score=6.3,
            critic_score=87.0,
        ),
        GameRecord(
            name="Halo 3", platform="X360", genre="Shooter",
            publisher="Microsoft Game Studios", year_of_release=2007, na_sales=7.97,
            eu_sales=2.81, jp_sales=0.13, other_sales=1.21, global_sales=12.12,
            user_score=7.8, critic_score=94.0,
        ),
        GameRecord(
            name="Pokemon Red", platform="GB", genre="Role-Playing", publisher="Nintendo",
            year_of_release=1996, na_sales=11.27, eu_sales=8.89, jp_sales=10.22,
            other_sales=1.00, global_sales=31.37,
        ),
        GameRecord(
            name="Final Fantasy VII", platform="PS", genre="Role-Playing",
            publisher="Sony Computer Entertainment", year_of_release=1997,
            na_sales=3.01, eu_sales=2.47, jp_sales=3.28, other_sales=0.96,
            global_sales=9.72, user_score=9.2, critic_score=92.0,
        ),
        GameRecord(
            name="Obscure Title", platform="PS4", genre="Action",
            na_sales=0.01, eu_sales=0.01, jp_sales=0.01, other_sales=0.01,
            global_sales=0.04,
        ),
    ]
