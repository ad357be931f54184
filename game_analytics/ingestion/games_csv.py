"""
CSV reader for the game sales dataset.

Format: comma delimited, with a header row.
Required columns:
  Name, Platform

Optional columns (missing column or unparseable value → default):
  Genre            → "Unknown"
  Publisher        → None
  Year_of_Release  → None           (e.g. "N/A"; "2006.0" is read as 2006)
  NA_Sales, EU_Sales, JP_Sales, Other_Sales, Global_Sales → 0.0
  User_Score       → None           (e.g. "tbd")
  Critic_Score     → None

Unlike the event importer this reader is lenient: a row with a blank name or
platform, or one the model rejects (e.g. negative sales), is skipped and
counted rather than failing the whole file. The source dataset is a public
scrape with many partial rows.
"""

from __future__ import annotations

import csv
import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from game_analytics.models.record import GameRecord

logger = logging.getLogger(__name__)

REQUIRED_CSV_COLUMNS = frozenset({"Name", "Platform"})

SALES_COLUMNS = ("NA_Sales", "EU_Sales", "JP_Sales", "Other_Sales", "Global_Sales")


@dataclass
class CsvLoadResult:
    """Outcome of one CSV read.

    Attributes:
        records: Accepted records, in file order.
        skipped: Number of rows discarded.
        skipped_lines: 1-based line numbers of discarded rows (header is line 1).
    """

    records: list[GameRecord] = field(default_factory=list)
    skipped: int = 0
    skipped_lines: list[int] = field(default_factory=list)


def load_games_csv(path: Path) -> CsvLoadResult:
    """Read a games CSV into :class:`GameRecord` objects.

    Args:
        path: Path to the CSV file.

    Returns:
        :class:`CsvLoadResult` with the accepted records and skip counts.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ValueError: If the header row is absent or lacks a required column.
    """
    if not path.exists():
        raise FileNotFoundError(f"Games CSV file not found: {path}")

    result = CsvLoadResult()

    with open(path, encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)

        if reader.fieldnames is None:
            raise ValueError(f"CSV file is empty or has no header row: {path}")

        actual_cols = {c.strip() for c in reader.fieldnames}
        missing = REQUIRED_CSV_COLUMNS - actual_cols
        if missing:
            raise ValueError(
                f"CSV missing required columns: {sorted(missing)}\n"
                f"Found columns: {sorted(actual_cols)}"
            )

        for i, raw in enumerate(reader):
            line_no = i + 2  # 1-based, skip header row
            row = {(k or "").strip(): (v or "") for k, v in raw.items()}
            record = _row_to_record(row)
            if record is None:
                result.skipped += 1
                result.skipped_lines.append(line_no)
                logger.debug("Skipping row %d of %s: %r", line_no, path.name, row.get("Name"))
                continue
            result.records.append(record)

    logger.info(
        "Loaded %d records from %s (%d rows skipped)",
        len(result.records), path.name, result.skipped,
    )
    return result


def load_games(path: Path) -> list[GameRecord]:
    """Shortcut for callers that only need the records."""
    return load_games_csv(path).records


# ── Private helpers ────────────────────────────────────────────────────────────

def _row_to_record(row: dict[str, str]) -> Optional[GameRecord]:
    """Convert a CSV row to a record, or ``None`` if the row must be skipped."""
    name = row.get("Name", "").strip()
    platform = row.get("Platform", "").strip()
    if not name or not platform:
        return None

    sales = {col.lower(): _parse_float(row, col) or 0.0 for col in SALES_COLUMNS}
    try:
        return GameRecord(
            name=name,
            platform=platform,
            genre=row.get("Genre"),
            publisher=row.get("Publisher"),
            year_of_release=_parse_year(row, "Year_of_Release"),
            user_score=_parse_float(row, "User_Score"),
            critic_score=_parse_float(row, "Critic_Score"),
            **sales,
        )
    except ValidationError as exc:
        logger.debug("Row rejected by model: %s", exc.errors()[0].get("msg"))
        return None


def _parse_float(row: dict[str, str], key: str) -> Optional[float]:
    """Parse a float field; blank, non-numeric or non-finite → None."""
    v = row.get(key, "").strip()
    if not v:
        return None
    try:
        parsed = float(v)
    except ValueError:
        return None
    return parsed if math.isfinite(parsed) else None


def _parse_year(row: dict[str, str], key: str) -> Optional[int]:
    """Parse a release year; accepts ``"2006"`` and ``"2006.0"``."""
    parsed = _parse_float(row, key)
    if parsed is None or parsed <= 0:
        return None
    return int(parsed)
