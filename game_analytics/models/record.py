"""
Game record model — one title's sales and rating facts on one platform.

Sales figures are in millions of units. Scores keep ``None`` as the
"no opinion" value, distinct from a true zero: averages skip ``None`` and
score math never coerces it to 0.

The model is frozen. The record collection is loaded once and shared
read-only by every engine.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

UNKNOWN_GENRE = "Unknown"


class GameRecord(BaseModel):
    """A single title/platform row.

    Attributes:
        name: Title name (required, non-blank).
        platform: Platform code, e.g. ``"PS4"`` (required, non-blank).
        genre: Genre; blank or missing → ``"Unknown"``.
        publisher: Publisher name, or ``None``.
        year_of_release: Release year, or ``None`` when unknown.
        na_sales: North America sales (millions).
        eu_sales: Europe sales (millions).
        jp_sales: Japan sales (millions).
        other_sales: Rest-of-world sales (millions).
        global_sales: Worldwide sales (millions).
        user_score: User score on a 0–10 scale, or ``None``.
        critic_score: Critic score on a 0–100 scale, or ``None``.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    platform: str
    genre: str = UNKNOWN_GENRE
    publisher: Optional[str] = None
    year_of_release: Optional[int] = None
    na_sales: float = 0.0
    eu_sales: float = 0.0
    jp_sales: float = 0.0
    other_sales: float = 0.0
    global_sales: float = 0.0
    user_score: Optional[float] = None
    critic_score: Optional[float] = None

    @field_validator("name", "platform")
    @classmethod
    def validate_required_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name and platform must be non-empty.")
        return v

    @field_validator("genre", mode="before")
    @classmethod
    def default_blank_genre(cls, v: Optional[str]) -> str:
        if v is None or not str(v).strip():
            return UNKNOWN_GENRE
        return str(v).strip()

    @field_validator("publisher", mode="before")
    @classmethod
    def blank_publisher_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not str(v).strip():
            return None
        return str(v).strip()

    @field_validator("na_sales", "eu_sales", "jp_sales", "other_sales", "global_sales")
    @classmethod
    def validate_sales_non_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError("Sales figures must be non-negative.")
        return v
