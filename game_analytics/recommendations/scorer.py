"""
Recommendation scoring: pure functions, no state and no I/O.

Content score (user with a preference profile)
----------------------------------------------
    score = 3 * genre_weight(record.genre)
          + 2 * platform_weight(record.platform)
          + 0.5 * user_score                 # only when the title has one
          + 2 * ln(global_sales + 1)         # popularity, diminishing

Similarity between two titles (0–1)
-----------------------------------
    +0.4  same genre
    +0.2  same platform
    +0.1  same publisher (both known)
    +max(0, 0.2 - 0.02 * |year_a - year_b|)     both years known
    +max(0, 0.1 - 0.01 * |score_a - score_b|)   both user scores known

Popularity (cold start)
-----------------------
    score = 0.7 * global_sales + 0.3 * (user_score or 0)
"""

from __future__ import annotations

import math

from game_analytics.models.record import GameRecord
from game_analytics.models.recommendation import UserPreferenceProfile

HIGH_SCORE_THRESHOLD = 8.0
BEST_SELLER_THRESHOLD = 5.0
REASON_SEPARATOR = " · "


def content_score(record: GameRecord, profile: UserPreferenceProfile) -> float:
    """Preference-weighted score of ``record`` for the owner of ``profile``."""
    score = 3.0 * profile.genre_weight(record.genre)
    score += 2.0 * profile.platform_weight(record.platform)
    if record.user_score is not None:
        score += 0.5 * record.user_score
    score += 2.0 * math.log(record.global_sales + 1.0)
    return score


def similarity(a: GameRecord, b: GameRecord) -> float:
    """Attribute overlap between two titles, 0–1."""
    total = 0.0
    if a.genre == b.genre:
        total += 0.4
    if a.platform == b.platform:
        total += 0.2
    if a.publisher and b.publisher and a.publisher == b.publisher:
        total += 0.1
    if a.year_of_release is not None and b.year_of_release is not None:
        year_diff = abs(a.year_of_release - b.year_of_release)
        total += max(0.0, 0.2 - year_diff * 0.02)
    if a.user_score is not None and b.user_score is not None:
        score_diff = abs(a.user_score - b.user_score)
        total += max(0.0, 0.1 - score_diff * 0.01)
    return total


def popularity_score(record: GameRecord) -> float:
    return 0.7 * record.global_sales + 0.3 * (record.user_score or 0.0)


def build_content_reason(record: GameRecord, profile: UserPreferenceProfile) -> str:
    """Explain a content recommendation, e.g. ``"You like RPG · PS4 platform"``."""
    reasons: list[str] = []
    if profile.genre_weight(record.genre) > 0:
        reasons.append(f"You like {record.genre}")
    if profile.platform_weight(record.platform) > 0:
        reasons.append(f"{record.platform} platform")
    if record.user_score is not None and record.user_score >= HIGH_SCORE_THRESHOLD:
        reasons.append("Highly rated")
    if record.global_sales > BEST_SELLER_THRESHOLD:
        reasons.append("Best seller")
    return REASON_SEPARATOR.join(reasons) or "Recommended for you"


def build_similarity_reason(a: GameRecord, b: GameRecord) -> str:
    """List the attributes two titles share."""
    reasons: list[str] = []
    if a.genre == b.genre:
        reasons.append("Same genre")
    if a.platform == b.platform:
        reasons.append("Same platform")
    if a.publisher and b.publisher and a.publisher == b.publisher:
        reasons.append("Same publisher")
    return REASON_SEPARATOR.join(reasons) or "Similar era and reception"
