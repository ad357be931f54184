"""
Yearly sales trend: ordinary least squares and a next-year forecast.

    slope     = (n*Σxy - Σx*Σy) / (n*Σx² - (Σx)²)
    intercept = (Σy - slope*Σx) / n

With one data point, or all points in the same year, the denominator is zero
and the slope is defined as 0 (a flat line through the mean).

Confidence is ``max(0, 1 - mean|residual| / mean(y))``, reported as a
percentage; a zero mean or any non-finite intermediate yields 0.
"""

from __future__ import annotations

import math
from typing import Sequence


def linear_regression(xs: Sequence[float], ys: Sequence[float]) -> tuple[float, float]:
    """Fit ``y = slope*x + intercept``.

    Raises:
        ValueError: If the sequences are empty or of different lengths.
    """
    n = len(xs)
    if n == 0 or n != len(ys):
        raise ValueError(f"Need equal-length, non-empty inputs (got {n} and {len(ys)}).")

    sum_x = sum(xs)
    sum_y = sum(ys)
    sum_xy = sum(x * y for x, y in zip(xs, ys))
    sum_x2 = sum(x * x for x in xs)

    denominator = n * sum_x2 - sum_x * sum_x
    if denominator == 0:
        slope = 0.0
    else:
        slope = (n * sum_xy - sum_x * sum_y) / denominator
    intercept = (sum_y - slope * sum_x) / n
    return slope, intercept


def regression_confidence(
    xs: Sequence[float], ys: Sequence[float], slope: float, intercept: float
) -> float:
    """Fit quality as a percentage 0–100."""
    if not xs:
        return 0.0
    residuals = [abs(y - (slope * x + intercept)) for x, y in zip(xs, ys)]
    mean_error = sum(residuals) / len(residuals)
    mean_value = sum(ys) / len(ys)
    if mean_value == 0:
        return 0.0
    confidence = max(0.0, 1.0 - mean_error / mean_value)
    if not math.isfinite(confidence):
        return 0.0
    return round(confidence * 100.0, 1)
