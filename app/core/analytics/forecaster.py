from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Sequence

from app.core.analytics.domain import MonthlySeriesPoint, SmoothingForecast


DEFAULT_SMOOTHING_ALPHA = 0.3

MIN_CONFIDENCE = 0.5
MAX_CONFIDENCE = 0.95
CV_PENALTY = 0.35


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _round_confidence(value: float) -> float:
    return float(Decimal(value).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def smoothed_level(values: Sequence[float], alpha: float = DEFAULT_SMOOTHING_ALPHA) -> float:
    """Simple exponential smoothing seeded with the first observation."""

    level = values[0]
    for y in values[1:]:
        level = alpha * y + (1 - alpha) * level
    return level


def confidence_score(values: Sequence[float]) -> float:
    """Heuristic confidence in [0.5, 0.95] that decreases with the coefficient of variation.

    Uses the sample variance (n - 1 divisor, 1 for a single value). A zero
    mean, or a dispersion that cannot be computed, is treated as maximal
    uncertainty.
    """

    n = len(values)
    mean = sum(values) / n
    variance = sum((v - mean) * (v - mean) for v in values) / max(n - 1, 1)
    std = math.sqrt(variance)
    cv = std / mean if mean != 0 else 1.0
    if math.isnan(cv):
        cv = 1.0

    confidence = max(MIN_CONFIDENCE, min(MAX_CONFIDENCE, MAX_CONFIDENCE - CV_PENALTY * cv))
    return _round_confidence(confidence)


def forecast_next(
    series: Sequence[MonthlySeriesPoint],
    alpha: float = DEFAULT_SMOOTHING_ALPHA,
) -> SmoothingForecast:
    """Forecast next month's units for a single product from its monthly series."""

    if not series:
        return SmoothingForecast(forecast=0, confidence=MIN_CONFIDENCE)

    values = [point.estimated_units for point in series]
    level = smoothed_level(values, alpha)
    # Overflowed or undefined levels carry no usable demand signal.
    forecast = max(0, _round_half_up(level)) if math.isfinite(level) else 0

    return SmoothingForecast(
        forecast=forecast,
        confidence=confidence_score(values),
    )
