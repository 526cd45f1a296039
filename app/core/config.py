from __future__ import annotations

import logging
import os

from app.core.analytics.forecaster import DEFAULT_SMOOTHING_ALPHA


logger = logging.getLogger(__name__)


def get_log_level() -> str:
    return os.getenv("LOG_LEVEL", "INFO").upper()


def get_default_smoothing_alpha() -> float:
    """Default smoothing factor for forecast requests, from FORECAST_SMOOTHING_ALPHA.

    Values that are not a number strictly between 0 and 1 fall back to the
    built-in default.
    """
    raw = os.getenv("FORECAST_SMOOTHING_ALPHA")
    if raw is None or not raw.strip():
        return DEFAULT_SMOOTHING_ALPHA

    try:
        alpha = float(raw)
    except ValueError:
        alpha = -1.0

    if not 0 < alpha < 1:
        logger.warning(
            "Ignoring invalid FORECAST_SMOOTHING_ALPHA=%r; using %s",
            raw,
            DEFAULT_SMOOTHING_ALPHA,
        )
        return DEFAULT_SMOOTHING_ALPHA

    return alpha
