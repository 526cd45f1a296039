"""Forecast assembly over plain records.

Runs the aggregation once, then the forecaster once per product, and returns
the results ordered by forecast units. No I/O happens here; callers fetch the
rows and pass them in.
"""

from __future__ import annotations

from typing import Iterable

from app.core.analytics.aggregator import aggregate_sales
from app.core.analytics.domain import (
    ForecastResult,
    ForecastRun,
    OrderLineRecord,
    OrderRecord,
    ProductInfo,
)
from app.core.analytics.forecaster import DEFAULT_SMOOTHING_ALPHA, forecast_next


def sort_forecasts(results: Iterable[ForecastResult]) -> list[ForecastResult]:
    """Sort descending by forecast units; ties keep their input order."""

    return sorted(results, key=lambda r: r.demand_forecast_units, reverse=True)


def build_forecast(
    orders: Iterable[OrderRecord],
    lines: Iterable[OrderLineRecord],
    products: Iterable[ProductInfo],
    alpha: float = DEFAULT_SMOOTHING_ALPHA,
) -> ForecastRun:
    products = list(products)
    names = {p.product_id: p.product_name for p in products}

    aggregation = aggregate_sales(orders, lines, products)

    results: list[ForecastResult] = []
    for product_id, series in aggregation.series.items():
        prediction = forecast_next(series, alpha)
        results.append(
            ForecastResult(
                product_id=product_id,
                product_name=names.get(product_id) or product_id,
                demand_forecast_units=prediction.forecast,
                confidence_score=prediction.confidence,
            )
        )

    return ForecastRun(results=sort_forecasts(results), skipped=aggregation.skipped)
