from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, Tuple, Union


OrderDate = Union[str, date, datetime, None]


@dataclass(frozen=True)
class OrderRecord:
    """A sales order header as read from the store."""

    order_id: str
    """Identifier referenced by order lines."""

    order_date: OrderDate
    """Raw order date; may be missing or malformed."""


@dataclass(frozen=True)
class OrderLineRecord:
    """A single line item of a sales order."""

    order_id: str
    """Identifier of the parent order."""

    product_id: str | None
    """Product sold on this line."""

    line_total: object
    """Monetary amount of the line. Non-numeric values count as 0."""


@dataclass(frozen=True)
class ProductInfo:
    """Catalogue entry used to turn revenue into an estimated unit count."""

    product_id: str
    product_name: str | None = None
    unit_price: object = None


@dataclass(frozen=True)
class MonthlySeriesPoint:
    """Estimated units sold for one product in one calendar month."""

    month_key: str
    """Month encoded as ``YYYY-MM``."""

    estimated_units: float
    """Sum of estimated units over the month, never negative."""


MonthlySeries = Tuple[MonthlySeriesPoint, ...]


@dataclass
class SkippedLines:
    """Counts of order lines excluded from aggregation, by reason."""

    missing_order: int = 0
    malformed_date: int = 0
    missing_product_id: int = 0

    @property
    def total(self) -> int:
        return self.missing_order + self.malformed_date + self.missing_product_id


@dataclass
class AggregationResult:
    series: Dict[str, MonthlySeries] = field(default_factory=dict)
    skipped: SkippedLines = field(default_factory=SkippedLines)


@dataclass(frozen=True)
class SmoothingForecast:
    forecast: int
    confidence: float


@dataclass(frozen=True)
class ForecastResult:
    """One-step-ahead demand forecast for a single product."""

    product_id: str
    product_name: str
    demand_forecast_units: int
    confidence_score: float


@dataclass
class ForecastRun:
    results: list[ForecastResult] = field(default_factory=list)
    skipped: SkippedLines = field(default_factory=SkippedLines)
