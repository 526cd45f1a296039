"""Monthly sales aggregation.

Turns raw order headers, order lines and catalogue prices into one ordered
monthly series of estimated units per product. Bad rows never raise: a line
whose order cannot be found or whose date does not parse is left out of every
series and counted in ``AggregationResult.skipped``.
"""

from __future__ import annotations

import logging
import math
import re
from collections import defaultdict
from datetime import date, datetime
from decimal import Decimal
from typing import Iterable

from dateutil import parser as date_parser

from app.core.analytics.domain import (
    AggregationResult,
    MonthlySeriesPoint,
    OrderDate,
    OrderLineRecord,
    OrderRecord,
    ProductInfo,
    SkippedLines,
)


logger = logging.getLogger(__name__)

ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}")

# Two defaults that differ in year and month expose strings lacking either.
_DEFAULT_A = datetime(2000, 1, 1)
_DEFAULT_B = datetime(2001, 2, 2)


def _parse_free_form(raw: str) -> datetime | None:
    try:
        first = date_parser.parse(raw, default=_DEFAULT_A, ignoretz=True)
        second = date_parser.parse(raw, default=_DEFAULT_B, ignoretz=True)
    except (ValueError, OverflowError):
        return None

    if (first.year, first.month) != (second.year, second.month):
        return None
    return first


def month_key(value: OrderDate) -> str | None:
    """Return the ``YYYY-MM`` key for a date-like value, or None if it does not parse.

    ISO-8601 strings are parsed strictly, so ``2024-13-01`` or ``2024-02-30``
    are rejected. Other spreadsheet formats (``2024/03/05``, ``03/05/2024``
    read month first, ``March 5, 2024``) must carry both a year and a month.
    """

    if isinstance(value, (datetime, date)):
        return f"{value.year}-{value.month:02d}"

    if not isinstance(value, str):
        return None

    raw = value.strip()
    if not raw:
        return None

    if ISO_DATE_RE.match(raw):
        try:
            parsed = datetime.fromisoformat(raw)
        except ValueError:
            return None
    else:
        parsed = _parse_free_form(raw)
        if parsed is None:
            return None

    return f"{parsed.year}-{parsed.month:02d}"


def to_number(value: object) -> float:
    """Coerce a stored amount to float; missing, non-numeric and non-finite values become 0."""

    if value is None or isinstance(value, bool):
        return 0.0

    if isinstance(value, (int, float, Decimal)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return 0.0
    else:
        return 0.0

    return number if math.isfinite(number) else 0.0


def estimate_units(line_total: object, unit_price: object) -> float:
    """Estimate units sold on a line from its revenue.

    Without a usable price the line counts as exactly one unit.
    """

    price = to_number(unit_price)
    if price > 0:
        return max(0.0, to_number(line_total) / price)
    return 1.0


def aggregate_sales(
    orders: Iterable[OrderRecord],
    lines: Iterable[OrderLineRecord],
    products: Iterable[ProductInfo],
) -> AggregationResult:
    """Group order lines into per-product monthly unit series sorted by month."""

    order_dates: dict[str, OrderDate] = {}
    for order in orders:
        order_dates[order.order_id] = order.order_date

    prices: dict[str, object] = {p.product_id: p.unit_price for p in products}

    buckets: dict[str, dict[str, float]] = defaultdict(lambda: defaultdict(float))
    skipped = SkippedLines()

    for line in lines:
        order_date = order_dates.get(line.order_id)
        if order_date is None or order_date == "":
            skipped.missing_order += 1
            continue

        key = month_key(order_date)
        if key is None:
            skipped.malformed_date += 1
            continue

        if not line.product_id:
            skipped.missing_product_id += 1
            continue

        units = estimate_units(line.line_total, prices.get(line.product_id))
        buckets[line.product_id][key] += units

    series = {
        product_id: tuple(
            MonthlySeriesPoint(month_key=key, estimated_units=months[key])
            for key in sorted(months)
        )
        for product_id, months in buckets.items()
    }

    if skipped.total:
        logger.info(
            "Skipped %s order lines during aggregation "
            "(missing_order=%s, malformed_date=%s, missing_product_id=%s)",
            skipped.total,
            skipped.missing_order,
            skipped.malformed_date,
            skipped.missing_product_id,
        )

    return AggregationResult(series=series, skipped=skipped)
