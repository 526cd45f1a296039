from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.analytics.domain import OrderLineRecord, OrderRecord, ProductInfo
from app.core.analytics.forecaster import DEFAULT_SMOOTHING_ALPHA
from app.core.analytics.service import build_forecast
from app.core.errors import BusinessAccessError, ForecastDataError
from app.models.models import Business, Product, SalesOrder, SalesOrderItem
from app.schemas.forecast import BusinessSummary, ForecastResponse, ProductForecast


logger = logging.getLogger(__name__)


def _get_owned_business(db: Session, business_id: int, user_id: str) -> Business:
    business = (
        db.query(Business)
        .filter(Business.id == business_id, Business.user_id == user_id)
        .first()
    )
    if business is None:
        raise BusinessAccessError("Access denied or business not found")
    return business


def load_orders(db: Session, business_id: int) -> list[OrderRecord]:
    try:
        rows = (
            db.query(SalesOrder.sales_order_id, SalesOrder.order_date)
            .filter(SalesOrder.business_id == business_id)
            .all()
        )
    except SQLAlchemyError as exc:
        logger.exception("Failed to load sales orders for business_id=%s", business_id)
        raise ForecastDataError("Failed to load sales orders") from exc

    return [OrderRecord(order_id=row.sales_order_id, order_date=row.order_date) for row in rows]


def load_order_lines(db: Session, business_id: int) -> list[OrderLineRecord]:
    try:
        rows = (
            db.query(
                SalesOrderItem.sales_order_id,
                SalesOrderItem.product_id,
                SalesOrderItem.line_total,
            )
            .filter(SalesOrderItem.business_id == business_id)
            .all()
        )
    except SQLAlchemyError as exc:
        logger.exception("Failed to load sales order items for business_id=%s", business_id)
        raise ForecastDataError("Failed to load sales order items") from exc

    return [
        OrderLineRecord(
            order_id=row.sales_order_id,
            product_id=row.product_id,
            line_total=row.line_total,
        )
        for row in rows
    ]


def load_products(db: Session, business_id: int, product_ids: set[str]) -> list[ProductInfo]:
    """Load name/price for the given products.

    Names and prices only refine the forecast, so a store error here is
    logged and an empty catalogue is returned instead of failing the request.
    """
    if not product_ids:
        return []

    try:
        rows = (
            db.query(Product.product_id, Product.product_name, Product.selling_price)
            .filter(
                Product.business_id == business_id,
                Product.product_id.in_(sorted(product_ids)),
            )
            .all()
        )
    except SQLAlchemyError:
        logger.warning(
            "Failed to load products for business_id=%s; continuing without names and prices",
            business_id,
            exc_info=True,
        )
        return []

    return [
        ProductInfo(
            product_id=row.product_id,
            product_name=row.product_name,
            unit_price=row.selling_price,
        )
        for row in rows
    ]


def generate_forecast(
    db: Session,
    business_id: int,
    user_id: str,
    alpha: float = DEFAULT_SMOOTHING_ALPHA,
) -> ForecastResponse:
    """Compute next-month demand forecasts for every product a business has sold."""

    business = _get_owned_business(db, business_id, user_id)
    summary = BusinessSummary(id=business.id, name=business.name)

    orders = load_orders(db, business_id)
    lines = load_order_lines(db, business_id)

    if not orders or not lines:
        logger.info(
            "No sales history for business_id=%s (orders=%s, lines=%s)",
            business_id,
            len(orders),
            len(lines),
        )
        return ForecastResponse(business=summary, forecast=[])

    product_ids = {line.product_id for line in lines if line.product_id}
    products = load_products(db, business_id, product_ids)

    run = build_forecast(orders, lines, products, alpha=alpha)

    logger.info(
        "Forecast for business_id=%s: orders=%s, lines=%s, products=%s, forecasts=%s, skipped_lines=%s",
        business_id,
        len(orders),
        len(lines),
        len(products),
        len(run.results),
        run.skipped.total,
    )

    return ForecastResponse(
        business=summary,
        forecast=[
            ProductForecast(
                product_id=r.product_id,
                product_name=r.product_name,
                demand_forecast_units=r.demand_forecast_units,
                confidence_score=r.confidence_score,
            )
            for r in run.results
        ],
        skipped_lines=run.skipped.total,
    )
