from __future__ import annotations

from pydantic import BaseModel, Field


class ProductForecast(BaseModel):
    product_id: str
    product_name: str
    demand_forecast_units: int = Field(..., ge=0)
    confidence_score: float = Field(..., ge=0.5, le=0.95)


class BusinessSummary(BaseModel):
    id: int
    name: str


class ForecastResponse(BaseModel):
    success: bool = True
    business: BusinessSummary
    forecast: list[ProductForecast]
    skipped_lines: int = 0
