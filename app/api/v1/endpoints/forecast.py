from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Path, Query
from sqlalchemy.orm import Session

from app.api.deps import get_current_user_id
from app.core.config import get_default_smoothing_alpha
from app.core.db import get_db
from app.core.errors import DomainError
from app.schemas.forecast import ForecastResponse
from app.services.demand_forecast import generate_forecast


router = APIRouter()


@router.get("/generate/{business_id}", response_model=ForecastResponse)
def get_demand_forecast(
    business_id: int = Path(..., ge=1),
    alpha: float | None = Query(None, gt=0, lt=1, description="Smoothing factor"),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> ForecastResponse:
    """Next-month demand forecast per product, sorted by forecast units."""

    if alpha is None:
        alpha = get_default_smoothing_alpha()

    try:
        return generate_forecast(db=db, business_id=business_id, user_id=user_id, alpha=alpha)
    except DomainError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.message) from exc
