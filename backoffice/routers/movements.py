from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from backoffice.dependencies import get_db
from backoffice.schemas.movement import MovementRead
from backoffice.services.report_service import list_movements

router = APIRouter(prefix="/movements", tags=["Stock Movements"])


@router.get("", response_model=List[MovementRead])
def stock_movements(
    year: Optional[int] = Query(None, ge=1, le=9999),
    month: Optional[int] = Query(None, ge=1, le=12),
    product_id: Optional[int] = Query(None),
    exclude_sales: bool = Query(False, description="Hide OUT movements written by sales"),
    limit: int = Query(500, ge=1, le=5000, description="Max records to return"),
    db: Session = Depends(get_db),
):
    return list_movements(
        db,
        year=year,
        month=month,
        product_id=product_id,
        exclude_sales=exclude_sales,
        limit=limit,
    )


__all__ = ["router"]
