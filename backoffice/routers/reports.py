from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from backoffice.config import get_settings
from backoffice.dependencies import get_db
from backoffice.schemas.report import AccountingSummary, DailySales, MonthlySalesTotal, StockWorth
from backoffice.services import report_service

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.get("/monthly-sales", response_model=List[MonthlySalesTotal])
def monthly_sales(
    year: int = Query(..., ge=1, le=9999, description="Calendar year"),
    db: Session = Depends(get_db),
):
    return report_service.monthly_sales_totals(db, year)


@router.get("/stock-worth", response_model=StockWorth)
def stock_worth(db: Session = Depends(get_db)):
    return {
        "total_stock_worth": report_service.total_stock_worth(db),
        "currency": get_settings().CURRENCY,
    }


@router.get("/calendar", response_model=List[DailySales])
def sales_calendar(
    year: int = Query(..., ge=1, le=9999),
    month: int = Query(..., ge=1, le=12),
    db: Session = Depends(get_db),
):
    return report_service.daily_sales(db, year, month)


@router.get("/accounting", response_model=AccountingSummary)
def accounting(
    year: int = Query(..., ge=1, le=9999),
    month: Optional[int] = Query(None, ge=1, le=12),
    db: Session = Depends(get_db),
):
    return report_service.accounting_summary(db, year, month)


__all__ = ["router"]
