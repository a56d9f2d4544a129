from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from backoffice.core.clock import Clock
from backoffice.dependencies import get_clock, get_coordinator, get_db
from backoffice.schemas.sale import (
    BottleSaleCreate,
    SaleCreate,
    SaleRead,
    SaleReceiptRead,
    SalesSummary,
)
from backoffice.services import export_service, sales_service
from backoffice.services.stock_service import StockCoordinator

router = APIRouter(prefix="/sales", tags=["Sales"])


@router.get("", response_model=List[SaleRead])
def list_sales(
    product_id: Optional[int] = Query(None, description="Only sales of this product"),
    db: Session = Depends(get_db),
):
    return sales_service.list_sales(db, product_id=product_id)


@router.post("", response_model=SaleReceiptRead, status_code=status.HTTP_201_CREATED)
def create_sale(payload: SaleCreate, coordinator: StockCoordinator = Depends(get_coordinator)):
    receipt = coordinator.record_sale(
        payload.product_id,
        payload.quantity,
        unit_price=payload.unit_price,
        total=payload.total,
        sale_date=payload.sale_date,
    )
    return SaleReceiptRead.model_validate(receipt)


@router.post("/bottle", response_model=SaleReceiptRead, status_code=status.HTTP_201_CREATED)
def create_bottle_sale(payload: BottleSaleCreate, coordinator: StockCoordinator = Depends(get_coordinator)):
    receipt = coordinator.record_bottle_sale(
        payload.product_id,
        payload.bottle_size,
        payload.bottles,
        sale_date=payload.sale_date,
    )
    return SaleReceiptRead.model_validate(receipt)


@router.get("/summary", response_model=SalesSummary)
def sales_summary(db: Session = Depends(get_db), clock: Clock = Depends(get_clock)):
    return sales_service.sales_summary(db, clock=clock)


@router.get("/export")
def export_sales(
    year: Optional[int] = Query(None, ge=1, le=9999, description="Limit the export to one year"),
    db: Session = Depends(get_db),
):
    workbook = export_service.build_sales_workbook(db, year=year)
    filename = "sales-{}.xlsx".format(year) if year else "sales.xlsx"
    return Response(
        content=export_service.workbook_bytes(workbook),
        media_type=export_service.XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": 'attachment; filename="{}"'.format(filename)},
    )


@router.delete("/{sale_id}")
def delete_sale(sale_id: int, db: Session = Depends(get_db)):
    sales_service.delete_sale(db, sale_id)
    return {"status": "deleted", "id": sale_id}


__all__ = ["router"]
