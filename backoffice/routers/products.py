from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from backoffice.core.clock import Clock
from backoffice.dependencies import get_clock, get_coordinator, get_db
from backoffice.schemas.movement import StockChange
from backoffice.schemas.product import ProductCreate, ProductRead, ProductUpdate, StockLevelRead
from backoffice.services import product_service
from backoffice.services.stock_service import StockCoordinator

router = APIRouter(prefix="/products", tags=["Products"])


@router.get("", response_model=List[ProductRead])
def list_products(
    unit: Optional[str] = Query(None, description="unit or ml"),
    status_filter: Optional[str] = Query(None, alias="status", description="In Stock, Low Stock or Out of Stock"),
    db: Session = Depends(get_db),
):
    return product_service.list_products(db, unit=unit, status=status_filter)


@router.post("", response_model=ProductRead, status_code=status.HTTP_201_CREATED)
def create_product(
    payload: ProductCreate,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    return product_service.create_product(db, **payload.model_dump(), clock=clock)


@router.get("/{product_id}", response_model=ProductRead)
def get_product(product_id: int, db: Session = Depends(get_db)):
    return product_service.get_product(db, product_id)


@router.patch("/{product_id}", response_model=ProductRead)
def update_product(
    product_id: int,
    payload: ProductUpdate,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    return product_service.update_product(
        db,
        product_id,
        payload.model_dump(exclude_unset=True),
        clock=clock,
    )


@router.delete("/{product_id}")
def delete_product(product_id: int, db: Session = Depends(get_db)):
    product_service.delete_product(db, product_id)
    return {"status": "deleted", "id": product_id}


@router.get("/{product_id}/stock", response_model=StockLevelRead)
def get_stock(product_id: int, coordinator: StockCoordinator = Depends(get_coordinator)):
    return StockLevelRead.model_validate(coordinator.get_current_stock(product_id))


@router.post("/{product_id}/stock-in", response_model=StockLevelRead, status_code=status.HTTP_201_CREATED)
def stock_in(
    product_id: int,
    payload: StockChange,
    coordinator: StockCoordinator = Depends(get_coordinator),
):
    level = coordinator.record_stock_in(product_id, payload.quantity)
    return StockLevelRead.model_validate(level)


@router.post("/{product_id}/stock-out", response_model=StockLevelRead, status_code=status.HTTP_201_CREATED)
def stock_out(
    product_id: int,
    payload: StockChange,
    coordinator: StockCoordinator = Depends(get_coordinator),
):
    level = coordinator.record_stock_out(product_id, payload.quantity)
    return StockLevelRead.model_validate(level)


__all__ = ["router"]
