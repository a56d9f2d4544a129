"""Point reads and balance updates for product stock.

``apply_delta`` is the only writer of ``Product.stock``. It must run inside a
transaction that also appends the matching ``StockMovement``.
"""

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import case, func, select, update
from sqlalchemy.orm import Session

from backoffice.config import Settings, get_settings
from backoffice.core.constants import (
    MOVEMENT_IN,
    STATUS_IN_STOCK,
    STATUS_LOW_STOCK,
    STATUS_OUT_OF_STOCK,
    UNIT_ML,
)
from backoffice.exceptions import InsufficientStock, ProductNotFound
from backoffice.models.product import Product
from backoffice.models.stock_movement import StockMovement


@dataclass(frozen=True)
class StockLevel:
    product_id: int
    quantity: int
    status: str
    unit: str


def get_stock_level(db: Session, product_id: int) -> StockLevel:
    row = db.execute(
        select(Product.stock, Product.status, Product.unit).where(Product.id == product_id)
    ).first()
    if row is None:
        raise ProductNotFound(product_id)
    return StockLevel(
        product_id=product_id,
        quantity=row.stock,
        status=row.status,
        unit=row.unit,
    )


def get_stock(db: Session, product_id: int) -> int:
    return get_stock_level(db, product_id).quantity


def _status_expression(new_stock, settings: Settings):
    threshold = case(
        (Product.unit == UNIT_ML, settings.LOW_STOCK_ML),
        else_=settings.LOW_STOCK_UNITS,
    )
    return case(
        (new_stock <= 0, STATUS_OUT_OF_STOCK),
        (new_stock <= threshold, STATUS_LOW_STOCK),
        else_=STATUS_IN_STOCK,
    )


def apply_delta(
    db: Session,
    product_id: int,
    signed_quantity: int,
    *,
    now: datetime,
    settings: Settings | None = None,
) -> int:
    """Add ``signed_quantity`` to the balance and recompute its status.

    The guard ``stock + delta >= 0`` lives in the UPDATE itself, so two
    withdrawals racing on the same row cannot both succeed past zero.
    """
    settings = settings or get_settings()
    new_stock = Product.stock + signed_quantity
    stmt = (
        update(Product)
        .where(Product.id == product_id, new_stock >= 0)
        .values(
            stock=new_stock,
            status=_status_expression(new_stock, settings),
            last_updated=now,
        )
        .execution_options(synchronize_session=False)
    )
    result = db.execute(stmt)
    if result.rowcount == 0:
        current = db.execute(
            select(Product.stock).where(Product.id == product_id)
        ).scalar_one_or_none()
        if current is None:
            raise ProductNotFound(product_id)
        raise InsufficientStock(product_id, abs(signed_quantity), current)

    return db.execute(select(Product.stock).where(Product.id == product_id)).scalar_one()


def find_balance_drift(db: Session) -> list[dict]:
    """Products whose cached stock differs from opening stock plus movements."""
    signed = case(
        (StockMovement.movement_type == MOVEMENT_IN, StockMovement.quantity),
        else_=-StockMovement.quantity,
    )
    movement_totals = (
        select(
            StockMovement.product_id.label("product_id"),
            func.sum(signed).label("net"),
        )
        .group_by(StockMovement.product_id)
        .subquery()
    )
    rows = db.execute(
        select(
            Product.id,
            Product.name,
            Product.stock,
            Product.opening_stock,
            func.coalesce(movement_totals.c.net, 0).label("net"),
        ).outerjoin(movement_totals, movement_totals.c.product_id == Product.id)
    ).all()

    drift = []
    for row in rows:
        expected = row.opening_stock + int(row.net)
        if expected != row.stock:
            drift.append(
                {
                    "product_id": row.id,
                    "name": row.name,
                    "stock": row.stock,
                    "expected": expected,
                }
            )
    return drift


__all__ = ["StockLevel", "apply_delta", "find_balance_drift", "get_stock", "get_stock_level"]
