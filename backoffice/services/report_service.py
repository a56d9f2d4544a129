from datetime import date

from sqlalchemy import case, extract, func, select
from sqlalchemy.orm import Session

from backoffice.core.constants import (
    ML_PRICE_BASIS,
    MOVEMENT_IN,
    MOVEMENT_OUT,
    REASON_SALE,
    UNIT_ML,
    UNKNOWN_PRODUCT_NAME,
)
from backoffice.core.dates import days_in_month, month_bounds, month_name
from backoffice.exceptions import ValidationError
from backoffice.models.product import Product
from backoffice.models.sale import Sale
from backoffice.models.stock_movement import StockMovement


def validate_period(year, month=None):
    if year is None or not 1 <= int(year) <= 9999:
        raise ValidationError("A valid year is required.")
    if month is not None and not 1 <= int(month) <= 12:
        raise ValidationError("month must be between 1 and 12.")
    return int(year), (int(month) if month is not None else None)


def monthly_sales_totals(db: Session, year: int):
    year, _ = validate_period(year)
    start, end = month_bounds(year)
    month_col = extract("month", Sale.sale_date)
    rows = db.execute(
        select(month_col.label("month"), func.sum(Sale.total).label("total"))
        .where(Sale.sale_date >= start, Sale.sale_date < end)
        .group_by(month_col)
        .order_by(month_col)
    ).all()
    return [
        {
            "month": int(row.month),
            "month_name": month_name(int(row.month)),
            "total": round(float(row.total or 0), 2),
        }
        for row in rows
    ]


def total_stock_worth(db: Session) -> float:
    worth = case(
        (Product.unit == UNIT_ML, Product.price * Product.stock / ML_PRICE_BASIS),
        else_=Product.price * Product.stock,
    )
    total = db.execute(select(func.coalesce(func.sum(worth), 0.0))).scalar_one()
    return round(float(total), 2)


def daily_sales(db: Session, year: int, month: int):
    year, month = validate_period(year, month)
    start, end = month_bounds(year, month)
    day_col = extract("day", Sale.sale_date)
    rows = db.execute(
        select(
            day_col.label("day"),
            func.sum(Sale.total).label("total"),
            func.count(Sale.id).label("transactions"),
        )
        .where(Sale.sale_date >= start, Sale.sale_date < end)
        .group_by(day_col)
    ).all()
    by_day = {int(row.day): row for row in rows}

    calendar_days = []
    for day in range(1, days_in_month(year, month) + 1):
        row = by_day.get(day)
        calendar_days.append(
            {
                "day": day,
                "date": date(year, month, day),
                "total": round(float(row.total), 2) if row else 0.0,
                "transactions": row.transactions if row else 0,
            }
        )
    return calendar_days


def accounting_summary(db: Session, year: int, month: int | None = None):
    year, month = validate_period(year, month)
    start, end = month_bounds(year, month)

    revenue, sale_count, units_sold = db.execute(
        select(
            func.coalesce(func.sum(Sale.total), 0.0),
            func.count(Sale.id),
            func.coalesce(func.sum(Sale.quantity), 0),
        ).where(Sale.sale_date >= start, Sale.sale_date < end)
    ).one()

    movement_rows = db.execute(
        select(
            StockMovement.movement_type,
            func.count(StockMovement.id).label("movements"),
            func.coalesce(func.sum(StockMovement.quantity), 0).label("quantity"),
        )
        .where(StockMovement.moved_at >= start, StockMovement.moved_at < end)
        .group_by(StockMovement.movement_type)
    ).all()
    movements = {row.movement_type: row for row in movement_rows}
    incoming = movements.get(MOVEMENT_IN)
    outgoing = movements.get(MOVEMENT_OUT)

    return {
        "year": year,
        "month": month,
        "revenue": round(float(revenue), 2),
        "sale_count": sale_count,
        "quantity_sold": int(units_sold),
        "quantity_received": int(incoming.quantity) if incoming else 0,
        "quantity_withdrawn": int(outgoing.quantity) if outgoing else 0,
        "movements_in": incoming.movements if incoming else 0,
        "movements_out": outgoing.movements if outgoing else 0,
        "stock_worth": total_stock_worth(db),
    }


def list_movements(
    db: Session,
    year: int | None = None,
    month: int | None = None,
    product_id: int | None = None,
    exclude_sales: bool = False,
    limit: int = 500,
):
    stmt = (
        select(StockMovement, Product.name.label("product_name"))
        .outerjoin(Product, Product.id == StockMovement.product_id)
    )
    if year is not None:
        year, month = validate_period(year, month)
        start, end = month_bounds(year, month)
        stmt = stmt.where(StockMovement.moved_at >= start, StockMovement.moved_at < end)
    elif month is not None:
        raise ValidationError("month filter requires a year.")
    if product_id is not None:
        stmt = stmt.where(StockMovement.product_id == product_id)
    if exclude_sales:
        stmt = stmt.where(StockMovement.reason != REASON_SALE)
    stmt = stmt.order_by(StockMovement.moved_at.desc(), StockMovement.id.desc()).limit(limit)

    results = []
    for row in db.execute(stmt).all():
        movement = row.StockMovement
        results.append(
            {
                "id": movement.id,
                "product_id": movement.product_id,
                "product_name": row.product_name or UNKNOWN_PRODUCT_NAME,
                "quantity": movement.quantity,
                "movement_type": movement.movement_type,
                "reason": movement.reason,
                "reference": movement.reference,
                "moved_at": movement.moved_at,
            }
        )
    return results


__all__ = [
    "accounting_summary",
    "daily_sales",
    "list_movements",
    "monthly_sales_totals",
    "total_stock_worth",
    "validate_period",
]
