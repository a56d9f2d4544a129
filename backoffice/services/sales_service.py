import logging
from datetime import datetime, time, timedelta, timezone

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from backoffice.core.clock import Clock, SystemClock
from backoffice.core.constants import UNKNOWN_PRODUCT_NAME
from backoffice.exceptions import SaleNotFound
from backoffice.models.product import Product
from backoffice.models.sale import Sale
from backoffice.services.persistence import commit_or_fail

logger = logging.getLogger(__name__)


def _sale_row_to_dict(row):
    sale = row.Sale
    return {
        "id": sale.id,
        "product_id": sale.product_id,
        "product_name": row.product_name or UNKNOWN_PRODUCT_NAME,
        "quantity": sale.quantity,
        "unit_price": float(sale.unit_price),
        "total": float(sale.total),
        "bottle_size": sale.bottle_size,
        "sale_date": sale.sale_date,
    }


def list_sales(db: Session, product_id: int | None = None, start=None, end=None, limit: int | None = None):
    stmt = (
        select(Sale, Product.name.label("product_name"))
        .outerjoin(Product, Product.id == Sale.product_id)
    )
    if product_id is not None:
        stmt = stmt.where(Sale.product_id == product_id)
    if start is not None:
        stmt = stmt.where(Sale.sale_date >= start)
    if end is not None:
        stmt = stmt.where(Sale.sale_date < end)
    stmt = stmt.order_by(Sale.sale_date.desc(), Sale.id.desc())
    if limit:
        stmt = stmt.limit(limit)
    return [_sale_row_to_dict(row) for row in db.execute(stmt).all()]


def delete_sale(db: Session, sale_id: int) -> None:
    """Remove a sale row.

    Stock is not restored and the sale's OUT movement stays in the ledger.
    """
    sale = db.get(Sale, sale_id)
    if sale is None:
        raise SaleNotFound(sale_id)
    db.delete(sale)
    commit_or_fail(db, "delete sale")
    logger.info("Sale %s deleted (product %s, qty %s); stock left unchanged", sale_id, sale.product_id, sale.quantity)


def sales_summary(db: Session, today=None, clock: Clock | None = None):
    if today is None:
        today = (clock or SystemClock()).now().date()
    day_start = datetime.combine(today, time.min, tzinfo=timezone.utc)
    day_end = day_start + timedelta(days=1)

    total_sales, sale_count = db.execute(
        select(func.coalesce(func.sum(Sale.total), 0.0), func.count(Sale.id))
    ).one()
    today_sales = db.execute(
        select(func.coalesce(func.sum(Sale.total), 0.0)).where(
            Sale.sale_date >= day_start,
            Sale.sale_date < day_end,
        )
    ).scalar_one()

    total_sales = float(total_sales)
    return {
        "total_sales": round(total_sales, 2),
        "today_sales": round(float(today_sales), 2),
        "sale_count": sale_count,
        "average_order_value": round(total_sales / (sale_count or 1), 2),
    }


__all__ = ["delete_sale", "list_sales", "sales_summary"]
