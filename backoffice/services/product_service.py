import logging
from typing import cast

from sqlalchemy import exists, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backoffice.config import Settings, get_settings
from backoffice.core.clock import Clock, SystemClock
from backoffice.core.constants import STOCK_STATUSES, STOCK_UNITS, UNIT_PIECE
from backoffice.core.stock_rules import stock_status
from backoffice.exceptions import (
    BackofficeError,
    PersistenceFailure,
    ProductInUse,
    ProductNotFound,
    ValidationError,
)
from backoffice.models.product import Product
from backoffice.models.sale import Sale
from backoffice.models.stock_movement import StockMovement
from backoffice.services.persistence import commit_or_fail
from backoffice.services.stock_service import adjust_balance

logger = logging.getLogger(__name__)

_EDITABLE_FIELDS = ("name", "category", "brand", "supplier", "price")
_CLEARABLE_FIELDS = ("brand",)


def _clean_text(value):
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _validate_price(price):
    if price is None:
        return None
    price = float(price)
    if price < 0:
        raise ValidationError("price must be non-negative.")
    return price


def get_product(db: Session, product_id: int) -> Product:
    product = db.execute(select(Product).where(Product.id == product_id)).scalars().first()
    if not product:
        raise ProductNotFound(product_id)
    return product


def list_products(db: Session, unit: str | None = None, status: str | None = None) -> list[Product]:
    stmt = select(Product)
    if unit:
        if unit not in STOCK_UNITS:
            raise ValidationError("unit must be one of: {}".format(", ".join(STOCK_UNITS)))
        stmt = stmt.where(Product.unit == unit)
    if status:
        if status not in STOCK_STATUSES:
            raise ValidationError("status must be one of: {}".format(", ".join(STOCK_STATUSES)))
        stmt = stmt.where(Product.status == status)
    products = db.execute(stmt.order_by(Product.last_updated.desc(), Product.id.desc())).scalars().all()
    return cast(list[Product], list(products))


def create_product(
    db: Session,
    *,
    name,
    category,
    price,
    stock=0,
    unit=UNIT_PIECE,
    brand=None,
    supplier=None,
    clock: Clock | None = None,
    settings: Settings | None = None,
) -> Product:
    settings = settings or get_settings()
    clock = clock or SystemClock()

    missing = []
    name = _clean_text(name)
    category = _clean_text(category)
    if name is None:
        missing.append("name")
    if category is None:
        missing.append("category")
    if price is None:
        missing.append("price")
    if missing:
        raise ValidationError("Missing required fields: {}".format(", ".join(missing)))
    if unit not in STOCK_UNITS:
        raise ValidationError("unit must be one of: {}".format(", ".join(STOCK_UNITS)))
    if isinstance(stock, bool) or not isinstance(stock, int) or stock < 0:
        raise ValidationError("stock must be a non-negative whole number.")

    now = clock.now()
    product = Product(
        name=name,
        category=category,
        brand=_clean_text(brand),
        supplier=_clean_text(supplier) or settings.DEFAULT_SUPPLIER,
        unit=unit,
        price=_validate_price(price),
        stock=stock,
        opening_stock=stock,
        status=stock_status(stock, unit, settings),
        created_at=now,
        last_updated=now,
    )
    db.add(product)
    commit_or_fail(db, "create product")
    db.refresh(product)
    logger.info("Product %s created (%s, opening stock %s %s)", product.id, product.name, stock, unit)
    return product


def update_product(
    db: Session,
    product_id: int,
    changes: dict,
    *,
    clock: Clock | None = None,
    settings: Settings | None = None,
) -> Product:
    """Apply a partial edit.

    A new ``stock`` figure is booked as an adjustment movement in the same
    transaction; ``status`` is always recomputed, never taken from input.
    """
    settings = settings or get_settings()
    clock = clock or SystemClock()

    # brand is the only field an explicit null clears
    fields = {
        key: value
        for key, value in changes.items()
        if value is not None or key in _CLEARABLE_FIELDS
    }
    target_stock = fields.pop("stock", None)
    fields = {key: value for key, value in fields.items() if key in _EDITABLE_FIELDS}
    if not fields and target_stock is None:
        raise ValidationError("No valid fields to update.")

    product = get_product(db, product_id)
    now = clock.now()
    try:
        for key, value in fields.items():
            if key == "price":
                value = _validate_price(value)
            elif key in ("name", "category"):
                value = _clean_text(value)
                if value is None:
                    raise ValidationError("{} cannot be blank.".format(key))
            elif key == "supplier":
                value = _clean_text(value) or settings.DEFAULT_SUPPLIER
            else:
                value = _clean_text(value)
            setattr(product, key, value)
        product.last_updated = now
        db.flush()

        if target_stock is not None:
            adjust_balance(db, product_id, target_stock, now=now, settings=settings)
    except BackofficeError:
        db.rollback()
        raise
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("update product %s failed; transaction rolled back", product_id)
        raise PersistenceFailure() from exc

    commit_or_fail(db, "update product")
    db.refresh(product)
    logger.info("Product %s updated (%s)", product_id, ", ".join(sorted(changes)))
    return product


def delete_product(db: Session, product_id: int) -> None:
    product = get_product(db, product_id)
    has_sales = db.execute(select(exists().where(Sale.product_id == product_id))).scalar()
    has_movements = db.execute(
        select(exists().where(StockMovement.product_id == product_id))
    ).scalar()
    if has_sales or has_movements:
        raise ProductInUse(product_id)

    db.delete(product)
    commit_or_fail(db, "delete product")
    logger.info("Product %s deleted", product_id)


__all__ = [
    "create_product",
    "delete_product",
    "get_product",
    "list_products",
    "update_product",
]
