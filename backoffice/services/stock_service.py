"""Stock-changing transactions.

``StockCoordinator`` is the only path that changes a product balance. Each
operation validates, then writes the optional sale row, the ledger movement
and the balance update inside one database transaction: either all of them
commit or none do.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backoffice.config import Settings, get_settings
from backoffice.core.clock import Clock, SystemClock
from backoffice.core.constants import (
    BOTTLE_SIZES_ML,
    ML_PRICE_BASIS,
    MOVEMENT_IN,
    MOVEMENT_OUT,
    REASON_ADJUSTMENT,
    REASON_SALE,
    REASON_STOCK_IN,
    REASON_STOCK_OUT,
    UNIT_ML,
)
from backoffice.core.dates import normalize_datetime
from backoffice.exceptions import (
    BackofficeError,
    InsufficientStock,
    PersistenceFailure,
    ProductNotFound,
    ValidationError,
)
from backoffice.models.product import Product
from backoffice.models.sale import Sale
from backoffice.services.ledger_store import StockLevel, apply_delta, get_stock_level
from backoffice.services.movement_recorder import record_movement, require_positive_int

logger = logging.getLogger(__name__)

_MONEY_TOLERANCE = 0.005


@dataclass(frozen=True)
class SaleReceipt:
    sale_id: int
    product_id: int
    quantity: int
    unit_price: float
    total: float
    stock: int
    status: str


def unit_price_for(product: Product) -> float:
    if product.unit == UNIT_ML:
        return product.price / ML_PRICE_BASIS
    return product.price


def _resolve_sale_date(value, clock: Clock):
    if value is None:
        return clock.now()
    resolved = normalize_datetime(value)
    if resolved is None:
        raise ValidationError("sale date is not a valid date.")
    return resolved


def _resolve_total(quantity: int, unit_price: float, total) -> float:
    full_price = unit_price * quantity
    if total is None:
        return round(full_price, 2)
    total = float(total)
    if total < 0:
        raise ValidationError("total must be non-negative.")
    if total > full_price + _MONEY_TOLERANCE:
        raise ValidationError("total cannot exceed unit price times quantity.")
    return round(total, 2)


def _load_product(db: Session, product_id: int) -> Product:
    product = db.execute(select(Product).where(Product.id == product_id)).scalars().first()
    if product is None:
        raise ProductNotFound(product_id)
    return product


def _ensure_available(db: Session, product_id: int, quantity: int) -> StockLevel:
    level = get_stock_level(db, product_id)
    if quantity > level.quantity:
        raise InsufficientStock(product_id, quantity, level.quantity)
    return level


def _log_sale(receipt: SaleReceipt) -> None:
    logger.info(
        "Sale %s recorded: product %s qty %s total %.2f, stock now %s (%s)",
        receipt.sale_id,
        receipt.product_id,
        receipt.quantity,
        receipt.total,
        receipt.stock,
        receipt.status,
        extra={
            "product_id": receipt.product_id,
            "sale_id": receipt.sale_id,
            "quantity": receipt.quantity,
        },
    )


def adjust_balance(
    db: Session,
    product_id: int,
    target_quantity: int,
    *,
    now,
    settings: Settings | None = None,
) -> StockLevel:
    """Move the balance to ``target_quantity`` through one IN or OUT movement.

    Runs inside the caller's transaction; the caller commits.
    """
    if isinstance(target_quantity, bool) or not isinstance(target_quantity, int):
        raise ValidationError("stock must be a whole number.")
    if target_quantity < 0:
        raise ValidationError("stock must be non-negative.")

    current = get_stock_level(db, product_id)
    difference = target_quantity - current.quantity
    if difference == 0:
        return current

    movement_type = MOVEMENT_IN if difference > 0 else MOVEMENT_OUT
    record_movement(
        db,
        product_id,
        abs(difference),
        movement_type,
        now,
        reason=REASON_ADJUSTMENT,
    )
    apply_delta(db, product_id, difference, now=now, settings=settings)
    return get_stock_level(db, product_id)


class StockCoordinator:
    def __init__(self, session_factory, clock: Clock | None = None, settings: Settings | None = None):
        self._session_factory = session_factory
        self._clock = clock or SystemClock()
        self._settings = settings or get_settings()

    @property
    def clock(self) -> Clock:
        return self._clock

    @contextmanager
    def _transaction(self, action: str, product_id):
        db = self._session_factory()
        try:
            with db.begin():
                yield db
        except BackofficeError as exc:
            logger.info(
                "%s rejected for product %s: %s",
                action,
                product_id,
                exc.message,
                extra={"product_id": product_id},
            )
            raise
        except SQLAlchemyError as exc:
            logger.exception(
                "%s rolled back for product %s",
                action,
                product_id,
                extra={"product_id": product_id},
            )
            raise PersistenceFailure() from exc
        finally:
            db.close()

    def get_current_stock(self, product_id: int) -> StockLevel:
        db = self._session_factory()
        try:
            return get_stock_level(db, product_id)
        except SQLAlchemyError as exc:
            raise PersistenceFailure() from exc
        finally:
            db.close()

    def record_sale(
        self,
        product_id: int,
        quantity: int,
        unit_price: float | None = None,
        total: float | None = None,
        sale_date=None,
    ) -> SaleReceipt:
        require_positive_int(quantity, "quantity")
        if unit_price is not None and unit_price <= 0:
            raise ValidationError("unit price must be greater than zero.")
        sold_at = _resolve_sale_date(sale_date, self._clock)

        with self._transaction("sale", product_id) as db:
            product = _load_product(db, product_id)
            _ensure_available(db, product_id, quantity)

            price = float(unit_price) if unit_price is not None else unit_price_for(product)
            charged = _resolve_total(quantity, price, total)
            receipt = self._persist_sale(db, product_id, quantity, price, charged, sold_at)

        _log_sale(receipt)
        return receipt

    def record_bottle_sale(self, product_id: int, bottle_size: str, bottles: int, sale_date=None) -> SaleReceipt:
        require_positive_int(bottles, "bottles")
        if bottle_size not in BOTTLE_SIZES_ML:
            raise ValidationError(
                "bottle size must be one of: {}".format(", ".join(BOTTLE_SIZES_ML))
            )
        sold_at = _resolve_sale_date(sale_date, self._clock)
        quantity_ml = BOTTLE_SIZES_ML[bottle_size] * bottles

        with self._transaction("bottle sale", product_id) as db:
            product = _load_product(db, product_id)
            if product.unit != UNIT_ML:
                raise ValidationError("Bottle sales are only available for products stocked in ml.")
            _ensure_available(db, product_id, quantity_ml)

            price_per_ml = unit_price_for(product)
            charged = round(price_per_ml * quantity_ml, 2)
            receipt = self._persist_sale(
                db,
                product_id,
                quantity_ml,
                price_per_ml,
                charged,
                sold_at,
                bottle_size=bottle_size,
            )

        _log_sale(receipt)
        return receipt

    def _persist_sale(self, db, product_id, quantity, unit_price, total, sold_at, bottle_size=None):
        sale = Sale(
            product_id=product_id,
            quantity=quantity,
            unit_price=unit_price,
            total=total,
            bottle_size=bottle_size,
            sale_date=sold_at,
        )
        db.add(sale)
        db.flush()

        record_movement(
            db,
            product_id,
            quantity,
            MOVEMENT_OUT,
            sold_at,
            reason=REASON_SALE,
            reference="sale:{}".format(sale.id),
        )
        apply_delta(db, product_id, -quantity, now=self._clock.now(), settings=self._settings)
        level = get_stock_level(db, product_id)
        return SaleReceipt(
            sale_id=sale.id,
            product_id=product_id,
            quantity=quantity,
            unit_price=unit_price,
            total=total,
            stock=level.quantity,
            status=level.status,
        )

    def record_stock_in(self, product_id: int, quantity: int) -> StockLevel:
        require_positive_int(quantity, "quantity")
        with self._transaction("stock-in", product_id) as db:
            get_stock_level(db, product_id)
            now = self._clock.now()
            record_movement(db, product_id, quantity, MOVEMENT_IN, now, reason=REASON_STOCK_IN)
            apply_delta(db, product_id, quantity, now=now, settings=self._settings)
            level = get_stock_level(db, product_id)

        logger.info(
            "Stock-in recorded: product %s +%s, stock now %s (%s)",
            product_id,
            quantity,
            level.quantity,
            level.status,
            extra={"product_id": product_id, "movement_type": MOVEMENT_IN, "quantity": quantity},
        )
        return level

    def record_stock_out(self, product_id: int, quantity: int) -> StockLevel:
        require_positive_int(quantity, "quantity")
        with self._transaction("stock-out", product_id) as db:
            _ensure_available(db, product_id, quantity)
            now = self._clock.now()
            record_movement(db, product_id, quantity, MOVEMENT_OUT, now, reason=REASON_STOCK_OUT)
            apply_delta(db, product_id, -quantity, now=now, settings=self._settings)
            level = get_stock_level(db, product_id)

        logger.info(
            "Stock-out recorded: product %s -%s, stock now %s (%s)",
            product_id,
            quantity,
            level.quantity,
            level.status,
            extra={"product_id": product_id, "movement_type": MOVEMENT_OUT, "quantity": quantity},
        )
        return level

    def adjust_stock(self, product_id: int, target_quantity: int) -> StockLevel:
        with self._transaction("stock adjustment", product_id) as db:
            level = adjust_balance(
                db,
                product_id,
                target_quantity,
                now=self._clock.now(),
                settings=self._settings,
            )
        logger.info(
            "Stock adjusted: product %s set to %s (%s)",
            product_id,
            level.quantity,
            level.status,
            extra={"product_id": product_id},
        )
        return level


__all__ = ["SaleReceipt", "StockCoordinator", "adjust_balance", "unit_price_for"]
