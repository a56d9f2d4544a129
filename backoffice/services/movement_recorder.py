from datetime import datetime

from sqlalchemy.orm import Session

from backoffice.core.constants import MOVEMENT_REASONS, MOVEMENT_TYPES
from backoffice.exceptions import ValidationError
from backoffice.models.stock_movement import StockMovement


def require_positive_int(value, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError("{} must be a whole number.".format(field_name))
    if value <= 0:
        raise ValidationError("{} must be greater than zero.".format(field_name))
    return value


def record_movement(
    db: Session,
    product_id: int,
    quantity: int,
    movement_type: str,
    moved_at: datetime,
    *,
    reason: str,
    reference: str | None = None,
) -> StockMovement:
    """Append one ledger row. Ledger rows are never updated or deleted."""
    require_positive_int(quantity, "quantity")
    if movement_type not in MOVEMENT_TYPES:
        raise ValidationError("movement type must be one of: {}".format(", ".join(MOVEMENT_TYPES)))
    if reason not in MOVEMENT_REASONS:
        raise ValidationError("Unknown movement reason: {}".format(reason))

    movement = StockMovement(
        product_id=product_id,
        quantity=quantity,
        movement_type=movement_type,
        reason=reason,
        reference=reference,
        moved_at=moved_at,
    )
    db.add(movement)
    db.flush()
    return movement


__all__ = ["record_movement", "require_positive_int"]
