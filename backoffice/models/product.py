from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Column, DateTime, Float, Index, Integer, String

from backoffice.core.constants import STATUS_OUT_OF_STOCK, UNIT_PIECE
from backoffice.database.base import Base


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True)

    name = Column(String, nullable=False)
    category = Column(String, nullable=False)
    brand = Column(String)
    supplier = Column(String, nullable=False, default="N/A")

    unit = Column(String(8), nullable=False, default=UNIT_PIECE)
    price = Column(Float, nullable=False)

    stock = Column(Integer, nullable=False, default=0)
    opening_stock = Column(Integer, nullable=False, default=0)
    status = Column(String(16), nullable=False, default=STATUS_OUT_OF_STOCK)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    last_updated = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        CheckConstraint("stock >= 0", name="ck_products_stock_non_negative"),
        CheckConstraint("opening_stock >= 0", name="ck_products_opening_stock_non_negative"),
        Index("idx_products_unit_status", "unit", "status"),
    )


__all__ = ["Product"]
