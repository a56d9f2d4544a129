from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Index, Integer, String

from backoffice.database.base import Base


class StockMovement(Base):
    __tablename__ = "stock_movements"

    id = Column(Integer, primary_key=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)

    quantity = Column(Integer, nullable=False)
    movement_type = Column(String(3), nullable=False)
    reason = Column(String(16), nullable=False)
    # Free-form pointer such as "sale:12"; not a foreign key so deleting a
    # sale never touches the ledger.
    reference = Column(String(64))

    moved_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_stock_movements_quantity_positive"),
        CheckConstraint("movement_type IN ('IN', 'OUT')", name="ck_stock_movements_type"),
        Index("idx_stock_movements_product", "product_id", "moved_at"),
        Index("idx_stock_movements_moved_at", "moved_at"),
    )


__all__ = ["StockMovement"]
