from sqlalchemy import Column, DateTime, Float, ForeignKey, Index, Integer, String

from backoffice.database.base import Base


class Sale(Base):
    __tablename__ = "sales"

    id = Column(Integer, primary_key=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)

    quantity = Column(Integer, nullable=False)
    unit_price = Column(Float, nullable=False)
    total = Column(Float, nullable=False)
    bottle_size = Column(String(8))

    sale_date = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("idx_sales_date", "sale_date"),
        Index("idx_sales_product_date", "product_id", "sale_date"),
    )


__all__ = ["Sale"]
