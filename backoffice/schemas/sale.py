from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class SaleCreate(BaseModel):
    product_id: int
    quantity: int = Field(gt=0)
    unit_price: Optional[float] = Field(None, gt=0)
    total: Optional[float] = Field(None, ge=0)
    sale_date: Optional[datetime] = None


class BottleSaleCreate(BaseModel):
    product_id: int
    bottle_size: Literal["3ml", "6ml"]
    bottles: int = Field(gt=0)
    sale_date: Optional[datetime] = None


class SaleRead(BaseModel):
    id: int
    product_id: int
    product_name: str
    quantity: int
    unit_price: float
    total: float
    bottle_size: Optional[str] = None
    sale_date: datetime


class SaleReceiptRead(BaseModel):
    sale_id: int
    product_id: int
    quantity: int
    unit_price: float
    total: float
    stock: int
    status: str

    model_config = ConfigDict(from_attributes=True)


class SalesSummary(BaseModel):
    total_sales: float
    today_sales: float
    sale_count: int
    average_order_value: float
