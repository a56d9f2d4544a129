from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class ProductBase(BaseModel):
    name: str = Field(min_length=1)
    category: str = Field(min_length=1)
    brand: Optional[str] = None
    supplier: Optional[str] = None
    unit: Literal["unit", "ml"] = "unit"
    price: float = Field(ge=0)


class ProductCreate(ProductBase):
    stock: int = Field(0, ge=0)


class ProductUpdate(BaseModel):
    name: Optional[str] = None
    category: Optional[str] = None
    brand: Optional[str] = None
    supplier: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    stock: Optional[int] = Field(None, ge=0)

    model_config = ConfigDict(extra="forbid")


class ProductRead(ProductBase):
    id: int
    supplier: str
    stock: int
    opening_stock: int
    status: str
    created_at: datetime
    last_updated: datetime

    model_config = ConfigDict(from_attributes=True)


class StockLevelRead(BaseModel):
    product_id: int
    quantity: int
    status: str
    unit: str

    model_config = ConfigDict(from_attributes=True)
