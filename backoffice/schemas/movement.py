from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class StockChange(BaseModel):
    quantity: int = Field(gt=0)


class MovementRead(BaseModel):
    id: int
    product_id: int
    product_name: str
    quantity: int
    movement_type: str
    reason: str
    reference: Optional[str] = None
    moved_at: datetime
