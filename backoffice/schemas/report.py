import datetime as dt
from typing import Optional

from pydantic import BaseModel


class MonthlySalesTotal(BaseModel):
    month: int
    month_name: str
    total: float


class StockWorth(BaseModel):
    total_stock_worth: float
    currency: str


class DailySales(BaseModel):
    day: int
    date: dt.date
    total: float
    transactions: int


class AccountingSummary(BaseModel):
    year: int
    month: Optional[int] = None
    revenue: float
    sale_count: int
    quantity_sold: int
    quantity_received: int
    quantity_withdrawn: int
    movements_in: int
    movements_out: int
    stock_worth: float
