from backoffice.services.export_service import build_sales_workbook
from backoffice.services.ledger_store import StockLevel, apply_delta, get_stock
from backoffice.services.movement_recorder import record_movement
from backoffice.services.report_service import monthly_sales_totals, total_stock_worth
from backoffice.services.stock_service import SaleReceipt, StockCoordinator

__all__ = [
    "SaleReceipt",
    "StockCoordinator",
    "StockLevel",
    "apply_delta",
    "build_sales_workbook",
    "get_stock",
    "monthly_sales_totals",
    "record_movement",
    "total_stock_worth",
]
