import importlib

from backoffice.models.product import Product
from backoffice.models.sale import Sale
from backoffice.models.stock_movement import StockMovement


def import_all_models() -> None:
    for module_name in (
        "backoffice.models.product",
        "backoffice.models.sale",
        "backoffice.models.stock_movement",
    ):
        importlib.import_module(module_name)


__all__ = [
    "Product",
    "Sale",
    "StockMovement",
    "import_all_models",
]
