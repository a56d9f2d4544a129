from backoffice.routers.health import router as health_router
from backoffice.routers.movements import router as movements_router
from backoffice.routers.products import router as products_router
from backoffice.routers.reports import router as reports_router
from backoffice.routers.sales import router as sales_router

__all__ = [
    "health_router",
    "movements_router",
    "products_router",
    "reports_router",
    "sales_router",
]
