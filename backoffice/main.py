import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from backoffice.config import Settings, get_settings
from backoffice.core.clock import Clock, SystemClock
from backoffice.core.error_handlers import register_exception_handlers
from backoffice.core.logging import setup_logging
from backoffice.database import Base, create_session_factory, engine
from backoffice.models import import_all_models
from backoffice.routers import (
    health_router,
    movements_router,
    products_router,
    reports_router,
    sales_router,
)
from backoffice.services.stock_service import StockCoordinator

logger = logging.getLogger(__name__)


def create_app(db_engine=None, clock: Clock | None = None) -> FastAPI:
    """Build the application around one engine shared by every request."""
    settings: Settings = get_settings()
    db_engine = db_engine or engine
    clock = clock or SystemClock()
    session_factory = create_session_factory(db_engine)

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        import_all_models()
        Base.metadata.create_all(bind=db_engine)
        logger.info("%s started (%s)", settings.APP_NAME, settings.ENVIRONMENT)
        yield

    app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)
    app.state.engine = db_engine
    app.state.session_factory = session_factory
    app.state.clock = clock
    app.state.stock_coordinator = StockCoordinator(session_factory, clock=clock, settings=settings)

    register_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(products_router)
    app.include_router(sales_router)
    app.include_router(movements_router)
    app.include_router(reports_router)
    return app


setup_logging()
app = create_app()


__all__ = ["app", "create_app"]
