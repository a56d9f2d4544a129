from fastapi import Request

from backoffice.core.clock import Clock
from backoffice.services.stock_service import StockCoordinator


def get_db(request: Request):
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def get_coordinator(request: Request) -> StockCoordinator:
    return request.app.state.stock_coordinator


def get_clock(request: Request) -> Clock:
    return request.app.state.clock


__all__ = ["get_clock", "get_coordinator", "get_db"]
