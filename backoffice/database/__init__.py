from backoffice.database.base import Base
from backoffice.database.engine import create_db_engine, engine
from backoffice.database.session import SessionLocal, create_session_factory

__all__ = ["Base", "SessionLocal", "create_db_engine", "create_session_factory", "engine"]
