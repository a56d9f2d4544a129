from datetime import datetime, timezone

from backoffice.core.clock import FixedClock
from backoffice.database import Base, create_db_engine, create_session_factory
from backoffice.models import import_all_models

FIXED_NOW = datetime(2024, 3, 15, 10, 30, tzinfo=timezone.utc)


def memory_database():
    engine = create_db_engine("sqlite:///:memory:")
    import_all_models()
    Base.metadata.create_all(bind=engine)
    return engine, create_session_factory(engine)


def fixed_clock():
    return FixedClock(FIXED_NOW)
