from sqlalchemy.orm import sessionmaker

from backoffice.database.engine import engine


def create_session_factory(bind):
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
        bind=bind,
    )


SessionLocal = create_session_factory(engine)
