import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backoffice.exceptions import PersistenceFailure

logger = logging.getLogger(__name__)


def commit_or_fail(db: Session, action: str) -> None:
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("%s failed; transaction rolled back", action)
        raise PersistenceFailure() from exc


__all__ = ["commit_or_fail"]
