import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from yelpcamp.errors import ExternalServiceFailure, NotFound

logger = logging.getLogger(__name__)

# Integer primary keys are 32-bit on Postgres
MAX_ID = 2**31 - 1


def commit(db: Session) -> None:
    """Commit the unit of work, rolling back and re-raising as ExternalServiceFailure."""
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Database commit failed: {e}")
        raise ExternalServiceFailure(str(e)) from e


def parse_id(value, message="Not found") -> int:
    """Turn a path segment into a primary key; malformed ids are simply not found."""
    try:
        parsed = int(str(value))
    except (TypeError, ValueError):
        raise NotFound(message)
    if parsed < 1 or parsed > MAX_ID:
        raise NotFound(message)
    return parsed
