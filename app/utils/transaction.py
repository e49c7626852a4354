import logging
import time
from typing import Callable, Optional, TypeVar

from sqlalchemy.exc import DBAPIError, OperationalError
from sqlalchemy.orm import Session

from config import DB_MAX_RETRIES, DB_RETRY_BACKOFF_SECONDS

logger = logging.getLogger(__name__)

T = TypeVar("T")


def is_transient_error(exc: BaseException) -> bool:
    """Deadlocks, lock timeouts and dropped connections. Constraint violations are not transient."""
    if isinstance(exc, OperationalError):
        return True
    return isinstance(exc, DBAPIError) and bool(exc.connection_invalidated)


def run_in_transaction(
    db: Session,
    operation: Callable[[Session], T],
    retries: Optional[int] = None,
    backoff_seconds: Optional[float] = None,
) -> T:
    """
    Run ``operation(db)`` as a single unit of work.

    Commits when the operation returns and rolls back when it raises. A
    transient storage error restarts the whole operation from scratch, so
    every guard is re-evaluated against fresh state. Any other exception,
    domain errors included, propagates after the rollback.
    """
    retries = DB_MAX_RETRIES if retries is None else retries
    backoff_seconds = DB_RETRY_BACKOFF_SECONDS if backoff_seconds is None else backoff_seconds

    attempt = 0
    while True:
        try:
            result = operation(db)
            db.commit()
            return result
        except Exception as exc:
            db.rollback()
            if not is_transient_error(exc) or attempt >= retries:
                raise
            attempt += 1
            logger.warning(
                "Transient storage error, retrying (%s/%s): %s", attempt, retries, exc
            )
            time.sleep(backoff_seconds * attempt)
