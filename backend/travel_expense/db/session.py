"""Engine, session factory and the transaction boundary used by the core."""
import logging
from collections.abc import Generator, Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from travel_expense.core.config import settings
from travel_expense.core.exceptions import ExpenseError, PersistenceError

logger = logging.getLogger(__name__)

engine = create_engine(
    settings.DATABASE_URL,
    echo=settings.APP_ENV == "development",
    pool_pre_ping=True,
    pool_size=settings.DB_POOL_SIZE,
    max_overflow=settings.DB_MAX_OVERFLOW,
)

SessionLocal = sessionmaker(
    engine,
    expire_on_commit=False,
    autoflush=False,
)


def get_session() -> Generator[Session, None, None]:
    with SessionLocal() as session:
        try:
            yield session
        except Exception:
            session.rollback()
            raise


@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """Run the block as one unit of work: commit on success, roll back otherwise.

    Business errors are re-raised unchanged. Store failures (including a
    failing COMMIT) are re-raised as PersistenceError.
    """
    try:
        yield db
        db.commit()
    except ExpenseError as exc:
        db.rollback()
        logger.warning("Transaction rolled back: %s %s", exc.code, exc.message)
        raise
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Transaction failed, rolled back: %s", exc, exc_info=True)
        raise PersistenceError(str(exc)) from exc
    except Exception:
        db.rollback()
        raise
