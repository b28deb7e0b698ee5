import logging
from contextlib import asynccontextmanager

from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from fuel_dispatch.services.exceptions import ConcurrentUpdateError, DatabaseQueryError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def transaction(db: AsyncSession, description: str):
    """
    Run the enclosed block as one all-or-nothing unit of work.

    Commits when the block exits cleanly. Any exception rolls back every row
    touched inside the block; lock and serialization failures surface as
    ConcurrentUpdateError so the caller may retry from a fresh read.
    """
    try:
        yield db
        await db.commit()
    except OperationalError as e:
        await db.rollback()
        logger.warning(f"{description} aborted by the database: {e.orig}")
        raise ConcurrentUpdateError(
            f"{description} could not complete because the records are being updated concurrently."
        ) from e
    except SQLAlchemyError as e:
        await db.rollback()
        raise DatabaseQueryError(str(e)) from e
    except Exception:
        await db.rollback()
        raise
