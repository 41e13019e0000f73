"""Service-boundary transaction handling."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import JobBoardError, TransactionFailed
from database.engine import transaction

logger = logging.getLogger(__name__)


@asynccontextmanager
async def atomic(db: AsyncSession, operation: str) -> AsyncIterator[AsyncSession]:
    """
    Run a multi-step write as one transaction.

    Domain errors pass through after the rollback; anything else is
    logged and re-raised as ``TransactionFailed`` carrying its message.
    """
    try:
        async with transaction(db):
            yield db
    except JobBoardError:
        raise
    except DBAPIError as e:
        # The wrapped message carries the SQL and its bound parameters
        logger.error(
            f"{operation} rolled back: {type(e.orig).__name__}: {e.orig}",
            exc_info=e.orig,
        )
        raise TransactionFailed(str(e.orig), cause=e) from e
    except Exception as e:
        logger.error(f"{operation} rolled back: {e}", exc_info=True)
        raise TransactionFailed(str(e), cause=e) from e
