"""Scoped transactions.

``run_in_transaction`` opens a session, runs a unit of work inside
``session.begin()`` and guarantees that the work is committed as a whole or
rolled back as a whole, and that the session is closed on every exit path.
Callers never touch commit or rollback themselves.
"""
import logging
from typing import Awaitable, Callable, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from dealerops.core.exceptions import DealerOpsError, TransactionError
from dealerops.core.metrics import transaction_rollbacks

logger = logging.getLogger(__name__)

T = TypeVar("T")

UnitOfWork = Callable[[AsyncSession], Awaitable[T]]


async def run_in_transaction(
    session_factory: Callable[[], AsyncSession],
    work: UnitOfWork,
    operation: str = "unit_of_work",
) -> T:
    async with session_factory() as session:
        try:
            async with session.begin():
                return await work(session)
        except DealerOpsError as e:
            transaction_rollbacks.labels(operation=operation, reason=e.kind).inc()
            logger.warning(f"{operation} rolled back: {e.message}")
            raise
        except SQLAlchemyError as e:
            transaction_rollbacks.labels(operation=operation, reason="database").inc()
            logger.error(f"{operation} rolled back after database error: {e}", exc_info=True)
            raise TransactionError(f"{operation} could not be committed") from e
        except Exception:
            transaction_rollbacks.labels(operation=operation, reason="unexpected").inc()
            logger.exception(f"{operation} rolled back after unexpected error")
            raise
