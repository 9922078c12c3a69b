"""Transaction runner with bounded retry.

Every mutating operation is one database transaction. Lock waits and
statements are bounded by lock_timeout / statement_timeout (see database.py);
when PostgreSQL aborts a transaction for a transient reason, the whole unit
of work is rolled back and re-run from the top, at most TX_MAX_ATTEMPTS times.

Retryable SQLSTATEs:
  40001  serialization_failure
  40P01  deadlock_detected
  55P03  lock_not_available (lock_timeout)
  57014  query_canceled (statement_timeout)
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.sb_common.errors import ConcurrencyError

logger = logging.getLogger(__name__)

T = TypeVar("T")

RETRYABLE_SQLSTATES = frozenset({"40001", "40P01", "55P03", "57014"})
_BACKOFF_SECONDS = 0.05


def sqlstate_of(exc: BaseException) -> str | None:
    """Extract the SQLSTATE from a SQLAlchemy-wrapped driver error, if any."""
    orig = getattr(exc, "orig", None)
    for source in (orig, getattr(orig, "__cause__", None)):
        if source is None:
            continue
        code = getattr(source, "sqlstate", None) or getattr(source, "pgcode", None)
        if code:
            return str(code)
    return None


def is_retryable(exc: BaseException) -> bool:
    return isinstance(exc, DBAPIError) and sqlstate_of(exc) in RETRYABLE_SQLSTATES


async def run_atomic(
    db: AsyncSession,
    work: Callable[[], Awaitable[T]],
    attempts: int | None = None,
) -> T:
    """Run ``work`` in a transaction on ``db``: commit on success, rollback on error.

    ``work`` must be safe to re-run from scratch (it reads everything it needs
    inside the transaction). Non-retryable errors propagate unchanged after
    rollback; retryable ones that exhaust the budget become ConcurrencyError.
    """
    max_attempts = attempts or settings.TX_MAX_ATTEMPTS
    attempt = 1
    while True:
        try:
            result = await work()
            await db.commit()
            return result
        except DBAPIError as exc:
            await db.rollback()
            if not is_retryable(exc):
                raise
            if attempt >= max_attempts:
                logger.warning(
                    "Transaction gave up after %d attempts (sqlstate=%s)",
                    attempt, sqlstate_of(exc),
                )
                raise ConcurrencyError() from exc
            logger.warning(
                "Retrying transaction, attempt %d/%d (sqlstate=%s)",
                attempt + 1, max_attempts, sqlstate_of(exc),
            )
            await asyncio.sleep(_BACKOFF_SECONDS * attempt)
            attempt += 1
        except Exception:
            await db.rollback()
            raise
