"""
Per-call query deadlines.

Each repository call runs its statement inside ``query_deadline`` so a slow
store cancels the statement instead of blocking the caller indefinitely.
The deadline is scoped to the session's current transaction and never
outlives the call.
"""

import time
from contextlib import contextmanager
from typing import Generator

from sqlalchemy import text
from sqlalchemy.orm import Session

from moviedb.utils.logging_config import get_logger

logger = get_logger(__name__)

# Number of SQLite virtual machine instructions between deadline checks
SQLITE_PROGRESS_STEPS = 1000


def statement_timeout_ms(seconds: float) -> int:
    """PostgreSQL statement_timeout value; never 0, which disables the timeout."""
    return max(1, int(seconds * 1000))


@contextmanager
def query_deadline(session: Session, seconds: float) -> Generator[None, None, None]:
    """
    Bound the statements executed in the block to ``seconds``.

    PostgreSQL gets a transaction-local ``statement_timeout``. SQLite gets a
    progress handler that interrupts the running statement once the deadline
    passes. Expiry surfaces as the driver's cancellation error, wrapped in
    ``sqlalchemy.exc.OperationalError``.

    Args:
        session: Session whose transaction the statements run in
        seconds: Time budget for the block
    """
    dialect = session.get_bind().dialect.name

    if dialect == "postgresql":
        session.execute(
            text("SELECT set_config('statement_timeout', :timeout, true)"),
            {"timeout": str(statement_timeout_ms(seconds))},
        )
        yield
        return

    if dialect == "sqlite":
        dbapi_conn = session.connection().connection.driver_connection
        deadline = time.monotonic() + seconds

        def _expired():
            return 1 if time.monotonic() > deadline else 0

        dbapi_conn.set_progress_handler(_expired, SQLITE_PROGRESS_STEPS)
        try:
            yield
        finally:
            dbapi_conn.set_progress_handler(None, 0)
        return

    logger.debug("No query deadline support for dialect %s", dialect)
    yield
