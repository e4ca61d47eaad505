"""
Unit of work

Transaction-scoped handle passed explicitly into the stock ledger and the
order/stock managers. All writes made through ``uow.session`` commit together
when the ``with`` block exits normally and roll back together when it exits
by any exception, including KeyboardInterrupt and GeneratorExit from an
abandoned request.

Persistence failures are translated into domain errors:
- lock wait timeouts, deadlocks and serialization failures -> ConflictError
- unique violations on the order number -> DuplicateOrderNumberError
"""

from contextlib import contextmanager
from typing import Optional

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session

from storefront import db
from storefront.buisness.core.errors import ConflictError, DuplicateOrderNumberError
from storefront.utils.logger import get_logger

logger = get_logger("storefront.buisness.core.unit_of_work")

# PostgreSQL SQLSTATEs: serialization_failure, deadlock_detected, lock_not_available
RETRYABLE_SQLSTATES = {'40001', '40P01', '55P03'}
RETRYABLE_MESSAGES = ('database is locked', 'database table is locked', 'deadlock', 'lock timeout')


def is_lock_conflict(exc: OperationalError) -> bool:
    """True when the driver error is lock contention rather than a broken query"""
    orig = getattr(exc, 'orig', None)
    sqlstate = getattr(orig, 'pgcode', None) or getattr(orig, 'sqlstate', None)
    if sqlstate in RETRYABLE_SQLSTATES:
        return True
    message = str(orig if orig is not None else exc).lower()
    return any(fragment in message for fragment in RETRYABLE_MESSAGES)


def is_order_number_violation(exc: IntegrityError) -> bool:
    message = str(getattr(exc, 'orig', exc)).lower()
    return 'order_number' in message


def translate_persistence_error(exc: BaseException, order_number: Optional[str] = None) -> None:
    """Raise the domain error matching a persistence failure, if any"""
    if isinstance(exc, OperationalError) and is_lock_conflict(exc):
        logger.warning(f"Lock conflict: {exc.orig}")
        raise ConflictError(
            "The record is locked by a concurrent operation; retry shortly",
            reason=str(exc.orig),
        ) from exc
    if isinstance(exc, IntegrityError) and is_order_number_violation(exc):
        raise DuplicateOrderNumberError(order_number or "unknown") from exc


@contextmanager
def persistence_errors(session: Optional[Session] = None):
    """
    Translate lock contention outside a unit of work, e.g. while resolving
    identifiers before one opens.
    """
    try:
        yield
    except (OperationalError, IntegrityError) as exc:
        (session if session is not None else db.session).rollback()
        translate_persistence_error(exc)
        raise


class UnitOfWork:
    """
    Context manager owning one database transaction.

    Usage:
        with UnitOfWork() as uow:
            StockLedger(uow).reserve(product_id, 2)
    """

    def __init__(self, session: Optional[Session] = None, lock_timeout: Optional[float] = None):
        """
        Args:
            session: SQLAlchemy session; defaults to the application-context
                scoped ``db.session``
            lock_timeout: Seconds to wait on a locked row before failing with
                ConflictError; defaults to ``STOCK_LOCK_TIMEOUT_SECONDS``
        """
        self.session = session if session is not None else db.session
        self.lock_timeout = lock_timeout
        self.order_number: Optional[str] = None

    def __enter__(self) -> 'UnitOfWork':
        self._apply_lock_timeout()
        return self

    def __exit__(self, exc_type, exc, tb):
        if exc_type is not None:
            self.session.rollback()
            logger.debug(f"Unit of work rolled back after {exc_type.__name__}")
            self._translate(exc)
            return False

        try:
            self.session.commit()
        except BaseException as commit_exc:
            self.session.rollback()
            logger.warning(f"Unit of work commit failed: {type(commit_exc).__name__}")
            self._translate(commit_exc)
            raise
        return False

    def flush(self) -> None:
        """Flush pending ORM changes so that ids are assigned and constraints run"""
        self.session.flush()

    def _translate(self, exc: BaseException) -> None:
        translate_persistence_error(exc, self.order_number)

    def _apply_lock_timeout(self) -> None:
        timeout = self.lock_timeout
        if timeout is None:
            from flask import current_app, has_app_context
            if has_app_context():
                timeout = current_app.config.get('STOCK_LOCK_TIMEOUT_SECONDS')
        if timeout is None:
            return

        bind = self.session.get_bind()
        if bind.dialect.name == 'postgresql':
            # SET LOCAL only accepts a literal; the value is a validated number
            milliseconds = int(float(timeout) * 1000)
            self.session.execute(text(f"SET LOCAL lock_timeout = '{milliseconds}ms'"))
