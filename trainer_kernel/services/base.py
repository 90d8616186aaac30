"""
BaseService -- abstract base for all kernel services.

Responsibility:
    Provides the common constructor and transaction contract for every
    write-side service in the kernel.  A service receives a SQLAlchemy
    ``Session`` from its caller and an ``auto_commit`` flag:

    - ``auto_commit=True``: the service is the entry point and owns the
      transaction -- commit on success, rollback and re-raise on failure.
    - ``auto_commit=False``: the service only flushes; the caller (another
      service, the batch executor's SAVEPOINT, or a test harness) owns
      commit/rollback.

Architecture position:
    Kernel > Services -- imperative shell infrastructure.

Invariants enforced:
    - One transaction per entry-point call: a fact write and the ledger
      reconciliation it triggers commit or roll back together.

Failure modes:
    - Any exception inside ``_unit_of_work`` rolls the session back (when
      auto_commit=True) and propagates unchanged.
"""

from abc import ABC
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.orm import Session

from trainer_kernel.logging_config import get_logger

logger = get_logger("services.base")


class BaseService(ABC):
    """
    Abstract base class for all kernel services.

    Non-goals:
        - Does NOT provide query-only (read) methods -- those belong in
          ``trainer_kernel/selectors/``.
    """

    def __init__(self, session: Session, auto_commit: bool = True):
        """
        Initialize the service.

        Args:
            session: SQLAlchemy session for database operations.
            auto_commit: If True, commit on success and rollback on failure.
                If False, the caller owns the transaction.
        """
        self.session = session
        self._auto_commit = auto_commit

    @contextmanager
    def _unit_of_work(self, operation: str) -> Iterator[None]:
        """Commit the body's writes on success; roll back on any failure."""
        try:
            yield
            if self._auto_commit:
                self.session.commit()
            else:
                self.session.flush()
        except Exception:
            if self._auto_commit:
                self.session.rollback()
                logger.warning(
                    "service_transaction_rolled_back",
                    extra={"operation": operation},
                )
            raise
