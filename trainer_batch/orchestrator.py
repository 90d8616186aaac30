"""
LedgerBatchOrchestrator -- DI container for ledger batch runs.

Contract:
    Wires the TaskRegistry with the ledger tasks and creates the
    BatchExecutor.  Single place where the batch dependencies (session,
    clock, activation date, actor tags) are composed.

Architecture: trainer_batch (top-level).  The canonical entry point for
    ``ResyncPastDays`` and week-wide reconciliation.

Invariants enforced:
    - Clock injection: the executor and every task receive the same Clock.
    - No kernel imports of trainer_batch (the orchestrator lives here).
"""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

from trainer_kernel.domain.calendar import validate_iso_week
from trainer_kernel.domain.clock import Clock, SystemClock
from trainer_kernel.logging_config import get_logger
from trainer_kernel.services.reconciliation_service import (
    DEFAULT_RECONCILER_ACTOR,
    DEFAULT_SYNCHRONIZER_ACTOR,
)

from trainer_batch.domain.types import BatchRunResult, ResyncSummary
from trainer_batch.services.executor import BatchExecutor
from trainer_batch.tasks.base import TaskRegistry
from trainer_batch.tasks.ledger_tasks import ReconcileWeekTask, ResyncPastDaysTask

if TYPE_CHECKING:
    from trainer_config.schema import LedgerSettings

logger = get_logger("batch.orchestrator")

RESYNC_TASK = "ledger.resync_past_days"
RECONCILE_WEEK_TASK = "ledger.reconcile_week"


def default_task_registry(
    clock: Clock | None = None,
    activation_date: date | None = None,
    reconciler_actor: str = DEFAULT_RECONCILER_ACTOR,
    synchronizer_actor: str = DEFAULT_SYNCHRONIZER_ACTOR,
) -> TaskRegistry:
    """Create a TaskRegistry pre-loaded with the ledger tasks."""
    options = dict(
        clock=clock,
        activation_date=activation_date,
        reconciler_actor=reconciler_actor,
        synchronizer_actor=synchronizer_actor,
    )
    return TaskRegistry([ResyncPastDaysTask(**options), ReconcileWeekTask(**options)])


class LedgerBatchOrchestrator:
    """DI container for ledger batch runs.

    Contract:
        - ``from_session()`` factory creates a fully wired orchestrator.
        - ``resync_past_days()`` / ``reconcile_week()`` run the ledger tasks.
        - ``create_executor()`` returns a BatchExecutor for other tasks.

    Non-goals:
        - Does NOT schedule runs.
        - Does NOT manage the session lifecycle beyond ``auto_commit``.
    """

    def __init__(
        self,
        session: Session,
        task_registry: TaskRegistry,
        clock: Clock | None = None,
        auto_commit: bool = True,
    ) -> None:
        self._session = session
        self._task_registry = task_registry
        self._clock = clock or SystemClock()
        self._auto_commit = auto_commit

    # -------------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------------

    @classmethod
    def from_session(
        cls,
        session: Session,
        clock: Clock | None = None,
        settings: LedgerSettings | None = None,
        task_registry: TaskRegistry | None = None,
        auto_commit: bool = True,
    ) -> LedgerBatchOrchestrator:
        """Create a fully wired orchestrator from a session.

        Args:
            session: SQLAlchemy session for persistence.
            clock: Optional clock for deterministic testing.
            settings: Optional settings providing the activation date and
                actor tags.  Without them the kernel defaults apply.
            task_registry: Optional pre-configured registry.
            auto_commit: Commit after every item (True) or leave the
                transaction to the caller (False).
        """
        effective_clock = clock or SystemClock()
        if task_registry is None:
            if settings is not None:
                task_registry = default_task_registry(
                    clock=effective_clock,
                    activation_date=settings.activation_date,
                    reconciler_actor=settings.reconciler_actor,
                    synchronizer_actor=settings.synchronizer_actor,
                )
            else:
                task_registry = default_task_registry(clock=effective_clock)

        return cls(
            session=session,
            task_registry=task_registry,
            clock=effective_clock,
            auto_commit=auto_commit,
        )

    # -------------------------------------------------------------------------
    # Runs
    # -------------------------------------------------------------------------

    def create_executor(self) -> BatchExecutor:
        return BatchExecutor(
            session=self._session,
            task_registry=self._task_registry,
            clock=self._clock,
            auto_commit=self._auto_commit,
        )

    def resync_past_days(self) -> ResyncSummary:
        """Bring every past-due assignment's ledger row up to date."""
        run = self.create_executor().run(RESYNC_TASK)
        summary = ResyncSummary.from_run(run)
        logger.info("resync_completed", extra=summary.as_dict())
        return summary

    def reconcile_week(self, week: int, year: int) -> BatchRunResult:
        """Reconcile all courses of one ISO week, isolating per-course failures.

        Raises:
            InvalidWeekError: If week/year is not a real ISO week.
        """
        validate_iso_week(week, year)
        return self.create_executor().run(
            RECONCILE_WEEK_TASK, {"week": week, "year": year}
        )

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def session(self) -> Session:
        return self._session

    @property
    def task_registry(self) -> TaskRegistry:
        return self._task_registry
