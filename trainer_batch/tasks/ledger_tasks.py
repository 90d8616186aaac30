"""
Ledger batch tasks.

ResyncPastDaysTask ("ledger.resync_past_days"):
    Walks every WeeklyAssignment.  For each one whose training day has been
    reached it recomputes occurrence and refreshes the ledger row
    (delete-then-insert, stamped with the training date) or removes it.
    Assignments still in the future are skipped.  Brings the ledger up to
    date for weeks nobody edited after the training day passed.

ReconcileWeekTask ("ledger.reconcile_week"):
    Reconciles every course assigned or ledgered in one ISO week, one
    course key per item.

Both tasks delegate the actual ledger logic to ReconciliationService,
running with ``auto_commit=False`` inside the executor's SAVEPOINT.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

from sqlalchemy.orm import Session

from trainer_kernel.domain.calendar import validate_iso_week
from trainer_kernel.domain.clock import Clock, SystemClock
from trainer_kernel.domain.dtos import AssignmentTuple
from trainer_kernel.domain.occurrence import TemporalGate
from trainer_kernel.logging_config import LogContext, get_logger
from trainer_kernel.selectors.schedule_selector import ScheduleSelector
from trainer_kernel.services.reconciliation_service import (
    DEFAULT_RECONCILER_ACTOR,
    DEFAULT_SYNCHRONIZER_ACTOR,
    ReconciliationService,
)

from trainer_batch.tasks.base import BatchItemInput, BatchTaskResult

logger = get_logger("batch.ledger_tasks")


class _LedgerTask:
    """Shared wiring: every ledger task builds its ReconciliationService the same way."""

    def __init__(
        self,
        clock: Clock | None = None,
        activation_date: date | None = None,
        reconciler_actor: str = DEFAULT_RECONCILER_ACTOR,
        synchronizer_actor: str = DEFAULT_SYNCHRONIZER_ACTOR,
    ):
        self._clock = clock or SystemClock()
        self._activation_date = activation_date
        self._reconciler_actor = reconciler_actor
        self._synchronizer_actor = synchronizer_actor

    def _service(self, session: Session) -> ReconciliationService:
        return ReconciliationService(
            session,
            clock=self._clock,
            activation_date=self._activation_date,
            reconciler_actor=self._reconciler_actor,
            synchronizer_actor=self._synchronizer_actor,
            auto_commit=False,
        )


class ResyncPastDaysTask(_LedgerTask):
    """Bulk resync of every assignment whose training day has been reached."""

    @property
    def task_type(self) -> str:
        return "ledger.resync_past_days"

    @property
    def description(self) -> str:
        return "Refresh ledger rows for training days that have passed"

    def prepare_items(
        self,
        parameters: dict[str, Any],
        session: Session,
        as_of: datetime,
    ) -> tuple[BatchItemInput, ...]:
        assignments = ScheduleSelector(session).all_assignment_tuples()
        return tuple(
            BatchItemInput(
                item_index=idx,
                item_key=assignment.item_key,
                payload=assignment.to_payload(),
            )
            for idx, assignment in enumerate(assignments)
        )

    def execute_item(
        self,
        item: BatchItemInput,
        parameters: dict[str, Any],
        session: Session,
        as_of: datetime,
    ) -> BatchTaskResult:
        assignment = AssignmentTuple.from_payload(item.payload)
        training_date = assignment.training_date()
        gate = TemporalGate(today=as_of.date(), activation_date=self._activation_date)

        if not gate.is_open(training_date):
            return BatchTaskResult.not_due(training_date=training_date.isoformat())

        with LogContext.bind(
            course_id=assignment.course_id,
            week=assignment.week,
            year=assignment.year,
            actor=self._synchronizer_actor,
        ):
            occurs = self._service(session).resync_assignment(assignment)

        return BatchTaskResult.done(training_date=training_date.isoformat(), occurs=occurs)


class ReconcileWeekTask(_LedgerTask):
    """Reconcile every course key of one ISO week."""

    @property
    def task_type(self) -> str:
        return "ledger.reconcile_week"

    @property
    def description(self) -> str:
        return "Reconcile all courses of one ISO week"

    def prepare_items(
        self,
        parameters: dict[str, Any],
        session: Session,
        as_of: datetime,
    ) -> tuple[BatchItemInput, ...]:
        week = parameters["week"]
        year = parameters["year"]
        validate_iso_week(week, year)
        course_ids = self._service(session).course_ids_in_week(week, year)
        return tuple(
            BatchItemInput(
                item_index=idx,
                item_key=f"{course_id}:{year}-W{week:02d}",
                payload={"course_id": course_id},
            )
            for idx, course_id in enumerate(course_ids)
        )

    def execute_item(
        self,
        item: BatchItemInput,
        parameters: dict[str, Any],
        session: Session,
        as_of: datetime,
    ) -> BatchTaskResult:
        result = self._service(session).reconcile(
            item.payload["course_id"],
            parameters["week"],
            parameters["year"],
        )
        if not result.gate_open:
            return BatchTaskResult.not_due(**result.as_dict())
        return BatchTaskResult.done(**result.as_dict())
