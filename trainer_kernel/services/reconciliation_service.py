"""
ReconciliationService -- the training-hours reconciliation engine.

Responsibility:
    Turns the mutable schedule facts of one (course, week, year) key into
    the authoritative ledger rows for that key: computes the effective
    trainer set, diffs it against the ledger, and applies the minimal
    add/remove mutations behind the temporal gate.  Also refreshes a single
    past assignment for the bulk resync driver.

Architecture position:
    Kernel > Services -- imperative shell, owns transaction boundaries
    when ``auto_commit=True``.  Pure decisions are delegated to
    ``trainer_kernel.domain.occurrence``; all reads go through selectors.

Reconcile flow:
    reconcile(course_id, week, year)
      1. Validate the ISO week (InvalidWeekError, before any DB work)
      2. Lock the course row (SELECT ... FOR UPDATE) -- serializes callers
         working on the same key
      3. Gate check on the course's training date; closed -> no-op
      4. Load occurrence facts and assignments -> effective set E
      5. Read ledger trainer set L (or use previous_trainer_ids)
      6. Delete L - E, insert E - L (conflict-ignoring insert)
      7. Commit or rollback

Invariants enforced:
    - A closed gate never mutates the ledger.
    - After an open-gate reconcile the ledger's trainer set for the key
      equals E.
    - Removal is a hard delete.
    - Duplicate inserts from concurrent callers are absorbed, never raised.

Failure modes:
    - InvalidWeekError: malformed week/year.
    - ReconciliationFailedError: a persistence error aborted the key's
      transaction; the ledger is unchanged and the call may be retried.

Audit relevance:
    Every call logs reconcile_started / reconcile_completed with course,
    week and year bound into the log context.  Each ledger mutation logs
    ledger_entry_added or ledger_entry_removed.
"""

from __future__ import annotations

import time
from datetime import date, datetime, timezone
from datetime import time as time_of_day
from typing import Iterable

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from trainer_kernel.db.statements import insert_ignore
from trainer_kernel.domain.calendar import validate_iso_week
from trainer_kernel.domain.clock import Clock, SystemClock
from trainer_kernel.domain.dtos import (
    AssignmentTuple,
    CourseSchedule,
    ReconcileResult,
    SessionStatus,
    WeekReconcileResult,
)
from trainer_kernel.domain.occurrence import (
    LedgerDiff,
    OccurrenceFacts,
    TemporalGate,
    effective_trainer_set,
    plan_ledger_changes,
)
from trainer_kernel.exceptions import ReconciliationFailedError
from trainer_kernel.logging_config import LogContext, get_logger
from trainer_kernel.models.course import CourseTemplate
from trainer_kernel.models.training_session import TrainingSession
from trainer_kernel.selectors.ledger_selector import LedgerSelector
from trainer_kernel.selectors.schedule_selector import ScheduleSelector
from trainer_kernel.services.base import BaseService

logger = get_logger("services.reconciliation")

DEFAULT_RECONCILER_ACTOR = "reconciler"
DEFAULT_SYNCHRONIZER_ACTOR = "auto-sync"


class ReconciliationService(BaseService):
    """
    Single entry point for every ledger mutation derived from schedule facts.

    Contract:
        Every fact-mutation path calls ``reconcile()`` for each key it
        touched; the bulk resync driver calls ``resync_assignment()`` for
        each past assignment.  Both share the same occurrence computation.

    Guarantees:
        - Idempotent: repeating a call with unchanged facts is a no-op.
        - Atomic per key (auto_commit=True): commit on success, rollback
          on failure.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        activation_date: date | None = None,
        reconciler_actor: str = DEFAULT_RECONCILER_ACTOR,
        synchronizer_actor: str = DEFAULT_SYNCHRONIZER_ACTOR,
        auto_commit: bool = True,
    ):
        super().__init__(session, auto_commit=auto_commit)
        self._clock = clock or SystemClock()
        self._activation_date = activation_date
        self._reconciler_actor = reconciler_actor
        self._synchronizer_actor = synchronizer_actor
        self._schedule = ScheduleSelector(session)
        self._ledger = LedgerSelector(session)

    @property
    def gate(self) -> TemporalGate:
        """The temporal gate as of the clock's current date."""
        return TemporalGate(today=self._clock.today(), activation_date=self._activation_date)

    # =========================================================================
    # Reconcile
    # =========================================================================

    def reconcile(
        self,
        course_id: int,
        week: int,
        year: int,
        previous_trainer_ids: Iterable[int] | None = None,
        actor: str | None = None,
    ) -> ReconcileResult:
        """
        Bring the ledger for one (course, week, year) in line with the facts.

        Args:
            course_id: Course to reconcile.  A course that no longer exists
                has zero occurrence; its ledger rows are removed.
            week: ISO week number.
            year: ISO year.
            previous_trainer_ids: Trainer ids to treat as the current ledger
                state instead of reading it.
            actor: recorded_by tag for inserted rows (default: the
                configured reconciler actor).

        Returns:
            ReconcileResult with sorted ``added`` and ``removed`` trainer ids.

        Raises:
            InvalidWeekError: If week/year is not a real ISO week.
            ReconciliationFailedError: If the transaction had to be rolled back.
        """
        validate_iso_week(week, year)
        actor = actor or self._reconciler_actor

        with LogContext.bind(course_id=course_id, week=week, year=year, actor=actor):
            t0 = time.monotonic()
            logger.info("reconcile_started")
            try:
                result = self._reconcile_key(course_id, week, year, previous_trainer_ids, actor)
                if self._auto_commit:
                    self.session.commit()
            except SQLAlchemyError as exc:
                if self._auto_commit:
                    self.session.rollback()
                logger.error(
                    "reconcile_failed",
                    extra={"error": str(exc)},
                    exc_info=True,
                )
                raise ReconciliationFailedError(course_id, week, year, str(exc)) from exc
            except Exception:
                if self._auto_commit:
                    self.session.rollback()
                logger.error("reconcile_failed", exc_info=True)
                raise

            logger.info(
                "reconcile_completed",
                extra={
                    "added": list(result.added),
                    "removed": list(result.removed),
                    "gate_open": result.gate_open,
                    "duration_ms": round((time.monotonic() - t0) * 1000, 2),
                },
            )
            return result

    def reconcile_week(self, week: int, year: int) -> WeekReconcileResult:
        """
        Reconcile every course that is assigned or ledgered in the week.

        Each course key runs in its own transaction (auto_commit=True);
        the first failure propagates.  Use the batch orchestrator for
        per-key failure isolation.
        """
        validate_iso_week(week, year)
        course_ids = self.course_ids_in_week(week, year)
        results = tuple(self.reconcile(course_id, week, year) for course_id in course_ids)
        return WeekReconcileResult(week=week, year=year, results=results)

    def course_ids_in_week(self, week: int, year: int) -> tuple[int, ...]:
        """Courses with assignments or ledger rows in the week, sorted."""
        assigned = self._schedule.courses_assigned_in_week(week, year)
        ledgered = self._ledger.course_ids_in_week(week, year)
        return tuple(sorted(assigned | ledgered))

    def _reconcile_key(
        self,
        course_id: int,
        week: int,
        year: int,
        previous_trainer_ids: Iterable[int] | None,
        actor: str,
    ) -> ReconcileResult:
        course = self._lock_course(course_id)

        if course is not None:
            training_date = course.training_date(week, year)
            if not self.gate.is_open(training_date):
                logger.info(
                    "reconcile_gate_closed",
                    extra={"training_date": training_date, "today": self._clock.today()},
                )
                return ReconcileResult(course_id, week, year, gate_open=False)
            facts = self._schedule.occurrence_facts(course_id, week, year)
            assigned = self._schedule.assigned_trainer_ids(course_id, week, year)
        else:
            # Missing course: zero occurrence, gate treated as open so
            # orphaned rows are cleaned up.
            logger.info("reconcile_course_missing")
            facts = OccurrenceFacts(course_exists=False)
            assigned = frozenset()

        effective = effective_trainer_set(assigned, facts)
        if previous_trainer_ids is None:
            current = self._ledger.trainer_ids_for_key(course_id, week, year)
        else:
            current = frozenset(previous_trainer_ids)

        diff = plan_ledger_changes(effective, current)
        if not diff.is_empty:
            self._apply(course, course_id, week, year, diff, actor)

        return ReconcileResult(
            course_id=course_id,
            week=week,
            year=year,
            added=diff.to_add,
            removed=diff.to_remove,
        )

    def _apply(
        self,
        course: CourseSchedule | None,
        course_id: int,
        week: int,
        year: int,
        diff: LedgerDiff,
        actor: str,
    ) -> None:
        """Hard-delete ``to_remove`` rows, then insert ``to_add`` rows.  Flush only."""
        if diff.to_remove:
            self.session.execute(
                delete(TrainingSession).where(
                    TrainingSession.course_id == course_id,
                    TrainingSession.week_number == week,
                    TrainingSession.year == year,
                    TrainingSession.trainer_id.in_(diff.to_remove),
                )
            )
            for trainer_id in diff.to_remove:
                logger.info("ledger_entry_removed", extra={"trainer_id": trainer_id})

        if diff.to_add:
            # to_add is only non-empty when the course exists
            assert course is not None
            hours = course.hours
            recorded_at = self._clock.now_utc()
            for trainer_id in diff.to_add:
                inserted = insert_ignore(
                    self.session,
                    TrainingSession,
                    {
                        "course_id": course_id,
                        "week_number": week,
                        "year": year,
                        "trainer_id": trainer_id,
                        "hours": hours,
                        "status": SessionStatus.RECORDED.value,
                        "recorded_by": actor,
                        "modification_count": 0,
                        "recorded_at": recorded_at,
                    },
                )
                logger.info(
                    "ledger_entry_added",
                    extra={"trainer_id": trainer_id, "hours": hours, "inserted": inserted},
                )

    def _lock_course(self, course_id: int) -> CourseSchedule | None:
        # FOR UPDATE is a no-op on SQLite, which serializes writers anyway.
        model = self.session.execute(
            select(CourseTemplate)
            .where(CourseTemplate.id == course_id)
            .with_for_update()
        ).scalar_one_or_none()
        return CourseSchedule.from_model(model) if model is not None else None

    # =========================================================================
    # Resync of one past assignment
    # =========================================================================

    def resync_assignment(self, assignment: AssignmentTuple) -> bool:
        """
        Refresh the ledger row of one assignment whose training day has passed.

        If the course occurs and the trainer is still assigned, the existing
        row is deleted and a fresh one inserted, stamped with the actual
        training date and the synchronizer actor.  Corrected rows are kept
        as they are.  Otherwise any existing row for the key is deleted.

        The caller checks the gate; this method only flushes.

        Returns:
            True if the course occurs (row present afterwards), else False.
        """
        key = (assignment.course_id, assignment.week, assignment.year)
        course = self._lock_course(assignment.course_id)
        if course is not None:
            facts = self._schedule.occurrence_facts(*key)
            still_assigned = assignment.trainer_id in self._schedule.assigned_trainer_ids(*key)
        else:
            facts = OccurrenceFacts(course_exists=False)
            still_assigned = False

        existing = self._ledger.entry_for_key(*key, assignment.trainer_id)

        if not (facts.occurs and still_assigned):
            if existing is not None:
                self._delete_entry(existing.session_id)
                logger.info(
                    "ledger_entry_removed",
                    extra={"trainer_id": assignment.trainer_id, "source": "resync"},
                )
            return False

        if existing is not None and existing.status is SessionStatus.CORRECTED:
            logger.debug(
                "resync_corrected_entry_kept",
                extra={"trainer_id": assignment.trainer_id},
            )
            return True

        if existing is not None:
            self._delete_entry(existing.session_id)

        training_date = course.training_date(assignment.week, assignment.year)
        insert_ignore(
            self.session,
            TrainingSession,
            {
                "course_id": assignment.course_id,
                "week_number": assignment.week,
                "year": assignment.year,
                "trainer_id": assignment.trainer_id,
                "hours": course.hours,
                "status": SessionStatus.RECORDED.value,
                "recorded_by": self._synchronizer_actor,
                "modification_count": 0,
                "recorded_at": _training_timestamp(training_date, course.start_time),
            },
        )
        logger.info(
            "ledger_entry_synced",
            extra={
                "trainer_id": assignment.trainer_id,
                "training_date": training_date,
                "replaced": existing is not None,
            },
        )
        return True

    def _delete_entry(self, session_id: int) -> None:
        self.session.execute(delete(TrainingSession).where(TrainingSession.id == session_id))


def _training_timestamp(training_date: date, start_time: time_of_day | None) -> datetime:
    """recorded_at for a resynced row: the training day at its start time, UTC."""
    return datetime.combine(training_date, start_time or time_of_day(0, 0), tzinfo=timezone.utc)
