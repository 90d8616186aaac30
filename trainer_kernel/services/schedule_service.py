"""
ScheduleService -- writes to the schedule facts, followed by reconciliation.

Responsibility:
    The only writer of WeeklyAssignment, CancelledCourse, HolidayWeek and
    CourseException rows.  Every mutation reconciles each (course, week,
    year) key it can affect, in the same transaction as the fact write, so
    the ledger never drifts from the facts.

Architecture position:
    Kernel > Services -- imperative shell, owns transaction boundaries
    when ``auto_commit=True``.  Delegates all ledger changes to an internal
    ReconciliationService running with ``auto_commit=False``.

Invariants enforced:
    - Trainer ids that do not exist are rejected at the assignment write
      (UnknownTrainerError), never silently dropped.
    - Holiday toggles reconcile every course assigned or ledgered in the
      week, except courses holding an exception (they are unaffected).

Failure modes:
    - InvalidWeekError, CourseNotFoundError, UnknownTrainerError before any
      write.
    - ReconciliationFailedError from the reconcile step; the fact write is
      rolled back with it.
"""

from datetime import date
from typing import Iterable

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from trainer_kernel.domain.calendar import validate_iso_week
from trainer_kernel.domain.clock import Clock
from trainer_kernel.domain.dtos import FactChangeResult
from trainer_kernel.exceptions import CourseNotFoundError, UnknownTrainerError
from trainer_kernel.logging_config import get_logger
from trainer_kernel.models.course import CourseTemplate
from trainer_kernel.models.schedule import (
    DEFAULT_CANCELLATION_REASON,
    CancelledCourse,
    CourseException,
    HolidayWeek,
    WeeklyAssignment,
)
from trainer_kernel.selectors.ledger_selector import LedgerSelector
from trainer_kernel.selectors.schedule_selector import ScheduleSelector
from trainer_kernel.services.base import BaseService
from trainer_kernel.services.reconciliation_service import (
    DEFAULT_RECONCILER_ACTOR,
    ReconciliationService,
)

logger = get_logger("services.schedule")


class ScheduleService(BaseService):
    """Fact mutations for the weekly schedule."""

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        activation_date: date | None = None,
        reconciler_actor: str = DEFAULT_RECONCILER_ACTOR,
        auto_commit: bool = True,
    ):
        super().__init__(session, auto_commit=auto_commit)
        self._selector = ScheduleSelector(session)
        self._ledger = LedgerSelector(session)
        self._reconciler = ReconciliationService(
            session,
            clock=clock,
            activation_date=activation_date,
            reconciler_actor=reconciler_actor,
            auto_commit=False,
        )

    # -------------------------------------------------------------------------
    # Assignments
    # -------------------------------------------------------------------------

    def replace_assignments(
        self,
        course_id: int,
        week: int,
        year: int,
        trainer_ids: Iterable[int],
    ) -> FactChangeResult:
        """
        Replace the trainers assigned to a course for one week.

        Duplicates in ``trainer_ids`` are collapsed; an empty iterable
        clears the slot.

        Raises:
            InvalidWeekError: If week/year is not a real ISO week.
            CourseNotFoundError: If the course does not exist.
            UnknownTrainerError: If any trainer id does not exist.
        """
        validate_iso_week(week, year)
        wanted = frozenset(trainer_ids)

        with self._unit_of_work("replace_assignments"):
            self._require_course(course_id)
            missing = wanted - self._selector.existing_trainer_ids(wanted)
            if missing:
                raise UnknownTrainerError(sorted(missing))

            self.session.execute(
                delete(WeeklyAssignment).where(
                    WeeklyAssignment.course_id == course_id,
                    WeeklyAssignment.week_number == week,
                    WeeklyAssignment.year == year,
                )
            )
            for trainer_id in sorted(wanted):
                self.session.add(WeeklyAssignment(
                    course_id=course_id,
                    week_number=week,
                    year=year,
                    trainer_id=trainer_id,
                ))
            self.session.flush()
            logger.info(
                "assignments_replaced",
                extra={
                    "course_id": course_id,
                    "week": week,
                    "year": year,
                    "trainer_ids": sorted(wanted),
                },
            )
            result = self._reconcile_keys(week, year, [course_id])
        return result

    def clear_assignments(self, course_id: int, week: int, year: int) -> FactChangeResult:
        return self.replace_assignments(course_id, week, year, ())

    # -------------------------------------------------------------------------
    # Cancellations
    # -------------------------------------------------------------------------

    def cancel_course(
        self,
        course_id: int,
        week: int,
        year: int,
        reason: str = DEFAULT_CANCELLATION_REASON,
    ) -> FactChangeResult:
        """Cancel one course instance; an existing cancellation gets the new reason."""
        validate_iso_week(week, year)
        with self._unit_of_work("cancel_course"):
            self._require_course(course_id)
            existing = self.session.execute(
                select(CancelledCourse).where(
                    CancelledCourse.course_id == course_id,
                    CancelledCourse.week_number == week,
                    CancelledCourse.year == year,
                )
            ).scalar_one_or_none()
            if existing is None:
                self.session.add(CancelledCourse(
                    course_id=course_id,
                    week_number=week,
                    year=year,
                    reason=reason,
                ))
            else:
                existing.reason = reason
            self.session.flush()
            logger.info(
                "course_cancelled",
                extra={"course_id": course_id, "week": week, "year": year, "reason": reason},
            )
            result = self._reconcile_keys(week, year, [course_id])
        return result

    def reactivate_course(self, course_id: int, week: int, year: int) -> FactChangeResult:
        """Remove a cancellation.  Entries come back unless a holiday still applies."""
        validate_iso_week(week, year)
        with self._unit_of_work("reactivate_course"):
            self._require_course(course_id)
            self.session.execute(
                delete(CancelledCourse).where(
                    CancelledCourse.course_id == course_id,
                    CancelledCourse.week_number == week,
                    CancelledCourse.year == year,
                )
            )
            logger.info(
                "course_reactivated",
                extra={"course_id": course_id, "week": week, "year": year},
            )
            result = self._reconcile_keys(week, year, [course_id])
        return result

    # -------------------------------------------------------------------------
    # Holiday weeks
    # -------------------------------------------------------------------------

    def add_holiday_week(self, week: int, year: int) -> FactChangeResult:
        validate_iso_week(week, year)
        with self._unit_of_work("add_holiday_week"):
            if not self._selector.is_holiday(week, year):
                self.session.add(HolidayWeek(week_number=week, year=year))
                self.session.flush()
            logger.info("holiday_week_added", extra={"week": week, "year": year})
            result = self._reconcile_keys(week, year, self._holiday_affected_courses(week, year))
        return result

    def remove_holiday_week(self, week: int, year: int) -> FactChangeResult:
        validate_iso_week(week, year)
        with self._unit_of_work("remove_holiday_week"):
            self.session.execute(
                delete(HolidayWeek).where(
                    HolidayWeek.week_number == week,
                    HolidayWeek.year == year,
                )
            )
            logger.info("holiday_week_removed", extra={"week": week, "year": year})
            result = self._reconcile_keys(week, year, self._holiday_affected_courses(week, year))
        return result

    # -------------------------------------------------------------------------
    # Holiday exceptions
    # -------------------------------------------------------------------------

    def add_exception(self, course_id: int, week: int, year: int) -> FactChangeResult:
        """Let a course take place in a holiday week."""
        validate_iso_week(week, year)
        with self._unit_of_work("add_exception"):
            self._require_course(course_id)
            if not self._selector.has_exception(course_id, week, year):
                self.session.add(CourseException(
                    course_id=course_id,
                    week_number=week,
                    year=year,
                ))
                self.session.flush()
            logger.info(
                "course_exception_added",
                extra={"course_id": course_id, "week": week, "year": year},
            )
            result = self._reconcile_keys(week, year, [course_id])
        return result

    def remove_exception(self, course_id: int, week: int, year: int) -> FactChangeResult:
        validate_iso_week(week, year)
        with self._unit_of_work("remove_exception"):
            self._require_course(course_id)
            self.session.execute(
                delete(CourseException).where(
                    CourseException.course_id == course_id,
                    CourseException.week_number == week,
                    CourseException.year == year,
                )
            )
            logger.info(
                "course_exception_removed",
                extra={"course_id": course_id, "week": week, "year": year},
            )
            result = self._reconcile_keys(week, year, [course_id])
        return result

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _require_course(self, course_id: int) -> None:
        if self.session.get(CourseTemplate, course_id) is None:
            raise CourseNotFoundError(course_id)

    def _holiday_affected_courses(self, week: int, year: int) -> list[int]:
        candidates = (
            self._selector.courses_assigned_in_week(week, year)
            | self._ledger.course_ids_in_week(week, year)
        )
        excepted = self._selector.courses_with_exception_in_week(week, year)
        return sorted(candidates - excepted)

    def _reconcile_keys(self, week: int, year: int, course_ids: Iterable[int]) -> FactChangeResult:
        return FactChangeResult(
            reconciled=tuple(
                self._reconciler.reconcile(course_id, week, year)
                for course_id in course_ids
            )
        )
