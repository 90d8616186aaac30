"""
Module: trainer_kernel.selectors.schedule_selector
Responsibility: Read accessors for the schedule fact store -- course templates,
    weekly assignments, cancellations, holiday weeks and exceptions.
Architecture position: Kernel > Selectors.

Audit relevance:
    Every occurrence decision the engine makes is derived from
    occurrence_facts(); every bulk resync walks all_assignment_tuples().
"""

from sqlalchemy import exists, select

from trainer_kernel.domain.dtos import AssignmentTuple, CourseSchedule
from trainer_kernel.domain.occurrence import OccurrenceFacts
from trainer_kernel.models.course import CourseTemplate, course_trainers
from trainer_kernel.models.schedule import (
    CancelledCourse,
    CourseException,
    HolidayWeek,
    WeeklyAssignment,
)
from trainer_kernel.models.trainer import Trainer
from trainer_kernel.selectors.base import BaseSelector


class ScheduleSelector(BaseSelector):
    """Read-only queries over courses and the weekly schedule facts."""

    # -------------------------------------------------------------------------
    # Courses and trainers
    # -------------------------------------------------------------------------

    def get_course(self, course_id: int) -> CourseSchedule | None:
        model = self.session.get(CourseTemplate, course_id)
        return CourseSchedule.from_model(model) if model is not None else None

    def default_trainer_ids(self, course_id: int) -> tuple[int, ...]:
        rows = self.session.execute(
            select(course_trainers.c.trainer_id)
            .where(course_trainers.c.course_id == course_id)
            .order_by(course_trainers.c.trainer_id)
        ).scalars()
        return tuple(rows)

    def existing_trainer_ids(self, trainer_ids: set[int] | frozenset[int]) -> frozenset[int]:
        """Subset of ``trainer_ids`` that exist as trainers."""
        if not trainer_ids:
            return frozenset()
        rows = self.session.execute(
            select(Trainer.id).where(Trainer.id.in_(trainer_ids))
        ).scalars()
        return frozenset(rows)

    # -------------------------------------------------------------------------
    # Weekly facts
    # -------------------------------------------------------------------------

    def assigned_trainer_ids(self, course_id: int, week: int, year: int) -> frozenset[int]:
        rows = self.session.execute(
            select(WeeklyAssignment.trainer_id).where(
                WeeklyAssignment.course_id == course_id,
                WeeklyAssignment.week_number == week,
                WeeklyAssignment.year == year,
            )
        ).scalars()
        return frozenset(rows)

    def is_cancelled(self, course_id: int, week: int, year: int) -> bool:
        return bool(self.session.scalar(
            select(exists().where(
                CancelledCourse.course_id == course_id,
                CancelledCourse.week_number == week,
                CancelledCourse.year == year,
            ))
        ))

    def cancellation_reason(self, course_id: int, week: int, year: int) -> str | None:
        return self.session.scalar(
            select(CancelledCourse.reason).where(
                CancelledCourse.course_id == course_id,
                CancelledCourse.week_number == week,
                CancelledCourse.year == year,
            )
        )

    def is_holiday(self, week: int, year: int) -> bool:
        return bool(self.session.scalar(
            select(exists().where(
                HolidayWeek.week_number == week,
                HolidayWeek.year == year,
            ))
        ))

    def has_exception(self, course_id: int, week: int, year: int) -> bool:
        return bool(self.session.scalar(
            select(exists().where(
                CourseException.course_id == course_id,
                CourseException.week_number == week,
                CourseException.year == year,
            ))
        ))

    def occurrence_facts(self, course_id: int, week: int, year: int) -> OccurrenceFacts:
        """Load everything that decides whether the course takes place that week."""
        course_exists = self.session.get(CourseTemplate, course_id) is not None
        if not course_exists:
            return OccurrenceFacts(course_exists=False)
        return OccurrenceFacts(
            course_exists=True,
            cancelled=self.is_cancelled(course_id, week, year),
            holiday=self.is_holiday(week, year),
            exception=self.has_exception(course_id, week, year),
        )

    def courses_assigned_in_week(self, week: int, year: int) -> frozenset[int]:
        rows = self.session.execute(
            select(WeeklyAssignment.course_id)
            .where(
                WeeklyAssignment.week_number == week,
                WeeklyAssignment.year == year,
            )
            .distinct()
        ).scalars()
        return frozenset(rows)

    def courses_with_exception_in_week(self, week: int, year: int) -> frozenset[int]:
        rows = self.session.execute(
            select(CourseException.course_id).where(
                CourseException.week_number == week,
                CourseException.year == year,
            )
        ).scalars()
        return frozenset(rows)

    def all_assignment_tuples(self) -> tuple[AssignmentTuple, ...]:
        """Every WeeklyAssignment joined with its course's weekday and times."""
        rows = self.session.execute(
            select(
                WeeklyAssignment.course_id,
                WeeklyAssignment.week_number,
                WeeklyAssignment.year,
                WeeklyAssignment.trainer_id,
                CourseTemplate.weekday,
                CourseTemplate.start_time,
                CourseTemplate.end_time,
            )
            .join(CourseTemplate, CourseTemplate.id == WeeklyAssignment.course_id)
            .order_by(
                WeeklyAssignment.year,
                WeeklyAssignment.week_number,
                WeeklyAssignment.course_id,
                WeeklyAssignment.trainer_id,
            )
        ).all()
        return tuple(
            AssignmentTuple(
                course_id=row.course_id,
                week=row.week_number,
                year=row.year,
                trainer_id=row.trainer_id,
                weekday=row.weekday,
                start_time=row.start_time,
                end_time=row.end_time,
            )
            for row in rows
        )

    def roster_for_week(
        self,
        course_id: int,
        week: int,
        year: int,
        apply_defaults: bool = True,
    ) -> tuple[int, ...]:
        """
        Trainers shown for a course in a week.

        Falls back to the course's default trainers when the week has no
        explicit assignment and ``apply_defaults`` is set.  This is a display
        concern only; the ledger never uses the defaults.
        """
        assigned = self.assigned_trainer_ids(course_id, week, year)
        if assigned or not apply_defaults:
            return tuple(sorted(assigned))
        return self.default_trainer_ids(course_id)
