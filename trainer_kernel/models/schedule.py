"""
Module: trainer_kernel.models.schedule
Responsibility: ORM persistence for the mutable schedule facts the ledger is
    derived from: weekly assignments, cancellations, holiday weeks and
    holiday exceptions.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - WeeklyAssignment is unique per (course, week, year, trainer).
    - CancelledCourse and CourseException are unique per (course, week, year).
    - HolidayWeek is unique per (week, year).

Audit relevance:
    These rows are written only by ScheduleService, which reconciles the
    ledger for every key it touches in the same transaction.  The
    reconciliation engine reads them and never writes them.
"""

from sqlalchemy import ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from trainer_kernel.db.base import IdType, TrackedBase

DEFAULT_CANCELLATION_REASON = "Sonstiges"


class WeeklyAssignment(TrackedBase):
    """One trainer assigned to one course in one ISO week."""

    __tablename__ = "weekly_assignments"

    __table_args__ = (
        UniqueConstraint(
            "course_id", "week_number", "year", "trainer_id",
            name="uq_weekly_assignment",
        ),
        Index("idx_assignment_week", "course_id", "week_number", "year"),
    )

    course_id: Mapped[int] = mapped_column(
        IdType, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False
    )
    week_number: Mapped[int] = mapped_column(Integer, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    trainer_id: Mapped[int] = mapped_column(
        IdType, ForeignKey("trainers.id", ondelete="CASCADE"), nullable=False
    )

    def __repr__(self) -> str:
        return (
            f"<WeeklyAssignment course={self.course_id} "
            f"{self.year}-W{self.week_number:02d} trainer={self.trainer_id}>"
        )


class CancelledCourse(TrackedBase):
    """A single course instance that does not take place in one week."""

    __tablename__ = "cancelled_courses"

    __table_args__ = (
        UniqueConstraint("course_id", "week_number", "year", name="uq_cancelled_course"),
    )

    course_id: Mapped[int] = mapped_column(
        IdType, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False
    )
    week_number: Mapped[int] = mapped_column(Integer, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    reason: Mapped[str] = mapped_column(
        String(255), default=DEFAULT_CANCELLATION_REASON, nullable=False
    )

    def __repr__(self) -> str:
        return (
            f"<CancelledCourse course={self.course_id} "
            f"{self.year}-W{self.week_number:02d}: {self.reason}>"
        )


class HolidayWeek(TrackedBase):
    """A club-wide week without courses (unless a course has an exception)."""

    __tablename__ = "holiday_weeks"

    __table_args__ = (
        UniqueConstraint("week_number", "year", name="uq_holiday_week"),
    )

    week_number: Mapped[int] = mapped_column(Integer, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)

    def __repr__(self) -> str:
        return f"<HolidayWeek {self.year}-W{self.week_number:02d}>"


class CourseException(TrackedBase):
    """A course that takes place despite its week being a holiday week."""

    __tablename__ = "course_exceptions"

    __table_args__ = (
        UniqueConstraint("course_id", "week_number", "year", name="uq_course_exception"),
    )

    course_id: Mapped[int] = mapped_column(
        IdType, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False
    )
    week_number: Mapped[int] = mapped_column(Integer, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)

    def __repr__(self) -> str:
        return (
            f"<CourseException course={self.course_id} "
            f"{self.year}-W{self.week_number:02d}>"
        )
