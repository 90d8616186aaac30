"""
Module: trainer_kernel.models.course
Responsibility: ORM persistence for recurring weekly course templates and
    their default trainer set.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - start_time < end_time (CHECK constraint; also validated by
      MasterDataService before insert).
    - weekday is an index Mon=0 .. Sun=6 (CHECK constraint).
    - required_trainers >= 0.

Audit relevance:
    Read-only to the reconciliation engine: it only reads the weekday (to
    find the training date) and the time window (to compute hours).
"""

from datetime import time

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    ForeignKey,
    Integer,
    String,
    Table,
    Time,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from trainer_kernel.db.base import Base, IdType, TrackedBase
from trainer_kernel.models.trainer import Trainer

course_trainers = Table(
    "course_trainers",
    Base.metadata,
    Column(
        "course_id",
        IdType,
        ForeignKey("courses.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "trainer_id",
        IdType,
        ForeignKey("trainers.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class CourseTemplate(TrackedBase):
    """
    A course that recurs every week on the same weekday and time.

    Contract:
        Created, edited and deactivated by MasterDataService.  The
        default trainer set is a read-time fallback for weeks without an
        explicit WeeklyAssignment; it never posts ledger hours by itself.
    """

    __tablename__ = "courses"

    __table_args__ = (
        CheckConstraint("weekday >= 0 AND weekday <= 6", name="ck_course_weekday"),
        CheckConstraint(
            "start_time IS NULL OR end_time IS NULL OR start_time < end_time",
            name="ck_course_time_range",
        ),
        CheckConstraint("required_trainers >= 0", name="ck_course_required_trainers"),
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    # Mon=0 .. Sun=6
    weekday: Mapped[int] = mapped_column(Integer, nullable=False)

    start_time: Mapped[time | None] = mapped_column(Time, nullable=True)
    end_time: Mapped[time | None] = mapped_column(Time, nullable=True)

    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    category: Mapped[str | None] = mapped_column(String(100), nullable=True)

    required_trainers: Mapped[int] = mapped_column(Integer, default=1, nullable=False)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    default_trainers: Mapped[list[Trainer]] = relationship(
        secondary=course_trainers,
        order_by=Trainer.id,
    )

    def __repr__(self) -> str:
        return f"<CourseTemplate {self.id}: {self.name} weekday={self.weekday}>"
