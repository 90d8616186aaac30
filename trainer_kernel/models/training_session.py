"""
Module: trainer_kernel.models.training_session
Responsibility: ORM persistence for the training-hours ledger -- one row per
    trainer per course instance actually worked, plus ad-hoc activities.
Architecture position: Kernel > Models.  May import from db/base.py and
    domain/dtos.py (for the status enum).

Invariants enforced:
    - At most one row per (course_id, week_number, year, trainer_id)
      (uq_training_session_key).  Rows with course_id NULL (ad-hoc
      activities) are outside the natural key.
    - hours are Numeric(6, 2).
    - Removal is a hard delete so removed hours cannot be double counted.

Failure modes:
    - IntegrityError on a plain INSERT of an existing key; the engine uses
      insert_ignore() so concurrent reconcilers never see it.

Audit relevance:
    recorded_by names the actor that created or last changed the row (the
    reconciler, the automated synchronizer, or an administrator).
    modification_count counts administrative corrections.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, Index, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from trainer_kernel.db.base import IdType, TrackedBase
from trainer_kernel.domain.dtos import SessionStatus


class TrainingSession(TrackedBase):
    """
    One ledger entry: hours a trainer worked in one ISO week.

    Contract:
        Course-based rows are created and removed by reconciliation only.
        Administrators may correct hours (status -> corrected) or delete
        rows through LedgerService.
    """

    __tablename__ = "training_sessions"

    __table_args__ = (
        UniqueConstraint(
            "course_id", "week_number", "year", "trainer_id",
            name="uq_training_session_key",
        ),
        Index("idx_training_session_week", "week_number", "year"),
        Index("idx_training_session_trainer", "trainer_id", "year"),
    )

    # NULL for ad-hoc activities that are not tied to a course
    course_id: Mapped[int | None] = mapped_column(IdType, nullable=True)

    week_number: Mapped[int] = mapped_column(Integer, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    trainer_id: Mapped[int] = mapped_column(IdType, nullable=False)

    hours: Mapped[Decimal] = mapped_column(Numeric(6, 2), nullable=False)

    status: Mapped[str] = mapped_column(
        String(20),
        default=SessionStatus.RECORDED.value,
        nullable=False,
    )

    recorded_by: Mapped[str] = mapped_column(String(100), nullable=False)

    modification_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    recorded_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    description: Mapped[str | None] = mapped_column(String(255), nullable=True)

    def __repr__(self) -> str:
        return (
            f"<TrainingSession {self.id}: course={self.course_id} "
            f"{self.year}-W{self.week_number:02d} trainer={self.trainer_id} "
            f"{self.hours}h {self.status}>"
        )
