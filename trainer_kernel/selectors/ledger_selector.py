"""
Module: trainer_kernel.selectors.ledger_selector
Responsibility: Read access to the training-hours ledger: the current trainer
    set for a natural key (the engine's ``L``) and hour reports.
Architecture position: Kernel > Selectors.
"""

from decimal import Decimal

from sqlalchemy import func, select

from trainer_kernel.db.types import round_hours
from trainer_kernel.domain.dtos import LedgerEntryInfo, TrainerHoursSummary
from trainer_kernel.models.training_session import TrainingSession
from trainer_kernel.selectors.base import BaseSelector


class LedgerSelector(BaseSelector):
    """Read-only queries over TrainingSession rows."""

    def trainer_ids_for_key(self, course_id: int, week: int, year: int) -> frozenset[int]:
        rows = self.session.execute(
            select(TrainingSession.trainer_id).where(
                TrainingSession.course_id == course_id,
                TrainingSession.week_number == week,
                TrainingSession.year == year,
            )
        ).scalars()
        return frozenset(rows)

    def entry_for_key(
        self, course_id: int, week: int, year: int, trainer_id: int
    ) -> LedgerEntryInfo | None:
        model = self.session.execute(
            select(TrainingSession).where(
                TrainingSession.course_id == course_id,
                TrainingSession.week_number == week,
                TrainingSession.year == year,
                TrainingSession.trainer_id == trainer_id,
            )
        ).scalar_one_or_none()
        return LedgerEntryInfo.from_model(model) if model is not None else None

    def entries_for_week(self, week: int, year: int) -> tuple[LedgerEntryInfo, ...]:
        models = self.session.execute(
            select(TrainingSession)
            .where(
                TrainingSession.week_number == week,
                TrainingSession.year == year,
            )
            .order_by(TrainingSession.course_id, TrainingSession.trainer_id)
        ).scalars()
        return tuple(LedgerEntryInfo.from_model(m) for m in models)

    def all_entries(self) -> tuple[LedgerEntryInfo, ...]:
        models = self.session.execute(
            select(TrainingSession).order_by(
                TrainingSession.year,
                TrainingSession.week_number,
                TrainingSession.course_id,
                TrainingSession.trainer_id,
            )
        ).scalars()
        return tuple(LedgerEntryInfo.from_model(m) for m in models)

    def course_ids_in_week(self, week: int, year: int) -> frozenset[int]:
        """Courses that currently hold ledger rows in the week."""
        rows = self.session.execute(
            select(TrainingSession.course_id)
            .where(
                TrainingSession.week_number == week,
                TrainingSession.year == year,
                TrainingSession.course_id.is_not(None),
            )
            .distinct()
        ).scalars()
        return frozenset(rows)

    def hours_by_trainer(
        self,
        year: int,
        from_week: int = 1,
        to_week: int = 53,
    ) -> tuple[TrainerHoursSummary, ...]:
        """Total ledger hours per trainer for a week range of one ISO year."""
        rows = self.session.execute(
            select(
                TrainingSession.trainer_id,
                func.count(TrainingSession.id),
                func.sum(TrainingSession.hours),
            )
            .where(
                TrainingSession.year == year,
                TrainingSession.week_number >= from_week,
                TrainingSession.week_number <= to_week,
            )
            .group_by(TrainingSession.trainer_id)
            .order_by(TrainingSession.trainer_id)
        ).all()
        return tuple(
            TrainerHoursSummary(
                trainer_id=trainer_id,
                session_count=count,
                total_hours=round_hours(Decimal(str(total or 0))),
            )
            for trainer_id, count, total in rows
        )
