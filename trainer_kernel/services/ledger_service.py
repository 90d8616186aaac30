"""
LedgerService -- administrative changes to ledger rows.

Responsibility:
    Hour corrections, manual deletion, and ad-hoc activity entries that are
    not tied to a course.  Reconciliation never rewrites a corrected row;
    it only removes it once its trainer leaves the effective set.

Architecture position:
    Kernel > Services -- imperative shell, owns transaction boundaries
    when ``auto_commit=True``.

Failure modes:
    - TrainingSessionNotFoundError for unknown session ids.
    - InvalidHoursError for hours outside 0..24 or not numeric.
    - TrainerNotFoundError for ad-hoc activities of unknown trainers.
"""

from decimal import Decimal, InvalidOperation

from sqlalchemy.orm import Session

from trainer_kernel.db.types import round_hours
from trainer_kernel.domain.calendar import validate_iso_week
from trainer_kernel.domain.clock import Clock, SystemClock
from trainer_kernel.domain.dtos import LedgerEntryInfo, SessionStatus
from trainer_kernel.exceptions import (
    InvalidHoursError,
    TrainerNotFoundError,
    TrainingSessionNotFoundError,
)
from trainer_kernel.logging_config import get_logger
from trainer_kernel.models.trainer import Trainer
from trainer_kernel.models.training_session import TrainingSession
from trainer_kernel.services.base import BaseService

logger = get_logger("services.ledger")

MAX_HOURS_PER_ENTRY = Decimal("24")


def validate_hours(hours: object) -> Decimal:
    """
    Coerce ``hours`` to a two-place Decimal within 0..24.

    Raises:
        InvalidHoursError: If hours is not numeric or out of range.
    """
    if isinstance(hours, bool):
        raise InvalidHoursError(hours, "hours must be a number")
    try:
        value = Decimal(str(hours))
    except (InvalidOperation, ValueError):
        raise InvalidHoursError(hours, "hours must be a number") from None
    if not value.is_finite():
        raise InvalidHoursError(hours, "hours must be finite")
    if value < 0 or value > MAX_HOURS_PER_ENTRY:
        raise InvalidHoursError(hours, f"hours must be in 0..{MAX_HOURS_PER_ENTRY}")
    return round_hours(value)


class LedgerService(BaseService):
    """Administrative ledger writes."""

    def __init__(self, session: Session, clock: Clock | None = None, auto_commit: bool = True):
        super().__init__(session, auto_commit=auto_commit)
        self._clock = clock or SystemClock()

    def correct_session(self, session_id: int, hours: object, actor: str) -> LedgerEntryInfo:
        """Override a row's hours; status becomes ``corrected``."""
        value = validate_hours(hours)
        with self._unit_of_work("correct_session"):
            entry = self._get(session_id)
            previous = entry.hours
            entry.hours = value
            entry.status = SessionStatus.CORRECTED.value
            entry.modification_count += 1
            entry.recorded_by = actor
            self.session.flush()
            logger.info(
                "ledger_entry_corrected",
                extra={
                    "session_id": session_id,
                    "previous_hours": previous,
                    "hours": value,
                    "modification_count": entry.modification_count,
                    "actor": actor,
                },
            )
            info = LedgerEntryInfo.from_model(entry)
        return info

    def delete_session(self, session_id: int, actor: str) -> None:
        with self._unit_of_work("delete_session"):
            entry = self._get(session_id)
            self.session.delete(entry)
            logger.info(
                "ledger_entry_deleted",
                extra={"session_id": session_id, "actor": actor},
            )

    def record_activity(
        self,
        trainer_id: int,
        week: int,
        year: int,
        hours: object,
        actor: str,
        description: str | None = None,
    ) -> LedgerEntryInfo:
        """Record hours that are not tied to a course (``course_id`` NULL)."""
        validate_iso_week(week, year)
        value = validate_hours(hours)
        with self._unit_of_work("record_activity"):
            if self.session.get(Trainer, trainer_id) is None:
                raise TrainerNotFoundError(trainer_id)
            entry = TrainingSession(
                course_id=None,
                week_number=week,
                year=year,
                trainer_id=trainer_id,
                hours=value,
                status=SessionStatus.RECORDED.value,
                recorded_by=actor,
                modification_count=0,
                recorded_at=self._clock.now_utc(),
                description=description,
            )
            self.session.add(entry)
            self.session.flush()
            logger.info(
                "ledger_activity_recorded",
                extra={"session_id": entry.id, "trainer_id": trainer_id, "hours": value},
            )
            info = LedgerEntryInfo.from_model(entry)
        return info

    def _get(self, session_id: int) -> TrainingSession:
        entry = self.session.get(TrainingSession, session_id)
        if entry is None:
            raise TrainingSessionNotFoundError(session_id)
        return entry
