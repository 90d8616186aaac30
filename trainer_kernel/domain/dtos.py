"""
DTOs -- Pure domain data transfer objects.

Responsibility:
    Defines the immutable data structures that cross the boundary between
    selectors, the pure reconciliation core and the services: course
    snapshots, assignment tuples, reconciliation results and ledger views.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    ``from_model()`` class methods are boundary converters only invoked from
    selectors and services, never from domain logic.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Any

from trainer_kernel.domain.calendar import date_of_weekday
from trainer_kernel.domain.duration import course_duration_hours

if TYPE_CHECKING:
    from trainer_kernel.models.course import CourseTemplate
    from trainer_kernel.models.training_session import TrainingSession


class SessionStatus(str, Enum):
    """Lifecycle status of a ledger entry."""

    RECORDED = "recorded"
    CORRECTED = "corrected"


@dataclass(frozen=True)
class CourseSchedule:
    """Read-only view of a course template as the engine needs it."""

    course_id: int
    weekday: int
    start_time: time | None
    end_time: time | None
    required_trainers: int
    is_active: bool

    @classmethod
    def from_model(cls, model: CourseTemplate) -> CourseSchedule:
        return cls(
            course_id=model.id,
            weekday=model.weekday,
            start_time=model.start_time,
            end_time=model.end_time,
            required_trainers=model.required_trainers,
            is_active=model.is_active,
        )

    @property
    def hours(self) -> Decimal:
        return course_duration_hours(self.start_time, self.end_time)

    def training_date(self, week: int, year: int) -> date:
        """Calendar date this course takes place on in the given ISO week."""
        return date_of_weekday(week, year, self.weekday)


@dataclass(frozen=True)
class AssignmentTuple:
    """One WeeklyAssignment row joined with its course's schedule."""

    course_id: int
    week: int
    year: int
    trainer_id: int
    weekday: int
    start_time: time | None
    end_time: time | None

    @property
    def item_key(self) -> str:
        return f"{self.course_id}:{self.year}-W{self.week:02d}:{self.trainer_id}"

    def training_date(self) -> date:
        return date_of_weekday(self.week, self.year, self.weekday)

    def to_payload(self) -> dict[str, Any]:
        return {
            "course_id": self.course_id,
            "week": self.week,
            "year": self.year,
            "trainer_id": self.trainer_id,
            "weekday": self.weekday,
            "start_time": self.start_time.isoformat() if self.start_time else None,
            "end_time": self.end_time.isoformat() if self.end_time else None,
        }

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> AssignmentTuple:
        start = payload.get("start_time")
        end = payload.get("end_time")
        return cls(
            course_id=payload["course_id"],
            week=payload["week"],
            year=payload["year"],
            trainer_id=payload["trainer_id"],
            weekday=payload["weekday"],
            start_time=time.fromisoformat(start) if start else None,
            end_time=time.fromisoformat(end) if end else None,
        )


@dataclass(frozen=True)
class ReconcileResult:
    """
    Outcome of one reconciliation call.

    ``added`` and ``removed`` are sorted trainer ids.  A closed gate always
    reports two empty tuples.
    """

    course_id: int
    week: int
    year: int
    added: tuple[int, ...] = ()
    removed: tuple[int, ...] = ()
    gate_open: bool = True

    @property
    def is_noop(self) -> bool:
        return not self.added and not self.removed

    def as_dict(self) -> dict[str, list[int]]:
        return {"added": list(self.added), "removed": list(self.removed)}


@dataclass(frozen=True)
class WeekReconcileResult:
    """Per-course results of reconciling a whole ISO week."""

    week: int
    year: int
    results: tuple[ReconcileResult, ...] = ()

    @property
    def added_count(self) -> int:
        return sum(len(r.added) for r in self.results)

    @property
    def removed_count(self) -> int:
        return sum(len(r.removed) for r in self.results)


@dataclass(frozen=True)
class FactChangeResult:
    """What a fact mutation triggered in the ledger."""

    reconciled: tuple[ReconcileResult, ...] = ()

    @property
    def changed(self) -> bool:
        return any(not r.is_noop for r in self.reconciled)


@dataclass(frozen=True)
class LedgerEntryInfo:
    """Read-only view of one ledger row."""

    session_id: int
    course_id: int | None
    week: int
    year: int
    trainer_id: int
    hours: Decimal
    status: SessionStatus
    recorded_by: str
    modification_count: int
    recorded_at: datetime
    description: str | None = None

    @classmethod
    def from_model(cls, model: TrainingSession) -> LedgerEntryInfo:
        return cls(
            session_id=model.id,
            course_id=model.course_id,
            week=model.week_number,
            year=model.year,
            trainer_id=model.trainer_id,
            hours=model.hours,
            status=SessionStatus(model.status),
            recorded_by=model.recorded_by,
            modification_count=model.modification_count,
            recorded_at=model.recorded_at,
            description=model.description,
        )


@dataclass(frozen=True)
class TrainerHoursSummary:
    """Aggregated ledger hours for one trainer."""

    trainer_id: int
    session_count: int
    total_hours: Decimal
