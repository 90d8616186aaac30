"""
Pure domain layer.

Calendar arithmetic, course durations, the occurrence / temporal-gate /
diff core of reconciliation, the injectable clock and immutable DTOs.
Nothing here touches the database.
"""

from trainer_kernel.domain.calendar import (
    date_of_weekday,
    iso_week_of,
    monday_of_iso_week,
    parse_weekday,
    validate_iso_week,
    weekday_name,
    weeks_in_year,
)
from trainer_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from trainer_kernel.domain.dtos import (
    AssignmentTuple,
    CourseSchedule,
    FactChangeResult,
    LedgerEntryInfo,
    ReconcileResult,
    SessionStatus,
    TrainerHoursSummary,
    WeekReconcileResult,
)
from trainer_kernel.domain.duration import DEFAULT_HOURS, course_duration_hours
from trainer_kernel.domain.occurrence import (
    LedgerDiff,
    OccurrenceFacts,
    TemporalGate,
    effective_trainer_set,
    occurs,
    plan_ledger_changes,
)

__all__ = [
    "date_of_weekday",
    "iso_week_of",
    "monday_of_iso_week",
    "parse_weekday",
    "validate_iso_week",
    "weekday_name",
    "weeks_in_year",
    "Clock",
    "DeterministicClock",
    "SystemClock",
    "AssignmentTuple",
    "CourseSchedule",
    "FactChangeResult",
    "LedgerEntryInfo",
    "ReconcileResult",
    "SessionStatus",
    "TrainerHoursSummary",
    "WeekReconcileResult",
    "DEFAULT_HOURS",
    "course_duration_hours",
    "LedgerDiff",
    "OccurrenceFacts",
    "TemporalGate",
    "effective_trainer_set",
    "occurs",
    "plan_ledger_changes",
]
