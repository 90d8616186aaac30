"""
Duration -- worked hours from a course's time-of-day window.

Responsibility:
    Computes the hours a trainer is credited for one occurrence of a course:
    ``(end_hour + end_minute/60) - (start_hour + start_minute/60)``.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - Hours are Decimal and rounded once, to the ledger's two decimal places.
    - A course without a start or end time is credited DEFAULT_HOURS.

Failure modes:
    - InvalidTimeRangeError when end is not after start.
"""

from datetime import time
from decimal import Decimal

from trainer_kernel.db.types import round_hours
from trainer_kernel.exceptions import InvalidTimeRangeError

DEFAULT_HOURS = Decimal("1.00")

_SIXTY = Decimal(60)


def _as_hours(t: time) -> Decimal:
    return Decimal(t.hour) + Decimal(t.minute) / _SIXTY


def validate_time_range(start_time: time, end_time: time) -> None:
    """
    Require a course window that ends after it starts.

    Raises:
        InvalidTimeRangeError: If ``end_time <= start_time``.
    """
    if end_time <= start_time:
        raise InvalidTimeRangeError(start_time, end_time)


def course_duration_hours(start_time: time | None, end_time: time | None) -> Decimal:
    """
    Hours between ``start_time`` and ``end_time``, rounded to 0.01.

    Seconds are ignored; 18:00-19:30 yields ``Decimal("1.50")``.

    Returns:
        DEFAULT_HOURS if either time is missing.

    Raises:
        InvalidTimeRangeError: If the window is empty or inverted.
    """
    if start_time is None or end_time is None:
        return DEFAULT_HOURS
    hours = _as_hours(end_time) - _as_hours(start_time)
    if hours <= 0:
        raise InvalidTimeRangeError(start_time, end_time)
    return round_hours(hours)
