"""
Calendar -- ISO-8601 week arithmetic.

Responsibility:
    Converts between (ISO week, ISO year, weekday) and calendar dates, and
    parses weekday names as they appear in course master data ("Montag",
    "Tuesday", "Mi", ...).

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - Monday of ISO week 1 is found by anchoring on January 4th, which
      always falls in ISO week 1.
    - Week numbers are validated against the year's real week count (52
      or 53); nothing is silently wrapped into the neighbouring year.

Failure modes:
    - InvalidWeekError for non-integer, out-of-range week or year.
    - InvalidWeekdayError for unknown day names or indexes.
"""

from datetime import date, timedelta

from trainer_kernel.exceptions import InvalidWeekdayError, InvalidWeekError

MIN_YEAR = 1
MAX_YEAR = 9998

MONDAY, TUESDAY, WEDNESDAY, THURSDAY, FRIDAY, SATURDAY, SUNDAY = range(7)

# Lower-cased names and abbreviations (German and English) -> weekday index
_WEEKDAY_NAMES: dict[str, int] = {
    "montag": MONDAY, "mo": MONDAY, "monday": MONDAY, "mon": MONDAY,
    "dienstag": TUESDAY, "di": TUESDAY, "tuesday": TUESDAY, "tue": TUESDAY,
    "mittwoch": WEDNESDAY, "mi": WEDNESDAY, "wednesday": WEDNESDAY, "wed": WEDNESDAY,
    "donnerstag": THURSDAY, "do": THURSDAY, "thursday": THURSDAY, "thu": THURSDAY,
    "freitag": FRIDAY, "fr": FRIDAY, "friday": FRIDAY, "fri": FRIDAY,
    "samstag": SATURDAY, "sa": SATURDAY, "saturday": SATURDAY, "sat": SATURDAY,
    "sonntag": SUNDAY, "so": SUNDAY, "sunday": SUNDAY, "sun": SUNDAY,
}

GERMAN_WEEKDAY_NAMES = (
    "Montag", "Dienstag", "Mittwoch", "Donnerstag", "Freitag", "Samstag", "Sonntag",
)


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def weeks_in_year(year: int) -> int:
    """Number of ISO weeks (52 or 53) in ``year``.  December 28th is always in the last week."""
    return date(year, 12, 28).isocalendar()[1]


def validate_iso_week(week: object, year: object) -> None:
    """
    Reject anything that is not a real ISO week.

    Raises:
        InvalidWeekError: If week/year are not integers or out of range.
    """
    if not _is_int(week) or not _is_int(year):
        raise InvalidWeekError(week, year, "week and year must be integers")
    if not MIN_YEAR <= year <= MAX_YEAR:
        raise InvalidWeekError(week, year, f"year must be in {MIN_YEAR}..{MAX_YEAR}")
    last_week = weeks_in_year(year)
    if not 1 <= week <= last_week:
        raise InvalidWeekError(week, year, f"week must be in 1..{last_week}")


def monday_of_iso_week(week: int, year: int) -> date:
    """
    Calendar date of the Monday of ISO week ``week`` in ISO year ``year``.

    Raises:
        InvalidWeekError: If the week does not exist.
    """
    validate_iso_week(week, year)
    jan4 = date(year, 1, 4)
    week1_monday = jan4 - timedelta(days=jan4.weekday())
    return week1_monday + timedelta(weeks=week - 1)


def date_of_weekday(week: int, year: int, weekday: int) -> date:
    """
    Calendar date of ``weekday`` (Mon=0 .. Sun=6) within ISO week ``week``/``year``.

    Raises:
        InvalidWeekError: If the week does not exist.
        InvalidWeekdayError: If weekday is not 0..6.
    """
    if not _is_int(weekday) or not MONDAY <= weekday <= SUNDAY:
        raise InvalidWeekdayError(weekday)
    return monday_of_iso_week(week, year) + timedelta(days=weekday)


def iso_week_of(day: date) -> tuple[int, int]:
    """Return ``(iso_week, iso_year)`` for a calendar date."""
    iso_year, iso_week, _ = day.isocalendar()
    return iso_week, iso_year


def parse_weekday(value: int | str) -> int:
    """
    Parse a weekday index or name into Mon=0 .. Sun=6.

    Accepts integers 0..6, numeric strings, and German or English day names
    and abbreviations in any case ("Montag", "di", "Wednesday", "Thu").

    Raises:
        InvalidWeekdayError: If the value cannot be interpreted.
    """
    if _is_int(value):
        if MONDAY <= value <= SUNDAY:
            return value
        raise InvalidWeekdayError(value)
    if isinstance(value, str):
        key = value.strip().lower().rstrip(".")
        if key.isdigit():
            return parse_weekday(int(key))
        if key in _WEEKDAY_NAMES:
            return _WEEKDAY_NAMES[key]
    raise InvalidWeekdayError(value)


def weekday_name(weekday: int) -> str:
    """German display name for a weekday index."""
    if not _is_int(weekday) or not MONDAY <= weekday <= SUNDAY:
        raise InvalidWeekdayError(weekday)
    return GERMAN_WEEKDAY_NAMES[weekday]
