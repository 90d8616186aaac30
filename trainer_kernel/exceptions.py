"""
Typed Exception Hierarchy for the Trainer Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers of the ledger (the HTTP layer, the resync job, operators running
``ledgerctl``) must tell a retryable persistence failure apart from a bad
week number or an unknown trainer without parsing message strings.

Every error therefore:
  1. Has its own class (catch by type, not message)
  2. Carries a CODE class attribute (machine-readable, API-safe)
  3. Stores its context as attributes (not just a message string)

Example:
    try:
        service.reconcile(course_id, week, year)
    except ReconciliationFailedError as e:
        if e.retryable:
            schedule_retry(e.course_id, e.week, e.year)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    TrainerKernelError (base)
    |
    +-- CalendarError
    |   +-- InvalidWeekError
    |   +-- InvalidWeekdayError
    |   +-- InvalidTimeRangeError
    |
    +-- FactError
    |   +-- CourseNotFoundError
    |   +-- TrainerNotFoundError
    |   +-- UnknownTrainerError
    |
    +-- LedgerError
    |   +-- TrainingSessionNotFoundError
    |   +-- InvalidHoursError
    |
    +-- ReconciliationError
    |   +-- ReconciliationFailedError
    |
    +-- BatchError
        +-- TaskNotRegisteredError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Calendar        | INVALID_WEEK                | Week/year outside the ISO calendar
                | INVALID_WEEKDAY             | Day name or index not Mon..Sun
                | INVALID_TIME_RANGE          | Course end time not after start time
----------------|-----------------------------|-----------------------------------------
Fact            | COURSE_NOT_FOUND            | Course id does not exist
                | TRAINER_NOT_FOUND           | Trainer id does not exist
                | UNKNOWN_TRAINER             | Assignment references unknown trainers
----------------|-----------------------------|-----------------------------------------
Ledger          | TRAINING_SESSION_NOT_FOUND  | Ledger entry id does not exist
                | INVALID_HOURS               | Hours negative or above one day
----------------|-----------------------------|-----------------------------------------
Reconciliation  | RECONCILIATION_FAILED       | Transaction aborted, key rolled back
----------------|-----------------------------|-----------------------------------------
Batch           | TASK_NOT_REGISTERED         | Unknown batch task type

===============================================================================
NOT AN ERROR
===============================================================================

- Reconciling a course id that no longer exists: the course has zero
  occurrence and its ledger entries are removed.
- Two reconcilers inserting the same ledger key: the second insert is
  ignored by the conflict-safe insert.
"""


class TrainerKernelError(Exception):
    """
    Base exception for all trainer kernel errors.

    All subclasses must have a ``code`` class attribute for
    machine-readable error identification.
    """

    code: str = "TRAINER_KERNEL_ERROR"


# Calendar exceptions


class CalendarError(TrainerKernelError):
    """Base exception for calendar and time-of-day errors."""

    code: str = "CALENDAR_ERROR"


class InvalidWeekError(CalendarError):
    """Week number or year is not a valid ISO-8601 week."""

    code: str = "INVALID_WEEK"

    def __init__(self, week: object, year: object, reason: str):
        self.week = week
        self.year = year
        self.reason = reason
        super().__init__(f"Invalid ISO week {week!r}/{year!r}: {reason}")


class InvalidWeekdayError(CalendarError):
    """Weekday is neither an index 0..6 nor a known day name."""

    code: str = "INVALID_WEEKDAY"

    def __init__(self, value: object):
        self.value = value
        super().__init__(f"Invalid weekday: {value!r}")


class InvalidTimeRangeError(CalendarError):
    """Course end time is not after its start time."""

    code: str = "INVALID_TIME_RANGE"

    def __init__(self, start_time: object, end_time: object):
        self.start_time = start_time
        self.end_time = end_time
        super().__init__(
            f"End time {end_time} must be after start time {start_time}"
        )


# Schedule fact exceptions


class FactError(TrainerKernelError):
    """Base exception for schedule fact errors."""

    code: str = "FACT_ERROR"


class CourseNotFoundError(FactError):
    """Course with given id was not found."""

    code: str = "COURSE_NOT_FOUND"

    def __init__(self, course_id: int):
        self.course_id = course_id
        super().__init__(f"Course not found: {course_id}")


class TrainerNotFoundError(FactError):
    """Trainer with given id was not found."""

    code: str = "TRAINER_NOT_FOUND"

    def __init__(self, trainer_id: int):
        self.trainer_id = trainer_id
        super().__init__(f"Trainer not found: {trainer_id}")


class UnknownTrainerError(FactError):
    """
    An assignment write references trainer ids that do not exist.

    Raised at the assignment-write boundary so the engine never sees
    unresolvable trainers.
    """

    code: str = "UNKNOWN_TRAINER"

    def __init__(self, trainer_ids: list[int]):
        self.trainer_ids = sorted(trainer_ids)
        super().__init__(f"Unknown trainer ids: {self.trainer_ids}")


# Ledger exceptions


class LedgerError(TrainerKernelError):
    """Base exception for training-session ledger errors."""

    code: str = "LEDGER_ERROR"


class TrainingSessionNotFoundError(LedgerError):
    """Ledger entry with given id was not found."""

    code: str = "TRAINING_SESSION_NOT_FOUND"

    def __init__(self, session_id: int):
        self.session_id = session_id
        super().__init__(f"Training session not found: {session_id}")


class InvalidHoursError(LedgerError):
    """Hours value cannot be recorded."""

    code: str = "INVALID_HOURS"

    def __init__(self, hours: object, reason: str):
        self.hours = hours
        self.reason = reason
        super().__init__(f"Invalid hours {hours!r}: {reason}")


# Reconciliation exceptions


class ReconciliationError(TrainerKernelError):
    """Base exception for reconciliation errors."""

    code: str = "RECONCILIATION_ERROR"


class ReconciliationFailedError(ReconciliationError):
    """
    The reconciliation transaction for one key aborted and was rolled back.

    The ledger is left exactly as it was before the call. The original
    persistence error is chained as ``__cause__``.
    """

    code: str = "RECONCILIATION_FAILED"
    retryable: bool = True

    def __init__(self, course_id: int, week: int, year: int, reason: str):
        self.course_id = course_id
        self.week = week
        self.year = year
        self.reason = reason
        super().__init__(
            f"Reconciliation failed for course {course_id} "
            f"week {week}/{year}: {reason}"
        )


# Batch exceptions


class BatchError(TrainerKernelError):
    """Base exception for batch processing errors."""

    code: str = "BATCH_ERROR"


class TaskNotRegisteredError(BatchError):
    """No batch task is registered under the requested type."""

    code: str = "TASK_NOT_REGISTERED"

    def __init__(self, task_type: str, available: tuple[str, ...] = ()):
        self.task_type = task_type
        self.available = available
        super().__init__(
            f"Task type '{task_type}' is not registered. "
            f"Available: {list(available)}"
        )
