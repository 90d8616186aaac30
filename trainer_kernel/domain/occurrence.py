"""
Occurrence -- the pure core of ledger reconciliation.

Responsibility:
    Decides, from already-loaded facts, whether a course instance takes
    place, whether the temporal gate is open for it, and which ledger rows
    have to be added or removed.  The reconciliation service and the resync
    task both call into this module, so the two paths cannot drift apart.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - A course occurs iff it is not cancelled and either the week is not a
      holiday week or the course has an exception for it.
    - The effective trainer set is empty whenever the course does not occur.
    - The gate is open iff the training date is on or before today and on
      or after the activation date (when one is configured).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable


def occurs(cancelled: bool, holiday: bool, exception: bool) -> bool:
    """Whether a course instance takes place given its week's facts."""
    return not cancelled and (not holiday or exception)


@dataclass(frozen=True)
class OccurrenceFacts:
    """Everything that decides whether one course instance takes place."""

    course_exists: bool
    cancelled: bool = False
    holiday: bool = False
    exception: bool = False

    @property
    def occurs(self) -> bool:
        # A course that no longer exists has zero occurrence.
        return self.course_exists and occurs(self.cancelled, self.holiday, self.exception)


@dataclass(frozen=True)
class TemporalGate:
    """
    Day-level gate for posting hours.

    ``today`` comes from the injected clock; ``activation_date`` is the
    global floor below which nothing is ever posted.
    """

    today: date
    activation_date: date | None = None

    def is_open(self, training_date: date) -> bool:
        if training_date > self.today:
            return False
        if self.activation_date is not None and training_date < self.activation_date:
            return False
        return True


def effective_trainer_set(assigned: Iterable[int], facts: OccurrenceFacts) -> frozenset[int]:
    """Trainer ids that should hold a ledger entry for the key."""
    if not facts.occurs:
        return frozenset()
    return frozenset(assigned)


@dataclass(frozen=True)
class LedgerDiff:
    """Minimal set of ledger mutations, as sorted trainer ids."""

    to_add: tuple[int, ...] = ()
    to_remove: tuple[int, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.to_add and not self.to_remove


def plan_ledger_changes(effective: Iterable[int], current: Iterable[int]) -> LedgerDiff:
    """``to_add = E - L`` and ``to_remove = L - E``."""
    effective_set = frozenset(effective)
    current_set = frozenset(current)
    return LedgerDiff(
        to_add=tuple(sorted(effective_set - current_set)),
        to_remove=tuple(sorted(current_set - effective_set)),
    )
