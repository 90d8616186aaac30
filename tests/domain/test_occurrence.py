"""
Tests for trainer_kernel.domain.occurrence -- the pure reconciliation core.

Covers the occurrence rule's full truth table, the day-level temporal gate,
and the set algebra of the ledger diff.
"""

from datetime import date
from itertools import product

import pytest
from hypothesis import given
from hypothesis import strategies as st

from trainer_kernel.domain.occurrence import (
    LedgerDiff,
    OccurrenceFacts,
    TemporalGate,
    effective_trainer_set,
    occurs,
    plan_ledger_changes,
)


class TestOccurs:
    """occurs = not cancelled and (not holiday or exception)"""

    @pytest.mark.parametrize(
        "cancelled,holiday,exception",
        list(product([False, True], repeat=3)),
    )
    def test_truth_table(self, cancelled, holiday, exception):
        expected = not cancelled and (not holiday or exception)
        assert occurs(cancelled, holiday, exception) is expected

    def test_cancellation_beats_exception(self):
        assert occurs(cancelled=True, holiday=True, exception=True) is False

    def test_exception_overrides_holiday(self):
        assert occurs(cancelled=False, holiday=True, exception=True) is True

    def test_exception_without_holiday_is_irrelevant(self):
        assert occurs(cancelled=False, holiday=False, exception=True) is True


class TestOccurrenceFacts:

    def test_plain_week_occurs(self):
        assert OccurrenceFacts(course_exists=True).occurs

    def test_missing_course_never_occurs(self):
        assert not OccurrenceFacts(course_exists=False).occurs
        assert not OccurrenceFacts(course_exists=False, exception=True).occurs


class TestTemporalGate:
    """Day-level gate with an optional activation floor."""

    def test_today_is_open(self):
        gate = TemporalGate(today=date(2026, 3, 3))
        assert gate.is_open(date(2026, 3, 3))

    def test_past_is_open(self):
        gate = TemporalGate(today=date(2026, 3, 3))
        assert gate.is_open(date(2025, 1, 1))

    def test_tomorrow_is_closed(self):
        gate = TemporalGate(today=date(2026, 3, 3))
        assert not gate.is_open(date(2026, 3, 4))

    def test_later_day_of_current_week_is_closed(self):
        # Day-level, not week-level: Thursday is closed on Wednesday.
        gate = TemporalGate(today=date(2026, 3, 4))
        assert gate.is_open(date(2026, 3, 3))
        assert not gate.is_open(date(2026, 3, 5))

    def test_activation_floor(self):
        gate = TemporalGate(today=date(2026, 3, 4), activation_date=date(2026, 1, 1))
        assert not gate.is_open(date(2025, 12, 31))
        assert gate.is_open(date(2026, 1, 1))

    @given(st.dates(), st.dates())
    def test_open_iff_not_after_today(self, today, training_date):
        assert TemporalGate(today=today).is_open(training_date) is (training_date <= today)


class TestEffectiveTrainerSet:

    def test_assigned_when_occurring(self):
        facts = OccurrenceFacts(course_exists=True)
        assert effective_trainer_set([7, 8], facts) == frozenset({7, 8})

    def test_empty_when_cancelled(self):
        facts = OccurrenceFacts(course_exists=True, cancelled=True)
        assert effective_trainer_set([7, 8], facts) == frozenset()

    def test_empty_in_holiday_without_exception(self):
        facts = OccurrenceFacts(course_exists=True, holiday=True)
        assert effective_trainer_set([7], facts) == frozenset()

    def test_no_assignments_is_not_an_error(self):
        assert effective_trainer_set([], OccurrenceFacts(course_exists=True)) == frozenset()


class TestPlanLedgerChanges:

    def test_add_and_remove(self):
        diff = plan_ledger_changes(effective={1, 2, 3}, current={3, 4})
        assert diff == LedgerDiff(to_add=(1, 2), to_remove=(4,))

    def test_equal_sets_are_noop(self):
        assert plan_ledger_changes({5}, {5}).is_empty

    @given(
        st.frozensets(st.integers(min_value=1, max_value=50)),
        st.frozensets(st.integers(min_value=1, max_value=50)),
    )
    def test_applying_diff_yields_effective_set(self, effective, current):
        diff = plan_ledger_changes(effective, current)
        after = (current - set(diff.to_remove)) | set(diff.to_add)
        assert after == effective
        assert not set(diff.to_add) & set(diff.to_remove)
        assert list(diff.to_add) == sorted(diff.to_add)

    @given(
        st.frozensets(st.integers(min_value=1, max_value=50)),
        st.frozensets(st.integers(min_value=1, max_value=50)),
    )
    def test_second_application_is_noop(self, effective, current):
        plan_ledger_changes(effective, current)
        assert plan_ledger_changes(effective, effective).is_empty
