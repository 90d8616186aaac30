"""
Tests for ScheduleService: every fact write reconciles the keys it touches.
"""

from decimal import Decimal

import pytest

from trainer_kernel.exceptions import (
    CourseNotFoundError,
    InvalidWeekError,
    ReconciliationFailedError,
    UnknownTrainerError,
)
from trainer_kernel.models.schedule import (
    CancelledCourse,
    CourseException,
    HolidayWeek,
    WeeklyAssignment,
)
from trainer_kernel.models.training_session import TrainingSession


class TestReplaceAssignments:

    def test_assignment_in_past_week_posts_hours(self, schedule, ledger_selector, make_course, make_trainer):
        course_id = make_course()
        t1, t2 = make_trainer(), make_trainer()

        result = schedule.replace_assignments(course_id, 10, 2026, [t1, t2])

        assert result.changed
        assert result.reconciled[0].added == (t1, t2)
        assert ledger_selector.trainer_ids_for_key(course_id, 10, 2026) == {t1, t2}

    def test_assignment_in_future_week_posts_nothing(self, schedule, schedule_selector, ledger_selector, make_course, make_trainer):
        course_id = make_course()
        t1 = make_trainer()

        result = schedule.replace_assignments(course_id, 11, 2026, [t1])

        assert not result.changed
        assert result.reconciled[0].gate_open is False
        assert schedule_selector.assigned_trainer_ids(course_id, 11, 2026) == {t1}
        assert ledger_selector.trainer_ids_for_key(course_id, 11, 2026) == frozenset()

    def test_replacing_swaps_trainers(self, schedule, ledger_selector, make_course, make_trainer):
        course_id = make_course()
        t1, t2 = make_trainer(), make_trainer()
        schedule.replace_assignments(course_id, 10, 2026, [t1])

        result = schedule.replace_assignments(course_id, 10, 2026, [t2])

        assert result.reconciled[0].added == (t2,)
        assert result.reconciled[0].removed == (t1,)
        assert ledger_selector.trainer_ids_for_key(course_id, 10, 2026) == {t2}

    def test_duplicates_collapse(self, session, schedule, make_course, make_trainer):
        course_id = make_course()
        t1 = make_trainer()

        schedule.replace_assignments(course_id, 10, 2026, [t1, t1, t1])

        assert session.query(WeeklyAssignment).count() == 1
        assert session.query(TrainingSession).count() == 1

    def test_clear_assignments_removes_ledger_rows(self, schedule, ledger_selector, make_course, make_trainer):
        course_id = make_course()
        t1 = make_trainer()
        schedule.replace_assignments(course_id, 10, 2026, [t1])

        result = schedule.clear_assignments(course_id, 10, 2026)

        assert result.reconciled[0].removed == (t1,)
        assert ledger_selector.trainer_ids_for_key(course_id, 10, 2026) == frozenset()

    def test_unknown_trainer_rejected_without_write(self, session, schedule, make_course, make_trainer):
        course_id = make_course()
        t1 = make_trainer()

        with pytest.raises(UnknownTrainerError) as exc_info:
            schedule.replace_assignments(course_id, 10, 2026, [t1, 9001])

        assert exc_info.value.trainer_ids == [9001]
        assert session.query(WeeklyAssignment).count() == 0
        assert session.query(TrainingSession).count() == 0

    def test_unknown_course_rejected(self, schedule, make_trainer):
        with pytest.raises(CourseNotFoundError):
            schedule.replace_assignments(404, 10, 2026, [make_trainer()])

    def test_invalid_week_rejected(self, schedule, make_course):
        with pytest.raises(InvalidWeekError):
            schedule.replace_assignments(make_course(), 53, 2025, [])

    def test_other_weeks_untouched(self, schedule, ledger_selector, make_course, make_trainer):
        course_id = make_course()
        t1 = make_trainer()
        schedule.replace_assignments(course_id, 9, 2026, [t1])

        schedule.replace_assignments(course_id, 10, 2026, [])

        assert ledger_selector.trainer_ids_for_key(course_id, 9, 2026) == {t1}


class TestCancellation:

    def test_cancel_removes_and_reactivate_restores(self, schedule, ledger_selector, make_course, make_trainer):
        course_id = make_course()
        t1 = make_trainer()
        schedule.replace_assignments(course_id, 10, 2026, [t1])

        cancelled = schedule.cancel_course(course_id, 10, 2026, reason="Hallensperrung")
        assert cancelled.reconciled[0].removed == (t1,)
        assert ledger_selector.trainer_ids_for_key(course_id, 10, 2026) == frozenset()

        reactivated = schedule.reactivate_course(course_id, 10, 2026)
        assert reactivated.reconciled[0].added == (t1,)
        assert ledger_selector.entry_for_key(course_id, 10, 2026, t1).hours == Decimal("1.50")

    def test_cancel_twice_updates_reason(self, session, schedule, schedule_selector, make_course):
        course_id = make_course()
        schedule.cancel_course(course_id, 10, 2026)
        assert schedule_selector.cancellation_reason(course_id, 10, 2026) == "Sonstiges"

        schedule.cancel_course(course_id, 10, 2026, reason="Krankheit")

        assert session.query(CancelledCourse).count() == 1
        assert schedule_selector.cancellation_reason(course_id, 10, 2026) == "Krankheit"

    def test_reactivate_without_cancellation_is_noop(self, schedule, make_course):
        result = schedule.reactivate_course(make_course(), 10, 2026)
        assert not result.changed

    def test_cancel_unknown_course(self, schedule):
        with pytest.raises(CourseNotFoundError):
            schedule.cancel_course(404, 10, 2026)


class TestHolidayWeeks:

    def test_holiday_removes_rows_of_all_courses(self, schedule, ledger_selector, make_course, make_trainer):
        c1 = make_course()
        c2 = make_course(weekday="Montag", name="Yoga")
        t1 = make_trainer()
        schedule.replace_assignments(c1, 10, 2026, [t1])
        schedule.replace_assignments(c2, 10, 2026, [t1])

        result = schedule.add_holiday_week(10, 2026)

        assert {r.course_id for r in result.reconciled} == {c1, c2}
        assert ledger_selector.entries_for_week(10, 2026) == ()

    def test_courses_with_exception_unaffected(self, schedule, ledger_selector, make_course, make_trainer):
        c1 = make_course()
        c2 = make_course(weekday="Montag", name="Yoga")
        t1 = make_trainer()
        schedule.replace_assignments(c1, 10, 2026, [t1])
        schedule.replace_assignments(c2, 10, 2026, [t1])
        schedule.add_exception(c2, 10, 2026)

        result = schedule.add_holiday_week(10, 2026)

        assert [r.course_id for r in result.reconciled] == [c1]
        assert ledger_selector.course_ids_in_week(10, 2026) == {c2}

    def test_remove_holiday_restores(self, schedule, ledger_selector, make_course, make_trainer):
        course_id = make_course()
        t1 = make_trainer()
        schedule.replace_assignments(course_id, 10, 2026, [t1])
        schedule.add_holiday_week(10, 2026)

        result = schedule.remove_holiday_week(10, 2026)

        assert result.reconciled[0].added == (t1,)
        assert ledger_selector.trainer_ids_for_key(course_id, 10, 2026) == {t1}

    def test_add_holiday_is_idempotent(self, session, schedule):
        schedule.add_holiday_week(10, 2026)
        schedule.add_holiday_week(10, 2026)
        assert session.query(HolidayWeek).count() == 1

    def test_invalid_holiday_week(self, schedule):
        with pytest.raises(InvalidWeekError):
            schedule.add_holiday_week(0, 2026)


class TestExceptions:

    def test_exception_restores_course_in_holiday_week(self, schedule, ledger_selector, make_course, make_trainer):
        course_id = make_course()
        t1 = make_trainer()
        schedule.add_holiday_week(10, 2026)
        schedule.replace_assignments(course_id, 10, 2026, [t1])
        assert ledger_selector.trainer_ids_for_key(course_id, 10, 2026) == frozenset()

        result = schedule.add_exception(course_id, 10, 2026)

        assert result.reconciled[0].added == (t1,)

    def test_remove_exception_in_holiday_week(self, session, schedule, ledger_selector, make_course, make_trainer):
        course_id = make_course()
        t1 = make_trainer()
        schedule.add_holiday_week(10, 2026)
        schedule.add_exception(course_id, 10, 2026)
        schedule.replace_assignments(course_id, 10, 2026, [t1])

        result = schedule.remove_exception(course_id, 10, 2026)

        assert result.reconciled[0].removed == (t1,)
        assert session.query(CourseException).count() == 0

    def test_exception_outside_holiday_changes_nothing(self, schedule, make_course, make_trainer):
        course_id = make_course()
        schedule.replace_assignments(course_id, 10, 2026, [make_trainer()])
        assert not schedule.add_exception(course_id, 10, 2026).changed


class TestAtomicity:

    def test_failed_reconcile_rolls_back_fact_write(self, session, schedule, make_course, make_trainer, monkeypatch):
        from sqlalchemy.exc import OperationalError

        course_id = make_course()
        t1 = make_trainer()

        def _boom(*args, **kwargs):
            raise OperationalError("INSERT", {}, Exception("disk full"))

        monkeypatch.setattr(
            "trainer_kernel.services.reconciliation_service.insert_ignore", _boom,
        )

        with pytest.raises(ReconciliationFailedError):
            schedule.replace_assignments(course_id, 10, 2026, [t1])

        assert session.query(WeeklyAssignment).count() == 0
        assert session.query(TrainingSession).count() == 0

    def test_rollback_logged(self, schedule, captured_logs):
        with pytest.raises(CourseNotFoundError):
            schedule.cancel_course(404, 10, 2026)
        rolled_back = [r for r in captured_logs() if r["message"] == "service_transaction_rolled_back"]
        assert rolled_back[0]["operation"] == "cancel_course"
