"""Tests for trainer_kernel.selectors.schedule_selector."""

from datetime import time

from trainer_kernel.domain.calendar import TUESDAY
from trainer_kernel.models.schedule import (
    CancelledCourse,
    CourseException,
    HolidayWeek,
    WeeklyAssignment,
)


def _assign(session, course_id, week, year, *trainer_ids):
    for trainer_id in trainer_ids:
        session.add(WeeklyAssignment(
            course_id=course_id, week_number=week, year=year, trainer_id=trainer_id,
        ))
    session.flush()


class TestCourseLookup:

    def test_get_course(self, schedule_selector, make_course):
        course_id = make_course()
        course = schedule_selector.get_course(course_id)
        assert course.course_id == course_id
        assert course.weekday == TUESDAY
        assert course.start_time == time(18, 0)
        assert course.is_active

    def test_missing_course_is_none(self, schedule_selector):
        assert schedule_selector.get_course(999) is None

    def test_existing_trainer_ids(self, schedule_selector, make_trainer):
        t1 = make_trainer()
        assert schedule_selector.existing_trainer_ids({t1, 999}) == frozenset({t1})
        assert schedule_selector.existing_trainer_ids(set()) == frozenset()


class TestWeeklyFacts:

    def test_assigned_trainer_ids(self, session, schedule_selector, make_course, make_trainer):
        course_id = make_course()
        t1, t2 = make_trainer(), make_trainer()
        _assign(session, course_id, 10, 2026, t1, t2)
        _assign(session, course_id, 11, 2026, t1)

        assert schedule_selector.assigned_trainer_ids(course_id, 10, 2026) == {t1, t2}
        assert schedule_selector.assigned_trainer_ids(course_id, 11, 2026) == {t1}
        assert schedule_selector.assigned_trainer_ids(course_id, 12, 2026) == frozenset()

    def test_occurrence_facts(self, session, schedule_selector, make_course):
        course_id = make_course()
        session.add(CancelledCourse(course_id=course_id, week_number=10, year=2026, reason="Krank"))
        session.add(HolidayWeek(week_number=11, year=2026))
        session.add(CourseException(course_id=course_id, week_number=11, year=2026))
        session.flush()

        w10 = schedule_selector.occurrence_facts(course_id, 10, 2026)
        assert w10.cancelled and not w10.holiday and not w10.occurs

        w11 = schedule_selector.occurrence_facts(course_id, 11, 2026)
        assert w11.holiday and w11.exception and w11.occurs

        assert schedule_selector.occurrence_facts(course_id, 12, 2026).occurs
        assert schedule_selector.cancellation_reason(course_id, 10, 2026) == "Krank"

    def test_occurrence_facts_for_missing_course(self, schedule_selector):
        facts = schedule_selector.occurrence_facts(404, 10, 2026)
        assert not facts.course_exists
        assert not facts.occurs

    def test_courses_assigned_in_week(self, session, schedule_selector, make_course, make_trainer):
        c1, c2 = make_course(), make_course(weekday="Donnerstag")
        t1 = make_trainer()
        _assign(session, c1, 10, 2026, t1)
        _assign(session, c2, 11, 2026, t1)
        assert schedule_selector.courses_assigned_in_week(10, 2026) == {c1}

    def test_courses_with_exception_in_week(self, session, schedule_selector, make_course):
        c1 = make_course()
        session.add(CourseException(course_id=c1, week_number=10, year=2026))
        session.flush()
        assert schedule_selector.courses_with_exception_in_week(10, 2026) == {c1}
        assert schedule_selector.courses_with_exception_in_week(11, 2026) == frozenset()


class TestAllAssignmentTuples:

    def test_joined_with_course_schedule(self, session, schedule_selector, make_course, make_trainer):
        course_id = make_course(weekday="Montag", start_time=time(9, 0), end_time=time(10, 0))
        t1, t2 = make_trainer(), make_trainer()
        _assign(session, course_id, 11, 2026, t2)
        _assign(session, course_id, 10, 2026, t1)

        tuples = schedule_selector.all_assignment_tuples()
        assert [(a.week, a.trainer_id) for a in tuples] == [(10, t1), (11, t2)]
        first = tuples[0]
        assert first.weekday == 0
        assert first.start_time == time(9, 0)
        assert first.item_key == f"{course_id}:2026-W10:{t1}"

    def test_empty(self, schedule_selector):
        assert schedule_selector.all_assignment_tuples() == ()


class TestRosterForWeek:

    def test_explicit_assignment_wins(self, session, schedule_selector, make_course, make_trainer):
        t1, t2 = make_trainer(), make_trainer()
        course_id = make_course(default_trainer_ids=[t1])
        _assign(session, course_id, 10, 2026, t2)
        assert schedule_selector.roster_for_week(course_id, 10, 2026) == (t2,)

    def test_falls_back_to_default_trainers(self, schedule_selector, make_course, make_trainer):
        t1, t2 = make_trainer(), make_trainer()
        course_id = make_course(default_trainer_ids=[t2, t1])
        assert schedule_selector.roster_for_week(course_id, 10, 2026) == (t1, t2)

    def test_fallback_can_be_disabled(self, schedule_selector, make_course, make_trainer):
        t1 = make_trainer()
        course_id = make_course(default_trainer_ids=[t1])
        assert schedule_selector.roster_for_week(course_id, 10, 2026, apply_defaults=False) == ()
