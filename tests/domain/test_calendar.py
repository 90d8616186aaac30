"""
Tests for trainer_kernel.domain.calendar -- ISO week arithmetic.

Fixed known dates plus hypothesis round-trips against ``date.isocalendar()``.
"""

from datetime import date, timedelta

import pytest
from hypothesis import given
from hypothesis import strategies as st

from trainer_kernel.domain.calendar import (
    MONDAY,
    SUNDAY,
    TUESDAY,
    date_of_weekday,
    iso_week_of,
    monday_of_iso_week,
    parse_weekday,
    validate_iso_week,
    weekday_name,
    weeks_in_year,
)
from trainer_kernel.exceptions import InvalidWeekdayError, InvalidWeekError


class TestMondayOfIsoWeek:
    """Anchor-on-January-4th computation."""

    def test_week_10_2026(self):
        assert monday_of_iso_week(10, 2026) == date(2026, 3, 2)

    def test_week_1_can_start_in_previous_year(self):
        assert monday_of_iso_week(1, 2026) == date(2025, 12, 29)
        assert monday_of_iso_week(1, 2025) == date(2024, 12, 30)

    def test_week_53_of_long_year(self):
        assert monday_of_iso_week(53, 2020) == date(2020, 12, 28)

    def test_week_1_starting_on_jan_4(self):
        assert monday_of_iso_week(1, 2021) == date(2021, 1, 4)

    @given(st.dates(min_value=date(1900, 1, 8), max_value=date(2200, 12, 24)))
    def test_round_trip_with_isocalendar(self, day):
        iso_year, iso_week, iso_weekday = day.isocalendar()
        assert monday_of_iso_week(iso_week, iso_year) == day - timedelta(days=iso_weekday - 1)


class TestDateOfWeekday:

    def test_tuesday_of_week_10_2026(self):
        assert date_of_weekday(10, 2026, TUESDAY) == date(2026, 3, 3)

    def test_sunday_is_last_day_of_week(self):
        assert date_of_weekday(10, 2026, SUNDAY) == date(2026, 3, 8)

    @given(
        st.dates(min_value=date(1900, 1, 8), max_value=date(2200, 12, 24)),
    )
    def test_inverse_of_iso_week_of(self, day):
        week, year = iso_week_of(day)
        assert date_of_weekday(week, year, day.weekday()) == day

    @pytest.mark.parametrize("weekday", [-1, 7, 1.5, True, "2"])
    def test_invalid_weekday_rejected(self, weekday):
        with pytest.raises(InvalidWeekdayError):
            date_of_weekday(10, 2026, weekday)


class TestValidateIsoWeek:

    def test_weeks_in_year(self):
        assert weeks_in_year(2026) == 53
        assert weeks_in_year(2020) == 53
        assert weeks_in_year(2025) == 52

    def test_week_53_only_in_long_years(self):
        validate_iso_week(53, 2026)
        with pytest.raises(InvalidWeekError) as exc_info:
            validate_iso_week(53, 2025)
        assert exc_info.value.code == "INVALID_WEEK"
        assert "1..52" in exc_info.value.reason

    @pytest.mark.parametrize(
        "week,year",
        [(0, 2026), (54, 2026), (-1, 2026), (10, 0), (10, 10000), ("10", 2026), (10, "2026"), (True, 2026), (10.0, 2026)],
    )
    def test_rejects_malformed_input(self, week, year):
        with pytest.raises(InvalidWeekError):
            validate_iso_week(week, year)

    def test_monday_of_iso_week_validates(self):
        with pytest.raises(InvalidWeekError):
            monday_of_iso_week(53, 2025)


class TestParseWeekday:

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("Montag", MONDAY),
            ("Dienstag", TUESDAY),
            ("dienstag", TUESDAY),
            ("Di.", TUESDAY),
            ("  Sonntag ", SUNDAY),
            ("Wednesday", 2),
            ("thu", 3),
            ("Fr", 4),
            ("Samstag", 5),
            (0, MONDAY),
            (6, SUNDAY),
            ("1", TUESDAY),
        ],
    )
    def test_known_values(self, value, expected):
        assert parse_weekday(value) == expected

    @pytest.mark.parametrize("value", ["Feiertag", "", 7, -1, None, True, "8"])
    def test_unknown_values(self, value):
        with pytest.raises(InvalidWeekdayError):
            parse_weekday(value)

    def test_weekday_name_round_trip(self):
        for idx in range(7):
            assert parse_weekday(weekday_name(idx)) == idx
        assert weekday_name(TUESDAY) == "Dienstag"
