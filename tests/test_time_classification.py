# tests/test_time_classification.py
"""
Unit tests for instant classification (weekend, night shift, office hours)
and the month helpers.
"""

import datetime
import sys
from pathlib import Path

import pytest

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# ruff: noqa: E402
from app.core.time_utils import (
    clip_to_month,
    duration_hours,
    is_night_shift,
    is_office_hours,
    is_weekday,
    is_weekend,
    month_key,
    month_start,
    next_full_hour,
    next_month_start,
    same_month,
    set_local_timezone,
    to_local,
)

MONDAY = datetime.datetime(2024, 1, 1)
SATURDAY = datetime.datetime(2024, 1, 6)
SUNDAY = datetime.datetime(2024, 1, 7)


class TestWeekend:
    @pytest.mark.parametrize("day", [SATURDAY, SUNDAY])
    def test_weekend_days(self, day):
        assert is_weekend(day.replace(hour=12))
        assert not is_weekday(day.replace(hour=12))

    def test_monday_is_weekday(self):
        assert is_weekday(MONDAY.replace(hour=12))
        assert not is_weekend(MONDAY.replace(hour=12))

    def test_sunday_evening_utc_is_monday_in_tokyo(self):
        set_local_timezone("Asia/Tokyo")
        instant = datetime.datetime(2024, 1, 7, 20, 0, tzinfo=datetime.timezone.utc)
        assert is_weekday(instant)


class TestNightShift:
    @pytest.mark.parametrize(
        "hour,expected",
        [(21, False), (22, True), (23, True), (0, True), (5, True), (6, False), (12, False)],
    )
    def test_boundaries(self, hour, expected):
        assert is_night_shift(MONDAY.replace(hour=hour)) is expected

    def test_alternative_end_hour(self):
        instant = MONDAY.replace(hour=6, minute=30)
        assert not is_night_shift(instant)
        assert is_night_shift(instant, end_hour=7)


class TestOfficeHours:
    @pytest.mark.parametrize(
        "hour,minute,expected",
        [(8, 59, False), (9, 0, True), (12, 0, True), (16, 59, True), (17, 0, False)],
    )
    def test_weekday_boundaries(self, hour, minute, expected):
        assert is_office_hours(MONDAY.replace(hour=hour, minute=minute)) is expected

    def test_weekend_has_no_office_hours(self):
        assert not is_office_hours(SATURDAY.replace(hour=10))

    def test_aware_instant_is_converted(self):
        """07:00 UTC on a summer Monday is 09:00 in Amsterdam."""
        instant = datetime.datetime(2024, 7, 1, 7, 0, tzinfo=datetime.timezone.utc)
        assert to_local(instant) == datetime.datetime(2024, 7, 1, 9, 0)
        assert is_office_hours(instant)


class TestDurations:
    def test_fractional_hours(self):
        assert duration_hours(MONDAY.replace(hour=9), MONDAY.replace(hour=10, minute=30)) == 1.5

    def test_next_full_hour(self):
        assert next_full_hour(MONDAY.replace(hour=8, minute=30)) == MONDAY.replace(hour=9)
        assert next_full_hour(MONDAY.replace(hour=9)) == MONDAY.replace(hour=10)


class TestMonths:
    def test_month_key(self):
        assert month_key(datetime.datetime(2024, 1, 31, 23)) == "2024-01"

    def test_month_bounds(self):
        assert month_start(datetime.date(2024, 2, 15)) == datetime.datetime(2024, 2, 1)
        assert next_month_start(datetime.date(2024, 12, 5)) == datetime.datetime(2025, 1, 1)

    def test_same_month(self):
        assert same_month(datetime.datetime(2024, 1, 1), datetime.date(2024, 1, 31))
        assert not same_month(datetime.datetime(2024, 1, 1), datetime.date(2023, 1, 1))

    def test_clip_cross_month_event(self):
        start = datetime.datetime(2024, 1, 31, 22)
        end = datetime.datetime(2024, 2, 1, 6)
        assert clip_to_month(start, end, datetime.date(2024, 1, 1)) == (start, datetime.datetime(2024, 2, 1))
        assert clip_to_month(start, end, datetime.date(2024, 2, 1)) == (datetime.datetime(2024, 2, 1), end)
        assert clip_to_month(start, end, datetime.date(2024, 3, 1)) is None
