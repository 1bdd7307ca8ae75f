# tests/test_event_compensation.py
"""
Tests for per-event summaries, the calculator facade and the hours chart.
"""

import datetime
import sys
from pathlib import Path

import pytest

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# ruff: noqa: E402
from app.core.compensation import CompensationCalculatorFacade, EventCompensationService, build_hours_chart
from app.core.errors import StorageError
from app.core.models import MonthHours
from app.core.repositories import InMemorySubEventRepository
from app.core.subdivider import divide_event

JANUARY = datetime.date(2024, 1, 1)
FEBRUARY = datetime.date(2024, 2, 1)


class FailingSubEventRepository(InMemorySubEventRepository):
    """Sub-event store whose reads always fail."""

    def get_by_parent_id(self, parent_event_id):
        raise StorageError("store offline")


@pytest.fixture
def summary_service():
    return EventCompensationService()


class TestEventCompensationService:
    def test_weekday_overnight_oncall(self, summary_service, make_event):
        event = make_event(datetime.datetime(2024, 1, 1, 17), datetime.datetime(2024, 1, 2, 9))

        summary = summary_service.calculate_event_compensation(event, divide_event(event, []))

        assert summary.event_id == event.id
        assert summary.total == pytest.approx(62.40)
        assert [d.description for d in summary.details] == ["Weekday on-call"]
        assert summary.details[0].hours == pytest.approx(16.0)
        assert summary.hours.total == 16.0
        assert summary.hours.billable == 16.0
        assert summary.hours.weekday == 16.0
        assert summary.hours.weekend == 0.0
        assert summary.hours.night_shift == 8.0
        assert summary.hours.office_hours == 0.0
        assert summary.monthly_breakdown is None

    def test_incident_details_with_night_bonus(self, summary_service, make_event):
        event = make_event(datetime.datetime(2024, 1, 1, 21), datetime.datetime(2024, 1, 1, 23), "incident")

        summary = summary_service.calculate_event_compensation(event, divide_event(event, []))

        assert [(d.description, d.amount) for d in summary.details] == [
            ("Weekday incident", 60.30),
            ("Weekday night shift incident", 84.42),
        ]
        assert summary.details[1].night_shift_multiplier == 1.4
        assert summary.total == pytest.approx(144.72)

    def test_cross_month_event_has_monthly_breakdown(self, summary_service, make_event):
        event = make_event(datetime.datetime(2024, 1, 31, 22), datetime.datetime(2024, 2, 1, 6))

        summary = summary_service.calculate_event_compensation(event, divide_event(event, []))

        assert summary.total == pytest.approx(31.20)
        assert set(summary.monthly_breakdown) == {"2024-01", "2024-02"}
        assert summary.monthly_breakdown["2024-01"].amount == pytest.approx(7.80)
        assert summary.monthly_breakdown["2024-02"].amount == pytest.approx(23.40)

    def test_no_sub_events_gives_empty_summary(self, summary_service, make_event, caplog):
        event = make_event(datetime.datetime(2024, 1, 1, 17), datetime.datetime(2024, 1, 2, 9))

        summary = summary_service.calculate_event_compensation(event, [])

        assert summary.total == 0
        assert summary.details == []
        assert "No sub-events found" in caplog.text

    def test_foreign_sub_events_are_ignored(self, summary_service, make_event):
        event = make_event(datetime.datetime(2024, 1, 1, 17), datetime.datetime(2024, 1, 1, 22))
        other = make_event(datetime.datetime(2024, 1, 6, 9), datetime.datetime(2024, 1, 6, 17))

        summary = summary_service.calculate_event_compensation(
            event, divide_event(event, []) + divide_event(other, [])
        )

        assert summary.total == pytest.approx(19.50)


class TestFacade:
    def test_monthly_compensation_clips_cross_month_event(self, facade, event_service):
        created = event_service.create_event(
            {"start": datetime.datetime(2024, 1, 31, 22), "end": datetime.datetime(2024, 2, 1, 6), "type": "oncall"}
        )
        events = [created.event]

        january = facade.calculate_monthly_compensation(events, JANUARY)
        february = facade.calculate_monthly_compensation(events, FEBRUARY)

        assert january[-1].amount == pytest.approx(7.80)
        assert january[-1].events[0].end == datetime.datetime(2024, 2, 1)
        assert february[-1].amount == pytest.approx(23.40)
        assert february[-1].events[0].start == datetime.datetime(2024, 2, 1)

    def test_event_outside_month_is_ignored(self, facade, make_event):
        event = make_event(datetime.datetime(2024, 3, 2, 9), datetime.datetime(2024, 3, 2, 17))
        assert facade.calculate_monthly_compensation([event], JANUARY) == []

    def test_missing_sub_events_are_derived_in_memory(self, facade, event_repository, sub_event_repository, make_event, caplog):
        event = make_event(datetime.datetime(2024, 1, 6, 9), datetime.datetime(2024, 1, 6, 17))
        event_repository.save([event])

        breakdown = facade.calculate_monthly_compensation([event], JANUARY)

        assert breakdown[-1].amount == pytest.approx(58.72)
        assert sub_event_repository.get_all() == []
        assert "deriving them in memory" in caplog.text

    def test_derived_sub_events_see_holidays(self, facade, event_repository, make_event):
        christmas = make_event(datetime.datetime(2024, 12, 25), datetime.datetime(2024, 12, 25, 23, 59, 59), "holiday")
        event = make_event(datetime.datetime(2024, 12, 25, 17), datetime.datetime(2024, 12, 25, 22))
        event_repository.save([christmas, event])

        breakdown = facade.calculate_monthly_compensation([event], datetime.date(2024, 12, 1))

        assert breakdown[-1].amount == pytest.approx(36.70)

    def test_monthly_compensation_degrades_to_empty(self, event_repository, make_event):
        facade = CompensationCalculatorFacade(event_repository, FailingSubEventRepository())
        event = make_event(datetime.datetime(2024, 1, 6, 9), datetime.datetime(2024, 1, 6, 17))

        assert facade.calculate_monthly_compensation([event], JANUARY) == []

    def test_event_compensation_degrades_to_zero(self, event_repository, make_event):
        facade = CompensationCalculatorFacade(event_repository, FailingSubEventRepository())
        event = make_event(datetime.datetime(2024, 1, 6, 9), datetime.datetime(2024, 1, 6, 17))

        summary = facade.calculate_event_compensation(event)

        assert summary.event_id == event.id
        assert summary.total == 0

    def test_event_compensation_uses_stored_sub_events(self, facade, event_service):
        created = event_service.create_event(
            {"start": datetime.datetime(2024, 1, 6, 9), "end": datetime.datetime(2024, 1, 6, 17), "type": "oncall"}
        )
        assert facade.calculate_event_compensation(created.event).total == pytest.approx(58.72)

    def test_monthly_totals_in_hour_equivalents(self, facade, event_service):
        created = event_service.create_event(
            {"start": datetime.datetime(2024, 1, 31, 22), "end": datetime.datetime(2024, 2, 1, 6), "type": "oncall"}
        )
        totals = facade.calculate_monthly_totals([created.event], JANUARY)
        assert totals.night_shift == 3.0
        assert totals.total == 3.0

    def test_hours_chart_for_month(self, facade, event_service):
        created = event_service.create_event(
            {"start": datetime.datetime(2024, 1, 8, 21), "end": datetime.datetime(2024, 1, 8, 23), "type": "incident"}
        )

        chart = facade.month_hours_chart([created.event], JANUARY)

        assert [(item.name, item.hours) for item in chart] == [
            ("Weekday Incident", 2.0),
            ("Night Shift Incident", 1.0),
        ]

    def test_hours_chart_empty_month(self, facade):
        assert facade.month_hours_chart([], JANUARY) == []


class TestHoursChart:
    def test_night_hours_are_shown_twice(self):
        hours = MonthHours(weekend_incident=3.0, weekend_night_incident=2.0, weekday_oncall=10.0)

        chart = {item.name: item.hours for item in build_hours_chart(hours)}

        assert chart == {"Weekday On-Call": 10.0, "Weekend Incident": 5.0, "Weekend Night": 2.0}

    def test_include_empty_lists_every_bar(self):
        assert len(build_hours_chart(MonthHours(), include_empty=True)) == 6
