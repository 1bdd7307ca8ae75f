# tests/test_ripple.py
"""
Tests for regenerating sub-events when the holiday set changes.
"""

import datetime
import sys
from pathlib import Path

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# ruff: noqa: E402
from app.core.repositories import InMemorySubEventRepository
from app.core.ripple import HolidayRipple, merge_date_ranges
from app.core.event_service import EventService

CHRISTMAS = {
    "start": datetime.datetime(2024, 12, 25),
    "end": datetime.datetime(2024, 12, 25, 23, 59, 59),
    "type": "holiday",
}
CHRISTMAS_EVENING = {
    "start": datetime.datetime(2024, 12, 25, 17),
    "end": datetime.datetime(2024, 12, 25, 22),
    "type": "oncall",
}


class FlakySubEventRepository(InMemorySubEventRepository):
    """Fails to save sub-events of the given parents until healed."""

    def __init__(self, failing_parent_ids=()):
        super().__init__()
        self.failing_parent_ids = set(failing_parent_ids)

    def save(self, sub_events):
        sub_events = list(sub_events)
        if any(s.parent_event_id in self.failing_parent_ids for s in sub_events):
            raise RuntimeError("write rejected")
        super().save(sub_events)


class TestHolidayRipple:
    def test_new_holiday_regenerates_overlapping_shift(self, event_service, sub_event_repository):
        shift = event_service.create_event(CHRISTMAS_EVENING).event
        before = sub_event_repository.get_by_parent_id(shift.id)
        assert not any(s.is_holiday for s in before)

        result = event_service.create_event(CHRISTMAS)

        after = sub_event_repository.get_by_parent_id(shift.id)
        assert after and all(s.is_holiday for s in after)
        assert {s.id for s in before}.isdisjoint({s.id for s in after})
        assert [r.parent_event_id for r in result.ripple.results] == [shift.id]
        assert result.ripple.ok

    def test_holiday_is_not_rippled_onto_itself(self, event_service):
        result = event_service.create_event(CHRISTMAS)
        assert result.ripple.results == []

    def test_events_outside_holiday_are_untouched(self, event_service, sub_event_repository):
        shift = event_service.create_event(
            {"start": datetime.datetime(2024, 12, 27, 17), "end": datetime.datetime(2024, 12, 27, 22), "type": "oncall"}
        ).event
        before = sub_event_repository.get_by_parent_id(shift.id)

        event_service.create_event(CHRISTMAS)

        assert sub_event_repository.get_by_parent_id(shift.id) == before

    def test_deleting_holiday_clears_flag(self, event_service, sub_event_repository):
        holiday = event_service.create_event(CHRISTMAS).event
        shift = event_service.create_event(CHRISTMAS_EVENING).event
        assert all(s.is_holiday for s in sub_event_repository.get_by_parent_id(shift.id))

        result = event_service.delete_event(holiday.id)

        assert not any(s.is_holiday for s in sub_event_repository.get_by_parent_id(shift.id))
        assert [r.parent_event_id for r in result.ripple.results] == [shift.id]

    def test_moving_holiday_updates_old_and_new_dates(self, event_service, sub_event_repository):
        holiday = event_service.create_event(CHRISTMAS).event
        on_25th = event_service.create_event(CHRISTMAS_EVENING).event
        on_26th = event_service.create_event(
            {"start": datetime.datetime(2024, 12, 26, 17), "end": datetime.datetime(2024, 12, 26, 22), "type": "oncall"}
        ).event

        event_service.update_event(
            {
                "id": holiday.id,
                "start": datetime.datetime(2024, 12, 26),
                "end": datetime.datetime(2024, 12, 26, 23, 59, 59),
                "type": "holiday",
            }
        )

        assert not any(s.is_holiday for s in sub_event_repository.get_by_parent_id(on_25th.id))
        assert all(s.is_holiday for s in sub_event_repository.get_by_parent_id(on_26th.id))

    def test_failing_parent_does_not_stop_the_rest(self, event_repository):
        sub_events = FlakySubEventRepository()
        service = EventService(event_repository, sub_events)
        broken = service.create_event(CHRISTMAS_EVENING).event
        healthy = service.create_event(
            {"start": datetime.datetime(2024, 12, 25, 6), "end": datetime.datetime(2024, 12, 25, 9), "type": "incident"}
        ).event
        sub_events.failing_parent_ids = {broken.id}

        report = service.create_event(CHRISTMAS).ripple

        assert [r.parent_event_id for r in report.failed] == [broken.id]
        assert report.failed[0].reason == "write rejected"
        assert [r.parent_event_id for r in report.succeeded] == [healthy.id]
        assert all(s.is_holiday for s in sub_events.get_by_parent_id(healthy.id))

    def test_retry_failed(self, event_repository):
        sub_events = FlakySubEventRepository()
        service = EventService(event_repository, sub_events)
        shift = service.create_event(CHRISTMAS_EVENING).event
        sub_events.failing_parent_ids = {shift.id}
        report = service.create_event(CHRISTMAS).ripple
        assert not report.ok

        sub_events.failing_parent_ids = set()
        retried = HolidayRipple(event_repository, sub_events).retry_failed(report)

        assert retried.ok
        assert [r.parent_event_id for r in retried.succeeded] == [shift.id]
        assert all(s.is_holiday for s in sub_events.get_by_parent_id(shift.id))


class TestMergeDateRanges:
    def test_overlapping_ranges_merge(self):
        a = (datetime.datetime(2024, 1, 1), datetime.datetime(2024, 1, 3))
        b = (datetime.datetime(2024, 1, 2), datetime.datetime(2024, 1, 5))
        c = (datetime.datetime(2024, 2, 1), datetime.datetime(2024, 2, 2))

        assert merge_date_ranges([c, b, a]) == [(a[0], b[1]), c]

    def test_empty(self):
        assert merge_date_ranges([]) == []
