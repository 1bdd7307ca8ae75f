# tests/test_models.py
"""
Unit tests for the CalendarEvent and SubEvent value objects.
"""

import datetime
import sys
from pathlib import Path

import pytest
from pydantic import ValidationError as PydanticValidationError

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# ruff: noqa: E402
from app.core.errors import ValidationError
from app.core.models import CalendarEvent, SubEvent


def _sub_event(**overrides):
    data = {
        "id": "sub-1",
        "parent_event_id": "event-1",
        "start": datetime.datetime(2024, 1, 6, 9, 0),
        "end": datetime.datetime(2024, 1, 6, 17, 0),
        "is_weekday": False,
        "is_weekend": True,
        "is_holiday": False,
        "is_night_shift": False,
        "is_office_hours": False,
        "type": "oncall",
    }
    data.update(overrides)
    return SubEvent(**data)


class TestCalendarEvent:
    def test_create_generates_id(self):
        event = CalendarEvent.create(
            start=datetime.datetime(2024, 1, 1, 9), end=datetime.datetime(2024, 1, 1, 17), type="oncall"
        )
        assert event.id
        assert event.type == "oncall"
        assert event.duration_hours == 8.0

    def test_end_before_start_is_rejected(self):
        with pytest.raises(ValidationError):
            CalendarEvent.create(
                start=datetime.datetime(2024, 1, 1, 17), end=datetime.datetime(2024, 1, 1, 9), type="oncall"
            )

    def test_zero_length_is_rejected(self):
        moment = datetime.datetime(2024, 1, 1, 9)
        with pytest.raises(ValidationError):
            CalendarEvent.create(start=moment, end=moment, type="incident")

    def test_unknown_type_is_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            CalendarEvent.create(
                start=datetime.datetime(2024, 1, 1, 9), end=datetime.datetime(2024, 1, 1, 17), type="vacation"
            )
        assert exc_info.value.code == "VALIDATION_ERROR"

    def test_from_json_parses_iso_strings(self):
        event = CalendarEvent.from_json(
            {"id": "e1", "start": "2024-01-01T09:00:00", "end": "2024-01-01T17:00:00", "type": "holiday"}
        )
        assert event.start == datetime.datetime(2024, 1, 1, 9)
        assert event.is_holiday_event
        assert not event.is_billable

    def test_aware_instants_become_local_wall_time(self):
        """08:00 UTC in January is 09:00 in Amsterdam."""
        event = CalendarEvent.from_json(
            {"id": "e1", "start": "2024-01-01T08:00:00Z", "end": "2024-01-01T16:00:00Z", "type": "oncall"}
        )
        assert event.start == datetime.datetime(2024, 1, 1, 9, 0)
        assert event.start.tzinfo is None

    def test_month_keys_for_cross_month_event(self):
        event = CalendarEvent.create(
            start=datetime.datetime(2024, 1, 31, 22), end=datetime.datetime(2024, 2, 1, 6), type="oncall"
        )
        assert event.month_keys() == ["2024-01", "2024-02"]

    def test_json_shape(self):
        event = CalendarEvent.create(
            start=datetime.datetime(2024, 1, 1, 9),
            end=datetime.datetime(2024, 1, 1, 17),
            type="oncall",
            title="Primary",
            id="e1",
        )
        assert event.to_json() == {
            "id": "e1",
            "start": "2024-01-01T09:00:00",
            "end": "2024-01-01T17:00:00",
            "type": "oncall",
            "title": "Primary",
        }


class TestSubEvent:
    def test_json_round_trip(self):
        sub_event = _sub_event()
        assert SubEvent.from_json(sub_event.to_json()) == sub_event

    def test_json_uses_camel_case(self):
        data = _sub_event().to_json()
        assert data["parentEventId"] == "event-1"
        assert data["isWeekend"] is True
        assert "is_weekend" not in data

    def test_weekday_must_negate_weekend(self):
        with pytest.raises(PydanticValidationError):
            _sub_event(is_weekday=True, is_weekend=True)

    def test_from_json_wraps_errors(self):
        data = _sub_event().to_json()
        data["parentEventId"] = ""
        with pytest.raises(ValidationError):
            SubEvent.from_json(data)

    def test_is_immutable(self):
        sub_event = _sub_event()
        with pytest.raises(PydanticValidationError):
            sub_event.is_holiday = True
