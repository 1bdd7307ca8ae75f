"""
Repository interfaces for events and sub-events, plus the in-memory backend.

Every backend (in-memory, SQLAlchemy, JSON document store) implements the same
two interfaces so the use cases never know where data lives.
"""

import datetime
import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable

from app.core.constants import EVENT_TYPE_HOLIDAY
from app.core.errors import NotFoundError
from app.core.models import CalendarEvent, SubEvent

logger = logging.getLogger(__name__)


def starts_in_range(event: CalendarEvent, start: datetime.datetime, end: datetime.datetime) -> bool:
    """Event start within [start, end)."""
    return start <= event.start < end


def overlaps_range(event: CalendarEvent, start: datetime.datetime, end: datetime.datetime) -> bool:
    """Event interval touches [start, end], both ends inclusive."""
    return event.start <= end and event.end >= start


class CalendarEventRepository(ABC):
    @abstractmethod
    def save(self, events: Iterable[CalendarEvent]) -> None:
        """Insert or replace events by id."""

    @abstractmethod
    def get_all(self) -> list[CalendarEvent]: ...

    @abstractmethod
    def get_by_id(self, event_id: str) -> CalendarEvent | None: ...

    def get_holiday_events(self) -> list[CalendarEvent]:
        return [e for e in self.get_all() if e.type == EVENT_TYPE_HOLIDAY]

    def get_events_for_date_range(self, start: datetime.datetime, end: datetime.datetime) -> list[CalendarEvent]:
        """Events starting in [start, end)."""
        return sorted((e for e in self.get_all() if starts_in_range(e, start, end)), key=lambda e: e.start)

    def get_events_overlapping_date_range(
        self,
        start: datetime.datetime,
        end: datetime.datetime,
        types: Iterable[str] | None = None,
    ) -> list[CalendarEvent]:
        wanted = set(types) if types is not None else None
        return sorted(
            (
                e
                for e in self.get_all()
                if overlaps_range(e, start, end) and (wanted is None or e.type in wanted)
            ),
            key=lambda e: e.start,
        )

    @abstractmethod
    def update(self, event: CalendarEvent) -> None:
        """Replace an existing event. Raises NotFoundError when it does not exist."""

    @abstractmethod
    def delete(self, event_id: str) -> None: ...

    @abstractmethod
    def delete_multiple_by_ids(self, event_ids: Iterable[str]) -> None: ...


class SubEventRepository(ABC):
    @abstractmethod
    def save(self, sub_events: Iterable[SubEvent]) -> None: ...

    @abstractmethod
    def get_all(self) -> list[SubEvent]: ...

    @abstractmethod
    def get_by_parent_id(self, parent_event_id: str) -> list[SubEvent]: ...

    @abstractmethod
    def delete_by_parent_id(self, parent_event_id: str) -> None: ...

    @abstractmethod
    def delete_by_parent_ids(self, parent_event_ids: Iterable[str]) -> None: ...


# ==========================
# In-memory backend
# ==========================


class InMemoryCalendarEventRepository(CalendarEventRepository):
    def __init__(self, events: Iterable[CalendarEvent] = ()):
        self._events: dict[str, CalendarEvent] = {}
        self.save(events)

    def save(self, events: Iterable[CalendarEvent]) -> None:
        for event in events:
            self._events[event.id] = event.model_copy()

    def get_all(self) -> list[CalendarEvent]:
        return [e.model_copy() for e in self._events.values()]

    def get_by_id(self, event_id: str) -> CalendarEvent | None:
        event = self._events.get(event_id)
        return event.model_copy() if event is not None else None

    def update(self, event: CalendarEvent) -> None:
        if event.id not in self._events:
            raise NotFoundError(f"Event {event.id} not found", {"event_id": event.id})
        self._events[event.id] = event.model_copy()

    def delete(self, event_id: str) -> None:
        self._events.pop(event_id, None)

    def delete_multiple_by_ids(self, event_ids: Iterable[str]) -> None:
        for event_id in event_ids:
            self._events.pop(event_id, None)


class InMemorySubEventRepository(SubEventRepository):
    def __init__(self, sub_events: Iterable[SubEvent] = ()):
        self._sub_events: dict[str, SubEvent] = {}
        self.save(sub_events)

    def save(self, sub_events: Iterable[SubEvent]) -> None:
        # SubEvent is frozen, no copy needed
        for sub_event in sub_events:
            self._sub_events[sub_event.id] = sub_event

    def get_all(self) -> list[SubEvent]:
        return list(self._sub_events.values())

    def get_by_parent_id(self, parent_event_id: str) -> list[SubEvent]:
        return sorted(
            (s for s in self._sub_events.values() if s.parent_event_id == parent_event_id),
            key=lambda s: s.start,
        )

    def delete_by_parent_id(self, parent_event_id: str) -> None:
        self.delete_by_parent_ids([parent_event_id])

    def delete_by_parent_ids(self, parent_event_ids: Iterable[str]) -> None:
        parents = set(parent_event_ids)
        self._sub_events = {
            key: s for key, s in self._sub_events.items() if s.parent_event_id not in parents
        }
