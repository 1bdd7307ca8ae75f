"""Holiday lookup against the user-entered holiday events."""

import datetime
import logging
from collections.abc import Iterable
from functools import lru_cache

from app.core.constants import EVENT_TYPE_HOLIDAY
from app.core.models import CalendarEvent
from app.core.time_utils import to_local

logger = logging.getLogger(__name__)

Fingerprint = tuple[tuple[str, datetime.datetime, datetime.datetime], ...]


def holiday_fingerprint(holidays: Iterable[CalendarEvent]) -> Fingerprint:
    """Stable identity of a holiday set: sorted (id, start, end) triples."""
    return tuple(sorted((h.id, h.start, h.end) for h in holidays))


@lru_cache(maxsize=4096)
def _is_holiday_cached(instant: datetime.datetime, fingerprint: Fingerprint) -> bool:
    # Both ends inclusive
    return any(start <= instant <= end for _, start, end in fingerprint)


def clear_holiday_cache() -> None:
    """Drop memoised lookups. Call whenever a holiday is created, updated or deleted."""
    _is_holiday_cached.cache_clear()
    logger.debug("Holiday lookup cache cleared")


def is_holiday(instant: datetime.datetime, holidays: Iterable[CalendarEvent]) -> bool:
    holidays = list(holidays)
    if not holidays:
        return False
    return _is_holiday_cached(to_local(instant), holiday_fingerprint(holidays))


def holidays_excluding(event: CalendarEvent, holidays: Iterable[CalendarEvent]) -> list[CalendarEvent]:
    """The holiday set to classify event against: every holiday but the event itself."""
    return [h for h in holidays if h.type == EVENT_TYPE_HOLIDAY and h.id != event.id]


class HolidayIndex:
    """A holiday set with its fingerprint computed once, for repeated lookups."""

    def __init__(self, holidays: Iterable[CalendarEvent] = ()):
        self.holidays = [h for h in holidays if h.type == EVENT_TYPE_HOLIDAY]
        self.fingerprint = holiday_fingerprint(self.holidays)

    def __len__(self) -> int:
        return len(self.holidays)

    def is_holiday(self, instant: datetime.datetime) -> bool:
        if not self.fingerprint:
            return False
        return _is_holiday_cached(to_local(instant), self.fingerprint)

    def without(self, event_id: str) -> "HolidayIndex":
        return HolidayIndex(h for h in self.holidays if h.id != event_id)
