"""
Split a calendar event into classified sub-events.

The walk steps from the event start to the next full hour and then hour by
hour, with extra steps where a holiday begins or ends inside an hour. Each
step is classified at its start; consecutive steps with the same
classification (and the same calendar day) are merged into one slice.
"""

import bisect
import datetime
import logging
from collections.abc import Iterable

from app.core.holidays import HolidayIndex
from app.core.models import CalendarEvent, SubEvent, new_id
from app.core.time_utils import (
    is_night_shift,
    is_office_hours,
    is_weekend,
    next_full_hour,
    to_local,
)

logger = logging.getLogger(__name__)

SliceKey = tuple[bool, bool, bool, bool, datetime.date]

# Holiday ends are inclusive at one second resolution (00:00 to 23:59:59)
HOLIDAY_END_STEP = datetime.timedelta(seconds=1)


def classify_instant(instant: datetime.datetime, holidays: HolidayIndex) -> SliceKey:
    """(is_weekend, is_night_shift, is_office_hours, is_holiday, day) at instant."""
    return (
        is_weekend(instant),
        is_night_shift(instant),
        is_office_hours(instant),
        holidays.is_holiday(instant),
        instant.date(),
    )


def _make_sub_event(
    event: CalendarEvent, start: datetime.datetime, end: datetime.datetime, key: SliceKey
) -> SubEvent:
    weekend, night_shift, office_hours, holiday, _ = key
    return SubEvent(
        id=new_id(),
        parent_event_id=event.id,
        start=start,
        end=end,
        is_weekday=not weekend,
        is_weekend=weekend,
        is_holiday=holiday,
        is_night_shift=night_shift,
        is_office_hours=office_hours,
        type=event.type,
    )


def holiday_cut_points(event: CalendarEvent, holidays: HolidayIndex) -> list[datetime.datetime]:
    """Sorted instants strictly inside event where a holiday begins or stops."""
    start, end = to_local(event.start), to_local(event.end)
    cuts = set()
    for holiday in holidays.holidays:
        for boundary in (to_local(holiday.start), to_local(holiday.end) + HOLIDAY_END_STEP):
            if start < boundary < end:
                cuts.add(boundary)
    return sorted(cuts)


def divide_event(
    event: CalendarEvent, holidays: HolidayIndex | Iterable[CalendarEvent] = ()
) -> list[SubEvent]:
    """Return the ordered slices of event. Pure; nothing is persisted.

    Args:
        event: Event to subdivide (any type, holidays included)
        holidays: Holiday set to classify against, normally every holiday
            except the event itself

    Returns:
        Contiguous, non-overlapping slices covering [event.start, event.end)
    """
    index = holidays if isinstance(holidays, HolidayIndex) else HolidayIndex(holidays)
    cuts = holiday_cut_points(event, index)

    slices: list[SubEvent] = []
    slice_start = event.start
    slice_key = classify_instant(event.start, index)
    cursor = event.start

    while cursor < event.end:
        key = classify_instant(cursor, index)
        if key != slice_key:
            slices.append(_make_sub_event(event, slice_start, cursor, slice_key))
            slice_start = cursor
            slice_key = key
        step = next_full_hour(cursor)
        following = bisect.bisect_right(cuts, cursor)
        if following < len(cuts):
            step = min(step, cuts[following])
        cursor = min(step, event.end)

    slices.append(_make_sub_event(event, slice_start, event.end, slice_key))

    logger.debug(
        "Divided event into sub-events",
        extra={
            "extra_fields": {
                "event_id": event.id,
                "event_type": event.type,
                "sub_event_count": len(slices),
                "holiday_count": len(index),
            }
        },
    )
    return slices
