import datetime
import logging
from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from app.core.config import (
    MONTH_KEY_FORMAT,
    NIGHT_SHIFT_END_HOUR,
    NIGHT_SHIFT_START_HOUR,
    OFFICE_HOURS_END,
    OFFICE_HOURS_START,
)
from app.core.constants import OFFICE_WEEKDAYS, SECONDS_PER_HOUR, WEEKEND_WEEKDAYS

logger = logging.getLogger(__name__)

_local_timezone_name = "Europe/Amsterdam"


def set_local_timezone(name: str) -> None:
    """Set the zone aware datetimes are converted to before classification."""
    global _local_timezone_name
    _get_zone(name)
    _local_timezone_name = name


@lru_cache(maxsize=8)
def _get_zone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except ZoneInfoNotFoundError as e:
        logger.exception("Unknown time zone %r", name)
        raise ValueError(f"Unknown time zone: {name!r}") from e


def to_local(instant: datetime.datetime) -> datetime.datetime:
    """Return local wall time as a naive datetime.

    Naive values are already local wall time and pass through unchanged.
    ``fold`` is kept so the repeated hour when clocks go back stays unambiguous.
    """
    if instant.tzinfo is None:
        return instant
    return instant.astimezone(_get_zone(_local_timezone_name)).replace(tzinfo=None)


def to_utc(instant: datetime.datetime) -> datetime.datetime:
    """Aware UTC instant for a local wall time (or any aware datetime)."""
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=_get_zone(_local_timezone_name))
    return instant.astimezone(datetime.timezone.utc)


# ==========================
# Classification
# ==========================


def is_weekend(instant: datetime.datetime) -> bool:
    return to_local(instant).weekday() in WEEKEND_WEEKDAYS


def is_weekday(instant: datetime.datetime) -> bool:
    return not is_weekend(instant)


def is_night_shift(
    instant: datetime.datetime,
    start_hour: int = NIGHT_SHIFT_START_HOUR,
    end_hour: int = NIGHT_SHIFT_END_HOUR,
) -> bool:
    """Night shift runs from start_hour to end_hour across midnight."""
    hour = to_local(instant).hour
    return hour >= start_hour or hour < end_hour


def is_office_hours(instant: datetime.datetime) -> bool:
    """Monday to Friday, [09:00, 17:00) local time."""
    local = to_local(instant)
    if local.weekday() not in OFFICE_WEEKDAYS:
        return False
    return OFFICE_HOURS_START <= local.hour < OFFICE_HOURS_END


def duration_hours(start: datetime.datetime, end: datetime.datetime) -> float:
    """Elapsed hours between two instants; a DST change shortens or lengthens the night."""
    return (to_utc(end) - to_utc(start)).total_seconds() / SECONDS_PER_HOUR


def next_full_hour(instant: datetime.datetime) -> datetime.datetime:
    """The first whole hour strictly after instant."""
    floored = instant.replace(minute=0, second=0, microsecond=0)
    return floored + datetime.timedelta(hours=1)


# ==========================
# Months
# ==========================


def month_key(instant: datetime.datetime | datetime.date) -> str:
    return instant.strftime(MONTH_KEY_FORMAT)


def month_start(instant: datetime.datetime | datetime.date) -> datetime.datetime:
    """First instant of the month containing instant."""
    return datetime.datetime(instant.year, instant.month, 1)


def next_month_start(instant: datetime.datetime | datetime.date) -> datetime.datetime:
    if instant.month == 12:
        return datetime.datetime(instant.year + 1, 1, 1)
    return datetime.datetime(instant.year, instant.month + 1, 1)


def same_month(a: datetime.datetime | datetime.date, b: datetime.datetime | datetime.date) -> bool:
    return a.year == b.year and a.month == b.month


def overlaps_month(
    start: datetime.datetime, end: datetime.datetime, month_date: datetime.datetime | datetime.date
) -> bool:
    return start < next_month_start(month_date) and end > month_start(month_date)


def clip_to_month(
    start: datetime.datetime, end: datetime.datetime, month_date: datetime.datetime | datetime.date
) -> tuple[datetime.datetime, datetime.datetime] | None:
    """Clip [start, end) to the month of month_date, or None if they do not overlap."""
    first = month_start(month_date)
    following = next_month_start(month_date)
    clipped_start = max(start, first)
    clipped_end = min(end, following)
    if clipped_end <= clipped_start:
        return None
    return clipped_start, clipped_end
