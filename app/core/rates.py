"""Rate table resolution for a single sub-event.

On-call is paid per exact hour outside office hours. Incidents are paid on the
base salary with a weekday or weekend multiplier, hours rounded up per slice,
and an extra multiplier during the night shift. Holiday slices are paid at the
weekend rate.
"""

from __future__ import annotations

import math

from app.core.config import (
    BASE_HOURLY_SALARY,
    NIGHT_SHIFT_BONUS_MULTIPLIER,
    WEEKDAY_INCIDENT_MULTIPLIER,
    WEEKDAY_ONCALL_RATE,
    WEEKEND_INCIDENT_MULTIPLIER,
    WEEKEND_ONCALL_RATE,
)
from app.core.constants import EVENT_TYPE_INCIDENT, EVENT_TYPE_ONCALL
from app.core.models import SubEvent

# Rate categories used for month hour totals and billing lines
RATE_WEEKDAY_ONCALL = "weekday_oncall"
RATE_WEEKEND_ONCALL = "weekend_oncall"
RATE_WEEKDAY_INCIDENT = "weekday_incident"
RATE_WEEKEND_INCIDENT = "weekend_incident"
RATE_WEEKDAY_NIGHT_INCIDENT = "weekday_night_incident"
RATE_WEEKEND_NIGHT_INCIDENT = "weekend_night_incident"

RATE_DESCRIPTIONS: dict[str, str] = {
    RATE_WEEKDAY_ONCALL: "Weekday on-call",
    RATE_WEEKEND_ONCALL: "Weekend on-call",
    RATE_WEEKDAY_INCIDENT: "Weekday incident",
    RATE_WEEKEND_INCIDENT: "Weekend incident",
    RATE_WEEKDAY_NIGHT_INCIDENT: "Weekday night shift incident",
    RATE_WEEKEND_NIGHT_INCIDENT: "Weekend night shift incident",
}


def uses_weekend_rate(sub_event: SubEvent) -> bool:
    return sub_event.is_weekend or sub_event.is_holiday


def is_billable(sub_event: SubEvent) -> bool:
    """Whether the slice earns anything at all."""
    if sub_event.type == EVENT_TYPE_INCIDENT:
        return True
    if sub_event.type == EVENT_TYPE_ONCALL:
        return not sub_event.is_office_hours or sub_event.is_night_shift
    return False


def billable_hours(sub_event: SubEvent) -> float:
    """Exact hours for on-call, whole hours (rounded up) for incidents."""
    if not is_billable(sub_event):
        return 0.0
    hours = sub_event.duration_hours
    if sub_event.type == EVENT_TYPE_INCIDENT:
        return float(math.ceil(hours))
    return hours


def rate_category(sub_event: SubEvent) -> str | None:
    if sub_event.type == EVENT_TYPE_ONCALL:
        return RATE_WEEKEND_ONCALL if uses_weekend_rate(sub_event) else RATE_WEEKDAY_ONCALL
    if sub_event.type == EVENT_TYPE_INCIDENT:
        weekend = uses_weekend_rate(sub_event)
        if sub_event.is_night_shift:
            return RATE_WEEKEND_NIGHT_INCIDENT if weekend else RATE_WEEKDAY_NIGHT_INCIDENT
        return RATE_WEEKEND_INCIDENT if weekend else RATE_WEEKDAY_INCIDENT
    return None


def rate_parameters(category: str) -> tuple[float, float | None, float | None]:
    """(hourly rate, multiplier, night shift multiplier) of a rate category."""
    if category == RATE_WEEKDAY_ONCALL:
        return WEEKDAY_ONCALL_RATE, None, None
    if category == RATE_WEEKEND_ONCALL:
        return WEEKEND_ONCALL_RATE, None, None
    if category == RATE_WEEKDAY_INCIDENT:
        return BASE_HOURLY_SALARY, WEEKDAY_INCIDENT_MULTIPLIER, None
    if category == RATE_WEEKEND_INCIDENT:
        return BASE_HOURLY_SALARY, WEEKEND_INCIDENT_MULTIPLIER, None
    if category == RATE_WEEKDAY_NIGHT_INCIDENT:
        return BASE_HOURLY_SALARY, WEEKDAY_INCIDENT_MULTIPLIER, NIGHT_SHIFT_BONUS_MULTIPLIER
    if category == RATE_WEEKEND_NIGHT_INCIDENT:
        return BASE_HOURLY_SALARY, WEEKEND_INCIDENT_MULTIPLIER, NIGHT_SHIFT_BONUS_MULTIPLIER
    raise ValueError(f"Unknown rate category: {category!r}")


def amount_for_hours(category: str, hours: float) -> float:
    rate, multiplier, night_multiplier = rate_parameters(category)
    amount = hours * rate
    if multiplier is not None:
        amount *= multiplier
    if night_multiplier is not None:
        amount *= night_multiplier
    return amount


def sub_event_amount(sub_event: SubEvent) -> float:
    """Unrounded money earned by one slice."""
    category = rate_category(sub_event)
    if category is None:
        return 0.0
    return amount_for_hours(category, billable_hours(sub_event))
