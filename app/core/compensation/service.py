"""Month level compensation: hour equivalents and the money breakdown."""

import datetime
import logging
from collections.abc import Iterable

from app.core.config import (
    HOUR_EQUIVALENT_HOLIDAY,
    HOUR_EQUIVALENT_NIGHT_SHIFT,
    HOUR_EQUIVALENT_REGULAR,
    HOUR_EQUIVALENT_WEEKEND,
)
from app.core.constants import (
    BILLABLE_EVENT_TYPES,
    BREAKDOWN_TYPE_INCIDENT,
    BREAKDOWN_TYPE_ONCALL,
    BREAKDOWN_TYPE_TOTAL,
    CATEGORY_HOLIDAY,
    CATEGORY_NIGHT_SHIFT,
    CATEGORY_REGULAR,
    CATEGORY_WEEKEND,
    EVENT_TYPE_INCIDENT,
    EVENT_TYPE_ONCALL,
)
from app.core.models import (
    CalendarEvent,
    CompensationBreakdown,
    EventReference,
    MonthBreakdownEntry,
    MonthHours,
    SubEvent,
)
from app.core.rates import (
    RATE_WEEKDAY_INCIDENT,
    RATE_WEEKDAY_NIGHT_INCIDENT,
    RATE_WEEKDAY_ONCALL,
    RATE_WEEKEND_INCIDENT,
    RATE_WEEKEND_NIGHT_INCIDENT,
    RATE_WEEKEND_ONCALL,
    amount_for_hours,
    billable_hours,
    rate_category,
    sub_event_amount,
)
from app.core.time_utils import month_key, month_start, overlaps_month, same_month

logger = logging.getLogger(__name__)

HOUR_EQUIVALENTS: dict[str, float] = {
    CATEGORY_HOLIDAY: HOUR_EQUIVALENT_HOLIDAY,
    CATEGORY_NIGHT_SHIFT: HOUR_EQUIVALENT_NIGHT_SHIFT,
    CATEGORY_WEEKEND: HOUR_EQUIVALENT_WEEKEND,
    CATEGORY_REGULAR: HOUR_EQUIVALENT_REGULAR,
}

ONCALL_RATES = (RATE_WEEKDAY_ONCALL, RATE_WEEKEND_ONCALL)
INCIDENT_RATES = (
    RATE_WEEKDAY_INCIDENT,
    RATE_WEEKEND_INCIDENT,
    RATE_WEEKDAY_NIGHT_INCIDENT,
    RATE_WEEKEND_NIGHT_INCIDENT,
)


def precedence_category(sub_event: SubEvent) -> str:
    """Single category a slice is counted under: holiday > night shift > weekend > regular."""
    if sub_event.is_holiday:
        return CATEGORY_HOLIDAY
    if sub_event.is_night_shift:
        return CATEGORY_NIGHT_SHIFT
    if sub_event.is_weekend:
        return CATEGORY_WEEKEND
    return CATEGORY_REGULAR


def _billable(sub_events: Iterable[SubEvent]) -> list[SubEvent]:
    return [s for s in sub_events if s.type in BILLABLE_EVENT_TYPES]


class CompensationService:
    """Aggregates sub-events into hour equivalents and money per month."""

    # --- Hour equivalents ---

    def calculate_compensation_breakdown(self, sub_events: Iterable[SubEvent]) -> CompensationBreakdown:
        totals = {category: 0.0 for category in HOUR_EQUIVALENTS}
        for sub_event in _billable(sub_events):
            category = precedence_category(sub_event)
            totals[category] += sub_event.duration_hours * HOUR_EQUIVALENTS[category]

        return CompensationBreakdown(
            regular=totals[CATEGORY_REGULAR],
            weekend=totals[CATEGORY_WEEKEND],
            night_shift=totals[CATEGORY_NIGHT_SHIFT],
            holiday=totals[CATEGORY_HOLIDAY],
            total=sum(totals.values()),
        )

    def calculate_total_compensation(self, sub_events: Iterable[SubEvent]) -> float:
        return self.calculate_compensation_breakdown(sub_events).total

    def calculate_monthly_compensation(
        self, sub_events: Iterable[SubEvent], reference_date: datetime.date | datetime.datetime
    ) -> float:
        """Hour equivalents of the slices that start in the month of reference_date."""
        in_month = [s for s in sub_events if same_month(s.start, reference_date)]
        return self.calculate_total_compensation(in_month)

    # --- Money ---

    def calculate_monetary_total(self, sub_events: Iterable[SubEvent]) -> float:
        return round(sum(sub_event_amount(s) for s in sub_events), 2)

    def calculate_monthly_breakdown(
        self,
        events: Iterable[CalendarEvent],
        sub_events: Iterable[SubEvent],
        month_date: datetime.date | datetime.datetime,
    ) -> list[MonthBreakdownEntry]:
        """
        Money breakdown for one month.

        Args:
            events: Candidate events; only billable events overlapping the month are used
            sub_events: Their slices; only slices starting in the month are counted
            month_date: Any date in the month

        Returns:
            An on-call line and an incident line when they earn something, followed
            by a total line. Empty when the month has no events.
        """
        key = month_key(month_date)
        month_events = [
            e for e in events if e.type in BILLABLE_EVENT_TYPES and overlaps_month(e.start, e.end, month_date)
        ]
        event_ids = {e.id for e in month_events}
        month_sub_events = [
            s for s in sub_events if s.parent_event_id in event_ids and same_month(s.start, month_date)
        ]

        logger.info(
            "Calculating compensation for month %s",
            key,
            extra={
                "extra_fields": {
                    "month": key,
                    "event_count": len(month_events),
                    "sub_event_count": len(month_sub_events),
                }
            },
        )

        hours = {category: 0.0 for category in ONCALL_RATES + INCIDENT_RATES}
        for sub_event in month_sub_events:
            category = rate_category(sub_event)
            if category is not None:
                hours[category] += billable_hours(sub_event)

        oncall_amount = sum(amount_for_hours(c, hours[c]) for c in ONCALL_RATES)
        incident_amount = sum(amount_for_hours(c, hours[c]) for c in INCIDENT_RATES)
        total_amount = oncall_amount + incident_amount

        month_hours = MonthHours(**hours)
        month = month_start(month_date)
        holiday_parents = {s.parent_event_id for s in month_sub_events if s.is_holiday}

        def references(selected: list[CalendarEvent]) -> list[EventReference]:
            return [
                EventReference(id=e.id, start=e.start, end=e.end, is_holiday=e.id in holiday_parents)
                for e in selected
            ]

        oncall_events = [e for e in month_events if e.type == EVENT_TYPE_ONCALL]
        incident_events = [e for e in month_events if e.type == EVENT_TYPE_INCIDENT]
        breakdown: list[MonthBreakdownEntry] = []

        if any(hours[c] > 0 for c in ONCALL_RATES):
            breakdown.append(
                MonthBreakdownEntry(
                    type=BREAKDOWN_TYPE_ONCALL,
                    amount=round(oncall_amount, 2),
                    count=len(oncall_events),
                    description=(
                        f"On-call shifts ({hours[RATE_WEEKDAY_ONCALL]:.1f}h weekday, "
                        f"{hours[RATE_WEEKEND_ONCALL]:.1f}h weekend)"
                    ),
                    month=month,
                    hours=month_hours,
                    events=references(oncall_events),
                )
            )

        if any(hours[c] > 0 for c in INCIDENT_RATES):
            breakdown.append(
                MonthBreakdownEntry(
                    type=BREAKDOWN_TYPE_INCIDENT,
                    amount=round(incident_amount, 2),
                    count=len(incident_events),
                    description=(
                        f"Incidents ({hours[RATE_WEEKDAY_INCIDENT]:g}h weekday, "
                        f"{hours[RATE_WEEKEND_INCIDENT]:g}h weekend, "
                        f"{hours[RATE_WEEKDAY_NIGHT_INCIDENT]:g}h weekday night, "
                        f"{hours[RATE_WEEKEND_NIGHT_INCIDENT]:g}h weekend night)"
                    ),
                    month=month,
                    hours=month_hours,
                    events=references(incident_events),
                )
            )

        if month_events:
            breakdown.append(
                MonthBreakdownEntry(
                    type=BREAKDOWN_TYPE_TOTAL,
                    amount=round(total_amount, 2),
                    count=len(month_events),
                    description="Total compensation" if total_amount > 0 else "No compensation calculated",
                    month=month,
                    hours=month_hours,
                    events=references(month_events),
                )
            )

        logger.debug(
            "Month %s compensation: on-call %.2f, incidents %.2f, total %.2f",
            key,
            oncall_amount,
            incident_amount,
            total_amount,
        )
        return breakdown
