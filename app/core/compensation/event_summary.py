"""Per-event compensation summary (hours, billing lines, months)."""

import logging
from collections.abc import Iterable

from app.core.models import (
    CalendarEvent,
    CompensationDetail,
    CompensationSummary,
    HoursSummary,
    MonthlyCompensation,
    SubEvent,
)
from app.core.rates import (
    RATE_DESCRIPTIONS,
    amount_for_hours,
    billable_hours,
    is_billable,
    rate_category,
    rate_parameters,
)
from app.core.time_utils import month_key

logger = logging.getLogger(__name__)


class EventCompensationService:
    """Builds the CompensationSummary shown for a single event."""

    def calculate_event_compensation(
        self, event: CalendarEvent, sub_events: Iterable[SubEvent]
    ) -> CompensationSummary:
        own = sorted((s for s in sub_events if s.parent_event_id == event.id), key=lambda s: s.start)
        if not own:
            logger.warning(
                "No sub-events found for event %s",
                event.id,
                extra={"extra_fields": {"event_id": event.id, "event_type": event.type}},
            )
            return self.empty_summary(event.id)

        details = self.calculate_details(own)
        summary = CompensationSummary(
            event_id=event.id,
            total=round(sum(d.amount for d in details), 2),
            hours=self.calculate_hours_summary(event, own),
            details=details,
        )

        by_month: dict[str, list[SubEvent]] = {}
        for sub_event in own:
            by_month.setdefault(month_key(sub_event.start), []).append(sub_event)

        if len(by_month) > 1:
            monthly = {}
            for key, month_sub_events in by_month.items():
                month_details = self.calculate_details(month_sub_events)
                monthly[key] = MonthlyCompensation(
                    month=key,
                    amount=round(sum(d.amount for d in month_details), 2),
                    details=month_details,
                )
            summary.monthly_breakdown = monthly

        return summary

    @staticmethod
    def empty_summary(event_id: str) -> CompensationSummary:
        return CompensationSummary(event_id=event_id)

    @staticmethod
    def calculate_hours_summary(event: CalendarEvent, sub_events: list[SubEvent]) -> HoursSummary:
        hours = HoursSummary(total=event.duration_hours)
        for sub_event in sub_events:
            duration = sub_event.duration_hours
            if is_billable(sub_event):
                hours.billable += duration
            if sub_event.is_weekend:
                hours.weekend += duration
            else:
                hours.weekday += duration
            if sub_event.is_night_shift:
                hours.night_shift += duration
            if sub_event.is_office_hours and not sub_event.is_night_shift:
                hours.office_hours += duration
        return hours

    @staticmethod
    def calculate_details(sub_events: list[SubEvent]) -> list[CompensationDetail]:
        """One billing line per rate category, in rate table order."""
        hours_by_category: dict[str, float] = {}
        for sub_event in sub_events:
            category = rate_category(sub_event)
            if category is None or not is_billable(sub_event):
                continue
            hours_by_category[category] = hours_by_category.get(category, 0.0) + billable_hours(sub_event)

        details = []
        for category, description in RATE_DESCRIPTIONS.items():
            if category not in hours_by_category:
                continue
            hours = hours_by_category[category]
            rate, multiplier, night_multiplier = rate_parameters(category)
            details.append(
                CompensationDetail(
                    hours=hours,
                    rate=rate,
                    multiplier=multiplier,
                    night_shift_multiplier=night_multiplier,
                    amount=round(amount_for_hours(category, hours), 2),
                    description=description,
                )
            )
        return details
