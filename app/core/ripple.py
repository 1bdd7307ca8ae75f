"""
Holiday ripple: when the holiday set changes, every on-call shift and incident
touching the affected dates gets its sub-events regenerated.
"""

import datetime
import logging
from collections.abc import Iterable

from app.core.constants import BILLABLE_EVENT_TYPES
from app.core.holidays import HolidayIndex, clear_holiday_cache
from app.core.models import CalendarEvent, RippleReport, RippleResult
from app.core.repositories import CalendarEventRepository, SubEventRepository
from app.core.sentry_config import capture_exception
from app.core.subdivider import divide_event

logger = logging.getLogger(__name__)

DateRange = tuple[datetime.datetime, datetime.datetime]

STATUS_SUCCESS = "success"
STATUS_FAILED = "failed"


def merge_date_ranges(ranges: Iterable[DateRange]) -> list[DateRange]:
    """Merge overlapping or touching ranges into a sorted list of disjoint ones."""
    merged: list[DateRange] = []
    for start, end in sorted(ranges):
        if merged and start <= merged[-1][1]:
            merged[-1] = (merged[-1][0], max(merged[-1][1], end))
        else:
            merged.append((start, end))
    return merged


class HolidayRipple:
    def __init__(self, event_repository: CalendarEventRepository, sub_event_repository: SubEventRepository):
        self.event_repository = event_repository
        self.sub_event_repository = sub_event_repository

    def _current_holidays(self, removed_holiday_id: str | None = None) -> HolidayIndex:
        clear_holiday_cache()
        index = HolidayIndex(self.event_repository.get_holiday_events())
        return index.without(removed_holiday_id) if removed_holiday_id else index

    def _affected_events(self, ranges: Iterable[DateRange], skip_id: str | None) -> list[CalendarEvent]:
        affected: dict[str, CalendarEvent] = {}
        for start, end in merge_date_ranges(ranges):
            for event in self.event_repository.get_events_overlapping_date_range(start, end, BILLABLE_EVENT_TYPES):
                if event.id != skip_id:
                    affected[event.id] = event
        return sorted(affected.values(), key=lambda e: e.start)

    def regenerate(
        self,
        events: Iterable[CalendarEvent],
        holidays: HolidayIndex,
        trigger_event_id: str | None = None,
    ) -> RippleReport:
        """Replace the sub-events of each event. One failing parent does not stop the rest."""
        report = RippleReport(trigger_event_id=trigger_event_id)

        for event in events:
            try:
                sub_events = divide_event(event, holidays.without(event.id))
                self.sub_event_repository.delete_by_parent_id(event.id)
                self.sub_event_repository.save(sub_events)
            except Exception as e:
                context = {"event_id": event.id, "trigger_event_id": trigger_event_id}
                logger.exception(
                    "Failed to regenerate sub-events for event %s",
                    event.id,
                    extra={"extra_fields": context},
                )
                capture_exception(e, context)
                report.results.append(RippleResult(parent_event_id=event.id, status=STATUS_FAILED, reason=str(e)))
                continue

            report.results.append(
                RippleResult(parent_event_id=event.id, status=STATUS_SUCCESS, sub_event_count=len(sub_events))
            )

        logger.info(
            "Regenerated sub-events for %d events (%d failed)",
            len(report.results),
            len(report.failed),
            extra={"extra_fields": {"trigger_event_id": trigger_event_id}},
        )
        return report

    def ripple_ranges(
        self,
        ranges: Iterable[DateRange],
        trigger_event_id: str | None = None,
        removed_holiday_id: str | None = None,
    ) -> RippleReport:
        holidays = self._current_holidays(removed_holiday_id)
        affected = self._affected_events(ranges, skip_id=trigger_event_id)
        return self.regenerate(affected, holidays, trigger_event_id)

    def on_holiday_created(self, holiday: CalendarEvent) -> RippleReport:
        return self.ripple_ranges([(holiday.start, holiday.end)], trigger_event_id=holiday.id)

    def on_holiday_updated(self, old: CalendarEvent, new: CalendarEvent) -> RippleReport:
        """Old and new date ranges are both affected when a holiday moves or changes type."""
        return self.ripple_ranges([(old.start, old.end), (new.start, new.end)], trigger_event_id=new.id)

    def on_holiday_deleted(self, holiday: CalendarEvent) -> RippleReport:
        return self.ripple_ranges(
            [(holiday.start, holiday.end)], trigger_event_id=holiday.id, removed_holiday_id=holiday.id
        )

    def retry_failed(self, report: RippleReport) -> RippleReport:
        """Regenerate again for every parent that failed in report."""
        holidays = self._current_holidays()
        events = []
        for result in report.failed:
            event = self.event_repository.get_by_id(result.parent_event_id)
            if event is None:
                logger.warning("Event %s no longer exists, skipping retry", result.parent_event_id)
                continue
            events.append(event)
        return self.regenerate(events, holidays, report.trigger_event_id)
