"""Entry point used by the routes: loads sub-events and hands them to the calculators."""

import datetime
import logging
from collections.abc import Iterable

from app.core.constants import BILLABLE_EVENT_TYPES, BREAKDOWN_TYPE_TOTAL
from app.core.holidays import HolidayIndex
from app.core.models import (
    CalendarEvent,
    CompensationBreakdown,
    CompensationSummary,
    HoursChartItem,
    MonthBreakdownEntry,
    SubEvent,
)
from app.core.repositories import CalendarEventRepository, SubEventRepository
from app.core.sentry_config import capture_exception
from app.core.subdivider import divide_event
from app.core.time_utils import clip_to_month, month_key, same_month

from .event_summary import EventCompensationService
from .hours_chart import build_hours_chart
from .service import CompensationService

logger = logging.getLogger(__name__)


class CompensationCalculatorFacade:
    def __init__(
        self,
        event_repository: CalendarEventRepository,
        sub_event_repository: SubEventRepository,
        compensation_service: CompensationService | None = None,
        event_compensation_service: EventCompensationService | None = None,
    ):
        self.event_repository = event_repository
        self.sub_event_repository = sub_event_repository
        self.compensation_service = compensation_service or CompensationService()
        self.event_compensation_service = event_compensation_service or EventCompensationService()

    def _load_sub_events(self, event: CalendarEvent, holidays: HolidayIndex) -> list[SubEvent]:
        """Persisted slices of event, or slices derived in memory when none are stored."""
        sub_events = self.sub_event_repository.get_by_parent_id(event.id)
        if sub_events:
            return sub_events

        logger.warning(
            "No sub-events stored for event %s, deriving them in memory",
            event.id,
            extra={"extra_fields": {"event_id": event.id, "event_type": event.type}},
        )
        return divide_event(event, holidays.without(event.id))

    def _month_data(
        self, events: Iterable[CalendarEvent], month_date: datetime.date | datetime.datetime
    ) -> tuple[list[CalendarEvent], list[SubEvent]]:
        """Billable events clipped to the month and their slices starting in it."""
        holidays = HolidayIndex(self.event_repository.get_holiday_events())
        clipped_events: list[CalendarEvent] = []
        sub_events: list[SubEvent] = []

        for event in events:
            if event.type not in BILLABLE_EVENT_TYPES:
                continue
            clipped = clip_to_month(event.start, event.end, month_date)
            if clipped is None:
                continue
            clipped_events.append(event.model_copy(update={"start": clipped[0], "end": clipped[1]}))
            sub_events.extend(
                s for s in self._load_sub_events(event, holidays) if same_month(s.start, month_date)
            )

        return clipped_events, sub_events

    def calculate_monthly_compensation(
        self, events: Iterable[CalendarEvent], month_date: datetime.date | datetime.datetime
    ) -> list[MonthBreakdownEntry]:
        try:
            month_events, sub_events = self._month_data(events, month_date)
        except Exception as e:
            logger.exception(
                "Failed to load data for monthly compensation",
                extra={"extra_fields": {"month": month_key(month_date)}},
            )
            capture_exception(e, {"month": month_key(month_date)})
            return []
        return self.compensation_service.calculate_monthly_breakdown(month_events, sub_events, month_date)

    def calculate_monthly_totals(
        self, events: Iterable[CalendarEvent], month_date: datetime.date | datetime.datetime
    ) -> CompensationBreakdown:
        """Hour equivalents for the month."""
        try:
            _, sub_events = self._month_data(events, month_date)
        except Exception as e:
            logger.exception(
                "Failed to load data for monthly totals",
                extra={"extra_fields": {"month": month_key(month_date)}},
            )
            capture_exception(e, {"month": month_key(month_date)})
            return CompensationBreakdown()
        return self.compensation_service.calculate_compensation_breakdown(sub_events)

    def calculate_event_compensation(self, event: CalendarEvent) -> CompensationSummary:
        try:
            holidays = HolidayIndex(self.event_repository.get_holiday_events())
            sub_events = self._load_sub_events(event, holidays)
        except Exception as e:
            logger.exception(
                "Failed to load sub-events for event %s",
                event.id,
                extra={"extra_fields": {"event_id": event.id}},
            )
            capture_exception(e, {"event_id": event.id})
            return self.event_compensation_service.empty_summary(event.id)
        return self.event_compensation_service.calculate_event_compensation(event, sub_events)

    def month_hours_chart(
        self, events: Iterable[CalendarEvent], month_date: datetime.date | datetime.datetime
    ) -> list[HoursChartItem]:
        breakdown = self.calculate_monthly_compensation(events, month_date)
        for entry in breakdown:
            if entry.type == BREAKDOWN_TYPE_TOTAL:
                return build_hours_chart(entry.hours)
        return []
