"""
Event use cases: create, update and delete events and keep their sub-events
(and those of events affected by holiday changes) in step.
"""

import datetime
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from app.core.constants import EVENT_TYPE_HOLIDAY
from app.core.errors import ApplicationError, NotFoundError, ValidationError
from app.core.holidays import HolidayIndex, clear_holiday_cache
from app.core.models import CalendarEvent, EventChangeResult, MonthDeletionResult, RippleReport
from app.core.repositories import CalendarEventRepository, SubEventRepository
from app.core.ripple import HolidayRipple
from app.core.sentry_config import add_breadcrumb, capture_exception
from app.core.subdivider import divide_event
from app.core.time_utils import month_key, month_start, next_month_start

logger = logging.getLogger(__name__)


def _event_context(event: CalendarEvent | None, **extra: Any) -> dict[str, Any]:
    context: dict[str, Any] = dict(extra)
    if event is not None:
        context.update(
            event_id=event.id,
            event_type=event.type,
            start=event.start.isoformat(),
            end=event.end.isoformat(),
        )
    return context


@contextmanager
def _use_case(operation: str, context: dict[str, Any]) -> Iterator[None]:
    """Let domain errors through; wrap anything else in ApplicationError."""
    try:
        yield
    except (ValidationError, NotFoundError):
        raise
    except Exception as e:
        context = {**context, "operation": operation}
        logger.exception("%s failed", operation, extra={"extra_fields": context})
        capture_exception(e, context)
        raise ApplicationError(f"{operation} failed: {e}", context) from e


class EventService:
    def __init__(
        self,
        event_repository: CalendarEventRepository,
        sub_event_repository: SubEventRepository,
        ripple: HolidayRipple | None = None,
    ):
        self.event_repository = event_repository
        self.sub_event_repository = sub_event_repository
        self.ripple = ripple or HolidayRipple(event_repository, sub_event_repository)

    def _regenerate_own_sub_events(self, event: CalendarEvent) -> int:
        holidays = HolidayIndex(self.event_repository.get_holiday_events()).without(event.id)
        sub_events = divide_event(event, holidays)
        self.sub_event_repository.delete_by_parent_id(event.id)
        self.sub_event_repository.save(sub_events)
        return len(sub_events)

    def create_event(self, data: dict[str, Any]) -> EventChangeResult:
        """Validate and store a new event together with its sub-events.

        A new holiday also regenerates the sub-events of every on-call shift
        and incident it overlaps.
        """
        event = CalendarEvent.from_json(data)

        with _use_case("create_event", _event_context(event)):
            self.event_repository.save([event])
            count = self._regenerate_own_sub_events(event)

            ripple = None
            if event.is_holiday_event:
                clear_holiday_cache()
                ripple = self.ripple.on_holiday_created(event)

        logger.info(
            "Created %s event %s",
            event.type,
            event.id,
            extra={"extra_fields": _event_context(event, sub_event_count=count)},
        )
        add_breadcrumb(f"Created event {event.id}", category="events", data={"type": event.type})
        return EventChangeResult(event=event, sub_event_count=count, ripple=ripple)

    def update_event(self, data: dict[str, Any]) -> EventChangeResult:
        if not data.get("id"):
            raise ValidationError("Event id is required for an update")

        event = CalendarEvent.from_json(data)
        existing = self.event_repository.get_by_id(event.id)
        if existing is None:
            raise NotFoundError(f"Event {event.id} not found", {"event_id": event.id})

        with _use_case("update_event", _event_context(event)):
            self.event_repository.update(event)
            count = self._regenerate_own_sub_events(event)

            holiday_status_changed = existing.is_holiday_event != event.is_holiday_event
            holiday_moved = event.is_holiday_event and (existing.start, existing.end) != (event.start, event.end)

            ripple = None
            if holiday_status_changed or holiday_moved:
                clear_holiday_cache()
                ripple = self.ripple.on_holiday_updated(existing, event)

        logger.info(
            "Updated event %s",
            event.id,
            extra={"extra_fields": _event_context(event, sub_event_count=count)},
        )
        return EventChangeResult(event=event, sub_event_count=count, ripple=ripple)

    def delete_event(self, event_id: str) -> EventChangeResult:
        existing = self.event_repository.get_by_id(event_id)
        if existing is None:
            logger.warning("Event %s not found, nothing to delete", event_id)
            return EventChangeResult()

        with _use_case("delete_event", _event_context(existing)):
            ripple = None
            if existing.is_holiday_event:
                ripple = self.ripple.on_holiday_deleted(existing)

            self.sub_event_repository.delete_by_parent_id(event_id)
            self.event_repository.delete(event_id)

            if existing.is_holiday_event:
                clear_holiday_cache()

        logger.info("Deleted event %s", event_id, extra={"extra_fields": _event_context(existing)})
        return EventChangeResult(event=existing, ripple=ripple)

    def delete_month(self, month_date: datetime.date | datetime.datetime) -> MonthDeletionResult:
        """Delete every event starting in the month, with its sub-events."""
        key = month_key(month_date)

        with _use_case("delete_month", {"month": key}):
            events = self.event_repository.get_events_for_date_range(
                month_start(month_date), next_month_start(month_date)
            )
            ids = [e.id for e in events]
            if not ids:
                return MonthDeletionResult(month=key)

            self.sub_event_repository.delete_by_parent_ids(ids)
            self.event_repository.delete_multiple_by_ids(ids)

            holidays = [e for e in events if e.type == EVENT_TYPE_HOLIDAY]
            ripple = None
            if holidays:
                ripple = self.ripple.ripple_ranges([(h.start, h.end) for h in holidays])

        logger.info(
            "Deleted %d events in %s",
            len(ids),
            key,
            extra={"extra_fields": {"month": key, "deleted": len(ids)}},
        )
        return MonthDeletionResult(month=key, deleted_event_ids=ids, ripple=ripple)

    def regenerate_all_sub_events(self) -> RippleReport:
        """Rebuild the sub-events of every on-call shift and incident."""
        with _use_case("regenerate_all_sub_events", {}):
            clear_holiday_cache()
            holidays = HolidayIndex(self.event_repository.get_holiday_events())
            events = [e for e in self.event_repository.get_all() if not e.is_holiday_event]
            return self.ripple.regenerate(events, holidays)
