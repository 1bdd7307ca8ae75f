# app/routes/events.py
"""
Event management routes: create, update and delete events and inspect their sub-events.
"""

from datetime import datetime

from fastapi import APIRouter, Depends, status

from app.core.container import Container
from app.core.errors import NotFoundError
from app.core.models import EventChangeResult, MonthDeletionResult, RippleReport
from app.core.time_utils import to_local
from app.core.validators import validate_year_month
from app.routes.shared import EventCreate, EventIn, get_container

router = APIRouter(prefix="/events", tags=["events"])


@router.get("")
async def list_events(
    start: datetime | None = None,
    end: datetime | None = None,
    container: Container = Depends(get_container),
):
    """List events, optionally only those starting in [start, end)."""
    repository = container.event_repository
    if start is not None and end is not None:
        events = repository.get_events_for_date_range(to_local(start), to_local(end))
    else:
        events = sorted(repository.get_all(), key=lambda e: e.start)
    return [event.to_json() for event in events]


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_event(body: EventCreate, container: Container = Depends(get_container)) -> EventChangeResult:
    return container.event_service.create_event(body.model_dump(exclude_none=True))


@router.put("/{event_id}")
async def update_event(
    event_id: str, body: EventIn, container: Container = Depends(get_container)
) -> EventChangeResult:
    return container.event_service.update_event({**body.model_dump(), "id": event_id})


@router.delete("/{event_id}")
async def delete_event(event_id: str, container: Container = Depends(get_container)) -> EventChangeResult:
    """Deleting an unknown id is a no-op."""
    return container.event_service.delete_event(event_id)


@router.get("/{event_id}/sub-events")
async def get_sub_events(event_id: str, container: Container = Depends(get_container)):
    if container.event_repository.get_by_id(event_id) is None:
        raise NotFoundError(f"Event {event_id} not found", {"event_id": event_id})
    return [sub_event.to_json() for sub_event in container.sub_event_repository.get_by_parent_id(event_id)]


@router.delete("/month/{year}/{month}")
async def delete_month(year: int, month: int, container: Container = Depends(get_container)) -> MonthDeletionResult:
    month_date = validate_year_month(year, month)
    return container.event_service.delete_month(month_date)


@router.post("/regenerate")
async def regenerate_sub_events(container: Container = Depends(get_container)) -> RippleReport:
    """Rebuild all sub-events, e.g. after changing the time zone."""
    return container.event_service.regenerate_all_sub_events()
