# app/routes/compensation.py
"""
Compensation routes: month breakdowns, hour totals, hours chart and per-event summaries.
"""

from datetime import datetime

from fastapi import APIRouter, Depends

from app.core.constants import BILLABLE_EVENT_TYPES
from app.core.container import Container
from app.core.errors import NotFoundError
from app.core.models import CalendarEvent, CompensationBreakdown, CompensationSummary, HoursChartItem, MonthBreakdownEntry
from app.core.time_utils import month_start, next_month_start
from app.core.validators import validate_year_month
from app.routes.shared import get_container

router = APIRouter(prefix="/compensation", tags=["compensation"])


def _month_events(container: Container, month_date: datetime) -> list[CalendarEvent]:
    return container.event_repository.get_events_overlapping_date_range(
        month_start(month_date), next_month_start(month_date), BILLABLE_EVENT_TYPES
    )


# Declared before the /{year}/{month} routes so "events" is never parsed as a year
@router.get("/events/{event_id}")
async def get_event_compensation(
    event_id: str, container: Container = Depends(get_container)
) -> CompensationSummary:
    event = container.event_repository.get_by_id(event_id)
    if event is None:
        raise NotFoundError(f"Event {event_id} not found", {"event_id": event_id})
    return container.compensation.calculate_event_compensation(event)


@router.get("/{year}/{month}")
async def get_monthly_compensation(
    year: int, month: int, container: Container = Depends(get_container)
) -> list[MonthBreakdownEntry]:
    month_date = validate_year_month(year, month)
    return container.compensation.calculate_monthly_compensation(_month_events(container, month_date), month_date)


@router.get("/{year}/{month}/totals")
async def get_monthly_totals(
    year: int, month: int, container: Container = Depends(get_container)
) -> CompensationBreakdown:
    """Hour equivalents for the month (holiday > night shift > weekend > regular)."""
    month_date = validate_year_month(year, month)
    return container.compensation.calculate_monthly_totals(_month_events(container, month_date), month_date)


@router.get("/{year}/{month}/hours-chart")
async def get_hours_chart(
    year: int, month: int, container: Container = Depends(get_container)
) -> list[HoursChartItem]:
    month_date = validate_year_month(year, month)
    return container.compensation.month_hours_chart(_month_events(container, month_date), month_date)
