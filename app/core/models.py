# app/core/models.py
"""
Domain value objects: calendar events, their classified slices and the
read-only compensation results built from them.
"""

import datetime
import uuid
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from app.core.constants import EVENT_TYPE_HOLIDAY, EVENT_TYPE_INCIDENT, EVENT_TYPE_ONCALL
from app.core.errors import ValidationError
from app.core.time_utils import duration_hours, month_key, next_month_start, to_local, to_utc


class EventType(str, Enum):
    """Kind of calendar event."""

    ONCALL = EVENT_TYPE_ONCALL
    INCIDENT = EVENT_TYPE_INCIDENT
    HOLIDAY = EVENT_TYPE_HOLIDAY


def new_id() -> str:
    return str(uuid.uuid4())


def _validation_message(exc: PydanticValidationError) -> str:
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ())) or "event"
    return f"{location}: {first.get('msg', 'invalid value')}"


class _DomainModel(BaseModel):
    """Shared config: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, use_enum_values=True)

    @field_validator("start", "end", check_fields=False)
    @classmethod
    def _normalize_instant(cls, value: datetime.datetime) -> datetime.datetime:
        return to_local(value)

    @model_validator(mode="after")
    def _check_interval(self):
        if to_utc(self.end) <= to_utc(self.start):
            raise ValueError("end must be after start")
        return self

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def from_json(cls, data: dict[str, Any]):
        """Parse a stored document, raising ValidationError on bad input."""
        try:
            return cls.model_validate(data)
        except PydanticValidationError as e:
            raise ValidationError(
                f"Invalid {cls.__name__}: {_validation_message(e)}",
                {"id": data.get("id") if isinstance(data, dict) else None},
            ) from e

    @property
    def duration_hours(self) -> float:
        return duration_hours(self.start, self.end)


class CalendarEvent(_DomainModel):
    """A user-entered interval: an on-call shift, an incident or a holiday."""

    id: str = Field(default_factory=new_id, min_length=1)
    start: datetime.datetime
    end: datetime.datetime
    type: EventType
    title: str | None = None

    @classmethod
    def create(
        cls,
        start: datetime.datetime,
        end: datetime.datetime,
        type: str,
        title: str | None = None,
        id: str | None = None,
    ) -> "CalendarEvent":
        """Build a validated event, generating an id when none is given."""
        return cls.from_json(
            {"id": id or new_id(), "start": start, "end": end, "type": type, "title": title}
        )

    @property
    def is_holiday_event(self) -> bool:
        return self.type == EVENT_TYPE_HOLIDAY

    @property
    def is_billable(self) -> bool:
        return self.type in (EVENT_TYPE_ONCALL, EVENT_TYPE_INCIDENT)

    def month_keys(self) -> list[str]:
        """Month keys (YYYY-MM) the event touches, in order."""
        keys = []
        cursor = self.start
        while cursor < self.end:
            keys.append(month_key(cursor))
            cursor = next_month_start(cursor)
        return keys


class SubEvent(_DomainModel):
    """A classified slice of a parent event. Immutable once created."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, use_enum_values=True, frozen=True
    )

    id: str = Field(default_factory=new_id, min_length=1)
    parent_event_id: str = Field(min_length=1)
    start: datetime.datetime
    end: datetime.datetime
    is_weekday: bool
    is_weekend: bool
    is_holiday: bool
    is_night_shift: bool
    is_office_hours: bool
    type: EventType

    @model_validator(mode="after")
    def _check_weekday_flag(self):
        if self.is_weekday == self.is_weekend:
            raise ValueError("is_weekday must be the negation of is_weekend")
        return self


# ==========================
# Compensation results
# ==========================


class CompensationBreakdown(BaseModel):
    """Hour equivalents after precedence (holiday > night shift > weekend > regular)."""

    regular: float = 0.0
    weekend: float = 0.0
    night_shift: float = 0.0
    holiday: float = 0.0
    total: float = 0.0


class CompensationDetail(BaseModel):
    """One billing line."""

    hours: float
    rate: float
    multiplier: float | None = None
    night_shift_multiplier: float | None = None
    amount: float
    description: str


class HoursSummary(BaseModel):
    total: float = 0.0
    billable: float = 0.0
    weekday: float = 0.0
    weekend: float = 0.0
    night_shift: float = 0.0
    office_hours: float = 0.0


class MonthlyCompensation(BaseModel):
    month: str
    amount: float
    details: list[CompensationDetail] = []


class CompensationSummary(BaseModel):
    """Compensation of a single event."""

    event_id: str
    total: float = 0.0
    hours: HoursSummary = Field(default_factory=HoursSummary)
    details: list[CompensationDetail] = []
    # Only set when the event spans more than one month.
    monthly_breakdown: dict[str, MonthlyCompensation] | None = None


class MonthHours(BaseModel):
    """Billable hours of one month per rate category."""

    weekday_oncall: float = 0.0
    weekend_oncall: float = 0.0
    weekday_incident: float = 0.0
    weekend_incident: float = 0.0
    weekday_night_incident: float = 0.0
    weekend_night_incident: float = 0.0


class EventReference(BaseModel):
    id: str
    start: datetime.datetime
    end: datetime.datetime
    is_holiday: bool


class MonthBreakdownEntry(BaseModel):
    """A line of the monthly money breakdown (oncall, incident or total)."""

    type: str
    amount: float
    count: int
    description: str
    month: datetime.datetime
    hours: MonthHours = Field(default_factory=MonthHours)
    events: list[EventReference] = []


class HoursChartItem(BaseModel):
    name: str
    hours: float
    color: str


class RippleResult(BaseModel):
    parent_event_id: str
    status: str
    reason: str | None = None
    sub_event_count: int = 0


class RippleReport(BaseModel):
    """Outcome of regenerating sub-events for a set of parent events."""

    trigger_event_id: str | None = None
    results: list[RippleResult] = []

    @property
    def succeeded(self) -> list[RippleResult]:
        return [r for r in self.results if r.status == "success"]

    @property
    def failed(self) -> list[RippleResult]:
        return [r for r in self.results if r.status == "failed"]

    @property
    def ok(self) -> bool:
        return not self.failed


class EventChangeResult(BaseModel):
    """What a create, update or delete did."""

    event: CalendarEvent | None = None
    sub_event_count: int = 0
    ripple: RippleReport | None = None


class MonthDeletionResult(BaseModel):
    month: str
    deleted_event_ids: list[str] = []
    ripple: RippleReport | None = None
