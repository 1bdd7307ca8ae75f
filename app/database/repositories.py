# app/database/repositories.py
"""
SQLAlchemy implementations of the event and sub-event repositories.
"""

import datetime
import logging
from collections.abc import Iterable
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from app.core.constants import EVENT_TYPE_HOLIDAY
from app.core.errors import DatabaseError, NotFoundError, ValidationError
from app.core.models import CalendarEvent, SubEvent
from app.core.repositories import CalendarEventRepository, SubEventRepository
from app.database.database import CalendarEventRow, SubEventRow

logger = logging.getLogger(__name__)


@contextmanager
def _transaction(session_factory: sessionmaker, operation: str):
    """Session that commits on success and maps SQLAlchemy failures to DatabaseError."""
    session: Session = session_factory()
    try:
        yield session
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.exception("Database operation %s failed", operation)
        raise DatabaseError(f"Database operation {operation} failed: {e}", {"operation": operation}) from e
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def _parse_row(model, data: dict, table: str):
    """Validate a row as a domain model; bad rows surface as DatabaseError."""
    try:
        return model.from_json(data)
    except ValidationError as e:
        logger.exception("Invalid row in table %s", table)
        raise DatabaseError(
            f"Could not parse row in {table}: {e.message}",
            {"table": table, "id": data.get("id")},
        ) from e


def _event_from_row(row: CalendarEventRow) -> CalendarEvent:
    return _parse_row(
        CalendarEvent,
        {"id": row.id, "start": row.start, "end": row.end, "type": row.type, "title": row.title},
        CalendarEventRow.__tablename__,
    )


def _sub_event_from_row(row: SubEventRow) -> SubEvent:
    return _parse_row(
        SubEvent,
        {
            "id": row.id,
            "parent_event_id": row.parent_event_id,
            "start": row.start,
            "end": row.end,
            "is_weekday": row.is_weekday,
            "is_weekend": row.is_weekend,
            "is_holiday": row.is_holiday,
            "is_night_shift": row.is_night_shift,
            "is_office_hours": row.is_office_hours,
            "type": row.type,
        },
        SubEventRow.__tablename__,
    )


class SqlCalendarEventRepository(CalendarEventRepository):
    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def save(self, events: Iterable[CalendarEvent]) -> None:
        with _transaction(self.session_factory, "save_events") as session:
            for event in events:
                session.merge(
                    CalendarEventRow(
                        id=event.id, start=event.start, end=event.end, type=event.type, title=event.title
                    )
                )

    def get_all(self) -> list[CalendarEvent]:
        with _transaction(self.session_factory, "get_all_events") as session:
            rows = session.query(CalendarEventRow).order_by(CalendarEventRow.start).all()
            return [_event_from_row(row) for row in rows]

    def get_by_id(self, event_id: str) -> CalendarEvent | None:
        with _transaction(self.session_factory, "get_event") as session:
            row = session.get(CalendarEventRow, event_id)
            return _event_from_row(row) if row is not None else None

    def get_holiday_events(self) -> list[CalendarEvent]:
        with _transaction(self.session_factory, "get_holiday_events") as session:
            rows = (
                session.query(CalendarEventRow)
                .filter(CalendarEventRow.type == EVENT_TYPE_HOLIDAY)
                .order_by(CalendarEventRow.start)
                .all()
            )
            return [_event_from_row(row) for row in rows]

    def get_events_for_date_range(self, start: datetime.datetime, end: datetime.datetime) -> list[CalendarEvent]:
        with _transaction(self.session_factory, "get_events_for_date_range") as session:
            rows = (
                session.query(CalendarEventRow)
                .filter(CalendarEventRow.start >= start, CalendarEventRow.start < end)
                .order_by(CalendarEventRow.start)
                .all()
            )
            return [_event_from_row(row) for row in rows]

    def get_events_overlapping_date_range(
        self,
        start: datetime.datetime,
        end: datetime.datetime,
        types: Iterable[str] | None = None,
    ) -> list[CalendarEvent]:
        with _transaction(self.session_factory, "get_events_overlapping_date_range") as session:
            query = session.query(CalendarEventRow).filter(
                CalendarEventRow.start <= end, CalendarEventRow.end >= start
            )
            if types is not None:
                query = query.filter(CalendarEventRow.type.in_(list(types)))
            return [_event_from_row(row) for row in query.order_by(CalendarEventRow.start).all()]

    def update(self, event: CalendarEvent) -> None:
        with _transaction(self.session_factory, "update_event") as session:
            row = session.get(CalendarEventRow, event.id)
            if row is None:
                raise NotFoundError(f"Event {event.id} not found", {"event_id": event.id})
            row.start = event.start
            row.end = event.end
            row.type = event.type
            row.title = event.title

    def delete(self, event_id: str) -> None:
        self.delete_multiple_by_ids([event_id])

    def delete_multiple_by_ids(self, event_ids: Iterable[str]) -> None:
        ids = list(event_ids)
        if not ids:
            return
        with _transaction(self.session_factory, "delete_events") as session:
            session.query(CalendarEventRow).filter(CalendarEventRow.id.in_(ids)).delete(synchronize_session=False)


class SqlSubEventRepository(SubEventRepository):
    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def save(self, sub_events: Iterable[SubEvent]) -> None:
        with _transaction(self.session_factory, "save_sub_events") as session:
            for sub_event in sub_events:
                session.merge(
                    SubEventRow(
                        id=sub_event.id,
                        parent_event_id=sub_event.parent_event_id,
                        start=sub_event.start,
                        end=sub_event.end,
                        is_weekday=sub_event.is_weekday,
                        is_weekend=sub_event.is_weekend,
                        is_holiday=sub_event.is_holiday,
                        is_night_shift=sub_event.is_night_shift,
                        is_office_hours=sub_event.is_office_hours,
                        type=sub_event.type,
                    )
                )

    def get_all(self) -> list[SubEvent]:
        with _transaction(self.session_factory, "get_all_sub_events") as session:
            rows = session.query(SubEventRow).order_by(SubEventRow.start).all()
            return [_sub_event_from_row(row) for row in rows]

    def get_by_parent_id(self, parent_event_id: str) -> list[SubEvent]:
        with _transaction(self.session_factory, "get_sub_events_by_parent") as session:
            rows = (
                session.query(SubEventRow)
                .filter(SubEventRow.parent_event_id == parent_event_id)
                .order_by(SubEventRow.start)
                .all()
            )
            return [_sub_event_from_row(row) for row in rows]

    def delete_by_parent_id(self, parent_event_id: str) -> None:
        self.delete_by_parent_ids([parent_event_id])

    def delete_by_parent_ids(self, parent_event_ids: Iterable[str]) -> None:
        ids = list(parent_event_ids)
        if not ids:
            return
        with _transaction(self.session_factory, "delete_sub_events") as session:
            session.query(SubEventRow).filter(SubEventRow.parent_event_id.in_(ids)).delete(
                synchronize_session=False
            )
