"""Wires repositories and services for one storage backend."""

import logging
from dataclasses import dataclass

from app.core.compensation import CompensationCalculatorFacade
from app.core.config import Settings
from app.core.constants import STORAGE_BACKEND_DOCUMENT, STORAGE_BACKEND_MEMORY
from app.core.event_service import EventService
from app.core.repositories import (
    CalendarEventRepository,
    InMemoryCalendarEventRepository,
    InMemorySubEventRepository,
    SubEventRepository,
)
from app.core.ripple import HolidayRipple
from app.core.storage import DocumentCalendarEventRepository, DocumentSubEventRepository, JsonDocumentStore
from app.core.time_utils import set_local_timezone

logger = logging.getLogger(__name__)


@dataclass
class Container:
    settings: Settings
    event_repository: CalendarEventRepository
    sub_event_repository: SubEventRepository
    ripple: HolidayRipple
    event_service: EventService
    compensation: CompensationCalculatorFacade


def build_repositories(settings: Settings) -> tuple[CalendarEventRepository, SubEventRepository]:
    if settings.storage_backend == STORAGE_BACKEND_MEMORY:
        return InMemoryCalendarEventRepository(), InMemorySubEventRepository()

    if settings.storage_backend == STORAGE_BACKEND_DOCUMENT:
        store = JsonDocumentStore(settings.document_store_path)
        return DocumentCalendarEventRepository(store), DocumentSubEventRepository(store)

    from app.database.database import create_tables, make_engine, make_session_factory
    from app.database.repositories import SqlCalendarEventRepository, SqlSubEventRepository

    engine = make_engine(settings.database_url)
    create_tables(engine)
    session_factory = make_session_factory(engine)
    return SqlCalendarEventRepository(session_factory), SqlSubEventRepository(session_factory)


def build_container(
    settings: Settings,
    event_repository: CalendarEventRepository | None = None,
    sub_event_repository: SubEventRepository | None = None,
) -> Container:
    """Build the container; repositories may be passed in (tests)."""
    set_local_timezone(settings.timezone)

    if event_repository is None or sub_event_repository is None:
        event_repository, sub_event_repository = build_repositories(settings)

    ripple = HolidayRipple(event_repository, sub_event_repository)
    container = Container(
        settings=settings,
        event_repository=event_repository,
        sub_event_repository=sub_event_repository,
        ripple=ripple,
        event_service=EventService(event_repository, sub_event_repository, ripple),
        compensation=CompensationCalculatorFacade(event_repository, sub_event_repository),
    )
    logger.info(
        "Container built",
        extra={"extra_fields": {"storage_backend": settings.storage_backend, "timezone": settings.timezone}},
    )
    return container
