"""
Pytest configuration and shared fixtures for testing.

Provides reusable test fixtures:
- event_repository / sub_event_repository: in-memory repositories
- event_service / facade: use cases and calculators over those repositories
- sql_session_factory: in-memory SQLite database for the SQLAlchemy backend
- test_client: FastAPI TestClient backed by the in-memory container
- make_event: factory for validated CalendarEvents
"""

import datetime
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# ruff: noqa: E402
from app.core.compensation import CompensationCalculatorFacade
from app.core.config import Settings
from app.core.constants import STORAGE_BACKEND_MEMORY
from app.core.container import build_container
from app.core.event_service import EventService
from app.core.holidays import clear_holiday_cache
from app.core.models import CalendarEvent
from app.core.repositories import InMemoryCalendarEventRepository, InMemorySubEventRepository
from app.core.time_utils import set_local_timezone
from app.database.database import Base
from app.main import create_app


@pytest.fixture(autouse=True)
def reset_global_state():
    """Every test starts with an empty holiday memo and the default time zone."""
    set_local_timezone("Europe/Amsterdam")
    clear_holiday_cache()
    yield
    clear_holiday_cache()


@pytest.fixture
def make_event():
    """Factory building a validated CalendarEvent from naive local datetimes."""

    def _make(start: datetime.datetime, end: datetime.datetime, type: str = "oncall", id: str | None = None):
        return CalendarEvent.create(start=start, end=end, type=type, id=id)

    return _make


@pytest.fixture
def event_repository():
    return InMemoryCalendarEventRepository()


@pytest.fixture
def sub_event_repository():
    return InMemorySubEventRepository()


@pytest.fixture
def event_service(event_repository, sub_event_repository):
    return EventService(event_repository, sub_event_repository)


@pytest.fixture
def facade(event_repository, sub_event_repository):
    return CompensationCalculatorFacade(event_repository, sub_event_repository)


@pytest.fixture(scope="function")
def sql_session_factory():
    """
    Create an in-memory SQLite database for testing.

    A StaticPool keeps the single in-memory connection alive for every
    session the repositories open. The database is destroyed after each test.
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)
    try:
        yield TestingSessionLocal
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def container(event_repository, sub_event_repository):
    settings = Settings(storage_backend=STORAGE_BACKEND_MEMORY)
    return build_container(settings, event_repository, sub_event_repository)


@pytest.fixture(scope="function")
def test_client(container):
    """
    Create FastAPI TestClient using the in-memory container.

    Yields:
        TestClient: FastAPI test client for API testing
    """
    app = create_app(container.settings, container)
    with TestClient(app) as client:
        yield client
