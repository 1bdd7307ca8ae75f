# app/database/database.py
"""
SQLAlchemy database setup and models.
"""

from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String, create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def make_engine(url: str):
    """Create an engine; SQLite connections may be shared across threads."""
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, connect_args=connect_args)


def make_session_factory(engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)


class CalendarEventRow(Base):
    """A user-entered on-call shift, incident or holiday."""

    __tablename__ = "calendar_events"

    id = Column(String(36), primary_key=True)
    start = Column(DateTime, nullable=False, index=True)
    end = Column(DateTime, nullable=False)
    type = Column(String(20), nullable=False, index=True)
    title = Column(String(200), nullable=True)
    created_at = Column(DateTime, default=_utcnow)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)

    def __repr__(self):
        return f"<CalendarEventRow(id={self.id}, type={self.type}, start={self.start}, end={self.end})>"


class SubEventRow(Base):
    """A classified slice of a calendar event."""

    __tablename__ = "sub_events"

    id = Column(String(36), primary_key=True)
    parent_event_id = Column(String(36), ForeignKey("calendar_events.id"), nullable=False, index=True)
    start = Column(DateTime, nullable=False)
    end = Column(DateTime, nullable=False)
    is_weekday = Column(Boolean, nullable=False)
    is_weekend = Column(Boolean, nullable=False)
    is_holiday = Column(Boolean, nullable=False)
    is_night_shift = Column(Boolean, nullable=False)
    is_office_hours = Column(Boolean, nullable=False)
    type = Column(String(20), nullable=False)

    def __repr__(self):
        return f"<SubEventRow(id={self.id}, parent={self.parent_event_id}, start={self.start}, end={self.end})>"


def create_tables(bind):
    """Create all database tables on the given engine."""
    Base.metadata.create_all(bind=bind)
