# app/core/storage.py
"""
JSON document store backend.

One JSON file holds two collections, ``events`` and ``subEvents``, each a map
from document id to the camelCase document. Writes go to a temporary file that
replaces the store atomically and are retried with exponential backoff.
"""

import json
import logging
import os
import tempfile
import time
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from app.core.constants import COLLECTION_EVENTS, COLLECTION_SUB_EVENTS
from app.core.errors import NotFoundError, StorageError, ValidationError
from app.core.models import CalendarEvent, SubEvent
from app.core.repositories import CalendarEventRepository, SubEventRepository

logger = logging.getLogger(__name__)

Collection = dict[str, dict[str, Any]]


class JsonDocumentStore:
    """File backed store of document collections."""

    MAX_RETRIES = 3  # Maximum write attempts
    RETRY_BACKOFF_BASE = 0.1  # Seconds, doubled for every retry

    def __init__(self, path: str | Path, retry_backoff_base: float | None = None):
        self.path = Path(path)
        if retry_backoff_base is not None:
            self.RETRY_BACKOFF_BASE = retry_backoff_base

    def _load(self) -> dict[str, Collection]:
        """
        Read and parse the store file.
        Returns:
            All collections; empty ones when the file does not exist yet
        Raises:
            StorageError: If the file cannot be read or holds invalid JSON
        """
        if not self.path.exists():
            return {COLLECTION_EVENTS: {}, COLLECTION_SUB_EVENTS: {}}
        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError as e:
            logger.exception("Failed to read document store %s", self.path)
            raise StorageError(f"Could not read document store {self.path}: {e}") from e

        try:
            data = json.loads(raw) if raw.strip() else {}
        except json.JSONDecodeError as e:
            logger.exception("Invalid JSON in document store %s", self.path)
            raise StorageError(f"Invalid JSON in document store {self.path}: {e}") from e

        if not isinstance(data, dict):
            raise StorageError(f"Document store {self.path} must hold a JSON object")
        data.setdefault(COLLECTION_EVENTS, {})
        data.setdefault(COLLECTION_SUB_EVENTS, {})
        return data

    def _write_atomic(self, data: dict[str, Collection]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(data, handle, ensure_ascii=False, indent=2)
            os.replace(tmp_name, self.path)
        except OSError:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    def _save(self, data: dict[str, Collection]) -> None:
        last_error: OSError | None = None
        for attempt in range(self.MAX_RETRIES):
            try:
                self._write_atomic(data)
                return
            except OSError as e:
                last_error = e
                logger.warning(
                    f"Write to document store failed on attempt {attempt + 1}/{self.MAX_RETRIES}: {e}"
                )

            # Exponential backoff before retry (except on last attempt)
            if attempt < self.MAX_RETRIES - 1:
                time.sleep(self.RETRY_BACKOFF_BASE * 2**attempt)

        logger.error(
            f"Failed to write document store after {self.MAX_RETRIES} attempts",
            extra={"extra_fields": {"path": str(self.path)}},
        )
        raise StorageError(
            f"Could not write document store {self.path}: {last_error}",
            {"path": str(self.path), "attempts": self.MAX_RETRIES},
        ) from last_error

    def read_collection(self, name: str) -> Collection:
        return self._load()[name]

    def modify_collection(self, name: str, change) -> None:
        """Apply change(collection) and persist the whole store."""
        data = self._load()
        change(data[name])
        self._save(data)


def _parse_documents(model, documents: Iterable[dict[str, Any]], collection: str) -> list:
    parsed = []
    for document in documents:
        try:
            parsed.append(model.from_json(document))
        except ValidationError as e:
            logger.exception("Invalid document in collection %s", collection)
            raise StorageError(
                f"Could not parse document in {collection}: {e.message}",
                {"collection": collection, "id": document.get("id")},
            ) from e
    return parsed


class DocumentCalendarEventRepository(CalendarEventRepository):
    def __init__(self, store: JsonDocumentStore):
        self.store = store

    def save(self, events: Iterable[CalendarEvent]) -> None:
        documents = [e.to_json() for e in events]

        def change(collection: Collection) -> None:
            for document in documents:
                collection[document["id"]] = document

        self.store.modify_collection(COLLECTION_EVENTS, change)

    def get_all(self) -> list[CalendarEvent]:
        documents = self.store.read_collection(COLLECTION_EVENTS).values()
        return _parse_documents(CalendarEvent, documents, COLLECTION_EVENTS)

    def get_by_id(self, event_id: str) -> CalendarEvent | None:
        document = self.store.read_collection(COLLECTION_EVENTS).get(event_id)
        if document is None:
            return None
        return _parse_documents(CalendarEvent, [document], COLLECTION_EVENTS)[0]

    def update(self, event: CalendarEvent) -> None:
        document = event.to_json()

        def change(collection: Collection) -> None:
            if event.id not in collection:
                raise NotFoundError(f"Event {event.id} not found", {"event_id": event.id})
            collection[event.id] = document

        self.store.modify_collection(COLLECTION_EVENTS, change)

    def delete(self, event_id: str) -> None:
        self.delete_multiple_by_ids([event_id])

    def delete_multiple_by_ids(self, event_ids: Iterable[str]) -> None:
        ids = set(event_ids)

        def change(collection: Collection) -> None:
            for event_id in ids:
                collection.pop(event_id, None)

        self.store.modify_collection(COLLECTION_EVENTS, change)


class DocumentSubEventRepository(SubEventRepository):
    def __init__(self, store: JsonDocumentStore):
        self.store = store

    def save(self, sub_events: Iterable[SubEvent]) -> None:
        documents = [s.to_json() for s in sub_events]
        if not documents:
            return

        def change(collection: Collection) -> None:
            for document in documents:
                collection[document["id"]] = document

        self.store.modify_collection(COLLECTION_SUB_EVENTS, change)

    def get_all(self) -> list[SubEvent]:
        documents = self.store.read_collection(COLLECTION_SUB_EVENTS).values()
        return _parse_documents(SubEvent, documents, COLLECTION_SUB_EVENTS)

    def get_by_parent_id(self, parent_event_id: str) -> list[SubEvent]:
        documents = [
            d
            for d in self.store.read_collection(COLLECTION_SUB_EVENTS).values()
            if d.get("parentEventId") == parent_event_id
        ]
        sub_events = _parse_documents(SubEvent, documents, COLLECTION_SUB_EVENTS)
        return sorted(sub_events, key=lambda s: s.start)

    def delete_by_parent_id(self, parent_event_id: str) -> None:
        self.delete_by_parent_ids([parent_event_id])

    def delete_by_parent_ids(self, parent_event_ids: Iterable[str]) -> None:
        parents = set(parent_event_ids)

        def change(collection: Collection) -> None:
            doomed = [key for key, d in collection.items() if d.get("parentEventId") in parents]
            for key in doomed:
                del collection[key]

        self.store.modify_collection(COLLECTION_SUB_EVENTS, change)


def migrate_storage(
    source_events: CalendarEventRepository,
    source_sub_events: SubEventRepository,
    target_events: CalendarEventRepository,
    target_sub_events: SubEventRepository,
) -> dict[str, int]:
    """
    Copy every event and sub-event from one backend to another.
    Returns:
        Number of copied events and sub-events
    Raises:
        StorageError: If either backend fails
    """
    events = source_events.get_all()
    sub_events = source_sub_events.get_all()

    target_events.save(events)
    target_sub_events.save(sub_events)

    logger.info(
        "Migrated %d events and %d sub-events",
        len(events),
        len(sub_events),
        extra={"extra_fields": {"events": len(events), "sub_events": len(sub_events)}},
    )
    return {"events": len(events), "sub_events": len(sub_events)}
