#!/usr/bin/env python3
"""
Migration script: copy events and sub-events from the local SQLite database
to the JSON document store.

Usage:
    python migrate_to_document_store.py [--target data/document_store.json] [--regenerate]

This will:
1. Read every event and sub-event from DATABASE_URL (via load_settings_from_env)
2. Write them into the document store (existing documents with the same id are replaced)
3. Optionally rebuild all sub-events in the target against its holidays
"""

import argparse
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from app.core.config import load_settings_from_env
from app.core.errors import StorageError
from app.core.event_service import EventService
from app.core.logging_config import LogContext, get_logger, setup_logging
from app.core.storage import (
    DocumentCalendarEventRepository,
    DocumentSubEventRepository,
    JsonDocumentStore,
    migrate_storage,
)
from app.core.time_utils import set_local_timezone
from app.database.database import create_tables, make_engine, make_session_factory
from app.database.repositories import SqlCalendarEventRepository, SqlSubEventRepository

logger = get_logger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Copy local data to the JSON document store")
    parser.add_argument("--target", help="Document store path (default: DOCUMENT_STORE_PATH)")
    parser.add_argument(
        "--regenerate", action="store_true", help="Rebuild all sub-events in the target after copying"
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    settings = load_settings_from_env()
    setup_logging(production=settings.production)
    set_local_timezone(settings.timezone)

    target_path = args.target or settings.document_store_path
    engine = make_engine(settings.database_url)
    create_tables(engine)
    session_factory = make_session_factory(engine)
    store = JsonDocumentStore(target_path)
    target_events = DocumentCalendarEventRepository(store)
    target_sub_events = DocumentSubEventRepository(store)

    with LogContext(migration_target=str(target_path)):
        try:
            counts = migrate_storage(
                SqlCalendarEventRepository(session_factory),
                SqlSubEventRepository(session_factory),
                target_events,
                target_sub_events,
            )
        except StorageError as e:
            logger.error(f"Migration failed: {e.message}", exc_info=True)
            print(f"   [ERROR] {e.message}")
            return 1
        finally:
            engine.dispose()

        print(f"   [OK] Copied {counts['events']} events and {counts['sub_events']} sub-events to {target_path}")

        if args.regenerate:
            report = EventService(target_events, target_sub_events).regenerate_all_sub_events()
            print(f"   [OK] Regenerated sub-events for {len(report.succeeded)} events")
            if report.failed:
                print(f"   [WARN] {len(report.failed)} events failed, see the log")
                return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
