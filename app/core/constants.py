# app/core/constants.py
from typing import Final

# ==========================
# Event types
# ==========================

#: Standby shift; paid per hour outside office hours.
EVENT_TYPE_ONCALL: Final[str] = "oncall"

#: Actual incident work; paid on the base salary with multipliers.
EVENT_TYPE_INCIDENT: Final[str] = "incident"

#: Holiday marker; feeds the holiday set used when classifying other events.
EVENT_TYPE_HOLIDAY: Final[str] = "holiday"

#: All accepted event types.
EVENT_TYPES: Final[tuple[str, ...]] = (
    EVENT_TYPE_ONCALL,
    EVENT_TYPE_INCIDENT,
    EVENT_TYPE_HOLIDAY,
)

#: Event types that produce compensation and are re-subdivided when holidays change.
BILLABLE_EVENT_TYPES: Final[tuple[str, ...]] = (
    EVENT_TYPE_ONCALL,
    EVENT_TYPE_INCIDENT,
)


# ==========================
# Breakdown categories
# ==========================

#: Line types in a month breakdown.
BREAKDOWN_TYPE_ONCALL: Final[str] = EVENT_TYPE_ONCALL
BREAKDOWN_TYPE_INCIDENT: Final[str] = EVENT_TYPE_INCIDENT
BREAKDOWN_TYPE_TOTAL: Final[str] = "total"

#: Precedence categories, highest first.
CATEGORY_HOLIDAY: Final[str] = "holiday"
CATEGORY_NIGHT_SHIFT: Final[str] = "night_shift"
CATEGORY_WEEKEND: Final[str] = "weekend"
CATEGORY_REGULAR: Final[str] = "regular"


# ==========================
# Week structure / time
# ==========================

#: datetime.weekday() values counted as weekend (Saturday, Sunday).
WEEKEND_WEEKDAYS: Final[tuple[int, ...]] = (5, 6)

#: datetime.weekday() values with office hours (Monday to Friday).
OFFICE_WEEKDAYS: Final[tuple[int, ...]] = (0, 1, 2, 3, 4)

#: Seconds per hour, used when converting timedeltas to hours.
SECONDS_PER_HOUR: Final[int] = 3600


# ==========================
# Storage
# ==========================

#: Collection names in the JSON document store (same names as the remote store).
COLLECTION_EVENTS: Final[str] = "events"
COLLECTION_SUB_EVENTS: Final[str] = "subEvents"

#: Supported storage backends.
STORAGE_BACKEND_SQLITE: Final[str] = "sqlite"
STORAGE_BACKEND_DOCUMENT: Final[str] = "document"
STORAGE_BACKEND_MEMORY: Final[str] = "memory"

STORAGE_BACKENDS: Final[tuple[str, ...]] = (
    STORAGE_BACKEND_SQLITE,
    STORAGE_BACKEND_DOCUMENT,
    STORAGE_BACKEND_MEMORY,
)
