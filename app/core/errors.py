# app/core/errors.py
"""
Error types shared by the calculation engine, the storage backends and the routes.

Every error carries a machine readable ``code`` and an optional ``context`` dict
that ends up in the structured log record and in the Sentry event.
"""

from typing import Any


class AppError(Exception):
    """Base class for all application errors."""

    code = "APP_ERROR"

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message, "context": self.context}


class ValidationError(AppError):
    """Malformed input, e.g. end <= start or an unknown event type."""

    code = "VALIDATION_ERROR"


class NotFoundError(AppError):
    """A referenced event does not exist."""

    code = "NOT_FOUND"


class StorageError(AppError):
    """A storage backend could not read or write data."""

    code = "STORAGE_ERROR"


class DatabaseError(StorageError):
    """SQLAlchemy backed storage failed."""

    code = "DB_ERROR"


class ApplicationError(AppError):
    """Use-case level wrapper carrying the operation context of the failure."""

    code = "APPLICATION_ERROR"
