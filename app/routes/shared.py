# app/routes/shared.py
"""
Shared schemas, dependencies and error handlers for route modules.
"""

import logging
from datetime import datetime

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from app.core.container import Container
from app.core.errors import AppError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def get_container(request: Request) -> Container:
    """Dependency returning the container built at start-up."""
    return request.app.state.container


# ============ Pydantic schemas ============


class EventIn(BaseModel):
    start: datetime
    end: datetime
    type: str
    title: str | None = None


class EventCreate(EventIn):
    id: str | None = None


# ============ Error handlers ============


async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, content={"detail": exc.to_dict()})


async def not_found_error_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": exc.to_dict()})


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Anything else is a server error; details stay in the logs."""
    logger.error(
        f"Unhandled application error: {exc.message}",
        extra={
            "extra_fields": {
                "code": exc.code,
                "context": exc.context,
                "request_id": getattr(request.state, "request_id", None),
            }
        },
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": {"code": exc.code, "message": "Internal server error"}},
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(NotFoundError, not_found_error_handler)
    app.add_exception_handler(AppError, app_error_handler)
