# app/main.py
"""
FastAPI application entry point.
"""

import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.requests import Request
from fastapi.responses import JSONResponse

from app.core.config import Settings, load_settings_from_env
from app.core.container import Container, build_container
from app.core.errors import StorageError
from app.core.logging_config import get_logger, setup_logging
from app.core.request_logging import RequestLoggingMiddleware
from app.core.sentry_config import init_sentry
from app.routes.compensation import router as compensation_router
from app.routes.events import router as events_router
from app.routes.shared import register_error_handlers

logger = get_logger(__name__)

VERSION = "0.1.0"


def create_app(settings: Settings | None = None, container: Container | None = None) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Runtime settings; read from the environment when omitted
        container: Pre-built container (tests); built in the lifespan when omitted
    """
    settings = settings or load_settings_from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan events."""
        logger.info(
            "Application starting up",
            extra={
                "extra_fields": {
                    "production": settings.production,
                    "storage_backend": settings.storage_backend,
                    "python_version": sys.version,
                }
            },
        )
        if container is not None:
            app.state.container = container
        else:
            try:
                app.state.container = build_container(settings)
            except Exception as e:
                logger.error(f"Failed to build container: {e}", exc_info=True)
                raise

        yield

        logger.info("Application shutting down")

    app = FastAPI(
        title="On-call compensation",
        description="Calendar of on-call shifts, incidents and holidays with compensation calculation",
        version=VERSION,
        lifespan=lifespan,
    )

    if settings.production:
        # Production: Strict CORS - only allow specified origins
        if not settings.cors_origins:
            logger.warning(
                "Production mode but no CORS_ORIGINS set. CORS will block all cross-origin requests. "
                "Set CORS_ORIGINS environment variable if you need to allow specific origins."
            )
        allowed_origins = settings.cors_origins
        allowed_methods = ["GET", "POST", "PUT", "DELETE"]
    else:
        # Development: Permissive CORS for easier testing
        allowed_origins = ["*"]
        allowed_methods = ["*"]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=allowed_methods,
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    register_error_handlers(app)
    app.include_router(events_router)
    app.include_router(compensation_router)

    @app.get("/health", tags=["health"])
    async def health_check(request: Request):
        """
        Health check endpoint for monitoring.

        Returns 200 when the storage backend answers, 503 otherwise.
        """
        current: Container = request.app.state.container
        try:
            current.event_repository.get_holiday_events()
        except StorageError as e:
            logger.error(f"Health check failed - storage error: {e}", exc_info=True)
            raise HTTPException(
                status_code=503,
                detail={
                    "status": "unhealthy",
                    "service": "oncall-compensation",
                    "storage": "unavailable",
                    "error": "Storage backend failed",
                },
            ) from e
        return JSONResponse(
            status_code=200,
            content={
                "status": "healthy",
                "service": "oncall-compensation",
                "version": VERSION,
                "storage": current.settings.storage_backend,
            },
        )

    return app


settings = load_settings_from_env()

# Setup logging FIRST (before anything else logs)
setup_logging(production=settings.production)

# Initialize Sentry for error tracking (production only)
sentry_enabled = init_sentry(settings)

app = create_app(settings)
