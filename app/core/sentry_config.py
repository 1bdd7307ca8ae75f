# app/core/sentry_config.py
"""
Sentry configuration for error tracking in production.

Sentry captures exceptions from the calculation engine, the holiday ripple
and the HTTP layer. Outside production every helper here is a no-op on the
Sentry side because the SDK is never initialised.
"""

import logging

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration
from sentry_sdk.integrations.starlette import StarletteIntegration

from app.core.config import Settings

logger = logging.getLogger(__name__)


def init_sentry(settings: Settings) -> bool:
    """
    Initialize Sentry error tracking.

    Returns:
        True if Sentry was initialized successfully, False otherwise.
    """
    if not settings.production:
        logger.info("Sentry disabled in development mode")
        return False

    if not settings.sentry_dsn:
        logger.warning(
            "SENTRY_DSN not set. Error tracking disabled. "
            "Set SENTRY_DSN environment variable to enable Sentry in production."
        )
        return False

    # Logging integration - send error logs to Sentry
    logging_integration = LoggingIntegration(
        level=logging.INFO,  # Breadcrumbs from INFO and above
        event_level=logging.ERROR,  # Send errors and above as events
    )

    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        integrations=[
            FastApiIntegration(),
            StarletteIntegration(),
            logging_integration,
        ],
        traces_sample_rate=0.1,  # 10% of requests tracked for performance
        sample_rate=1.0,
        release=settings.release,
        environment="production",
        send_default_pii=False,
        attach_stacktrace=True,
        before_send=before_send_hook,
    )

    logger.info("Sentry initialized successfully (release: %s)", settings.release)
    return True


def before_send_hook(event, hint):
    """
    Filter sensitive data before sending to Sentry.

    Args:
        event: Sentry event data
        hint: Additional context

    Returns:
        Modified event or None to drop the event
    """
    headers = event.get("request", {}).get("headers")
    if headers:
        for header in ("cookie", "authorization", "x-api-key"):
            if header in headers:
                headers[header] = "[Filtered]"

    # Event titles are user-entered free text
    extra = event.get("contexts", {}).get("event")
    if isinstance(extra, dict) and "title" in extra:
        extra["title"] = "[Filtered]"

    return event


def capture_exception(error: Exception, context: dict | None = None) -> None:
    """
    Manually capture an exception to Sentry with additional context.

    Args:
        error: Exception to capture
        context: Additional context, sent as the "event" context
    """
    if context:
        with sentry_sdk.new_scope() as scope:
            scope.set_context("event", context)
            sentry_sdk.capture_exception(error)
    else:
        sentry_sdk.capture_exception(error)


def add_breadcrumb(message: str, category: str = "default", level: str = "info", data: dict | None = None) -> None:
    """
    Add a breadcrumb for debugging.

    Breadcrumbs are trails of events that happened before an error.
    """
    sentry_sdk.add_breadcrumb(message=message, category=category, level=level, data=data or {})
