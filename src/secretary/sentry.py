"""Sentry error tracking for the AI secretary.

Usage:
    # Once at startup
    from secretary.sentry import init_sentry
    init_sentry(dsn=settings.sentry_dsn)

    # At a boundary that swallows an error for the user
    from secretary.sentry import capture_exception
    try:
        await store.create_event(event)
    except Exception as e:
        capture_exception(e)
        return FAILURE_MESSAGE
"""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING, Any, cast

import sentry_sdk
from sentry_sdk.integrations.logging import LoggingIntegration

if TYPE_CHECKING:
    from sentry_sdk._types import Event, Hint

logger = logging.getLogger(__name__)

# Module state
_initialized = False

SENSITIVE_KEYS = {
    "token",
    "api_key",
    "apikey",
    "key",
    "secret",
    "password",
    "authorization",
    "bearer",
    "supabase_key",
    "gemini_api_key",
    "openai_api_key",
    "anthropic_api_key",
    "x-api-key",
    "sentry_dsn",
}


def init_sentry(
    dsn: str | None = None,
    environment: str = "production",
    release: str | None = None,
    traces_sample_rate: float = 0.0,
    debug: bool = False,
) -> bool:
    """Initialize Sentry SDK for error tracking.

    Args:
        dsn: Sentry DSN. If None, reads from SENTRY_DSN env var.
             Empty DSN disables Sentry.
        environment: Environment name (production, staging, development).
        release: Release version. If None, taken from the installed package.
        traces_sample_rate: Sample rate for performance tracing (0.0-1.0).
        debug: Enable Sentry debug mode.

    Returns:
        True if Sentry was initialized, False if skipped.
    """
    global _initialized

    if _initialized:
        logger.debug("Sentry already initialized")
        return True

    if dsn is None:
        dsn = os.environ.get("SENTRY_DSN", "")

    if not dsn:
        logger.info("No SENTRY_DSN configured, error tracking disabled")
        return False

    if release is None:
        try:
            from importlib.metadata import version

            release = f"ai-secretary@{version('ai-secretary')}"
        except Exception:
            release = "ai-secretary@unknown"

    logging_integration = LoggingIntegration(
        level=logging.INFO,
        event_level=logging.ERROR,
    )

    sentry_sdk.init(
        dsn=dsn,
        environment=environment,
        release=release,
        traces_sample_rate=traces_sample_rate,
        debug=debug,
        integrations=[logging_integration],
        # User messages may carry personal schedule details
        send_default_pii=False,
        attach_stacktrace=True,
        before_send=_before_send,
    )

    _initialized = True
    logger.info(f"Sentry initialized: environment={environment}, release={release}")
    return True


def _before_send(event: Event, hint: Hint) -> Event | None:
    """Drop noisy network errors and scrub credentials before sending."""
    if "exc_info" in hint:
        exc_type, _, _ = hint["exc_info"]
        if exc_type.__name__ in ("TimeoutError", "ConnectionError", "ConnectTimeout"):
            return None

    if "request" in event:
        _scrub_dict(cast(dict[str, Any], event["request"]))

    if "breadcrumbs" in event:
        breadcrumbs = cast(dict[str, Any], event["breadcrumbs"])
        for breadcrumb in breadcrumbs.get("values", []):
            if "data" in breadcrumb:
                _scrub_dict(breadcrumb["data"])

    return event


def _scrub_dict(data: dict[str, Any]) -> None:
    """Scrub sensitive keys from a dictionary in-place."""
    for key in list(data.keys()):
        if key.lower() in SENSITIVE_KEYS:
            data[key] = "[REDACTED]"
        elif isinstance(data[key], dict):
            _scrub_dict(data[key])


def add_breadcrumb(
    message: str,
    category: str = "default",
    level: str = "info",
    data: dict[str, Any] | None = None,
) -> None:
    """Record a breadcrumb that is attached to later error events."""
    if not _initialized:
        return

    sentry_sdk.add_breadcrumb(
        message=message,
        category=category,
        level=level,
        data=data or {},
    )


def capture_exception(exception: BaseException | None = None) -> str | None:
    """Send an exception to Sentry. Returns the event ID, or None when disabled."""
    if not _initialized:
        return None

    return sentry_sdk.capture_exception(exception)


def flush(timeout: float = 2.0) -> None:
    """Flush pending Sentry events before shutdown."""
    if not _initialized:
        return

    sentry_sdk.flush(timeout=timeout)


def is_enabled() -> bool:
    return _initialized
