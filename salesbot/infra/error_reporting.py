"""
Error reporting sink.

Every error is logged with its traceback; when ROLLBAR_ACCESS_TOKEN is set it
is also forwarded to Rollbar.
"""

from __future__ import annotations

from typing import Any

import rollbar

from salesbot.config import Settings
from salesbot.infra.logging_config import get_logger

logger = get_logger("errors")

_rollbar_enabled = False


def init_error_reporting(settings: Settings) -> bool:
    """Initialize Rollbar if a token is configured. Returns True when enabled."""
    global _rollbar_enabled
    if not settings.rollbar_access_token:
        _rollbar_enabled = False
        return False
    rollbar.init(settings.rollbar_access_token, environment=settings.environment)
    _rollbar_enabled = True
    logger.info("Rollbar error reporting enabled (%s)", settings.environment)
    return True


def report_exception(exc: BaseException, **context: Any) -> None:
    """Log an exception with context and forward it to Rollbar when enabled."""
    logger.error(
        "Unhandled error: %s | context=%s",
        exc,
        context,
        exc_info=(type(exc), exc, exc.__traceback__),
    )
    if _rollbar_enabled:
        rollbar.report_exc_info(
            (type(exc), exc, exc.__traceback__), extra_data=context or None
        )
