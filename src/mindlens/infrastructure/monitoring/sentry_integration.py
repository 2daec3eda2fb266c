"""
Sentry Error Tracking Integration

Error tracking with sensitive data scrubbing. Safety-relevant failures
(audit writes, abandoned submissions) are captured as tagged events.

SECURITY: Sensitive fields and raw user identifiers are stripped
before anything is sent to Sentry.
"""

import re
from typing import Any, Optional

import sentry_sdk
from sentry_sdk.integrations.asyncio import AsyncioIntegration
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

from mindlens.config.logging_config import get_logger, mask_identifier

logger = get_logger(__name__)

SENSITIVE_PATTERNS = [
    r"password[\"']?\s*[:=]\s*[\"']?[^\"'\s,}]+",
    r"api[_-]?key[\"']?\s*[:=]\s*[\"']?[^\"'\s,}]+",
    r"token[\"']?\s*[:=]\s*[\"']?[^\"'\s,}]+",
    r"secret[\"']?\s*[:=]\s*[\"']?[^\"'\s,}]+",
    r"bearer\s+[a-zA-Z0-9\-._~+/]+=*",
]

SENSITIVE_KEYS = frozenset({
    "password",
    "token",
    "secret",
    "api_key",
    "authorization",
    "credential",
    "encryption_key",
    "key_material",
    "responses",
    "face_image",
})

IDENTIFIER_KEYS = frozenset({"user_id", "owner"})


def _scrub_string(value: str) -> str:
    result = value
    for pattern in SENSITIVE_PATTERNS:
        result = re.sub(pattern, "[REDACTED]", result, flags=re.IGNORECASE)
    return result


def scrub_dict(data: dict) -> dict:
    """Recursively scrub sensitive data from a dictionary."""
    result: dict[str, Any] = {}
    for key, value in data.items():
        key_lower = str(key).lower().replace("-", "_")

        if any(sensitive in key_lower for sensitive in SENSITIVE_KEYS):
            result[key] = "[REDACTED]"
        elif key_lower in IDENTIFIER_KEYS and value is not None:
            result[key] = mask_identifier(value)
        elif isinstance(value, dict):
            result[key] = scrub_dict(value)
        elif isinstance(value, list):
            result[key] = [
                scrub_dict(item) if isinstance(item, dict)
                else _scrub_string(item) if isinstance(item, str)
                else item
                for item in value
            ]
        elif isinstance(value, str):
            result[key] = _scrub_string(value)
        else:
            result[key] = value

    return result


def before_send(event: dict, hint: dict) -> Optional[dict]:
    """Scrub request data and extra context before sending."""
    request = event.get("request")
    if request:
        if isinstance(request.get("data"), dict):
            request["data"] = scrub_dict(request["data"])
        if isinstance(request.get("headers"), dict):
            request["headers"] = scrub_dict(request["headers"])

    if isinstance(event.get("extra"), dict):
        event["extra"] = scrub_dict(event["extra"])

    return event


def init_sentry(
    dsn: Optional[str],
    environment: str = "development",
    release: str = "mindlens@0.1.0",
    traces_sample_rate: float = 0.1,
) -> bool:
    """
    Initialize Sentry error tracking.

    Returns:
        True if Sentry was initialized
    """
    if not dsn:
        logger.warning("Sentry DSN not configured, error tracking disabled")
        return False

    sentry_sdk.init(
        dsn=dsn,
        environment=environment,
        release=release,
        traces_sample_rate=traces_sample_rate,
        before_send=before_send,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
            AsyncioIntegration(),
            LoggingIntegration(level=None, event_level=None),
        ],
        send_default_pii=False,
        attach_stacktrace=True,
        max_breadcrumbs=50,
    )

    logger.info("Sentry initialized", environment=environment, release=release)
    return True


def capture_safety_event(
    message: str,
    level: str = "warning",
    extra: Optional[dict] = None,
) -> None:
    """
    Capture a safety-related event for monitoring.

    Used for audit-write failures and abandoned submissions.
    """
    with sentry_sdk.new_scope() as scope:
        scope.set_tag("category", "safety")
        for key, value in scrub_dict(extra or {}).items():
            scope.set_extra(key, value)
        scope.capture_message(message, level="error" if level == "error" else "warning")
