"""
MindLens Logging Configuration

structlog setup shared by every module. Entries carry keyword fields,
a correlation id (bound per request) and service metadata.

SECURITY: Raw user identifiers, questionnaire answers and key material
must never reach a log sink. The scrub processor runs before any
renderer.
"""

import logging
import sys
from typing import Any

import structlog

from mindlens import __version__
from mindlens.config.settings import Settings

SERVICE_NAME = "mindlens-core"

# Field names whose values are dropped outright (substring match)
SENSITIVE_PATTERNS: frozenset[str] = frozenset({
    "password",
    "token",
    "secret",
    "api_key",
    "apikey",
    "authorization",
    "bearer",
    "credential",
    "private_key",
    "encryption_key",
    "key_material",
    "plaintext",
})

# Field names whose values are reduced to a short prefix (exact match)
IDENTIFIER_KEYS: frozenset[str] = frozenset({"user_id", "owner"})

IDENTIFIER_VISIBLE_CHARS = 8

QUIET_LOGGERS = ("uvicorn.access", "httpx", "httpcore", "google", "sqlalchemy.engine")


def mask_identifier(value: Any) -> str:
    """Mask an identifier, keeping a short prefix for correlation."""
    return f"{str(value)[:IDENTIFIER_VISIBLE_CHARS]}***"


def _scrub(key: str, value: Any) -> Any:
    lowered = key.lower()
    if any(pattern in lowered for pattern in SENSITIVE_PATTERNS):
        return "[REDACTED]"
    if lowered in IDENTIFIER_KEYS and value is not None:
        return mask_identifier(value)
    if isinstance(value, dict):
        return {k: _scrub(k, v) for k, v in value.items()}
    if isinstance(value, list):
        return [_scrub(key, item) for item in value]
    return value


def _redact_sensitive_data(
    logger: logging.Logger,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """structlog processor: redact secrets and mask user identifiers, recursively."""
    return {key: _scrub(key, value) for key, value in event_dict.items()}


def _add_service_context(
    logger: logging.Logger,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    event_dict.setdefault("service", SERVICE_NAME)
    event_dict.setdefault("version", __version__)
    return event_dict


def get_processors(is_development: bool) -> list[Any]:
    """
    Processor chain for the environment.

    Development renders coloured console output; every other
    environment emits one JSON object per line.
    """
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        _redact_sensitive_data,
        _add_service_context,
    ]

    if is_development:
        return processors + [structlog.dev.ConsoleRenderer(colors=True)]
    return processors + [
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer(),
    ]


def configure_logging(settings: Settings) -> None:
    """
    Configure structlog and the stdlib root logger.

    Call once at startup, before the first log entry.
    """
    level = getattr(logging, settings.log_level.upper())

    structlog.configure(
        processors=get_processors(settings.env == "development"),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def bind_correlation_id(correlation_id: str) -> None:
    """Attach a correlation id to every entry logged in the current context."""
    structlog.contextvars.bind_contextvars(correlation_id=correlation_id)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()
