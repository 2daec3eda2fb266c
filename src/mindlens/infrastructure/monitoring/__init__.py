"""Monitoring infrastructure package."""

from mindlens.infrastructure.monitoring.sentry_integration import (
    init_sentry,
    capture_safety_event,
    scrub_dict,
)

__all__ = [
    "init_sentry",
    "capture_safety_event",
    "scrub_dict",
]
