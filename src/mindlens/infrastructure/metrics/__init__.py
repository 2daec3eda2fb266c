"""Metrics infrastructure package."""

from mindlens.infrastructure.metrics.prometheus_metrics import (
    RISK_ASSESSMENTS_TOTAL,
    CRISIS_ALERTS_TOTAL,
    NOTIFICATIONS_TOTAL,
    AUDIT_WRITE_FAILURES,
    SUBMISSIONS_TOTAL,
    ANALYTICS_FORWARDS_TOTAL,
    COLLABORATOR_LATENCY,
    track_risk_assessment,
    track_crisis_alert,
    track_notification,
    track_submission,
    track_analytics_forward,
    track_latency,
    update_system_info,
    metrics_router,
)

__all__ = [
    "RISK_ASSESSMENTS_TOTAL",
    "CRISIS_ALERTS_TOTAL",
    "NOTIFICATIONS_TOTAL",
    "AUDIT_WRITE_FAILURES",
    "SUBMISSIONS_TOTAL",
    "ANALYTICS_FORWARDS_TOTAL",
    "COLLABORATOR_LATENCY",
    "track_risk_assessment",
    "track_crisis_alert",
    "track_notification",
    "track_submission",
    "track_analytics_forward",
    "track_latency",
    "update_system_info",
    "metrics_router",
]
