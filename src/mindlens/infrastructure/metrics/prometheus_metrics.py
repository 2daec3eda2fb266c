"""
Prometheus Metrics

Metrics for assessment pipeline observability.
Exposed at /metrics for Prometheus scraping.

ARCHITECTURE: Metrics are decoupled from business logic.
Only increment/observe; never block on metrics operations.
"""

import time
from contextlib import contextmanager
from typing import Iterator

from fastapi import APIRouter, Response
from prometheus_client import (
    Counter,
    Histogram,
    Info,
    generate_latest,
    CONTENT_TYPE_LATEST,
    REGISTRY,
)

# =============================================================================
# SAFETY METRICS
# =============================================================================

RISK_ASSESSMENTS_TOTAL = Counter(
    "mindlens_risk_assessments_total",
    "Risk assessments by severity tier",
    ["severity"],  # low, medium, high, critical
)

CRISIS_ALERTS_TOTAL = Counter(
    "mindlens_crisis_alerts_total",
    "Crisis alerts recorded",
    ["severity", "escalated"],
)

NOTIFICATIONS_TOTAL = Counter(
    "mindlens_notifications_total",
    "Notification attempts by channel and outcome",
    ["action", "result"],  # success, failure
)

AUDIT_WRITE_FAILURES = Counter(
    "mindlens_audit_write_failures_total",
    "Audit trail writes that failed (fatal)",
)

# =============================================================================
# SUBMISSION METRICS
# =============================================================================

SUBMISSIONS_TOTAL = Counter(
    "mindlens_submissions_total",
    "Assessment submissions by outcome",
    ["outcome"],  # completed, malformed, storage_failed, audit_failed, abandoned
)

ANALYTICS_FORWARDS_TOTAL = Counter(
    "mindlens_analytics_forwards_total",
    "Research record forwarding attempts",
    ["result"],  # success, failure, skipped
)

COLLABORATOR_LATENCY = Histogram(
    "mindlens_collaborator_latency_seconds",
    "Latency of external collaborator calls",
    ["collaborator"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
)

SYSTEM_INFO = Info(
    "mindlens_system",
    "MindLens system information",
)

SYSTEM_INFO.info({
    "version": "0.1.0",
    "environment": "development",
})


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def track_risk_assessment(severity: str) -> None:
    """Record assessment severity tier."""
    RISK_ASSESSMENTS_TOTAL.labels(severity=severity).inc()


def track_crisis_alert(severity: str, escalated: bool) -> None:
    CRISIS_ALERTS_TOTAL.labels(severity=severity, escalated=str(escalated).lower()).inc()


def track_notification(action: str, success: bool) -> None:
    NOTIFICATIONS_TOTAL.labels(action=action, result="success" if success else "failure").inc()


def track_submission(outcome: str) -> None:
    SUBMISSIONS_TOTAL.labels(outcome=outcome).inc()


def track_analytics_forward(result: str) -> None:
    ANALYTICS_FORWARDS_TOTAL.labels(result=result).inc()


@contextmanager
def track_latency(collaborator: str) -> Iterator[None]:
    """Observe wall-clock latency of a collaborator call."""
    start = time.perf_counter()
    try:
        yield
    finally:
        COLLABORATOR_LATENCY.labels(collaborator=collaborator).observe(time.perf_counter() - start)


def update_system_info(environment: str, version: str = "0.1.0") -> None:
    """Update system info metric with current environment."""
    SYSTEM_INFO.info({
        "version": version,
        "environment": environment,
    })


# =============================================================================
# METRICS ENDPOINT
# =============================================================================

metrics_router = APIRouter(tags=["metrics"])


@metrics_router.get("/metrics")
async def metrics() -> Response:
    """Prometheus metrics endpoint."""
    return Response(
        content=generate_latest(REGISTRY),
        media_type=CONTENT_TYPE_LATEST,
    )
