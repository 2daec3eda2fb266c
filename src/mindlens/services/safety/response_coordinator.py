"""
Safety Response Coordinator

Maps a classified SafetyCheck to its ordered notification calls and
records the resulting CrisisAlert in the audit trail.

SAFETY-CRITICAL:
- Every notification in a tier is attempted, even after a failure
- The audit trail is written exactly once per response
- Only an audit-write failure is raised to the caller

State: NoAlert -> Classified -> Dispatched (possibly partial) -> Recorded | Fatal
"""

import asyncio
import dataclasses
from typing import Awaitable, Callable, Optional

from mindlens.config import get_settings
from mindlens.config.logging_config import get_logger
from mindlens.domain.enums.alert_severity import AlertSeverity, DispatchAction
from mindlens.domain.errors import AuditWriteError, NotificationDispatchError
from mindlens.domain.models.safety_models import CrisisAlert, DispatchOutcome, SafetyCheck
from mindlens.infrastructure.audit.client import AuditTrail
from mindlens.infrastructure.metrics.prometheus_metrics import (
    AUDIT_WRITE_FAILURES,
    track_crisis_alert,
    track_latency,
    track_notification,
)
from mindlens.infrastructure.monitoring.sentry_integration import capture_safety_event
from mindlens.infrastructure.notifications.client import NotificationClient, NotificationResult
from mindlens.services.safety.risk_engine import RiskAssessmentEngine

logger = get_logger(__name__)

# Ordered dispatch per tier
DISPATCH_TABLE: dict[AlertSeverity, tuple[DispatchAction, ...]] = {
    AlertSeverity.CRITICAL: (
        DispatchAction.NOTIFY_EMERGENCY_SERVICES,
        DispatchAction.ALERT_CRISIS_COUNSELOR,
    ),
    AlertSeverity.HIGH: (
        DispatchAction.ALERT_CRISIS_COUNSELOR,
        DispatchAction.DISPLAY_EMERGENCY_RESOURCES,
    ),
    AlertSeverity.MEDIUM: (DispatchAction.NOTIFY_COUNSELOR,),
    AlertSeverity.LOW: (DispatchAction.NOTIFY_COUNSELOR,),
}

ACTION_DESCRIPTIONS: dict[AlertSeverity, str] = {
    AlertSeverity.CRITICAL: "Emergency services notified, crisis counselor alerted",
    AlertSeverity.HIGH: "Crisis counselor alerted, emergency resources displayed",
    AlertSeverity.MEDIUM: "Counselor notified, safety plan recommended",
    AlertSeverity.LOW: "Counselor notified, safety plan recommended",
}


class SafetyResponseCoordinator:
    """
    Executes the crisis response owed for a SafetyCheck.

    Notification calls are awaited one after another in tier order,
    each bounded by a timeout. A raised exception, a timeout or an
    unsuccessful result is recorded as a failed DispatchOutcome and
    the next call proceeds.

    Usage:
        coordinator = SafetyResponseCoordinator(notifier, audit_trail)
        alert = await coordinator.respond(check)
        if alert.partial_failure:
            ...
    """

    def __init__(
        self,
        notifier: NotificationClient,
        audit_trail: AuditTrail,
        engine: Optional[RiskAssessmentEngine] = None,
        notification_timeout: Optional[float] = None,
        audit_timeout: Optional[float] = None,
    ) -> None:
        settings = get_settings()
        self._notifier = notifier
        self._audit = audit_trail
        self._engine = engine or RiskAssessmentEngine()
        self._notification_timeout = notification_timeout or settings.timeouts.notification
        self._audit_timeout = audit_timeout or settings.timeouts.audit

    @property
    def engine(self) -> RiskAssessmentEngine:
        return self._engine

    async def respond(self, check: SafetyCheck) -> CrisisAlert:
        """
        Dispatch notifications for the check and record the alert.

        Returns:
            CrisisAlert with per-call outcomes

        Raises:
            AuditWriteError: The audit trail did not confirm the write
        """
        severity = self._engine.classify_severity(check)
        alert = CrisisAlert(
            severity=severity,
            triggers=check.risk_indicators,
            action_taken=ACTION_DESCRIPTIONS[severity],
            escalated=severity is AlertSeverity.CRITICAL,
            user_id=check.user_id,
            session_id=check.session_id,
        )

        log = logger.bind(alert_id=alert.alert_id, session_id=check.session_id)
        if severity >= AlertSeverity.HIGH:
            log.warning("Crisis alert triggered", severity=severity.label, triggers=list(alert.triggers))
        else:
            log.info("Counselor follow-up triggered", severity=severity.label)

        outcomes = []
        for action in DISPATCH_TABLE[severity]:
            outcomes.append(await self._dispatch(action, alert))

        alert = dataclasses.replace(alert, outcomes=tuple(outcomes))
        if alert.partial_failure:
            log.error(
                "Crisis response partially failed",
                failed_actions=[a.value for a in alert.failed_actions],
            )

        await self._record(alert)
        track_crisis_alert(severity.label, alert.escalated)
        return alert

    def _call_for(self, action: DispatchAction, alert: CrisisAlert) -> Callable[[], Awaitable[NotificationResult]]:
        if action is DispatchAction.NOTIFY_EMERGENCY_SERVICES:
            return lambda: self._notifier.notify_emergency_services(alert)
        if action is DispatchAction.ALERT_CRISIS_COUNSELOR:
            return lambda: self._notifier.alert_crisis_counselor(alert)
        if action is DispatchAction.DISPLAY_EMERGENCY_RESOURCES:
            return lambda: self._notifier.display_emergency_resources(alert.user_id)
        return lambda: self._notifier.notify_counselor(alert)

    async def _dispatch(self, action: DispatchAction, alert: CrisisAlert) -> DispatchOutcome:
        """Attempt one notification; never raises (except on cancellation)."""
        call = self._call_for(action, alert)
        error: Optional[NotificationDispatchError] = None

        try:
            with track_latency("notifications"):
                result = await asyncio.wait_for(call(), timeout=self._notification_timeout)
            if not result.success:
                error = NotificationDispatchError(action.value, result.error or "unsuccessful result")
        except asyncio.TimeoutError as e:
            error = NotificationDispatchError(
                action.value, f"timed out after {self._notification_timeout}s", original_error=e
            )
        except Exception as e:
            error = NotificationDispatchError(action.value, str(e) or type(e).__name__, original_error=e)

        track_notification(action.value, error is None)
        if error is not None:
            logger.error(
                "Notification dispatch failed",
                alert_id=alert.alert_id,
                action=action.value,
                error=str(error),
            )
            return DispatchOutcome(action=action, success=False, error=error.reason)

        return DispatchOutcome(action=action, success=True)

    async def _record(self, alert: CrisisAlert) -> None:
        """Append the alert to the audit trail. Exactly one attempt."""
        try:
            with track_latency("audit"):
                receipt = await asyncio.wait_for(self._audit.append(alert), timeout=self._audit_timeout)
        except asyncio.TimeoutError as e:
            self._audit_failed(alert, f"timed out after {self._audit_timeout}s")
            raise AuditWriteError(alert.alert_id, "timed out", original_error=e) from e
        except Exception as e:
            self._audit_failed(alert, str(e))
            raise AuditWriteError(alert.alert_id, str(e) or type(e).__name__, original_error=e) from e

        if not receipt.success:
            reason = receipt.error or "write not confirmed"
            self._audit_failed(alert, reason)
            raise AuditWriteError(alert.alert_id, reason)

        logger.info("Crisis alert recorded", alert_id=alert.alert_id, backend=self._audit.backend_name)

    def _audit_failed(self, alert: CrisisAlert, reason: str) -> None:
        AUDIT_WRITE_FAILURES.inc()
        logger.critical(
            "Audit trail write failed",
            alert_id=alert.alert_id,
            severity=alert.severity.label,
            error=reason,
        )
        capture_safety_event(
            "Crisis alert could not be recorded",
            level="error",
            extra={"alert_id": alert.alert_id, "severity": alert.severity.label, "reason": reason},
        )
