"""
Safety Models

Immutable records produced by the safety layer.

SAFETY-CRITICAL: A SafetyCheck is a snapshot of one assessment and is
never mutated; re-assessment produces a new SafetyCheck. A CrisisAlert
is an append-only audit record.

LEGAL_REVIEW_REQUIRED: Retention and access policies for alert
records need legal review.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from mindlens.domain.enums.alert_severity import AlertSeverity, DispatchAction


@dataclass(frozen=True)
class SafetyCheck:
    """
    Derived risk snapshot for one questionnaire submission.

    Attributes:
        user_id: Owner of the assessment (None for anonymous checks)
        session_id: Submission session, when known
        score: Sum of all item scores
        risk_indicators: Triggered indicator labels, in rule order
        flagged_responses: Indices of individually flagged items
        requires_immediate_action: Crisis response must be dispatched now
    """

    score: int
    risk_indicators: tuple[str, ...] = ()
    flagged_responses: tuple[int, ...] = ()
    requires_immediate_action: bool = False
    user_id: Optional[str] = None
    session_id: Optional[str] = None

    @property
    def indicator_count(self) -> int:
        return len(self.risk_indicators)

    def to_dict(self) -> dict:
        return {
            "session_id": self.session_id,
            "score": self.score,
            "risk_indicators": list(self.risk_indicators),
            "flagged_responses": list(self.flagged_responses),
            "requires_immediate_action": self.requires_immediate_action,
        }


@dataclass(frozen=True)
class DispatchOutcome:
    """Result of one attempted notification call."""

    action: DispatchAction
    success: bool
    error: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "action": self.action.value,
            "success": self.success,
            "error": self.error,
        }


def _new_alert_id() -> str:
    return f"ALERT-{uuid4().hex[:16]}"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class CrisisAlert:
    """
    Append-only record of a crisis response.

    Created by the SafetyResponseCoordinator, persisted to the audit
    trail, never mutated afterwards.

    Attributes:
        alert_id: Generated identifier
        user_id: Owner of the originating SafetyCheck
        session_id: Originating submission session
        severity: Severity tier
        triggers: Indicator labels that led to the alert
        timestamp: Creation time (UTC)
        action_taken: Human-readable description of the dispatch
        escalated: Whether emergency services were engaged
        outcomes: Per-call dispatch results, in call order
    """

    severity: AlertSeverity
    triggers: tuple[str, ...] = ()
    action_taken: str = ""
    escalated: bool = False
    user_id: Optional[str] = None
    session_id: Optional[str] = None
    alert_id: str = field(default_factory=_new_alert_id)
    timestamp: datetime = field(default_factory=_utcnow)
    outcomes: tuple[DispatchOutcome, ...] = ()

    @property
    def dispatched_actions(self) -> tuple[DispatchAction, ...]:
        return tuple(o.action for o in self.outcomes)

    @property
    def failed_actions(self) -> tuple[DispatchAction, ...]:
        return tuple(o.action for o in self.outcomes if not o.success)

    @property
    def partial_failure(self) -> bool:
        """True when at least one notification call failed."""
        return any(not o.success for o in self.outcomes)

    def to_dict(self) -> dict:
        return {
            "alert_id": self.alert_id,
            "severity": self.severity.label,
            "triggers": list(self.triggers),
            "timestamp": self.timestamp.isoformat(),
            "action_taken": self.action_taken,
            "escalated": self.escalated,
            "partial_failure": self.partial_failure,
        }

    def to_audit_record(self) -> dict:
        """Create complete audit record for compliance."""
        return {
            **self.to_dict(),
            "user_id": self.user_id,
            "session_id": self.session_id,
            "outcomes": [o.to_dict() for o in self.outcomes],
        }
