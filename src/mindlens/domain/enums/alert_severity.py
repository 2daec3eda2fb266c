"""
Alert Severity and Dispatch Enumerations

Defines the ordered severity tiers used for crisis alerts and the
notification actions the response coordinator may dispatch.

CLINICAL_REVIEW_REQUIRED: Tier boundaries are policy constants and
must be confirmed with clinical stakeholders before production use.
"""

from enum import IntEnum, StrEnum


class AlertSeverity(IntEnum):
    """
    Crisis alert severity tier.

    Ordered: comparisons such as ``severity >= AlertSeverity.HIGH``
    are meaningful.
    """

    LOW = 1
    """No secondary risk indicators beyond routine follow-up."""

    MEDIUM = 2
    """Two or more risk indicators without a high-risk score."""

    HIGH = 3
    """High-risk PHQ-9 score (15 or above)."""

    CRITICAL = 4
    """
    Immediate action required.
    - Self-harm item answered "more than half the days" or worse
    - Or PHQ-9 score of 20 or above

    SAFETY_NOTE: Emergency services and crisis counselor are both notified.
    """

    @property
    def label(self) -> str:
        """Lower-case label used on the wire and in analytics."""
        return self.name.lower()


class DispatchAction(StrEnum):
    """Notification actions owed to the user for a given tier."""

    NOTIFY_EMERGENCY_SERVICES = "notify_emergency_services"
    ALERT_CRISIS_COUNSELOR = "alert_crisis_counselor"
    DISPLAY_EMERGENCY_RESOURCES = "display_emergency_resources"
    NOTIFY_COUNSELOR = "notify_counselor"


class ScoreBand(StrEnum):
    """Coarse PHQ-9 score band carried on research records."""

    MILD = "mild"
    MODERATE = "moderate"
    SEVERE = "severe"

    @classmethod
    def from_score(cls, score: int) -> "ScoreBand":
        if score >= 15:
            return cls.SEVERE
        if score >= 10:
            return cls.MODERATE
        return cls.MILD
