"""
Notification Client Abstract Interface

Contract for crisis notifications. Every method is fire-and-observe:
it reports success or failure through a NotificationResult instead of
raising, so one failed channel never aborts the remaining dispatch.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from mindlens.domain.models.safety_models import CrisisAlert


@dataclass(frozen=True)
class NotificationResult:
    """
    Outcome of one notification call.

    Attributes:
        channel: Which notification channel was used
        success: Whether the recipient acknowledged the notification
        error: Failure description, if any
    """

    channel: str
    success: bool
    error: Optional[str] = None


class NotificationClient(ABC):
    """
    Abstract crisis notification gateway.

    SAFETY_CRITICAL: Callers still guard against implementations that
    raise; a raised exception is treated as a failed result.
    """

    @abstractmethod
    async def notify_emergency_services(self, alert: CrisisAlert) -> NotificationResult:
        """Engage emergency services for a critical alert."""
        pass

    @abstractmethod
    async def alert_crisis_counselor(self, alert: CrisisAlert) -> NotificationResult:
        """Page the on-call crisis counselor."""
        pass

    @abstractmethod
    async def notify_counselor(self, alert: CrisisAlert) -> NotificationResult:
        """Notify the user's assigned counselor (non-urgent)."""
        pass

    @abstractmethod
    async def display_emergency_resources(self, user_id: Optional[str]) -> NotificationResult:
        """Push emergency resources to the user's client."""
        pass
