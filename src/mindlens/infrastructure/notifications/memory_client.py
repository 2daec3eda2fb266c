"""
Recording Notification Client

Records every notification call; individual channels can be made to
fail (return an unsuccessful result), raise, or hang.
"""

import asyncio
from dataclasses import dataclass
from typing import Optional

from mindlens.domain.models.safety_models import CrisisAlert
from mindlens.infrastructure.notifications.client import (
    NotificationClient,
    NotificationResult,
)


@dataclass(frozen=True)
class RecordedCall:
    channel: str
    alert_id: Optional[str] = None
    user_id: Optional[str] = None


class RecordingNotifier(NotificationClient):
    """
    In-memory notifier for tests and local development.

    Args:
        failing: Channels that return success=False
        raising: Channels that raise the mapped exception
        hanging: Channels that never complete (exercise timeouts)
    """

    def __init__(
        self,
        failing: Optional[set[str]] = None,
        raising: Optional[dict[str, BaseException]] = None,
        hanging: Optional[set[str]] = None,
    ) -> None:
        self.failing = failing or set()
        self.raising = raising or {}
        self.hanging = hanging or set()
        self.calls: list[RecordedCall] = []

    @property
    def channels_called(self) -> list[str]:
        return [c.channel for c in self.calls]

    async def _record(self, call: RecordedCall) -> NotificationResult:
        self.calls.append(call)
        if call.channel in self.hanging:
            await asyncio.Event().wait()
        if call.channel in self.raising:
            raise self.raising[call.channel]
        if call.channel in self.failing:
            return NotificationResult(channel=call.channel, success=False, error="simulated failure")
        return NotificationResult(channel=call.channel, success=True)

    async def notify_emergency_services(self, alert: CrisisAlert) -> NotificationResult:
        return await self._record(RecordedCall("emergency_services", alert.alert_id, alert.user_id))

    async def alert_crisis_counselor(self, alert: CrisisAlert) -> NotificationResult:
        return await self._record(RecordedCall("crisis_counselor", alert.alert_id, alert.user_id))

    async def notify_counselor(self, alert: CrisisAlert) -> NotificationResult:
        return await self._record(RecordedCall("counselor", alert.alert_id, alert.user_id))

    async def display_emergency_resources(self, user_id: Optional[str]) -> NotificationResult:
        return await self._record(RecordedCall("emergency_resources", None, user_id))
