"""
In-Memory Audit Trail

List-backed audit trail for tests and local development.
"""

import asyncio
from typing import Optional

from mindlens.domain.models.safety_models import CrisisAlert
from mindlens.infrastructure.audit.client import AuditReceipt, AuditTrail


class InMemoryAuditTrail(AuditTrail):
    """
    In-memory audit trail.

    Args:
        reject: Return an unsuccessful receipt
        error: Raise this exception from append()
        hang: Never complete append() (until cancelled)
    """

    def __init__(
        self,
        reject: bool = False,
        error: Optional[BaseException] = None,
        hang: bool = False,
    ) -> None:
        self.reject = reject
        self.error = error
        self.hang = hang
        self.alerts: list[CrisisAlert] = []
        self.append_calls = 0

    @property
    def backend_name(self) -> str:
        return "memory"

    async def append(self, alert: CrisisAlert) -> AuditReceipt:
        self.append_calls += 1
        if self.hang:
            await asyncio.Event().wait()
        if self.error is not None:
            raise self.error
        if self.reject:
            return AuditReceipt(success=False, error="append rejected")
        self.alerts.append(alert)
        return AuditReceipt(success=True)
