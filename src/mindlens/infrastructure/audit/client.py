"""
Audit Trail Abstract Interface

Append-only record of crisis alerts.

SAFETY_CRITICAL: This is the only collaborator whose failure is fatal
to the caller. Implementations either confirm the write or fail.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from mindlens.domain.models.safety_models import CrisisAlert


@dataclass(frozen=True)
class AuditReceipt:
    """Outcome of an audit append."""

    success: bool
    error: Optional[str] = None


class AuditTrail(ABC):
    """Abstract append-only audit trail."""

    @property
    @abstractmethod
    def backend_name(self) -> str:
        pass

    @abstractmethod
    async def append(self, alert: CrisisAlert) -> AuditReceipt:
        """
        Append one alert.

        Returns:
            AuditReceipt; success=False is treated as fatal by callers
        """
        pass
