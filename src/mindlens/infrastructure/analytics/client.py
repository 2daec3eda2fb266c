"""
Analytics Client Abstract Interface

Contract for the research analytics store. Only DeidentifiedRecord
values cross this interface.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from mindlens.domain.models.submission import DeidentifiedRecord


@dataclass(frozen=True)
class InsertResult:
    """Outcome of an analytics insert."""

    success: bool
    error: Optional[str] = None


@dataclass(frozen=True)
class SeverityAggregate:
    """One row of the aggregated research statistics."""

    severity_tier: str
    primary_emotion: str
    count: int
    average_score: float


class AnalyticsClient(ABC):
    """Abstract research analytics store."""

    @property
    @abstractmethod
    def backend_name(self) -> str:
        pass

    @abstractmethod
    async def insert(self, record: DeidentifiedRecord) -> InsertResult:
        """
        Insert one de-identified record.

        Returns:
            InsertResult; transport failures may also raise
        """
        pass

    @abstractmethod
    async def aggregate_by_severity(self) -> list[SeverityAggregate]:
        """Count and mean score grouped by severity tier and primary emotion."""
        pass
