"""
In-Memory Analytics Client

List-backed analytics store for tests and local development.
"""

from collections import defaultdict
from typing import Optional

from mindlens.domain.models.submission import DeidentifiedRecord
from mindlens.infrastructure.analytics.client import (
    AnalyticsClient,
    InsertResult,
    SeverityAggregate,
)


class InMemoryAnalyticsClient(AnalyticsClient):
    """
    In-memory analytics store.

    Args:
        reject_inserts: Return an unsuccessful InsertResult
        error: Raise this exception from insert()
    """

    def __init__(self, reject_inserts: bool = False, error: Optional[BaseException] = None) -> None:
        self.reject_inserts = reject_inserts
        self.error = error
        self.records: list[DeidentifiedRecord] = []
        self.insert_calls = 0

    @property
    def backend_name(self) -> str:
        return "memory"

    async def insert(self, record: DeidentifiedRecord) -> InsertResult:
        self.insert_calls += 1
        if self.error is not None:
            raise self.error
        if self.reject_inserts:
            return InsertResult(success=False, error="insert rejected")
        self.records.append(record)
        return InsertResult(success=True)

    async def aggregate_by_severity(self) -> list[SeverityAggregate]:
        groups: dict[tuple[str, str], list[int]] = defaultdict(list)
        for record in self.records:
            groups[(record.severity.label, record.primary_emotion)].append(record.score)

        return [
            SeverityAggregate(
                severity_tier=tier,
                primary_emotion=emotion,
                count=len(scores),
                average_score=sum(scores) / len(scores),
            )
            for (tier, emotion), scores in sorted(groups.items())
        ]
