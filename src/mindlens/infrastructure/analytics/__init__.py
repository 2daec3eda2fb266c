"""Research analytics package."""

from mindlens.infrastructure.analytics.client import (
    AnalyticsClient,
    InsertResult,
    SeverityAggregate,
)
from mindlens.infrastructure.analytics.memory_client import InMemoryAnalyticsClient

__all__ = [
    "AnalyticsClient",
    "InsertResult",
    "SeverityAggregate",
    "InMemoryAnalyticsClient",
]
