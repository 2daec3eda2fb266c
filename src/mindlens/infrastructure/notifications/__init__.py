"""Crisis notification package."""

from mindlens.infrastructure.notifications.client import (
    NotificationClient,
    NotificationResult,
)
from mindlens.infrastructure.notifications.memory_client import RecordingNotifier

__all__ = [
    "NotificationClient",
    "NotificationResult",
    "RecordingNotifier",
]
