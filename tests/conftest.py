"""Tests configuration and fixtures."""

import pytest

from mindlens.config import Settings
from mindlens.config.settings import TimeoutSettings
from mindlens.infrastructure.analytics.memory_client import InMemoryAnalyticsClient
from mindlens.infrastructure.audit.memory_client import InMemoryAuditTrail
from mindlens.infrastructure.emotion.memory_client import StaticEmotionAnalyzer
from mindlens.infrastructure.notifications.memory_client import RecordingNotifier
from mindlens.infrastructure.storage.memory_client import InMemoryStorageClient
from mindlens.services.safety.response_coordinator import SafetyResponseCoordinator
from mindlens.services.submission.pipeline import EncryptedSubmissionPipeline


@pytest.fixture
def test_settings() -> Settings:
    """Settings with in-memory backends and short timeouts."""
    return Settings(
        env="development",
        debug=False,
        timeouts=TimeoutSettings(
            storage=1.0,
            emotion=1.0,
            analytics=1.0,
            notification=0.2,
            audit=0.5,
        ),
    )


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def audit_trail() -> InMemoryAuditTrail:
    return InMemoryAuditTrail()


@pytest.fixture
def storage() -> InMemoryStorageClient:
    return InMemoryStorageClient(bucket_name="test-bucket")


@pytest.fixture
def analytics() -> InMemoryAnalyticsClient:
    return InMemoryAnalyticsClient()


@pytest.fixture
def emotion_analyzer() -> StaticEmotionAnalyzer:
    return StaticEmotionAnalyzer()


@pytest.fixture
def coordinator(
    notifier: RecordingNotifier,
    audit_trail: InMemoryAuditTrail,
    test_settings: Settings,
) -> SafetyResponseCoordinator:
    return SafetyResponseCoordinator(
        notifier=notifier,
        audit_trail=audit_trail,
        notification_timeout=test_settings.timeouts.notification,
        audit_timeout=test_settings.timeouts.audit,
    )


@pytest.fixture
def pipeline(
    storage: InMemoryStorageClient,
    coordinator: SafetyResponseCoordinator,
    analytics: InMemoryAnalyticsClient,
    emotion_analyzer: StaticEmotionAnalyzer,
    test_settings: Settings,
) -> EncryptedSubmissionPipeline:
    return EncryptedSubmissionPipeline(
        storage=storage,
        coordinator=coordinator,
        analytics=analytics,
        emotion_analyzer=emotion_analyzer,
        timeouts=test_settings.timeouts,
    )
