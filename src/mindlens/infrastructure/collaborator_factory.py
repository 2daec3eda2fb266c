"""
Collaborator Factory

Builds the external collaborators (storage, analytics, emotion,
notifications, audit) from configuration. Backends are switched per
collaborator via environment variables; cloud SDKs are imported only
when their backend is selected.

CONFIGURATION:
    MINDLENS_STORAGE_BACKEND=gcs          # or: memory
    MINDLENS_ANALYTICS_BACKEND=bigquery   # or: memory
    MINDLENS_EMOTION_BACKEND=vertex       # or: memory
    MINDLENS_NOTIFY_BACKEND=webhook       # or: memory
    MINDLENS_AUDIT_BACKEND=database       # or: memory
"""

from dataclasses import dataclass
from typing import Optional

from mindlens.config import Settings, get_settings
from mindlens.config.logging_config import get_logger
from mindlens.infrastructure.analytics.client import AnalyticsClient
from mindlens.infrastructure.audit.client import AuditTrail
from mindlens.infrastructure.crypto import KeyWrapper
from mindlens.infrastructure.database.connection import DatabaseManager
from mindlens.infrastructure.emotion.client import EmotionAnalyzer
from mindlens.infrastructure.notifications.client import NotificationClient
from mindlens.infrastructure.storage.client import StorageClient
from mindlens.services.safety.emergency_resources import EmergencyResourceResolver
from mindlens.services.safety.response_coordinator import SafetyResponseCoordinator
from mindlens.services.submission.pipeline import EncryptedSubmissionPipeline

logger = get_logger(__name__)


@dataclass
class Collaborators:
    """Configured collaborator set for one application instance."""

    storage: StorageClient
    analytics: AnalyticsClient
    emotion: EmotionAnalyzer
    notifier: NotificationClient
    audit: AuditTrail
    resources: EmergencyResourceResolver
    key_wrapper: Optional[KeyWrapper] = None
    database: Optional[DatabaseManager] = None

    def build_pipeline(self, settings: Optional[Settings] = None) -> EncryptedSubmissionPipeline:
        settings = settings or get_settings()
        coordinator = SafetyResponseCoordinator(
            notifier=self.notifier,
            audit_trail=self.audit,
            notification_timeout=settings.timeouts.notification,
            audit_timeout=settings.timeouts.audit,
        )
        return EncryptedSubmissionPipeline(
            storage=self.storage,
            coordinator=coordinator,
            analytics=self.analytics,
            emotion_analyzer=self.emotion,
            key_wrapper=self.key_wrapper,
            timeouts=settings.timeouts,
        )

    async def close(self) -> None:
        close = getattr(self.notifier, "close", None)
        if close is not None:
            await close()
        if self.database is not None:
            await self.database.close()


def _create_storage(settings: Settings) -> StorageClient:
    if settings.storage.backend == "gcs":
        from mindlens.infrastructure.storage.gcs_client import GCSStorageClient
        return GCSStorageClient(
            bucket_name=settings.storage.bucket_name,
            project_id=settings.storage.project_id,
            retry_attempts=settings.storage.retry_attempts,
        )

    from mindlens.infrastructure.storage.memory_client import InMemoryStorageClient
    return InMemoryStorageClient(bucket_name=settings.storage.bucket_name)


def _create_analytics(settings: Settings) -> AnalyticsClient:
    if settings.analytics.backend == "bigquery":
        from mindlens.infrastructure.analytics.bigquery_client import BigQueryAnalyticsClient
        return BigQueryAnalyticsClient(
            project_id=settings.analytics.project_id,
            dataset_id=settings.analytics.dataset_id,
            table_id=settings.analytics.table_id,
        )

    from mindlens.infrastructure.analytics.memory_client import InMemoryAnalyticsClient
    return InMemoryAnalyticsClient()


def _create_emotion(settings: Settings) -> EmotionAnalyzer:
    if settings.emotion.backend == "vertex":
        from mindlens.infrastructure.emotion.vertex_client import VertexEmotionAnalyzer
        return VertexEmotionAnalyzer(
            project_id=settings.emotion.project_id,
            location=settings.emotion.location,
            endpoint_id=settings.emotion.endpoint_id,
            model_version=settings.emotion.model_version,
        )

    from mindlens.infrastructure.emotion.memory_client import StaticEmotionAnalyzer
    return StaticEmotionAnalyzer()


def _create_notifier(settings: Settings, resources: EmergencyResourceResolver) -> NotificationClient:
    if settings.notifications.backend == "webhook":
        from mindlens.infrastructure.notifications.webhook_client import WebhookNotifier
        return WebhookNotifier(
            base_url=settings.notifications.base_url,
            api_token=settings.notifications.api_token.get_secret_value(),
            retry_attempts=settings.notifications.retry_attempts,
            timeout_seconds=settings.timeouts.notification,
            resource_resolver=resources,
            country_code=settings.default_country_code,
        )

    if settings.is_production():
        raise ValueError("In-memory notifications are not allowed in production")

    from mindlens.infrastructure.notifications.memory_client import RecordingNotifier
    return RecordingNotifier()


async def create_collaborators(settings: Optional[Settings] = None) -> Collaborators:
    """
    Build all collaborators from configuration.

    The database is initialized here when the audit backend needs it.

    Raises:
        ValueError: Production configured with in-memory audit or notifications
        EncryptionError: Invalid key-encryption-key
    """
    settings = settings or get_settings()
    resources = EmergencyResourceResolver(settings.emergency_resources_path)

    database: Optional[DatabaseManager] = None
    if settings.audit.backend == "database":
        from mindlens.infrastructure.audit.database_client import DatabaseAuditTrail
        database = DatabaseManager(settings)
        await database.initialize(create_schema=not settings.is_production())
        audit: AuditTrail = DatabaseAuditTrail(database)
    else:
        if settings.is_production():
            raise ValueError("In-memory audit trail is not allowed in production")
        from mindlens.infrastructure.audit.memory_client import InMemoryAuditTrail
        audit = InMemoryAuditTrail()

    key_wrapper = None
    if settings.key_encryption_key is not None:
        key_wrapper = KeyWrapper.from_base64(settings.key_encryption_key.get_secret_value())

    collaborators = Collaborators(
        storage=_create_storage(settings),
        analytics=_create_analytics(settings),
        emotion=_create_emotion(settings),
        notifier=_create_notifier(settings, resources),
        audit=audit,
        resources=resources,
        key_wrapper=key_wrapper,
        database=database,
    )

    logger.info(
        "Collaborators initialized",
        storage=collaborators.storage.backend_name,
        analytics=collaborators.analytics.backend_name,
        emotion_model=collaborators.emotion.model_version,
        notifications=settings.notifications.backend,
        audit=collaborators.audit.backend_name,
        key_escrow=key_wrapper is not None,
    )
    return collaborators
