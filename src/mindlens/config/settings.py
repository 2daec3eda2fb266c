"""
MindLens Application Settings

Production-grade configuration management using Pydantic Settings.
All sensitive values are loaded from environment variables.

SECURITY: Never log or expose settings containing secrets.
"""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """PostgreSQL database configuration (audit trail)."""

    model_config = SettingsConfigDict(env_prefix="MINDLENS_DB_")

    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=5432, description="Database port")
    name: str = Field(default="mindlens_db", description="Database name")
    user: str = Field(default="mindlens_user", description="Database user")
    password: SecretStr = Field(default=SecretStr("dev_password"), description="Database password")
    pool_size: int = Field(default=10, ge=1, le=100, description="Connection pool size")
    max_overflow: int = Field(default=20, ge=0, le=100, description="Max overflow connections")
    url_override: Optional[str] = Field(
        default=None,
        description="Full async URL (e.g. sqlite+aiosqlite:///:memory:), bypasses host/port",
    )

    @property
    def async_url(self) -> str:
        """Generate async database URL for SQLAlchemy."""
        if self.url_override:
            return self.url_override
        password = self.password.get_secret_value()
        return f"postgresql+asyncpg://{self.user}:{password}@{self.host}:{self.port}/{self.name}"

    @property
    def sync_url(self) -> str:
        """Generate sync database URL for Alembic migrations."""
        password = self.password.get_secret_value()
        return f"postgresql://{self.user}:{password}@{self.host}:{self.port}/{self.name}"


class StorageSettings(BaseSettings):
    """Encrypted object storage configuration."""

    model_config = SettingsConfigDict(env_prefix="MINDLENS_STORAGE_")

    backend: Literal["gcs", "memory"] = Field(default="memory")
    bucket_name: str = Field(default="mindlens-encrypted-data")
    project_id: str = Field(default="mindlens-production")
    retry_attempts: int = Field(default=3, ge=1, le=10)


class AnalyticsSettings(BaseSettings):
    """De-identified research analytics configuration."""

    model_config = SettingsConfigDict(env_prefix="MINDLENS_ANALYTICS_")

    backend: Literal["bigquery", "memory"] = Field(default="memory")
    project_id: str = Field(default="mindlens-production")
    dataset_id: str = Field(default="mindlens_analytics")
    table_id: str = Field(default="assessment_results")


class EmotionModelSettings(BaseSettings):
    """Facial emotion analysis model configuration."""

    model_config = SettingsConfigDict(env_prefix="MINDLENS_EMOTION_")

    backend: Literal["vertex", "memory"] = Field(default="memory")
    project_id: str = Field(default="mindlens-production")
    location: str = Field(default="us-central1")
    endpoint_id: str = Field(default="emotion-analysis-v2")
    model_version: str = Field(default="2.1.0")


class NotificationSettings(BaseSettings):
    """Crisis notification gateway configuration."""

    model_config = SettingsConfigDict(env_prefix="MINDLENS_NOTIFY_")

    backend: Literal["webhook", "memory"] = Field(default="memory")
    base_url: str = Field(default="http://localhost:8090/notifications")
    api_token: SecretStr = Field(default=SecretStr(""), description="Gateway bearer token")
    retry_attempts: int = Field(default=2, ge=1, le=5)


class AuditSettings(BaseSettings):
    """Audit trail configuration."""

    model_config = SettingsConfigDict(env_prefix="MINDLENS_AUDIT_")

    backend: Literal["database", "memory"] = Field(default="memory")


class TimeoutSettings(BaseSettings):
    """
    Bounded timeouts (seconds) for collaborator calls.

    A timeout on the audit write is fatal; every other timeout
    is recorded as a soft failure.
    """

    model_config = SettingsConfigDict(env_prefix="MINDLENS_TIMEOUT_")

    storage: float = Field(default=10.0, gt=0)
    emotion: float = Field(default=15.0, gt=0)
    analytics: float = Field(default=5.0, gt=0)
    notification: float = Field(default=5.0, gt=0)
    audit: float = Field(default=5.0, gt=0)


class Settings(BaseSettings):
    """
    Main application settings.

    All configuration is loaded from environment variables with MINDLENS_ prefix.
    Sensitive values use SecretStr to prevent accidental logging.

    Usage:
        settings = get_settings()
        bucket = settings.storage.bucket_name
    """

    model_config = SettingsConfigDict(
        env_prefix="MINDLENS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    env: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Application environment"
    )
    debug: bool = Field(default=False, description="Debug mode - NEVER enable in production")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level"
    )
    api_version: str = Field(default="v1", description="API version prefix")
    cors_origins: list[str] = Field(
        default=["http://localhost:3000"],
        description="Allowed CORS origins"
    )
    default_country_code: str = Field(default="US", description="Fallback jurisdiction for resources")
    emergency_resources_path: Optional[str] = Field(
        default=None,
        description="Optional JSON file overriding built-in crisis resources",
    )

    # Key-encryption key for escrow of per-submission keys (base64, 32 bytes).
    # When unset, submission keys are destroyed once the submission completes.
    key_encryption_key: Optional[SecretStr] = Field(default=None, description="Submission key escrow KEK")

    sentry_dsn: Optional[SecretStr] = Field(default=None, description="Sentry DSN")

    # Nested settings
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    analytics: AnalyticsSettings = Field(default_factory=AnalyticsSettings)
    emotion: EmotionModelSettings = Field(default_factory=EmotionModelSettings)
    notifications: NotificationSettings = Field(default_factory=NotificationSettings)
    audit: AuditSettings = Field(default_factory=AuditSettings)
    timeouts: TimeoutSettings = Field(default_factory=TimeoutSettings)

    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.env == "production"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses LRU cache to ensure settings are only loaded once.
    For testing, construct Settings directly and pass it in.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
