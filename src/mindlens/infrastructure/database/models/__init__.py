"""Database models package."""

from mindlens.infrastructure.database.models.crisis_alert_model import CrisisAlertModel

__all__ = ["CrisisAlertModel"]
