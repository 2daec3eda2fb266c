"""
Database Audit Trail

Persists crisis alerts to the append-only ``crisis_alerts`` table.
"""

from typing import Sequence

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from mindlens.config.logging_config import get_logger
from mindlens.domain.models.safety_models import CrisisAlert
from mindlens.infrastructure.audit.client import AuditReceipt, AuditTrail
from mindlens.infrastructure.database.connection import DatabaseManager
from mindlens.infrastructure.database.models.crisis_alert_model import CrisisAlertModel

logger = get_logger(__name__)


class DatabaseAuditTrail(AuditTrail):
    """
    SQLAlchemy-backed audit trail.

    Usage:
        db = DatabaseManager()
        await db.initialize()
        audit = DatabaseAuditTrail(db)
        receipt = await audit.append(alert)
    """

    def __init__(self, db: DatabaseManager) -> None:
        self._db = db

    @property
    def backend_name(self) -> str:
        return "database"

    async def append(self, alert: CrisisAlert) -> AuditReceipt:
        row = CrisisAlertModel(
            alert_id=alert.alert_id,
            user_id=alert.user_id,
            session_id=alert.session_id,
            severity=alert.severity.label,
            triggers=list(alert.triggers),
            action_taken=alert.action_taken,
            escalated=alert.escalated,
            outcomes=[o.to_dict() for o in alert.outcomes],
            partial_failure=alert.partial_failure,
            alert_timestamp=alert.timestamp,
        )
        try:
            async with self._db.session() as session:
                session.add(row)
        except SQLAlchemyError as e:
            logger.error("Audit insert failed", alert_id=alert.alert_id, error=str(e))
            return AuditReceipt(success=False, error=str(e))

        logger.info("Crisis alert recorded", alert_id=alert.alert_id, severity=alert.severity.label)
        return AuditReceipt(success=True)

    async def list_for_session(self, session_id: str) -> Sequence[CrisisAlertModel]:
        """Audit rows for one submission session, oldest first."""
        async with self._db.session() as session:
            result = await session.execute(
                select(CrisisAlertModel)
                .where(CrisisAlertModel.session_id == session_id)
                .order_by(CrisisAlertModel.id)
            )
            return result.scalars().all()
