"""
Crisis Alert Database Model

Append-only audit table for crisis alerts. Rows are inserted once and
never updated or deleted by application code.

LEGAL_REVIEW_REQUIRED: Retention policies for audit rows.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import JSON, Boolean, DateTime, Integer, String, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from mindlens.infrastructure.database.connection import Base

_JSON = JSON().with_variant(JSONB(), "postgresql")


class CrisisAlertModel(Base):
    """
    Crisis alert audit table ORM model.

    Table: crisis_alerts
    """

    __tablename__ = "crisis_alerts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    alert_id: Mapped[str] = mapped_column(
        String(64),
        unique=True,
        nullable=False,
        index=True,
        doc="Generated alert identifier",
    )
    user_id: Mapped[Optional[str]] = mapped_column(
        String(128),
        nullable=True,
        index=True,
        doc="Owner of the originating assessment",
    )
    session_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, index=True)

    severity: Mapped[str] = mapped_column(String(16), nullable=False, index=True)
    triggers: Mapped[list] = mapped_column(_JSON, nullable=False, default=list)
    action_taken: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    escalated: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    outcomes: Mapped[list] = mapped_column(_JSON, nullable=False, default=list)
    partial_failure: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    alert_timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    recorded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<CrisisAlertModel(alert_id={self.alert_id}, severity={self.severity})>"
