"""Initial schema - crisis alert audit trail

Revision ID: 001_crisis_alerts
Revises: 
Create Date: 2026-10-19 00:00:00.000000

Creates the append-only audit table:
- crisis_alerts: one row per crisis response, with per-call dispatch outcomes
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision: str = '001_crisis_alerts'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'crisis_alerts',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('alert_id', sa.String(64), nullable=False),
        sa.Column('user_id', sa.String(128), nullable=True),
        sa.Column('session_id', sa.String(64), nullable=True),
        sa.Column('severity', sa.String(16), nullable=False),
        sa.Column('triggers', postgresql.JSONB(), nullable=False),
        sa.Column('action_taken', sa.String(255), nullable=False),
        sa.Column('escalated', sa.Boolean(), nullable=False),
        sa.Column('outcomes', postgresql.JSONB(), nullable=False),
        sa.Column('partial_failure', sa.Boolean(), nullable=False),
        sa.Column('alert_timestamp', sa.DateTime(timezone=True), nullable=False),
        sa.Column('recorded_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_crisis_alerts_alert_id', 'crisis_alerts', ['alert_id'], unique=True)
    op.create_index('ix_crisis_alerts_user_id', 'crisis_alerts', ['user_id'])
    op.create_index('ix_crisis_alerts_session_id', 'crisis_alerts', ['session_id'])
    op.create_index('ix_crisis_alerts_severity', 'crisis_alerts', ['severity'])

    # Append-only: application role may insert and read, never update or delete
    op.execute("REVOKE UPDATE, DELETE ON crisis_alerts FROM PUBLIC")


def downgrade() -> None:
    op.drop_table('crisis_alerts')
