"""
De-identification

Projects an assessment onto the research record. Only the score,
tiers, primary emotion, consent flag and calendar date survive.

PRIVACY: The raw user id and the response vector never reach the
record. The record id is a one-way hash of the session id.
"""

from datetime import datetime
from typing import Optional

from mindlens.domain.enums.alert_severity import AlertSeverity, ScoreBand
from mindlens.domain.models.emotion import EmotionAnalysisResult, primary_emotion_or_unknown
from mindlens.domain.models.safety_models import SafetyCheck
from mindlens.domain.models.submission import DeidentifiedRecord
from mindlens.infrastructure.crypto import hash_identifier


def build_deidentified_record(
    session_id: str,
    check: SafetyCheck,
    severity: AlertSeverity,
    emotion: Optional[EmotionAnalysisResult],
    assessed_at: datetime,
) -> DeidentifiedRecord:
    return DeidentifiedRecord(
        record_id=hash_identifier(session_id),
        assessment_date=assessed_at.date(),
        score=check.score,
        severity=severity,
        score_band=ScoreBand.from_score(check.score),
        primary_emotion=primary_emotion_or_unknown(emotion),
        consent_research=True,
    )
