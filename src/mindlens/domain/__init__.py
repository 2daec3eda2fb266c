"""
MindLens Domain Layer

Core entities, value objects and the error taxonomy.
These models are independent of infrastructure.
"""

from mindlens.domain.enums.alert_severity import AlertSeverity, DispatchAction, ScoreBand
from mindlens.domain.models import (
    QuestionnaireResponse,
    EmotionAnalysisResult,
    SafetyCheck,
    CrisisAlert,
    DispatchOutcome,
    EncryptedPayload,
    DeidentifiedRecord,
    SubmissionResult,
)

__all__ = [
    "AlertSeverity",
    "DispatchAction",
    "ScoreBand",
    "QuestionnaireResponse",
    "EmotionAnalysisResult",
    "SafetyCheck",
    "CrisisAlert",
    "DispatchOutcome",
    "EncryptedPayload",
    "DeidentifiedRecord",
    "SubmissionResult",
]
