"""Domain models package."""

from mindlens.domain.models.questionnaire import (
    QuestionnaireResponse,
    PHQ9_LENGTH,
    SELF_HARM_QUESTION_INDEX,
    MAX_ITEM_SCORE,
)
from mindlens.domain.models.emotion import (
    EmotionAnalysisResult,
    UNKNOWN_EMOTION,
    primary_emotion_or_unknown,
)
from mindlens.domain.models.safety_models import (
    SafetyCheck,
    CrisisAlert,
    DispatchOutcome,
)
from mindlens.domain.models.submission import (
    EncryptedPayload,
    DeidentifiedRecord,
    SubmissionResult,
    AES_256_GCM,
)

__all__ = [
    # Questionnaire
    "QuestionnaireResponse",
    "PHQ9_LENGTH",
    "SELF_HARM_QUESTION_INDEX",
    "MAX_ITEM_SCORE",
    # Emotion
    "EmotionAnalysisResult",
    "UNKNOWN_EMOTION",
    "primary_emotion_or_unknown",
    # Safety
    "SafetyCheck",
    "CrisisAlert",
    "DispatchOutcome",
    # Submission
    "EncryptedPayload",
    "DeidentifiedRecord",
    "SubmissionResult",
    "AES_256_GCM",
]
