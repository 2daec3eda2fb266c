"""
Submission Domain Models

Value types flowing through the encrypted submission pipeline.

PRIVACY: DeidentifiedRecord carries no direct identifier and no raw
response vector. It is only built when the user opted into research.
"""

from dataclasses import dataclass
from datetime import date
from typing import Optional

from mindlens.domain.enums.alert_severity import AlertSeverity, ScoreBand
from mindlens.domain.models.emotion import EmotionAnalysisResult
from mindlens.domain.models.safety_models import CrisisAlert, SafetyCheck

AES_256_GCM = "AES-256-GCM"


@dataclass(frozen=True)
class EncryptedPayload:
    """
    Ciphertext produced from a plaintext record and a submission key.

    The key is never stored alongside the payload; without it the
    payload is unrecoverable.

    Attributes:
        ciphertext: Encrypted bytes (GCM tag appended)
        iv: 96-bit initialization vector
        algorithm: Algorithm tag
    """

    ciphertext: bytes
    iv: bytes
    algorithm: str = AES_256_GCM

    def to_bytes(self) -> bytes:
        """Wire form: IV prepended to ciphertext."""
        return self.iv + self.ciphertext

    @classmethod
    def from_bytes(cls, data: bytes, iv_length: int = 12) -> "EncryptedPayload":
        return cls(ciphertext=data[iv_length:], iv=data[:iv_length])

    def __repr__(self) -> str:
        return (
            f"EncryptedPayload(algorithm={self.algorithm!r}, "
            f"iv_len={len(self.iv)}, ciphertext_len={len(self.ciphertext)})"
        )


@dataclass(frozen=True)
class DeidentifiedRecord:
    """
    Narrow research projection of one assessment.

    Attributes:
        record_id: Pseudonymous identifier (hash of the session id)
        assessment_date: Calendar date only, no time of day
        score: PHQ-9 total
        severity: Alert severity tier
        score_band: Coarse score band
        primary_emotion: Emotion label or "unknown"
        consent_research: Always True for forwarded records
    """

    record_id: str
    assessment_date: date
    score: int
    severity: AlertSeverity
    score_band: ScoreBand
    primary_emotion: str
    consent_research: bool = True

    def to_row(self) -> dict:
        """Row shape for the analytics table."""
        return {
            "record_id": self.record_id,
            "assessment_date": self.assessment_date.isoformat(),
            "phq_score": self.score,
            "severity_tier": self.severity.label,
            "severity_level": self.score_band.value,
            "primary_emotion": self.primary_emotion,
            "consent_research": self.consent_research,
        }


@dataclass(frozen=True)
class SubmissionResult:
    """
    Aggregate outcome of one submission.

    Attributes:
        session_id: Generated submission session id
        score: PHQ-9 total
        storage_locator: Locator of the encrypted assessment record
        safety_check: Risk snapshot
        crisis_alert: Recorded crisis alert
        emotion_analysis: Emotion result, or None if skipped or failed
        face_scan_locator: Locator of the encrypted face scan, if uploaded
        key_locator: Locator of the escrowed (wrapped) key, if escrow is enabled
        analytics_forwarded: Whether the research record was accepted
    """

    session_id: str
    score: int
    storage_locator: str
    safety_check: SafetyCheck
    crisis_alert: CrisisAlert
    emotion_analysis: Optional[EmotionAnalysisResult] = None
    face_scan_locator: Optional[str] = None
    key_locator: Optional[str] = None
    analytics_forwarded: bool = False

    @property
    def requires_immediate_action(self) -> bool:
        return self.safety_check.requires_immediate_action

    @property
    def notification_partial_failure(self) -> bool:
        return self.crisis_alert.partial_failure

    def to_dict(self) -> dict:
        return {
            "session_id": self.session_id,
            "score": self.score,
            "storage_locator": self.storage_locator,
            "emotion_analysis": self.emotion_analysis.to_dict() if self.emotion_analysis else None,
            "face_scan_locator": self.face_scan_locator,
            "analytics_forwarded": self.analytics_forwarded,
            "requires_immediate_action": self.requires_immediate_action,
            "severity": self.crisis_alert.severity.label,
            "notification_partial_failure": self.notification_partial_failure,
        }
