"""
Emotion Analysis Domain Model

Output of the external facial emotion-analysis collaborator.
Treated as opaque input downstream; an absent result means
"unknown", never "benign".
"""

from dataclasses import dataclass, field
from typing import Any, Optional

UNKNOWN_EMOTION = "unknown"


@dataclass(frozen=True)
class EmotionAnalysisResult:
    """
    Facial emotion analysis result.

    Attributes:
        primary_emotion: Dominant emotion label
        confidence: Model confidence (0.0-1.0)
        secondary_markers: Optional free-text secondary observations
        model_version: Version tag of the model that produced this result
        landmarks: Optional landmark metadata returned by the model
    """

    primary_emotion: str
    confidence: float
    model_version: str
    secondary_markers: Optional[str] = None
    landmarks: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence must be within [0, 1], got {self.confidence}")

    def to_dict(self) -> dict:
        return {
            "primary_emotion": self.primary_emotion,
            "confidence": round(self.confidence, 3),
            "secondary_markers": self.secondary_markers,
            "model_version": self.model_version,
        }


def primary_emotion_or_unknown(result: Optional[EmotionAnalysisResult]) -> str:
    """Primary emotion label, or ``"unknown"`` when analysis was skipped or failed."""
    return result.primary_emotion if result is not None else UNKNOWN_EMOTION
