"""
Static Emotion Analyzer

Deterministic analyzer for tests and local development.
"""

from typing import Optional

from mindlens.domain.errors import EmotionAnalysisError
from mindlens.domain.models.emotion import EmotionAnalysisResult
from mindlens.infrastructure.emotion.client import EmotionAnalyzer


class StaticEmotionAnalyzer(EmotionAnalyzer):
    """
    Returns a fixed result, or fails on demand.

    Args:
        result: Result to return (defaults to a neutral reading)
        error: Exception to raise instead of returning
    """

    def __init__(
        self,
        result: Optional[EmotionAnalysisResult] = None,
        error: Optional[BaseException] = None,
    ) -> None:
        self._result = result or EmotionAnalysisResult(
            primary_emotion="Neutral",
            secondary_markers="Slight sadness detected",
            confidence=0.82,
            model_version="static-1.0",
        )
        self._error = error
        self.calls: list[int] = []

    @property
    def model_version(self) -> str:
        return self._result.model_version

    async def analyze(self, image: bytes) -> EmotionAnalysisResult:
        self.calls.append(len(image))
        if self._error is not None:
            raise self._error
        if not image:
            raise EmotionAnalysisError("empty image")
        return self._result
