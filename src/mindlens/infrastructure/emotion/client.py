"""
Emotion Analyzer Abstract Interface

Contract for the external facial emotion-analysis capability.
Model internals are out of scope; implementations wrap a hosted
endpoint or return fixed results for tests.
"""

from abc import ABC, abstractmethod

from mindlens.domain.models.emotion import EmotionAnalysisResult


class EmotionAnalyzer(ABC):
    """
    Abstract facial emotion analyzer.

    PRIVACY: Implementations must not persist the raw image.
    Failures raise EmotionAnalysisError; callers treat them as
    "unknown", never as benign.
    """

    @property
    @abstractmethod
    def model_version(self) -> str:
        """Version tag reported on every result."""
        pass

    @abstractmethod
    async def analyze(self, image: bytes) -> EmotionAnalysisResult:
        """
        Analyze a face image.

        Args:
            image: Raw image bytes (JPEG/PNG)

        Returns:
            EmotionAnalysisResult

        Raises:
            EmotionAnalysisError: On model or transport failure
        """
        pass
