"""Facial emotion analysis package."""

from mindlens.infrastructure.emotion.client import EmotionAnalyzer
from mindlens.infrastructure.emotion.memory_client import StaticEmotionAnalyzer

__all__ = ["EmotionAnalyzer", "StaticEmotionAnalyzer"]
