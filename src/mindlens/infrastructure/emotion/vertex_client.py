"""
Vertex AI Emotion Analyzer

Calls a deployed Vertex AI endpoint for facial emotion analysis.

PRIVACY: The image is sent base64-encoded in the prediction request
and is not stored by this client.
"""

import asyncio
import base64
from typing import Any, Optional

from google.api_core import exceptions as gcp_exceptions
from google.cloud import aiplatform

from mindlens.config import get_settings
from mindlens.config.logging_config import get_logger
from mindlens.domain.errors import EmotionAnalysisError
from mindlens.domain.models.emotion import EmotionAnalysisResult
from mindlens.infrastructure.emotion.client import EmotionAnalyzer

logger = get_logger(__name__)


class VertexEmotionAnalyzer(EmotionAnalyzer):
    """
    Vertex AI endpoint implementation.

    Accepts two prediction shapes:
    - Custom container: {"primary_emotion", "confidence", "secondary_markers"}
    - AutoML image classification: {"displayNames": [...], "confidences": [...]}
    """

    def __init__(
        self,
        project_id: Optional[str] = None,
        location: Optional[str] = None,
        endpoint_id: Optional[str] = None,
        model_version: Optional[str] = None,
    ) -> None:
        settings = get_settings()

        self._project_id = project_id or settings.emotion.project_id
        self._location = location or settings.emotion.location
        self._endpoint_id = endpoint_id or settings.emotion.endpoint_id
        self._model_version = model_version or settings.emotion.model_version
        self._endpoint: Optional[aiplatform.Endpoint] = None

    @property
    def model_version(self) -> str:
        return self._model_version

    @property
    def endpoint_name(self) -> str:
        return (
            f"projects/{self._project_id}/locations/{self._location}"
            f"/endpoints/{self._endpoint_id}"
        )

    def _get_endpoint(self) -> aiplatform.Endpoint:
        if self._endpoint is None:
            aiplatform.init(project=self._project_id, location=self._location)
            self._endpoint = aiplatform.Endpoint(endpoint_name=self.endpoint_name)
        return self._endpoint

    def _predict(self, image: bytes) -> Any:
        instance = {"content": base64.b64encode(image).decode("ascii")}
        return self._get_endpoint().predict(instances=[instance])

    async def analyze(self, image: bytes) -> EmotionAnalysisResult:
        if not image:
            raise EmotionAnalysisError("empty image")

        logger.info(
            "Requesting emotion analysis",
            endpoint=self.endpoint_name,
            model_version=self._model_version,
            image_size=len(image),
        )

        try:
            response = await asyncio.to_thread(self._predict, image)
        except gcp_exceptions.GoogleAPICallError as e:
            raise EmotionAnalysisError(str(e), original_error=e) from e

        predictions = getattr(response, "predictions", None) or []
        if not predictions:
            raise EmotionAnalysisError("endpoint returned no predictions")

        return self._parse_prediction(predictions[0])

    def _parse_prediction(self, prediction: dict) -> EmotionAnalysisResult:
        try:
            if "primary_emotion" in prediction:
                return EmotionAnalysisResult(
                    primary_emotion=str(prediction["primary_emotion"]),
                    confidence=float(prediction.get("confidence", 0.0)),
                    secondary_markers=prediction.get("secondary_markers"),
                    model_version=self._model_version,
                    landmarks=dict(prediction.get("landmarks") or {}),
                )

            labels = list(prediction["displayNames"])
            scores = [float(c) for c in prediction["confidences"]]
            ranked = sorted(zip(labels, scores), key=lambda pair: pair[1], reverse=True)
            primary, confidence = ranked[0]
            secondary = ", ".join(label for label, _ in ranked[1:3]) or None
            return EmotionAnalysisResult(
                primary_emotion=primary,
                confidence=confidence,
                secondary_markers=secondary,
                model_version=self._model_version,
            )
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise EmotionAnalysisError(f"unrecognised prediction shape: {e}", original_error=e) from e
