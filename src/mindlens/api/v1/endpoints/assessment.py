"""
Assessment Endpoints

Accepts PHQ-9 submissions and runs them through the encrypted
submission pipeline.

SAFETY: Whenever a submission requires immediate action, the response
carries the emergency resources text directly, so the client never
depends on a further round trip to display them.
"""

import base64
import binascii
from typing import Optional

from fastapi import APIRouter, HTTPException, Path, Request, status
from pydantic import BaseModel, Field, StrictInt

from mindlens.api.middleware.error_handler import resolve_country_code
from mindlens.config.logging_config import get_logger
from mindlens.services.submission.pipeline import EncryptedSubmissionPipeline

logger = get_logger(__name__)
router = APIRouter()

SESSION_ID_PATTERN = r"^MS-\d+-[0-9a-f]{9}$"


class AssessmentRequest(BaseModel):
    """PHQ-9 submission."""

    user_id: str = Field(..., min_length=1, max_length=128)
    responses: list[StrictInt] = Field(..., description="Nine item scores, 0-3 each")
    face_image: Optional[str] = Field(default=None, description="Base64-encoded face image")
    consent_to_research: bool = False
    country_code: Optional[str] = Field(default=None, min_length=2, max_length=4)


class AssessmentResponse(BaseModel):
    session_id: str
    score: int
    severity: str
    risk_indicators: list[str]
    requires_immediate_action: bool
    emergency_resources: Optional[str] = None
    emotion_analysis: Optional[dict] = None
    analytics_forwarded: bool
    notification_partial_failure: bool

    class Config:
        json_schema_extra = {
            "example": {
                "session_id": "MS-1718000000000-3f9a1c2b7",
                "score": 11,
                "severity": "low",
                "risk_indicators": [],
                "requires_immediate_action": False,
                "emergency_resources": None,
                "emotion_analysis": None,
                "analytics_forwarded": False,
                "notification_partial_failure": False,
            }
        }


def get_pipeline(request: Request) -> EncryptedSubmissionPipeline:
    pipeline = getattr(request.app.state, "pipeline", None)
    if pipeline is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Submission pipeline not initialized",
        )
    return pipeline


def _decode_image(encoded: Optional[str]) -> Optional[bytes]:
    if encoded is None:
        return None
    try:
        return base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="face_image is not valid base64",
        )


@router.post(
    "",
    response_model=AssessmentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit a PHQ-9 assessment",
)
async def submit_assessment(body: AssessmentRequest, request: Request) -> AssessmentResponse:
    pipeline = get_pipeline(request)
    face_image = _decode_image(body.face_image)
    # Recorded before submitting so a failed submission resolves the same jurisdiction
    country = resolve_country_code(request, body.country_code)
    request.state.country_code = country

    result = await pipeline.submit(
        body.user_id,
        body.responses,
        face_image=face_image,
        consent_to_research=body.consent_to_research,
    )

    emergency_resources = None
    if result.requires_immediate_action:
        emergency_resources = request.app.state.collaborators.resources.format_crisis_message(country)

    return AssessmentResponse(
        session_id=result.session_id,
        score=result.score,
        severity=result.crisis_alert.severity.label,
        risk_indicators=list(result.safety_check.risk_indicators),
        requires_immediate_action=result.requires_immediate_action,
        emergency_resources=emergency_resources,
        emotion_analysis=result.emotion_analysis.to_dict() if result.emotion_analysis else None,
        analytics_forwarded=result.analytics_forwarded,
        notification_partial_failure=result.notification_partial_failure,
    )


@router.delete(
    "/{session_id}",
    summary="Erase a stored assessment",
)
async def erase_assessment(
    request: Request,
    session_id: str = Path(..., pattern=SESSION_ID_PATTERN),
) -> dict:
    """
    Delete the encrypted record, face scan and escrowed key of one
    submission. Crisis alerts in the audit trail are kept.
    """
    deleted = await get_pipeline(request).erase(session_id)
    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No stored objects for this session",
        )
    return {"session_id": session_id, "deleted": len(deleted)}
