"""
Research Statistics Endpoints

Aggregated statistics over consented, de-identified records. No
per-submission data leaves the analytics store through this surface.
"""

import asyncio
from dataclasses import asdict

from fastapi import APIRouter, HTTPException, Request, status
from pydantic import BaseModel

from mindlens.config.logging_config import get_logger

logger = get_logger(__name__)
router = APIRouter()


class SeverityGroup(BaseModel):
    severity_tier: str
    primary_emotion: str
    count: int
    average_score: float


class ResearchStatisticsResponse(BaseModel):
    total_records: int
    groups: list[SeverityGroup]


@router.get(
    "/statistics",
    response_model=ResearchStatisticsResponse,
    summary="Record counts and mean score by severity tier and emotion",
)
async def get_statistics(request: Request) -> ResearchStatisticsResponse:
    analytics = request.app.state.collaborators.analytics
    timeout = request.app.state.settings.timeouts.analytics

    try:
        aggregates = await asyncio.wait_for(analytics.aggregate_by_severity(), timeout=timeout)
    except Exception as e:
        logger.error(
            "Research statistics unavailable",
            backend=analytics.backend_name,
            error_type=type(e).__name__,
            error=str(e),
        )
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Research statistics unavailable",
        )

    groups = [SeverityGroup(**asdict(aggregate)) for aggregate in aggregates]
    return ResearchStatisticsResponse(
        total_records=sum(group.count for group in groups),
        groups=groups,
    )
