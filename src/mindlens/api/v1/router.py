"""
API v1 Router

Aggregates all v1 API endpoints.
"""

from fastapi import APIRouter

from mindlens.api.v1.endpoints.health import router as health_router
from mindlens.api.v1.endpoints.assessment import router as assessment_router
from mindlens.api.v1.endpoints.research import router as research_router
from mindlens.api.v1.endpoints.resources import router as resources_router

api_router = APIRouter()

api_router.include_router(
    health_router,
    prefix="/health",
    tags=["Health"],
)

api_router.include_router(
    assessment_router,
    prefix="/assessments",
    tags=["Assessments"],
)

api_router.include_router(
    resources_router,
    tags=["Resources"],
)

api_router.include_router(
    research_router,
    prefix="/research",
    tags=["Research"],
)
