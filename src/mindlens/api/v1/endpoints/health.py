"""
Health Check Endpoints

Liveness and readiness for load balancers and Kubernetes probes.
"""

from fastapi import APIRouter, Request
from pydantic import BaseModel

from mindlens import __version__

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    environment: str


class ReadinessResponse(BaseModel):
    """Readiness check response with component health."""

    ready: bool
    components: dict


@router.get(
    "",
    response_model=HealthResponse,
    summary="Health check",
)
async def health_check(request: Request) -> HealthResponse:
    return HealthResponse(
        status="healthy",
        version=__version__,
        environment=request.app.state.settings.env,
    )


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    summary="Readiness check",
    description="Checks that collaborators are configured and the audit store is reachable",
)
async def readiness_check(request: Request) -> ReadinessResponse:
    """
    Ready when the collaborators are built and, for the database
    audit backend, the database answers.
    """
    collaborators = getattr(request.app.state, "collaborators", None)
    components: dict = {"collaborators": collaborators is not None}

    if collaborators is not None:
        components["storage"] = collaborators.storage.backend_name
        components["audit"] = collaborators.audit.backend_name
        if collaborators.database is not None:
            components["database"] = await collaborators.database.health_check()

    ready = components["collaborators"] and components.get("database", True)
    return ReadinessResponse(ready=ready, components=components)
