"""
Crisis Resource Endpoints

Emergency resources by country and generated safety plans. Neither
endpoint depends on any remote collaborator.
"""

from fastapi import APIRouter, Query, Request

from mindlens.services.safety.safety_plan import SafetyPlanGenerator

router = APIRouter()


@router.get("/resources/{country_code}", summary="Emergency resources for a country")
async def get_resources(country_code: str, request: Request) -> dict:
    resolver = request.app.state.collaborators.resources
    resources = resolver.get_resources(country_code)
    return {
        **resources.to_dict(),
        "message": resolver.format_crisis_message(country_code),
    }


@router.get("/safety-plan", summary="Generate a safety plan")
async def get_safety_plan(
    request: Request,
    score: int = Query(..., ge=0, le=27),
    country: str = Query(default="US", min_length=2, max_length=4),
) -> dict:
    generator = SafetyPlanGenerator(request.app.state.collaborators.resources)
    return generator.generate(score, country).to_dict()
