"""
CSRE Health Routes
==================

Health check endpoint reporting service status and artifact coverage.

Endpoints:
    GET /health    - Service health and loaded artifact summary

Author: CSRE Team
Version: 1.0.0
"""

from fastapi import APIRouter, Depends, Request

from csre.config import Settings
from csre.api.dependencies import get_app_settings
from csre.api.schemas import HealthResponse


router = APIRouter(tags=["Health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health Check",
)
async def health_check(
    request: Request,
    settings: Settings = Depends(get_app_settings),
) -> HealthResponse:
    """
    Report whether the model artifact is loaded and how much of the
    variable-subset space it covers.
    """
    engine = getattr(request.app.state, "engine", None)
    if engine is None:
        return HealthResponse(
            status="unavailable",
            service=settings.app_name,
            version=settings.app_version,
        )

    repository = engine.repository
    missing = repository.missing_signatures()
    return HealthResponse(
        status="healthy" if not missing else "degraded",
        service=settings.app_name,
        version=settings.app_version,
        artifact_version=repository.version,
        variables=len(repository.registry),
        models=len(repository),
        coverage_complete=not missing,
        missing_subsets=len(missing),
    )
