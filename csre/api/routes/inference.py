"""
CSRE Inference Routes
=====================

REST endpoints for variable metadata, model summaries and inference.

Endpoints:
    GET  /api/v1/variables        - Variable registry
    GET  /api/v1/models           - Model summaries
    GET  /api/v1/models/{name}    - One model summary
    GET  /api/v1/disclaimer       - Artifact disclaimer and metadata
    POST /api/v1/infer            - Run inference

Author: CSRE Team
Version: 1.0.0
"""

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException

from csre.api.dependencies import get_engine
from csre.api.schemas import InferenceRequestBody, InferenceResponse
from csre.engine.context import EngineContext
from csre.engine.errors import EmptyRequest
from csre.engine.orchestrator import InferenceRequest


router = APIRouter(prefix="/api/v1", tags=["inference"])


@router.get("/variables")
async def list_variables(engine: EngineContext = Depends(get_engine)) -> List[Dict[str, Any]]:
    """Variables in artifact order, with display metadata."""
    return engine.registry.to_list()


@router.get("/models")
async def list_models(engine: EngineContext = Depends(get_engine)) -> List[Dict[str, Any]]:
    return [model.summary() for model in engine.repository]


@router.get("/models/{name}")
async def get_model(name: str, engine: EngineContext = Depends(get_engine)) -> Dict[str, Any]:
    model = engine.repository.get(name)
    if model is None:
        raise HTTPException(status_code=404, detail=f"Model not found: {name}")
    return model.summary()


@router.get("/disclaimer")
async def get_disclaimer(engine: EngineContext = Depends(get_engine)) -> Dict[str, Any]:
    repository = engine.repository
    return {
        "disclaimer": repository.disclaimer,
        "metadata": dict(repository.metadata),
        "prevalence": repository.prevalence.to_dict(),
    }


@router.post("/infer", response_model=InferenceResponse)
async def infer(
    body: InferenceRequestBody,
    engine: EngineContext = Depends(get_engine),
) -> InferenceResponse:
    """
    Estimate the outcome probability for the supplied variables.

    Engine errors are translated by the application's exception handler.
    """
    outcome = engine.orchestrator.infer(InferenceRequest(
        values=body.values,
        target_prevalence=body.target_prevalence,
        confidence_level=body.confidence_level,
    ))

    if isinstance(outcome, EmptyRequest):
        return InferenceResponse(status="no_result", reason=outcome.reason)

    return InferenceResponse(status="ok", result=outcome.to_dict())
