"""
CSRE API Schemas
================

Request and response models for the REST API.

Author: CSRE Team
Version: 1.0.0
"""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


VariableValue = Optional[Union[bool, float, str]]


class InferenceRequestBody(BaseModel):
    """Sparse variable values plus optional prevalence and level."""

    model_config = ConfigDict(populate_by_name=True)

    values: Dict[str, VariableValue] = Field(default_factory=dict)
    target_prevalence: Optional[float] = Field(default=None, alias="targetPrevalence")
    confidence_level: Optional[float] = Field(default=None, alias="confidenceLevel")


class InferenceResponse(BaseModel):
    """
    Inference outcome.

    ``status`` is "ok" with a result, or "no_result" when the request
    supplied no values.
    """
    status: str
    result: Optional[Dict[str, Any]] = None
    reason: Optional[str] = None


class ErrorResponse(BaseModel):
    """Typed engine failure."""
    error: str
    detail: str
    problems: Optional[List[str]] = None


class HealthResponse(BaseModel):
    """Service and artifact health."""
    status: str
    service: str
    version: str
    artifact_version: Optional[str] = None
    variables: int = 0
    models: int = 0
    coverage_complete: bool = False
    missing_subsets: int = 0
