"""
CSRE Inference Engine
=====================

Subset-specific logistic-regression inference.

Modules:
    - variables: Variable universe
    - artifact: Artifact schema and validation
    - repository: Model loading and signature index
    - selector: Exact-signature model selection
    - linear_predictor: Design vectors and log-odds evaluation
    - prevalence: Prevalence adjustment
    - intervals: Delta-method confidence intervals
    - uncertainty: Severity tiers and suspicion levels
    - orchestrator: Request -> result pipeline
    - context: Immutable engine context

Author: CSRE Team
Version: 1.0.0
"""

from .errors import (
    EngineError,
    ArtifactLoadFailure,
    MalformedArtifact,
    InvalidPrevalence,
    InvalidConfidenceLevel,
    UnknownVariableError,
    NoModelMatch,
    NoModelMatchError,
    EmptyRequest,
)
from .variables import ClinicalVariable, ValueType, VariableRegistry
from .models import FittedModel, PrevalenceInfo
from .repository import ModelRepository
from .selector import ModelSelector
from .linear_predictor import LinearPredictorEvaluator
from .prevalence import PrevalenceAdjuster
from .intervals import ConfidenceInterval, ConfidenceIntervalEstimator, IntervalMethod
from .uncertainty import SeverityTier, SuspicionLevel, UncertaintyClassifier, ProbabilityInterpreter
from .orchestrator import InferenceOrchestrator, InferenceRequest, InferenceResult
from .context import EngineContext, load_engine

__all__ = [
    "EngineError",
    "ArtifactLoadFailure",
    "MalformedArtifact",
    "InvalidPrevalence",
    "InvalidConfidenceLevel",
    "UnknownVariableError",
    "NoModelMatch",
    "NoModelMatchError",
    "EmptyRequest",
    "ClinicalVariable",
    "ValueType",
    "VariableRegistry",
    "FittedModel",
    "PrevalenceInfo",
    "ModelRepository",
    "ModelSelector",
    "LinearPredictorEvaluator",
    "PrevalenceAdjuster",
    "ConfidenceInterval",
    "ConfidenceIntervalEstimator",
    "IntervalMethod",
    "SeverityTier",
    "SuspicionLevel",
    "UncertaintyClassifier",
    "ProbabilityInterpreter",
    "InferenceOrchestrator",
    "InferenceRequest",
    "InferenceResult",
    "EngineContext",
    "load_engine",
]
