"""
Inference Orchestrator
======================

Composes model selection, linear-predictor evaluation, prevalence
adjustment, interval estimation and uncertainty classification into one
request -> result pipeline.

Pipeline:
    1. Drop absent values; an empty request yields EmptyRequest
    2. Select the model fitted on exactly the supplied variables
    3. Evaluate the raw linear predictor over that model's variables only
    4. Shift it to the target prevalence and convert to a probability
    5. Estimate the confidence interval and classify its width

Usage:
    orchestrator = InferenceOrchestrator(repository)
    outcome = orchestrator.infer(InferenceRequest({"violence": True}))
    if isinstance(outcome, EmptyRequest):
        ...  # nothing to show yet

Author: CSRE Team
Version: 1.0.0
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from csre.engine.errors import (
    EmptyRequest,
    NoModelMatch,
    NoModelMatchError,
    UnknownVariableError,
)
from csre.engine.intervals import ConfidenceInterval, ConfidenceIntervalEstimator, critical_value
from csre.engine.linear_predictor import LinearPredictorEvaluator
from csre.engine.prevalence import PrevalenceAdjuster, check_prevalence, logistic
from csre.engine.repository import ModelRepository
from csre.engine.selector import ModelSelector
from csre.engine.uncertainty import (
    ProbabilityInterpreter,
    SeverityTier,
    SuspicionLevel,
    UncertaintyClassifier,
)
from csre.logging import get_logger


logger = get_logger(__name__)


def _is_absent(value: Any) -> bool:
    if value is None:
        return True
    return isinstance(value, str) and not value.strip()


@dataclass(frozen=True)
class InferenceRequest:
    """
    Sparse variable values plus optional target prevalence.

    Values that are None or blank strings count as absent. A numeric value
    that is present but not finite still counts as supplied.
    """
    values: Mapping[str, Any] = field(default_factory=dict)
    target_prevalence: Optional[float] = None
    confidence_level: Optional[float] = None

    def supplied_values(self) -> Dict[str, Any]:
        return {k: v for k, v in self.values.items() if not _is_absent(v)}


@dataclass(frozen=True)
class InferenceResult:
    """Outcome of one successful inference. Never mutated after creation."""
    probability: float
    confidence_interval: ConfidenceInterval
    selected_model_id: str
    severity_tier: SeverityTier
    suspicion_level: SuspicionLevel
    linear_predictor: float
    adjusted_linear_predictor: float
    training_prevalence: float
    target_prevalence: float
    known_variables: Tuple[str, ...]
    unknown_variables: Tuple[str, ...]
    skipped_variables: Mapping[str, str] = field(default_factory=dict)
    model_auc: Optional[float] = None
    model_sample_size: Optional[int] = None
    decision_threshold: Optional[float] = None
    sensitivity_at_threshold: Optional[float] = None
    specificity_at_threshold: Optional[float] = None

    @property
    def degraded(self) -> bool:
        return self.confidence_interval.degraded

    def to_dict(self) -> Dict[str, Any]:
        return {
            "probability": self.probability,
            "confidenceInterval": self.confidence_interval.to_dict(),
            "selectedModelId": self.selected_model_id,
            "severityTier": self.severity_tier.value,
            "suspicionLevel": self.suspicion_level.value,
            "linearPredictor": self.linear_predictor,
            "adjustedLinearPredictor": self.adjusted_linear_predictor,
            "trainingPrevalence": self.training_prevalence,
            "targetPrevalence": self.target_prevalence,
            "knownVariables": list(self.known_variables),
            "unknownVariables": list(self.unknown_variables),
            "skippedVariables": dict(self.skipped_variables),
            "model": {
                "auc": self.model_auc,
                "sampleSize": self.model_sample_size,
                "decisionThreshold": self.decision_threshold,
                "sensitivityAtThreshold": self.sensitivity_at_threshold,
                "specificityAtThreshold": self.specificity_at_threshold,
            },
        }


InferenceOutcome = Union[InferenceResult, EmptyRequest]


class InferenceOrchestrator:
    """
    The engine's single entry point for inference.

    Holds no per-request state: every call is a pure function of the
    repository and the request, so one orchestrator can serve concurrent
    callers.

    Example:
        orchestrator = InferenceOrchestrator(repository)
        result = orchestrator.infer(InferenceRequest(
            values={"antidepressants": True, "work_disability_months": 6},
            target_prevalence=0.25,
        ))
        print(f"{result.probability:.3f} [{result.severity_tier.value}]")
    """

    def __init__(self, repository: ModelRepository, confidence_level: float = 0.95):
        """
        Initialize the orchestrator.

        Args:
            repository: Loaded model repository
            confidence_level: Default interval coverage
        """
        critical_value(confidence_level)

        self.repository = repository
        self.registry = repository.registry
        self.default_confidence_level = confidence_level

        self.selector = ModelSelector(repository)
        self.evaluator = LinearPredictorEvaluator(self.registry)
        self.adjuster = PrevalenceAdjuster()
        self.estimator = ConfidenceIntervalEstimator(self.evaluator)
        self.classifier = UncertaintyClassifier()
        self.interpreter = ProbabilityInterpreter()

    def infer(self, request: InferenceRequest) -> InferenceOutcome:
        """
        Run the full inference pipeline for one request.

        Args:
            request: Sparse values and optional target prevalence

        Returns:
            InferenceResult, or EmptyRequest when nothing was supplied

        Raises:
            UnknownVariableError: If a value is keyed by an unregistered id
            InvalidPrevalence: If the target prevalence is outside (0, 1)
            InvalidConfidenceLevel: If the confidence level is outside (0, 1)
            NoModelMatchError: If no model covers the supplied variables
        """
        supplied = request.supplied_values()
        if not supplied:
            logger.debug("empty_request")
            return EmptyRequest(target_prevalence=request.target_prevalence)

        unknown = self.registry.unknown(supplied)
        if unknown:
            raise UnknownVariableError(unknown)

        prevalence = self.repository.prevalence
        target = request.target_prevalence
        if target is None:
            target = prevalence.default_target_prevalence
        target = check_prevalence(target, "target prevalence")

        level = request.confidence_level
        if level is None:
            level = self.default_confidence_level
        critical_value(level)

        outcome = self.selector.select(supplied)
        if isinstance(outcome, NoModelMatch):
            raise NoModelMatchError(outcome)
        model = outcome

        # Only the selected model's variables may reach the dot product
        model_values = {vid: supplied[vid] for vid in model.variable_set}

        raw = self.evaluator.evaluate(model, model_values)
        adjusted = self.adjuster.adjust(raw, prevalence.training_prevalence, target)
        probability = logistic(adjusted)

        interval = self.estimator.estimate(model, model_values, adjusted, level)
        tier = self.classifier.classify(interval.width)

        known = tuple(vid for vid in self.registry.ids if vid in supplied)
        missing = tuple(vid for vid in self.registry.ids if vid not in supplied)

        result = InferenceResult(
            probability=probability,
            confidence_interval=interval,
            selected_model_id=model.name,
            severity_tier=tier,
            suspicion_level=self.interpreter.interpret(probability),
            linear_predictor=raw,
            adjusted_linear_predictor=adjusted,
            training_prevalence=prevalence.training_prevalence,
            target_prevalence=target,
            known_variables=known,
            unknown_variables=missing,
            skipped_variables=MappingProxyType(
                self.evaluator.skipped_terms(model, model_values)
            ),
            model_auc=model.auc,
            model_sample_size=model.sample_size,
            decision_threshold=model.decision_threshold,
            sensitivity_at_threshold=model.sensitivity_at_threshold,
            specificity_at_threshold=model.specificity_at_threshold,
        )

        logger.info(
            "inference_completed",
            model=model.name,
            probability=round(probability, 4),
            width=round(interval.width, 4),
            tier=tier.value,
            method=interval.method.value,
        )
        return result

    def infer_values(
        self,
        values: Mapping[str, Any],
        target_prevalence: Optional[float] = None,
        confidence_level: Optional[float] = None,
    ) -> InferenceOutcome:
        """Convenience wrapper building the InferenceRequest."""
        return self.infer(InferenceRequest(
            values=values,
            target_prevalence=target_prevalence,
            confidence_level=confidence_level,
        ))

    def infer_many(self, requests: Iterable[InferenceRequest]) -> List[InferenceOutcome]:
        """
        Run independent requests in order.

        Errors are not swallowed: the first failing request raises.
        """
        return [self.infer(request) for request in requests]
