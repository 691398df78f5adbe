"""
Confidence Interval Estimation
==============================

Delta-method confidence intervals for the predicted probability.

The variance of the linear predictor is the full bilinear form of the
design vector over the coefficient covariance matrix:

    Var(x'b) = x' V x

Cross terms matter and are never dropped. Bounds are built on the
log-odds scale around the prevalence-adjusted predictor, then mapped
through the logistic function, which makes the probability interval
asymmetric around the point estimate.

When a model ships no covariance matrix the estimator falls back to the
precomputed representative width stored with the model and marks the
result as degraded.

Author: CSRE Team
Version: 1.0.0
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from scipy.stats import norm

from csre.engine.errors import InvalidConfidenceLevel
from csre.engine.linear_predictor import LinearPredictorEvaluator
from csre.engine.models import FittedModel
from csre.engine.prevalence import PROBABILITY_CEILING, PROBABILITY_FLOOR, logistic
from csre.logging import get_logger


logger = get_logger(__name__)

# Level at which representative widths are exported by the fitting script
REPRESENTATIVE_WIDTH_LEVEL = 0.95


class IntervalMethod(str, Enum):
    """How an interval was produced."""
    DELTA = "delta"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class ConfidenceInterval:
    """Probability-scale confidence interval."""
    lower: float
    upper: float
    width: float
    level: float
    method: IntervalMethod
    standard_error: Optional[float] = None
    representative_width: Optional[float] = None

    @property
    def degraded(self) -> bool:
        return self.method is IntervalMethod.FALLBACK

    def to_dict(self) -> Dict[str, Any]:
        return {
            "lower": self.lower,
            "upper": self.upper,
            "width": self.width,
            "level": self.level,
            "method": self.method.value,
            "standardError": self.standard_error,
            "representativeWidth": self.representative_width,
        }


def critical_value(confidence_level: float) -> float:
    """
    Two-sided standard-normal critical value.

    Args:
        confidence_level: Coverage in (0, 1), e.g. 0.95

    Returns:
        z such that P(|Z| <= z) = confidence_level (1.959964 at 0.95)

    Raises:
        InvalidConfidenceLevel: If the level is outside (0, 1)
    """
    if not (isinstance(confidence_level, (int, float)) and 0.0 < confidence_level < 1.0):
        raise InvalidConfidenceLevel(confidence_level)
    return float(norm.ppf((1.0 + confidence_level) / 2.0))


class ConfidenceIntervalEstimator:
    """
    Propagates coefficient uncertainty into a probability interval.

    Example:
        estimator = ConfidenceIntervalEstimator(evaluator)
        ci = estimator.estimate(model, values, adjusted_lp)
        print(ci.lower, ci.upper, ci.method)
    """

    def __init__(self, evaluator: LinearPredictorEvaluator):
        self.evaluator = evaluator

    def standard_error(self, model: FittedModel, supplied_values: Mapping[str, Any]) -> float:
        """
        Standard error of the linear predictor for these values.

        Raises:
            ValueError: If the model has no covariance matrix
        """
        if model.covariance is None:
            raise ValueError(f"Model '{model.name}' has no coefficient covariance")

        design = self.evaluator.design_vector(model, supplied_values)
        variance = float(design @ model.covariance @ design)
        if variance < 0.0:
            # rounding in exported matrices can leave tiny negative values
            logger.warning("negative_variance_clipped", model=model.name, variance=variance)
            variance = 0.0
        return math.sqrt(variance)

    def estimate(
        self,
        model: FittedModel,
        supplied_values: Mapping[str, Any],
        adjusted_linear_predictor: float,
        confidence_level: float = 0.95,
    ) -> ConfidenceInterval:
        """
        Estimate the probability-scale confidence interval.

        Args:
            model: Selected fitted model
            supplied_values: Values used for the linear predictor
            adjusted_linear_predictor: Prevalence-adjusted log-odds
            confidence_level: Two-sided coverage, default 0.95

        Returns:
            ConfidenceInterval with method DELTA, or FALLBACK when the
            model has no covariance matrix
        """
        z = critical_value(confidence_level)

        if not model.has_covariance:
            return self._fallback(model, adjusted_linear_predictor, confidence_level, z)

        se = self.standard_error(model, supplied_values)
        lower = logistic(adjusted_linear_predictor - z * se)
        upper = logistic(adjusted_linear_predictor + z * se)

        return ConfidenceInterval(
            lower=lower,
            upper=upper,
            width=upper - lower,
            level=confidence_level,
            method=IntervalMethod.DELTA,
            standard_error=se,
        )

    def _fallback(
        self,
        model: FittedModel,
        adjusted_linear_predictor: float,
        confidence_level: float,
        z: float,
    ) -> ConfidenceInterval:
        """
        Representative-width interval centred on the point probability.

        Bounds are clipped to stay inside (0, 1), so the reported width is
        the clipped ``upper - lower``; the scaled stored width is kept in
        ``representative_width``.
        """
        if model.representative_interval_width is None:
            raise ValueError(
                f"Model '{model.name}' has neither covariance nor representative width"
            )

        width = model.representative_interval_width
        if confidence_level != REPRESENTATIVE_WIDTH_LEVEL:
            width *= z / critical_value(REPRESENTATIVE_WIDTH_LEVEL)

        probability = logistic(adjusted_linear_predictor)
        lower = max(probability - width / 2.0, PROBABILITY_FLOOR)
        upper = min(probability + width / 2.0, PROBABILITY_CEILING)

        logger.warning(
            "degraded_interval",
            model=model.name,
            method=IntervalMethod.FALLBACK.value,
            width=round(upper - lower, 4),
            representative_width=round(width, 4),
        )

        return ConfidenceInterval(
            lower=lower,
            upper=upper,
            width=upper - lower,
            level=confidence_level,
            method=IntervalMethod.FALLBACK,
            representative_width=width,
        )
