"""
Fitted Model Types
==================

In-memory representation of the fitted logistic-regression models and the
prevalence information shipped with the artifact.

A FittedModel keeps its coefficients as a vector and its coefficient
covariance as a dense square matrix, both aligned with one ordered term
list. The intercept is always one of the terms.

Author: CSRE Team
Version: 1.0.0
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Mapping, Optional, Tuple

import numpy as np

from csre.engine.variables import INTERCEPT_TERM


@dataclass(frozen=True)
class PrevalenceInfo:
    """Outcome prevalence of the training sample and the default target."""
    training_prevalence: float
    default_target_prevalence: float
    training_sample_size: Optional[int] = None
    training_positive_count: Optional[int] = None
    training_negative_count: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "trainingPrevalence": self.training_prevalence,
            "defaultTargetPrevalence": self.default_target_prevalence,
            "trainingSampleSize": self.training_sample_size,
            "trainingPositiveCount": self.training_positive_count,
            "trainingNegativeCount": self.training_negative_count,
        }


@dataclass(frozen=True, eq=False)
class FittedModel:
    """
    A logistic-regression model fitted on one variable subset.

    Attributes:
        name: Model name as it appears in the artifact
        variable_set: Variables the model was fitted on (its signature)
        terms: Ordered coefficient names, intercept included
        coefficients: Coefficient vector aligned with ``terms``
        covariance: Coefficient covariance aligned with ``terms``, or None
            when the artifact does not ship one for this model
    """
    name: str
    variable_set: FrozenSet[str]
    terms: Tuple[str, ...]
    coefficients: np.ndarray
    covariance: Optional[np.ndarray] = None
    standard_errors: Mapping[str, float] = field(default_factory=dict)
    sample_size: Optional[int] = None
    n_positive: Optional[int] = None
    n_negative: Optional[int] = None
    auc: Optional[float] = None
    converged: bool = True
    representative_interval_width: Optional[float] = None
    residual_degrees_of_freedom: Optional[float] = None
    decision_threshold: Optional[float] = None
    sensitivity_at_threshold: Optional[float] = None
    specificity_at_threshold: Optional[float] = None
    _term_index: Mapping[str, int] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        coefficients = np.asarray(self.coefficients, dtype=float)
        coefficients.setflags(write=False)
        object.__setattr__(self, "coefficients", coefficients)

        if self.covariance is not None:
            covariance = np.asarray(self.covariance, dtype=float)
            covariance.setflags(write=False)
            object.__setattr__(self, "covariance", covariance)

        object.__setattr__(
            self,
            "_term_index",
            MappingProxyType({term: i for i, term in enumerate(self.terms)}),
        )

    @property
    def signature(self) -> FrozenSet[str]:
        return self.variable_set

    @property
    def has_covariance(self) -> bool:
        return self.covariance is not None

    @property
    def intercept(self) -> float:
        return float(self.coefficients[self._term_index[INTERCEPT_TERM]])

    def term_position(self, term: str) -> Optional[int]:
        return self._term_index.get(term)

    def coefficient(self, term: str) -> Optional[float]:
        """Coefficient for a term, or None when the model has no such term."""
        position = self._term_index.get(term)
        if position is None:
            return None
        return float(self.coefficients[position])

    def coefficient_map(self) -> Dict[str, float]:
        return {term: float(c) for term, c in zip(self.terms, self.coefficients)}

    def summary(self) -> Dict[str, Any]:
        """Serialize model metadata (without the covariance matrix)."""
        return {
            "name": self.name,
            "variables": sorted(self.variable_set),
            "coefficients": self.coefficient_map(),
            "sampleSize": self.sample_size,
            "nPositive": self.n_positive,
            "nNegative": self.n_negative,
            "auc": self.auc,
            "converged": self.converged,
            "hasCovariance": self.has_covariance,
            "representativeIntervalWidth": self.representative_interval_width,
            "decisionThreshold": self.decision_threshold,
            "sensitivityAtThreshold": self.sensitivity_at_threshold,
            "specificityAtThreshold": self.specificity_at_threshold,
        }
