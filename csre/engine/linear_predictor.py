"""
Linear Predictor Evaluation
===========================

Evaluates a fitted model's linear predictor (log-odds) against the values
a caller supplied.

Encoding rules:
    - Intercept: always active (design value 1)
    - Boolean variable: the ``<id>TRUE`` term is added only when the value
      is true; false and absent both contribute nothing, because the
      fitted encoding only represents "is true"
    - Numeric variable: ``coefficient * value`` when a finite number is
      supplied; absent or non-finite values contribute nothing
    - Variables outside the model's variable set never enter the sum

Absent and unusable values are skipped explicitly and logged, so an
accidental omission can be traced from the logs.

Author: CSRE Team
Version: 1.0.0
"""

import math
import numbers
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

import numpy as np

from csre.engine.models import FittedModel
from csre.engine.variables import INTERCEPT_TERM, ClinicalVariable, VariableRegistry
from csre.logging import get_logger


logger = get_logger(__name__)

TRUE_STRINGS = frozenset({"true", "yes", "1"})


class SkipReason(str, Enum):
    """Why a model term received no contribution from the supplied values."""
    ABSENT = "absent"
    NON_NUMERIC = "non_numeric"
    NON_FINITE = "non_finite"


@dataclass(frozen=True)
class TermActivation:
    """Design value of one model term for one set of supplied values."""
    term: str
    variable_id: Optional[str]
    value: float
    skipped: Optional[SkipReason] = None


def boolean_activation(value: Any) -> Tuple[float, Optional[SkipReason]]:
    """Design value of a boolean variable: 1 when true, otherwise 0."""
    if value is None:
        return 0.0, SkipReason.ABSENT
    if isinstance(value, str):
        active = value.strip().lower() in TRUE_STRINGS
    elif isinstance(value, (bool, np.bool_)):
        active = bool(value)
    elif isinstance(value, numbers.Number):
        active = value == 1
    else:
        active = False
    return (1.0 if active else 0.0), None


def numeric_activation(value: Any) -> Tuple[float, Optional[SkipReason]]:
    """Design value of a numeric variable: the value itself when finite."""
    if value is None:
        return 0.0, SkipReason.ABSENT
    if isinstance(value, (bool, np.bool_)):
        return 0.0, SkipReason.NON_NUMERIC
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0, SkipReason.NON_NUMERIC
    if not math.isfinite(number):
        return 0.0, SkipReason.NON_FINITE
    return number, None


def activation_for(variable: ClinicalVariable, value: Any) -> Tuple[float, Optional[SkipReason]]:
    if variable.is_boolean:
        return boolean_activation(value)
    return numeric_activation(value)


class LinearPredictorEvaluator:
    """
    Computes design vectors and linear predictors for fitted models.

    Example:
        evaluator = LinearPredictorEvaluator(registry)
        lp = evaluator.evaluate(model, {"violence": True, "depression": False})
    """

    def __init__(self, registry: VariableRegistry):
        self.registry = registry

    def activations(
        self,
        model: FittedModel,
        values: Mapping[str, Any],
    ) -> List[TermActivation]:
        """
        Resolve every model term to its design value.

        Args:
            model: Fitted model whose terms are evaluated
            values: Supplied values keyed by variable id

        Returns:
            One TermActivation per model term, in term order
        """
        result = []
        for term in model.terms:
            if term == INTERCEPT_TERM:
                result.append(TermActivation(term=term, variable_id=None, value=1.0))
                continue

            variable = self.registry.by_term(term)
            if variable is None or variable.id not in model.variable_set:
                # artifact validation guarantees this cannot happen
                raise KeyError(f"Model '{model.name}' term '{term}' has no variable")

            value, skipped = activation_for(variable, values.get(variable.id))
            result.append(TermActivation(
                term=term,
                variable_id=variable.id,
                value=value,
                skipped=skipped,
            ))
        return result

    def design_vector(self, model: FittedModel, values: Mapping[str, Any]) -> np.ndarray:
        """Design vector aligned with ``model.terms``."""
        return np.array([a.value for a in self.activations(model, values)], dtype=float)

    def skipped_terms(self, model: FittedModel, values: Mapping[str, Any]) -> Dict[str, str]:
        """Variables of ``model`` that contributed nothing, with the reason."""
        return {
            a.variable_id: a.skipped.value
            for a in self.activations(model, values)
            if a.skipped is not None and a.variable_id is not None
        }

    def evaluate(self, model: FittedModel, values: Mapping[str, Any]) -> float:
        """
        Evaluate the raw linear predictor (log-odds scale).

        Args:
            model: Selected fitted model
            values: Supplied values keyed by variable id; keys outside
                the model's variable set are ignored

        Returns:
            Intercept plus the active term contributions
        """
        activations = self.activations(model, values)
        for activation in activations:
            if activation.skipped is not None:
                logger.debug(
                    "term_skipped",
                    model=model.name,
                    variable=activation.variable_id,
                    reason=activation.skipped.value,
                )

        design = np.array([a.value for a in activations], dtype=float)
        return float(design @ model.coefficients)
