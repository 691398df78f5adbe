"""
Prevalence Adjustment
=====================

Shifts a model's log-odds from the outcome prevalence of its training
sample to a target prevalence:

    adjusted = raw - logit(training_prevalence) + logit(target_prevalence)

This is the exact Bayes correction for a prior-probability shift when only
the base rate differs between training and target populations. The shift
is an additive constant on the log-odds scale, so it leaves the standard
error of the linear predictor unchanged.

Author: CSRE Team
Version: 1.0.0
"""

import math

import numpy as np
from scipy.special import expit, logit as _logit

from csre.engine.errors import InvalidPrevalence


# Closest float64 values to 0 and 1 that are still inside (0, 1)
PROBABILITY_FLOOR = float(np.nextafter(0.0, 1.0))
PROBABILITY_CEILING = float(np.nextafter(1.0, 0.0))


def check_prevalence(value: float, name: str = "prevalence") -> float:
    """
    Validate that a prevalence lies strictly inside (0, 1).

    Raises:
        InvalidPrevalence: If the value is at or beyond a boundary, or not finite
    """
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidPrevalence(name, value) from None
    if not math.isfinite(number) or not 0.0 < number < 1.0:
        raise InvalidPrevalence(name, value)
    return number


def logit(p: float) -> float:
    """Log-odds ``ln(p / (1 - p))``."""
    return float(_logit(p))


def logistic(x: float) -> float:
    """
    Inverse of :func:`logit`, ``1 / (1 + e^-x)``.

    Kept strictly inside (0, 1): float64 ``expit`` saturates to exactly 0
    or 1 once |x| exceeds roughly 745 or 37.
    """
    return float(np.clip(expit(x), PROBABILITY_FLOOR, PROBABILITY_CEILING))


class PrevalenceAdjuster:
    """
    Log-odds correction between training and target prevalence.

    Example:
        adjuster = PrevalenceAdjuster()
        adjusted = adjuster.adjust(raw_lp, 0.85, 0.25)
    """

    def adjust(
        self,
        raw_linear_predictor: float,
        training_prevalence: float,
        target_prevalence: float,
    ) -> float:
        """
        Shift a linear predictor to the target prevalence.

        Args:
            raw_linear_predictor: Model log-odds at training prevalence
            training_prevalence: Outcome prevalence of the training sample
            target_prevalence: Outcome prevalence of the target population

        Returns:
            Adjusted linear predictor

        Raises:
            InvalidPrevalence: If either prevalence is outside (0, 1)
        """
        training = check_prevalence(training_prevalence, "training prevalence")
        target = check_prevalence(target_prevalence, "target prevalence")
        return raw_linear_predictor - logit(training) + logit(target)

    def adjust_probability(
        self,
        probability: float,
        training_prevalence: float,
        target_prevalence: float,
    ) -> float:
        """Probability-scale counterpart of :meth:`adjust`."""
        if not 0.0 < probability < 1.0:
            raise ValueError(f"probability must lie strictly between 0 and 1, got {probability!r}")
        return logistic(
            self.adjust(logit(probability), training_prevalence, target_prevalence)
        )
