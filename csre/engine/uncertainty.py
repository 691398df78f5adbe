"""
Uncertainty Classification
==========================

Maps confidence-interval width to a severity tier, and a probability to a
suspicion level.

Severity tiers (checked from the highest threshold down):
    - width >= 0.40: high       (very uncertain estimate)
    - width >= 0.20: medium     (interpret with caution)
    - width >= 0.10: low        (probably reliable)
    - otherwise:     very_low

Suspicion levels:
    - probability < 0.30: low
    - probability < 0.70: moderate
    - otherwise:          high

Author: CSRE Team
Version: 1.0.0
"""

import math
from enum import Enum
from typing import Dict


class SeverityTier(Enum):
    """
    Uncertainty severity tiers with their rank and lower width threshold.
    """
    VERY_LOW = ("very_low", 0, 0.0)
    LOW = ("low", 1, 0.10)
    MEDIUM = ("medium", 2, 0.20)
    HIGH = ("high", 3, 0.40)

    def __init__(self, value: str, rank: int, threshold: float):
        self._value_ = value
        self.rank = rank
        self.threshold = threshold

    @classmethod
    def from_string(cls, value: str) -> "SeverityTier":
        """Get a tier from its string value."""
        value = value.lower().strip()
        for tier in cls:
            if tier.value == value:
                return tier
        raise ValueError(f"Unknown severity tier: {value!r}")


TIER_LABELS: Dict[SeverityTier, Dict[str, str]] = {
    SeverityTier.HIGH: {
        "en": "Very high uncertainty - Unreliable estimate",
        "fr": "Incertitude très élevée - Estimation peu fiable",
    },
    SeverityTier.MEDIUM: {
        "en": "High uncertainty - Interpret with caution",
        "fr": "Incertitude élevée - Interpréter avec prudence",
    },
    SeverityTier.LOW: {
        "en": "Moderate uncertainty - Probably reliable",
        "fr": "Incertitude modérée - Probablement fiable",
    },
    SeverityTier.VERY_LOW: {
        "en": "Low uncertainty - Probably reliable",
        "fr": "Faible incertitude - Probablement fiable",
    },
}


class UncertaintyClassifier:
    """Classifies interval width into a SeverityTier."""

    # Highest threshold first
    TIERS = tuple(sorted(SeverityTier, key=lambda t: t.threshold, reverse=True))

    def classify(self, width: float) -> SeverityTier:
        """
        Classify an interval width.

        Args:
            width: Probability-scale interval width

        Returns:
            Exactly one SeverityTier

        Raises:
            ValueError: If width is NaN
        """
        if math.isnan(width):
            raise ValueError("Cannot classify a NaN interval width")
        for tier in self.TIERS:
            if width >= tier.threshold:
                return tier
        return SeverityTier.VERY_LOW

    @staticmethod
    def label(tier: SeverityTier, language: str = "en") -> str:
        labels = TIER_LABELS[tier]
        return labels.get(language, labels["en"])


class SuspicionLevel(str, Enum):
    """Interpretation of the point probability."""
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"


SUSPICION_LABELS: Dict[SuspicionLevel, Dict[str, Dict[str, str]]] = {
    SuspicionLevel.LOW: {
        "label": {
            "en": "Low suspicion",
            "fr": "Suspicion faible",
        },
        "recommendation": {
            "en": "Continue routine follow-up. Stay alert to signals.",
            "fr": "Continuer le suivi habituel. Rester attentif aux signaux.",
        },
    },
    SuspicionLevel.MODERATE: {
        "label": {
            "en": "Moderate suspicion",
            "fr": "Suspicion modérée",
        },
        "recommendation": {
            "en": "Explore further in subsequent consultations. "
                  "Create a safe space for discussion.",
            "fr": "Explorer davantage lors des consultations suivantes. "
                  "Créer un espace de parole sécurisant.",
        },
    },
    SuspicionLevel.HIGH: {
        "label": {
            "en": "High suspicion",
            "fr": "Suspicion élevée",
        },
        "recommendation": {
            "en": "In-depth clinical exploration is strongly recommended. "
                  "Consider referral to a specialist.",
            "fr": "Une exploration clinique approfondie est fortement recommandée. "
                  "Considérer une orientation vers un spécialiste.",
        },
    },
}


class ProbabilityInterpreter:
    """Maps a probability to a SuspicionLevel with fixed cutoffs."""

    MODERATE_FROM = 0.30
    HIGH_FROM = 0.70

    def interpret(self, probability: float) -> SuspicionLevel:
        if probability < self.MODERATE_FROM:
            return SuspicionLevel.LOW
        elif probability < self.HIGH_FROM:
            return SuspicionLevel.MODERATE
        else:
            return SuspicionLevel.HIGH

    @staticmethod
    def label(level: SuspicionLevel, language: str = "en") -> str:
        labels = SUSPICION_LABELS[level]["label"]
        return labels.get(language, labels["en"])

    @staticmethod
    def recommendation(level: SuspicionLevel, language: str = "en") -> str:
        texts = SUSPICION_LABELS[level]["recommendation"]
        return texts.get(language, texts["en"])
