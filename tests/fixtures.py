"""
Test Fixtures for Model Artifacts
=================================

Provides small, hand-checkable artifact documents:
    - toy: boolean variables a, b, c; models {a, b}, {a} and {b}
      ({b} ships no covariance matrix; nothing covers {c})
    - complete: x, y (boolean) and months (numeric); every non-empty
      subset has a model with a correlated covariance matrix
    - snake_case: the toy artifact in the fitting script's export format

Author: CSRE Team
Version: 1.0.0
"""

import copy
from itertools import combinations
from typing import Any, Dict, List

INTERCEPT = "(Intercept)"


def diagonal_covariance(terms: List[str], variance: float) -> Dict[str, Dict[str, float]]:
    return {
        row: {col: (variance if row == col else 0.0) for col in terms}
        for row in terms
    }


# =============================================================================
# Toy artifact
# =============================================================================

TOY_DOCUMENT: Dict[str, Any] = {
    "variables": [
        {"id": "a", "valueType": "boolean", "labels": {"en": "Indicator A", "fr": "Indicateur A"}},
        {"id": "b", "valueType": "boolean", "labels": {"en": "Indicator B"}},
        {"id": "c", "valueType": "boolean"},
    ],
    "models": {
        "a_b": {
            "variables": ["a", "b"],
            "coefficients": {INTERCEPT: -2.0, "aTRUE": 1.5, "bTRUE": 1.0},
            "coefficientStandardErrors": {INTERCEPT: 0.2, "aTRUE": 0.2, "bTRUE": 0.2},
            "coefficientCovariance": diagonal_covariance([INTERCEPT, "aTRUE", "bTRUE"], 0.04),
            "sampleSize": 120,
            "nPositive": 60,
            "nNegative": 60,
            "auc": 0.81,
            "converged": True,
            "representativeIntervalWidth": 0.31,
            "residualDegreesOfFreedom": 117,
            "decisionThreshold": 0.55,
            "sensitivityAtThreshold": 0.7,
            "specificityAtThreshold": 0.75,
        },
        "a": {
            "variables": ["a"],
            "coefficients": {INTERCEPT: -1.0, "aTRUE": 0.8},
            "coefficientCovariance": diagonal_covariance([INTERCEPT, "aTRUE"], 0.04),
            "sampleSize": 130,
            "auc": 0.7,
            "converged": True,
            "representativeIntervalWidth": 0.2,
        },
        "b": {
            "variables": ["b"],
            "coefficients": {INTERCEPT: -0.5, "bTRUE": 0.4},
            "sampleSize": 125,
            "auc": 0.62,
            "converged": True,
            "representativeIntervalWidth": 0.25,
        },
    },
    "prevalenceInfo": {
        "trainingPrevalence": 0.5,
        "trainingSampleSize": 133,
        "trainingPositiveCount": 66,
        "trainingNegativeCount": 67,
        "defaultTargetPrevalence": 0.5,
    },
    "metadata": {"version": "toy-1", "date_created": "2026-01-15"},
    "disclaimer": {"en": "Decision support only."},
}


def toy_document() -> Dict[str, Any]:
    return copy.deepcopy(TOY_DOCUMENT)


# =============================================================================
# Complete artifact
# =============================================================================

COMPLETE_TERMS = [INTERCEPT, "xTRUE", "yTRUE", "months"]

COMPLETE_COEFFICIENTS = {INTERCEPT: 1.2, "xTRUE": 0.9, "yTRUE": -0.4, "months": 0.05}

# Symmetric and diagonally dominant, so every principal submatrix is PSD
COMPLETE_COVARIANCE = {
    INTERCEPT: {INTERCEPT: 0.20, "xTRUE": -0.05, "yTRUE": -0.04, "months": -0.0005},
    "xTRUE": {INTERCEPT: -0.05, "xTRUE": 0.10, "yTRUE": 0.01, "months": 0.0002},
    "yTRUE": {INTERCEPT: -0.04, "xTRUE": 0.01, "yTRUE": 0.12, "months": 0.0001},
    "months": {INTERCEPT: -0.0005, "xTRUE": 0.0002, "yTRUE": 0.0001, "months": 0.004},
}

COMPLETE_VARIABLES = [
    {"id": "x", "valueType": "boolean"},
    {"id": "y", "valueType": "boolean"},
    {"id": "months", "valueType": "numeric", "min": 0, "max": 120, "step": 1},
]

TERM_OF = {"x": "xTRUE", "y": "yTRUE", "months": "months"}


def complete_document() -> Dict[str, Any]:
    models = {}
    ids = [v["id"] for v in COMPLETE_VARIABLES]
    for size in range(1, len(ids) + 1):
        for combo in combinations(ids, size):
            terms = [INTERCEPT] + [TERM_OF[v] for v in combo]
            models["_".join(combo)] = {
                "variables": list(combo),
                "coefficients": {t: COMPLETE_COEFFICIENTS[t] for t in terms},
                "coefficientCovariance": {
                    r: {c: COMPLETE_COVARIANCE[r][c] for c in terms} for r in terms
                },
                "sampleSize": 133,
                "nPositive": 113,
                "nNegative": 20,
                "auc": 0.6 + 0.05 * size,
                "converged": True,
                "representativeIntervalWidth": 0.3,
            }
    return {
        "variables": copy.deepcopy(COMPLETE_VARIABLES),
        "models": models,
        "prevalenceInfo": {
            "trainingPrevalence": 0.85,
            "defaultTargetPrevalence": 0.25,
        },
        "metadata": {"version": "complete-1"},
        "disclaimer": None,
    }


# =============================================================================
# Snake-case export
# =============================================================================

def snake_case_document() -> Dict[str, Any]:
    """The toy artifact as written by the fitting script."""
    toy = toy_document()
    variables = [
        {"id": "a", "type": "boolean", "label_en": "Indicator A", "label_fr": "Indicateur A",
         "description_en": "First indicator", "importance": 1},
        {"id": "b", "type": "boolean", "label_en": "Indicator B", "importance": 2},
        {"id": "c", "type": "boolean", "label_en": "Indicator C", "importance": 3},
    ]
    models = {}
    for name, model in toy["models"].items():
        exported = {
            "variables": model["variables"][0] if len(model["variables"]) == 1 else model["variables"],
            "coefficients": model["coefficients"],
            "coefficient_se": model.get("coefficientStandardErrors", {}),
            "n_obs": model["sampleSize"],
            "n_abuse": model.get("nPositive"),
            "n_control": model.get("nNegative"),
            "auc": model["auc"],
            "converged": True,
            "typical_ci_width": model["representativeIntervalWidth"],
            "df_residual": model.get("residualDegreesOfFreedom"),
        }
        if "coefficientCovariance" in model:
            exported["coefficient_vcov"] = model["coefficientCovariance"]
        if "decisionThreshold" in model:
            exported["youden_threshold"] = model["decisionThreshold"]
            exported["youden_sensitivity"] = model["sensitivityAtThreshold"]
            exported["youden_specificity"] = model["specificityAtThreshold"]
        models[name] = exported

    return {
        "model_type": "multiple_logistic_regression",
        "description": "Multiple logistic regression models for different variable subsets",
        "variables": variables,
        "models": models,
        "prevalence_info": {
            "sample_prevalence": 0.5,
            "sample_n": 133,
            "sample_n_abuse": 66,
            "sample_n_control": 67,
            "default_target_prevalence": 0.5,
        },
        "metadata": {"version": "4.1"},
        "disclaimer": {"fr": "Aide à la décision.", "en": "Decision support only."},
    }
