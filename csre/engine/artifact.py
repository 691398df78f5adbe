"""
Model Artifact Schema
=====================

Pydantic schema for the fitted-model artifact document, and the validation
pass that turns a parsed document into engine types.

The artifact is produced offline by the model-fitting script. Field names
are accepted both in camelCase (``coefficientCovariance``) and in the
fitting script's snake_case export (``coefficient_vcov``).

Validation never patches a broken artifact: every problem found is
collected and reported through a single MalformedArtifact.

Author: CSRE Team
Version: 1.0.0
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Set, Tuple

import numpy as np
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from csre.engine.models import FittedModel, PrevalenceInfo
from csre.engine.variables import (
    INTERCEPT_TERM,
    ClinicalVariable,
    ValueType,
    VariableRegistry,
)
from csre.engine.errors import MalformedArtifact


def _alias(*names: str) -> AliasChoices:
    return AliasChoices(*names)


# =============================================================================
# Document Schema
# =============================================================================

class VariableSpec(BaseModel):
    """One entry of the artifact's ``variables`` list."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str
    value_type: ValueType = Field(validation_alias=_alias("valueType", "value_type", "type"))
    labels: Dict[str, str] = Field(default_factory=dict)
    descriptions: Dict[str, str] = Field(default_factory=dict)
    importance: Optional[int] = None
    min: Optional[float] = None
    max: Optional[float] = None
    step: Optional[float] = None

    def display_text(self) -> Tuple[Dict[str, str], Dict[str, str]]:
        """
        Merge nested label/description maps with flat per-language keys.

        The fitting script exports ``label_fr``, ``label_en``,
        ``description_fr``... as flat fields.
        """
        labels = dict(self.labels)
        descriptions = dict(self.descriptions)
        for key, value in (self.model_extra or {}).items():
            if not isinstance(value, str):
                continue
            if key.startswith("label_"):
                labels.setdefault(key[len("label_"):], value)
            elif key.startswith("description_"):
                descriptions.setdefault(key[len("description_"):], value)
        return labels, descriptions


class ModelSpec(BaseModel):
    """One entry of the artifact's ``models`` mapping."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    variables: List[str]
    coefficients: Dict[str, float]
    coefficient_standard_errors: Dict[str, float] = Field(
        default_factory=dict,
        validation_alias=_alias("coefficientStandardErrors", "coefficient_standard_errors", "coefficient_se"),
    )
    coefficient_covariance: Optional[Dict[str, Dict[str, float]]] = Field(
        default=None,
        validation_alias=_alias("coefficientCovariance", "coefficient_covariance", "coefficient_vcov"),
    )
    sample_size: Optional[int] = Field(
        default=None, validation_alias=_alias("sampleSize", "sample_size", "n_obs")
    )
    n_positive: Optional[int] = Field(
        default=None, validation_alias=_alias("nPositive", "n_positive", "n_abuse")
    )
    n_negative: Optional[int] = Field(
        default=None, validation_alias=_alias("nNegative", "n_negative", "n_control")
    )
    auc: Optional[float] = None
    converged: bool = True
    representative_interval_width: Optional[float] = Field(
        default=None,
        validation_alias=_alias("representativeIntervalWidth", "representative_interval_width", "typical_ci_width"),
    )
    residual_degrees_of_freedom: Optional[float] = Field(
        default=None,
        validation_alias=_alias("residualDegreesOfFreedom", "residual_degrees_of_freedom", "df_residual"),
    )
    decision_threshold: Optional[float] = Field(
        default=None,
        validation_alias=_alias("decisionThreshold", "decision_threshold", "youden_threshold"),
    )
    sensitivity_at_threshold: Optional[float] = Field(
        default=None,
        validation_alias=_alias("sensitivityAtThreshold", "sensitivity_at_threshold", "youden_sensitivity"),
    )
    specificity_at_threshold: Optional[float] = Field(
        default=None,
        validation_alias=_alias("specificityAtThreshold", "specificity_at_threshold", "youden_specificity"),
    )

    @field_validator("variables", mode="before")
    @classmethod
    def _scalar_to_list(cls, value: Any) -> Any:
        # single-variable models may be exported as a bare string
        if isinstance(value, str):
            return [value]
        return value


class PrevalenceSpec(BaseModel):
    """The artifact's ``prevalenceInfo`` block."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    training_prevalence: float = Field(
        validation_alias=_alias("trainingPrevalence", "training_prevalence", "sample_prevalence")
    )
    training_sample_size: Optional[int] = Field(
        default=None, validation_alias=_alias("trainingSampleSize", "training_sample_size", "sample_n")
    )
    training_positive_count: Optional[int] = Field(
        default=None,
        validation_alias=_alias("trainingPositiveCount", "training_positive_count", "sample_n_abuse"),
    )
    training_negative_count: Optional[int] = Field(
        default=None,
        validation_alias=_alias("trainingNegativeCount", "training_negative_count", "sample_n_control"),
    )
    default_target_prevalence: Optional[float] = Field(
        default=None,
        validation_alias=_alias("defaultTargetPrevalence", "default_target_prevalence"),
    )


class ArtifactDocument(BaseModel):
    """Top-level artifact document."""

    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
        protected_namespaces=(),
    )

    variables: List[VariableSpec]
    models: Dict[str, ModelSpec]
    prevalence_info: PrevalenceSpec = Field(
        validation_alias=_alias("prevalenceInfo", "prevalence_info")
    )
    metadata: Dict[str, Any] = Field(default_factory=dict)
    disclaimer: Any = None
    model_type: Optional[str] = None
    description: Optional[str] = None


# =============================================================================
# Validation
# =============================================================================

@dataclass(frozen=True)
class ValidatedArtifact:
    """Engine-ready contents of an artifact that passed validation."""
    registry: VariableRegistry
    models: Tuple[FittedModel, ...]
    prevalence: PrevalenceInfo
    metadata: Dict[str, Any]
    disclaimer: Any


def _in_open_unit_interval(value: Optional[float]) -> bool:
    return value is not None and math.isfinite(value) and 0.0 < value < 1.0


def _build_registry(document: ArtifactDocument, problems: List[str]) -> Optional[VariableRegistry]:
    if not document.variables:
        problems.append("artifact declares no variables")
        return None

    variables = []
    for spec in document.variables:
        labels, descriptions = spec.display_text()
        if spec.value_type is ValueType.NUMERIC and (
            spec.min is not None and spec.max is not None and spec.min > spec.max
        ):
            problems.append(f"variable '{spec.id}': min {spec.min} exceeds max {spec.max}")
        variables.append(ClinicalVariable(
            id=spec.id,
            value_type=spec.value_type,
            labels=labels,
            descriptions=descriptions,
            importance=spec.importance,
            minimum=spec.min,
            maximum=spec.max,
            step=spec.step,
        ))

    try:
        return VariableRegistry(variables)
    except MalformedArtifact as e:
        problems.extend(e.problems)
        return None


def _check_covariance(
    name: str,
    terms: Tuple[str, ...],
    covariance: Dict[str, Dict[str, float]],
    tolerance: float,
    problems: List[str],
) -> Optional[np.ndarray]:
    term_set = set(terms)
    if set(covariance) != term_set:
        problems.append(
            f"model '{name}': covariance rows {sorted(covariance)} "
            f"do not match coefficient terms {sorted(term_set)}"
        )
        return None

    for row_term, row in covariance.items():
        if set(row) != term_set:
            problems.append(
                f"model '{name}': covariance row '{row_term}' columns "
                f"{sorted(row)} do not match coefficient terms"
            )
            return None

    matrix = np.array(
        [[covariance[r][c] for c in terms] for r in terms],
        dtype=float,
    )
    if not np.all(np.isfinite(matrix)):
        problems.append(f"model '{name}': covariance contains non-finite entries")
        return None
    if not np.allclose(matrix, matrix.T, rtol=0.0, atol=tolerance):
        problems.append(f"model '{name}': covariance matrix is not symmetric")
        return None
    return matrix


def _build_model(
    name: str,
    spec: ModelSpec,
    registry: VariableRegistry,
    tolerance: float,
    problems: List[str],
) -> Optional[FittedModel]:
    if not spec.variables:
        problems.append(f"model '{name}': empty variable set")
        return None

    if len(set(spec.variables)) != len(spec.variables):
        problems.append(f"model '{name}': variable list has duplicates")
        return None

    missing = registry.unknown(spec.variables)
    if missing:
        problems.append(
            f"model '{name}': references unregistered variables {sorted(missing)}"
        )
        return None

    expected_terms: Set[str] = {INTERCEPT_TERM}
    expected_terms.update(registry[v].term_name for v in spec.variables)
    terms = tuple(spec.coefficients)
    if set(terms) != expected_terms:
        problems.append(
            f"model '{name}': coefficient terms {sorted(terms)} "
            f"expected {sorted(expected_terms)}"
        )
        return None

    coefficients = np.array([spec.coefficients[t] for t in terms], dtype=float)
    if not np.all(np.isfinite(coefficients)):
        problems.append(f"model '{name}': coefficients contain non-finite values")
        return None

    width = spec.representative_interval_width
    if width is not None and not (math.isfinite(width) and 0.0 <= width <= 1.0):
        problems.append(
            f"model '{name}': representative interval width {width!r} outside [0, 1]"
        )
        return None

    covariance = None
    if spec.coefficient_covariance is not None:
        covariance = _check_covariance(
            name, terms, spec.coefficient_covariance, tolerance, problems
        )
        if covariance is None:
            return None

    if covariance is None and spec.representative_interval_width is None:
        problems.append(
            f"model '{name}': neither covariance nor representative interval width"
        )
        return None

    return FittedModel(
        name=name,
        variable_set=frozenset(spec.variables),
        terms=terms,
        coefficients=coefficients,
        covariance=covariance,
        standard_errors=dict(spec.coefficient_standard_errors),
        sample_size=spec.sample_size,
        n_positive=spec.n_positive,
        n_negative=spec.n_negative,
        auc=spec.auc,
        converged=spec.converged,
        representative_interval_width=spec.representative_interval_width,
        residual_degrees_of_freedom=spec.residual_degrees_of_freedom,
        decision_threshold=spec.decision_threshold,
        sensitivity_at_threshold=spec.sensitivity_at_threshold,
        specificity_at_threshold=spec.specificity_at_threshold,
    )


def validate_artifact(
    document: ArtifactDocument,
    covariance_tolerance: float = 1e-8,
) -> ValidatedArtifact:
    """
    Check every structural invariant of a parsed artifact.

    Args:
        document: Parsed artifact document
        covariance_tolerance: Absolute tolerance for symmetry checks

    Returns:
        ValidatedArtifact ready for the repository

    Raises:
        MalformedArtifact: Listing every problem found
    """
    problems: List[str] = []

    info = document.prevalence_info
    if not _in_open_unit_interval(info.training_prevalence):
        problems.append(
            f"training prevalence {info.training_prevalence!r} outside (0, 1)"
        )
    default_target = info.default_target_prevalence
    if default_target is None:
        default_target = info.training_prevalence
    elif not _in_open_unit_interval(default_target):
        problems.append(
            f"default target prevalence {default_target!r} outside (0, 1)"
        )

    registry = _build_registry(document, problems)
    if registry is None:
        raise MalformedArtifact(problems)

    if not document.models:
        problems.append("artifact declares no models")

    models: List[FittedModel] = []
    seen: Dict[frozenset, str] = {}
    for name, spec in document.models.items():
        model = _build_model(name, spec, registry, covariance_tolerance, problems)
        if model is None:
            continue
        previous = seen.get(model.signature)
        if previous is not None:
            problems.append(
                f"models '{previous}' and '{name}' share the variable set "
                f"{sorted(model.signature)}"
            )
            continue
        seen[model.signature] = name
        models.append(model)

    if problems:
        raise MalformedArtifact(problems)

    return ValidatedArtifact(
        registry=registry,
        models=tuple(models),
        prevalence=PrevalenceInfo(
            training_prevalence=info.training_prevalence,
            default_target_prevalence=default_target,
            training_sample_size=info.training_sample_size,
            training_positive_count=info.training_positive_count,
            training_negative_count=info.training_negative_count,
        ),
        metadata=dict(document.metadata),
        disclaimer=document.disclaimer,
    )
