"""
Engine Errors and Outcomes
==========================

Typed failures raised by the inference engine, plus the two non-exceptional
outcomes callers are expected to branch on.

Fatal kinds (exceptions, all derived from EngineError):
    - ArtifactLoadFailure: artifact could not be read or parsed
    - MalformedArtifact: artifact parsed but violates structural invariants
    - InvalidPrevalence: a prevalence outside the open interval (0, 1)
    - InvalidConfidenceLevel: a confidence level outside (0, 1)
    - UnknownVariableError: request names a variable the registry lacks
    - NoModelMatchError: no model covers the supplied variable set

Outcome values (returned, never raised):
    - EmptyRequest: nothing was supplied, so there is nothing to infer
    - NoModelMatch: selector result when no exact signature match exists

Author: CSRE Team
Version: 1.0.0
"""

from dataclasses import dataclass
from typing import FrozenSet, List, Optional


class EngineError(Exception):
    """Base exception for inference engine errors."""

    kind = "engine_error"


class ArtifactLoadFailure(EngineError):
    """Raised when the model artifact cannot be obtained or parsed."""

    kind = "artifact_load_failure"


class MalformedArtifact(EngineError):
    """
    Raised when the artifact violates a structural invariant.

    Carries every problem found so one validation pass reports them all.
    """

    kind = "malformed_artifact"

    def __init__(self, problems: List[str]):
        self.problems = list(problems)
        summary = "; ".join(self.problems[:5])
        if len(self.problems) > 5:
            summary += f" (+{len(self.problems) - 5} more)"
        super().__init__(f"Malformed model artifact: {summary}")


class InvalidPrevalence(EngineError, ValueError):
    """Raised when a prevalence is not strictly inside (0, 1)."""

    kind = "invalid_prevalence"

    def __init__(self, name: str, value: float):
        self.name = name
        self.value = value
        super().__init__(
            f"{name} must lie strictly between 0 and 1, got {value!r}"
        )


class InvalidConfidenceLevel(EngineError, ValueError):
    """Raised when a confidence level is not strictly inside (0, 1)."""

    kind = "invalid_confidence_level"

    def __init__(self, value: float):
        self.value = value
        super().__init__(
            f"confidence level must lie strictly between 0 and 1, got {value!r}"
        )


class UnknownVariableError(EngineError, KeyError):
    """Raised when a request refers to variables outside the registry."""

    kind = "unknown_variable"

    def __init__(self, variable_ids: List[str]):
        self.variable_ids = sorted(variable_ids)
        super().__init__(f"Unknown variables: {', '.join(self.variable_ids)}")

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return self.args[0]


@dataclass(frozen=True)
class NoModelMatch:
    """Selector outcome: no fitted model has exactly this variable set."""
    signature: FrozenSet[str]

    def describe(self) -> str:
        return ", ".join(sorted(self.signature))


class NoModelMatchError(EngineError):
    """
    Raised by the orchestrator when selection yields NoModelMatch.

    Signals artifact incompleteness for this variable combination; it is
    not user-correctable and is never retried.
    """

    kind = "no_model_match"

    def __init__(self, outcome: NoModelMatch):
        self.outcome = outcome
        super().__init__(
            f"No model fitted on exactly the supplied variables: {outcome.describe()}"
        )


@dataclass(frozen=True)
class EmptyRequest:
    """Inference outcome when no variable value was supplied."""
    reason: str = "no variables supplied"
    target_prevalence: Optional[float] = None
