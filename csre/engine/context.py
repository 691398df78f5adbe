"""
Engine Context
==============

Immutable bundle of everything the engine needs to serve requests, built
once at startup from the model artifact and passed explicitly to callers.

Usage:
    from csre.engine.context import load_engine

    engine = load_engine("model.json")
    outcome = engine.orchestrator.infer_values({"violence": True})

Author: CSRE Team
Version: 1.0.0
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from csre.config import Settings, get_settings
from csre.engine.errors import MalformedArtifact
from csre.engine.orchestrator import InferenceOrchestrator
from csre.engine.repository import ModelRepository
from csre.engine.variables import VariableRegistry
from csre.logging import get_logger


logger = get_logger(__name__)


@dataclass(frozen=True)
class EngineContext:
    """Loaded artifact plus the orchestrator serving it."""
    repository: ModelRepository
    orchestrator: InferenceOrchestrator

    @property
    def registry(self) -> VariableRegistry:
        return self.repository.registry

    @classmethod
    def from_repository(
        cls,
        repository: ModelRepository,
        confidence_level: float = 0.95,
        require_complete_coverage: bool = False,
    ) -> "EngineContext":
        """
        Wrap a repository, checking subset coverage first.

        Raises:
            MalformedArtifact: If coverage is incomplete and required
        """
        missing = repository.missing_signatures()
        if missing:
            if require_complete_coverage:
                raise MalformedArtifact([
                    f"no model for variables {sorted(signature)}"
                    for signature in missing
                ])
            logger.warning(
                "incomplete_model_coverage",
                missing=len(missing),
                models=len(repository),
            )

        return cls(
            repository=repository,
            orchestrator=InferenceOrchestrator(repository, confidence_level=confidence_level),
        )


def load_engine(
    artifact_path: Optional[Union[str, Path]] = None,
    settings: Optional[Settings] = None,
) -> EngineContext:
    """
    Load the artifact and build the engine context.

    Args:
        artifact_path: Artifact location (defaults to settings.artifact_path)
        settings: Settings to use (defaults to the cached settings)

    Raises:
        ArtifactLoadFailure: If the artifact cannot be read or decoded
        MalformedArtifact: If the artifact fails validation
    """
    settings = settings or get_settings()
    path = artifact_path or settings.artifact_path

    repository = ModelRepository.from_path(
        path,
        covariance_tolerance=settings.covariance_symmetry_tolerance,
    )
    return EngineContext.from_repository(
        repository,
        confidence_level=settings.confidence_level,
        require_complete_coverage=settings.require_complete_coverage,
    )
