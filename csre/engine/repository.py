"""
Model Repository
================

Loads the fitted-model artifact once and indexes its models by variable
subset signature.

Features:
    - Artifact loading from a JSON file or an in-memory document
    - Structural validation before any request is served
    - Lookup by exact signature (order independent) or by model name
    - Coverage report of variable subsets with no fitted model

Usage:
    from csre.engine.repository import ModelRepository

    repository = ModelRepository.from_path("model.json")
    model = repository.lookup({"violence", "depression"})

Author: CSRE Team
Version: 1.0.0
"""

import json
from itertools import combinations
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Iterable, Iterator, List, Optional, Union

from pydantic import ValidationError

from csre.engine.artifact import ArtifactDocument, ValidatedArtifact, validate_artifact
from csre.engine.errors import ArtifactLoadFailure, MalformedArtifact
from csre.engine.models import FittedModel, PrevalenceInfo
from csre.engine.variables import VariableRegistry
from csre.logging import get_logger


logger = get_logger(__name__)


def signature_of(variable_ids: Iterable[str]) -> FrozenSet[str]:
    """Order-independent signature of a variable subset."""
    return frozenset(variable_ids)


class ModelRepository:
    """
    Read-only index of the fitted models in one artifact.

    The repository is built once at startup; no method mutates it, so it
    can be shared by concurrent inference calls without locking.

    Example:
        repository = ModelRepository.from_document(json.load(f))
        print(len(repository), repository.is_complete)
    """

    def __init__(
        self,
        registry: VariableRegistry,
        models: Iterable[FittedModel],
        prevalence: PrevalenceInfo,
        metadata: Optional[Dict[str, Any]] = None,
        disclaimer: Any = None,
    ):
        """
        Initialize the repository from validated engine types.

        Args:
            registry: Variable universe
            models: Fitted models, one per signature
            prevalence: Training and default target prevalence
            metadata: Descriptive artifact metadata
            disclaimer: Descriptive artifact disclaimer
        """
        by_signature: Dict[FrozenSet[str], FittedModel] = {}
        by_name: Dict[str, FittedModel] = {}
        for model in models:
            if model.signature in by_signature:
                raise MalformedArtifact([
                    f"models '{by_signature[model.signature].name}' and "
                    f"'{model.name}' share a variable set"
                ])
            by_signature[model.signature] = model
            by_name[model.name] = model

        self.registry = registry
        self.prevalence = prevalence
        self.metadata = MappingProxyType(dict(metadata or {}))
        self.disclaimer = disclaimer
        self._by_signature = MappingProxyType(by_signature)
        self._by_name = MappingProxyType(by_name)

    # =========================================================================
    # Construction
    # =========================================================================

    @classmethod
    def from_validated(cls, artifact: ValidatedArtifact) -> "ModelRepository":
        return cls(
            registry=artifact.registry,
            models=artifact.models,
            prevalence=artifact.prevalence,
            metadata=artifact.metadata,
            disclaimer=artifact.disclaimer,
        )

    @classmethod
    def from_document(
        cls,
        document: Dict[str, Any],
        covariance_tolerance: float = 1e-8,
    ) -> "ModelRepository":
        """
        Build a repository from a decoded artifact document.

        Raises:
            MalformedArtifact: If the document fails schema or invariant checks
        """
        try:
            parsed = ArtifactDocument.model_validate(document)
        except ValidationError as e:
            raise MalformedArtifact([
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
                for err in e.errors()
            ]) from e

        repository = cls.from_validated(
            validate_artifact(parsed, covariance_tolerance=covariance_tolerance)
        )
        logger.info(
            "artifact_loaded",
            variables=len(repository.registry),
            models=len(repository),
            version=repository.version,
            complete=repository.is_complete,
        )
        return repository

    @classmethod
    def from_path(
        cls,
        path: Union[str, Path],
        covariance_tolerance: float = 1e-8,
    ) -> "ModelRepository":
        """
        Load and validate an artifact from a JSON file.

        Raises:
            ArtifactLoadFailure: If the file cannot be read or decoded
            MalformedArtifact: If the decoded document is invalid
        """
        artifact_path = Path(path)
        try:
            with open(artifact_path, "r", encoding="utf-8") as f:
                document = json.load(f)
        except OSError as e:
            raise ArtifactLoadFailure(f"Cannot read artifact {artifact_path}: {e}") from e
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ArtifactLoadFailure(f"Cannot parse artifact {artifact_path}: {e}") from e

        if not isinstance(document, dict):
            raise ArtifactLoadFailure(
                f"Artifact {artifact_path} is not a JSON object"
            )

        logger.debug("artifact_read", path=str(artifact_path))
        return cls.from_document(document, covariance_tolerance=covariance_tolerance)

    # =========================================================================
    # Lookup
    # =========================================================================

    def __len__(self) -> int:
        return len(self._by_signature)

    def __iter__(self) -> Iterator[FittedModel]:
        return iter(self._by_name.values())

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def get(self, name: str) -> Optional[FittedModel]:
        """Get a model by its artifact name."""
        return self._by_name.get(name)

    def lookup(self, variable_ids: Iterable[str]) -> Optional[FittedModel]:
        """Get the model fitted on exactly these variables, if any."""
        return self._by_signature.get(signature_of(variable_ids))

    @property
    def version(self) -> Optional[str]:
        version = self.metadata.get("version")
        return str(version) if version is not None else None

    # =========================================================================
    # Coverage
    # =========================================================================

    def missing_signatures(self) -> List[FrozenSet[str]]:
        """
        List every non-empty variable subset that has no fitted model.

        Ordered by subset size, then by registry order.
        """
        ids = self.registry.ids
        missing = []
        for size in range(1, len(ids) + 1):
            for combo in combinations(ids, size):
                signature = frozenset(combo)
                if signature not in self._by_signature:
                    missing.append(signature)
        return missing

    @property
    def is_complete(self) -> bool:
        return not self.missing_signatures()
