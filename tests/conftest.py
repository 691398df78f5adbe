"""
pytest configuration and fixtures.

Author: CSRE Team
Version: 1.0.0
"""

import json

import pytest

from fixtures import complete_document, snake_case_document, toy_document


@pytest.fixture
def toy_artifact():
    """Toy artifact document (fresh copy per test)."""
    return toy_document()


@pytest.fixture
def complete_artifact():
    """Artifact covering every subset of x, y and months."""
    return complete_document()


@pytest.fixture
def snake_case_artifact():
    """Toy artifact in the fitting script's export format."""
    return snake_case_document()


@pytest.fixture
def toy_repository(toy_artifact):
    from csre.engine.repository import ModelRepository

    return ModelRepository.from_document(toy_artifact)


@pytest.fixture
def complete_repository(complete_artifact):
    from csre.engine.repository import ModelRepository

    return ModelRepository.from_document(complete_artifact)


@pytest.fixture
def toy_orchestrator(toy_repository):
    from csre.engine.orchestrator import InferenceOrchestrator

    return InferenceOrchestrator(toy_repository)


@pytest.fixture
def complete_orchestrator(complete_repository):
    from csre.engine.orchestrator import InferenceOrchestrator

    return InferenceOrchestrator(complete_repository)


@pytest.fixture
def toy_engine(toy_repository):
    from csre.engine.context import EngineContext

    return EngineContext.from_repository(toy_repository)


@pytest.fixture
def complete_engine(complete_repository):
    from csre.engine.context import EngineContext

    return EngineContext.from_repository(complete_repository, require_complete_coverage=True)


@pytest.fixture
def artifact_file(tmp_path, toy_artifact):
    """Toy artifact written to a temporary JSON file."""
    path = tmp_path / "model.json"
    path.write_text(json.dumps(toy_artifact), encoding="utf-8")
    return path
