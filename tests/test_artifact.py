"""
Artifact Tests
==============

Unit tests for artifact parsing, validation and loading.

Author: CSRE Team
Version: 1.0.0
"""

import json

import numpy as np
import pytest

from csre.engine.errors import ArtifactLoadFailure, MalformedArtifact
from csre.engine.repository import ModelRepository
from csre.engine.variables import INTERCEPT_TERM, ValueType

from fixtures import diagonal_covariance


class TestArtifactParsing:
    """Tests for accepted artifact layouts."""

    def test_camel_case_document(self, toy_artifact):
        """Test the camelCase layout loads every model."""
        repository = ModelRepository.from_document(toy_artifact)

        assert len(repository) == 3
        assert repository.registry.ids == ("a", "b", "c")
        assert repository.prevalence.training_prevalence == 0.5
        assert repository.version == "toy-1"

    def test_snake_case_export(self, snake_case_artifact):
        """Test the fitting script's export layout."""
        repository = ModelRepository.from_document(snake_case_artifact)

        model = repository.get("a_b")
        assert model.has_covariance
        assert model.sample_size == 120
        assert model.decision_threshold == 0.55
        assert model.representative_interval_width == 0.31
        assert repository.prevalence.training_sample_size == 133
        assert repository.version == "4.1"

    def test_single_variable_exported_as_string(self, snake_case_artifact):
        """Test a bare string variable list is read as one variable."""
        repository = ModelRepository.from_document(snake_case_artifact)

        assert repository.get("a").variable_set == frozenset({"a"})

    def test_flat_labels_merged(self, snake_case_artifact):
        """Test label_xx and description_xx keys become label maps."""
        repository = ModelRepository.from_document(snake_case_artifact)
        variable = repository.registry["a"]

        assert variable.label("fr") == "Indicateur A"
        assert variable.descriptions["en"] == "First indicator"
        assert variable.importance == 1

    def test_label_falls_back_to_id(self, toy_repository):
        """Test a variable without labels displays its identifier."""
        assert toy_repository.registry["c"].label("en") == "c"

    def test_term_names(self, complete_repository):
        """Test boolean and numeric term naming."""
        registry = complete_repository.registry

        assert registry["x"].value_type is ValueType.BOOLEAN
        assert registry["x"].term_name == "xTRUE"
        assert registry["months"].term_name == "months"
        assert registry.by_term("months").id == "months"

    def test_default_target_falls_back_to_training(self, toy_artifact):
        """Test a missing default target uses the training prevalence."""
        del toy_artifact["prevalenceInfo"]["defaultTargetPrevalence"]
        toy_artifact["prevalenceInfo"]["trainingPrevalence"] = 0.4

        repository = ModelRepository.from_document(toy_artifact)

        assert repository.prevalence.default_target_prevalence == 0.4

    def test_terms_follow_coefficient_order(self, toy_repository):
        """Test coefficient vector and covariance align with the terms."""
        model = toy_repository.get("a_b")

        assert model.terms == (INTERCEPT_TERM, "aTRUE", "bTRUE")
        assert model.coefficient("bTRUE") == 1.0
        assert model.intercept == -2.0
        assert model.covariance.shape == (3, 3)
        assert model.coefficient("cTRUE") is None

    def test_model_arrays_read_only(self, toy_repository):
        """Test loaded models cannot be mutated in place."""
        model = toy_repository.get("a_b")

        with pytest.raises(ValueError):
            model.coefficients[0] = 10.0
        with pytest.raises(ValueError):
            model.covariance[0, 0] = 10.0


class TestArtifactValidation:
    """Tests for structural invariant checks."""

    def _problems(self, document):
        with pytest.raises(MalformedArtifact) as exc_info:
            ModelRepository.from_document(document)
        return exc_info.value.problems

    def test_asymmetric_covariance(self, toy_artifact):
        """Test an asymmetric covariance matrix is rejected."""
        toy_artifact["models"]["a_b"]["coefficientCovariance"][INTERCEPT_TERM]["aTRUE"] = 0.01

        problems = self._problems(toy_artifact)

        assert any("not symmetric" in p for p in problems)

    def test_symmetry_tolerance(self, toy_artifact):
        """Test rounding-level asymmetry is accepted."""
        toy_artifact["models"]["a_b"]["coefficientCovariance"][INTERCEPT_TERM]["aTRUE"] = 1e-12

        repository = ModelRepository.from_document(toy_artifact)

        assert repository.get("a_b").has_covariance

    def test_covariance_terms_mismatch(self, toy_artifact):
        """Test covariance rows must match the coefficient terms."""
        toy_artifact["models"]["a_b"]["coefficientCovariance"] = diagonal_covariance(
            [INTERCEPT_TERM, "aTRUE"], 0.04
        )

        problems = self._problems(toy_artifact)

        assert any("covariance rows" in p for p in problems)

    def test_missing_coefficient_term(self, toy_artifact):
        """Test every model variable needs its coefficient."""
        del toy_artifact["models"]["a_b"]["coefficients"]["bTRUE"]
        del toy_artifact["models"]["a_b"]["coefficientCovariance"]

        problems = self._problems(toy_artifact)

        assert any("coefficient terms" in p for p in problems)

    def test_unregistered_variable(self, toy_artifact):
        """Test models may only use registered variables."""
        toy_artifact["models"]["d"] = {
            "variables": ["d"],
            "coefficients": {INTERCEPT_TERM: 0.0, "dTRUE": 1.0},
            "representativeIntervalWidth": 0.2,
        }

        problems = self._problems(toy_artifact)

        assert any("unregistered" in p for p in problems)

    def test_duplicate_signature(self, toy_artifact):
        """Test two models may not share a variable set."""
        toy_artifact["models"]["b_a"] = json.loads(json.dumps(toy_artifact["models"]["a_b"]))
        toy_artifact["models"]["b_a"]["variables"] = ["b", "a"]

        problems = self._problems(toy_artifact)

        assert any("share the variable set" in p for p in problems)

    def test_duplicate_variable_id(self, toy_artifact):
        """Test variable identifiers are unique."""
        toy_artifact["variables"].append({"id": "a", "valueType": "boolean"})

        problems = self._problems(toy_artifact)

        assert problems == ["duplicate variable id 'a'"]

    @pytest.mark.parametrize("prevalence", [0.0, 1.0, -0.2, 1.5])
    def test_training_prevalence_bounds(self, toy_artifact, prevalence):
        """Test the training prevalence must lie strictly inside (0, 1)."""
        toy_artifact["prevalenceInfo"]["trainingPrevalence"] = prevalence

        problems = self._problems(toy_artifact)

        assert any("training prevalence" in p for p in problems)

    def test_no_interval_source(self, toy_artifact):
        """Test a model needs a covariance matrix or a representative width."""
        del toy_artifact["models"]["b"]["representativeIntervalWidth"]

        problems = self._problems(toy_artifact)

        assert any("neither covariance" in p for p in problems)

    @pytest.mark.parametrize("width", [float("nan"), float("inf"), -0.3, 1.5])
    def test_invalid_representative_width(self, toy_artifact, width):
        """Test the stored interval width must be a finite probability span."""
        toy_artifact["models"]["b"]["representativeIntervalWidth"] = width

        problems = self._problems(toy_artifact)

        assert any("representative interval width" in p for p in problems)

    def test_invalid_width_rejected_from_file(self, tmp_path, toy_artifact):
        """Test a NaN width written by json.dump is caught at load time."""
        toy_artifact["models"]["b"]["representativeIntervalWidth"] = float("nan")
        path = tmp_path / "model.json"
        path.write_text(json.dumps(toy_artifact), encoding="utf-8")

        with pytest.raises(MalformedArtifact):
            ModelRepository.from_path(path)

    def test_non_finite_coefficient(self, toy_artifact):
        """Test NaN coefficients are rejected."""
        toy_artifact["models"]["b"]["coefficients"]["bTRUE"] = float("nan")

        problems = self._problems(toy_artifact)

        assert any("non-finite" in p for p in problems)

    def test_numeric_bounds(self, complete_artifact):
        """Test numeric variables need min <= max."""
        complete_artifact["variables"][2]["min"] = 200

        problems = self._problems(complete_artifact)

        assert any("exceeds max" in p for p in problems)

    def test_schema_error_reported(self, toy_artifact):
        """Test schema failures surface as MalformedArtifact."""
        del toy_artifact["models"]["a"]["coefficients"]

        problems = self._problems(toy_artifact)

        assert any("coefficients" in p for p in problems)

    def test_all_problems_collected(self, toy_artifact):
        """Test one validation pass reports every broken model."""
        toy_artifact["models"]["a"]["coefficients"]["aTRUE"] = float("inf")
        del toy_artifact["models"]["b"]["representativeIntervalWidth"]

        problems = self._problems(toy_artifact)

        assert len(problems) == 2


class TestArtifactLoading:
    """Tests for reading artifacts from disk."""

    def test_from_path(self, artifact_file):
        """Test a valid file loads."""
        repository = ModelRepository.from_path(artifact_file)

        assert len(repository) == 3
        np.testing.assert_allclose(repository.get("a").coefficients, [-1.0, 0.8])

    def test_missing_file(self, tmp_path):
        """Test an unreadable file is a load failure."""
        with pytest.raises(ArtifactLoadFailure):
            ModelRepository.from_path(tmp_path / "absent.json")

    def test_invalid_json(self, tmp_path):
        """Test undecodable content is a load failure."""
        path = tmp_path / "model.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(ArtifactLoadFailure):
            ModelRepository.from_path(path)

    def test_invalid_utf8(self, tmp_path):
        """Test undecodable bytes are a load failure."""
        path = tmp_path / "model.json"
        path.write_bytes(b'{"variables": "\xff\xfe"}')

        with pytest.raises(ArtifactLoadFailure):
            ModelRepository.from_path(path)

    def test_non_object_json(self, tmp_path):
        """Test a JSON array is not an artifact."""
        path = tmp_path / "model.json"
        path.write_text("[]", encoding="utf-8")

        with pytest.raises(ArtifactLoadFailure):
            ModelRepository.from_path(path)
