"""
Configuration Tests
===================

Author: CSRE Team
Version: 1.0.0
"""

import pytest
from pydantic import ValidationError

from csre.config import Settings


class TestSettings:
    """Tests for environment-driven settings."""

    def test_defaults(self):
        settings = Settings(_env_file=None)

        assert settings.artifact_path == "model.json"
        assert settings.confidence_level == 0.95
        assert settings.require_complete_coverage is False

    def test_environment_prefix(self, monkeypatch):
        monkeypatch.setenv("CSRE_ARTIFACT_PATH", "/srv/models/current.json")
        monkeypatch.setenv("CSRE_REQUIRE_COMPLETE_COVERAGE", "true")

        settings = Settings(_env_file=None)

        assert settings.artifact_path == "/srv/models/current.json"
        assert settings.require_complete_coverage is True

    @pytest.mark.parametrize("level", [0.0, 1.0])
    def test_confidence_level_bounds(self, level):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, confidence_level=level)
