"""
Unit tests for core.config.settings module.
"""

import pytest
from pydantic import ValidationError

from src.core.config import EvaluationSettings, InfraSettings, Settings, get_settings, settings


class TestEvaluationSettings:
    """Tests for EVAL_* configuration."""

    def test_defaults(self):
        config = EvaluationSettings()

        assert config.model_source == ""
        assert config.exception_handling == "log"
        assert config.preparation_error == "propagate"
        assert config.result_extraction == "targets_and_outputs"
        assert config.missing_value == "propagate"
        assert config.record_id_field is None
        assert config.target_field_list == []

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("EVAL_MODEL_SOURCE", "models:/risk/Production")
        monkeypatch.setenv("EVAL_EXCEPTION_HANDLING", "PROPAGATE")
        monkeypatch.setenv("EVAL_RESULT_EXTRACTION", "targets-and-outputs")
        monkeypatch.setenv("EVAL_TARGET_FIELDS", "risk, segment")

        config = EvaluationSettings()

        assert config.model_source == "models:/risk/Production"
        assert config.exception_handling == "propagate"
        assert config.result_extraction == "targets_and_outputs"
        assert config.target_field_list == ["risk", "segment"]

    def test_invalid_strategy_name(self):
        with pytest.raises(ValidationError, match="missing_value must be one of"):
            EvaluationSettings(missing_value="impute")


class TestInfraSettings:
    """Tests for infrastructure configuration."""

    def test_tracking_uri_from_environment(self):
        assert InfraSettings().mlflow_tracking_uri == "http://localhost:5000"

    def test_prometheus_flag_from_environment(self):
        assert InfraSettings().prometheus_metrics is False


class TestSettingsContainer:
    """Tests for the lazy Settings container."""

    def test_lazy_and_cached(self):
        container = Settings()

        assert container.evaluation is container.evaluation
        assert container.infra is container.infra

    def test_reload_rereads_environment(self, monkeypatch):
        container = Settings()
        assert container.evaluation.missing_value == "propagate"

        monkeypatch.setenv("EVAL_MISSING_VALUE", "drop")
        container.reload()

        assert container.evaluation.missing_value == "drop"

    def test_get_settings_returns_singleton(self):
        assert get_settings() is settings
