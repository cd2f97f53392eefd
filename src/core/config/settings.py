"""
Unified Configuration for the Streaming Evaluation Operator

Centralized, type-safe configuration using Pydantic Settings.
All environment variables are loaded once and validated.

Usage:
    from src.core.config import settings

    # Access infrastructure settings
    tracking_uri = settings.infra.mlflow_tracking_uri

    # Access evaluation settings
    source = settings.evaluation.model_source
    handling = settings.evaluation.exception_handling
"""

from functools import lru_cache
from typing import List, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Allowed strategy names per policy kind
EXCEPTION_HANDLING_CHOICES = ("log", "propagate")
PREPARATION_ERROR_CHOICES = ("propagate", "substitute", "drop")
RESULT_EXTRACTION_CHOICES = ("targets", "outputs", "targets_and_outputs")
MISSING_VALUE_CHOICES = ("propagate", "substitute", "drop")


def _normalize_choice(value: str, choices: tuple, kind: str) -> str:
    key = str(value).strip().lower().replace("-", "_")
    if key not in choices:
        raise ValueError(f"{kind} must be one of {list(choices)}, got {value!r}")
    return key


# =============================================================================
# INFRASTRUCTURE SETTINGS
# =============================================================================

class InfraSettings(BaseSettings):
    """Core infrastructure configuration."""

    # MLflow
    mlflow_tracking_uri: Optional[str] = None

    # Prometheus
    prometheus_metrics: bool = True

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


# =============================================================================
# EVALUATION SETTINGS
# =============================================================================

class EvaluationSettings(BaseSettings):
    """Evaluation operator configuration (EVAL_ prefix)."""

    # === Model ===
    model_source: str = ""
    # Comma-separated; empty means the first signature output
    target_fields: str = ""

    # === Strategies ===
    exception_handling: str = "log"
    preparation_error: str = "propagate"
    result_extraction: str = "targets_and_outputs"
    missing_value: str = "propagate"

    # === Logging context ===
    record_id_field: Optional[str] = None

    # === Metrics ===
    metrics_enabled: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="EVAL_",
        extra="ignore",
        protected_namespaces=("settings_",),
    )

    @field_validator("exception_handling")
    @classmethod
    def _check_exception_handling(cls, v: str) -> str:
        return _normalize_choice(v, EXCEPTION_HANDLING_CHOICES, "exception_handling")

    @field_validator("preparation_error")
    @classmethod
    def _check_preparation_error(cls, v: str) -> str:
        return _normalize_choice(v, PREPARATION_ERROR_CHOICES, "preparation_error")

    @field_validator("result_extraction")
    @classmethod
    def _check_result_extraction(cls, v: str) -> str:
        return _normalize_choice(v, RESULT_EXTRACTION_CHOICES, "result_extraction")

    @field_validator("missing_value")
    @classmethod
    def _check_missing_value(cls, v: str) -> str:
        return _normalize_choice(v, MISSING_VALUE_CHOICES, "missing_value")

    @property
    def target_field_list(self) -> List[str]:
        return [f.strip() for f in self.target_fields.split(",") if f.strip()]


# =============================================================================
# UNIFIED SETTINGS
# =============================================================================

class Settings:
    """
    Unified settings container providing access to all configuration.

    Usage:
        from src.core.config import settings

        tracking_uri = settings.infra.mlflow_tracking_uri
        model_source = settings.evaluation.model_source
    """

    def __init__(self):
        self._infra: Optional[InfraSettings] = None
        self._evaluation: Optional[EvaluationSettings] = None

    @property
    def infra(self) -> InfraSettings:
        if self._infra is None:
            self._infra = InfraSettings()
        return self._infra

    @property
    def evaluation(self) -> EvaluationSettings:
        if self._evaluation is None:
            self._evaluation = EvaluationSettings()
        return self._evaluation

    def reload(self):
        """Drop cached settings so the next access re-reads the environment."""
        self._infra = None
        self._evaluation = None


# Singleton instance
settings = Settings()


@lru_cache()
def get_settings() -> Settings:
    """Get the shared settings container."""
    return settings
