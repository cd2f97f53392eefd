"""
Core Configuration Module
=========================

Centralized, type-safe configuration using Pydantic Settings.

Usage:
    from src.core.config import settings

    model_source = settings.evaluation.model_source
"""

from src.core.config.settings import (
    Settings,
    settings,
    get_settings,
    InfraSettings,
    EvaluationSettings,
    EXCEPTION_HANDLING_CHOICES,
    PREPARATION_ERROR_CHOICES,
    RESULT_EXTRACTION_CHOICES,
    MISSING_VALUE_CHOICES,
)

__all__ = [
    "Settings",
    "settings",
    "get_settings",
    "InfraSettings",
    "EvaluationSettings",
    "EXCEPTION_HANDLING_CHOICES",
    "PREPARATION_ERROR_CHOICES",
    "RESULT_EXTRACTION_CHOICES",
    "MISSING_VALUE_CHOICES",
]
