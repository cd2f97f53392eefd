"""
Core Infrastructure Module
==========================

Shared infrastructure used by the evaluation operator.

This module provides:
- Configuration management (config/)
- Monitoring helpers (monitoring/)

Usage:
    from src.core.config import settings, EvaluationSettings
    from src.core.monitoring import MetricRegistry
"""

from src.core.config import settings, InfraSettings, EvaluationSettings

__all__ = [
    "settings",
    "InfraSettings",
    "EvaluationSettings",
]
