"""
Core Monitoring Module
======================

Prometheus helpers shared across components.

Usage:
    from src.core.monitoring import (
        get_or_create_counter,
        get_or_create_histogram,
        MetricRegistry,
    )
"""

from src.core.monitoring.metrics import (
    PROMETHEUS_ENABLED,
    get_or_create_counter,
    get_or_create_histogram,
    LATENCY_BUCKETS_FAST,
    MetricRegistry,
)

__all__ = [
    "PROMETHEUS_ENABLED",
    "get_or_create_counter",
    "get_or_create_histogram",
    "LATENCY_BUCKETS_FAST",
    "MetricRegistry",
]
