"""
Core Monitoring Metrics
=======================

Prometheus metrics utilities.

This module provides:
1. Safe metric creation helpers (avoid duplicate registration errors)
2. Standard buckets
3. MetricRegistry class for component-specific metrics

Usage:
    from src.core.monitoring import (
        get_or_create_counter,
        get_or_create_histogram,
        MetricRegistry,
    )
"""

import logging
import os
from typing import Any, Dict, List, Optional

from prometheus_client import REGISTRY, Counter, Histogram

logger = logging.getLogger(__name__)

PROMETHEUS_ENABLED = os.getenv("PROMETHEUS_METRICS", "true").lower() == "true"


# =============================================================================
# SAFE METRIC CREATION HELPERS
# =============================================================================

def get_or_create_counter(
    name: str,
    description: str,
    labelnames: List[str],
) -> Optional[Counter]:
    """
    Get existing counter or create new one.
    Safely handles duplicate registration errors from Prometheus.
    """
    if not PROMETHEUS_ENABLED:
        return None
    try:
        return Counter(name, description, labelnames)
    except ValueError:
        # Counters register both "<name>" and "<name>_total"
        return REGISTRY._names_to_collectors.get(name) or REGISTRY._names_to_collectors.get(f"{name}_total")


def get_or_create_histogram(
    name: str,
    description: str,
    labelnames: List[str],
    buckets: Optional[List[float]] = None,
) -> Optional[Histogram]:
    """
    Get existing histogram or create new one.
    Safely handles duplicate registration errors from Prometheus.
    """
    if not PROMETHEUS_ENABLED:
        return None
    try:
        if buckets:
            return Histogram(name, description, labelnames, buckets=buckets)
        return Histogram(name, description, labelnames)
    except ValueError:
        return REGISTRY._names_to_collectors.get(name)


# =============================================================================
# STANDARD BUCKETS
# =============================================================================

# Latency buckets (in seconds)
LATENCY_BUCKETS_FAST = [0.0005, 0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0]


# =============================================================================
# METRIC REGISTRY CLASS
# =============================================================================

class MetricRegistry:
    """
    Registry for Prometheus metrics.
    Provides a unified interface for metric operations.

    Metric failures are logged and never raised to the caller.

    Usage:
        registry = MetricRegistry()
        registry.register("records", "counter", "records_total", "Total records", ["outcome"])
        registry.inc("records", outcome="emitted")
    """

    def __init__(self, enabled: bool = True):
        self.enabled = enabled and PROMETHEUS_ENABLED
        self._metrics: Dict[str, Any] = {}

    def register(
        self,
        key: str,
        metric_type: str,
        name: str,
        description: str,
        labels: List[str] = None,
        buckets: List[float] = None,
    ):
        """Register a new metric."""
        if not self.enabled:
            return

        if metric_type == "counter":
            self._metrics[key] = get_or_create_counter(name, description, labels or [])
        elif metric_type == "histogram":
            self._metrics[key] = get_or_create_histogram(name, description, labels or [], buckets=buckets)
        else:
            raise ValueError(f"Unsupported metric type: {metric_type}")

    def get(self, key: str):
        """Get metric by key, returns None if not available."""
        return self._metrics.get(key)

    def inc(self, key: str, value: float = 1, **labels):
        """Increment counter."""
        m = self.get(key)
        if m is None:
            return
        try:
            if labels:
                m.labels(**labels).inc(value)
            else:
                m.inc(value)
        except Exception as e:
            logger.debug(f"Failed to increment {key}: {e}")

    def observe(self, key: str, value: float, **labels):
        """Observe histogram value."""
        m = self.get(key)
        if m is None:
            return
        try:
            if labels:
                m.labels(**labels).observe(value)
            else:
                m.observe(value)
        except Exception as e:
            logger.debug(f"Failed to observe {key}: {e}")
