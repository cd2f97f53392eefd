"""
Evaluation Metrics Recorder
===========================

Records per-record evaluation metrics to Prometheus.

Metrics:
- evaluation_records_total{outcome}: emitted, dropped, suppressed, recovered, propagated
- evaluation_stage_failures_total{stage, error_code}
- evaluation_latency_seconds: wall time per record
"""

import logging
from typing import Optional

from src.core.monitoring import LATENCY_BUCKETS_FAST, MetricRegistry

logger = logging.getLogger(__name__)


class EvaluationMetrics:
    """Thin wrapper over MetricRegistry with the evaluation metric names."""

    def __init__(self, enabled: bool = True):
        self.registry = MetricRegistry(enabled=enabled)
        self.registry.register(
            "records",
            "counter",
            "evaluation_records_total",
            "Records processed by the evaluation operator",
            ["outcome"],
        )
        self.registry.register(
            "stage_failures",
            "counter",
            "evaluation_stage_failures_total",
            "Evaluation pipeline stage failures",
            ["stage", "error_code"],
        )
        self.registry.register(
            "latency",
            "histogram",
            "evaluation_latency_seconds",
            "Per-record evaluation latency in seconds",
            [],
            buckets=LATENCY_BUCKETS_FAST,
        )

    @property
    def enabled(self) -> bool:
        return self.registry.enabled

    def record_outcome(self, outcome: str, latency_seconds: float):
        self.registry.inc("records", outcome=outcome)
        self.registry.observe("latency", latency_seconds)

    def record_failure(self, stage: str, error: Optional[Exception]):
        if error is None:
            return
        code = getattr(error, "error_code", type(error).__name__)
        self.registry.inc("stage_failures", stage=stage, error_code=code)
