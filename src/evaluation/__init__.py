"""
Streaming Model Evaluation
==========================

Scores streaming records against a model with pluggable failure policies.

Submodules:
    fields: Field value normalizer
    strategies: Missing value, preparation error, result extraction and
        exception handling strategies
    models: Evaluator protocol and MLflow model loading
    pipeline: Per-record evaluation coordinator
    operator: Streaming operator with start/process/stop lifecycle
    runtime: In-process collector and stream runner

Usage:
    from src.evaluation import EvaluationOperator, run_stream

    operator = EvaluationOperator(
        "models:/credit-risk/Production",
        exception_handling="log",
        missing_value="substitute",
    )
    for output in run_stream(operator, records):
        ...
"""

from src.evaluation.errors import (
    EvaluationPipelineError,
    MissingFieldError,
    PreparationError,
    EvaluationError,
    ExtractionError,
    ModelLoadError,
)
from src.evaluation.fields import FieldDefinition, FieldType, normalize
from src.evaluation.pipeline import EvaluationPipeline, OutcomeStatus, PipelineOutcome, Stage
from src.evaluation.operator import EvaluationOperator
from src.evaluation.runtime import Collector, ListCollector, run_stream

__all__ = [
    "EvaluationPipelineError",
    "MissingFieldError",
    "PreparationError",
    "EvaluationError",
    "ExtractionError",
    "ModelLoadError",
    "FieldDefinition",
    "FieldType",
    "normalize",
    "EvaluationPipeline",
    "OutcomeStatus",
    "PipelineOutcome",
    "Stage",
    "EvaluationOperator",
    "Collector",
    "ListCollector",
    "run_stream",
]
