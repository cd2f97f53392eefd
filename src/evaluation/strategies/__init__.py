"""
Evaluation Strategies
=====================

Pluggable policies of the evaluation pipeline, one module per policy kind.

Each kind has a closed set of named variants that can be selected by
configuration name, plus custom variants passed as instances.

Usage:
    from src.evaluation.strategies import resolve_strategies

    strategies = resolve_strategies(missing_value="substitute")
"""

from dataclasses import dataclass
from typing import Dict, Type, TypeVar, Union

from src.evaluation.strategies.base import Resolution, ResolutionKind
from src.evaluation.strategies.exception_handling import (
    CustomExceptionHandler,
    ExceptionHandlingStrategy,
    HandlingDecision,
    LogAndSuppress,
    PipelineFailure,
    PropagateExceptions,
)
from src.evaluation.strategies.missing_value import (
    DropMissingValues,
    MissingValueStrategy,
    PropagateMissingValues,
    SubstituteDefaults,
)
from src.evaluation.strategies.preparation_error import (
    DropInvalidRecords,
    PreparationErrorStrategy,
    PropagatePreparationErrors,
    SubstituteInvalidValues,
)
from src.evaluation.strategies.result_extraction import (
    CustomProjection,
    OutputsOnly,
    ResultExtractionStrategy,
    TargetsAndOutputs,
    TargetsOnly,
)

T = TypeVar("T")

EXCEPTION_HANDLING_STRATEGIES: Dict[str, Type[ExceptionHandlingStrategy]] = {
    "log": LogAndSuppress,
    "propagate": PropagateExceptions,
}

PREPARATION_ERROR_STRATEGIES: Dict[str, Type[PreparationErrorStrategy]] = {
    "propagate": PropagatePreparationErrors,
    "substitute": SubstituteInvalidValues,
    "drop": DropInvalidRecords,
}

RESULT_EXTRACTION_STRATEGIES: Dict[str, Type[ResultExtractionStrategy]] = {
    "targets": TargetsOnly,
    "outputs": OutputsOnly,
    "targets_and_outputs": TargetsAndOutputs,
}

MISSING_VALUE_STRATEGIES: Dict[str, Type[MissingValueStrategy]] = {
    "propagate": PropagateMissingValues,
    "substitute": SubstituteDefaults,
    "drop": DropMissingValues,
}


def _build(kind: str, value: Union[str, T, None], registry: Dict[str, Type[T]], default: str) -> T:
    if value is None:
        value = default
    if isinstance(value, str):
        key = value.strip().lower().replace("-", "_")
        if key not in registry:
            raise ValueError(
                f"Unknown {kind} strategy {value!r}; expected one of {sorted(registry)}"
            )
        return registry[key]()
    return value


@dataclass(frozen=True)
class StrategySet:
    """The four strategies configured for one pipeline."""
    exception_handling: ExceptionHandlingStrategy
    preparation_error: PreparationErrorStrategy
    result_extraction: ResultExtractionStrategy
    missing_value: MissingValueStrategy


def resolve_strategies(
    exception_handling: Union[str, ExceptionHandlingStrategy, None] = None,
    preparation_error: Union[str, PreparationErrorStrategy, None] = None,
    result_extraction: Union[str, ResultExtractionStrategy, None] = None,
    missing_value: Union[str, MissingValueStrategy, None] = None,
) -> StrategySet:
    """Build a StrategySet from names or instances; None selects the default."""
    return StrategySet(
        exception_handling=_build("exception handling", exception_handling, EXCEPTION_HANDLING_STRATEGIES, "log"),
        preparation_error=_build("preparation error", preparation_error, PREPARATION_ERROR_STRATEGIES, "propagate"),
        result_extraction=_build(
            "result extraction", result_extraction, RESULT_EXTRACTION_STRATEGIES, "targets_and_outputs"
        ),
        missing_value=_build("missing value", missing_value, MISSING_VALUE_STRATEGIES, "propagate"),
    )


__all__ = [
    "Resolution",
    "ResolutionKind",
    "StrategySet",
    "resolve_strategies",
    # Exception handling
    "ExceptionHandlingStrategy",
    "LogAndSuppress",
    "PropagateExceptions",
    "CustomExceptionHandler",
    "HandlingDecision",
    "PipelineFailure",
    # Preparation error
    "PreparationErrorStrategy",
    "PropagatePreparationErrors",
    "SubstituteInvalidValues",
    "DropInvalidRecords",
    # Result extraction
    "ResultExtractionStrategy",
    "TargetsOnly",
    "OutputsOnly",
    "TargetsAndOutputs",
    "CustomProjection",
    # Missing value
    "MissingValueStrategy",
    "PropagateMissingValues",
    "SubstituteDefaults",
    "DropMissingValues",
]
