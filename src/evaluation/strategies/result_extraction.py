"""
Result Extraction Strategies
============================

Select which part of the evaluator's output becomes the emitted record.

Variants:
- TargetsOnly: the model's declared target field(s)
- OutputsOnly: the derived output field(s)
- TargetsAndOutputs: both (default)
- CustomProjection: an explicit field list or a callable

Extraction is a pure function of the EvaluationResult; it never looks at the
input record.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Iterable, List, Sequence, Union

from src.evaluation.errors import ExtractionError
from src.evaluation.models.evaluator import EvaluationResult


def _project(result: EvaluationResult, names: Iterable[str]) -> Dict[str, Any]:
    names = list(names)
    absent = [n for n in names if n not in result.values]
    if absent:
        raise ExtractionError(absent, available=list(result.values))
    return {n: result.values[n] for n in names}


class ResultExtractionStrategy(ABC):
    """Builds the output record from an evaluation result."""

    name: str = "custom"

    @abstractmethod
    def extract(self, result: EvaluationResult) -> Dict[str, Any]:
        """Raises ExtractionError if a requested field is absent."""
        pass


class TargetsOnly(ResultExtractionStrategy):
    name = "targets"

    def extract(self, result: EvaluationResult) -> Dict[str, Any]:
        return _project(result, result.target_fields)


class OutputsOnly(ResultExtractionStrategy):
    name = "outputs"

    def extract(self, result: EvaluationResult) -> Dict[str, Any]:
        return _project(result, result.output_fields)


class TargetsAndOutputs(ResultExtractionStrategy):
    name = "targets_and_outputs"

    def extract(self, result: EvaluationResult) -> Dict[str, Any]:
        names: List[str] = list(result.target_fields)
        names.extend(n for n in result.output_fields if n not in names)
        return _project(result, names)


class CustomProjection(ResultExtractionStrategy):
    """
    Caller-supplied projection.

    Accepts either a list of field names to pick from the result, or a
    callable taking the EvaluationResult and returning the output record.
    """

    def __init__(self, projection: Union[Sequence[str], Callable[[EvaluationResult], Dict[str, Any]]]):
        if isinstance(projection, str):
            projection = [projection]
        self.projection = projection

    def extract(self, result: EvaluationResult) -> Dict[str, Any]:
        if callable(self.projection):
            return dict(self.projection(result))
        return _project(result, self.projection)
