"""
Model Evaluators
================

Interface between the evaluation pipeline and the model engine.

The pipeline only needs four things from a model: its declared input fields,
its target fields, its derived output fields, and an evaluate() call.
MLflowModelEvaluator adapts an MLflow pyfunc model to that interface.
"""

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence, runtime_checkable

import numpy as np
import pandas as pd

from src.evaluation.fields import FieldDefinition

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EvaluationResult:
    """Read-only output of one model evaluation."""
    values: Mapping[str, Any]
    target_fields: List[str] = field(default_factory=list)
    output_fields: List[str] = field(default_factory=list)

    def __post_init__(self):
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))


@runtime_checkable
class ModelEvaluator(Protocol):
    """
    Protocol for model evaluators.

    Implementations:
        - MLflowModelEvaluator: MLflow pyfunc models
        - Test stubs and other engines
    """

    @property
    def input_fields(self) -> Sequence[FieldDefinition]:
        ...

    @property
    def target_fields(self) -> List[str]:
        ...

    @property
    def output_fields(self) -> List[str]:
        ...

    def evaluate(self, prepared: Dict[str, Any]) -> Dict[str, Any]:
        """Score a fully prepared input. May raise on malformed model input."""
        ...


def _to_python(value: Any) -> Any:
    """Convert numpy scalars to plain Python values."""
    if isinstance(value, np.generic):
        return value.item()
    return value


class MLflowModelEvaluator:
    """
    Evaluates records against an MLflow pyfunc model.

    Builds a one-row DataFrame in declared input order, calls predict(), and
    maps the prediction onto the declared target and output names.
    """

    def __init__(
        self,
        model: Any,
        input_fields: Sequence[FieldDefinition],
        target_fields: Sequence[str],
        output_fields: Optional[Sequence[str]] = None,
        model_source: Optional[str] = None,
    ):
        self.model = model
        self._input_fields = list(input_fields)
        self._target_fields = list(target_fields)
        self._output_fields = list(output_fields or [])
        self.model_source = model_source

    @property
    def input_fields(self) -> Sequence[FieldDefinition]:
        return self._input_fields

    @property
    def target_fields(self) -> List[str]:
        return self._target_fields

    @property
    def output_fields(self) -> List[str]:
        return self._output_fields

    @property
    def result_fields(self) -> List[str]:
        return self._target_fields + [n for n in self._output_fields if n not in self._target_fields]

    def _build_frame(self, prepared: Dict[str, Any]) -> pd.DataFrame:
        columns = [f.name for f in self._input_fields if f.name in prepared]
        return pd.DataFrame([[prepared[c] for c in columns]], columns=columns)

    def _map_prediction(self, prediction: Any) -> Dict[str, Any]:
        if isinstance(prediction, pd.DataFrame):
            row = prediction.iloc[0].to_dict()
            if len(prediction.columns) == 1 and prediction.columns[0] not in self.result_fields:
                # Unnamed single column (e.g. 0) maps to the primary target
                return {self.result_fields[0]: _to_python(next(iter(row.values())))}
            return {str(k): _to_python(v) for k, v in row.items()}

        if isinstance(prediction, pd.Series):
            prediction = prediction.to_numpy()

        first = np.asarray(prediction)[0] if not np.isscalar(prediction) else prediction
        if np.ndim(first) == 0:
            return {self.result_fields[0]: _to_python(first)}

        values = [_to_python(v) for v in np.asarray(first).ravel()]
        if len(values) != len(self.result_fields):
            raise ValueError(
                f"Prediction has {len(values)} values, expected {len(self.result_fields)} "
                f"for {self.result_fields}"
            )
        return dict(zip(self.result_fields, values))

    def evaluate(self, prepared: Dict[str, Any]) -> Dict[str, Any]:
        frame = self._build_frame(prepared)
        prediction = self.model.predict(frame)
        return self._map_prediction(prediction)

    def __repr__(self) -> str:
        return (
            f"MLflowModelEvaluator(source={self.model_source!r}, "
            f"inputs={len(self._input_fields)}, targets={self._target_fields})"
        )
