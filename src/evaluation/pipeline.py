"""
Evaluation Pipeline
===================

Per-record evaluation flow:
1. Preparation (normalize raw values to declared field types)
2. Missing value resolution (missing value strategy)
3. Preparation error resolution (preparation error strategy)
4. Model evaluation
5. Result extraction (result extraction strategy)

Any stage failure that is not resolved travels as a StageFailure value to the
exception handling strategy, which decides between suppressing the record,
emitting a fallback record, or re-raising.

Each record runs independently. The evaluator and the strategies are the only
state shared across records and are not modified here.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from src.evaluation.errors import (
    EvaluationError,
    EvaluationPipelineError,
    MissingFieldError,
    PreparationError,
)
from src.evaluation.fields import normalize
from src.evaluation.models.evaluator import EvaluationResult, ModelEvaluator
from src.evaluation.strategies import PipelineFailure, Resolution, StrategySet

logger = logging.getLogger(__name__)


class Stage(str, Enum):
    """Stage a record reached; for failures, the stage that failed."""
    PREPARING = "preparing"
    MISSING_VALUE_CHECK = "missing_value_check"
    EVALUATING = "evaluating"
    EXTRACTING = "extracting"
    COLLECTING = "collecting"
    DONE = "done"


class OutcomeStatus(str, Enum):
    EMITTED = "emitted"
    DROPPED = "dropped"
    SUPPRESSED = "suppressed"
    RECOVERED = "recovered"


@dataclass(frozen=True)
class StageFailure:
    """An unresolved failure and the stage it happened in."""
    stage: Stage
    error: Exception


@dataclass(frozen=True)
class PipelineOutcome:
    """Result of processing one record."""
    status: OutcomeStatus
    stage: Stage
    output: Optional[Dict[str, Any]] = None
    error: Optional[Exception] = None
    reason: Optional[str] = None

    @property
    def emitted(self) -> bool:
        return self.output is not None


class EvaluationPipeline:
    """
    Coordinates the evaluation stages for one record at a time.

    Args:
        evaluator: Model evaluator (declared fields + evaluate)
        strategies: The four configured strategies
        record_id_field: Optional input field used to identify records in logs
    """

    def __init__(
        self,
        evaluator: ModelEvaluator,
        strategies: StrategySet,
        record_id_field: Optional[str] = None,
    ):
        self.evaluator = evaluator
        self.strategies = strategies
        self.record_id_field = record_id_field

    # =========================================================================
    # Stages
    # =========================================================================

    def _apply_resolution(
        self,
        stage: Stage,
        resolution: Resolution,
        names: List[str],
        prepared: Dict[str, Any],
        unresolved_error: EvaluationPipelineError,
    ) -> Union[Dict[str, Any], PipelineOutcome, StageFailure]:
        if resolution.is_dropped:
            return PipelineOutcome(status=OutcomeStatus.DROPPED, stage=stage, reason=resolution.reason)
        if resolution.is_failed:
            return StageFailure(stage, resolution.error)

        absent = [name for name in names if resolution.values.get(name) is None]
        if absent:
            return StageFailure(stage, unresolved_error)

        # Substituted values are normalized like record values
        declared = {f.name: f for f in self.evaluator.input_fields}
        merged = dict(prepared)
        invalid: Dict[str, str] = {}
        for name in names:
            value, error = declared[name].coerce(resolution.values[name])
            if error:
                invalid[name] = f"substituted value {error}"
            else:
                merged[name] = value
        if invalid:
            return StageFailure(Stage.PREPARING, PreparationError(invalid))
        return merged

    def _prepare(self, record: Dict[str, Any]) -> Union[Dict[str, Any], PipelineOutcome, StageFailure]:
        declared = self.evaluator.input_fields

        try:
            normalized = normalize(record, declared)
        except Exception as e:
            return StageFailure(Stage.PREPARING, e)

        prepared = normalized.prepared

        if normalized.has_missing:
            try:
                resolution = self.strategies.missing_value.resolve(list(normalized.missing), record, declared)
            except Exception as e:
                return StageFailure(Stage.MISSING_VALUE_CHECK, e)
            step = self._apply_resolution(
                Stage.MISSING_VALUE_CHECK,
                resolution,
                normalized.missing,
                prepared,
                MissingFieldError(normalized.missing),
            )
            if not isinstance(step, dict):
                return step
            prepared = step

        if normalized.has_invalid:
            error = PreparationError(normalized.invalid)
            try:
                resolution = self.strategies.preparation_error.resolve(error, dict(prepared), declared)
            except Exception as e:
                return StageFailure(Stage.PREPARING, e)
            step = self._apply_resolution(Stage.PREPARING, resolution, error.fields, prepared, error)
            if not isinstance(step, dict):
                return step
            prepared = step

        return prepared

    def _evaluate(self, prepared: Dict[str, Any]) -> Union[EvaluationResult, StageFailure]:
        try:
            values = self.evaluator.evaluate(prepared)
        except EvaluationError as e:
            return StageFailure(Stage.EVALUATING, e)
        except Exception as e:
            return StageFailure(Stage.EVALUATING, EvaluationError(e))

        if not isinstance(values, dict):
            return StageFailure(
                Stage.EVALUATING,
                EvaluationError(TypeError(f"evaluator returned {type(values).__name__}, expected dict")),
            )

        return EvaluationResult(
            values=values,
            target_fields=list(self.evaluator.target_fields),
            output_fields=list(self.evaluator.output_fields),
        )

    def _extract(self, result: EvaluationResult) -> Union[Dict[str, Any], StageFailure]:
        try:
            return dict(self.strategies.result_extraction.extract(result))
        except Exception as e:
            return StageFailure(Stage.EXTRACTING, e)

    def handle_failure(self, failure: StageFailure, record: Dict[str, Any]) -> PipelineOutcome:
        """Ask the exception handling strategy what to do with a failure; re-raises on propagate."""
        decision = self.strategies.exception_handling.handle(
            PipelineFailure(
                error=failure.error,
                stage=failure.stage.value,
                record=record,
                record_id=self._record_id(record),
            )
        )

        if decision.rethrow:
            raise failure.error

        if decision.emit is not None:
            return PipelineOutcome(
                status=OutcomeStatus.RECOVERED,
                stage=failure.stage,
                output=dict(decision.emit),
                error=failure.error,
            )
        return PipelineOutcome(status=OutcomeStatus.SUPPRESSED, stage=failure.stage, error=failure.error)

    def _record_id(self, record: Dict[str, Any]) -> Optional[str]:
        if self.record_id_field and record.get(self.record_id_field) is not None:
            return str(record[self.record_id_field])
        return None

    # =========================================================================
    # Entry point
    # =========================================================================

    def _run(self, record: Dict[str, Any]) -> Union[PipelineOutcome, StageFailure]:
        prepared = self._prepare(record)
        if not isinstance(prepared, dict):
            return prepared

        result = self._evaluate(prepared)
        if isinstance(result, StageFailure):
            return result

        output = self._extract(result)
        if isinstance(output, StageFailure):
            return output

        return PipelineOutcome(status=OutcomeStatus.EMITTED, stage=Stage.DONE, output=output)

    def process(self, record: Dict[str, Any]) -> PipelineOutcome:
        """
        Run one record through the pipeline.

        Returns:
            PipelineOutcome with at most one output record

        Raises:
            Exception: The stage error, when the exception handling strategy
                decides to propagate
        """
        step = self._run(record)

        if isinstance(step, StageFailure):
            return self.handle_failure(step, record)

        if step.status == OutcomeStatus.DROPPED:
            logger.debug(
                f"Record dropped at stage={step.stage.value} (record_id={self._record_id(record)}): {step.reason}"
            )
        return step
