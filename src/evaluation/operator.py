"""
Evaluation Operator
===================

Streaming operator that scores records one at a time against a model.

The operator only stores portable configuration (the model source and the
four strategies). The model evaluator is built in start() on the worker that
will process records, never at construction time, so an operator can be
pickled and shipped to workers without the model itself.

Lifecycle:
    operator = EvaluationOperator("models:/credit-risk/Production")
    operator.start()                      # builds the evaluator
    output = operator.process_one(record) # zero or one output record
    operator.stop()                       # releases the evaluator

Usage with a collector:
    operator.flat_map(record, collector)
"""

import logging
import time
from typing import Any, Dict, Optional, Union

from src.core.config import EvaluationSettings, InfraSettings, settings
from src.evaluation.errors import EvaluationPipelineError, ModelLoadError
from src.evaluation.models.evaluator import ModelEvaluator
from src.evaluation.models.model_loader import ModelLoader, ModelLoaderConfig
from src.evaluation.pipeline import EvaluationPipeline, OutcomeStatus, PipelineOutcome, Stage, StageFailure
from src.evaluation.runtime import Collector
from src.evaluation.strategies import (
    ExceptionHandlingStrategy,
    MissingValueStrategy,
    PreparationErrorStrategy,
    ResultExtractionStrategy,
    StrategySet,
    resolve_strategies,
)
from src.evaluation.telemetry import EvaluationMetrics

logger = logging.getLogger(__name__)


class EvaluationOperator:
    """
    Scores streaming records with configurable failure policies.

    Args:
        model_source: Where to load the model from (e.g. models:/name/stage)
        exception_handling: "log" (default), "propagate", or a strategy instance
        preparation_error: "propagate" (default), "substitute", "drop", or an instance
        result_extraction: "targets_and_outputs" (default), "targets", "outputs", or an instance
        missing_value: "propagate" (default), "substitute", "drop", or an instance
        model_loader: Object with load(model_source) -> ModelEvaluator
        record_id_field: Input field used to identify failing records in logs
        metrics_enabled: Record Prometheus metrics
    """

    def __init__(
        self,
        model_source: str,
        exception_handling: Union[str, ExceptionHandlingStrategy, None] = None,
        preparation_error: Union[str, PreparationErrorStrategy, None] = None,
        result_extraction: Union[str, ResultExtractionStrategy, None] = None,
        missing_value: Union[str, MissingValueStrategy, None] = None,
        model_loader: Optional[Any] = None,
        record_id_field: Optional[str] = None,
        metrics_enabled: bool = True,
    ):
        self.model_source = model_source
        self.strategies: StrategySet = resolve_strategies(
            exception_handling=exception_handling,
            preparation_error=preparation_error,
            result_extraction=result_extraction,
            missing_value=missing_value,
        )
        self.model_loader = model_loader
        self.record_id_field = record_id_field
        self.metrics_enabled = metrics_enabled

        # Built in start() on the execution unit
        self._evaluator: Optional[ModelEvaluator] = None
        self._pipeline: Optional[EvaluationPipeline] = None
        self._metrics: Optional[EvaluationMetrics] = None

    @classmethod
    def from_settings(
        cls,
        evaluation: Optional[EvaluationSettings] = None,
        infra: Optional[InfraSettings] = None,
        **overrides: Any,
    ) -> "EvaluationOperator":
        """
        Build an operator from EVAL_* settings.

        Keyword overrides (e.g. a custom strategy instance) win over settings.
        """
        evaluation = evaluation or settings.evaluation
        infra = infra or settings.infra

        kwargs: Dict[str, Any] = {
            "model_source": evaluation.model_source,
            "exception_handling": evaluation.exception_handling,
            "preparation_error": evaluation.preparation_error,
            "result_extraction": evaluation.result_extraction,
            "missing_value": evaluation.missing_value,
            "record_id_field": evaluation.record_id_field,
            "metrics_enabled": evaluation.metrics_enabled and infra.prometheus_metrics,
            "model_loader": ModelLoader(
                ModelLoaderConfig(
                    tracking_uri=infra.mlflow_tracking_uri,
                    target_fields=evaluation.target_field_list,
                )
            ),
        }
        kwargs.update(overrides)
        return cls(**kwargs)

    # =========================================================================
    # Accessors
    # =========================================================================

    @property
    def exception_handling_strategy(self) -> ExceptionHandlingStrategy:
        return self.strategies.exception_handling

    @property
    def preparation_error_strategy(self) -> PreparationErrorStrategy:
        return self.strategies.preparation_error

    @property
    def result_extraction_strategy(self) -> ResultExtractionStrategy:
        return self.strategies.result_extraction

    @property
    def missing_value_strategy(self) -> MissingValueStrategy:
        return self.strategies.missing_value

    @property
    def evaluator(self) -> Optional[ModelEvaluator]:
        return self._evaluator

    @property
    def is_started(self) -> bool:
        return self._pipeline is not None

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def start(self):
        """
        Build the model evaluator from the model source.

        Raises:
            ModelLoadError: If the model cannot be loaded
        """
        if self.is_started:
            return

        loader = self.model_loader or ModelLoader()
        try:
            evaluator = loader.load(self.model_source)
        except ModelLoadError:
            raise
        except Exception as e:
            raise ModelLoadError(str(self.model_source), str(e)) from e

        self._evaluator = evaluator
        self._pipeline = EvaluationPipeline(evaluator, self.strategies, record_id_field=self.record_id_field)
        self._metrics = EvaluationMetrics(enabled=self.metrics_enabled)
        logger.info(
            f"Evaluation operator started: source={self.model_source}, "
            f"exception_handling={self.strategies.exception_handling.name}, "
            f"preparation_error={self.strategies.preparation_error.name}, "
            f"result_extraction={self.strategies.result_extraction.name}, "
            f"missing_value={self.strategies.missing_value.name}"
        )

    def stop(self):
        """Release the evaluator handle."""
        if not self.is_started:
            return
        self._evaluator = None
        self._pipeline = None
        self._metrics = None
        logger.info(f"Evaluation operator stopped: source={self.model_source}")

    # =========================================================================
    # Processing
    # =========================================================================

    def process(self, record: Dict[str, Any]) -> PipelineOutcome:
        """
        Run one record through the pipeline and return the full outcome.

        Starts the operator on first use if the host never called start().
        Re-raises when the exception handling strategy propagates.
        """
        if not self.is_started:
            self.start()

        start_time = time.time()
        try:
            outcome = self._pipeline.process(record)
        except Exception as e:
            stage = e.stage if isinstance(e, EvaluationPipelineError) and e.stage else "unknown"
            self._metrics.record_failure(stage, e)
            self._metrics.record_outcome("propagated", time.time() - start_time)
            raise

        if outcome.status != OutcomeStatus.EMITTED:
            self._metrics.record_failure(outcome.stage.value, outcome.error)
        self._metrics.record_outcome(outcome.status.value, time.time() - start_time)
        return outcome

    def process_one(self, record: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Process one record; returns the output record or None."""
        return self.process(record).output

    def flat_map(self, record: Dict[str, Any], collector: Collector):
        """
        Process one record and hand at most one output to the collector.

        A collector failure goes to the exception handling strategy like any
        stage failure; a fallback record it returns is collected instead.
        """
        output = self.process_one(record)
        if output is None:
            return

        try:
            collector.collect(output)
        except Exception as e:
            self._metrics.record_failure(Stage.COLLECTING.value, e)
            outcome = self._pipeline.handle_failure(StageFailure(Stage.COLLECTING, e), record)
            if outcome.output is not None:
                collector.collect(outcome.output)

    # =========================================================================
    # Serialization
    # =========================================================================

    def __getstate__(self) -> Dict[str, Any]:
        state = self.__dict__.copy()
        state["_evaluator"] = None
        state["_pipeline"] = None
        state["_metrics"] = None
        return state

    def __setstate__(self, state: Dict[str, Any]):
        self.__dict__.update(state)

    def __repr__(self) -> str:
        return f"EvaluationOperator(source={self.model_source!r}, started={self.is_started})"
