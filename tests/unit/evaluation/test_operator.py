"""
Unit tests for evaluation.operator and evaluation.runtime modules.

Tests the operator lifecycle (lazy evaluator construction), the documented
end-to-end scenarios, order preservation, and suppress-vs-abort behavior.
"""

import logging
import pickle
from unittest.mock import MagicMock

import pytest

from src.core.config import EvaluationSettings, InfraSettings
from src.evaluation.errors import EvaluationError, ModelLoadError
from src.evaluation.models.model_loader import ModelLoader
from src.evaluation.operator import EvaluationOperator
from src.evaluation.pipeline import OutcomeStatus
from src.evaluation.runtime import Collector, ListCollector, run_stream
from src.evaluation.strategies import (
    CustomExceptionHandler,
    LogAndSuppress,
    PropagateExceptions,
    PropagatePreparationErrors,
    SubstituteDefaults,
    TargetsAndOutputs,
)


class TestLifecycle:
    """Tests for start/stop and evaluator construction timing."""

    def test_evaluator_not_built_at_construction(self, stub_loader):
        operator = EvaluationOperator("models:/risk/Production", model_loader=stub_loader)

        assert operator.is_started is False
        assert operator.evaluator is None
        assert stub_loader.loaded_sources == []

    def test_start_builds_evaluator_once(self, stub_loader, stub_evaluator):
        operator = EvaluationOperator("models:/risk/Production", model_loader=stub_loader)
        operator.start()
        operator.start()

        assert operator.is_started is True
        assert operator.evaluator is stub_evaluator
        assert stub_loader.loaded_sources == ["models:/risk/Production"]

    def test_first_record_starts_operator(self, stub_loader, sample_record):
        operator = EvaluationOperator("models:/risk/Production", model_loader=stub_loader)
        operator.process_one(sample_record)
        operator.process_one(sample_record)

        assert stub_loader.loaded_sources == ["models:/risk/Production"]

    def test_stop_releases_evaluator(self, stub_loader):
        operator = EvaluationOperator("models:/risk/Production", model_loader=stub_loader)
        operator.start()
        operator.stop()

        assert operator.evaluator is None
        assert operator.is_started is False

    def test_model_load_error_propagates(self, make_loader):
        loader = make_loader(raises=ModelLoadError("bad://model", "not found"))
        operator = EvaluationOperator("bad://model", model_loader=loader)

        with pytest.raises(ModelLoadError):
            operator.start()
        assert operator.is_started is False

    def test_unexpected_loader_error_becomes_model_load_error(self, make_loader):
        operator = EvaluationOperator("x", model_loader=make_loader(raises=OSError("disk")))

        with pytest.raises(ModelLoadError) as exc_info:
            operator.start()

        assert exc_info.value.model_source == "x"
        assert isinstance(exc_info.value.__cause__, OSError)

    def test_default_strategies(self):
        operator = EvaluationOperator("models:/risk/Production")

        assert isinstance(operator.exception_handling_strategy, LogAndSuppress)
        assert isinstance(operator.preparation_error_strategy, PropagatePreparationErrors)
        assert isinstance(operator.result_extraction_strategy, TargetsAndOutputs)
        assert operator.missing_value_strategy.name == "propagate"


class TestSerialization:
    """The evaluator handle never travels with the operator."""

    def test_pickle_drops_evaluator(self):
        operator = EvaluationOperator("models:/risk/Production", missing_value="substitute")
        operator._evaluator = lambda: None  # unpicklable on purpose
        operator._pipeline = lambda: None

        restored = pickle.loads(pickle.dumps(operator))

        assert restored.model_source == "models:/risk/Production"
        assert restored.evaluator is None
        assert restored.is_started is False
        assert isinstance(restored.missing_value_strategy, SubstituteDefaults)


class TestScenarios:
    """End-to-end behavior of the documented scenarios."""

    def test_complete_record_emits_targets_and_outputs(self, stub_loader):
        operator = EvaluationOperator("models:/risk/Production", model_loader=stub_loader)

        assert operator.process_one({"age": 34, "income": 50000}) == {"risk": "low", "score": 0.12}

    def test_missing_field_is_logged_and_suppressed(self, stub_loader, caplog):
        handler = LogAndSuppress()
        operator = EvaluationOperator(
            "models:/risk/Production", model_loader=stub_loader, exception_handling=handler
        )

        with caplog.at_level(logging.WARNING):
            output = operator.process_one({"income": 50000})

        assert output is None
        assert handler.suppressed_count == 1
        assert len([r for r in caplog.records if "Record suppressed" in r.getMessage()]) == 1

    def test_propagate_terminates_stream(self, make_evaluator, make_loader):
        evaluator = make_evaluator(raises=ValueError("malformed model input"))
        operator = EvaluationOperator(
            "models:/risk/Production",
            model_loader=make_loader(evaluator),
            exception_handling=PropagateExceptions(),
        )
        records = [{"age": 1, "income": 2.0}, {"age": 3, "income": 4.0}]

        seen = []
        with pytest.raises(EvaluationError):
            for output in run_stream(operator, records):
                seen.append(output)

        assert seen == []
        assert len(evaluator.calls) == 1
        assert operator.is_started is False

    def test_suppress_keeps_stream_alive(self, make_evaluator, make_loader):
        evaluator = make_evaluator(raises=ValueError("malformed model input"))
        operator = EvaluationOperator("models:/risk/Production", model_loader=make_loader(evaluator))

        outputs = list(run_stream(operator, [{"age": 1, "income": 2.0}, {"age": 3, "income": 4.0}]))

        assert outputs == []
        assert len(evaluator.calls) == 2


class TestStreaming:
    """Order preservation and collector behavior."""

    @pytest.fixture
    def echo_loader(self, make_evaluator, make_loader):
        evaluator = make_evaluator()
        evaluator.evaluate = lambda prepared: {"risk": f"r{prepared['age']}", "score": prepared["income"]}
        return make_loader(evaluator)

    def test_order_preserved_with_drops(self, echo_loader):
        operator = EvaluationOperator("m", model_loader=echo_loader)
        records = [
            {"age": 1, "income": 10},
            {"income": 20},
            {"age": 3, "income": 30},
            {"age": "bad", "income": 40},
            {"age": 5, "income": 50},
        ]

        outputs = list(run_stream(operator, records))

        assert [o["risk"] for o in outputs] == ["r1", "r3", "r5"]

    def test_flat_map_collects_at_most_one(self, echo_loader):
        operator = EvaluationOperator("m", model_loader=echo_loader)
        collector = ListCollector()

        operator.flat_map({"age": 1, "income": 10}, collector)
        operator.flat_map({"income": 10}, collector)

        assert isinstance(collector, Collector)
        assert len(collector) == 1
        assert collector.records[0] == {"risk": "r1", "score": 10.0}

    def test_recovered_record_is_collected(self, stub_loader):
        operator = EvaluationOperator(
            "m",
            model_loader=stub_loader,
            exception_handling=CustomExceptionHandler(lambda failure: {"risk": "unknown"}),
        )
        collector = ListCollector()

        operator.flat_map({"income": 10}, collector)

        assert collector.records == [{"risk": "unknown"}]

    def test_collector_failure_is_suppressed_by_default(self, stub_loader, sample_record):
        handler = LogAndSuppress()
        operator = EvaluationOperator("m", model_loader=stub_loader, exception_handling=handler)
        collector = MagicMock()
        collector.collect.side_effect = RuntimeError("sink unavailable")

        operator.flat_map(sample_record, collector)

        assert handler.suppressed_count == 1

    def test_collector_failure_propagates(self, stub_loader, sample_record):
        operator = EvaluationOperator("m", model_loader=stub_loader, exception_handling="propagate")
        collector = MagicMock()
        collector.collect.side_effect = RuntimeError("sink unavailable")

        with pytest.raises(RuntimeError, match="sink unavailable"):
            operator.flat_map(sample_record, collector)

    def test_collector_failure_fallback_is_collected(self, stub_loader, sample_record):
        seen = []

        def fallback(failure):
            seen.append(failure.stage)
            return {"risk": "unknown"}

        operator = EvaluationOperator(
            "m", model_loader=stub_loader, exception_handling=CustomExceptionHandler(fallback)
        )
        collector = MagicMock()
        collector.collect.side_effect = [RuntimeError("sink unavailable"), None]

        operator.flat_map(sample_record, collector)

        assert seen == ["collecting"]
        assert collector.collect.call_count == 2
        collector.collect.assert_called_with({"risk": "unknown"})

    def test_process_returns_outcome(self, stub_loader):
        operator = EvaluationOperator("m", model_loader=stub_loader, missing_value="drop")

        assert operator.process({"income": 10}).status == OutcomeStatus.DROPPED


class TestFromSettings:
    """Tests for EvaluationOperator.from_settings."""

    def test_builds_from_settings(self):
        evaluation = EvaluationSettings(
            model_source="models:/risk/Staging",
            exception_handling="propagate",
            missing_value="drop",
            target_fields="risk,segment",
            record_id_field="id",
        )
        infra = InfraSettings(mlflow_tracking_uri="http://mlflow:5000", prometheus_metrics=False)

        operator = EvaluationOperator.from_settings(evaluation, infra)

        assert operator.model_source == "models:/risk/Staging"
        assert isinstance(operator.exception_handling_strategy, PropagateExceptions)
        assert operator.missing_value_strategy.name == "drop"
        assert operator.record_id_field == "id"
        assert operator.metrics_enabled is False
        assert isinstance(operator.model_loader, ModelLoader)
        assert operator.model_loader.config.tracking_uri == "http://mlflow:5000"
        assert operator.model_loader.config.target_fields == ["risk", "segment"]

    def test_overrides_win(self, stub_loader):
        evaluation = EvaluationSettings(model_source="m")
        operator = EvaluationOperator.from_settings(
            evaluation, InfraSettings(), model_loader=stub_loader, missing_value=SubstituteDefaults({"age": 1})
        )

        assert operator.model_loader is stub_loader
        assert isinstance(operator.missing_value_strategy, SubstituteDefaults)
