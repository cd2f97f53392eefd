"""
Shared test fixtures for the streaming evaluation operator.
"""

import os
import sys
from typing import Any, Dict, List, Optional

import pytest

# Add project root to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.evaluation.fields import FieldDefinition, FieldType


# =============================================================================
# ENVIRONMENT SETUP
# =============================================================================

@pytest.fixture(autouse=True)
def mock_environment(monkeypatch):
    """Set up test environment variables."""
    monkeypatch.setenv("MLFLOW_TRACKING_URI", "http://localhost:5000")
    monkeypatch.setenv("PROMETHEUS_METRICS", "false")
    for name in list(os.environ):
        if name.startswith("EVAL_"):
            monkeypatch.delenv(name, raising=False)


# =============================================================================
# STUB EVALUATOR
# =============================================================================

class StubEvaluator:
    """
    Deterministic evaluator for tests.

    Declares inputs {age, income}, target {risk}, output {score} and returns
    a fixed result unless configured to raise.
    """

    def __init__(
        self,
        result: Optional[Dict[str, Any]] = None,
        raises: Optional[Exception] = None,
        input_fields: Optional[List[FieldDefinition]] = None,
        target_fields: Optional[List[str]] = None,
        output_fields: Optional[List[str]] = None,
    ):
        self.result = result if result is not None else {"risk": "low", "score": 0.12}
        self.raises = raises
        self._input_fields = input_fields or [
            FieldDefinition("age", FieldType.INTEGER),
            FieldDefinition("income", FieldType.DOUBLE),
        ]
        self._target_fields = target_fields or ["risk"]
        self._output_fields = output_fields if output_fields is not None else ["score"]
        self.calls: List[Dict[str, Any]] = []

    @property
    def input_fields(self):
        return self._input_fields

    @property
    def target_fields(self):
        return self._target_fields

    @property
    def output_fields(self):
        return self._output_fields

    def evaluate(self, prepared: Dict[str, Any]) -> Dict[str, Any]:
        self.calls.append(dict(prepared))
        if self.raises is not None:
            raise self.raises
        return dict(self.result)


class StubLoader:
    """Model loader returning a fixed evaluator, counting load calls."""

    def __init__(self, evaluator=None, raises: Optional[Exception] = None):
        self.evaluator = evaluator or StubEvaluator()
        self.raises = raises
        self.loaded_sources: List[str] = []

    def load(self, model_source: str):
        self.loaded_sources.append(model_source)
        if self.raises is not None:
            raise self.raises
        return self.evaluator


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def stub_evaluator():
    return StubEvaluator()


@pytest.fixture
def stub_loader(stub_evaluator):
    return StubLoader(stub_evaluator)


@pytest.fixture
def sample_record():
    """Record with every declared field present and coercible."""
    return {"id": "REC_001", "age": 34, "income": 50000}


@pytest.fixture
def record_missing_age():
    return {"id": "REC_002", "income": 50000}


@pytest.fixture
def record_invalid_age():
    return {"id": "REC_003", "age": "thirty-four", "income": 50000}


@pytest.fixture
def make_evaluator():
    """Factory for StubEvaluator with custom results or failures."""
    return StubEvaluator


@pytest.fixture
def make_loader():
    """Factory for StubLoader."""
    return StubLoader
