"""
Evaluation Pipeline Errors
==========================

Error taxonomy for the per-record evaluation pipeline.

Every failure carries an error code and the pipeline stage it came from,
so the exception handling strategy can log enough context to identify the
failing record and stage.

Usage:
    from src.evaluation.errors import MissingFieldError, ModelLoadError

    raise MissingFieldError(["age"])
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel


# =============================================================================
# ERROR REPORT MODEL
# =============================================================================

class ErrorReport(BaseModel):
    """Structured view of a pipeline error, used for logging and custom handlers."""
    error: str
    error_code: str
    message: str
    stage: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
    timestamp: str


# =============================================================================
# CUSTOM EXCEPTIONS
# =============================================================================

class EvaluationPipelineError(Exception):
    """Base class for all evaluation pipeline errors."""

    def __init__(
        self,
        message: str,
        error_code: str = "PIPELINE_ERROR",
        stage: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.stage = stage
        self.details = details or {}
        super().__init__(message)

    def to_report(self) -> ErrorReport:
        return ErrorReport(
            error=self.__class__.__name__,
            error_code=self.error_code,
            message=self.message,
            stage=self.stage,
            details=self.details,
            timestamp=datetime.now().isoformat(),
        )

    def to_dict(self) -> Dict[str, Any]:
        return self.to_report().model_dump()


class MissingFieldError(EvaluationPipelineError):
    """Required model input field(s) absent from the record."""

    def __init__(self, fields: List[str], message: Optional[str] = None):
        self.fields = sorted(fields)
        super().__init__(
            message=message or f"Missing required fields: {self.fields}",
            error_code="MISSING_FIELD",
            stage="missing_value_check",
            details={"fields": self.fields},
        )


class PreparationError(EvaluationPipelineError):
    """Field(s) present in the record but not coercible to the declared type."""

    def __init__(self, invalid: Dict[str, str], message: Optional[str] = None):
        self.invalid = dict(invalid)
        super().__init__(
            message=message or f"Invalid field values: {sorted(self.invalid)}",
            error_code="PREPARATION_ERROR",
            stage="preparing",
            details={"invalid": self.invalid},
        )

    @property
    def fields(self) -> List[str]:
        return sorted(self.invalid)


class EvaluationError(EvaluationPipelineError):
    """The model evaluator raised while scoring a prepared input."""

    def __init__(self, cause: BaseException):
        self.cause = cause
        super().__init__(
            message=f"Model evaluation failed: {cause}",
            error_code="EVALUATION_ERROR",
            stage="evaluating",
            details={"cause": type(cause).__name__},
        )


class ExtractionError(EvaluationPipelineError):
    """Requested output field(s) absent from the evaluation result."""

    def __init__(self, fields: List[str], available: Optional[List[str]] = None):
        self.fields = sorted(fields)
        super().__init__(
            message=f"Fields not found in evaluation result: {self.fields}",
            error_code="EXTRACTION_ERROR",
            stage="extracting",
            details={"fields": self.fields, "available": sorted(available or [])},
        )


class ModelLoadError(EvaluationPipelineError):
    """The model source could not be loaded; fatal to the operator instance."""

    def __init__(self, model_source: str, reason: str):
        self.model_source = model_source
        super().__init__(
            message=f"Failed to load model from {model_source!r}: {reason}",
            error_code="MODEL_LOAD_ERROR",
            stage="starting",
            details={"model_source": model_source},
        )
