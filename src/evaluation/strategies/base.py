"""
Strategy Base Types
===================

Shared decision types returned by the input-resolution strategies
(missing value, preparation error).

A strategy never raises to signal its decision; it returns a Resolution:
- resolved: values to merge into the prepared input
- dropped: discard the record, nothing is emitted
- failed: hand the error to the exception handling strategy
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from src.evaluation.errors import EvaluationPipelineError


class ResolutionKind(str, Enum):
    RESOLVED = "resolved"
    DROPPED = "dropped"
    FAILED = "failed"


@dataclass(frozen=True)
class Resolution:
    """Decision made by an input-resolution strategy."""
    kind: ResolutionKind
    values: Dict[str, Any] = field(default_factory=dict)
    error: Optional[EvaluationPipelineError] = None
    reason: Optional[str] = None

    @classmethod
    def resolved(cls, values: Dict[str, Any]) -> "Resolution":
        return cls(kind=ResolutionKind.RESOLVED, values=dict(values))

    @classmethod
    def drop(cls, reason: str) -> "Resolution":
        return cls(kind=ResolutionKind.DROPPED, reason=reason)

    @classmethod
    def fail(cls, error: EvaluationPipelineError) -> "Resolution":
        return cls(kind=ResolutionKind.FAILED, error=error, reason=error.message)

    @property
    def is_resolved(self) -> bool:
        return self.kind == ResolutionKind.RESOLVED

    @property
    def is_dropped(self) -> bool:
        return self.kind == ResolutionKind.DROPPED

    @property
    def is_failed(self) -> bool:
        return self.kind == ResolutionKind.FAILED
