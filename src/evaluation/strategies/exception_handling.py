"""
Exception Handling Strategies
=============================

The outermost policy of the evaluation pipeline. Every stage failure that no
dedicated strategy resolved ends up here, and only this strategy decides
between dropping the record and aborting the stream.

Variants:
- LogAndSuppress: log with record context, emit nothing, continue (default)
- PropagateExceptions: re-raise; the host runtime aborts the whole job
- CustomExceptionHandler: caller-supplied callable

Choosing PropagateExceptions means one bad record stops the stream on that
worker. LogAndSuppress keeps the stream alive and only loses the record.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Union

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PipelineFailure:
    """A failed record: the error, the stage it failed in, and the input."""
    error: Exception
    stage: str
    record: Dict[str, Any]
    record_id: Optional[str] = None

    def describe_record(self) -> str:
        if self.record_id is not None:
            return f"record_id={self.record_id}"
        return f"record_keys={sorted(self.record)}"


@dataclass(frozen=True)
class HandlingDecision:
    """What to do with a failed record."""
    emit: Optional[Dict[str, Any]] = None
    rethrow: bool = False

    @classmethod
    def suppress(cls) -> "HandlingDecision":
        return cls()

    @classmethod
    def propagate(cls) -> "HandlingDecision":
        return cls(rethrow=True)

    @classmethod
    def recover(cls, record: Dict[str, Any]) -> "HandlingDecision":
        return cls(emit=dict(record))


class ExceptionHandlingStrategy(ABC):
    """Terminal consumer of unresolved pipeline failures."""

    name: str = "custom"

    @abstractmethod
    def handle(self, failure: PipelineFailure) -> HandlingDecision:
        pass


class LogAndSuppress(ExceptionHandlingStrategy):
    """
    Log the failure and drop the record.

    The suppression counter lives as long as the strategy instance, i.e. one
    operator instance on one worker.
    """

    name = "log"

    def __init__(self, log_level: int = logging.WARNING):
        self.log_level = log_level
        self.suppressed_count = 0

    def handle(self, failure: PipelineFailure) -> HandlingDecision:
        self.suppressed_count += 1
        error = failure.error
        code = getattr(error, "error_code", type(error).__name__)
        logger.log(
            self.log_level,
            f"Record suppressed at stage={failure.stage} ({failure.describe_record()}): "
            f"[{code}] {error}",
        )
        return HandlingDecision.suppress()


class PropagateExceptions(ExceptionHandlingStrategy):
    name = "propagate"

    def handle(self, failure: PipelineFailure) -> HandlingDecision:
        logger.error(
            f"Propagating failure at stage={failure.stage} ({failure.describe_record()}): {failure.error}"
        )
        return HandlingDecision.propagate()


HandlerResult = Union[HandlingDecision, Dict[str, Any], None]


class CustomExceptionHandler(ExceptionHandlingStrategy):
    """
    Wrap a callable as an exception handling strategy.

    The callable receives the PipelineFailure and returns one of:
    - a HandlingDecision
    - a dict, emitted as a fallback record
    - None, the record is suppressed
    """

    def __init__(self, handler: Callable[[PipelineFailure], HandlerResult]):
        self.handler = handler

    def handle(self, failure: PipelineFailure) -> HandlingDecision:
        result = self.handler(failure)
        if isinstance(result, HandlingDecision):
            return result
        if result is None:
            return HandlingDecision.suppress()
        return HandlingDecision.recover(result)
