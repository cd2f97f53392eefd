"""
Missing Value Strategies
========================

Decide what happens when required model input fields are absent from a record.

Variants:
- PropagateMissingValues: fail the record with a MissingFieldError (default)
- SubstituteDefaults: fill absent fields from explicit or declared defaults
- DropMissingValues: discard the record
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence

from src.evaluation.errors import MissingFieldError
from src.evaluation.fields import FieldDefinition
from src.evaluation.strategies.base import Resolution


class MissingValueStrategy(ABC):
    """Decides the fate of a record with absent required fields."""

    name: str = "custom"

    @abstractmethod
    def resolve(
        self,
        missing: List[str],
        record: Dict[str, Any],
        fields: Sequence[FieldDefinition],
    ) -> Resolution:
        """
        Args:
            missing: Names of required fields absent from the record
            record: The original input record (read-only)
            fields: The model's declared input fields

        Returns:
            Resolution whose values fill in the missing fields
        """
        pass


class PropagateMissingValues(MissingValueStrategy):
    name = "propagate"

    def resolve(self, missing, record, fields) -> Resolution:
        return Resolution.fail(MissingFieldError(missing))


class SubstituteDefaults(MissingValueStrategy):
    """
    Substitute a default for every missing field.

    Explicit defaults take precedence over the field definition's default.
    If any missing field has neither, the record fails.
    """

    name = "substitute"

    def __init__(self, defaults: Optional[Dict[str, Any]] = None):
        self.defaults = dict(defaults or {})

    def resolve(self, missing, record, fields) -> Resolution:
        declared = {f.name: f for f in fields}
        values: Dict[str, Any] = {}
        unresolved: List[str] = []

        for name in missing:
            if self.defaults.get(name) is not None:
                values[name] = self.defaults[name]
            elif name in declared and declared[name].has_default:
                values[name] = declared[name].default
            else:
                unresolved.append(name)

        if unresolved:
            return Resolution.fail(
                MissingFieldError(unresolved, message=f"No default value for missing fields: {sorted(unresolved)}")
            )
        return Resolution.resolved(values)


class DropMissingValues(MissingValueStrategy):
    name = "drop"

    def resolve(self, missing, record, fields) -> Resolution:
        return Resolution.drop(f"missing fields {sorted(missing)}")
