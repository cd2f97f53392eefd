"""
Preparation Error Strategies
============================

Decide what happens when a field is present in a record but cannot be coerced
to its declared type. Kept separate from the missing value strategies so that
"absent" and "malformed" can be treated differently.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence

from src.evaluation.errors import PreparationError
from src.evaluation.fields import FieldDefinition
from src.evaluation.strategies.base import Resolution


class PreparationErrorStrategy(ABC):
    """Decides the fate of a record with malformed field values."""

    name: str = "custom"

    @abstractmethod
    def resolve(
        self,
        error: PreparationError,
        prepared: Dict[str, Any],
        fields: Sequence[FieldDefinition],
    ) -> Resolution:
        """
        Args:
            error: The preparation error listing invalid fields
            prepared: Values successfully prepared so far (read-only)
            fields: The model's declared input fields

        Returns:
            Resolution whose values replace the invalid fields
        """
        pass


class PropagatePreparationErrors(PreparationErrorStrategy):
    name = "propagate"

    def resolve(self, error, prepared, fields) -> Resolution:
        return Resolution.fail(error)


class SubstituteInvalidValues(PreparationErrorStrategy):
    """Replace invalid values with explicit or declared defaults."""

    name = "substitute"

    def __init__(self, defaults: Optional[Dict[str, Any]] = None):
        self.defaults = dict(defaults or {})

    def resolve(self, error, prepared, fields) -> Resolution:
        declared = {f.name: f for f in fields}
        values: Dict[str, Any] = {}
        unresolved: Dict[str, str] = {}

        for name, reason in error.invalid.items():
            if self.defaults.get(name) is not None:
                values[name] = self.defaults[name]
            elif name in declared and declared[name].has_default:
                values[name] = declared[name].default
            else:
                unresolved[name] = reason

        if unresolved:
            return Resolution.fail(
                PreparationError(unresolved, message=f"No default value for invalid fields: {sorted(unresolved)}")
            )
        return Resolution.resolved(values)


class DropInvalidRecords(PreparationErrorStrategy):
    name = "drop"

    def resolve(self, error, prepared, fields) -> Resolution:
        invalid: List[str] = error.fields
        return Resolution.drop(f"invalid fields {invalid}")
