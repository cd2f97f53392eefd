"""
Field Value Normalizer
======================

Converts raw record values into the types a model declares for its inputs.

A declared field ends up in exactly one of three places:
- prepared: present and coerced to the declared type
- missing: absent from the record (key missing or value None)
- invalid: present but not coercible to the declared type

Usage:
    from src.evaluation.fields import FieldDefinition, FieldType, normalize

    fields = [FieldDefinition("age", FieldType.INTEGER)]
    normalized = normalize({"age": "34"}, fields)
    normalized.prepared  # {"age": 34}
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple

_MISSING = object()

TRUE_STRINGS = {"true", "1", "yes"}
FALSE_STRINGS = {"false", "0", "no"}


class FieldType(str, Enum):
    DOUBLE = "double"
    INTEGER = "integer"
    STRING = "string"
    BOOLEAN = "boolean"
    ANY = "any"


@dataclass(frozen=True)
class FieldDefinition:
    """
    Typed model input field.

    Enables:
    - Type validation and coercion
    - Required field checking
    - Default value for substitution strategies
    """
    name: str
    field_type: FieldType = FieldType.ANY
    required: bool = True
    default: Any = None

    @property
    def has_default(self) -> bool:
        return self.default is not None

    def coerce(self, value: Any) -> Tuple[Any, Optional[str]]:
        """
        Coerce value to the declared type.

        Returns:
            Tuple of (coerced_value, error message or None)
        """
        try:
            if self.field_type == FieldType.DOUBLE:
                return _to_double(value), None
            elif self.field_type == FieldType.INTEGER:
                return _to_integer(value), None
            elif self.field_type == FieldType.STRING:
                return _to_string(value), None
            elif self.field_type == FieldType.BOOLEAN:
                return _to_boolean(value), None
            return value, None
        except (ValueError, TypeError) as e:
            return None, f"cannot coerce {value!r} to {self.field_type.value}: {e}"


def _to_double(value: Any) -> float:
    if isinstance(value, bool):
        raise TypeError("boolean is not numeric")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        return float(value.strip())
    raise TypeError(f"unsupported type {type(value).__name__}")


def _to_integer(value: Any) -> int:
    if isinstance(value, bool):
        raise TypeError("boolean is not numeric")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    number = _to_double(value)
    if math.isnan(number) or math.isinf(number) or not number.is_integer():
        raise ValueError("not an integral value")
    return int(number)  # Handle "3.0" -> 3


def _to_string(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (bool, int, float)):
        return str(value)
    raise TypeError(f"unsupported type {type(value).__name__}")


def _to_boolean(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in TRUE_STRINGS:
            return True
        if lowered in FALSE_STRINGS:
            return False
    raise ValueError("not a boolean value")


@dataclass
class NormalizedInput:
    """Result of normalizing one record against the declared fields."""
    prepared: Dict[str, Any] = field(default_factory=dict)
    missing: List[str] = field(default_factory=list)
    invalid: Dict[str, str] = field(default_factory=dict)

    @property
    def has_missing(self) -> bool:
        return bool(self.missing)

    @property
    def has_invalid(self) -> bool:
        return bool(self.invalid)


def normalize(record: Dict[str, Any], fields: Sequence[FieldDefinition]) -> NormalizedInput:
    """
    Normalize a raw record against the model's declared input fields.

    Undeclared record keys are ignored. Optional fields that are absent are
    left out of the prepared input without being reported as missing.
    """
    result = NormalizedInput()

    for defn in fields:
        value = record.get(defn.name, _MISSING)

        if value is _MISSING or value is None:
            if defn.required:
                result.missing.append(defn.name)
            continue

        coerced, error = defn.coerce(value)
        if error:
            result.invalid[defn.name] = error
        else:
            result.prepared[defn.name] = coerced

    return result
