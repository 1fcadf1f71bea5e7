"""
tfharness/models/attribute_value.py

A tagged union over decoded Terraform attribute values. Values are read through
explicit accessors (as_str, as_number, ...) which raise AttributeTypeError on a
kind mismatch instead of coercing.
"""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Any, List, Mapping, Union

from tfharness.errors import AttributeTypeError


class ValueKind(str, Enum):
    """The kinds of value a Terraform attribute can hold."""

    STRING = "string"
    NUMBER = "number"
    BOOL = "bool"
    MAPPING = "mapping"
    SEQUENCE = "sequence"
    NULL = "null"


def kind_of(raw: Any) -> ValueKind:
    """Classify a raw JSON-decoded value.

    Args:
        raw (Any): A value produced by JSON decoding.

    Returns:
        ValueKind: The matching kind. ``bool`` is never a number.

    Raises:
        ValueError: If the value is not a JSON-compatible type.
    """
    if raw is None:
        return ValueKind.NULL
    if isinstance(raw, bool):
        return ValueKind.BOOL
    if isinstance(raw, (int, float)):
        return ValueKind.NUMBER
    if isinstance(raw, str):
        return ValueKind.STRING
    if isinstance(raw, Mapping):
        return ValueKind.MAPPING
    if isinstance(raw, (list, tuple)):
        return ValueKind.SEQUENCE
    raise ValueError(f"Unsupported attribute value type: {type(raw).__name__}")


class AttributeValue:
    """One attribute value with its kind made explicit.

    Attributes:
        kind (ValueKind): Which branch of the union this value is.
        raw (Any): The underlying decoded value, deep-frozen.
    """

    __slots__ = ("kind", "raw")

    def __init__(self, raw: Any) -> None:
        self.kind = kind_of(raw)
        self.raw = freeze_value(raw)

    def _expect(self, kind: ValueKind) -> Any:
        if self.kind is not kind:
            raise AttributeTypeError(kind.value, self.kind.value)
        return self.raw

    def as_str(self) -> str:
        return self._expect(ValueKind.STRING)

    def as_number(self) -> Union[int, float]:
        return self._expect(ValueKind.NUMBER)

    def as_bool(self) -> bool:
        return self._expect(ValueKind.BOOL)

    def as_mapping(self) -> Mapping[str, AttributeValue]:
        """Return a read-only mapping of child values, each wrapped."""
        raw: Mapping[str, Any] = self._expect(ValueKind.MAPPING)
        return MappingProxyType({key: AttributeValue(val) for key, val in raw.items()})

    def as_sequence(self) -> List[AttributeValue]:
        """Return the child values, each wrapped, as a new list."""
        raw = self._expect(ValueKind.SEQUENCE)
        return [AttributeValue(item) for item in raw]

    @property
    def is_null(self) -> bool:
        return self.kind is ValueKind.NULL

    def __eq__(self, other: object) -> bool:
        if isinstance(other, AttributeValue):
            return self.kind is other.kind and self.raw == other.raw
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.kind)

    def __repr__(self) -> str:
        return f"AttributeValue(kind={self.kind.value}, raw={self.raw!r})"



def freeze_value(raw: Any) -> Any:
    """Recursively turn mappings into read-only proxies and lists into tuples."""
    if isinstance(raw, Mapping):
        return MappingProxyType({key: freeze_value(val) for key, val in raw.items()})
    if isinstance(raw, (list, tuple)):
        return tuple(freeze_value(item) for item in raw)
    return raw


def thaw_value(raw: Any) -> Any:
    """Inverse of freeze_value: plain dicts and lists, for serialization."""
    if isinstance(raw, Mapping):
        return {key: thaw_value(val) for key, val in raw.items()}
    if isinstance(raw, (list, tuple)):
        return [thaw_value(item) for item in raw]
    return raw
