"""
Variable lookup capability consumed by the evaluator.

Hosts supply any object with a ``get_variable(name)`` method. Two
implementations are provided for the common cases.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

from filterlang.core.errors import VariableLookupError
from filterlang.core.ir.expressions import Value, from_python


@runtime_checkable
class VariableLookup(Protocol):
    """Resolves a variable name to a value.

    Implementations raise an exception (ideally ``VariableLookupError``)
    when the name cannot be resolved; the evaluator propagates it as is.
    """

    def get_variable(self, name: str) -> Value: ...


class EmptyLookup:
    """Lookup with no variables; every name is unknown."""

    def get_variable(self, name: str) -> Value:
        raise VariableLookupError(name)


class MappingLookup:
    """
    Lookup backed by a mapping of names to values.

    Mapping values may be filterlang values or native Python data
    (bool, str, int, None, list), which is converted on access.

    Examples:
        >>> lookup = MappingLookup({"name": "John", "age": 42})
        >>> lookup.get_variable("age")
        IntValue(kind=<ValueKind.INT: 'int'>, value=42)
    """

    def __init__(self, variables: Mapping[str, Any] | None = None) -> None:
        self.variables: Mapping[str, Any] = variables if variables is not None else {}

    def get_variable(self, name: str) -> Value:
        if name not in self.variables:
            raise VariableLookupError(name)
        return from_python(self.variables[name])

    def __repr__(self) -> str:
        return f"MappingLookup({sorted(self.variables)})"
