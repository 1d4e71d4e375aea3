"""
Expression types for filterlang.

This module defines the typed AST produced by the parser and walked by
the evaluator:

- Values: bool, str, int, null, variable references and lists
- Operators: ==, !=, <, <=, >, >=, contains, and, or
- Expressions: a binary node over two sub-expressions, or a value leaf

All nodes are frozen pydantic models, so a tree is immutable once built
and two trees are equal when they are structurally equal.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import StrEnum
from typing import TYPE_CHECKING, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt, StrictStr

from filterlang.core.errors import TypeMismatchError

if TYPE_CHECKING:
    from filterlang.core.expression_lang.lookup import VariableLookup

# ---------------------------------------------------------------------------
# Value kinds
# ---------------------------------------------------------------------------


class ValueKind(StrEnum):
    """Concrete kinds a value can have."""

    BOOL = "bool"
    STR = "str"
    INT = "int"
    NULL = "null"
    VARIABLE = "variable"
    LIST = "list"


# Kinds with a defined ordering (same-kind only)
ORDERED_KINDS = frozenset({ValueKind.BOOL, ValueKind.STR, ValueKind.INT})


# ---------------------------------------------------------------------------
# Operators
# ---------------------------------------------------------------------------


class Operator(StrEnum):
    """Binary operators for expressions."""

    # Comparison
    EQ = "=="
    NE = "!="
    LT = "<"
    LE = "<="
    GT = ">"
    GE = ">="
    # Membership
    CONTAINS = "contains"
    # Logical
    AND = "and"
    OR = "or"

    @property
    def is_ordering(self) -> bool:
        return self in (Operator.LT, Operator.LE, Operator.GT, Operator.GE)

    @property
    def is_logical(self) -> bool:
        return self in (Operator.AND, Operator.OR)


# ---------------------------------------------------------------------------
# Values
# ---------------------------------------------------------------------------


class _ValueBase(BaseModel, ABC):
    """Shared behaviour of every value variant."""

    model_config = ConfigDict(frozen=True)

    kind: ValueKind

    def evaluate(self, lookup: VariableLookup) -> Value:
        """Resolve this value against a lookup; see ``evaluator.resolve_value``."""
        from filterlang.core.expression_lang.evaluator import resolve_value

        return resolve_value(self, lookup)  # type: ignore[arg-type]

    def as_bool(self) -> bool:
        raise TypeMismatchError(ValueKind.BOOL, self.kind)

    def as_string(self) -> str:
        raise TypeMismatchError(ValueKind.STR, self.kind)

    def as_int(self) -> int:
        raise TypeMismatchError(ValueKind.INT, self.kind)

    @abstractmethod
    def to_python(self) -> Any:
        """Convert to a native Python object."""


class BoolValue(_ValueBase):
    """A boolean: ``true`` or ``false``."""

    kind: Literal[ValueKind.BOOL] = ValueKind.BOOL
    value: StrictBool

    def as_bool(self) -> bool:
        return self.value

    def to_python(self) -> bool:
        return self.value

    def __str__(self) -> str:
        return "true" if self.value else "false"


class StrValue(_ValueBase):
    """A string literal."""

    kind: Literal[ValueKind.STR] = ValueKind.STR
    value: StrictStr

    def as_string(self) -> str:
        return self.value

    def to_python(self) -> str:
        return self.value

    def __str__(self) -> str:
        escaped = self.value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
        return f'"{escaped}"'


class IntValue(_ValueBase):
    """An integer literal."""

    kind: Literal[ValueKind.INT] = ValueKind.INT
    value: StrictInt

    def as_int(self) -> int:
        return self.value

    def to_python(self) -> int:
        return self.value

    def __str__(self) -> str:
        return str(self.value)


class NullValue(_ValueBase):
    """The ``null`` literal."""

    kind: Literal[ValueKind.NULL] = ValueKind.NULL

    def to_python(self) -> None:
        return None

    def __str__(self) -> str:
        return "null"


class Variable(_ValueBase):
    """
    Reference to a named variable, resolved through a lookup at evaluation.

    Examples:
        - Variable(name="age") → age
    """

    kind: Literal[ValueKind.VARIABLE] = ValueKind.VARIABLE
    name: StrictStr = Field(description="Variable name")

    def to_python(self) -> Any:
        raise TypeMismatchError(
            "resolved value",
            self.kind,
            f"Variable {self.name!r} must be resolved before conversion",
        )

    def __str__(self) -> str:
        return self.name


class ListValue(_ValueBase):
    """A list of values: ``[1, 2, 3]``."""

    kind: Literal[ValueKind.LIST] = ValueKind.LIST
    items: tuple[Value, ...] = Field(default=(), description="List elements")

    @property
    def has_variables(self) -> bool:
        return any(
            isinstance(item, Variable) or (isinstance(item, ListValue) and item.has_variables)
            for item in self.items
        )

    def to_python(self) -> list[Any]:
        return [item.to_python() for item in self.items]

    def __str__(self) -> str:
        return "[" + ", ".join(str(item) for item in self.items) + "]"


Value = BoolValue | StrValue | IntValue | NullValue | Variable | ListValue

ListValue.model_rebuild()


def from_python(obj: Any) -> Value:
    """Build a value from native Python data.

    Values are passed through unchanged. ``None`` becomes null, and lists
    and tuples are converted element by element.

    Raises:
        TypeMismatchError: If the object has no value counterpart.
    """
    if isinstance(obj, _ValueBase):
        return obj  # type: ignore[return-value]
    if obj is None:
        return NullValue()
    # bool before int: bool is a subclass of int
    if isinstance(obj, bool):
        return BoolValue(value=obj)
    if isinstance(obj, int):
        return IntValue(value=obj)
    if isinstance(obj, str):
        return StrValue(value=obj)
    if isinstance(obj, (list, tuple)):
        return ListValue(items=tuple(from_python(item) for item in obj))
    raise TypeMismatchError("bool, str, int, null or list", type(obj).__name__)


# ---------------------------------------------------------------------------
# AST node types
# ---------------------------------------------------------------------------


class ValueExpr(BaseModel):
    """Leaf expression holding a single value."""

    value: Value

    model_config = ConfigDict(frozen=True)

    def evaluate(self, lookup: VariableLookup) -> Value:
        from filterlang.core.expression_lang.evaluator import evaluate

        return evaluate(self, lookup)

    def __str__(self) -> str:
        return str(self.value)


class BinaryExpr(BaseModel):
    """Binary operation: left op right."""

    op: Operator
    left: Expr
    right: Expr

    model_config = ConfigDict(frozen=True)

    def evaluate(self, lookup: VariableLookup) -> Value:
        from filterlang.core.expression_lang.evaluator import evaluate

        return evaluate(self, lookup)

    def __str__(self) -> str:
        return f"({self.left} {self.op.value} {self.right})"


# ---------------------------------------------------------------------------
# Union type
# ---------------------------------------------------------------------------

Expr = BinaryExpr | ValueExpr

# Rebuild models for recursive forward references
BinaryExpr.model_rebuild()
