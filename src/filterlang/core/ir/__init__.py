"""
filterlang Intermediate Representation (IR) types.

All types are re-exported from this package.
"""

from .expressions import (
    ORDERED_KINDS,
    BinaryExpr,
    BoolValue,
    Expr,
    IntValue,
    ListValue,
    NullValue,
    Operator,
    StrValue,
    Value,
    ValueExpr,
    ValueKind,
    Variable,
    from_python,
)

__all__ = [
    "ORDERED_KINDS",
    "BinaryExpr",
    "BoolValue",
    "Expr",
    "IntValue",
    "ListValue",
    "NullValue",
    "Operator",
    "StrValue",
    "Value",
    "ValueExpr",
    "ValueKind",
    "Variable",
    "from_python",
]
