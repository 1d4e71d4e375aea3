"""
filterlang - a small embeddable language for boolean filter predicates.

    >>> from filterlang import MappingLookup, evaluate, parse_expr
    >>> evaluate(parse_expr("name == 'John'"), MappingLookup({"name": "John"}))
    BoolValue(kind=<ValueKind.BOOL: 'bool'>, value=True)
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

from .core import ir
from .core.errors import (
    EvaluationError,
    FilterLangError,
    IncomparableError,
    InvalidOperandsError,
    ParseError,
    TypeMismatchError,
    VariableLookupError,
)
from .core.expression_lang import (
    EmptyLookup,
    MappingLookup,
    VariableLookup,
    dump,
    evaluate,
    evaluate_predicate,
    parse_expr,
    unparse,
)

try:
    __version__ = version("filterlang")
except PackageNotFoundError:
    # Source checkout that was never installed
    __version__ = "0.0.0+unknown"

__all__ = [
    "__version__",
    "ir",
    "EmptyLookup",
    "MappingLookup",
    "VariableLookup",
    "dump",
    "evaluate",
    "evaluate_predicate",
    "parse_expr",
    "unparse",
    "EvaluationError",
    "FilterLangError",
    "IncomparableError",
    "InvalidOperandsError",
    "ParseError",
    "TypeMismatchError",
    "VariableLookupError",
]
