"""Core filterlang functionality: IR, errors, configuration, expression language."""

from . import ir
from .environment import EvaluationConfig, VariablePolicy, get_config
from .errors import (
    DepthLimitError,
    EvaluationError,
    ExpressionTokenError,
    FilterLangError,
    IncomparableError,
    InvalidOperandsError,
    ParseError,
    TypeMismatchError,
    UnresolvedVariableError,
    VariableCycleError,
    VariableLookupError,
)

__all__ = [
    "ir",
    "EvaluationConfig",
    "VariablePolicy",
    "get_config",
    "DepthLimitError",
    "EvaluationError",
    "ExpressionTokenError",
    "FilterLangError",
    "IncomparableError",
    "InvalidOperandsError",
    "ParseError",
    "TypeMismatchError",
    "UnresolvedVariableError",
    "VariableCycleError",
    "VariableLookupError",
]
