"""
Expression evaluator for the filterlang expression language.

Evaluates expression AST nodes against a variable lookup.
Pure evaluation: no I/O, no side effects, no Python eval(). The only
code called outside this package is the lookup's get_variable().

Both operands of every binary node are evaluated, including ``and`` and
``or``: there is no short-circuit, so ``false and missing`` still fails
when ``missing`` cannot be resolved, and ``false and 1`` is a type error.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from filterlang.core.environment import EvaluationConfig, VariablePolicy, get_config
from filterlang.core.errors import (
    DepthLimitError,
    EvaluationError,
    IncomparableError,
    InvalidOperandsError,
    UnresolvedVariableError,
    VariableCycleError,
)
from filterlang.core.expression_lang.lookup import VariableLookup
from filterlang.core.ir.expressions import (
    ORDERED_KINDS,
    BinaryExpr,
    BoolValue,
    Expr,
    ListValue,
    Operator,
    StrValue,
    Value,
    ValueExpr,
    Variable,
    from_python,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Context:
    lookup: VariableLookup
    config: EvaluationConfig


def evaluate(
    expr: Expr,
    lookup: VariableLookup,
    *,
    config: EvaluationConfig | None = None,
) -> Value:
    """Evaluate an expression against a variable lookup.

    Args:
        expr: Parsed expression AST.
        lookup: Resolves variable names to values.
        config: Limits and policies; read from the environment when omitted.

    Returns:
        The resolved value.

    Raises:
        EvaluationError: On the first type, ordering, operand, lookup or
            depth failure anywhere in the tree. Exceptions raised by the
            lookup itself propagate unchanged.
    """
    ctx = _Context(lookup=lookup, config=config or get_config())
    return _interpret(expr, ctx, 1)


def evaluate_predicate(
    expr: Expr,
    lookup: VariableLookup,
    *,
    config: EvaluationConfig | None = None,
) -> bool:
    """Evaluate an expression that must produce a bool."""
    return evaluate(expr, lookup, config=config).as_bool()


def resolve_value(
    value: Value,
    lookup: VariableLookup,
    config: EvaluationConfig | None = None,
) -> Value:
    """Resolve a value: variables go through the lookup, the rest is returned as is.

    List elements are resolved one by one; a list without variables is
    returned unchanged.
    """
    config = config or get_config()
    if isinstance(value, Variable):
        return _resolve_variable(value.name, lookup, config)
    if isinstance(value, ListValue) and value.has_variables:
        return ListValue(items=tuple(resolve_value(item, lookup, config) for item in value.items))
    return value


def _resolve_variable(name: str, lookup: VariableLookup, config: EvaluationConfig) -> Value:
    """Ask the lookup for a variable and apply the variable policy to the answer."""
    resolved = from_python(lookup.get_variable(name))
    logger.debug("Resolved variable %r to %s", name, resolved)

    chain = [name]
    while isinstance(resolved, Variable):
        if config.variable_policy == VariablePolicy.REJECT:
            raise UnresolvedVariableError(
                name, f"lookup returned unresolved variable {resolved.name!r}"
            )
        if resolved.name in chain:
            raise VariableCycleError(name, "cycle " + " -> ".join([*chain, resolved.name]))
        if len(chain) > config.max_resolution_hops:
            raise UnresolvedVariableError(
                name, f"still unresolved after {config.max_resolution_hops} hops"
            )
        chain.append(resolved.name)
        resolved = from_python(lookup.get_variable(resolved.name))
        logger.debug("Followed %r to %s", chain[-1], resolved)

    if isinstance(resolved, ListValue) and resolved.has_variables:
        raise UnresolvedVariableError(name, "lookup returned a list containing variables")
    return resolved


def _interpret(expr: Expr, ctx: _Context, depth: int) -> Value:
    """Dispatch evaluation to the appropriate handler."""
    if depth > ctx.config.max_depth:
        raise DepthLimitError(ctx.config.max_depth)

    if isinstance(expr, ValueExpr):
        return resolve_value(expr.value, ctx.lookup, ctx.config)

    if isinstance(expr, BinaryExpr):
        return _interpret_binary(expr, ctx, depth)

    raise EvaluationError(f"Unknown expression type: {type(expr).__name__}")


def _interpret_binary(expr: BinaryExpr, ctx: _Context, depth: int) -> Value:
    """Evaluate a binary expression. Both sides are always evaluated."""
    left = _interpret(expr.left, ctx, depth + 1)
    right = _interpret(expr.right, ctx, depth + 1)

    # Equality is total: different kinds are simply unequal
    if expr.op == Operator.EQ:
        return BoolValue(value=left == right)
    if expr.op == Operator.NE:
        return BoolValue(value=left != right)

    if expr.op.is_ordering:
        return BoolValue(value=_compare(expr.op, left, right))

    if expr.op == Operator.CONTAINS:
        return BoolValue(value=_contains(left, right))

    if expr.op == Operator.AND:
        lhs, rhs = left.as_bool(), right.as_bool()
        return BoolValue(value=lhs and rhs)
    if expr.op == Operator.OR:
        lhs, rhs = left.as_bool(), right.as_bool()
        return BoolValue(value=lhs or rhs)

    raise EvaluationError(f"Unknown binary op: {expr.op}")


def _compare(op: Operator, left: Value, right: Value) -> bool:
    """Ordering over same-kind bools, strings and ints."""
    if left.kind != right.kind or left.kind not in ORDERED_KINDS:
        raise IncomparableError(op.value, left.kind, right.kind)

    a = left.value  # type: ignore[union-attr]
    b = right.value  # type: ignore[union-attr]
    if op == Operator.LT:
        return a < b
    if op == Operator.LE:
        return a <= b
    if op == Operator.GT:
        return a > b
    if op == Operator.GE:
        return a >= b

    raise EvaluationError(f"Not an ordering op: {op}")


def _contains(left: Value, right: Value) -> bool:
    """List membership by value equality, or substring search."""
    if isinstance(left, ListValue):
        return right in left.items
    if isinstance(left, StrValue) and isinstance(right, StrValue):
        return right.value in left.value
    raise InvalidOperandsError(Operator.CONTAINS.value, left.kind, right.kind)
