"""Tests for the filterlang evaluator.

Covers:
- Equality: total over all value kinds
- Ordering: same-kind only
- contains: lists and strings
- and/or: strict bools, both sides always evaluated
- Variable resolution policies and lookup error propagation
- Depth ceiling
"""

from __future__ import annotations

from typing import Any

import pytest

from filterlang.core.environment import EvaluationConfig, VariablePolicy
from filterlang.core.errors import (
    DepthLimitError,
    IncomparableError,
    InvalidOperandsError,
    TypeMismatchError,
    UnresolvedVariableError,
    VariableCycleError,
    VariableLookupError,
)
from filterlang.core.expression_lang.evaluator import evaluate, evaluate_predicate, resolve_value
from filterlang.core.expression_lang.lookup import EmptyLookup, MappingLookup, VariableLookup
from filterlang.core.expression_lang.parser import parse_expr
from filterlang.core.ir.expressions import (
    BinaryExpr,
    BoolValue,
    IntValue,
    ListValue,
    NullValue,
    Operator,
    StrValue,
    Value,
    ValueExpr,
    Variable,
)

TRUE = BoolValue(value=True)
FALSE = BoolValue(value=False)


def run(source: str, variables: dict[str, Any] | None = None, **config: Any) -> Value:
    return evaluate(
        parse_expr(source),
        MappingLookup(variables or {}),
        config=EvaluationConfig(**config),
    )


class RecordingLookup:
    """Lookup that remembers which names were requested."""

    def __init__(self, variables: dict[str, Value]) -> None:
        self.variables = variables
        self.requested: list[str] = []

    def get_variable(self, name: str) -> Value:
        self.requested.append(name)
        if name not in self.variables:
            raise VariableLookupError(name)
        return self.variables[name]


# ============================================================================
# End-to-end
# ============================================================================


class TestEndToEnd:
    """Parse-then-evaluate examples."""

    def test_name_equals_john(self) -> None:
        assert run("name == 'John'", {"name": "John"}) == TRUE

    def test_literal_comparison_with_empty_lookup(self) -> None:
        assert evaluate(parse_expr("100 <= 200"), EmptyLookup()) == TRUE

    def test_filter_predicate(self) -> None:
        source = "(age >= 18) and (status != 'banned')"
        assert run(source, {"age": 30, "status": "active"}) == TRUE
        assert run(source, {"age": 30, "status": "banned"}) == FALSE
        assert run(source, {"age": 12, "status": "active"}) == FALSE

    def test_right_associative_chain(self) -> None:
        # 1 == (1 == 1) → 1 == true → false
        assert evaluate(parse_expr("1 == 1 == 1"), EmptyLookup()) == FALSE

    def test_literal_evaluates_to_itself(self) -> None:
        assert run("'abc'") == StrValue(value="abc")
        assert run("[1, 2]") == ListValue(items=(IntValue(value=1), IntValue(value=2)))
        assert run("null") == NullValue()

    def test_expr_evaluate_method(self) -> None:
        expr = parse_expr("x == 1")
        assert expr.evaluate(MappingLookup({"x": 1})) == TRUE

    def test_evaluate_predicate(self) -> None:
        expr = parse_expr("x > 1")
        assert evaluate_predicate(expr, MappingLookup({"x": 2})) is True
        assert evaluate_predicate(expr, MappingLookup({"x": 0})) is False

    def test_evaluate_predicate_requires_bool(self) -> None:
        with pytest.raises(TypeMismatchError):
            evaluate_predicate(parse_expr("x"), MappingLookup({"x": 1}))

    def test_deterministic(self) -> None:
        expr = parse_expr("(a contains b) or (c < 3)")
        lookup = MappingLookup({"a": "hello", "b": "ell", "c": 5})
        results = {evaluate(expr, lookup) for _ in range(5)}
        assert results == {TRUE}

    def test_tree_is_not_mutated(self) -> None:
        expr = parse_expr("x == 'a'")
        snapshot = expr.model_copy(deep=True)
        evaluate(expr, MappingLookup({"x": "a"}))
        assert expr == snapshot


# ============================================================================
# Equality
# ============================================================================


class TestEvalEquality:
    """== and != never fail, even across kinds."""

    @pytest.mark.parametrize(
        ("source", "expected"),
        [
            ("1 == 1", TRUE),
            ("1 == 2", FALSE),
            ("'a' == 'a'", TRUE),
            ("true == true", TRUE),
            ("null == null", TRUE),
            ("[1, 'a'] == [1, 'a']", TRUE),
            ("[1, 'a'] == ['a', 1]", FALSE),
            ("1 != 2", TRUE),
            ("'a' != 'a'", FALSE),
        ],
    )
    def test_same_kind(self, source: str, expected: Value) -> None:
        assert run(source) == expected

    @pytest.mark.parametrize(
        "source",
        [
            "1 == '1'",
            "1 == true",
            "0 == false",
            "null == false",
            "[] == null",
            "'true' == true",
            "[1] == 1",
        ],
    )
    def test_cross_kind_is_unequal(self, source: str) -> None:
        assert run(source) == FALSE
        assert run(source.replace("==", "!=")) == TRUE

    def test_variables_are_resolved_before_comparison(self) -> None:
        assert run("a == b", {"a": [1, 2], "b": [1, 2]}) == TRUE


# ============================================================================
# Ordering
# ============================================================================


class TestEvalOrdering:
    """<, <=, >, >= follow native order within a kind and fail across kinds."""

    @pytest.mark.parametrize(
        ("source", "expected"),
        [
            ("1 < 2", TRUE),
            ("2 < 1", FALSE),
            ("2 <= 2", TRUE),
            ("3 > 20", FALSE),
            ("20 >= 3", TRUE),
            ("'apple' < 'banana'", TRUE),
            ("'B' < 'a'", TRUE),
            ("'abc' >= 'abd'", FALSE),
            ("'10' < '9'", TRUE),
            ("false < true", TRUE),
            ("true <= false", FALSE),
        ],
    )
    def test_same_kind(self, source: str, expected: Value) -> None:
        assert run(source) == expected

    def test_variable_ages(self) -> None:
        assert run("age >= 18", {"age": 18}) == TRUE
        assert run("age >= 18", {"age": 17}) == FALSE

    @pytest.mark.parametrize(
        "source",
        [
            "1 < 'a'",
            "'a' > 1",
            "true < 1",
            "1 <= null",
        ],
    )
    def test_cross_kind_fails(self, source: str) -> None:
        with pytest.raises(IncomparableError):
            run(source)

    @pytest.mark.parametrize("source", ["[1] < [2]", "null <= null"])
    def test_unordered_kinds_fail(self, source: str) -> None:
        with pytest.raises(IncomparableError):
            run(source)

    def test_error_names_kinds(self) -> None:
        with pytest.raises(IncomparableError) as exc_info:
            run("n < 'x'", {"n": 1})
        assert exc_info.value.left == "int"
        assert exc_info.value.right == "str"
        assert exc_info.value.op == "<"


# ============================================================================
# contains
# ============================================================================


class TestEvalContains:
    """contains tests list membership or substrings."""

    def test_list_membership(self) -> None:
        assert run("[1, 2, 3] contains 2") == TRUE

    def test_substring(self) -> None:
        assert run('"hello" contains "ell"') == TRUE
        assert run('"hello" contains "xyz"') == FALSE

    def test_list_membership_is_by_kind_and_value(self) -> None:
        assert run("[1, 2] contains 'x'") == FALSE
        assert run("[1, 2] contains '1'") == FALSE
        assert run("[1] contains true") == FALSE

    def test_list_of_lists(self) -> None:
        assert run("[[1], [2]] contains [2]") == TRUE

    def test_variables_inside_list_literal(self) -> None:
        assert run("[a, b] contains 'y'", {"a": "x", "b": "y"}) == TRUE

    def test_variable_list(self) -> None:
        assert run("roles contains 'admin'", {"roles": ["user", "admin"]}) == TRUE

    @pytest.mark.parametrize(
        "source",
        [
            "1 contains 2",
            "'abc' contains 1",
            "true contains true",
            "null contains null",
        ],
    )
    def test_invalid_operands(self, source: str) -> None:
        with pytest.raises(InvalidOperandsError):
            run(source)


# ============================================================================
# and / or
# ============================================================================


class TestEvalLogic:
    """and/or need bools on both sides and never short-circuit."""

    @pytest.mark.parametrize(
        ("source", "expected"),
        [
            ("true and true", TRUE),
            ("true and false", FALSE),
            ("false and false", FALSE),
            ("true or false", TRUE),
            ("false or false", FALSE),
        ],
    )
    def test_truth_table(self, source: str, expected: Value) -> None:
        assert run(source) == expected

    def test_non_bool_operand(self) -> None:
        with pytest.raises(TypeMismatchError) as exc_info:
            run("true and 1")
        assert exc_info.value.expected == "bool"
        assert exc_info.value.actual == "int"

    def test_no_short_circuit_on_type_error(self) -> None:
        # The left side alone decides the outcome, but the right side is still checked
        with pytest.raises(TypeMismatchError):
            run("false and 'x'")
        with pytest.raises(TypeMismatchError):
            run("true or 0")

    def test_no_short_circuit_on_lookup(self) -> None:
        lookup = RecordingLookup({"flag": FALSE})
        with pytest.raises(VariableLookupError):
            evaluate(parse_expr("flag and missing"), lookup)
        assert lookup.requested == ["flag", "missing"]

    def test_left_evaluated_before_right(self) -> None:
        lookup = RecordingLookup({"a": TRUE, "b": TRUE, "c": TRUE})
        evaluate(parse_expr("(a and b) or c"), lookup)
        assert lookup.requested == ["a", "b", "c"]


# ============================================================================
# Variable resolution
# ============================================================================


class ChainLookup:
    """Lookup whose answers may themselves be variables."""

    def __init__(self, answers: dict[str, Value]) -> None:
        self.answers = answers

    def get_variable(self, name: str) -> Value:
        return self.answers[name]


class TestVariableResolution:
    """Variables go through the lookup; errors propagate unchanged."""

    def test_unknown_variable(self) -> None:
        with pytest.raises(VariableLookupError, match="'missing'") as exc_info:
            run("missing == 1")
        assert exc_info.value.name == "missing"

    def test_lookup_error_is_builtin_lookup_error(self) -> None:
        with pytest.raises(LookupError):
            run("missing")

    def test_empty_lookup(self) -> None:
        with pytest.raises(VariableLookupError):
            evaluate(parse_expr("x"), EmptyLookup())

    def test_host_exceptions_propagate_verbatim(self) -> None:
        class Broken:
            def get_variable(self, name: str) -> Value:
                raise RuntimeError(f"backend down while reading {name}")

        with pytest.raises(RuntimeError, match="backend down while reading x"):
            evaluate(parse_expr("x == 1"), Broken())

    def test_first_error_aborts(self) -> None:
        # Left side fails first; the right side's error is never reached
        with pytest.raises(VariableLookupError) as exc_info:
            run("(missing == 1) and (1 < 'a')")
        assert exc_info.value.name == "missing"

    def test_non_value_answer_is_converted(self) -> None:
        lookup = ChainLookup({"x": 5})  # type: ignore[dict-item]
        assert evaluate(parse_expr("x == 5"), lookup) == TRUE

    def test_unsupported_python_value(self) -> None:
        with pytest.raises(TypeMismatchError):
            run("x == 1", {"x": 1.5})

    def test_lookups_satisfy_protocol(self) -> None:
        assert isinstance(MappingLookup(), VariableLookup)
        assert isinstance(EmptyLookup(), VariableLookup)
        assert isinstance(ChainLookup({}), VariableLookup)

    def test_resolve_value_passes_literals_through(self) -> None:
        value = StrValue(value="a")
        assert resolve_value(value, EmptyLookup()) is value

    def test_value_evaluate_method(self) -> None:
        assert Variable(name="x").evaluate(MappingLookup({"x": True})) == TRUE

    def test_reject_policy(self) -> None:
        lookup = ChainLookup({"a": Variable(name="b"), "b": IntValue(value=1)})
        with pytest.raises(UnresolvedVariableError, match="unresolved variable 'b'"):
            evaluate(parse_expr("a"), lookup, config=EvaluationConfig())

    def test_follow_policy(self) -> None:
        lookup = ChainLookup({"a": Variable(name="b"), "b": IntValue(value=1)})
        config = EvaluationConfig(variable_policy=VariablePolicy.FOLLOW)
        assert evaluate(parse_expr("a == 1"), lookup, config=config) == TRUE

    def test_follow_policy_detects_cycles(self) -> None:
        lookup = ChainLookup({"a": Variable(name="b"), "b": Variable(name="a")})
        config = EvaluationConfig(variable_policy=VariablePolicy.FOLLOW)
        with pytest.raises(VariableCycleError, match="a -> b -> a"):
            evaluate(parse_expr("a"), lookup, config=config)

    def test_follow_policy_self_reference(self) -> None:
        lookup = ChainLookup({"a": Variable(name="a")})
        config = EvaluationConfig(variable_policy=VariablePolicy.FOLLOW)
        with pytest.raises(VariableCycleError):
            evaluate(parse_expr("a"), lookup, config=config)

    def test_follow_policy_hop_limit(self) -> None:
        answers: dict[str, Value] = {f"v{i}": Variable(name=f"v{i + 1}") for i in range(10)}
        answers["v10"] = TRUE
        config = EvaluationConfig(variable_policy=VariablePolicy.FOLLOW, max_resolution_hops=3)
        with pytest.raises(UnresolvedVariableError, match="after 3 hops"):
            evaluate(parse_expr("v0"), ChainLookup(answers), config=config)

        config = EvaluationConfig(variable_policy=VariablePolicy.FOLLOW, max_resolution_hops=10)
        assert evaluate(parse_expr("v0"), ChainLookup(answers), config=config) == TRUE

    def test_lookup_list_with_variables_is_rejected(self) -> None:
        lookup = ChainLookup({"a": ListValue(items=(Variable(name="b"),))})
        config = EvaluationConfig(variable_policy=VariablePolicy.FOLLOW)
        with pytest.raises(UnresolvedVariableError, match="list containing variables"):
            evaluate(parse_expr("a"), lookup, config=config)


# ============================================================================
# Depth ceiling
# ============================================================================


def _deep_tree(depth: int) -> BinaryExpr:
    tree: BinaryExpr | ValueExpr = ValueExpr(value=TRUE)
    for _ in range(depth):
        tree = BinaryExpr(op=Operator.AND, left=tree, right=ValueExpr(value=TRUE))
    assert isinstance(tree, BinaryExpr)
    return tree


class TestEvalDepth:
    """Evaluation refuses trees deeper than the configured ceiling."""

    def test_deep_tree_fails(self) -> None:
        with pytest.raises(DepthLimitError) as exc_info:
            evaluate(_deep_tree(50), EmptyLookup(), config=EvaluationConfig(max_depth=20))
        assert exc_info.value.limit == 20

    def test_tree_within_limit(self) -> None:
        tree = _deep_tree(10)
        assert evaluate(tree, EmptyLookup(), config=EvaluationConfig(max_depth=20)) == TRUE

    def test_very_deep_tree_does_not_exhaust_stack(self) -> None:
        with pytest.raises(DepthLimitError):
            evaluate(_deep_tree(5000), EmptyLookup(), config=EvaluationConfig())
