"""
filterlang expression language.

Tokenizer, parser, evaluator, and printers for boolean filter
predicates over named variables.

Usage:
    from filterlang.core.expression_lang import MappingLookup, evaluate, parse_expr

    expr = parse_expr("age >= 18 and status != 'banned'")
    result = evaluate(expr, MappingLookup({"age": 30, "status": "active"}))
    # result == BoolValue(value=True)
"""

from filterlang.core.expression_lang.evaluator import evaluate, evaluate_predicate, resolve_value
from filterlang.core.expression_lang.lookup import EmptyLookup, MappingLookup, VariableLookup
from filterlang.core.expression_lang.parser import parse_expr
from filterlang.core.expression_lang.printer import dump, unparse

__all__ = [
    "EmptyLookup",
    "MappingLookup",
    "VariableLookup",
    "dump",
    "evaluate",
    "evaluate_predicate",
    "parse_expr",
    "resolve_value",
    "unparse",
]
