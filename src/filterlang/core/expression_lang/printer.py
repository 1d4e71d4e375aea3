"""
Debug renderings of expression trees.

``unparse`` gives canonical source text that parses back to an equal
tree. ``dump`` gives an indented, one-node-per-line view for logs and
the CLI.
"""

from __future__ import annotations

from filterlang.core.ir.expressions import BinaryExpr, Expr, ListValue, Value, ValueExpr

_INDENT = "  "


def unparse(expr: Expr) -> str:
    """Render an expression as canonical source text.

    Every binary node is parenthesised and strings are always
    double-quoted, so whitespace and the original quote style are lost.

    Examples:
        >>> unparse(parse_expr("name == 'John'"))
        '(name == "John")'
    """
    return str(expr)


def dump(expr: Expr, depth: int = 0) -> str:
    """Render an expression as an indented tree, one node per line."""
    pad = _INDENT * depth
    if isinstance(expr, BinaryExpr):
        return "\n".join(
            [
                f"{pad}BinaryExpr {expr.op.value}",
                dump(expr.left, depth + 1),
                dump(expr.right, depth + 1),
            ]
        )
    if isinstance(expr, ValueExpr):
        return _dump_value(expr.value, depth)
    return f"{pad}{type(expr).__name__}"


def _dump_value(value: Value, depth: int) -> str:
    pad = _INDENT * depth
    if isinstance(value, ListValue):
        lines = [f"{pad}List[{len(value.items)}]"]
        lines.extend(_dump_value(item, depth + 1) for item in value.items)
        return "\n".join(lines)
    return f"{pad}{value.kind.capitalize()}({value})"
