"""
Recursive descent parser for the filterlang expression language.

Grammar:
    expression        → value_expression (operator expression)?
    value_expression  → value | "(" expression ")"
    value             → "null" | "true" | "false" | IDENT | STRING | INT | list
    list              → "[" (value ("," value)*)? "]"
    operator          → "==" | "!=" | "<=" | "<" | ">=" | ">"
                      | "contains" | "and" | "or"

There is no precedence: the right operand of every operator is a whole
expression, so ``a == b and c`` is ``a == (b and c)`` and chains are
right-associative. Use parentheses to group anything else.
"""

from __future__ import annotations

import logging

from filterlang.core.environment import EvaluationConfig, get_config
from filterlang.core.errors import ParseError
from filterlang.core.expression_lang.tokenizer import Token, TokenKind, tokenize
from filterlang.core.ir.expressions import (
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
    Variable,
)

logger = logging.getLogger(__name__)

_OPERATOR_TOKENS: dict[TokenKind, Operator] = {
    TokenKind.EQ: Operator.EQ,
    TokenKind.NE: Operator.NE,
    TokenKind.LT: Operator.LT,
    TokenKind.LE: Operator.LE,
    TokenKind.GT: Operator.GT,
    TokenKind.GE: Operator.GE,
    TokenKind.CONTAINS: Operator.CONTAINS,
    TokenKind.AND: Operator.AND,
    TokenKind.OR: Operator.OR,
}


def _describe(tok: Token) -> str:
    if tok.kind == TokenKind.EOF:
        return "end of input"
    return f"{tok.kind} ({tok.value!r})"


class _Parser:
    """Recursive descent parser for expressions.

    Two limits apply. The tree being built may be at most ``max_depth``
    levels high, counting binary nodes and list nesting. Open brackets,
    ``(`` and ``[``, may nest at most ``max_depth`` deep, which bounds the
    parser's own recursion. Canonical text for an accepted tree never
    nests deeper than the tree is high, so it always parses back.
    """

    def __init__(self, tokens: list[Token], source: str, max_depth: int) -> None:
        self.tokens = tokens
        self.source = source
        self.max_depth = max_depth
        self.pos = 0
        self.nesting = 0

    @property
    def current(self) -> Token:
        return self.tokens[self.pos]

    def advance(self) -> Token:
        tok = self.tokens[self.pos]
        if self.pos < len(self.tokens) - 1:
            self.pos += 1
        return tok

    def expect(self, kind: TokenKind) -> Token:
        tok = self.current
        if tok.kind != kind:
            raise self.error(f"Expected {kind}, got {_describe(tok)}", tok)
        return self.advance()

    def match(self, *kinds: TokenKind) -> Token | None:
        if self.current.kind in kinds:
            return self.advance()
        return None

    def error(self, message: str, tok: Token | None = None) -> ParseError:
        tok = tok or self.current
        return ParseError(message, tok.pos, self.source)

    def _open(self, tok: Token) -> None:
        self.nesting += 1
        if self.nesting > self.max_depth:
            raise self.error(
                f"Expression nesting exceeds maximum depth of {self.max_depth}", tok
            )

    def _check_height(self, height: int, tok: Token) -> None:
        if height > self.max_depth:
            raise self.error(f"Expression exceeds maximum depth of {self.max_depth}", tok)

    # -- Grammar rules --
    # Each rule returns the node it built together with that node's height.

    def parse_expression(self) -> tuple[Expr, int]:
        """value_expression (operator expression)?

        A chain ``a op b op c`` is read in a loop and folded from the right.
        """
        operands = [self.parse_value_expression()]
        ops: list[tuple[Operator, Token]] = []
        while (op := _OPERATOR_TOKENS.get(self.current.kind)) is not None:
            ops.append((op, self.advance()))
            operands.append(self.parse_value_expression())

        expr, height = operands.pop()
        while ops:
            op, tok = ops.pop()
            left, left_height = operands.pop()
            expr = BinaryExpr(op=op, left=left, right=expr)
            height = 1 + max(left_height, height)
            self._check_height(height, tok)
        return expr, height

    def parse_value_expression(self) -> tuple[Expr, int]:
        """value | '(' expression ')'"""
        tok = self.current
        if self.match(TokenKind.LPAREN):
            self._open(tok)
            try:
                result = self.parse_expression()
                self.expect(TokenKind.RPAREN)
            finally:
                self.nesting -= 1
            return result

        value, list_height = self.parse_value()
        height = 1 + list_height
        self._check_height(height, tok)
        return ValueExpr(value=value), height

    def parse_value(self) -> tuple[Value, int]:
        """literal | identifier | list

        The height returned is the list nesting, 0 for scalars.
        """
        tok = self.current

        if tok.kind == TokenKind.NULL:
            self.advance()
            return NullValue(), 0
        if tok.kind == TokenKind.TRUE:
            self.advance()
            return BoolValue(value=True), 0
        if tok.kind == TokenKind.FALSE:
            self.advance()
            return BoolValue(value=False), 0
        if tok.kind == TokenKind.INT:
            self.advance()
            try:
                number = int(tok.value)
            except ValueError:
                # Past the interpreter's int string conversion limit
                raise self.error("Integer literal too large", tok) from None
            return IntValue(value=number), 0
        if tok.kind == TokenKind.STRING:
            self.advance()
            return StrValue(value=tok.value), 0
        if tok.kind == TokenKind.IDENT:
            self.advance()
            return Variable(name=tok.value), 0
        if tok.kind == TokenKind.LBRACKET:
            return self._parse_list()

        raise self.error(f"Expected a value, got {_describe(tok)}", tok)

    def _parse_list(self) -> tuple[ListValue, int]:
        """'[' (value (',' value)*)? ']'"""
        self._open(self.current)
        try:
            self.expect(TokenKind.LBRACKET)
            items: list[Value] = []
            height = 0
            if self.current.kind != TokenKind.RBRACKET:
                item, height = self.parse_value()
                items.append(item)
                while self.match(TokenKind.COMMA):
                    item, item_height = self.parse_value()
                    items.append(item)
                    height = max(height, item_height)
            self.expect(TokenKind.RBRACKET)
            return ListValue(items=tuple(items)), height + 1
        finally:
            self.nesting -= 1


def parse_expr(source: str, *, config: EvaluationConfig | None = None) -> Expr:
    """Parse an expression string into an AST.

    The whole input must be consumed.

    Args:
        source: Expression string (e.g., "age >= 18 and status != 'banned'")
        config: Limits to apply; read from the environment when omitted.

    Returns:
        Parsed expression AST.

    Raises:
        ParseError: If the expression is invalid (ExpressionTokenError when
            tokenization fails).
    """
    config = config or get_config()
    tokens = tokenize(source)

    parser = _Parser(tokens, source, config.max_depth)
    expr, _ = parser.parse_expression()

    # Ensure all tokens consumed
    if parser.current.kind != TokenKind.EOF:
        raise parser.error(f"Unexpected token after expression: {parser.current.value!r}")

    logger.debug("Parsed %r as %s", source, expr)
    return expr
