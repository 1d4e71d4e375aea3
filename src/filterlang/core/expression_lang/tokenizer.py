"""
Tokenizer for the filterlang expression language.

Converts an expression string into a sequence of typed tokens.
"""

from __future__ import annotations

import re
from enum import StrEnum, auto

from filterlang.core.errors import ExpressionTokenError


class TokenKind(StrEnum):
    """Token types for the expression language."""

    # Literals
    INT = auto()
    STRING = auto()

    # Identifiers and keywords
    IDENT = auto()
    TRUE = auto()
    FALSE = auto()
    NULL = auto()
    AND = auto()
    OR = auto()
    CONTAINS = auto()

    # Operators
    EQ = auto()
    NE = auto()
    LT = auto()
    GT = auto()
    LE = auto()
    GE = auto()

    # Punctuation
    LPAREN = auto()
    RPAREN = auto()
    LBRACKET = auto()
    RBRACKET = auto()
    COMMA = auto()

    # End of input
    EOF = auto()


class Token:
    """A single token from the expression tokenizer."""

    __slots__ = ("kind", "value", "pos")

    def __init__(self, kind: TokenKind, value: str, pos: int) -> None:
        self.kind = kind
        self.value = value
        self.pos = pos

    def __repr__(self) -> str:
        return f"Token({self.kind}, {self.value!r}, pos={self.pos})"


_KEYWORDS: dict[str, TokenKind] = {
    "true": TokenKind.TRUE,
    "false": TokenKind.FALSE,
    "null": TokenKind.NULL,
    "and": TokenKind.AND,
    "or": TokenKind.OR,
    "contains": TokenKind.CONTAINS,
}

# Longer operators first so "<=" is never read as "<" followed by "="
_OPERATORS: tuple[tuple[str, TokenKind], ...] = (
    ("==", TokenKind.EQ),
    ("!=", TokenKind.NE),
    ("<=", TokenKind.LE),
    (">=", TokenKind.GE),
    ("<", TokenKind.LT),
    (">", TokenKind.GT),
)

_PUNCTUATION: dict[str, TokenKind] = {
    "(": TokenKind.LPAREN,
    ")": TokenKind.RPAREN,
    "[": TokenKind.LBRACKET,
    "]": TokenKind.RBRACKET,
    ",": TokenKind.COMMA,
}

# Backslash escapes accepted inside a string, besides its own delimiter
_ESCAPES: dict[str, str] = {
    "\\": "\\",
    "n": "\n",
}

_INT_RE = re.compile(r"[0-9]+")
# Identifier: letter or underscore followed by alphanumerics/underscores
_IDENT_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


def tokenize(source: str) -> list[Token]:
    """Tokenize an expression string into a list of tokens."""
    tokens: list[Token] = []
    i = 0
    n = len(source)

    while i < n:
        c = source[i]

        # Skip whitespace
        if c in " \t\n\r":
            i += 1
            continue

        # String literals
        if c in ('"', "'"):
            i, tok = _read_string(source, i)
            tokens.append(tok)
            continue

        # Unsigned integers
        if c.isascii() and c.isdigit():
            m = _INT_RE.match(source, i)
            assert m is not None
            tokens.append(Token(TokenKind.INT, m.group(0), i))
            i = m.end()
            continue

        # Identifiers and keywords
        m = _IDENT_RE.match(source, i)
        if m:
            word = m.group(0)
            kind = _KEYWORDS.get(word, TokenKind.IDENT)
            tokens.append(Token(kind, word, i))
            i = m.end()
            continue

        for text, kind in _OPERATORS:
            if source.startswith(text, i):
                tokens.append(Token(kind, text, i))
                i += len(text)
                break
        else:
            if c in _PUNCTUATION:
                tokens.append(Token(_PUNCTUATION[c], c, i))
                i += 1
                continue
            raise ExpressionTokenError(f"Unexpected character: {c!r}", i, source)

    tokens.append(Token(TokenKind.EOF, "", n))
    return tokens


def _read_string(source: str, start: int) -> tuple[int, Token]:
    """Read a quoted string literal, decoding its escapes."""
    quote = source[start]
    i = start + 1
    n = len(source)
    chars: list[str] = []

    while i < n:
        c = source[i]
        if c == "\\":
            if i + 1 >= n:
                raise ExpressionTokenError("Unterminated escape sequence", i, source)
            escaped = source[i + 1]
            if escaped == quote:
                chars.append(quote)
            elif escaped in _ESCAPES:
                chars.append(_ESCAPES[escaped])
            else:
                raise ExpressionTokenError(f"Invalid escape sequence: \\{escaped}", i, source)
            i += 2
            continue
        if c == quote:
            return i + 1, Token(TokenKind.STRING, "".join(chars), start)
        chars.append(c)
        i += 1

    raise ExpressionTokenError("Unterminated string literal", start, source)
