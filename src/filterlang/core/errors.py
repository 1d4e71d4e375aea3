"""
Error types for filterlang parsing and evaluation.
"""

from dataclasses import dataclass


class FilterLangError(Exception):
    """Base exception for all filterlang errors."""

    def __init__(self, message: str, context: "SourceContext | None" = None):
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with context if available."""
        if self.context:
            return f"{self.message}\n{self.context.format()}"
        return self.message


class ParseError(FilterLangError):
    """
    Raised when expression text cannot be parsed.

    Examples:
    - Unterminated string literal
    - Operator with no right-hand operand
    - Unconsumed input after a complete expression
    """

    def __init__(self, message: str, pos: int = 0, source: str | None = None):
        self.pos = pos
        context = SourceContext(source=source, pos=pos) if source is not None else None
        super().__init__(message, context)


class ExpressionTokenError(ParseError):
    """Raised when the tokenizer meets a character sequence it cannot read."""


class EvaluationError(FilterLangError):
    """Base class for errors raised while evaluating a parsed expression."""


class TypeMismatchError(EvaluationError):
    """
    Raised when a value is not of the kind an operation requires.

    Examples:
    - ``true and 1`` (logical operand is not a bool)
    - ``as_int()`` on a string value
    """

    def __init__(self, expected: str, actual: str, message: str | None = None):
        self.expected = expected
        self.actual = actual
        super().__init__(message or f"Type mismatch: expected {expected}, got {actual}")


class VariableLookupError(EvaluationError, LookupError):
    """Raised when a variable cannot be resolved."""

    def __init__(self, name: str, reason: str = "not found"):
        self.name = name
        self.reason = reason
        super().__init__(f"Cannot resolve variable {name!r}: {reason}")


class UnresolvedVariableError(VariableLookupError):
    """Raised when a lookup answers with another unresolved variable."""


class VariableCycleError(VariableLookupError):
    """Raised when following variable references revisits a name."""


class IncomparableError(EvaluationError):
    """
    Raised when ordering is requested between values that have no order.

    Examples:
    - ``1 < "a"`` (different kinds)
    - ``[1] < [2]`` (lists are unordered)
    """

    def __init__(self, op: str, left: str, right: str):
        self.op = op
        self.left = left
        self.right = right
        super().__init__(f"Cannot apply {op!r} to {left} and {right}")


class InvalidOperandsError(EvaluationError):
    """Raised when ``contains`` is applied to operands it does not support."""

    def __init__(self, op: str, left: str, right: str):
        self.op = op
        self.left = left
        self.right = right
        super().__init__(f"Invalid operands for {op!r}: {left} and {right}")


class DepthLimitError(EvaluationError):
    """Raised when an expression tree is nested deeper than allowed."""

    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(f"Expression nesting exceeds maximum depth of {limit}")


@dataclass
class SourceContext:
    """
    Location of an error inside expression source text.

    Attributes:
        source: The full expression text
        pos: Character offset of the error (0-indexed)
    """

    source: str
    pos: int

    def format(self) -> str:
        """
        Format the source with a marker under the error position.

        Returns:
            Two lines, e.g.::

                  name == 'John
                          ^^^
        """
        lines = self.source.split("\n")
        # Markers only make sense for single-line input
        if len(lines) > 1:
            return f"at position {self.pos}"

        prefix = "  "
        marker_pos = len(prefix) + min(self.pos, len(self.source))
        return f"{prefix}{self.source}\n{' ' * marker_pos}^^^"
