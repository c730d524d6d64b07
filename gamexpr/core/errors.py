"""Exception hierarchy for expression preprocessing and evaluation."""


class ExpressionError(Exception):
    """Base exception for all expression errors."""


class ExpressionSyntaxError(ExpressionError):
    """Raised when a plain string cannot be split into a valid plan."""


class MathSyntaxError(ExpressionSyntaxError):
    """Raised when the math grammar rejects the rewritten expression."""


class TextSyntaxError(ExpressionSyntaxError):
    """Raised when a string is not a concatenation of literals and calls."""


class ArgumentCountError(ExpressionSyntaxError):
    """Raised when a call passes a different number of arguments than declared."""


class UnresolvedFunctionError(ExpressionError):
    """Raised when a call fragment names a function absent from the registry."""

    def __init__(self, name: str, returns: str) -> None:
        self.name = name
        self.returns = returns
        super().__init__(f"Unknown {returns} function: {name}")


class ExpressionNotReadyError(ExpressionError):
    """Raised when an expression is evaluated before successful preprocessing."""


class ExpressionKindError(ExpressionError):
    """Raised when a math expression is evaluated as text or vice versa."""
