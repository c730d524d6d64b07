"""Math expression evaluator — sympy-backed compilation over parameter slots.

The preprocessor rewrites every dynamic sub-expression of a formula into a
slot symbol (`_slot0`, `_slot1`, ...) and hands the rewritten text to
MathParser.parse. The result is a plain Python callable taking one float per
slot, so evaluation costs a single function call per tick.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any, Callable, Sequence

import structlog
import sympy
from sympy.parsing.sympy_parser import (
    convert_xor,
    parse_expr,
    standard_transformations,
)

from gamexpr.core.errors import MathSyntaxError

logger = structlog.get_logger()

# Functions left to the math grammar rather than resolved as registry calls
MATH_FUNCTIONS: dict[str, Any] = {
    "sin": sympy.sin,
    "cos": sympy.cos,
    "tan": sympy.tan,
    "asin": sympy.asin,
    "acos": sympy.acos,
    "atan": sympy.atan,
    "atan2": sympy.atan2,
    "sinh": sympy.sinh,
    "cosh": sympy.cosh,
    "tanh": sympy.tanh,
    "sqrt": sympy.sqrt,
    "abs": sympy.Abs,
    "exp": sympy.exp,
    "log": sympy.log,
    "log10": lambda x: sympy.log(x, 10),
    "floor": sympy.floor,
    "ceil": sympy.ceiling,
    "round": lambda x: sympy.floor(x + sympy.Rational(1, 2)),
    "min": sympy.Min,
    "max": sympy.Max,
}

_CONSTANTS: dict[str, Any] = {
    "pi": sympy.pi,
    "e": sympy.E,
}

# Names the sympy transformations emit into the generated code
_PARSE_GLOBALS: dict[str, Any] = {
    "Symbol": sympy.Symbol,
    "Function": sympy.Function,
    "Integer": sympy.Integer,
    "Float": sympy.Float,
    "Rational": sympy.Rational,
    "factorial": sympy.factorial,
}

_TRANSFORMATIONS = standard_transformations + (convert_xor,)

SLOT_PREFIX = "_slot"

# Numbers, names, operators and grouping; anything else is outside the grammar
_TOKEN_RE = re.compile(
    r"\s+"
    r"|(?P<number>(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)"
    r"|(?P<name>[A-Za-z_][A-Za-z0-9_]*)"
    r"|\*\*|[-+*/^%(),!]"
)


def slot_name(index: int) -> str:
    """Name of the symbol standing for the index-th parameter value."""
    return f"{SLOT_PREFIX}{index}"


def _check_tokens(text: str, slots: set[str]) -> None:
    """Reject anything but numbers, known names, operators and grouping.

    parse_expr evaluates its input as Python, so attribute access, indexing
    and keywords must never reach it.
    """
    allowed = slots.union(MATH_FUNCTIONS, _CONSTANTS)
    pos = 0
    while pos < len(text):
        match = _TOKEN_RE.match(text, pos)
        if match is None:
            raise MathSyntaxError(f"Unexpected character {text[pos]!r} in {text!r}")
        name = match.group("name")
        if name is not None and name not in allowed:
            raise MathSyntaxError(f"Unknown identifier {name!r} in {text!r}")
        pos = match.end()


@dataclass(frozen=True)
class CompiledMathExpression:
    """Parsed arithmetic form, ready for numeric evaluation.

    Attributes:
        source: Rewritten text the expression was compiled from.
        slot_count: Number of values eval() expects (always >= 1).
        expr: The sympy expression, kept for inspection and debugging.
    """

    source: str
    slot_count: int
    expr: sympy.Basic
    _func: Callable[..., Any]

    def eval(self, values: Sequence[float]) -> float:
        """Evaluate with one value per slot, in slot order."""
        if len(values) != self.slot_count:
            raise ValueError(
                f"Expected {self.slot_count} parameter value(s), got {len(values)}"
            )
        return float(self._func(*values))


class MathParser:
    """Compiles rewritten formulas into CompiledMathExpression objects."""

    def __init__(self, modules: str = "math") -> None:
        """Initialize the parser.

        Args:
            modules: sympy.lambdify backend used for compiled callables.
        """
        self.modules = modules

    def parse(self, text: str, slot_count: int) -> CompiledMathExpression:
        """Parse `text` over the slots `_slot0.._slot{n-1}`.

        A compiled form always has at least one slot: with slot_count == 0 the
        expression is compiled over a single unused slot and callers pass
        [0.0] for it. Every expression therefore has the same calling shape.

        Args:
            text: Formula where dynamic sub-expressions are slot symbols.
            slot_count: Number of parameter bindings feeding the slots.

        Returns:
            The compiled expression.

        Raises:
            MathSyntaxError: If text is not a real, finite arithmetic expression
                over the slots, built-in functions and constants.
        """
        if not text.strip():
            raise MathSyntaxError("Empty math expression")

        symbols = [sympy.Symbol(slot_name(i)) for i in range(max(slot_count, 1))]
        _check_tokens(text, {s.name for s in symbols})
        local_dict: dict[str, Any] = {**MATH_FUNCTIONS, **_CONSTANTS}
        local_dict.update((s.name, s) for s in symbols)

        try:
            expr = parse_expr(
                text,
                local_dict=local_dict,
                global_dict=dict(_PARSE_GLOBALS),
                transformations=_TRANSFORMATIONS,
            )
        except Exception as exc:
            raise MathSyntaxError(f"Invalid math expression {text!r}: {exc}") from exc

        if isinstance(expr, (bool, int, float)):
            expr = sympy.sympify(expr)
        if not isinstance(expr, sympy.Basic):
            raise MathSyntaxError(f"Not a math expression: {text!r}")

        unknown = expr.free_symbols - set(symbols)
        if unknown:
            names = ", ".join(sorted(str(s) for s in unknown))
            raise MathSyntaxError(f"Unknown identifier(s) in {text!r}: {names}")
        if expr.has(sympy.zoo, sympy.oo, -sympy.oo, sympy.nan):
            raise MathSyntaxError(f"Expression is not finite: {text!r}")
        if expr.has(sympy.I):
            raise MathSyntaxError(f"Expression is not real: {text!r}")

        try:
            func = sympy.lambdify(symbols, expr, modules=self.modules)
        except Exception as exc:
            raise MathSyntaxError(f"Cannot compile {text!r}: {exc}") from exc

        if not expr.free_symbols:
            # Constant formulas fail here rather than on every evaluation
            try:
                value = float(func(*[0.0] * len(symbols)))
            except (ArithmeticError, TypeError, ValueError) as exc:
                raise MathSyntaxError(f"Cannot evaluate {text!r}: {exc}") from exc
            if not math.isfinite(value):
                raise MathSyntaxError(f"Expression is not finite: {text!r}")

        logger.debug("math_expression_compiled", source=text, slot_count=len(symbols))
        return CompiledMathExpression(
            source=text,
            slot_count=len(symbols),
            expr=expr,
            _func=func,
        )
