"""Comparison and modification operator codes carried by expressions.

Conditions compare a value against an expression using the comparison
operator of an operator parameter; actions update a value using its
modification operator. Both codes are extracted once, when the expression is
constructed, by scanning the plain string for operator tokens.
"""

from __future__ import annotations

import re
from enum import IntEnum
from typing import Union

from gamexpr.core.scanner import strip_text_literals


class ComparisonOperator(IntEnum):
    """Comparison codes, in the order used by serialized action lists."""

    EQUAL = 0
    LESS_THAN = 1
    GREATER_THAN = 2
    LESS_OR_EQUAL = 3
    GREATER_OR_EQUAL = 4
    NOT_EQUAL = 5
    UNDEFINED = 6


class ModificationOperator(IntEnum):
    """Modification codes, in the order used by serialized action lists."""

    SET = 0
    ADD = 1
    SUBTRACT = 2
    MULTIPLY = 3
    DIVIDE = 4
    UNDEFINED = 5


# Longest tokens first so "<=" is never read as "<" followed by "="
_OPERATOR_TOKEN_RE = re.compile(r"<=|>=|!=|==|[=<>+\-*/]")

_COMPARISON_TOKENS = {
    "=": ComparisonOperator.EQUAL,
    "==": ComparisonOperator.EQUAL,
    "<": ComparisonOperator.LESS_THAN,
    ">": ComparisonOperator.GREATER_THAN,
    "<=": ComparisonOperator.LESS_OR_EQUAL,
    ">=": ComparisonOperator.GREATER_OR_EQUAL,
    "!=": ComparisonOperator.NOT_EQUAL,
}

_MODIFICATION_TOKENS = {
    "=": ModificationOperator.SET,
    "+": ModificationOperator.ADD,
    "-": ModificationOperator.SUBTRACT,
    "*": ModificationOperator.MULTIPLY,
    "/": ModificationOperator.DIVIDE,
}


def _operator_tokens(text: str) -> list[str]:
    return _OPERATOR_TOKEN_RE.findall(strip_text_literals(text))


def scan_comparison_operator(text: str) -> ComparisonOperator:
    """Classify the comparison token of a string.

    Exactly one comparison token must appear (text literals are ignored);
    zero or several tokens yield UNDEFINED.

    Examples:
        ">="     → GREATER_OR_EQUAL
        "a == b" → EQUAL
        "a<b<c"  → UNDEFINED
    """
    found = [t for t in _operator_tokens(text) if t in _COMPARISON_TOKENS]
    if len(found) != 1:
        return ComparisonOperator.UNDEFINED
    return _COMPARISON_TOKENS[found[0]]


def scan_modification_operator(text: str) -> ModificationOperator:
    """Classify the modification token of a string.

    Same rule as scan_comparison_operator: a single token is required.
    Comparison tokens such as ">=" are consumed whole, so their "=" never
    counts as SET.
    """
    found = [t for t in _operator_tokens(text) if t in _MODIFICATION_TOKENS]
    if len(found) != 1:
        return ModificationOperator.UNDEFINED
    return _MODIFICATION_TOKENS[found[0]]


Value = Union[float, str]


def compare(operator: ComparisonOperator, lhs: Value, rhs: Value) -> bool:
    """Apply a comparison operator. UNDEFINED never matches."""
    if operator == ComparisonOperator.EQUAL:
        return lhs == rhs
    if operator == ComparisonOperator.NOT_EQUAL:
        return lhs != rhs
    if operator == ComparisonOperator.LESS_THAN:
        return lhs < rhs  # type: ignore[operator]
    if operator == ComparisonOperator.GREATER_THAN:
        return lhs > rhs  # type: ignore[operator]
    if operator == ComparisonOperator.LESS_OR_EQUAL:
        return lhs <= rhs  # type: ignore[operator]
    if operator == ComparisonOperator.GREATER_OR_EQUAL:
        return lhs >= rhs  # type: ignore[operator]
    return False


def modify(operator: ModificationOperator, current: Value, value: Value) -> Value:
    """Apply a modification operator to a current value.

    Text values only support SET and ADD (concatenation); any other operator,
    and UNDEFINED for numbers, leaves the current value unchanged.
    """
    if operator == ModificationOperator.SET:
        return value
    if isinstance(current, str) or isinstance(value, str):
        if operator == ModificationOperator.ADD:
            return f"{current}{value}"
        return current
    if operator == ModificationOperator.ADD:
        return current + value
    if operator == ModificationOperator.SUBTRACT:
        return current - value
    if operator == ModificationOperator.MULTIPLY:
        return current * value
    if operator == ModificationOperator.DIVIDE:
        return current / value
    return current
