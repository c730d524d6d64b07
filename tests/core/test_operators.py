"""Unit tests for operator scanning and application."""

from __future__ import annotations

import pytest

from gamexpr.core.operators import (
    ComparisonOperator,
    ModificationOperator,
    compare,
    modify,
    scan_comparison_operator,
    scan_modification_operator,
)


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("=", ComparisonOperator.EQUAL),
        ("==", ComparisonOperator.EQUAL),
        ("<", ComparisonOperator.LESS_THAN),
        (">", ComparisonOperator.GREATER_THAN),
        ("<=", ComparisonOperator.LESS_OR_EQUAL),
        (">=", ComparisonOperator.GREATER_OR_EQUAL),
        ("!=", ComparisonOperator.NOT_EQUAL),
        (" >= ", ComparisonOperator.GREATER_OR_EQUAL),
        ("Player.X() < 10", ComparisonOperator.LESS_THAN),
    ],
)
def test_scan_comparison_operator(text, expected):
    """Test that a single comparison token is classified."""
    assert scan_comparison_operator(text) == expected


@pytest.mark.parametrize("text", ["", "2+3", "a<b<c", "MyObject", "\"<=\""])
def test_scan_comparison_operator_undefined(text):
    """Test that zero, several, or quoted tokens yield UNDEFINED."""
    assert scan_comparison_operator(text) == ComparisonOperator.UNDEFINED


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("=", ModificationOperator.SET),
        ("+", ModificationOperator.ADD),
        ("-", ModificationOperator.SUBTRACT),
        ("*", ModificationOperator.MULTIPLY),
        ("/", ModificationOperator.DIVIDE),
    ],
)
def test_scan_modification_operator(text, expected):
    """Test that a single modification token is classified."""
    assert scan_modification_operator(text) == expected


def test_comparison_tokens_do_not_count_as_modification():
    """Test that '>=' is read whole, so its '=' is not SET."""
    assert scan_modification_operator(">=") == ModificationOperator.UNDEFINED
    assert scan_modification_operator("<=") == ModificationOperator.UNDEFINED
    assert scan_modification_operator("!=") == ModificationOperator.UNDEFINED


def test_multiple_modification_tokens_are_undefined():
    """Test that a formula with several operators has no modification code."""
    assert scan_modification_operator("3+Object.X()*2") == ModificationOperator.UNDEFINED


def test_equal_sign_is_both_equal_and_set():
    """Test that '=' classifies on both axes independently."""
    assert scan_comparison_operator("=") == ComparisonOperator.EQUAL
    assert scan_modification_operator("=") == ModificationOperator.SET


def test_operator_codes_are_ordered():
    """Test that codes keep their serialized numeric values."""
    assert int(ComparisonOperator.EQUAL) == 0
    assert int(ComparisonOperator.UNDEFINED) == 6
    assert int(ModificationOperator.SET) == 0
    assert int(ModificationOperator.UNDEFINED) == 5


class TestCompare:
    """Test comparison operator application."""

    def test_numbers(self) -> None:
        assert compare(ComparisonOperator.EQUAL, 2.0, 2.0)
        assert compare(ComparisonOperator.NOT_EQUAL, 2.0, 3.0)
        assert compare(ComparisonOperator.LESS_THAN, 2.0, 3.0)
        assert compare(ComparisonOperator.GREATER_THAN, 3.0, 2.0)
        assert compare(ComparisonOperator.LESS_OR_EQUAL, 3.0, 3.0)
        assert compare(ComparisonOperator.GREATER_OR_EQUAL, 3.0, 3.0)
        assert not compare(ComparisonOperator.LESS_THAN, 3.0, 3.0)

    def test_text(self) -> None:
        assert compare(ComparisonOperator.EQUAL, "abc", "abc")
        assert compare(ComparisonOperator.NOT_EQUAL, "abc", "abd")

    def test_undefined_never_matches(self) -> None:
        assert not compare(ComparisonOperator.UNDEFINED, 1.0, 1.0)


class TestModify:
    """Test modification operator application."""

    def test_numbers(self) -> None:
        assert modify(ModificationOperator.SET, 10.0, 4.0) == 4.0
        assert modify(ModificationOperator.ADD, 10.0, 4.0) == 14.0
        assert modify(ModificationOperator.SUBTRACT, 10.0, 4.0) == 6.0
        assert modify(ModificationOperator.MULTIPLY, 10.0, 4.0) == 40.0
        assert modify(ModificationOperator.DIVIDE, 10.0, 4.0) == 2.5
        assert modify(ModificationOperator.UNDEFINED, 10.0, 4.0) == 10.0

    def test_text(self) -> None:
        assert modify(ModificationOperator.SET, "a", "b") == "b"
        assert modify(ModificationOperator.ADD, "Hello ", "world") == "Hello world"
        assert modify(ModificationOperator.MULTIPLY, "a", "b") == "a"
