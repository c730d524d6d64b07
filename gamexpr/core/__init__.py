"""Expression core — operators, registries, preprocessing, evaluation."""

from gamexpr.core.errors import ExpressionError
from gamexpr.core.expression import Expression, ExpressionKind, PreprocessResult, preprocess_all
from gamexpr.core.function_registry import FunctionRegistry, ParameterType, ValueKind
from gamexpr.core.identifiers import NO_OBJECT, ObjectIdentifierRegistry
from gamexpr.core.math_parser import MathParser
from gamexpr.core.operators import ComparisonOperator, ModificationOperator

__all__ = [
    "ComparisonOperator",
    "Expression",
    "ExpressionError",
    "ExpressionKind",
    "FunctionRegistry",
    "MathParser",
    "ModificationOperator",
    "NO_OBJECT",
    "ObjectIdentifierRegistry",
    "ParameterType",
    "PreprocessResult",
    "ValueKind",
    "preprocess_all",
]
