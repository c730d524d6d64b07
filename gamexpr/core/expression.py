"""Expression — a user-authored formula, preprocessed once, evaluated per tick.

An Expression holds the plain string written in an action or condition
parameter. Construction is cheap (an operator scan only) so whole action
lists can be loaded at once. Before evaluation, preprocess_expressions()
turns the string into an evaluation plan:

- math plan: every call fragment becomes an ExpressionInstruction and is
  replaced by a parameter slot; the rewritten formula is compiled once;
- text plan: a "+"-separated sequence of quoted literals and text calls.

The math plan is tried first; the text plan is the fallback. Whichever
succeeds is stored, and evaluation dispatches on it.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Optional, Protocol, Union

import structlog

from gamexpr.core.errors import (
    ArgumentCountError,
    ExpressionError,
    ExpressionKindError,
    ExpressionNotReadyError,
    MathSyntaxError,
    TextSyntaxError,
    UnresolvedFunctionError,
)
from gamexpr.core.function_registry import FunctionRegistry, ParameterType, ValueKind
from gamexpr.core.identifiers import ObjectIdentifierRegistry
from gamexpr.core.instruction import ExpressionInstruction
from gamexpr.core.math_parser import (
    MATH_FUNCTIONS,
    SLOT_PREFIX,
    CompiledMathExpression,
    MathParser,
    slot_name,
)
from gamexpr.core.operators import (
    ComparisonOperator,
    ModificationOperator,
    scan_comparison_operator,
    scan_modification_operator,
)
from gamexpr.core.scanner import (
    CallFragment,
    find_text_literal_end,
    match_call,
    match_name,
    split_top_level,
    starts_name,
    unescape_text_literal,
)
from gamexpr.core.text_plan import TextPlan

logger = structlog.get_logger()


class SceneContext(Protocol):
    """What preprocessing needs from a scene."""

    functions: FunctionRegistry
    math_parser: MathParser


class ExpressionKind(str, Enum):
    """Evaluation plan held by an expression."""

    UNPROCESSED = "unprocessed"
    MATH = "math"
    TEXT = "text"


@dataclass
class PreprocessResult:
    """Outcome of Expression.preprocess_expressions.

    Attributes:
        success: Whether either plan could be built.
        kind: The plan now held by the expression.
        math_error: Why the math plan failed, None if not attempted or built.
        text_error: Why the text plan failed, None if not attempted or built.

    Truthy exactly when success is True.
    """

    success: bool
    kind: ExpressionKind
    math_error: Optional[str] = None
    text_error: Optional[str] = None

    def __bool__(self) -> bool:
        return self.success


class Expression:
    """A plain expression string plus its cached evaluation metadata."""

    def __init__(self, plain_string: str) -> None:
        """Store the string and classify its operator tokens.

        Args:
            plain_string: The expression text, kept verbatim.
        """
        self._plain_string = plain_string
        self._comparison_operator = scan_comparison_operator(plain_string)
        self._modification_operator = scan_modification_operator(plain_string)

        # Computed on first request, then never refreshed
        self._object_identifier: Optional[int] = None

        self._math_functions: list[ExpressionInstruction] = []
        self._plan: Optional[Union[CompiledMathExpression, TextPlan]] = None
        self._failure_reported = False

    def __repr__(self) -> str:
        return f"Expression({self._plain_string!r}, kind={self.kind.value})"

    def get_plain_string(self) -> str:
        """Get the plain string representing the expression."""
        return self._plain_string

    def get_as_comparison_operator(self) -> ComparisonOperator:
        return self._comparison_operator

    def get_as_modification_operator(self) -> ModificationOperator:
        return self._modification_operator

    @property
    def identifier_computed(self) -> bool:
        return self._object_identifier is not None

    def get_as_object_identifier(self, identifiers: ObjectIdentifierRegistry) -> int:
        """Get the identifier of the object named by the plain string.

        The first call resolves the whole plain string through `identifiers`;
        every later call returns that first value, even if the registry has
        since rebound the name. Identifiers are assumed stable for a scene.
        """
        if self._object_identifier is None:
            self._object_identifier = identifiers.get_oid_from_name(self._plain_string)
        return self._object_identifier

    @property
    def kind(self) -> ExpressionKind:
        if isinstance(self._plan, CompiledMathExpression):
            return ExpressionKind.MATH
        if isinstance(self._plan, TextPlan):
            return ExpressionKind.TEXT
        return ExpressionKind.UNPROCESSED

    @property
    def is_preprocessed(self) -> bool:
        return self._plan is not None

    @property
    def math_expression(self) -> Optional[CompiledMathExpression]:
        """The compiled math form, None unless the kind is MATH."""
        return self._plan if isinstance(self._plan, CompiledMathExpression) else None

    @property
    def text_plan(self) -> Optional[TextPlan]:
        """The text plan, None unless the kind is TEXT."""
        return self._plan if isinstance(self._plan, TextPlan) else None

    def add_math_expr_function(self, instruction: ExpressionInstruction) -> None:
        """Append a binding feeding the next parameter slot.

        Raises:
            ExpressionError: If the expression is already preprocessed; slot
                order is fixed once the math form is compiled.
        """
        if self._plan is not None:
            raise ExpressionError(
                f"Parameter functions of {self._plain_string!r} are frozen after preprocessing"
            )
        self._math_functions.append(instruction)

    def get_math_expr_functions(self) -> tuple[ExpressionInstruction, ...]:
        """Get the bindings generating the values of the math parameters."""
        return tuple(self._math_functions)

    def preprocess_expressions(self, scene: SceneContext) -> PreprocessResult:
        """Build the evaluation plan: math first, text as fallback.

        Calling this on an already preprocessed expression does nothing and
        reports success. A failure leaves the expression unprocessed, so it
        may be retried once the scene registers the missing functions; it is
        logged only the first time.

        Args:
            scene: Provides the function registry and the math parser.

        Returns:
            PreprocessResult, truthy on success.
        """
        if self._plan is not None:
            return PreprocessResult(success=True, kind=self.kind)

        try:
            self._preprocess_math(scene)
            logger.debug(
                "expression_preprocessed",
                expression=self._plain_string,
                kind=ExpressionKind.MATH.value,
                parameter_count=len(self._math_functions),
            )
            return PreprocessResult(success=True, kind=ExpressionKind.MATH)
        except ExpressionError as exc:
            math_error = str(exc)

        try:
            self._preprocess_text(scene)
            logger.debug(
                "expression_preprocessed",
                expression=self._plain_string,
                kind=ExpressionKind.TEXT.value,
            )
            return PreprocessResult(
                success=True, kind=ExpressionKind.TEXT, math_error=math_error
            )
        except ExpressionError as exc:
            text_error = str(exc)

        if not self._failure_reported:
            self._failure_reported = True
            logger.warning(
                "expression_preprocess_failed",
                expression=self._plain_string,
                math_error=math_error,
                text_error=text_error,
            )
        return PreprocessResult(
            success=False,
            kind=ExpressionKind.UNPROCESSED,
            math_error=math_error,
            text_error=text_error,
        )

    def _preprocess_math(self, scene: SceneContext) -> None:
        """Compile the string as a formula over its call fragments.

        Bindings and slot symbols are produced in the same left-to-right
        pass, then published together, so slot i is always fed by binding i.

        Raises:
            ExpressionError: On syntax errors or unresolved functions.
        """
        text = self._plain_string
        rewritten: list[str] = []
        instructions: list[ExpressionInstruction] = []

        i = 0
        while i < len(text):
            ch = text[i]
            if ch == '"':
                raise MathSyntaxError("Text literal in math expression")
            if not starts_name(text, i):
                rewritten.append(ch)
                i += 1
                continue

            call = match_call(text, i)
            if call is None:
                name = match_name(text, i).group()
                if name.startswith(SLOT_PREFIX):
                    raise MathSyntaxError(f"Reserved identifier: {name}")
                rewritten.append(name)
                i += len(name)
                continue

            if (
                call.object_name is None
                and call.name in MATH_FUNCTIONS
                and scene.functions.resolve(call.name, ValueKind.NUMBER) is None
            ):
                # Built-in: left to the math grammar, arguments still scanned
                rewritten.append(call.name)
                i += len(call.name)
                continue

            instructions.append(_build_instruction(call, ValueKind.NUMBER, scene))
            rewritten.append(slot_name(len(instructions) - 1))
            i = call.end

        compiled = scene.math_parser.parse("".join(rewritten), len(instructions))
        for instruction in instructions:
            self.add_math_expr_function(instruction)
        self._plan = compiled

    def _preprocess_text(self, scene: SceneContext) -> None:
        """Split the string into literal and call segments joined by "+".

        Raises:
            ExpressionError: On syntax errors or unresolved functions.
        """
        text = self._plain_string
        if not text.strip():
            raise TextSyntaxError("Empty text expression")

        segments: list[Union[str, ExpressionInstruction]] = []
        for term in split_top_level(text, "+"):
            if not term:
                raise TextSyntaxError(f"Empty term in text expression {text!r}")
            if term[0] == '"':
                if find_text_literal_end(term, 0) != len(term):
                    raise TextSyntaxError(f"Unexpected characters after literal: {term!r}")
                segments.append(unescape_text_literal(term))
                continue

            call = match_call(term, 0) if starts_name(term, 0) else None
            if call is None or call.end != len(term):
                raise TextSyntaxError(f"Not a text literal or call: {term!r}")
            segments.append(_build_instruction(call, ValueKind.TEXT, scene))

        self._plan = TextPlan(tuple(segments))

    def _require(self, kind: ExpressionKind) -> Union[CompiledMathExpression, TextPlan]:
        if self._plan is None:
            raise ExpressionNotReadyError(
                f"Expression {self._plain_string!r} evaluated before preprocessing"
            )
        if self.kind != kind:
            raise ExpressionKindError(
                f"Expression {self._plain_string!r} is a {self.kind.value} expression, "
                f"not {kind.value}"
            )
        return self._plan

    def get_as_math_expression_result(
        self,
        scene: Any,
        objects_concerned: Any,
        obj1: Any = None,
        obj2: Any = None,
    ) -> float:
        """Evaluate as a math expression and return the result.

        Bindings are called in slot order; with no binding the single slot of
        the compiled form receives 0.0.

        Raises:
            ExpressionNotReadyError: If not preprocessed.
            ExpressionKindError: If preprocessed as a text expression.
        """
        compiled = self._require(ExpressionKind.MATH)
        values = [
            instruction(scene, objects_concerned, obj1, obj2)
            for instruction in self._math_functions
        ]
        if not values:
            values.append(0.0)
        return compiled.eval(values)  # type: ignore[union-attr]

    def get_as_text_expression_result(
        self,
        scene: Any,
        objects_concerned: Any,
        obj1: Any = None,
        obj2: Any = None,
    ) -> str:
        """Evaluate as a text expression and return the result.

        Raises:
            ExpressionNotReadyError: If not preprocessed.
            ExpressionKindError: If preprocessed as a math expression.
        """
        plan = self._require(ExpressionKind.TEXT)
        return plan.evaluate(scene, objects_concerned, obj1, obj2)  # type: ignore[union-attr]


def _build_instruction(
    call: CallFragment,
    returns: ValueKind,
    scene: SceneContext,
) -> ExpressionInstruction:
    """Resolve a call fragment and preprocess its arguments.

    Raises:
        UnresolvedFunctionError: If no function of that kind is registered.
        ArgumentCountError: If the call arity differs from the declaration.
        ExpressionError: If an argument fails its own preprocessing.
    """
    function = scene.functions.resolve(call.name, returns)
    if function is None:
        raise UnresolvedFunctionError(call.name, returns.value)
    if len(call.arguments) != len(function.parameters):
        raise ArgumentCountError(
            f"{call.name} expects {len(function.parameters)} argument(s), "
            f"got {len(call.arguments)}"
        )

    parameters = []
    for raw, parameter_type in zip(call.arguments, function.parameters):
        parameter = Expression(raw)
        if parameter_type == ParameterType.EXPRESSION:
            parameter._preprocess_math(scene)
        elif parameter_type == ParameterType.TEXT:
            parameter._preprocess_text(scene)
        parameters.append(parameter)

    return ExpressionInstruction(
        function=function,
        source=call.source,
        object_name=Expression(call.object_name) if call.object_name else None,
        parameters=tuple(parameters),
    )


def preprocess_all(expressions: Iterable[Expression], scene: SceneContext) -> list[Expression]:
    """Preprocess a batch of expressions, e.g. a scene's action list at load time.

    Returns:
        The expressions that could not be preprocessed.
    """
    failed = []
    total = 0
    for expression in expressions:
        total += 1
        if not expression.preprocess_expressions(scene):
            failed.append(expression)

    logger.info("expressions_preprocessed", total=total, failed=len(failed))
    return failed
