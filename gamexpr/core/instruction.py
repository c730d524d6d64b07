"""Parameter bindings — resolved calls feeding an expression's slots."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional, Union

from gamexpr.core.function_registry import ExpressionFunction, ValueKind

if TYPE_CHECKING:
    from gamexpr.core.expression import Expression


@dataclass(frozen=True)
class ExpressionInstruction:
    """One call fragment of an expression, bound to its registered function.

    Attributes:
        function: The function resolved during preprocessing.
        source: The fragment text, e.g. "Player.Variable(Life)".
        object_name: Object prefix as an expression (object functions only);
                     its identifier is cached the first time it is needed.
        parameters: Call arguments as nested expressions, preprocessed
                    according to the function's declared parameter types.

    The scene and objects are borrowed for the duration of a call and never
    stored on the instruction.
    """

    function: ExpressionFunction
    source: str
    object_name: Optional[Expression] = None
    parameters: tuple[Expression, ...] = field(default_factory=tuple)

    def __call__(
        self,
        scene: Any,
        objects_concerned: Any,
        obj1: Any = None,
        obj2: Any = None,
    ) -> Union[float, str]:
        """Invoke the function and coerce its result to the declared kind."""
        result = self.function.func(scene, objects_concerned, obj1, obj2, self)
        if self.function.returns == ValueKind.TEXT:
            return str(result)
        return float(result)

    def number(
        self,
        index: int,
        scene: Any,
        objects_concerned: Any,
        obj1: Any = None,
        obj2: Any = None,
    ) -> float:
        """Evaluate the index-th parameter as a math expression."""
        return self.parameters[index].get_as_math_expression_result(
            scene, objects_concerned, obj1, obj2
        )

    def text(
        self,
        index: int,
        scene: Any,
        objects_concerned: Any,
        obj1: Any = None,
        obj2: Any = None,
    ) -> str:
        """Evaluate the index-th parameter as a text expression."""
        return self.parameters[index].get_as_text_expression_result(
            scene, objects_concerned, obj1, obj2
        )

    def identifier(self, index: int) -> str:
        """Raw text of the index-th parameter (variable or object name)."""
        return self.parameters[index].get_plain_string().strip()
