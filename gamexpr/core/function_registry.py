"""Named function registry with snapshot mechanism.

Expression strings reference functions by name: free functions such as
`Random(10)` and object functions such as `Player.X()`. This module keeps the
callables behind those names. Every mutation replaces the dict atomically and
bumps `version`, so a dict returned by get_snapshot() never changes under its
holder. Preprocessing resolves names against the live registry.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Optional, Union

import structlog

if TYPE_CHECKING:
    from gamexpr.core.instruction import ExpressionInstruction

logger = structlog.get_logger()


class ValueKind(str, Enum):
    """What a function produces when called."""

    NUMBER = "number"
    TEXT = "text"


class ParameterType(str, Enum):
    """How a call argument is preprocessed before the function sees it."""

    EXPRESSION = "expression"  # preprocessed as math
    TEXT = "text"  # preprocessed as text
    IDENTIFIER = "identifier"  # kept as a raw name (variables, objects)


# (scene, objects_concerned, obj1, obj2, instruction) -> float | str
ExpressionCallable = Callable[
    [Any, Any, Any, Any, "ExpressionInstruction"], Union[float, str]
]


@dataclass(frozen=True)
class ExpressionFunction:
    """A registered function and its calling contract.

    Attributes:
        name: Name used in expressions (member name for object functions).
        func: The callable invoked at evaluation time.
        returns: Kind of value produced.
        parameters: Declared argument types; calls must match the arity.
        object_function: True for `Object.Member(...)` functions.
    """

    name: str
    func: ExpressionCallable
    returns: ValueKind = ValueKind.NUMBER
    parameters: tuple[ParameterType, ...] = ()
    object_function: bool = False


_Key = tuple[ValueKind, bool, str]


class FunctionRegistry:
    """Registry for the functions expressions can call.

    Number and text functions live in separate namespaces, so `Name()` may be
    registered once for each result kind. Object functions are keyed by member
    name only: `Player.X()` and `Enemy.X()` resolve to the same function, which
    receives the object name through its instruction.
    """

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._functions: dict[_Key, ExpressionFunction] = {}
        # Monotonically increasing; increments on every register/unregister.
        self._version: int = 0

    @property
    def version(self) -> int:
        """Registry mutation counter — use this to detect any change."""
        return self._version

    def register(
        self,
        name: str,
        func: ExpressionCallable,
        *,
        returns: ValueKind = ValueKind.NUMBER,
        parameters: tuple[ParameterType, ...] = (),
        object_function: bool = False,
    ) -> ExpressionFunction:
        """Register a function, replacing any previous one with the same key.

        Args:
            name: Function name; for object functions, the member name only.
            func: Callable receiving (scene, objects_concerned, obj1, obj2,
                  instruction).
            returns: Kind of value the function produces.
            parameters: Declared argument types, in call order.
            object_function: Register as `Object.name(...)` instead of `name(...)`.

        Returns:
            The registered ExpressionFunction.

        Note:
            Uses atomic dict replacement.
        """
        if "." in name:
            raise ValueError(f"Function names cannot contain '.': {name!r}")
        function = ExpressionFunction(
            name=name,
            func=func,
            returns=ValueKind(returns),
            parameters=tuple(ParameterType(p) for p in parameters),
            object_function=object_function,
        )

        new_functions = self._functions.copy()
        new_functions[(function.returns, object_function, name)] = function
        self._functions = new_functions
        self._version += 1

        logger.debug(
            "function_registered",
            function_name=name,
            returns=function.returns.value,
            arity=len(function.parameters),
            object_function=object_function,
        )
        return function

    def unregister(
        self,
        name: str,
        *,
        returns: ValueKind = ValueKind.NUMBER,
        object_function: bool = False,
    ) -> bool:
        """Remove a function from the registry.

        Returns:
            bool: True if the function was removed, False if it wasn't registered.

        Note:
            Expressions already preprocessed keep their resolved function.
        """
        key = (ValueKind(returns), object_function, name)
        if key not in self._functions:
            logger.warning("function_unregister_failed", function_name=name, reason="not_found")
            return False

        new_functions = self._functions.copy()
        del new_functions[key]
        self._functions = new_functions
        self._version += 1

        logger.debug("function_unregistered", function_name=name)
        return True

    def resolve(self, name: str, returns: ValueKind) -> Optional[ExpressionFunction]:
        """Look up the function a call fragment refers to.

        Args:
            name: Name as written in the expression (`Random`, `Player.X`).
            returns: Kind of value the caller needs.

        Returns:
            The matching function, or None if not registered.
        """
        if "." in name:
            return self._functions.get((returns, True, name.rsplit(".", 1)[-1]))
        return self._functions.get((returns, False, name))

    def get_snapshot(self) -> dict[_Key, ExpressionFunction]:
        """Get an immutable snapshot of all registered functions.

        Returns:
            A copy of the registry at this moment in time.
        """
        return self._functions.copy()

    def __len__(self) -> int:
        return len(self._functions)
