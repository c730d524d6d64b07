"""Standard expression functions available to every scene.

Each function follows the registry calling convention:
(scene, objects_concerned, obj1, obj2, instruction) -> float | str.
Object functions act on obj1 or obj2 when they are instances of the named
object, otherwise on the first concerned instance. With no instance at all
they return 0 or "".
"""

from __future__ import annotations

from typing import Optional

import structlog

from gamexpr.core.function_registry import FunctionRegistry, ParameterType, ValueKind
from gamexpr.core.instruction import ExpressionInstruction
from gamexpr.runtime.objects import GameObject, ObjectsConcerned, format_number, to_number
from gamexpr.runtime.scene import RuntimeScene

logger = structlog.get_logger()

EXPRESSION = ParameterType.EXPRESSION
TEXT = ParameterType.TEXT
IDENTIFIER = ParameterType.IDENTIFIER


def _target_object(
    scene: RuntimeScene,
    objects_concerned: ObjectsConcerned,
    obj1: Optional[GameObject],
    obj2: Optional[GameObject],
    instruction: ExpressionInstruction,
) -> Optional[GameObject]:
    oid = instruction.object_name.get_as_object_identifier(scene.identifiers)
    for candidate in (obj1, obj2):
        if candidate is not None and candidate.oid == oid:
            return candidate
    return objects_concerned.first(oid)


# ---------------------------------------------------------------------------
# Number functions
# ---------------------------------------------------------------------------


def random_integer(
    scene: RuntimeScene,
    objects_concerned: ObjectsConcerned,
    obj1: Optional[GameObject],
    obj2: Optional[GameObject],
    instruction: ExpressionInstruction,
) -> float:
    """Random(max): integer between 0 and max, both included."""
    upper = int(instruction.number(0, scene, objects_concerned, obj1, obj2))
    return float(scene.rng.randint(0, max(upper, 0)))


def time_delta(
    scene: RuntimeScene,
    objects_concerned: ObjectsConcerned,
    obj1: Optional[GameObject],
    obj2: Optional[GameObject],
    instruction: ExpressionInstruction,
) -> float:
    return scene.time_delta


def elapsed_time(
    scene: RuntimeScene,
    objects_concerned: ObjectsConcerned,
    obj1: Optional[GameObject],
    obj2: Optional[GameObject],
    instruction: ExpressionInstruction,
) -> float:
    return scene.elapsed_time


def scene_variable(
    scene: RuntimeScene,
    objects_concerned: ObjectsConcerned,
    obj1: Optional[GameObject],
    obj2: Optional[GameObject],
    instruction: ExpressionInstruction,
) -> float:
    return scene.get_variable(instruction.identifier(0))


def to_number_function(
    scene: RuntimeScene,
    objects_concerned: ObjectsConcerned,
    obj1: Optional[GameObject],
    obj2: Optional[GameObject],
    instruction: ExpressionInstruction,
) -> float:
    return to_number(instruction.text(0, scene, objects_concerned, obj1, obj2).strip())


def text_length(
    scene: RuntimeScene,
    objects_concerned: ObjectsConcerned,
    obj1: Optional[GameObject],
    obj2: Optional[GameObject],
    instruction: ExpressionInstruction,
) -> float:
    return float(len(instruction.text(0, scene, objects_concerned, obj1, obj2)))


def object_count(
    scene: RuntimeScene,
    objects_concerned: ObjectsConcerned,
    obj1: Optional[GameObject],
    obj2: Optional[GameObject],
    instruction: ExpressionInstruction,
) -> float:
    """Count(Object): number of concerned instances of an object."""
    oid = instruction.parameters[0].get_as_object_identifier(scene.identifiers)
    return float(len(objects_concerned.pick(oid)))


def object_x(
    scene: RuntimeScene,
    objects_concerned: ObjectsConcerned,
    obj1: Optional[GameObject],
    obj2: Optional[GameObject],
    instruction: ExpressionInstruction,
) -> float:
    obj = _target_object(scene, objects_concerned, obj1, obj2, instruction)
    return obj.x if obj is not None else 0.0


def object_y(
    scene: RuntimeScene,
    objects_concerned: ObjectsConcerned,
    obj1: Optional[GameObject],
    obj2: Optional[GameObject],
    instruction: ExpressionInstruction,
) -> float:
    obj = _target_object(scene, objects_concerned, obj1, obj2, instruction)
    return obj.y if obj is not None else 0.0


def object_angle(
    scene: RuntimeScene,
    objects_concerned: ObjectsConcerned,
    obj1: Optional[GameObject],
    obj2: Optional[GameObject],
    instruction: ExpressionInstruction,
) -> float:
    obj = _target_object(scene, objects_concerned, obj1, obj2, instruction)
    return obj.angle if obj is not None else 0.0


def object_variable(
    scene: RuntimeScene,
    objects_concerned: ObjectsConcerned,
    obj1: Optional[GameObject],
    obj2: Optional[GameObject],
    instruction: ExpressionInstruction,
) -> float:
    obj = _target_object(scene, objects_concerned, obj1, obj2, instruction)
    return obj.get_variable(instruction.identifier(0)) if obj is not None else 0.0


# ---------------------------------------------------------------------------
# Text functions
# ---------------------------------------------------------------------------


def number_to_string(
    scene: RuntimeScene,
    objects_concerned: ObjectsConcerned,
    obj1: Optional[GameObject],
    obj2: Optional[GameObject],
    instruction: ExpressionInstruction,
) -> str:
    return format_number(instruction.number(0, scene, objects_concerned, obj1, obj2))


def scene_variable_string(
    scene: RuntimeScene,
    objects_concerned: ObjectsConcerned,
    obj1: Optional[GameObject],
    obj2: Optional[GameObject],
    instruction: ExpressionInstruction,
) -> str:
    return scene.get_variable_string(instruction.identifier(0))


def new_line(
    scene: RuntimeScene,
    objects_concerned: ObjectsConcerned,
    obj1: Optional[GameObject],
    obj2: Optional[GameObject],
    instruction: ExpressionInstruction,
) -> str:
    return "\n"


def substring(
    scene: RuntimeScene,
    objects_concerned: ObjectsConcerned,
    obj1: Optional[GameObject],
    obj2: Optional[GameObject],
    instruction: ExpressionInstruction,
) -> str:
    """SubStr(text, start, length): clamped to the text bounds."""
    text = instruction.text(0, scene, objects_concerned, obj1, obj2)
    start = max(int(instruction.number(1, scene, objects_concerned, obj1, obj2)), 0)
    length = max(int(instruction.number(2, scene, objects_concerned, obj1, obj2)), 0)
    return text[start : start + length]


def object_name(
    scene: RuntimeScene,
    objects_concerned: ObjectsConcerned,
    obj1: Optional[GameObject],
    obj2: Optional[GameObject],
    instruction: ExpressionInstruction,
) -> str:
    obj = _target_object(scene, objects_concerned, obj1, obj2, instruction)
    return obj.name if obj is not None else ""


def object_variable_string(
    scene: RuntimeScene,
    objects_concerned: ObjectsConcerned,
    obj1: Optional[GameObject],
    obj2: Optional[GameObject],
    instruction: ExpressionInstruction,
) -> str:
    obj = _target_object(scene, objects_concerned, obj1, obj2, instruction)
    return obj.get_variable_string(instruction.identifier(0)) if obj is not None else ""


_NUMBER_FUNCTIONS = [
    ("Random", random_integer, (EXPRESSION,), False),
    ("TimeDelta", time_delta, (), False),
    ("Time", elapsed_time, (), False),
    ("Variable", scene_variable, (IDENTIFIER,), False),
    ("ToNumber", to_number_function, (TEXT,), False),
    ("StrLength", text_length, (TEXT,), False),
    ("Count", object_count, (IDENTIFIER,), False),
    ("X", object_x, (), True),
    ("Y", object_y, (), True),
    ("Angle", object_angle, (), True),
    ("Variable", object_variable, (IDENTIFIER,), True),
]

_TEXT_FUNCTIONS = [
    ("ToString", number_to_string, (EXPRESSION,), False),
    ("VariableString", scene_variable_string, (IDENTIFIER,), False),
    ("NewLine", new_line, (), False),
    ("SubStr", substring, (TEXT, EXPRESSION, EXPRESSION), False),
    ("Name", object_name, (), True),
    ("VariableString", object_variable_string, (IDENTIFIER,), True),
]


def register_builtins(registry: FunctionRegistry) -> FunctionRegistry:
    """Register the standard number and text functions.

    Returns:
        The same registry, for chaining.
    """
    for returns, table in ((ValueKind.NUMBER, _NUMBER_FUNCTIONS), (ValueKind.TEXT, _TEXT_FUNCTIONS)):
        for name, func, parameters, object_function in table:
            registry.register(
                name,
                func,
                returns=returns,
                parameters=parameters,
                object_function=object_function,
            )

    logger.info(
        "builtins_registered",
        number_functions=len(_NUMBER_FUNCTIONS),
        text_functions=len(_TEXT_FUNCTIONS),
        registry_version=registry.version,
    )
    return registry
