"""Text expression plan — literal and dynamic fragments in authored order."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

from gamexpr.core.instruction import ExpressionInstruction

TextSegment = Union[str, ExpressionInstruction]


@dataclass(frozen=True)
class TextPlan:
    """Preprocessed form of a text expression such as `"Hi " + Player.Name()`.

    Attributes:
        segments: Literal strings and text-producing instructions.
    """

    segments: tuple[TextSegment, ...]

    @property
    def instructions(self) -> tuple[ExpressionInstruction, ...]:
        return tuple(s for s in self.segments if isinstance(s, ExpressionInstruction))

    def evaluate(
        self,
        scene: Any,
        objects_concerned: Any,
        obj1: Any = None,
        obj2: Any = None,
    ) -> str:
        parts = []
        for segment in self.segments:
            if isinstance(segment, str):
                parts.append(segment)
            else:
                parts.append(str(segment(scene, objects_concerned, obj1, obj2)))
        return "".join(parts)
