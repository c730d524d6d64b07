"""Game objects and per-evaluation object picking."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional, Union

if TYPE_CHECKING:
    from gamexpr.runtime.scene import RuntimeScene


@dataclass
class GameObject:
    """A single object instance living in a scene.

    Only the properties the standard expression functions read are modelled;
    moving and drawing objects is the runtime's business.
    """

    # Identity
    name: str
    oid: int

    # Spatial properties
    x: float = 0.0
    y: float = 0.0
    angle: float = 0.0  # degrees

    variables: dict[str, Union[float, str]] = field(default_factory=dict)

    def get_variable(self, name: str) -> float:
        """Numeric value of an object variable, 0.0 if unset or not numeric."""
        return to_number(self.variables.get(name, 0.0))

    def get_variable_string(self, name: str) -> str:
        """Text value of an object variable, "" if unset."""
        return to_text(self.variables.get(name, ""))


class ObjectsConcerned:
    """Objects picked by the conditions of the event being run.

    Picking is keyed by object identifier. An identifier that no condition
    has narrowed yet resolves to every instance of that object in the scene.
    """

    def __init__(self, scene: RuntimeScene) -> None:
        self.scene = scene
        self._picked: dict[int, list[GameObject]] = {}

    def pick(self, oid: int) -> list[GameObject]:
        """Get the concerned instances of an object."""
        if oid not in self._picked:
            self._picked[oid] = self.scene.objects_with_oid(oid)
        return self._picked[oid]

    def set_picked(self, oid: int, objects: list[GameObject]) -> None:
        """Restrict the concerned instances of an object, as conditions do."""
        self._picked[oid] = list(objects)

    def first(self, oid: int) -> Optional[GameObject]:
        picked = self.pick(oid)
        return picked[0] if picked else None

    def reset(self) -> None:
        """Forget every pick, e.g. at the start of a new event."""
        self._picked.clear()


def to_number(value: Union[float, str]) -> float:
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return 0.0
    return float(value)


def to_text(value: Union[float, str]) -> str:
    if isinstance(value, str):
        return value
    return format_number(value)


def format_number(value: float) -> str:
    """Render a number the way text expressions show it ("3", "2.5")."""
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)
