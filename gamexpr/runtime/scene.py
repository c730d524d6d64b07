"""Runtime scene — the context expressions are preprocessed and evaluated in.

A scene owns the registries expressions resolve against (functions, object
identifiers), the math parser that compiles formulas, and the minimal state
the standard functions read: variables, timing, random source and objects.
"""

from __future__ import annotations

import random
from typing import Optional, Union

import structlog

from gamexpr.config import Settings
from gamexpr.core.function_registry import FunctionRegistry
from gamexpr.core.identifiers import ObjectIdentifierRegistry
from gamexpr.core.math_parser import MathParser
from gamexpr.runtime.objects import GameObject, to_number, to_text

logger = structlog.get_logger()


class RuntimeScene:
    """Scene context passed to preprocessing and evaluation."""

    def __init__(
        self,
        name: str = "scene",
        functions: Optional[FunctionRegistry] = None,
        identifiers: Optional[ObjectIdentifierRegistry] = None,
        math_parser: Optional[MathParser] = None,
        seed: Optional[int] = None,
    ) -> None:
        """Initialize an empty scene.

        Args:
            name: Scene name, used in logs.
            functions: Function registry; a new empty one if None.
            identifiers: Object identifier registry; a new one if None.
            math_parser: Parser compiling math expressions; default if None.
            seed: Seed for the scene's random source.
        """
        self.name = name
        self.functions = functions if functions is not None else FunctionRegistry()
        self.identifiers = identifiers if identifiers is not None else ObjectIdentifierRegistry()
        self.math_parser = math_parser if math_parser is not None else MathParser()
        self.rng = random.Random(seed)

        self.variables: dict[str, Union[float, str]] = {}
        self.time_delta = 0.0  # seconds elapsed during the last tick
        self.elapsed_time = 0.0
        self._objects: list[GameObject] = []

    @classmethod
    def from_settings(cls, settings: Settings, name: str = "scene") -> RuntimeScene:
        """Build a scene configured from application settings."""
        return cls(
            name=name,
            identifiers=ObjectIdentifierRegistry(
                auto_assign=settings.auto_assign_object_ids,
                first_id=settings.first_object_id,
            ),
            math_parser=MathParser(modules=settings.math_modules),
            seed=settings.random_seed,
        )

    def create_object(self, name: str, x: float = 0.0, y: float = 0.0, **variables) -> GameObject:
        """Add a new instance of the named object to the scene."""
        obj = GameObject(
            name=name,
            oid=self.identifiers.get_oid_from_name(name),
            x=x,
            y=y,
            variables=dict(variables),
        )
        self._objects.append(obj)
        logger.debug("object_created", scene=self.name, object_name=name, oid=obj.oid)
        return obj

    def remove_object(self, obj: GameObject) -> bool:
        """Remove an instance; returns False if it wasn't in the scene."""
        try:
            self._objects.remove(obj)
        except ValueError:
            return False
        return True

    def objects_with_oid(self, oid: int) -> list[GameObject]:
        return [obj for obj in self._objects if obj.oid == oid]

    @property
    def objects(self) -> list[GameObject]:
        return list(self._objects)

    def get_variable(self, name: str) -> float:
        return to_number(self.variables.get(name, 0.0))

    def get_variable_string(self, name: str) -> str:
        return to_text(self.variables.get(name, ""))

    def advance(self, time_delta: float) -> None:
        """Record the duration of a new tick."""
        self.time_delta = time_delta
        self.elapsed_time += time_delta
