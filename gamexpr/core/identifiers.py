"""Object identifier registry — stable numeric ids for object names.

Objects are compared by identifier rather than by name during evaluation.
Expressions cache the id they resolve, so ids are expected to stay stable for
the lifetime of a scene.
"""

from __future__ import annotations

from typing import Optional

import structlog

logger = structlog.get_logger()

# Returned for unknown names when auto-assignment is disabled
NO_OBJECT = 0


class ObjectIdentifierRegistry:
    """Maps object names to numeric identifiers and back.

    With auto_assign enabled (the default) an unknown name is given the next
    free identifier on first lookup. Otherwise unknown names resolve to
    NO_OBJECT instead of raising, so per-tick evaluation never fails on a
    missing object.
    """

    def __init__(self, auto_assign: bool = True, first_id: int = 1) -> None:
        """Initialize an empty registry.

        Args:
            auto_assign: Assign a fresh identifier to unknown names on lookup.
            first_id: First identifier handed out (must not be NO_OBJECT).
        """
        if first_id == NO_OBJECT:
            raise ValueError("first_id must differ from NO_OBJECT")
        self.auto_assign = auto_assign
        self._ids: dict[str, int] = {}
        self._names: dict[int, str] = {}
        self._next_id = first_id

    def get_oid_from_name(self, name: str) -> int:
        """Get the identifier of an object name.

        Args:
            name: Object name, compared verbatim.

        Returns:
            The registered identifier, a newly assigned one, or NO_OBJECT.
        """
        oid = self._ids.get(name)
        if oid is not None:
            return oid
        if not self.auto_assign:
            return NO_OBJECT

        while self._next_id in self._names:
            self._next_id += 1
        oid = self._next_id
        self._next_id += 1
        self._bind(name, oid)
        return oid

    def get_name_from_oid(self, oid: int) -> Optional[str]:
        """Get the object name bound to an identifier, or None."""
        return self._names.get(oid)

    def assign(self, name: str, oid: int) -> None:
        """Bind a name to an explicit identifier, replacing any previous binding.

        Note:
            Expressions that already cached the old identifier keep it.
        """
        if oid == NO_OBJECT:
            raise ValueError("Cannot assign the NO_OBJECT identifier")
        previous = self._ids.get(name)
        if previous is not None:
            self._names.pop(previous, None)
        owner = self._names.get(oid)
        if owner is not None and owner != name:
            del self._ids[owner]
        self._bind(name, oid)

    def _bind(self, name: str, oid: int) -> None:
        self._ids[name] = oid
        self._names[oid] = name
        logger.debug("object_identifier_assigned", object_name=name, oid=oid)

    def __contains__(self, name: object) -> bool:
        return name in self._ids

    def __len__(self) -> int:
        return len(self._ids)
