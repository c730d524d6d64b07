"""Runtime context — scenes, objects and the standard function library."""

from gamexpr.runtime.builtins import register_builtins
from gamexpr.runtime.objects import GameObject, ObjectsConcerned
from gamexpr.runtime.scene import RuntimeScene

__all__ = ["GameObject", "ObjectsConcerned", "RuntimeScene", "register_builtins"]
