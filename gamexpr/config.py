"""Configuration settings for gamexpr — loaded from environment variables."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with env-driven overrides.

    All values can be overridden via environment variables prefixed with GAMEXPR_.
    Example: GAMEXPR_MATH_MODULES=numpy compiles formulas against numpy.
    """

    # Math evaluation
    math_modules: str = "math"  # sympy.lambdify backend

    # Object identifiers
    auto_assign_object_ids: bool = True
    first_object_id: int = Field(default=1, ge=1)

    # Scene randomness (None = seeded from the OS)
    random_seed: Optional[int] = None

    # Logging
    log_level: Literal["debug", "info", "warning", "error"] = "info"
    log_renderer: Literal["console", "json"] = "console"

    model_config = SettingsConfigDict(
        env_prefix="GAMEXPR_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )
