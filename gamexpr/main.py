"""gamexpr entry point — evaluate expressions from the command line.

Builds a scene with the standard function library, preprocesses every
expression given as argument and prints its value:

    python -m gamexpr.main "2+3*4" "Player.X()+10" --object Player:5:0
    python -m gamexpr.main '"Score: " + ToString(Variable(Score))' --var Score=42
"""

from __future__ import annotations

import argparse
import sys
from typing import Optional, Sequence

import structlog

from gamexpr.config import Settings
from gamexpr.core.expression import Expression, ExpressionKind
from gamexpr.runtime.builtins import register_builtins
from gamexpr.runtime.objects import ObjectsConcerned
from gamexpr.runtime.scene import RuntimeScene

logger = structlog.get_logger()


def configure_logging(settings: Settings) -> None:
    """Configure structured logging from settings (to stderr)."""
    renderer = (
        structlog.processors.JSONRenderer()
        if settings.log_renderer == "json"
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(min_level=settings.log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


def _parse_args(argv: Optional[Sequence[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="gamexpr",
        description="Evaluate game expressions against a scratch scene.",
    )
    parser.add_argument("expressions", nargs="+", help="expression strings to evaluate")
    parser.add_argument(
        "--var",
        action="append",
        default=[],
        metavar="NAME=VALUE",
        help="scene variable (numeric when VALUE parses as a number)",
    )
    parser.add_argument(
        "--object",
        action="append",
        default=[],
        metavar="NAME:X:Y",
        help="object instance to create in the scene",
    )
    return parser.parse_args(argv)


def build_scene(args: argparse.Namespace, settings: Settings) -> RuntimeScene:
    """Create a scene holding the variables and objects given on the command line."""
    scene = RuntimeScene.from_settings(settings, name="cli")
    register_builtins(scene.functions)

    for item in args.var:
        name, _, value = item.partition("=")
        try:
            scene.variables[name] = float(value)
        except ValueError:
            scene.variables[name] = value

    for item in args.object:
        name, _, coords = item.partition(":")
        x, _, y = coords.partition(":")
        scene.create_object(name, x=float(x or 0.0), y=float(y or 0.0))

    return scene


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the evaluator; returns the process exit code."""
    settings = Settings()
    configure_logging(settings)
    args = _parse_args(argv)

    scene = build_scene(args, settings)
    objects_concerned = ObjectsConcerned(scene)

    exit_code = 0
    for plain in args.expressions:
        expression = Expression(plain)
        result = expression.preprocess_expressions(scene)
        if not result:
            print(f"{plain}: error: {result.math_error}; {result.text_error}", file=sys.stderr)
            exit_code = 1
            continue

        if result.kind == ExpressionKind.MATH:
            value = expression.get_as_math_expression_result(scene, objects_concerned)
            print(f"{plain} = {value:g}")
        else:
            text = expression.get_as_text_expression_result(scene, objects_concerned)
            print(f"{plain} = {text!r}")

    return exit_code


if __name__ == "__main__":
    sys.exit(main())
