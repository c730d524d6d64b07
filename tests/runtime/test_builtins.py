"""Tests for the standard expression function library."""

from __future__ import annotations

import pytest

from structlog.testing import capture_logs

from gamexpr.core.expression import Expression, ExpressionKind
from gamexpr.core.function_registry import FunctionRegistry
from gamexpr.runtime.builtins import register_builtins
from gamexpr.runtime.objects import ObjectsConcerned
from gamexpr.runtime.scene import RuntimeScene


@pytest.fixture
def scene() -> RuntimeScene:
    """Create a scene with the standard library, a player and two enemies."""
    scene = RuntimeScene(seed=42)
    register_builtins(scene.functions)
    scene.create_object("Player", x=5.0, y=7.0, Life=3, Title="Hero")
    scene.create_object("Enemy", x=100.0, y=0.0)
    scene.create_object("Enemy", x=200.0, y=0.0)
    scene.variables["Score"] = 42
    scene.variables["Name"] = "Alice"
    return scene


@pytest.fixture
def objects_concerned(scene) -> ObjectsConcerned:
    """Create an objects-concerned context with nothing picked yet."""
    return ObjectsConcerned(scene)


def evaluate(text, scene, objects_concerned, obj1=None, obj2=None):
    """Preprocess and evaluate an expression with the matching path."""
    expression = Expression(text)
    result = expression.preprocess_expressions(scene)
    assert result, (result.math_error, result.text_error)
    if result.kind == ExpressionKind.MATH:
        return expression.get_as_math_expression_result(scene, objects_concerned, obj1, obj2)
    return expression.get_as_text_expression_result(scene, objects_concerned, obj1, obj2)


class TestNumberFunctions:
    """Test number-returning built-ins."""

    def test_object_position(self, scene, objects_concerned) -> None:
        assert evaluate("Player.X() + Player.Y()", scene, objects_concerned) == 12.0

    def test_object_variable(self, scene, objects_concerned) -> None:
        assert evaluate("Player.Variable(Life) * 2", scene, objects_concerned) == 6.0
        assert evaluate("Player.Variable(Missing)", scene, objects_concerned) == 0.0

    def test_object_angle(self, scene, objects_concerned) -> None:
        assert evaluate("Player.Angle()", scene, objects_concerned) == 0.0

    def test_first_concerned_instance_is_used(self, scene, objects_concerned) -> None:
        assert evaluate("Enemy.X()", scene, objects_concerned) == 100.0

    def test_explicit_object_takes_precedence(self, scene, objects_concerned) -> None:
        second_enemy = scene.objects[2]

        assert evaluate("Enemy.X()", scene, objects_concerned, obj1=second_enemy) == 200.0
        assert evaluate("Enemy.X()", scene, objects_concerned, obj2=second_enemy) == 200.0

    def test_explicit_object_of_another_kind_is_ignored(self, scene, objects_concerned) -> None:
        player = scene.objects[0]
        assert evaluate("Enemy.X()", scene, objects_concerned, obj1=player) == 100.0

    def test_missing_object_yields_zero(self, scene, objects_concerned) -> None:
        assert evaluate("Ghost.X() + 1", scene, objects_concerned) == 1.0

    def test_count_follows_picking(self, scene, objects_concerned) -> None:
        expression = Expression("Count(Enemy)")
        expression.preprocess_expressions(scene)
        assert expression.get_as_math_expression_result(scene, objects_concerned) == 2.0

        enemy_oid = scene.identifiers.get_oid_from_name("Enemy")
        objects_concerned.set_picked(enemy_oid, scene.objects[1:2])
        assert expression.get_as_math_expression_result(scene, objects_concerned) == 1.0

    def test_scene_variable(self, scene, objects_concerned) -> None:
        assert evaluate("Variable(Score) + 1", scene, objects_concerned) == 43.0
        assert evaluate("Variable(Unset)", scene, objects_concerned) == 0.0
        assert evaluate("Variable(Name)", scene, objects_concerned) == 0.0

    def test_random_stays_in_range(self, scene, objects_concerned) -> None:
        expression = Expression("Random(10)")
        expression.preprocess_expressions(scene)

        for _ in range(50):
            value = expression.get_as_math_expression_result(scene, objects_concerned)
            assert 0.0 <= value <= 10.0
            assert value.is_integer()

    def test_time(self, scene, objects_concerned) -> None:
        scene.advance(0.5)
        scene.advance(0.25)

        assert evaluate("TimeDelta()", scene, objects_concerned) == 0.25
        assert evaluate("Time()", scene, objects_concerned) == 0.75

    def test_text_arguments(self, scene, objects_concerned) -> None:
        assert evaluate('StrLength("abc") + 1', scene, objects_concerned) == 4.0
        assert evaluate('ToNumber("2.5") * 2', scene, objects_concerned) == 5.0
        assert evaluate('ToNumber("abc")', scene, objects_concerned) == 0.0

    def test_wrong_arity_fails(self, scene) -> None:
        assert not Expression("Random()").preprocess_expressions(scene)


class TestTextFunctions:
    """Test text-returning built-ins."""

    def test_to_string(self, scene, objects_concerned) -> None:
        text = '"Life: " + ToString(Player.Variable(Life))'
        assert evaluate(text, scene, objects_concerned) == "Life: 3"
        assert evaluate("ToString(5 / 2)", scene, objects_concerned) == "2.5"

    def test_scene_variable_string(self, scene, objects_concerned) -> None:
        assert evaluate('"Hi " + VariableString(Name)', scene, objects_concerned) == "Hi Alice"
        assert evaluate("VariableString(Score)", scene, objects_concerned) == "42"

    def test_object_text(self, scene, objects_concerned) -> None:
        assert evaluate("Player.Name()", scene, objects_concerned) == "Player"
        assert evaluate("Player.VariableString(Title)", scene, objects_concerned) == "Hero"
        assert evaluate("Ghost.Name()", scene, objects_concerned) == ""

    def test_substring(self, scene, objects_concerned) -> None:
        assert evaluate('SubStr("Hello world", 6, 5)', scene, objects_concerned) == "world"
        assert evaluate('SubStr("abc", 1, 10)', scene, objects_concerned) == "bc"

    def test_new_line(self, scene, objects_concerned) -> None:
        assert evaluate('"a" + NewLine() + "b"', scene, objects_concerned) == "a\nb"


def test_register_builtins_returns_registry(scene):
    """Test that registration chains and fills both namespaces."""
    registry = scene.functions
    assert register_builtins(registry) is registry
    assert len(registry) == 17


def test_register_builtins_logs_registry_version():
    """Test that the registration summary reports the registry version."""
    registry = FunctionRegistry()

    with capture_logs() as logs:
        register_builtins(registry)

    (summary,) = [e for e in logs if e["event"] == "builtins_registered"]
    assert summary["number_functions"] == 11
    assert summary["text_functions"] == 6
    assert summary["registry_version"] == registry.version == 17
