"""Unit tests for RuntimeScene, GameObject and ObjectsConcerned."""

from __future__ import annotations

from gamexpr.config import Settings
from gamexpr.core.identifiers import NO_OBJECT
from gamexpr.runtime.objects import GameObject, ObjectsConcerned, format_number
from gamexpr.runtime.scene import RuntimeScene


def test_scene_initialization():
    """Test that a scene starts empty with default collaborators."""
    scene = RuntimeScene()

    assert scene.objects == []
    assert scene.variables == {}
    assert scene.time_delta == 0.0
    assert len(scene.functions) == 0
    assert scene.math_parser.modules == "math"


def test_create_object_shares_identifier_per_name():
    """Test that instances of the same object share one identifier."""
    scene = RuntimeScene()
    a = scene.create_object("Enemy", x=1.0)
    b = scene.create_object("Enemy", x=2.0)
    c = scene.create_object("Player")

    assert a.oid == b.oid
    assert a.oid != c.oid
    assert scene.objects_with_oid(a.oid) == [a, b]


def test_remove_object():
    """Test removing an instance from the scene."""
    scene = RuntimeScene()
    obj = scene.create_object("Enemy")

    assert scene.remove_object(obj) is True
    assert scene.remove_object(obj) is False
    assert scene.objects == []


def test_from_settings():
    """Test that settings configure the scene's collaborators."""
    settings = Settings(
        auto_assign_object_ids=False,
        first_object_id=10,
        math_modules="math",
        random_seed=3,
    )
    scene = RuntimeScene.from_settings(settings, name="level1")

    assert scene.name == "level1"
    assert scene.identifiers.auto_assign is False
    assert scene.identifiers.get_oid_from_name("Unknown") == NO_OBJECT
    assert scene.math_parser.modules == "math"
    assert scene.rng.random() == RuntimeScene(seed=3).rng.random()


def test_scene_variables():
    """Test numeric and text access to scene variables."""
    scene = RuntimeScene()
    scene.variables.update({"Score": 12, "Label": "x", "Numeric": "3.5"})

    assert scene.get_variable("Score") == 12.0
    assert scene.get_variable("Label") == 0.0
    assert scene.get_variable("Numeric") == 3.5
    assert scene.get_variable_string("Score") == "12"
    assert scene.get_variable_string("Missing") == ""


def test_game_object_variables():
    """Test numeric and text access to object variables."""
    obj = GameObject(name="Player", oid=1, variables={"Speed": 1.5})

    assert obj.get_variable("Speed") == 1.5
    assert obj.get_variable_string("Speed") == "1.5"
    assert obj.get_variable("Missing") == 0.0


def test_objects_concerned_picking():
    """Test default picking, narrowing and reset."""
    scene = RuntimeScene()
    a = scene.create_object("Enemy")
    b = scene.create_object("Enemy")
    concerned = ObjectsConcerned(scene)

    assert concerned.pick(a.oid) == [a, b]
    assert concerned.first(a.oid) is a

    concerned.set_picked(a.oid, [b])
    assert concerned.pick(a.oid) == [b]

    concerned.reset()
    assert concerned.pick(a.oid) == [a, b]
    assert concerned.first(999) is None


def test_format_number():
    """Test number rendering in text expressions."""
    assert format_number(3.0) == "3"
    assert format_number(-2) == "-2"
    assert format_number(2.5) == "2.5"
