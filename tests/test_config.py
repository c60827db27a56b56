import pytest

from collatz_tree import AngularConfig, ConfigurationError, SelectionPolicy


def test_defaults_are_valid():
    config = AngularConfig().validate()
    assert config.left_turn == -8.65
    assert config.right_turn == 16.0
    assert config.selection_policy() is None


@pytest.mark.parametrize("field, value", [
    ("thickness_impact", -0.5),
    ("color_impact", 0.0),
    ("color_impact", -1.0),
    ("max_line_width", 0.0),
    ("node_style", "hexagon"),
    ("drawing_order", "random"),
    ("render_longest", 0),
    ("render_random", -4),
    ("render_most_traversed", 2.5),
])
def test_invalid_fields_are_named(field, value):
    config = AngularConfig(**{field: value})
    with pytest.raises(ConfigurationError) as exc:
        config.validate()
    assert exc.value.field == field
    assert field in str(exc.value)


def test_zero_thickness_impact_is_allowed():
    AngularConfig(thickness_impact=0.0).validate()


def test_only_one_selection_policy():
    config = AngularConfig(render_most_traversed=5, render_least_traversed=5)
    with pytest.raises(ConfigurationError) as exc:
        config.validate()
    assert exc.value.field == "render_least_traversed"
    assert isinstance(exc.value, ValueError)


@pytest.mark.parametrize("field, kind", [
    ("render_longest", "longest"),
    ("render_most_traversed", "most_traversed"),
    ("render_least_traversed", "least_traversed"),
    ("render_random", "random"),
])
def test_selection_policy_from_config(field, kind):
    config = AngularConfig(**{field: 4}).validate()
    assert config.selection_policy() == SelectionPolicy(kind, 4)


@pytest.mark.parametrize("kind, count", [("widest", 3), ("longest", 0), ("random", -1), ("longest", True), ("random", 2.0)])
def test_selection_policy_rejects_bad_values(kind, count):
    with pytest.raises(ConfigurationError):
        SelectionPolicy(kind, count)
