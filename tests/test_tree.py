import pytest

from treeconf.exceptions import ConfigurationError
from treeconf.tree import (
    ConfigList,
    ConfigObject,
    ConfigOrigin,
    ConfigScalar,
    ValueType,
    from_python,
)


@pytest.fixture
def origin() -> ConfigOrigin:
    return ConfigOrigin("app.yaml", filename="app.yaml", line=3)


def test_from_python_round_trips_plain_data() -> None:
    data = {"db": {"host": "localhost", "port": 5432, "replicas": ["a", "b"]}, "debug": None}
    assert from_python(data).unwrapped() == data


def test_from_python_tuples_become_lists() -> None:
    assert from_python({"pair": (1, 2)}).unwrapped() == {"pair": [1, 2]}


@pytest.mark.parametrize(
    "value, value_type",
    [
        ("text", ValueType.STRING),
        (1, ValueType.NUMBER),
        (1.5, ValueType.NUMBER),
        (True, ValueType.BOOLEAN),
        (None, ValueType.NULL),
    ],
)
def test_scalar_types(value: object, value_type: ValueType) -> None:
    assert ConfigScalar(value).value_type is value_type


def test_invalid_scalars_rejected() -> None:
    with pytest.raises(ConfigurationError):
        from_python({"when": object()})
    with pytest.raises(ConfigurationError):
        from_python({1: "one"})


def test_object_rejects_raw_values() -> None:
    with pytest.raises(ConfigurationError):
        ConfigObject({"a": 1})


def test_equality_ignores_origin(origin: ConfigOrigin) -> None:
    assert ConfigScalar("x", origin) == ConfigScalar("x")
    assert from_python({"a": [1]}, origin) == from_python({"a": [1]})
    assert ConfigScalar(True) != ConfigScalar(1)
    assert ConfigScalar(1) == ConfigScalar(1.0)


def test_render() -> None:
    assert ConfigScalar(None).render() == "null"
    assert ConfigScalar(False).render() == "false"
    assert ConfigScalar(8080).render() == "8080"
    assert ConfigScalar("x").render() == "x"


def test_origin_str(origin: ConfigOrigin) -> None:
    assert str(origin) == "app.yaml: 3"
    assert str(origin.with_line(None)) == "app.yaml"


def test_fallback_disjoint_keys_is_union() -> None:
    primary = from_python({"a": 1})
    fallback = from_python({"b": 2})
    assert primary.with_fallback(fallback).unwrapped() == {"a": 1, "b": 2}


def test_fallback_primary_wins_and_objects_merge() -> None:
    primary = from_python({"db": {"host": "prod"}, "workers": [1, 2], "name": "app"})
    fallback = from_python(
        {"db": {"host": "localhost", "port": 5432}, "workers": [], "name": {"nested": True}}
    )
    merged = primary.with_fallback(fallback)
    assert merged.unwrapped() == {
        "db": {"host": "prod", "port": 5432},
        "workers": [1, 2],
        "name": "app",
    }


def test_fallback_keeps_primary_key_order() -> None:
    primary = from_python({"z": 1, "a": 2})
    fallback = from_python({"m": 3, "z": 4})
    assert list(primary.with_fallback(fallback)) == ["z", "a", "m"]


def test_non_object_fallback_is_ignored() -> None:
    primary = from_python({"a": 1})
    assert primary.with_fallback(ConfigScalar("x")) == primary
    assert ConfigScalar("x").with_fallback(primary) == ConfigScalar("x")


def test_trees_are_immutable() -> None:
    tree = from_python({"a": 1})
    updated = tree.with_value("b", ConfigScalar(2))
    assert "b" not in tree
    assert updated.unwrapped() == {"a": 1, "b": 2}
    assert updated.without_key("a").unwrapped() == {"b": 2}
    with pytest.raises(TypeError):
        tree["a"] = ConfigScalar(2)  # type: ignore[index]


def test_list_access(origin: ConfigOrigin) -> None:
    items = ConfigList([ConfigScalar(1), ConfigScalar(2), ConfigScalar(3)], origin)
    assert len(items) == 3
    assert items[1] == ConfigScalar(2)
    assert items[1:].unwrapped() == [2, 3]
    assert items.origin == origin


def test_empty_object_to_dict() -> None:
    assert ConfigObject.empty().to_dict() == {}
