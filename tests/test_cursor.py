import pytest

from treeconf.cursor import ConfigCursor, ConfigObjectCursor, FluentConfigCursor
from treeconf.failures import (
    CannotConvert,
    ConfigReaderFailures,
    ConvertFailure,
    EmptyStringFound,
    KeyNotFound,
    WrongType,
)
from treeconf.path import Index, Key
from treeconf.result import Err, Ok
from treeconf.tree import ConfigOrigin, ConfigScalar, ConfigValue, ValueType, from_python


@pytest.fixture
def tree() -> ConfigValue:
    return from_python(
        {
            "db": {"host": "localhost", "port": 5432, "ratio": 0.5, "enabled": "yes"},
            "servers": [{"name": "a"}, {"name": "b"}],
            "nothing": None,
        },
        ConfigOrigin("test"),
    )


@pytest.fixture
def cursor(tree: ConfigValue) -> ConfigCursor:
    return ConfigCursor(tree)


def test_navigation_tracks_path(cursor: ConfigCursor) -> None:
    result = cursor.at_path("servers", 1, "name")
    assert isinstance(result, Ok)
    assert result.value.path == (Key("servers"), Index(1), Key("name"))
    assert result.value.path_string == "servers[1].name"
    assert result.value.as_string() == Ok("b")


def test_missing_key_carries_full_path(cursor: ConfigCursor) -> None:
    result = cursor.at_path("db", "user")
    assert isinstance(result, Err)
    failure = result.failures.head
    assert isinstance(failure, ConvertFailure)
    assert failure.path == (Key("db"), Key("user"))
    assert failure.reason == KeyNotFound("user")


def test_index_out_of_range(cursor: ConfigCursor) -> None:
    result = cursor.at_path("servers", 5)
    assert isinstance(result, Err)
    assert result.failures.head.path == (Key("servers"), Index(5))
    assert result.failures.head.reason == KeyNotFound("5")


def test_wrong_shape(cursor: ConfigCursor) -> None:
    result = cursor.at_path("db", "host", "inner")
    assert isinstance(result, Err)
    failure = result.failures.head
    assert failure.path == (Key("db"), Key("host"))
    assert failure.reason == WrongType(ValueType.STRING, frozenset({ValueType.OBJECT}))


def test_scalar_conversions(cursor: ConfigCursor) -> None:
    db = cursor.at_key("db").value
    assert db.at_key("port").value.as_int() == Ok(5432)
    assert db.at_key("port").value.as_string() == Ok("5432")
    assert db.at_key("port").value.as_float() == Ok(5432.0)
    assert db.at_key("ratio").value.as_float() == Ok(0.5)
    assert db.at_key("enabled").value.as_boolean() == Ok(True)
    assert ConfigCursor(ConfigScalar(" 12 ")).as_int() == Ok(12)
    assert ConfigCursor(ConfigScalar(3.0)).as_int() == Ok(3)
    assert ConfigCursor(ConfigScalar(False)).as_string() == Ok("false")


def test_scalar_conversion_failures(cursor: ConfigCursor) -> None:
    ratio = cursor.at_path("db", "ratio").value
    result = ratio.as_int()
    assert isinstance(result, Err)
    assert isinstance(result.failures.head.reason, CannotConvert)
    assert result.failures.head.path_string == "db.ratio"

    result = cursor.at_path("db", "host").value.as_boolean()
    assert isinstance(result.failures.head.reason, CannotConvert)

    result = cursor.at_key("servers").value.as_string()
    assert result.failures.head.reason.found_type is ValueType.LIST


def test_null_and_undefined(cursor: ConfigCursor, tree: ConfigValue) -> None:
    nothing = cursor.at_key("nothing").value
    assert nothing.is_null
    assert not nothing.is_undefined

    db = ConfigObjectCursor(tree["db"], (Key("db"),))
    undefined = db.at_key_or_undefined("user")
    assert undefined.is_undefined
    assert undefined.path_string == "db.user"
    result = undefined.as_string()
    assert result.failures.head.reason == KeyNotFound("user")


def test_object_cursor(tree: ConfigValue) -> None:
    cursor = ConfigObjectCursor(tree["db"], (Key("db"),))
    assert cursor.keys == ["host", "port", "ratio", "enabled"]
    assert cursor.map["host"].path_string == "db.host"
    assert cursor.without("host").keys == ["port", "ratio", "enabled"]


def test_list_cursor(cursor: ConfigCursor) -> None:
    servers = cursor.at_key("servers").value.as_list_cursor().value
    assert servers.size == 2
    assert [item.path_string for item in servers.list] == ["servers[0]", "servers[1]"]
    assert servers.at_index_or_undefined(9).is_undefined


def test_missing_key_suggestion(cursor: ConfigCursor) -> None:
    result = cursor.at_path("db", "hostt")
    assert result.failures.head.reason == KeyNotFound("hostt", ("host",))


def test_fluent_cursor(cursor: ConfigCursor) -> None:
    fluent = cursor.fluent().at("db").at("port")
    assert fluent.as_int() == Ok(5432)
    assert cursor.fluent().at("servers", 0, "name").as_string() == Ok("a")


def test_fluent_cursor_failure_is_sticky(cursor: ConfigCursor) -> None:
    failed = cursor.fluent().at("db", "missing")
    assert failed.at("more").at("keys") is failed
    result = failed.at("more").as_string()
    assert isinstance(result, Err)
    assert result.failures.head.path == (Key("db"), Key("missing"))


def test_fluent_cursor_from_failure() -> None:
    failure = ConvertFailure(KeyNotFound("x"), None, (Key("x"),))
    fluent = FluentConfigCursor(Err(ConfigReaderFailures(failure)))
    assert fluent.at("a").cursor == fluent.cursor


@pytest.mark.parametrize(
    "method, type_name",
    [("as_int", "int"), ("as_float", "float"), ("as_boolean", "boolean")],
)
def test_empty_string_is_not_a_value(method: str, type_name: str) -> None:
    cursor = ConfigCursor(ConfigScalar("  "))
    result = getattr(cursor, method)()
    assert isinstance(result, Err)
    assert result.failures.head.reason == EmptyStringFound(type_name)
    assert cursor.as_string() == Ok("  ")
