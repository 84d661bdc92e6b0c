import pytest

from treeconf.backend.resolver import needs_resolution, resolve
from treeconf.failures import ConvertFailure, UnresolvedSubstitution
from treeconf.path import Key
from treeconf.result import Err, Ok
from treeconf.tree import from_python


def test_tree_without_substitutions_is_unchanged() -> None:
    tree = from_python({"a": 1, "b": ["x", {"c": "plain"}]})
    assert not needs_resolution(tree)
    result = resolve(tree)
    assert isinstance(result, Ok)
    assert result.value is tree


def test_whole_value_substitution_keeps_type() -> None:
    tree = from_python(
        {
            "defaults": {"port": 8080, "hosts": ["a", "b"]},
            "port": "${defaults.port}",
            "hosts": "${defaults.hosts}",
        }
    )
    assert resolve(tree).value.unwrapped() == {
        "defaults": {"port": 8080, "hosts": ["a", "b"]},
        "port": 8080,
        "hosts": ["a", "b"],
    }


def test_embedded_substitution_renders_scalars() -> None:
    tree = from_python(
        {"host": "db", "port": 5432, "tls": True, "url": "postgres://${host}:${port}/?tls=${tls}"}
    )
    assert resolve(tree).value["url"].unwrapped() == "postgres://db:5432/?tls=true"


def test_chained_substitutions() -> None:
    tree = from_python({"a": "${b}", "b": "${c}", "c": "end", "list": ["${a}", "x-${b}"]})
    resolved = resolve(tree).value.unwrapped()
    assert resolved["a"] == "end"
    assert resolved["list"] == ["end", "x-end"]


def test_optional_substitution() -> None:
    tree = from_python(
        {
            "kept": "value",
            "dropped": "${?missing}",
            "embedded": "prefix-${?missing}",
            "copy": "${?kept}",
        }
    )
    assert resolve(tree).value.unwrapped() == {
        "kept": "value",
        "embedded": "prefix-",
        "copy": "value",
    }


def test_missing_required_substitutions_are_all_reported() -> None:
    tree = from_python({"a": "${nope}", "b": {"c": "x-${also.nope}"}})
    result = resolve(tree)
    assert isinstance(result, Err)
    failures = result.failures.to_list()
    assert [f.path for f in failures] == [(Key("a"),), (Key("b"), Key("c"))]
    assert all(isinstance(f, ConvertFailure) for f in failures)
    assert failures[0].reason == UnresolvedSubstitution("nope", "no value at this path")


def test_cycles_are_detected() -> None:
    tree = from_python({"a": "${b}", "b": "${a}"})
    result = resolve(tree)
    assert isinstance(result, Err)
    assert any("cycle" in f.reason.detail for f in result.failures)


def test_object_cannot_be_embedded_in_string() -> None:
    tree = from_python({"db": {"host": "x"}, "url": "at ${db}"})
    result = resolve(tree)
    assert isinstance(result, Err)
    assert "object" in result.failures.head.reason.detail


@pytest.mark.parametrize("expression", ["${}", "${a..b}"])
def test_invalid_substitution_paths(expression: str) -> None:
    result = resolve(from_python({"a": {"b": 1}, "bad": expression}))
    assert isinstance(result, Err)
    assert result.failures.head.path == (Key("bad"),)
