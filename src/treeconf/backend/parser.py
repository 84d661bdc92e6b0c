"""
==========
The Parser
==========

Turns YAML (and therefore JSON) text into configuration trees. Documents are
composed into PyYAML nodes rather than loaded directly so that every value
keeps the line it was written on.

"""
from __future__ import annotations

import datetime
from typing import Any

import yaml

from treeconf.failures import CannotParse, ThrowableFailure
from treeconf.result import Ok, Result, fail
from treeconf.tree import (
    ConfigList,
    ConfigObject,
    ConfigOrigin,
    ConfigScalar,
    ConfigValue,
)


def parse_text(text: str, origin: ConfigOrigin) -> Result[ConfigObject]:
    """Parses a YAML or JSON document whose root must be a mapping.

    Parameters
    ----------
    text
        The document. An empty document is an empty object.
    origin
        The origin to record on the parsed values. Line numbers are filled in
        from the document.

    Returns
    -------
        The parsed, unresolved tree or a :class:`~treeconf.failures.CannotParse`
        failure.

    """
    try:
        loader = yaml.SafeLoader(text)
    except yaml.YAMLError as e:
        return fail(CannotParse(_describe(e), origin.with_line(_error_line(e))))

    try:
        node = loader.get_single_node()
        if node is None:
            return Ok(ConfigObject.empty(origin))
        value = _from_node(loader, node, origin)
    except yaml.YAMLError as e:
        return fail(CannotParse(_describe(e), origin.with_line(_error_line(e))))
    except ValueError as e:
        # raised by constructors for values such as impossible dates
        return fail(ThrowableFailure(e, origin))
    finally:
        loader.dispose()

    if not isinstance(value, ConfigObject):
        return fail(
            CannotParse(
                f"the root of a configuration must be a mapping, found {value.value_type}",
                value.origin,
            )
        )
    return Ok(value)


def _from_node(loader: yaml.SafeLoader, node: yaml.Node, origin: ConfigOrigin) -> ConfigValue:
    node_origin = origin.with_line(node.start_mark.line + 1)
    if isinstance(node, yaml.MappingNode):
        # expands '<<' merge keys in place
        loader.flatten_mapping(node)
        fields = {}
        for key_node, value_node in node.value:
            key = _key_string(loader.construct_object(key_node, deep=True))
            fields[key] = _from_node(loader, value_node, origin)
        return ConfigObject(fields, node_origin)
    elif isinstance(node, yaml.SequenceNode):
        return ConfigList([_from_node(loader, child, origin) for child in node.value], node_origin)
    else:
        return ConfigScalar(_scalar(loader.construct_object(node, deep=True)), node_origin)


def _scalar(value: Any) -> str | int | float | bool | None:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    elif isinstance(value, (datetime.date, datetime.datetime)):
        return value.isoformat()
    elif isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    else:
        return str(value)


def _key_string(key: Any) -> str:
    if isinstance(key, bool):
        return "true" if key else "false"
    elif key is None:
        return "null"
    return str(_scalar(key))


def _describe(error: yaml.YAMLError) -> str:
    problem = getattr(error, "problem", None)
    context = getattr(error, "context", None)
    if problem and context:
        return f"{context}, {problem}"
    return str(problem or error)


def _error_line(error: yaml.YAMLError) -> int | None:
    mark = getattr(error, "problem_mark", None)
    return None if mark is None else mark.line + 1
