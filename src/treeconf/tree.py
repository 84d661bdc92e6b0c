"""
===============
The Config Tree
===============

The immutable data model shared by every part of ``treeconf``.

A configuration tree is made of :class:`ConfigObject` nodes (ordered mappings
from strings to values), :class:`ConfigList` nodes and :class:`ConfigScalar`
leaves holding strings, numbers, booleans or null. Every node may record the
:class:`ConfigOrigin` it was read from, which is used to give precise failure
messages. Origins never take part in equality.

Trees are layered with :meth:`ConfigValue.with_fallback`. The receiver takes
priority: objects are merged key by key and recursively, any other value wins
wholesale.

For example:

.. code-block:: python

    >>> app = from_python({'db': {'host': 'prod.db'}, 'workers': [1, 2]})
    >>> defaults = from_python({'db': {'host': 'localhost', 'port': 5432}, 'workers': []})
    >>> app.with_fallback(defaults).unwrapped()
    {'db': {'host': 'prod.db', 'port': 5432}, 'workers': [1, 2]}

"""
from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass, replace
from enum import Enum
from types import MappingProxyType
from typing import Any, Union, overload

from treeconf.exceptions import ConfigurationError

ScalarType = Union[str, int, float, bool, None]


class ValueType(Enum):
    OBJECT = "object"
    LIST = "list"
    NUMBER = "number"
    BOOLEAN = "boolean"
    NULL = "null"
    STRING = "string"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ConfigOrigin:
    """Where a configuration value came from.

    Attributes
    ----------
    description
        A human readable description of the origin, e.g. a file name or
        ``'string'``.
    filename
        The file the value was read from, if any.
    url
        The URL the value was fetched from, if any.
    resource
        The resource name the value was found under, if any.
    line
        The one-based line the value starts on, if known.

    """

    description: str
    filename: str | None = None
    url: str | None = None
    resource: str | None = None
    line: int | None = None

    def with_line(self, line: int | None) -> ConfigOrigin:
        return replace(self, line=line)

    def __str__(self) -> str:
        if self.line is not None:
            return f"{self.description}: {self.line}"
        return self.description


class ConfigValue:
    """Base class of all configuration tree nodes.

    This class should not be instantiated directly.

    """

    value_type: ValueType

    def __init__(self, origin: ConfigOrigin | None = None):
        self._origin = origin

    @property
    def origin(self) -> ConfigOrigin | None:
        """The origin this value was read from, if recorded."""
        return self._origin

    def unwrapped(self) -> Any:
        """Converts this value into plain python data. Origins are lost."""
        raise NotImplementedError

    def with_origin(self, origin: ConfigOrigin | None) -> ConfigValue:
        raise NotImplementedError

    def with_fallback(self, other: ConfigValue) -> ConfigValue:
        """Returns this value layered over ``other``.

        Only objects merge. Any other value takes priority over ``other``
        wholesale.

        """
        return self


class ConfigScalar(ConfigValue):
    """A string, number, boolean or null leaf."""

    def __init__(self, value: ScalarType, origin: ConfigOrigin | None = None):
        super().__init__(origin)
        self._value = value
        self.value_type = _scalar_type(value)

    @property
    def value(self) -> ScalarType:
        return self._value

    def unwrapped(self) -> ScalarType:
        return self._value

    def with_origin(self, origin: ConfigOrigin | None) -> ConfigScalar:
        return ConfigScalar(self._value, origin)

    def render(self) -> str:
        """The string form of this scalar as it would be written in a file."""
        if self.value_type is ValueType.NULL:
            return "null"
        if self.value_type is ValueType.BOOLEAN:
            return "true" if self._value else "false"
        return str(self._value)

    def __eq__(self, other: object) -> bool:
        return (
            isinstance(other, ConfigScalar)
            and self.value_type is other.value_type
            and self._value == other._value
        )

    def __hash__(self) -> int:
        return hash((self.value_type, self._value))

    def __repr__(self) -> str:
        return f"ConfigScalar({self._value!r})"


class ConfigList(ConfigValue, Sequence[ConfigValue]):
    """An immutable list of configuration values."""

    value_type = ValueType.LIST

    def __init__(self, items: Sequence[ConfigValue] = (), origin: ConfigOrigin | None = None):
        super().__init__(origin)
        self._items = tuple(items)

    @overload
    def __getitem__(self, index: int) -> ConfigValue:
        ...

    @overload
    def __getitem__(self, index: slice) -> ConfigList:
        ...

    def __getitem__(self, index: int | slice) -> ConfigValue | ConfigList:
        if isinstance(index, slice):
            return ConfigList(self._items[index], self._origin)
        return self._items[index]

    def __len__(self) -> int:
        return len(self._items)

    def unwrapped(self) -> list[Any]:
        return [item.unwrapped() for item in self._items]

    def with_origin(self, origin: ConfigOrigin | None) -> ConfigList:
        return ConfigList(self._items, origin)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, ConfigList) and self._items == other._items

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"ConfigList({list(self._items)!r})"


class ConfigObject(ConfigValue, Mapping[str, ConfigValue]):
    """An immutable, ordered mapping from keys to configuration values."""

    value_type = ValueType.OBJECT

    def __init__(
        self,
        fields: Mapping[str, ConfigValue] | None = None,
        origin: ConfigOrigin | None = None,
    ):
        super().__init__(origin)
        fields = dict(fields) if fields else {}
        for name, child in fields.items():
            if not isinstance(name, str):
                raise ConfigurationError(
                    f"Configuration keys must be strings. You provided {name!r}.", repr(name)
                )
            if not isinstance(child, ConfigValue):
                raise ConfigurationError(
                    f"Value at key {name} is not a ConfigValue. You provided {type(child)}.",
                    name,
                )
        self._fields = MappingProxyType(fields)

    @classmethod
    def empty(cls, origin: ConfigOrigin | None = None) -> ConfigObject:
        return cls({}, origin)

    def __getitem__(self, key: str) -> ConfigValue:
        return self._fields[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def unwrapped(self) -> dict[str, Any]:
        return {name: child.unwrapped() for name, child in self._fields.items()}

    def to_dict(self) -> dict[str, Any]:
        """Converts the object into a nested dictionary.

        All origin metadata is lost in this conversion.

        """
        return self.unwrapped()

    def with_origin(self, origin: ConfigOrigin | None) -> ConfigObject:
        return ConfigObject(self._fields, origin)

    def with_value(self, key: str, value: ConfigValue) -> ConfigObject:
        """Returns a copy of this object with ``key`` set to ``value``."""
        fields = dict(self._fields)
        fields[key] = value
        return ConfigObject(fields, self._origin)

    def without_key(self, key: str) -> ConfigObject:
        """Returns a copy of this object with ``key`` removed, if present."""
        fields = {name: child for name, child in self._fields.items() if name != key}
        return ConfigObject(fields, self._origin)

    def with_fallback(self, other: ConfigValue) -> ConfigObject:
        if not isinstance(other, ConfigObject):
            return self

        merged = {}
        for name, child in self._fields.items():
            merged[name] = child.with_fallback(other[name]) if name in other else child
        for name, child in other.items():
            if name not in merged:
                merged[name] = child
        return ConfigObject(merged, self._origin or other.origin)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, ConfigObject) and dict(self._fields) == dict(other._fields)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"ConfigObject({dict(self._fields)!r})"


def from_python(data: Any, origin: ConfigOrigin | None = None) -> ConfigValue:
    """Converts plain python data into a configuration tree.

    Parameters
    ----------
    data
        Nested dictionaries, lists, tuples and scalars. Keys of dictionaries at
        all levels must be strings. Existing :class:`ConfigValue` nodes are
        kept as they are.
    origin
        The origin to record on every created node.

    Raises
    ------
    ConfigurationError
        If ``data`` contains values that cannot be represented.

    """
    if isinstance(data, ConfigValue):
        return data
    elif isinstance(data, Mapping):
        return ConfigObject(
            {_key(name): from_python(child, origin) for name, child in data.items()}, origin
        )
    elif isinstance(data, (list, tuple)):
        return ConfigList([from_python(child, origin) for child in data], origin)
    else:
        return ConfigScalar(data, origin)


def _key(name: Any) -> str:
    if not isinstance(name, str):
        raise ConfigurationError(
            f"Configuration keys must be strings. You provided {name!r}.", repr(name)
        )
    return name


def _scalar_type(value: Any) -> ValueType:
    if value is None:
        return ValueType.NULL
    elif isinstance(value, bool):
        return ValueType.BOOLEAN
    elif isinstance(value, (int, float)):
        return ValueType.NUMBER
    elif isinstance(value, str):
        return ValueType.STRING
    else:
        raise ConfigurationError(
            f"Configuration values can only be strings, numbers, booleans, null, lists "
            f"and mappings. You passed in {type(value)}",
            value_name=repr(value),
        )
