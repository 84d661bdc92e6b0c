"""
=======
Readers
=======

A :class:`ConfigReader` converts a :class:`~treeconf.cursor.ConfigCursor` into
a typed value, returning every failure it finds instead of stopping at the
first one.

Readers are passed explicitly to :meth:`ConfigSource.load
<treeconf.config_source.ConfigSource.load>` or looked up by type in a
:class:`ReaderRegistry`. The default registry knows how to read ``str``,
``int``, ``float``, ``bool``, :class:`pathlib.Path`, :class:`~enum.Enum`
subclasses, ``Optional``/``Union`` types, ``list``, ``tuple`` and ``dict``
containers and :func:`dataclasses <dataclasses.dataclass>`.

Dataclass fields are read from keys named after the field in kebab case by
default (``pool_size`` is read from ``pool-size``). A missing key falls back to
the field's default, then to ``None`` for optional fields, and is otherwise
reported as a missing key.

.. code-block:: python

    >>> @dataclass
    ... class Pool:
    ...     size: int
    ...     timeout_seconds: float = 30.0
    >>> reader_for(Pool).from_cursor(ConfigCursor(from_python({'size': 4})))
    Ok(value=Pool(size=4, timeout_seconds=30.0))

"""
from __future__ import annotations

import dataclasses
import re
import types
import typing
from collections.abc import Callable, Mapping, Sequence
from enum import Enum
from pathlib import Path
from typing import Any, Generic, TypeVar, Union

from treeconf.cursor import ConfigCursor, ConfigObjectCursor
from treeconf.exceptions import ConfigurationError
from treeconf.failures import (
    CannotConvert,
    ConfigReaderFailures,
    ConvertFailure,
    ExceptionThrown,
    KeyNotFound,
    UnknownKey,
    WrongSizeList,
)
from treeconf.path import Key
from treeconf.result import Err, Ok, Result, sequence
from treeconf.tree import ConfigObject, ConfigValue

T = TypeVar("T")
U = TypeVar("U")

NamingConvention = Callable[[str], str]


def kebab_case(name: str) -> str:
    """``pool_size`` and ``poolSize`` both become ``pool-size``."""
    name = re.sub(r"(?<=[a-z0-9])([A-Z])", r"-\1", name)
    return name.replace("_", "-").lower()


def identity(name: str) -> str:
    return name


class ConfigReader(Generic[T]):
    """Reads values of type ``T`` from configuration cursors."""

    def from_cursor(self, cursor: ConfigCursor) -> Result[T]:
        raise NotImplementedError

    def from_value(self, value: ConfigValue) -> Result[T]:
        """Reads from a tree value, as the root of a navigation."""
        return self.from_cursor(ConfigCursor(value))

    def map(self, f: Callable[[T], U]) -> ConfigReader[U]:
        return FunctionReader(lambda cursor: self.from_cursor(cursor).map(f), f"map({self!r})")

    def emap(self, f: Callable[[T], U], type_name: str | None = None) -> ConfigReader[U]:
        """Like :meth:`map`, turning ``ValueError`` and ``TypeError`` raised by
        ``f`` into conversion failures."""
        target = type_name or getattr(f, "__name__", repr(f))

        def read(cursor: ConfigCursor) -> Result[U]:
            def convert(value: T) -> Result[U]:
                try:
                    return Ok(f(value))
                except (ValueError, TypeError) as e:
                    return cursor.failed(CannotConvert(str(value), target, str(e)))

            return self.from_cursor(cursor).flat_map(convert)

        return FunctionReader(read, f"emap({self!r}, {target})")

    @staticmethod
    def from_function(
        read: Callable[[ConfigCursor], Result[T]], name: str = "reader"
    ) -> ConfigReader[T]:
        return FunctionReader(read, name)


class FunctionReader(ConfigReader[T]):
    def __init__(self, read: Callable[[ConfigCursor], Result[T]], name: str):
        self._read = read
        self._name = name

    def from_cursor(self, cursor: ConfigCursor) -> Result[T]:
        return self._read(cursor)

    def __repr__(self) -> str:
        return self._name


string_reader: ConfigReader[str] = FunctionReader(lambda cursor: cursor.as_string(), "str")
int_reader: ConfigReader[int] = FunctionReader(lambda cursor: cursor.as_int(), "int")
float_reader: ConfigReader[float] = FunctionReader(lambda cursor: cursor.as_float(), "float")
bool_reader: ConfigReader[bool] = FunctionReader(lambda cursor: cursor.as_boolean(), "bool")
path_reader: ConfigReader[Path] = string_reader.emap(Path, "Path")


def _read_value(cursor: ConfigCursor) -> Result[ConfigValue]:
    if cursor.value is None:
        missing = str(cursor.path[-1]) if cursor.path else ""
        return cursor.failed(KeyNotFound(missing))
    return Ok(cursor.value)


value_reader: ConfigReader[ConfigValue] = FunctionReader(_read_value, "ConfigValue")
any_reader: ConfigReader[Any] = value_reader.map(lambda value: value.unwrapped())


def optional_reader(inner: ConfigReader[T]) -> ConfigReader[T | None]:
    """Reads ``None`` from undefined or null values, delegating otherwise."""

    def read(cursor: ConfigCursor) -> Result[T | None]:
        if cursor.is_undefined or cursor.is_null:
            return Ok(None)
        return inner.from_cursor(cursor)

    return FunctionReader(read, f"Optional[{inner!r}]")


def union_reader(*options: ConfigReader[Any]) -> ConfigReader[Any]:
    """Tries each reader in order. Fails with every option's failures."""

    def read(cursor: ConfigCursor) -> Result[Any]:
        first, *rest = options
        result = first.from_cursor(cursor)
        if isinstance(result, Ok):
            return result
        failures = result.failures
        for option in rest:
            result = option.from_cursor(cursor)
            if isinstance(result, Ok):
                return result
            failures = failures + result.failures
        return Err(failures)

    return FunctionReader(read, f"Union[{', '.join(repr(o) for o in options)}]")


def list_reader(inner: ConfigReader[T]) -> ConfigReader[list[T]]:
    def read(cursor: ConfigCursor) -> Result[list[T]]:
        return cursor.as_list().flat_map(
            lambda items: sequence([inner.from_cursor(item) for item in items])
        )

    return FunctionReader(read, f"list[{inner!r}]")


def tuple_reader(*inners: ConfigReader[Any]) -> ConfigReader[tuple[Any, ...]]:
    """Reads a fixed-size list into a tuple."""

    def read(cursor: ConfigCursor) -> Result[tuple[Any, ...]]:
        def read_items(items: list[ConfigCursor]) -> Result[tuple[Any, ...]]:
            if len(items) != len(inners):
                return cursor.failed(WrongSizeList(len(inners), len(items)))
            results = [inner.from_cursor(item) for inner, item in zip(inners, items)]
            return sequence(results).map(tuple)

        return cursor.as_list().flat_map(read_items)

    return FunctionReader(read, f"tuple[{', '.join(repr(i) for i in inners)}]")


def dict_reader(inner: ConfigReader[T]) -> ConfigReader[dict[str, T]]:
    def read(cursor: ConfigCursor) -> Result[dict[str, T]]:
        def read_fields(fields: dict[str, ConfigCursor]) -> Result[dict[str, T]]:
            results = [inner.from_cursor(field) for field in fields.values()]
            return sequence(results).map(lambda values: dict(zip(fields, values)))

        return cursor.as_map().flat_map(read_fields)

    return FunctionReader(read, f"dict[str, {inner!r}]")


def enum_reader(enum_type: type[Enum]) -> ConfigReader[Enum]:
    """Reads enum members by name (in any case, with ``-`` or ``_``) or by value."""
    by_name = {member.name.lower().replace("_", "-"): member for member in enum_type}

    def read(cursor: ConfigCursor) -> Result[Enum]:
        def convert(text: str) -> Result[Enum]:
            key = text.strip().lower().replace("_", "-")
            if key in by_name:
                return Ok(by_name[key])
            for member in enum_type:
                if str(member.value) == text:
                    return Ok(member)
            options = ", ".join(member.name for member in enum_type)
            return cursor.failed(
                CannotConvert(text, enum_type.__name__, f"expected one of {options}")
            )

        return cursor.as_string().flat_map(convert)

    return FunctionReader(read, enum_type.__name__)


class DataclassReader(ConfigReader[T]):
    """Reads a dataclass from an object, accumulating the failures of all fields.

    Parameters
    ----------
    target
        The dataclass to build.
    registry
        The registry used to find readers for the field types.
    naming
        Maps field names to configuration keys.
    allow_unknown_keys
        Whether keys that match no field are ignored or reported.

    """

    def __init__(
        self,
        target: type[T],
        registry: ReaderRegistry,
        naming: NamingConvention = kebab_case,
        allow_unknown_keys: bool = True,
    ):
        if not dataclasses.is_dataclass(target):
            raise ConfigurationError(
                f"{target} is not a dataclass.", getattr(target, "__name__", None)
            )
        self._target = target
        self._registry = registry
        self._naming = naming
        self._allow_unknown_keys = allow_unknown_keys

    def from_cursor(self, cursor: ConfigCursor) -> Result[T]:
        return cursor.as_object_cursor().flat_map(self._read_fields)

    def _read_fields(self, cursor: ConfigObjectCursor) -> Result[T]:
        try:
            hints = typing.get_type_hints(self._target)
        except (NameError, TypeError) as e:
            return cursor.failed(ExceptionThrown(e))
        fields = [f for f in dataclasses.fields(self._target) if f.init]  # type: ignore[arg-type]
        keys = [self._naming(f.name) for f in fields]

        results = []
        for field, key in zip(fields, keys):
            field_cursor = cursor.at_key_or_undefined(key)
            field_type = hints.get(field.name, Any)
            if field_cursor.is_undefined and _has_default(field):
                results.append(Ok(_default(field)))
            elif field_cursor.is_undefined and not _is_optional(field_type):
                results.append(cursor.at_key(key))
            else:
                reader = self._registry.reader_for(field_type)
                results.append(reader.from_cursor(field_cursor))

        if not self._allow_unknown_keys:
            for unknown in (k for k in cursor.keys if k not in keys):
                failure = ConvertFailure(
                    UnknownKey(unknown), cursor.value[unknown].origin, cursor.path + (Key(unknown),)
                )
                results.append(Err(ConfigReaderFailures(failure)))

        def build(values: list[Any]) -> Result[T]:
            kwargs = {field.name: value for field, value in zip(fields, values)}
            try:
                return Ok(self._target(**kwargs))
            except (ValueError, TypeError) as e:
                return cursor.failed(ExceptionThrown(e))

        return sequence(results).flat_map(build)

    def __repr__(self) -> str:
        return self._target.__name__


class ReaderRegistry:
    """Finds readers for target types.

    Readers registered explicitly take precedence. Readers for containers,
    unions, enums and dataclasses are derived on demand and cached.

    Parameters
    ----------
    naming
        The key naming convention used for dataclass fields.
    allow_unknown_keys
        Whether derived dataclass readers ignore keys that match no field.

    """

    def __init__(self, naming: NamingConvention = kebab_case, allow_unknown_keys: bool = True):
        self._naming = naming
        self._allow_unknown_keys = allow_unknown_keys
        self._readers: dict[Any, ConfigReader[Any]] = {
            str: string_reader,
            int: int_reader,
            float: float_reader,
            bool: bool_reader,
            Path: path_reader,
            Any: any_reader,
            ConfigValue: value_reader,
        }

    def register(self, target: Any, reader: ConfigReader[Any]) -> None:
        self._readers[target] = reader

    def reader_for(self, target: Any) -> ConfigReader[Any]:
        """Returns the reader for ``target``.

        Raises
        ------
        ConfigurationError
            If no reader is registered or can be derived for ``target``.

        """
        if target in self._readers:
            return self._readers[target]
        reader = self._derive(target)
        self._readers[target] = reader
        return reader

    def _derive(self, target: Any) -> ConfigReader[Any]:
        origin = typing.get_origin(target)
        args = typing.get_args(target)

        if origin in (Union, types.UnionType):
            options = [arg for arg in args if arg is not type(None)]
            inner = (
                self.reader_for(options[0])
                if len(options) == 1
                else union_reader(*(self.reader_for(option) for option in options))
            )
            return optional_reader(inner) if len(options) < len(args) else inner
        elif origin in (list, Sequence) or target is list:
            return list_reader(self.reader_for(args[0] if args else Any))
        elif origin is tuple:
            if len(args) == 2 and args[1] is Ellipsis:
                return list_reader(self.reader_for(args[0])).map(tuple)
            return tuple_reader(*(self.reader_for(arg) for arg in args))
        elif origin in (dict, Mapping) or target is dict:
            if args and args[0] is not str:
                raise ConfigurationError(
                    f"Configuration mappings must have string keys. You asked for {target}.",
                    str(target),
                )
            return dict_reader(self.reader_for(args[1] if args else Any))
        elif isinstance(target, type) and issubclass(target, Enum):
            return enum_reader(target)
        elif isinstance(target, type) and issubclass(target, ConfigObject):
            return value_reader.emap(_require_object, "object")
        elif dataclasses.is_dataclass(target) and isinstance(target, type):
            return DataclassReader(target, self, self._naming, self._allow_unknown_keys)

        raise ConfigurationError(f"No configuration reader is available for {target}.", str(target))


def _require_object(value: ConfigValue) -> ConfigObject:
    if not isinstance(value, ConfigObject):
        raise TypeError(f"expected an object, found {value.value_type}")
    return value


def _has_default(field: dataclasses.Field[Any]) -> bool:
    return (
        field.default is not dataclasses.MISSING
        or field.default_factory is not dataclasses.MISSING
    )


def _default(field: dataclasses.Field[Any]) -> Any:
    if field.default is not dataclasses.MISSING:
        return field.default
    return field.default_factory()  # type: ignore[misc]


def _is_optional(target: Any) -> bool:
    return typing.get_origin(target) in (Union, types.UnionType) and type(None) in typing.get_args(
        target
    )


default_registry = ReaderRegistry()


def reader_for(target: Any) -> ConfigReader[Any]:
    """Returns the reader for ``target`` from the default registry."""
    return default_registry.reader_for(target)


def register_reader(target: Any, reader: ConfigReader[Any]) -> None:
    """Registers ``reader`` for ``target`` in the default registry."""
    default_registry.register(target, reader)
