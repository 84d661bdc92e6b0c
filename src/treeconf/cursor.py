"""
=======
Cursors
=======

Cursors navigate a configuration tree while remembering the path taken from
the root, so that every failure can say exactly where it happened.

:class:`ConfigCursor` and its specializations are eager: each navigation step
returns a :class:`~treeconf.result.Result` and fails immediately with a single
:class:`~treeconf.failures.ConvertFailure` when the expected shape is absent.

:class:`FluentConfigCursor` defers failure instead. Chained navigation keeps
going until the end, and the first failing step is reported when the fluent
cursor is resolved:

.. code-block:: python

    >>> fluent = ConfigCursor(tree).fluent().at('db').at('pool', 'size')
    >>> fluent.as_int()
    Ok(value=10)

"""
from __future__ import annotations

from collections.abc import Callable
from typing import TypeVar

from treeconf.failures import (
    CannotConvert,
    ConvertFailure,
    EmptyStringFound,
    FailureReason,
    KeyNotFound,
    WrongType,
)
from treeconf.path import ConfigPath, Index, Key, PathSegment, render_path, to_segment
from treeconf.result import Err, Ok, Result, fail
from treeconf.tree import (
    ConfigList,
    ConfigObject,
    ConfigOrigin,
    ConfigScalar,
    ConfigValue,
    ValueType,
)

T = TypeVar("T")

_TRUE_STRINGS = frozenset({"true", "yes", "on"})
_FALSE_STRINGS = frozenset({"false", "no", "off"})


class ConfigCursor:
    """A view of a configuration value at a given path.

    Parameters
    ----------
    value
        The value at the current position or ``None`` if no value is defined
        there (e.g. a missing key read with
        :meth:`ConfigObjectCursor.at_key_or_undefined`).
    path
        The segments leading from the root to the current position. An empty
        path denotes the root.

    """

    def __init__(self, value: ConfigValue | None, path: ConfigPath = ()):
        self._value = value
        self._path = tuple(path)

    @property
    def value(self) -> ConfigValue | None:
        return self._value

    @property
    def path(self) -> ConfigPath:
        return self._path

    @property
    def path_string(self) -> str:
        return render_path(self._path)

    @property
    def origin(self) -> ConfigOrigin | None:
        return None if self._value is None else self._value.origin

    @property
    def is_undefined(self) -> bool:
        return self._value is None

    @property
    def is_null(self) -> bool:
        return self._value is not None and self._value.value_type is ValueType.NULL

    def failure_for(self, reason: FailureReason) -> ConvertFailure:
        """Tags ``reason`` with the path and origin of this cursor."""
        return ConvertFailure(reason, self.origin, self._path)

    def failed(self, reason: FailureReason) -> Err:
        """Returns a failed result for ``reason`` at this cursor."""
        return fail(self.failure_for(reason))

    def fluent(self) -> FluentConfigCursor:
        return FluentConfigCursor(Ok(self))

    # Shape conversions

    def as_object_cursor(self) -> Result[ConfigObjectCursor]:
        if isinstance(self._value, ConfigObject):
            return Ok(ConfigObjectCursor(self._value, self._path))
        return self._wrong_type(ValueType.OBJECT)

    def as_list_cursor(self) -> Result[ConfigListCursor]:
        if isinstance(self._value, ConfigList):
            return Ok(ConfigListCursor(self._value, self._path))
        return self._wrong_type(ValueType.LIST)

    def as_list(self) -> Result[list[ConfigCursor]]:
        return self.as_list_cursor().map(lambda cursor: cursor.list)

    def as_map(self) -> Result[dict[str, ConfigCursor]]:
        return self.as_object_cursor().map(lambda cursor: cursor.map)

    # Navigation

    def at_key(self, key: str) -> Result[ConfigCursor]:
        return self.as_object_cursor().flat_map(lambda cursor: cursor.at_key(key))

    def at_index(self, index: int) -> Result[ConfigCursor]:
        return self.as_list_cursor().flat_map(lambda cursor: cursor.at_index(index))

    def at_path(self, *segments: PathSegment | str | int) -> Result[ConfigCursor]:
        """Navigates through ``segments`` in order, stopping at the first failure."""
        result: Result[ConfigCursor] = Ok(self)
        for segment in map(to_segment, segments):
            if isinstance(result, Err):
                break
            result = result.value._step(segment)
        return result

    def _step(self, segment: PathSegment) -> Result[ConfigCursor]:
        if isinstance(segment, Key):
            return self.at_key(segment.name)
        return self.at_index(segment.position)

    # Scalar conversions

    def as_string(self) -> Result[str]:
        """Reads a string. Numbers and booleans are rendered as strings."""
        return self._scalar(
            {ValueType.STRING, ValueType.NUMBER, ValueType.BOOLEAN},
            lambda scalar: Ok(scalar.render()),
        )

    def as_boolean(self) -> Result[bool]:
        def convert(scalar: ConfigScalar) -> Result[bool]:
            if scalar.value_type is ValueType.BOOLEAN:
                return Ok(bool(scalar.value))
            text = str(scalar.value).strip().lower()
            if text in _TRUE_STRINGS:
                return Ok(True)
            if text in _FALSE_STRINGS:
                return Ok(False)
            return self.failed(
                CannotConvert(str(scalar.value), "boolean", "not a boolean literal")
            )

        return self._scalar(
            {ValueType.BOOLEAN, ValueType.STRING}, self._non_empty("boolean", convert)
        )

    def as_int(self) -> Result[int]:
        def convert(scalar: ConfigScalar) -> Result[int]:
            value = scalar.value
            if isinstance(value, int):
                return Ok(value)
            if isinstance(value, float):
                if value.is_integer():
                    return Ok(int(value))
                return self.failed(CannotConvert(str(value), "int", "it has a fractional part"))
            try:
                return Ok(int(str(value).strip()))
            except ValueError:
                return self.failed(CannotConvert(str(value), "int", "not a valid integer"))

        return self._scalar(
            {ValueType.NUMBER, ValueType.STRING}, self._non_empty("int", convert)
        )

    def as_float(self) -> Result[float]:
        def convert(scalar: ConfigScalar) -> Result[float]:
            if isinstance(scalar.value, (int, float)):
                return Ok(float(scalar.value))
            try:
                return Ok(float(str(scalar.value).strip()))
            except ValueError:
                return self.failed(CannotConvert(str(scalar.value), "float", "not a valid number"))

        return self._scalar(
            {ValueType.NUMBER, ValueType.STRING}, self._non_empty("float", convert)
        )

    def _scalar(
        self, expected: set[ValueType], convert: Callable[[ConfigScalar], Result[T]]
    ) -> Result[T]:
        if isinstance(self._value, ConfigScalar) and self._value.value_type in expected:
            return convert(self._value)
        return self._wrong_type(*expected)

    def _non_empty(
        self, type_name: str, convert: Callable[[ConfigScalar], Result[T]]
    ) -> Callable[[ConfigScalar], Result[T]]:
        def checked(scalar: ConfigScalar) -> Result[T]:
            if scalar.value_type is ValueType.STRING and not str(scalar.value).strip():
                return self.failed(EmptyStringFound(type_name))
            return convert(scalar)

        return checked

    def _wrong_type(self, *expected: ValueType) -> Err:
        if self._value is None:
            last_key = str(self._path[-1]) if self._path else ""
            return self.failed(KeyNotFound(last_key))
        return self.failed(WrongType(self._value.value_type, frozenset(expected)))

    def __eq__(self, other: object) -> bool:
        return (
            type(other) is type(self)
            and self._value == other._value  # type: ignore[attr-defined]
            and self._path == other._path  # type: ignore[attr-defined]
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._value!r}, path='{self.path_string}')"


class ConfigObjectCursor(ConfigCursor):
    """A cursor positioned at an object."""

    _value: ConfigObject

    def __init__(self, value: ConfigObject, path: ConfigPath = ()):
        super().__init__(value, path)

    @property
    def value(self) -> ConfigObject:
        return self._value

    @property
    def keys(self) -> list[str]:
        return list(self._value.keys())

    @property
    def map(self) -> dict[str, ConfigCursor]:
        """A cursor for each field of this object, keyed by field name."""
        return {key: self._child(key) for key in self._value}

    def at_key(self, key: str) -> Result[ConfigCursor]:
        if key in self._value:
            return Ok(self._child(key))
        reason = KeyNotFound.for_keys(key, self._value.keys())
        return fail(ConvertFailure(reason, self.origin, self._path + (Key(key),)))

    def at_key_or_undefined(self, key: str) -> ConfigCursor:
        """Returns a cursor for ``key``, with an undefined value if it is missing."""
        return ConfigCursor(self._value.get(key), self._path + (Key(key),))

    def without(self, key: str) -> ConfigObjectCursor:
        return ConfigObjectCursor(self._value.without_key(key), self._path)

    def _child(self, key: str) -> ConfigCursor:
        return ConfigCursor(self._value[key], self._path + (Key(key),))


class ConfigListCursor(ConfigCursor):
    """A cursor positioned at a list."""

    _value: ConfigList

    def __init__(self, value: ConfigList, path: ConfigPath = ()):
        super().__init__(value, path)

    @property
    def value(self) -> ConfigList:
        return self._value

    @property
    def size(self) -> int:
        return len(self._value)

    @property
    def list(self) -> list[ConfigCursor]:
        return [self._child(i) for i in range(len(self._value))]

    def at_index(self, index: int) -> Result[ConfigCursor]:
        if 0 <= index < len(self._value):
            return Ok(self._child(index))
        reason = KeyNotFound(str(index))
        return fail(ConvertFailure(reason, self.origin, self._path + (Index(index),)))

    def at_index_or_undefined(self, index: int) -> ConfigCursor:
        value = self._value[index] if 0 <= index < len(self._value) else None
        return ConfigCursor(value, self._path + (Index(index),))

    def _child(self, index: int) -> ConfigCursor:
        return ConfigCursor(self._value[index], self._path + (Index(index),))


class FluentConfigCursor:
    """A cursor whose navigation failures are deferred.

    Once a step fails, the failure is kept and every further call to
    :meth:`at` returns the same failed cursor.

    Parameters
    ----------
    cursor
        The result wrapped by this fluent cursor, which may already be a
        failure.

    """

    def __init__(self, cursor: Result[ConfigCursor]):
        self._cursor = cursor

    @property
    def cursor(self) -> Result[ConfigCursor]:
        return self._cursor

    def at(self, *segments: PathSegment | str | int) -> FluentConfigCursor:
        if isinstance(self._cursor, Err):
            return self
        return FluentConfigCursor(self._cursor.value.at_path(*segments))

    def as_object_cursor(self) -> Result[ConfigObjectCursor]:
        return self._cursor.flat_map(lambda cursor: cursor.as_object_cursor())

    def as_list_cursor(self) -> Result[ConfigListCursor]:
        return self._cursor.flat_map(lambda cursor: cursor.as_list_cursor())

    def as_string(self) -> Result[str]:
        return self._cursor.flat_map(lambda cursor: cursor.as_string())

    def as_int(self) -> Result[int]:
        return self._cursor.flat_map(lambda cursor: cursor.as_int())

    def as_float(self) -> Result[float]:
        return self._cursor.flat_map(lambda cursor: cursor.as_float())

    def as_boolean(self) -> Result[bool]:
        return self._cursor.flat_map(lambda cursor: cursor.as_boolean())

    def __repr__(self) -> str:
        return f"FluentConfigCursor({self._cursor!r})"
