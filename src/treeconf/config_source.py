"""
=====================
Configuration Sources
=====================

A :class:`ConfigSource` is a deferred producer of a configuration tree: a file,
a URL, a string, a fixed tree or a sub-tree of another source. Nothing is read
when a source is built. Every call to :meth:`ConfigSource.value` evaluates the
origin again, so sources backed by files or URLs observe changes between
calls. Call :meth:`~ConfigSource.value` once and keep the result if a stable
snapshot is needed.

A :class:`ConfigObjectSource` always produces an object at its root and can be
layered over other object sources:

.. code-block:: python

    >>> app = sources.file('app.yaml').with_fallback(sources.resources('defaults.yaml'))
    >>> app.at('database').load(DatabaseConfig)
    Ok(value=DatabaseConfig(host='prod.db', port=5432))

Loading never raises. :meth:`ConfigSource.load_or_raise` is the single
exception: it is meant for start-up code where a missing or invalid
configuration cannot be recovered from.

"""
from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

from loguru import logger

from treeconf.backend.resolver import resolve
from treeconf.cursor import ConfigCursor, ConfigObjectCursor, FluentConfigCursor
from treeconf.exceptions import ConfigReaderException, ConfigurationError
from treeconf.failures import CannotParse, ConfigReaderFailures, WrongType
from treeconf.path import split_path
from treeconf.reader import ConfigReader, reader_for
from treeconf.result import Err, Ok, Result, fail, zip_with
from treeconf.tree import ConfigObject, ConfigValue, ValueType

T = TypeVar("T")

RecoveryHandler = Callable[[ConfigReaderFailures], "Result[ConfigObject] | None"]


class ConfigSource:
    """A source of configuration values.

    Parameters
    ----------
    value
        A function producing the root value of this source. It is called on
        every access and never memoized.

    """

    def __init__(self, value: Callable[[], Result[ConfigValue]]):
        self._value = value

    def value(self) -> Result[ConfigValue]:
        """Retrieves the root value of this source, reading its origin."""
        return self._value()

    def cursor(self) -> Result[ConfigCursor]:
        """Returns a cursor at the root value of this source."""
        return self.value().map(lambda value: ConfigCursor(value, ()))

    def fluent_cursor(self) -> FluentConfigCursor:
        """Returns a fluent cursor at the root value of this source.

        This never fails. If the source cannot be read, the failure surfaces
        when the fluent cursor is resolved.

        """
        return FluentConfigCursor(self.cursor())

    def at(self, namespace: str) -> ConfigSource:
        """Focuses on the value at ``namespace``.

        Parameters
        ----------
        namespace
            A dotted and bracketed path expression, e.g. ``'db.replicas[0]'``.

        Returns
        -------
            A source whose root is the value at ``namespace``. It fails with
            the navigation failure when evaluated if there is no such value.

        """
        try:
            segments = split_path(namespace)
        except ConfigurationError as e:
            failure = fail(CannotParse(str(e)))
            return ConfigSource(lambda: failure)
        return ConfigSource(lambda: self.fluent_cursor().at(*segments).cursor.map(_cursor_value))

    def load(self, reader: ConfigReader[T] | type[T] | Any) -> Result[T]:
        """Loads a value from this source.

        Parameters
        ----------
        reader
            A :class:`~treeconf.reader.ConfigReader`, or a type whose reader is
            found in the default :class:`~treeconf.reader.ReaderRegistry`.

        Returns
        -------
            The loaded value, or every failure met while reading and
            converting it.

        """
        config_reader = _as_reader(reader)
        return self.cursor().flat_map(config_reader.from_cursor)

    def load_or_raise(self, reader: ConfigReader[T] | type[T] | Any) -> T:
        """Loads a value from this source, raising if that is not possible.

        This is intended for application start-up, where a missing or
        invalid configuration is fatal. Use :meth:`load` everywhere else.

        Raises
        ------
        ConfigReaderException
            Carrying every failure met while loading.

        """
        result = self.load(reader)
        if isinstance(result, Err):
            logger.error(
                "Unable to load configuration for {}:\n{}",
                reader,
                result.failures.pretty_print(indent=1),
            )
            raise ConfigReaderException(result.failures, reader)
        return result.value


class ConfigObjectSource(ConfigSource):
    """A source whose root value is always an object.

    Parameters
    ----------
    config
        A function producing the unresolved root object. It is called on every
        access and never memoized, so it can be used with dynamic origins.

    """

    def __init__(self, config: Callable[[], Result[ConfigObject]]):
        super().__init__(self.value)
        self._config = config

    def value(self) -> Result[ConfigObject]:
        """Reads the origin and resolves substitutions in the result."""
        return self._config().flat_map(_require_object).flat_map(resolve)

    def with_fallback(self, other: ConfigObjectSource) -> ConfigObjectSource:
        """Layers this source over ``other``.

        Keys of this source take priority. Objects present in both are merged
        recursively. Both sources must succeed. If both fail, the failures of
        this source are reported first, followed by those of ``other``.

        """

        def config() -> Result[ConfigObject]:
            return zip_with(self._config(), other.value(), _merge)

        return ConfigObjectSource(config)

    def with_optional_fallback(self, other: ConfigObjectSource) -> ConfigObjectSource:
        """Layers this source over ``other``, ignoring ``other`` if it fails.

        Any failure of ``other`` is ignored, including those met while
        resolving its substitutions or checking that its root is an object.

        """
        return self.with_fallback(ConfigObjectSource(lambda: other.value().recover(_recover_empty)))

    def recover_with(self, handler: RecoveryHandler) -> ConfigObjectSource:
        """Provides an alternative configuration when this source fails.

        Parameters
        ----------
        handler
            Called with the failures of this source. It returns a replacement
            result, or ``None`` when it does not handle these failures, in
            which case the original failures are kept.

        """

        return ConfigObjectSource(lambda: self._config().recover(handler))

    @classmethod
    def from_cursor(cls, cursor: ConfigObjectCursor | FluentConfigCursor) -> ConfigObjectSource:
        """Creates a source providing the object a cursor points to."""
        if isinstance(cursor, FluentConfigCursor):
            fluent = cursor
            return cls(lambda: fluent.as_object_cursor().map(_cursor_value))
        object_result = cursor.as_object_cursor()
        return cls(lambda: object_result.map(_cursor_value))


def _cursor_value(cursor: ConfigCursor) -> Any:
    return cursor.value


def _as_reader(reader: ConfigReader[T] | type[T] | Any) -> ConfigReader[T]:
    if isinstance(reader, ConfigReader):
        return reader
    return reader_for(reader)


def _require_object(value: ConfigValue) -> Result[ConfigObject]:
    if isinstance(value, ConfigObject):
        return Ok(value)
    return ConfigCursor(value).failed(WrongType(value.value_type, frozenset({ValueType.OBJECT})))


def _merge(primary: ConfigObject, fallback: ConfigObject) -> ConfigObject:
    return primary.with_fallback(fallback)


def _recover_empty(failures: ConfigReaderFailures) -> Result[ConfigObject]:
    logger.debug("Ignoring failed optional fallback: {}", failures)
    return Ok(ConfigObject.empty())
