"""
==========
Exceptions
==========

Module containing library-wide exception definitions. Failures met while
loading configuration are not exceptions: they are accumulated in
:class:`~treeconf.failures.ConfigReaderFailures` and returned inside
:class:`~treeconf.result.Err` values. The classes below cover programming
errors and the single fatal boundary, :meth:`ConfigSource.load_or_raise
<treeconf.config_source.ConfigSource.load_or_raise>`.

"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from treeconf.failures import ConfigReaderFailures


class TreeconfError(Exception):
    """Generic exception raised for errors in ``treeconf``."""

    pass


class ConfigurationError(TreeconfError):
    """Error raised when the library is called with invalid arguments.

    Attributes
    ----------
    value_name
        The name of the offending value, if there is one.

    """

    def __init__(self, message: str, value_name: str | None = None):
        self.value_name = value_name
        super().__init__(message)


class ConfigReaderException(TreeconfError):
    """Error raised when a configuration cannot be loaded into a target type.

    It carries every failure accumulated while loading so that the whole list
    can be reported at once.

    Attributes
    ----------
    failures
        The accumulated failures.
    target
        The type (or reader description) that was being loaded.

    """

    def __init__(self, failures: ConfigReaderFailures, target: Any = None):
        self.failures = failures
        self.target = target
        super().__init__(self._build_message())

    def _build_message(self) -> str:
        target_name = getattr(self.target, "__name__", None) or (
            str(self.target) if self.target is not None else "the requested type"
        )
        return (
            f"Cannot convert configuration to {target_name}. Failures are:\n"
            f"{self.failures.pretty_print(indent=1)}"
        )
