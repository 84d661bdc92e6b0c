"""
=======
Sources
=======

Ready-made :class:`~treeconf.config_source.ConfigObjectSource` instances and
constructors for the common origins.

Nothing in this module reads anything at import time. The module-level sources
are descriptions of where configuration lives and are evaluated again every
time they are used.

.. code-block:: python

    >>> from treeconf import sources
    >>> settings = sources.file('settings.yaml').with_fallback(sources.default)
    >>> settings.at('server').load(ServerSettings)

"""
from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Any

from treeconf.backend import loaders
from treeconf.backend.loaders import DEFAULT_OPTIONS, ParseOptions
from treeconf.config_source import ConfigObjectSource
from treeconf.cursor import ConfigObjectCursor, FluentConfigCursor
from treeconf.result import Ok, Result
from treeconf.tree import ConfigObject, ConfigOrigin, from_python

default: ConfigObjectSource = ConfigObjectSource(loaders.load)
"""System properties over the application configuration over the reference
configuration."""

empty: ConfigObjectSource = ConfigObjectSource(lambda: Ok(ConfigObject.empty()))
"""A source providing an empty object."""

system_properties: ConfigObjectSource = ConfigObjectSource(loaders.system_properties)
"""The process-wide system property table as a tree."""

default_reference: ConfigObjectSource = ConfigObjectSource(loaders.default_reference)
"""The resolved merge of every ``reference`` resource."""

default_reference_unresolved: ConfigObjectSource = ConfigObjectSource(
    lambda: loaders.parse_resources_any_syntax(
        loaders.REFERENCE_BASENAME, ParseOptions(allow_missing=True)
    )
)
"""The merge of every ``reference`` resource, before substitutions."""

default_application: ConfigObjectSource = ConfigObjectSource(loaders.default_application)
"""The application configuration, selected by system properties if set."""


def file(
    path: str | os.PathLike[str], options: ParseOptions = DEFAULT_OPTIONS
) -> ConfigObjectSource:
    """A source reading the YAML or JSON file at ``path``."""
    return ConfigObjectSource(lambda: loaders.parse_file(path, options))


def url(location: str, options: ParseOptions = DEFAULT_OPTIONS) -> ConfigObjectSource:
    """A source reading a ``file://``, ``http://`` or ``https://`` URL."""
    return ConfigObjectSource(lambda: loaders.parse_url(location, options))


def resources(name: str, options: ParseOptions = DEFAULT_OPTIONS) -> ConfigObjectSource:
    """A source merging every file called ``name`` on :data:`sys.path`."""
    return ConfigObjectSource(lambda: loaders.parse_resources(name, options))


def string(text: str, options: ParseOptions = DEFAULT_OPTIONS) -> ConfigObjectSource:
    """A source parsing ``text`` as YAML or JSON."""
    return ConfigObjectSource(lambda: loaders.parse_string(text, options))


def from_config(config: ConfigObject | Mapping[str, Any]) -> ConfigObjectSource:
    """A source providing a fixed tree.

    Parameters
    ----------
    config
        A :class:`~treeconf.tree.ConfigObject`, or a mapping of plain python
        data which is converted once, when this function is called.

    """
    if not isinstance(config, ConfigObject):
        config = from_python(config, ConfigOrigin("python"))
    tree: Result[ConfigObject] = Ok(config)  # type: ignore[arg-type]
    return ConfigObjectSource(lambda: tree)


def from_cursor(cursor: ConfigObjectCursor | FluentConfigCursor) -> ConfigObjectSource:
    """A source providing the object ``cursor`` points to."""
    return ConfigObjectSource.from_cursor(cursor)
