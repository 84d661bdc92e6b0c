from treeconf.__about__ import (
    __author__,
    __copyright__,
    __email__,
    __license__,
    __summary__,
    __title__,
    __uri__,
    __version__,
)
from treeconf import sources
from treeconf.config_source import ConfigObjectSource, ConfigSource
from treeconf.cursor import (
    ConfigCursor,
    ConfigListCursor,
    ConfigObjectCursor,
    FluentConfigCursor,
)
from treeconf.exceptions import ConfigReaderException, ConfigurationError, TreeconfError
from treeconf.failures import ConfigReaderFailure, ConfigReaderFailures
from treeconf.reader import ConfigReader, ReaderRegistry, reader_for, register_reader
from treeconf.result import Err, Ok, Result
from treeconf.tree import (
    ConfigList,
    ConfigObject,
    ConfigOrigin,
    ConfigScalar,
    ConfigValue,
    from_python,
)
