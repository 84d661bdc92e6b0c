"""
=======
Loaders
=======

Materializes configuration trees from their origins: strings, files, URLs,
resources found on :data:`sys.path` and the process-wide system property
table. Every function here returns a :class:`~treeconf.result.Result` and
converts I/O and parse errors into origin failures rather than raising.

Trees returned by the ``parse_*`` functions are *unresolved*: substitutions
are resolved once sources have been merged.

"""
from __future__ import annotations

import os
import sys
import threading
from dataclasses import dataclass, replace
from functools import reduce
from pathlib import Path
from urllib.parse import urlparse
from urllib.request import url2pathname

import requests
from loguru import logger

from treeconf.backend.parser import parse_text
from treeconf.backend.resolver import resolve
from treeconf.failures import CannotReadFile, CannotReadResource, CannotReadUrl
from treeconf.result import Ok, Result, fail, sequence, zip_with
from treeconf.tree import ConfigObject, ConfigOrigin, ConfigScalar, ConfigValue

REFERENCE_BASENAME = "reference"
APPLICATION_BASENAME = "application"
# earlier extensions take priority when several files share a basename
RESOURCE_EXTENSIONS = (".yaml", ".yml", ".json")


@dataclass(frozen=True)
class ParseOptions:
    """Options controlling how an origin is read.

    Attributes
    ----------
    encoding
        The text encoding of files and resources.
    allow_missing
        Whether a missing file or resource yields an empty object instead of a
        failure.
    url_timeout
        Seconds to wait for a remote URL before failing.
    origin_description
        Overrides the description recorded in value origins.

    """

    encoding: str = "utf-8"
    allow_missing: bool = False
    url_timeout: float = 10.0
    origin_description: str | None = None


DEFAULT_OPTIONS = ParseOptions()


def parse_string(text: str, options: ParseOptions = DEFAULT_OPTIONS) -> Result[ConfigObject]:
    origin = ConfigOrigin(options.origin_description or "string")
    return parse_text(text, origin)


def parse_file(
    path: str | os.PathLike[str], options: ParseOptions = DEFAULT_OPTIONS
) -> Result[ConfigObject]:
    path = Path(path)
    origin = ConfigOrigin(options.origin_description or str(path), filename=str(path))
    logger.debug("Reading configuration file {}", path)
    try:
        text = path.read_text(encoding=options.encoding)
    except FileNotFoundError:
        if options.allow_missing:
            return Ok(ConfigObject.empty(origin))
        return fail(CannotReadFile(str(path), "file not found", origin))
    except (OSError, UnicodeDecodeError) as e:
        logger.debug("Unable to read configuration file {}: {}", path, e)
        return fail(CannotReadFile(str(path), str(e), origin))
    return parse_text(text, origin)


def parse_url(url: str, options: ParseOptions = DEFAULT_OPTIONS) -> Result[ConfigObject]:
    """Reads a configuration from a ``file://``, ``http://`` or ``https://`` URL."""
    origin = ConfigOrigin(options.origin_description or url, url=url)
    scheme = urlparse(url).scheme.lower()
    logger.debug("Reading configuration URL {}", url)

    if scheme == "file":
        try:
            text = Path(url2pathname(urlparse(url).path)).read_text(encoding=options.encoding)
        except FileNotFoundError:
            if options.allow_missing:
                return Ok(ConfigObject.empty(origin))
            return fail(CannotReadUrl(url, "file not found", origin))
        except (OSError, UnicodeDecodeError) as e:
            return fail(CannotReadUrl(url, str(e), origin))
    elif scheme in ("http", "https"):
        try:
            response = requests.get(url, timeout=options.url_timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.debug("Unable to fetch configuration URL {}: {}", url, e)
            return fail(CannotReadUrl(url, str(e), origin))
        if response.encoding is None:
            response.encoding = options.encoding
        text = response.text
    else:
        return fail(CannotReadUrl(url, f"unsupported URL scheme '{scheme}'", origin))

    return parse_text(text, origin)


def find_resources(name: str) -> list[Path]:
    """Finds every file called ``name`` in the directories on :data:`sys.path`."""
    found = []
    seen = set()
    for entry in sys.path:
        directory = Path(entry or os.curdir)
        candidate = directory / name
        if not candidate.is_file():
            continue
        resolved = candidate.resolve()
        if resolved not in seen:
            seen.add(resolved)
            found.append(candidate)
    return found


def parse_resources(name: str, options: ParseOptions = DEFAULT_OPTIONS) -> Result[ConfigObject]:
    """Reads and merges every resource called ``name``.

    The merge happens in no particular order, so resources sharing a name
    should not define the same keys.

    """
    found = find_resources(name)
    if not found:
        if options.allow_missing:
            return Ok(ConfigObject.empty(ConfigOrigin(f"resource {name}", resource=name)))
        origin = ConfigOrigin(f"resource {name}", resource=name)
        return fail(CannotReadResource(name, "resource not found on sys.path", origin))

    logger.debug("Found {} resource(s) named {}: {}", len(found), name, found)
    results = [
        parse_file(path, replace(options, origin_description=f"{path} @ resource {name}"))
        for path in found
    ]
    return sequence(results).map(_merge_all)


def parse_resources_any_syntax(
    basename: str, options: ParseOptions = DEFAULT_OPTIONS
) -> Result[ConfigObject]:
    """Reads the resources ``basename`` with any supported extension.

    Resources with an earlier extension in :data:`RESOURCE_EXTENSIONS` take
    priority. Missing resources contribute nothing unless none is found and
    ``options.allow_missing`` is false.

    """
    lenient = replace(options, allow_missing=True)
    names = [f"{basename}{extension}" for extension in RESOURCE_EXTENSIONS]
    if not options.allow_missing and not any(find_resources(name) for name in names):
        origin = ConfigOrigin(f"resource {basename}", resource=basename)
        return fail(
            CannotReadResource(
                basename, f"none of {', '.join(names)} found on sys.path", origin
            )
        )
    return sequence([parse_resources(name, lenient) for name in names]).map(_merge_all)


_properties: dict[str, str] = {}
_properties_lock = threading.Lock()


def set_property(key: str, value: str) -> None:
    """Sets a process-wide system property."""
    with _properties_lock:
        _properties[key] = str(value)


def clear_property(key: str) -> None:
    with _properties_lock:
        _properties.pop(key, None)


def get_properties() -> dict[str, str]:
    """Returns a snapshot of the system property table."""
    with _properties_lock:
        return dict(_properties)


def system_properties() -> Result[ConfigObject]:
    """Builds a tree from the system properties.

    Dotted property names become nested objects. When a name is both a value
    and the prefix of other names (``a=1`` and ``a.b=2``) the object wins.

    """
    origin = ConfigOrigin("system properties")
    tree: dict[str, dict | str] = {}
    # longer names first so that objects are created before shadowed values
    for key, value in sorted(get_properties().items(), key=lambda kv: -kv[0].count(".")):
        *parents, leaf = key.split(".")
        node = tree
        for parent in parents:
            child = node.get(parent)
            if not isinstance(child, dict):
                child = node[parent] = {}
            node = child
        if not isinstance(node.get(leaf), dict):
            node[leaf] = value
    return Ok(_to_object(tree, origin))


def default_reference() -> Result[ConfigObject]:
    """The resolved merge of every ``reference`` resource."""
    options = ParseOptions(allow_missing=True)
    return parse_resources_any_syntax(REFERENCE_BASENAME, options).flat_map(resolve)


def default_application() -> Result[ConfigObject]:
    """The application configuration.

    The ``config.file``, ``config.url`` and ``config.resource`` system
    properties select the application configuration explicitly, in that order
    of precedence. Otherwise the ``application`` resources are used, and a
    missing application configuration is empty.

    """
    properties = get_properties()
    if "config.file" in properties:
        return parse_file(properties["config.file"])
    if "config.url" in properties:
        return parse_url(properties["config.url"])
    if "config.resource" in properties:
        return parse_resources(properties["config.resource"])
    return parse_resources_any_syntax(APPLICATION_BASENAME, ParseOptions(allow_missing=True))


def load() -> Result[ConfigObject]:
    """System properties over the application config over the reference config."""

    def merge(primary: ConfigObject, fallback: ConfigObject) -> ConfigObject:
        return primary.with_fallback(fallback)

    overrides = zip_with(system_properties(), default_application(), merge)
    return zip_with(overrides, default_reference(), merge).flat_map(resolve)


def _merge_all(objects: list[ConfigObject]) -> ConfigObject:
    return reduce(lambda merged, obj: merged.with_fallback(obj), objects, ConfigObject.empty())


def _to_object(data: dict, origin: ConfigOrigin) -> ConfigObject:
    fields: dict[str, ConfigValue] = {}
    for key, value in data.items():
        if isinstance(value, dict):
            fields[key] = _to_object(value, origin)
        else:
            fields[key] = ConfigScalar(value, origin)
    return ConfigObject(fields, origin)
