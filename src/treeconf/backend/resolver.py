"""
============
The Resolver
============

Resolves substitutions in a parsed configuration tree.

A string value of the form ``${path}`` is replaced by the value found at
``path`` from the root of the tree, whatever its type. Substitutions embedded
in a longer string (``"http://${host}:${port}"``) are replaced by the string
form of their scalar target. The optional form ``${?path}`` drops the field
(or renders as the empty string inside a longer string) when ``path`` has no
value.

Resolution happens after sources are merged, so a value may refer to keys
that only a fallback source defines.

"""
from __future__ import annotations

import re

from treeconf.exceptions import ConfigurationError
from treeconf.failures import (
    ConfigReaderFailure,
    ConfigReaderFailures,
    ConvertFailure,
    UnresolvedSubstitution,
)
from treeconf.path import ConfigPath, Index, Key, split_path
from treeconf.result import Err, Ok, Result
from treeconf.tree import ConfigList, ConfigObject, ConfigScalar, ConfigValue, ValueType

_SUBSTITUTION = re.compile(r"\$\{(\?)?\s*([^}]*?)\s*\}")


def resolve(root: ConfigObject) -> Result[ConfigObject]:
    """Resolves every substitution in ``root``.

    Returns
    -------
        The resolved tree, or one failure per substitution that could not be
        resolved.

    """
    return _Resolver(root).resolve()


def needs_resolution(value: ConfigValue) -> bool:
    if isinstance(value, ConfigObject):
        return any(needs_resolution(child) for child in value.values())
    elif isinstance(value, ConfigList):
        return any(needs_resolution(child) for child in value)
    return (
        isinstance(value, ConfigScalar)
        and value.value_type is ValueType.STRING
        and _SUBSTITUTION.search(str(value.value)) is not None
    )


class _Resolver:
    def __init__(self, root: ConfigObject):
        self._root = root
        self._resolved: dict[ConfigPath, ConfigValue | None] = {}
        self._in_progress: set[ConfigPath] = set()
        self._failures: list[ConfigReaderFailure] = []

    def resolve(self) -> Result[ConfigObject]:
        if not needs_resolution(self._root):
            return Ok(self._root)

        resolved = self._resolve_value(self._root, ())
        if self._failures:
            unique = list(dict.fromkeys(self._failures))
            return Err(ConfigReaderFailures.of(unique))
        assert isinstance(resolved, ConfigObject)
        return Ok(resolved)

    def _resolve_value(self, value: ConfigValue, path: ConfigPath) -> ConfigValue | None:
        if isinstance(value, ConfigObject):
            fields = {}
            for name, child in value.items():
                resolved = self._resolve_value(child, path + (Key(name),))
                if resolved is not None:
                    fields[name] = resolved
            return ConfigObject(fields, value.origin)
        elif isinstance(value, ConfigList):
            items = []
            for i, child in enumerate(value):
                resolved = self._resolve_value(child, path + (Index(i),))
                if resolved is not None:
                    items.append(resolved)
            return ConfigList(items, value.origin)
        elif isinstance(value, ConfigScalar) and value.value_type is ValueType.STRING:
            return self._substitute(value, path)
        return value

    def _substitute(self, scalar: ConfigScalar, path: ConfigPath) -> ConfigValue | None:
        text = str(scalar.value)
        whole = _SUBSTITUTION.fullmatch(text)
        if whole:
            optional, expression = bool(whole.group(1)), whole.group(2)
            target = self._lookup(expression, optional, scalar, path)
            if target is None:
                return None if optional else scalar
            return target

        parts = []
        position = 0
        for match in _SUBSTITUTION.finditer(text):
            optional, expression = bool(match.group(1)), match.group(2)
            parts.append(text[position : match.start()])
            position = match.end()
            target = self._lookup(expression, optional, scalar, path)
            if target is None:
                continue
            if not isinstance(target, ConfigScalar):
                self._fail(
                    expression,
                    f"cannot insert a {target.value_type} into a string",
                    scalar,
                    path,
                )
            elif target.value_type is not ValueType.NULL:
                parts.append(target.render())
        parts.append(text[position:])
        return ConfigScalar("".join(parts), scalar.origin)

    def _lookup(
        self, expression: str, optional: bool, scalar: ConfigScalar, path: ConfigPath
    ) -> ConfigValue | None:
        try:
            target_path = split_path(expression)
        except ConfigurationError as e:
            self._fail(expression, str(e), scalar, path)
            return None
        if not target_path:
            self._fail(expression, "empty path", scalar, path)
            return None
        if target_path in self._in_progress:
            self._fail(expression, "cycle detected", scalar, path)
            return None
        if target_path in self._resolved:
            return self._resolved[target_path]

        raw = _get(self._root, target_path)
        if raw is None:
            if not optional:
                self._fail(expression, "no value at this path", scalar, path)
            return None

        self._in_progress.add(target_path)
        resolved = self._resolve_value(raw, target_path)
        self._in_progress.discard(target_path)
        self._resolved[target_path] = resolved
        return resolved

    def _fail(self, expression: str, detail: str, scalar: ConfigScalar, path: ConfigPath) -> None:
        reason = UnresolvedSubstitution(expression, detail)
        self._failures.append(ConvertFailure(reason, scalar.origin, path))


def _get(root: ConfigValue, path: ConfigPath) -> ConfigValue | None:
    value: ConfigValue | None = root
    for segment in path:
        if isinstance(segment, Key) and isinstance(value, ConfigObject):
            value = value.get(segment.name)
        elif isinstance(segment, Index) and isinstance(value, ConfigList):
            value = value[segment.position] if segment.position < len(value) else None
        else:
            return None
    return value
