"""
========
Failures
========

Structured records describing why a configuration could not be loaded.

Three families of failures exist:

- Origin failures (:class:`CannotParse`, :class:`CannotReadFile`,
  :class:`CannotReadUrl`, :class:`CannotReadResource`,
  :class:`ThrowableFailure`) happen while materializing a source and carry no
  path.
- Navigation failures happen while moving a cursor through a tree.
- Conversion failures happen while a reader turns a leaf into a typed value.

Navigation and conversion failures are both :class:`ConvertFailure` records: a
:class:`FailureReason` tagged with the path and origin of the offending value.

Failures are collected in a non-empty :class:`ConfigReaderFailures`, and two
collections combine with ``+``.

"""
from __future__ import annotations

import difflib
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from itertools import chain

from treeconf.path import ConfigPath, render_path
from treeconf.tree import ConfigOrigin, ValueType


class FailureReason:
    """Why a value could not be navigated to or converted."""

    @property
    def description(self) -> str:
        raise NotImplementedError


@dataclass(frozen=True)
class KeyNotFound(FailureReason):
    key: str
    candidates: tuple[str, ...] = ()

    @classmethod
    def for_keys(cls, key: str, existing_keys: Iterable[str]) -> KeyNotFound:
        """Builds the reason, suggesting existing keys that look like ``key``."""
        existing = list(existing_keys)
        normalized = {_normalize(k): k for k in existing}
        candidates = []
        if _normalize(key) in normalized:
            candidates.append(normalized[_normalize(key)])
        for close_match in difflib.get_close_matches(key, existing, n=3, cutoff=0.8):
            if close_match not in candidates:
                candidates.append(close_match)
        return cls(key, tuple(candidates))

    @property
    def description(self) -> str:
        if not self.candidates:
            return f"Key not found: '{self.key}'."
        suggestions = ", ".join(f"'{c}'" for c in self.candidates)
        return f"Key not found: '{self.key}'. You might have a misspelled key: {suggestions}."


@dataclass(frozen=True)
class UnknownKey(FailureReason):
    key: str

    @property
    def description(self) -> str:
        return f"Unknown key '{self.key}'."


@dataclass(frozen=True)
class WrongType(FailureReason):
    found_type: ValueType
    expected_types: frozenset[ValueType]

    @property
    def description(self) -> str:
        expected = " or ".join(sorted(str(t) for t in self.expected_types))
        return f"Expected type {expected}. Found {self.found_type} instead."


@dataclass(frozen=True)
class CannotConvert(FailureReason):
    value: str
    to_type: str
    because: str

    @property
    def description(self) -> str:
        return f"Cannot convert '{self.value}' to {self.to_type}: {self.because}."


@dataclass(frozen=True)
class WrongSizeList(FailureReason):
    expected_size: int
    found_size: int

    @property
    def description(self) -> str:
        return (
            f"List of wrong size found. Expected {self.expected_size} elements. "
            f"Found {self.found_size} elements instead."
        )


@dataclass(frozen=True)
class EmptyStringFound(FailureReason):
    type_name: str

    @property
    def description(self) -> str:
        return f"Empty string found when trying to convert to {self.type_name}."


@dataclass(frozen=True)
class UnresolvedSubstitution(FailureReason):
    expression: str
    detail: str

    @property
    def description(self) -> str:
        return f"Could not resolve substitution '{self.expression}': {self.detail}."


@dataclass(frozen=True)
class ExceptionThrown(FailureReason):
    exception: BaseException = field(compare=False)

    @property
    def description(self) -> str:
        return f"{type(self.exception).__name__}: {self.exception}"


class ConfigReaderFailure:
    """A single failure found while loading a configuration."""

    origin: ConfigOrigin | None
    path: ConfigPath | None = None

    @property
    def description(self) -> str:
        raise NotImplementedError

    @property
    def path_string(self) -> str | None:
        return None if self.path is None else render_path(self.path)


@dataclass(frozen=True)
class CannotParse(ConfigReaderFailure):
    message: str
    origin: ConfigOrigin | None = None

    @property
    def description(self) -> str:
        return f"Unable to parse the configuration: {self.message}."


@dataclass(frozen=True)
class CannotReadFile(ConfigReaderFailure):
    filename: str
    reason: str
    origin: ConfigOrigin | None = None

    @property
    def description(self) -> str:
        return f"Unable to read file {self.filename} ({self.reason})."


@dataclass(frozen=True)
class CannotReadUrl(ConfigReaderFailure):
    url: str
    reason: str
    origin: ConfigOrigin | None = None

    @property
    def description(self) -> str:
        return f"Unable to read URL {self.url} ({self.reason})."


@dataclass(frozen=True)
class CannotReadResource(ConfigReaderFailure):
    resource: str
    reason: str
    origin: ConfigOrigin | None = None

    @property
    def description(self) -> str:
        return f"Unable to read resource {self.resource} ({self.reason})."


@dataclass(frozen=True)
class ThrowableFailure(ConfigReaderFailure):
    exception: BaseException = field(compare=False)
    origin: ConfigOrigin | None = None

    @property
    def description(self) -> str:
        return f"{type(self.exception).__name__}: {self.exception}."


@dataclass(frozen=True)
class ConvertFailure(ConfigReaderFailure):
    """A navigation or conversion failure at a known path."""

    reason: FailureReason
    origin: ConfigOrigin | None
    path: ConfigPath  # type: ignore[assignment]

    @property
    def description(self) -> str:
        return self.reason.description


class ConfigReaderFailures:
    """A non-empty, ordered collection of failures."""

    def __init__(self, first: ConfigReaderFailure, *rest: ConfigReaderFailure):
        self._failures = (first, *rest)

    @classmethod
    def of(cls, failures: Iterable[ConfigReaderFailure]) -> ConfigReaderFailures:
        failures = tuple(failures)
        if not failures:
            raise ValueError("ConfigReaderFailures cannot be empty.")
        return cls(*failures)

    @property
    def head(self) -> ConfigReaderFailure:
        return self._failures[0]

    def to_list(self) -> list[ConfigReaderFailure]:
        return list(self._failures)

    def __add__(self, other: ConfigReaderFailures) -> ConfigReaderFailures:
        return ConfigReaderFailures(*chain(self._failures, other._failures))

    def __iter__(self) -> Iterator[ConfigReaderFailure]:
        return iter(self._failures)

    def __len__(self) -> int:
        return len(self._failures)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, ConfigReaderFailures) and self._failures == other._failures

    def __hash__(self) -> int:
        return hash(self._failures)

    def pretty_print(self, indent: int = 0, indent_size: int = 2) -> str:
        """Renders the failures, grouping path-tagged failures by path."""
        pad = " " * (indent * indent_size)
        inner_pad = " " * ((indent + 1) * indent_size)
        lines = []

        by_path: dict[str, list[ConfigReaderFailure]] = {}
        for failure in self._failures:
            if failure.path is None:
                lines.append(f"{pad}- {_with_origin(failure)}")
            else:
                by_path.setdefault(failure.path_string or "", []).append(failure)

        for path_string, failures in by_path.items():
            location = f"at '{path_string}':" if path_string else "at the root:"
            lines.append(f"{pad}{location}")
            lines.extend(f"{inner_pad}- {_with_origin(failure)}" for failure in failures)
        return "\n".join(lines)

    def __repr__(self) -> str:
        return f"ConfigReaderFailures({', '.join(repr(f) for f in self._failures)})"

    def __str__(self) -> str:
        return self.pretty_print()


def _with_origin(failure: ConfigReaderFailure) -> str:
    if failure.origin is None:
        return failure.description
    return f"({failure.origin}) {failure.description}"


def _normalize(key: str) -> str:
    return "".join(c for c in key.lower() if c.isalnum())
