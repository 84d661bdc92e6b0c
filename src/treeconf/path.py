"""
=====
Paths
=====

Paths describe how a value was reached from the root of a configuration tree.
A path is a tuple of :class:`PathSegment` objects, either a :class:`Key` into
an object or an :class:`Index` into a list.

Path expressions use dots between keys and brackets around list indices::

    >>> split_path('database.replicas[1].host')
    (Key(name='database'), Key(name='replicas'), Index(position=1), Key(name='host'))

Keys containing dots or brackets may be double quoted, e.g. ``'"a.b".c'``.

"""
from __future__ import annotations

from dataclasses import dataclass
from typing import NoReturn, Union

from treeconf.exceptions import ConfigurationError

_SPECIAL_CHARACTERS = frozenset('.[]"')


@dataclass(frozen=True)
class Key:
    """A navigation step into an object field."""

    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Index:
    """A navigation step into a list element."""

    position: int

    def __post_init__(self) -> None:
        if self.position < 0:
            raise ConfigurationError(
                f"List indices must be non-negative. You provided {self.position}.",
                value_name=str(self.position),
            )

    def __str__(self) -> str:
        return str(self.position)


PathSegment = Union[Key, Index]
ConfigPath = tuple[PathSegment, ...]


def to_segment(segment: PathSegment | str | int) -> PathSegment:
    """Coerce a key name or a list position into a :class:`PathSegment`."""
    if isinstance(segment, (Key, Index)):
        return segment
    # bool is an int subclass but never a valid index
    if isinstance(segment, int) and not isinstance(segment, bool):
        return Index(segment)
    if isinstance(segment, str):
        return Key(segment)
    raise ConfigurationError(
        f"Path segments must be keys, indices, strings or integers. You passed {type(segment)}.",
        value_name=repr(segment),
    )


def split_path(expression: str) -> ConfigPath:
    """Parse a path expression into a tuple of segments.

    Parameters
    ----------
    expression
        A dotted and bracketed path expression. The empty string denotes the
        root of a tree.

    Returns
    -------
        The segments named by the expression, root first.

    Raises
    ------
    ConfigurationError
        If the expression is malformed.

    """
    segments: list[PathSegment] = []
    position = 0
    length = len(expression)
    expect_segment = False

    while position < length:
        char = expression[position]
        if char == "[":
            if expect_segment:
                _bad_path(expression, "index after '.'")
            end = expression.find("]", position)
            if end == -1:
                _bad_path(expression, "unterminated index")
            digits = expression[position + 1 : end].strip()
            if not digits.isdigit():
                _bad_path(expression, f"invalid index '{digits}'")
            segments.append(Index(int(digits)))
            position = end + 1
            expect_segment = False
        elif char == ".":
            if not segments or expect_segment:
                _bad_path(expression, "empty key")
            position += 1
            expect_segment = True
        else:
            if segments and not expect_segment:
                _bad_path(expression, "missing '.' between segments")
            name, position = _read_key(expression, position)
            segments.append(Key(name))
            expect_segment = False

    if expect_segment:
        _bad_path(expression, "trailing '.'")
    return tuple(segments)


def render_path(path: ConfigPath) -> str:
    """Render a tuple of segments as a path expression.

    The output of this function is accepted by :func:`split_path` and yields
    the same segments back.

    """
    rendered = ""
    for segment in path:
        if isinstance(segment, Index):
            rendered += f"[{segment.position}]"
        else:
            name = _quote(segment.name)
            rendered = f"{rendered}.{name}" if rendered else name
    return rendered


def _read_key(expression: str, position: int) -> tuple[str, int]:
    if expression[position] == '"':
        name = []
        position += 1
        while position < len(expression):
            char = expression[position]
            if char == "\\" and position + 1 < len(expression):
                name.append(expression[position + 1])
                position += 2
            elif char == '"':
                return "".join(name), position + 1
            else:
                name.append(char)
                position += 1
        _bad_path(expression, "unterminated quoted key")

    start = position
    while position < len(expression) and expression[position] not in _SPECIAL_CHARACTERS:
        position += 1
    if position == start:
        _bad_path(expression, f"unexpected '{expression[position]}'")
    return expression[start:position], position


def _quote(name: str) -> str:
    if name and not (_SPECIAL_CHARACTERS & set(name)) and name.strip() == name:
        return name
    escaped = name.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _bad_path(expression: str, problem: str) -> NoReturn:
    raise ConfigurationError(f"Invalid path '{expression}': {problem}.", value_name=expression)
