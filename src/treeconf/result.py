"""
=======
Results
=======

Configuration loading does not raise. Every operation that can fail returns
either an :class:`Ok` holding the produced value or an :class:`Err` holding a
non-empty :class:`~treeconf.failures.ConfigReaderFailures`.

Independent results are combined with :func:`zip_with` and :func:`sequence`,
which keep the failures of *every* failed operand rather than stopping at the
first one.

"""
from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Generic, TypeVar, Union

from treeconf.failures import ConfigReaderFailure, ConfigReaderFailures

T = TypeVar("T")
U = TypeVar("U")
V = TypeVar("V")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Success result containing a value."""

    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def map(self, f: Callable[[T], U]) -> Result[U]:
        return Ok(f(self.value))

    def flat_map(self, f: Callable[[T], Result[U]]) -> Result[U]:
        return f(self.value)

    def recover(self, f: Callable[[ConfigReaderFailures], Result[T] | None]) -> Result[T]:
        return self

    def get_or_else(self, default: T) -> T:
        return self.value


@dataclass(frozen=True)
class Err:
    """Failure result containing the accumulated failures."""

    failures: ConfigReaderFailures

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def map(self, f: Callable[[object], object]) -> Err:
        return self

    def flat_map(self, f: Callable[[object], object]) -> Err:
        return self

    def recover(self, f: Callable[[ConfigReaderFailures], Result[T] | None]) -> Result[T]:
        """Applies ``f`` to the failures.

        ``f`` may return ``None`` to signal that it does not handle these
        failures, in which case this result is returned unchanged.

        """
        recovered = f(self.failures)
        return self if recovered is None else recovered

    def get_or_else(self, default: T) -> T:
        return default


Result = Union[Ok[T], Err]


def zip_with(left: Result[T], right: Result[U], f: Callable[[T, U], V]) -> Result[V]:
    """Combines two independent results.

    If both fail, the failures of ``left`` come first followed by those of
    ``right``.

    """
    if isinstance(left, Ok) and isinstance(right, Ok):
        return Ok(f(left.value, right.value))
    if isinstance(left, Err) and isinstance(right, Err):
        return Err(left.failures + right.failures)
    return left if isinstance(left, Err) else right  # type: ignore[return-value]


def sequence(results: Iterable[Result[T]]) -> Result[list[T]]:
    """Turns results into a result of a list, accumulating all failures."""
    values: list[T] = []
    failures: ConfigReaderFailures | None = None
    for result in results:
        if isinstance(result, Err):
            failures = result.failures if failures is None else failures + result.failures
        elif failures is None:
            values.append(result.value)
    return Ok(values) if failures is None else Err(failures)


def fail(failure: ConfigReaderFailure) -> Err:
    """Wraps a single failure record in an :class:`Err`."""
    return Err(ConfigReaderFailures(failure))
