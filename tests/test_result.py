from treeconf.failures import ConfigReaderFailures, ConvertFailure, KeyNotFound
from treeconf.path import Key
from treeconf.result import Err, Ok, fail, sequence, zip_with


def _failure(key: str) -> ConvertFailure:
    return ConvertFailure(KeyNotFound(key), None, (Key(key),))


def test_ok_combinators() -> None:
    assert Ok(2).map(lambda x: x * 2) == Ok(4)
    assert Ok(2).flat_map(lambda x: Ok(x + 1)) == Ok(3)
    assert Ok(2).recover(lambda failures: Ok(0)) == Ok(2)
    assert Ok(2).get_or_else(0) == 2
    assert Ok(2).is_ok() and not Ok(2).is_err()


def test_err_short_circuits() -> None:
    err = fail(_failure("a"))
    assert err.map(lambda x: x * 2) is err
    assert err.flat_map(lambda x: Ok(x)) is err
    assert err.get_or_else(7) == 7
    assert err.is_err()


def test_err_recover() -> None:
    err = fail(_failure("a"))
    assert err.recover(lambda failures: Ok("default")) == Ok("default")
    assert err.recover(lambda failures: None) is err


def test_zip_with_unions_failures_left_first() -> None:
    left = fail(_failure("left"))
    right = fail(_failure("right"))

    assert zip_with(Ok(1), Ok(2), lambda a, b: a + b) == Ok(3)
    assert zip_with(left, Ok(2), lambda a, b: a) == left
    assert zip_with(Ok(1), right, lambda a, b: a) == right
    assert zip_with(left, right, lambda a, b: a) == Err(
        ConfigReaderFailures(_failure("left"), _failure("right"))
    )


def test_sequence_accumulates_every_failure() -> None:
    assert sequence([Ok(1), Ok(2)]) == Ok([1, 2])
    assert sequence([]) == Ok([])
    result = sequence([fail(_failure("a")), Ok(2), fail(_failure("b"))])
    assert result == Err(ConfigReaderFailures(_failure("a"), _failure("b")))
