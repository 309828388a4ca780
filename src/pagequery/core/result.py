"""
Ok / Err envelope for stages that can fail in an expected way.

An invalid search pattern or an unparsable date bound is not exceptional:
the stage returns ``Err`` and the pipeline turns it into a status. ``Ok([])``
(nothing matched) and ``Err`` (the query itself is broken) must never be
confused, which is the whole reason the envelope exists.

Examples:
    >>> Ok(["a:start"]).map(len).unwrap()
    1
    >>> Err(ValueError("bad")).unwrap_or([])
    []

Tags:
    result-pattern, error-handling, pagequery
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, TypeVar

T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """A stage's value."""

    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value

    def unwrap_or(self, default: T) -> T:
        return self.value

    def map(self, f: Callable[[T], U]) -> Result[U]:
        return Ok(f(self.value))

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[T]):
    """
    A stage's expected failure.

    ``unwrap()`` re-raises the carried error, so only call it after checking
    ``is_ok()``.
    """

    error: Exception

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> T:
        raise self.error

    def unwrap_or(self, default: T) -> T:
        return default

    def map(self, f: Callable[[T], U]) -> Result[U]:
        return Err(self.error)

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


Result = Ok[T] | Err[T]


def try_result_with(
    f: Callable[[], T],
    error_mapper: Callable[[Exception], Exception] | None = None,
) -> Result[T]:
    """
    Run ``f`` and wrap its outcome, translating any exception with ``error_mapper``.

    Examples:
        >>> import re
        >>> from pagequery.core.errors import InvalidPatternError
        >>> result = try_result_with(
        ...     lambda: re.compile("foo("),
        ...     lambda e: InvalidPatternError(str(e), cause=e),
        ... )
        >>> type(result.error).__name__
        'InvalidPatternError'
    """
    try:
        return Ok(f())
    except Exception as e:
        return Err(error_mapper(e) if error_mapper is not None else e)


__all__ = ["Ok", "Err", "Result", "try_result_with"]
