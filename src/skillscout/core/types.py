"""Core types for skillscout - the Result type and the Scope enum.

Expected per-entry failures (a malformed skill header, a missing body file)
travel as ``Result`` values so a single bad entry can be recorded and skipped
without unwinding the whole scan. Exceptions are reserved for fatal
conditions and bugs.
"""

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar, cast

T = TypeVar("T")
E = TypeVar("E")
U = TypeVar("U")


@dataclass(frozen=True, slots=True)
class Result(Generic[T, E]):
    """Either a success value (Ok) or a failure value (Err).

    Usage:
        parsed: Result[SkillHeader, ParseError] = parse_header(text, path)
        if parsed.is_ok:
            build(parsed.value)
        else:
            warnings.append(parsed.error)
    """

    _value: T | None
    _error: E | None
    _is_ok: bool

    @classmethod
    def ok(cls, value: T) -> "Result[T, E]":
        """Create a successful Result containing ``value``."""
        return cls(_value=value, _error=None, _is_ok=True)

    @classmethod
    def err(cls, error: E) -> "Result[T, E]":
        """Create a failed Result containing ``error``."""
        return cls(_value=None, _error=error, _is_ok=False)

    @property
    def is_ok(self) -> bool:
        """Return True if this Result is Ok."""
        return self._is_ok

    @property
    def is_err(self) -> bool:
        """Return True if this Result is Err."""
        return not self._is_ok

    def __repr__(self) -> str:
        if self._is_ok:
            return f"Ok({self._value!r})"
        return f"Err({self._error!r})"

    @property
    def value(self) -> T:
        """Return the Ok value.

        Raises:
            ValueError: If this Result is Err.
        """
        if not self._is_ok:
            msg = "Cannot access value on Err result"
            raise ValueError(msg)
        return cast(T, self._value)

    @property
    def error(self) -> E:
        """Return the Err value.

        Raises:
            ValueError: If this Result is Ok.
        """
        if self._is_ok:
            msg = "Cannot access error on Ok result"
            raise ValueError(msg)
        return cast(E, self._error)

    def unwrap(self) -> T:
        """Return the Ok value or raise ValueError carrying the error text."""
        if self._is_ok:
            return cast(T, self._value)
        raise ValueError(str(self._error))

    def unwrap_or(self, default: T) -> T:
        """Return the Ok value, or ``default`` if Err."""
        if self._is_ok:
            return cast(T, self._value)
        return default

    def map(self, fn: Callable[[T], U]) -> "Result[U, E]":
        """Apply ``fn`` to the Ok value; pass an Err through unchanged."""
        if self._is_ok:
            return Result.ok(fn(cast(T, self._value)))
        return Result.err(cast(E, self._error))

    def and_then(self, fn: Callable[[T], "Result[U, E]"]) -> "Result[U, E]":
        """Chain a Result-producing step onto an Ok value.

        Example:
            read_document(path).and_then(lambda text: parse_header(text, path))
        """
        if self._is_ok:
            return fn(cast(T, self._value))
        return Result.err(cast(E, self._error))


class Scope(str, Enum):
    """Registry tier a skill was loaded from.

    ``project`` always outranks ``user`` for the same identifier.
    """

    USER = "user"
    PROJECT = "project"

    @property
    def rank(self) -> int:
        """Precedence rank; higher wins."""
        return _SCOPE_RANK[self]


_SCOPE_RANK = {Scope.USER: 0, Scope.PROJECT: 1}
