"""Result — success/failure envelope used at every public identity boundary.

Operations that can fail return a :class:`Result` instead of raising. A
successful result carries a value; a failed one carries a human-readable
message, the underlying exception (when there is one) and optional context
data for debugging.

Example
-------
::

    result = await Identity.generate("alice")
    if result.is_failure:
        print(result.error_message)
    else:
        identity = result.value
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class ResultError:
    """Failure details carried by a failed :class:`Result`.

    Parameters
    ----------
    message:
        What went wrong, phrased for the caller.
    cause:
        The exception that triggered the failure, if any.
    data:
        Extra context values attached by the failing operation.
    """

    message: str
    cause: Optional[BaseException] = None
    data: tuple[Any, ...] = field(default_factory=tuple)


class Result(Generic[T]):
    """Outcome of an operation that might fail.

    Build instances with :meth:`success` or :meth:`fail`; the constructor is
    not part of the public API.
    """

    __slots__ = ("_is_success", "_value", "_error")

    def __init__(
        self,
        is_success: bool,
        value: Optional[T] = None,
        error: Optional[ResultError] = None,
    ) -> None:
        self._is_success = is_success
        self._value = value
        self._error = error

    # ------------------------------------------------------------------
    # Factories
    # ------------------------------------------------------------------

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        """Create a successful result wrapping *value*."""
        return cls(True, value=value)

    @classmethod
    def fail(
        cls,
        message: str,
        cause: Optional[BaseException] = None,
        *data: Any,
    ) -> "Result[T]":
        """Create a failed result.

        Parameters
        ----------
        message:
            Error message describing what went wrong.
        cause:
            Optional underlying exception.
        *data:
            Optional context values for debugging.
        """
        return cls(False, error=ResultError(message=message, cause=cause, data=tuple(data)))

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def is_success(self) -> bool:
        return self._is_success

    @property
    def is_failure(self) -> bool:
        return not self._is_success

    @property
    def value(self) -> T:
        """The success value.

        Raises
        ------
        ValueError
            If this result is a failure.
        """
        if not self._is_success:
            message = self._error.message if self._error else "unknown error"
            raise ValueError(f"Cannot get value from a failed result: {message}")
        return self._value  # type: ignore[return-value]

    @property
    def error(self) -> Optional[ResultError]:
        return self._error

    @property
    def error_message(self) -> Optional[str]:
        return self._error.message if self._error else None

    @property
    def error_cause(self) -> Optional[BaseException]:
        return self._error.cause if self._error else None

    def is_null(self) -> bool:
        """Return True for a success whose value is ``None``."""
        return self._is_success and self._value is None

    # ------------------------------------------------------------------
    # Callbacks
    # ------------------------------------------------------------------

    def on_success(self, fn: Callable[[T], None]) -> "Result[T]":
        """Call *fn* with the value when successful. Returns ``self``."""
        if self._is_success:
            fn(self._value)  # type: ignore[arg-type]
        return self

    def on_failure(
        self,
        fn: Callable[[str, Optional[BaseException], tuple[Any, ...]], None],
    ) -> "Result[T]":
        """Call *fn* with ``(message, cause, data)`` when failed. Returns ``self``."""
        if not self._is_success and self._error is not None:
            fn(self._error.message, self._error.cause, self._error.data)
        return self

    def __bool__(self) -> bool:
        return self._is_success

    def __repr__(self) -> str:
        if self._is_success:
            return f"Result.success({self._value!r})"
        return f"Result.fail({self.error_message!r})"


__all__ = ["Result", "ResultError"]
