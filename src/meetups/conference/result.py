"""Single-result container for proxy calls."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

from src.meetups.conference.errors import ProxyError

T = TypeVar("T")


@dataclass(frozen=True)
class CallResult(Generic[T]):
    """Outcome of one conferencing server call.

    Holds either a value or a ProxyError, never both. Build instances with
    ``success()`` / ``failure()`` rather than the constructor.

    Attributes:
        value: Decoded response (raw text or parsed tree) on success.
        error: The failure on error.
        status_code: HTTP status when a response was received.
    """

    value: T | None = None
    error: ProxyError | None = None
    status_code: int | None = None

    def __post_init__(self) -> None:
        if self.error is not None and self.value is not None:
            raise ValueError("CallResult cannot carry both a value and an error")

    @classmethod
    def success(cls, value: T, status_code: int | None = None) -> CallResult[T]:
        return cls(value=value, status_code=status_code)

    @classmethod
    def failure(cls, error: ProxyError, status_code: int | None = None) -> CallResult[T]:
        return cls(error=error, status_code=status_code)

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Return the value, or raise the carried error."""
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]
