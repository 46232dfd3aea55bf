"""Attempt result models for riskycall.

RetryExecutor.attempt() never raises for a failing work unit. It returns
one of these tagged results instead.

Models:
    Success: The work unit returned a value.
    Failure: Every attempt failed; carries the last AttemptFailedError.
    Cancelled: The sequence was stopped by its cancellation event.

Usage:
    from riskycall.core.models import Success, Failure

    result = executor.attempt()
    if isinstance(result, Success):
        use(result.value)
    elif isinstance(result, Failure):
        report(result.error)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Generic, Optional, TypeVar, Union

from riskycall.core.exceptions import AttemptCancelledError, AttemptFailedError

T = TypeVar("T")


class TraceFormat(StrEnum):
    """How captured trace frames are ordered and labelled.

    Attributes:
        INNERMOST_FIRST: Failing frame first, ``#N`` index prefixes stripped.
        OUTERMOST_FIRST: Entry point first, ``#N`` index prefixes stripped.
        RAW: Failing frame first, index prefixes kept.
    """

    INNERMOST_FIRST = "innermost_first"
    OUTERMOST_FIRST = "outermost_first"
    RAW = "raw"


@dataclass(frozen=True)
class Success(Generic[T]):
    """Work unit completed without failure.

    Attributes:
        value: Whatever the work unit returned (not interpreted).
        attempts: Number of invocations the sequence performed.
    """

    value: T
    attempts: int = 1

    @property
    def ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        """Return the wrapped value."""
        return self.value


@dataclass(frozen=True)
class Failure:
    """Retry sequence exhausted all attempts.

    Attributes:
        error: The failure captured on the final attempt.
        attempts: Number of invocations the sequence performed.
    """

    error: AttemptFailedError
    attempts: int

    @property
    def ok(self) -> bool:
        return False

    def unwrap(self) -> Any:
        """Raise the captured failure."""
        raise self.error


@dataclass(frozen=True)
class Cancelled:
    """Retry sequence stopped by its cancellation event.

    Attributes:
        attempts: Number of invocations performed before cancellation.
        error: Last captured failure, if any attempt failed.
    """

    attempts: int
    error: Optional[AttemptFailedError] = None

    @property
    def ok(self) -> bool:
        return False

    def unwrap(self) -> Any:
        """Raise AttemptCancelledError chained to the last failure."""
        raise AttemptCancelledError(attempts=self.attempts) from self.error


AttemptResult = Union[Success[Any], Failure, Cancelled]
