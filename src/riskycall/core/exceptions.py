"""riskycall Exception Hierarchy.

This module defines the structured exception hierarchy for riskycall.
All custom exceptions inherit from RiskyCallError, enabling consistent
error handling across the codebase.

Exception Categories:
- Work unit failures → AttemptFailedError, returned inside a Failure result
  (never raised out of RetryExecutor.attempt())
- Misuse/system errors → raised (re-entrant attempt, bad state transition,
  invalid configuration)

Usage:
    from riskycall.core.exceptions import AttemptFailedError

    result = executor.attempt()
    if not result.ok:
        error: AttemptFailedError = result.error
        print(error.message, error.trace)
"""

from typing import Any, Optional


class RiskyCallError(Exception):
    """Base exception for all riskycall errors.

    Attributes:
        message: Human-readable error description.
    """

    def __init__(self, message: Optional[str] = None) -> None:
        """Initialize RiskyCallError.

        Args:
            message: Optional custom message. Defaults to a generic message.
        """
        self.message = message or "A riskycall error occurred."
        super().__init__(self.message)

    @property
    def context(self) -> dict[str, Any]:
        """Return context dictionary for structured logging.

        Returns:
            dict: Key-value pairs of exception context.
        """
        return {}

    def __repr__(self) -> str:
        """Return debug representation."""
        return f"{self.__class__.__name__}({self.message!r})"


class AttemptFailedError(RiskyCallError):
    """Invocation of the work unit failed.

    This is the single failure kind produced by a retry sequence. Any
    exception raised by the work unit, and any warning escalated while
    warnings are treated as errors, is normalized into this type. The
    original exception is kept as ``__cause__``.

    Attributes:
        attempt: Attempt number (1-based) that produced the failure.
        max_attempts: Configured maximum at the time of the failure.
        trace: Formatted frames describing where the failure occurred.
        error_type: Class name of the original exception.
    """

    def __init__(
        self,
        message: str,
        attempt: int,
        max_attempts: int,
        trace: Optional[list[str]] = None,
        error_type: Optional[str] = None,
    ) -> None:
        """Initialize AttemptFailedError.

        Args:
            message: Message text of the original failure.
            attempt: Attempt number that failed.
            max_attempts: Configured maximum attempts.
            trace: Optional formatted frames.
            error_type: Optional class name of the original exception.
        """
        self.attempt = attempt
        self.max_attempts = max_attempts
        self.trace = list(trace) if trace else []
        self.error_type = error_type

        super().__init__(message)

    @classmethod
    def from_exception(
        cls,
        exc: BaseException,
        attempt: int,
        max_attempts: int,
        trace: Optional[list[str]] = None,
    ) -> "AttemptFailedError":
        """Wrap an arbitrary exception raised by a work unit.

        The returned error is chained to ``exc`` through ``__cause__``.
        Empty exception messages fall back to the exception class name.
        """
        message = str(exc) or exc.__class__.__name__
        error = cls(
            message=message,
            attempt=attempt,
            max_attempts=max_attempts,
            trace=trace,
            error_type=exc.__class__.__name__,
        )
        error.__cause__ = exc
        return error

    @property
    def context(self) -> dict[str, Any]:
        """Return context for a failed attempt."""
        return {
            "attempt": self.attempt,
            "max_attempts": self.max_attempts,
            "error_type": self.error_type,
        }

    def __repr__(self) -> str:
        """Return debug representation with attributes."""
        return (
            f"AttemptFailedError(message={self.message!r}, "
            f"attempt={self.attempt!r}, max_attempts={self.max_attempts!r})"
        )


class AttemptCancelledError(RiskyCallError):
    """Retry sequence was cancelled before it reached a terminal outcome.

    Raised by ``Cancelled.unwrap()``.

    Attributes:
        attempts: Number of invocations performed before cancellation.
    """

    def __init__(self, attempts: int, message: Optional[str] = None) -> None:
        """Initialize AttemptCancelledError.

        Args:
            attempts: Invocations performed before cancellation.
            message: Optional custom message.
        """
        self.attempts = attempts

        if message is None:
            message = f"Retry sequence cancelled after {attempts} attempt(s)."

        super().__init__(message)

    @property
    def context(self) -> dict[str, Any]:
        """Return context for cancellation."""
        return {"attempts": self.attempts}

    def __repr__(self) -> str:
        """Return debug representation with attributes."""
        return f"AttemptCancelledError(attempts={self.attempts!r})"


class RetryInProgressError(RiskyCallError):
    """attempt() was called re-entrantly from inside its own work unit."""

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(
            message or "A retry sequence is already running on this thread."
        )


class InvalidStateTransition(RiskyCallError):
    """Invalid retry state transition attempted.

    Attributes:
        from_state: Current state.
        to_state: Attempted target state.
    """

    def __init__(
        self,
        from_state: str,
        to_state: str,
        message: str | None = None,
    ) -> None:
        """Initialize InvalidStateTransition.

        Args:
            from_state: Current state.
            to_state: Attempted target state.
            message: Optional custom message.
        """
        self.from_state = from_state
        self.to_state = to_state

        if message is None:
            message = f"Invalid retry state transition: {from_state} → {to_state}."

        super().__init__(message)

    @property
    def context(self) -> dict[str, Any]:
        """Return context for invalid state transition."""
        return {
            "from_state": self.from_state,
            "to_state": self.to_state,
        }

    def __repr__(self) -> str:
        """Return debug representation with attributes."""
        return (
            f"InvalidStateTransition(from_state={self.from_state!r}, "
            f"to_state={self.to_state!r})"
        )


class ConfigurationError(RiskyCallError):
    """Configuration file or value is invalid.

    Raised when YAML configuration cannot be parsed or
    contains invalid values.

    Attributes:
        config_path: Path to the configuration file.
        key: The configuration key that caused the error.
        expected_type: The expected type for the value.
    """

    def __init__(
        self,
        config_path: str,
        key: Optional[str] = None,
        expected_type: Optional[str] = None,
        message: Optional[str] = None,
    ) -> None:
        """Initialize ConfigurationError.

        Args:
            config_path: Path to the config file.
            key: Optional key that caused the error.
            expected_type: Optional expected type.
            message: Optional custom message.
        """
        self.config_path = config_path
        self.key = key
        self.expected_type = expected_type

        if message is None:
            key_info = f" key '{key}'" if key else ""
            type_info = f" (expected {expected_type})" if expected_type else ""
            message = f"Configuration error in '{config_path}'{key_info}{type_info}."

        super().__init__(message)

    @property
    def context(self) -> dict[str, Any]:
        """Return context for configuration error."""
        return {
            "config_path": self.config_path,
            "key": self.key,
            "expected_type": self.expected_type,
        }

    def __repr__(self) -> str:
        """Return debug representation with attributes."""
        return (
            f"ConfigurationError(config_path={self.config_path!r}, "
            f"key={self.key!r}, expected_type={self.expected_type!r})"
        )
