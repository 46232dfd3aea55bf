"""RetryExecutor: run a work unit with bounded retries and backoff.

The executor invokes a zero-argument callable. If it raises, the failure is
captured, logged and retried after a growing delay until the configured
number of attempts is used up. attempt() never raises for a failing work
unit; it returns a tagged result instead.

Usage:
    from riskycall import RetryExecutor

    executor = RetryExecutor(fetch_feed, max_attempts=3, delay=500)
    result = executor.attempt()
    if result.ok:
        feed = result.value
    else:
        print(executor.last_exception)

Concurrency:
    One executor per logical retry sequence is the intended usage. Calls to
    attempt() on a shared instance are serialized by a per-instance lock.
    Calling attempt() from inside its own work unit raises
    RetryInProgressError.
"""

from __future__ import annotations

import threading
import warnings
from typing import Any, Callable, Generic, Optional, Sequence, TypeVar

import structlog

from riskycall.core.config import RetryConfig, get_settings
from riskycall.core.exceptions import AttemptFailedError, RetryInProgressError
from riskycall.core.logs import default_log_sink, default_trace_sink
from riskycall.core.models import (
    AttemptResult,
    Cancelled,
    Failure,
    Success,
    TraceFormat,
)
from riskycall.retry.backoff import get_sleep_delay, sleep_ms
from riskycall.retry.state_machine import RetryState, RetryStateMachine
from riskycall.retry.trace import capture_trace, format_trace

log = structlog.get_logger()

T = TypeVar("T")

LogFunction = Callable[..., Any]
LogTraceFunction = Callable[[Sequence[str], "RetryExecutor[Any]"], Any]
ShouldLogFunction = Callable[["RetryExecutor[Any]"], bool]


class RetryExecutor(Generic[T]):
    """Retry wrapper around a single work unit.

    Attributes:
        current_attempt: Attempts made in the running sequence (0 when idle).
        max_attempts: Maximum invocations per sequence.
        delay: Base backoff delay in milliseconds.
        delay_multiplier: Geometric growth factor for later delays.
        last_exception: Most recent AttemptFailedError, kept after the
            sequence ends and cleared when the next one starts.
        quiet: If True, nothing is logged: the sinks are never called and
            no structlog events are emitted.
        state: Current RetryState.
    """

    def __init__(
        self,
        work: Callable[[], T],
        *,
        max_attempts: int = 1,
        delay: int = 2000,
        delay_multiplier: float = 1.25,
        use_delay_multiplier: bool = True,
        quiet: bool = False,
        log_function: Optional[LogFunction] = None,
        log_trace_function: Optional[LogTraceFunction] = None,
        should_log_function: Optional[ShouldLogFunction] = None,
        trace_format: TraceFormat | str = TraceFormat.INNERMOST_FIRST,
        warnings_as_errors: bool = True,
    ) -> None:
        """Initialize RetryExecutor.

        Args:
            work: Zero-argument callable to attempt.
            max_attempts: Maximum invocations per sequence (>= 1).
            delay: Base delay in milliseconds (>= 0).
            delay_multiplier: Growth factor for later delays (>= 1.0).
            use_delay_multiplier: If False, every retry waits ``delay``.
            quiet: Suppress all logging.
            log_function: Called with one or more message strings.
            log_trace_function: Called with (frames, executor) on final failure.
            should_log_function: Called with the executor before failure-path
                logging; returning False suppresses it.
            trace_format: Frame ordering/labelling policy.
            warnings_as_errors: Treat warnings emitted by the work unit as
                failures.

        Raises:
            TypeError: If work is not callable.
            ValueError: If a numeric option is out of range.
        """
        if not callable(work):
            raise TypeError("work must be callable")

        self._work = work
        self._max_attempts = _check_max_attempts(max_attempts)
        self._delay = _check_delay(delay)
        self._delay_multiplier = _check_delay_multiplier(delay_multiplier)
        self._use_delay_multiplier = use_delay_multiplier
        self._quiet = quiet
        self._log_function = log_function
        self._log_trace_function = log_trace_function
        self._should_log_function = should_log_function
        self._trace_format = TraceFormat(trace_format)
        self._warnings_as_errors = warnings_as_errors

        self._current_attempt = 0
        self._last_exception: Optional[AttemptFailedError] = None
        self._state_machine = RetryStateMachine(quiet=quiet)
        self._lock = threading.Lock()
        self._owner: Optional[int] = None

    @classmethod
    def from_config(
        cls,
        work: Callable[[], T],
        config: Optional[RetryConfig] = None,
        **kwargs: Any,
    ) -> "RetryExecutor[T]":
        """Build an executor from a RetryConfig.

        Args:
            work: Zero-argument callable to attempt.
            config: Retry section. Defaults to the global settings.
            **kwargs: Sinks and gate (log_function, log_trace_function,
                should_log_function) or overrides for config values.
        """
        cfg = config or get_settings().retry
        options: dict[str, Any] = cfg.model_dump()
        options.update(kwargs)
        return cls(work, **options)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def current_attempt(self) -> int:
        return self._current_attempt

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    @property
    def delay(self) -> int:
        return self._delay

    @property
    def delay_multiplier(self) -> float:
        return self._delay_multiplier

    @property
    def use_delay_multiplier(self) -> bool:
        return self._use_delay_multiplier

    @property
    def quiet(self) -> bool:
        return self._quiet

    @property
    def trace_format(self) -> TraceFormat:
        return self._trace_format

    @property
    def last_exception(self) -> Optional[AttemptFailedError]:
        return self._last_exception

    @property
    def state(self) -> RetryState:
        return self._state_machine.current_state

    # ------------------------------------------------------------------
    # Setters (None means "no change")
    # ------------------------------------------------------------------

    def set_max_attempts(self, max_attempts: Optional[int]) -> None:
        """Set the attempt limit. ``None`` and ``0`` leave it unchanged."""
        if not max_attempts:
            return
        self._max_attempts = _check_max_attempts(max_attempts)

    def set_delay(self, delay: Optional[int]) -> None:
        if delay is None:
            return
        self._delay = _check_delay(delay)

    def set_delay_multiplier(self, delay_multiplier: Optional[float]) -> None:
        if delay_multiplier is None:
            return
        self._delay_multiplier = _check_delay_multiplier(delay_multiplier)

    def set_use_delay_multiplier(self, use_delay_multiplier: Optional[bool]) -> None:
        if use_delay_multiplier is None:
            return
        self._use_delay_multiplier = use_delay_multiplier

    def set_quiet(self, quiet: Optional[bool]) -> None:
        if quiet is None:
            return
        self._quiet = quiet
        self._state_machine.quiet = quiet

    def set_log_function(self, log_function: Optional[LogFunction]) -> None:
        if log_function is None:
            return
        self._log_function = log_function

    def set_log_trace_function(self, log_trace_function: Optional[LogTraceFunction]) -> None:
        if log_trace_function is None:
            return
        self._log_trace_function = log_trace_function

    def set_should_log_function(self, should_log_function: Optional[ShouldLogFunction]) -> None:
        if should_log_function is None:
            return
        self._should_log_function = should_log_function

    def set_trace_format(self, trace_format: Optional[TraceFormat | str]) -> None:
        if trace_format is None:
            return
        self._trace_format = TraceFormat(trace_format)

    # ------------------------------------------------------------------
    # Attempt sequence
    # ------------------------------------------------------------------

    def attempt(self, cancel_event: Optional[threading.Event] = None) -> AttemptResult:
        """Run one attempt sequence.

        Args:
            cancel_event: Optional event. It is checked before every
                invocation and before every sleep, and a set event wakes
                a sleep early.

        Returns:
            Success, Failure or Cancelled.

        Raises:
            RetryInProgressError: If called from inside this executor's own
                work unit.
        """
        if self._owner == threading.get_ident():
            raise RetryInProgressError()

        with self._lock:
            self._owner = threading.get_ident()
            try:
                return self._run_sequence(cancel_event)
            finally:
                self._current_attempt = 0
                self._state_machine.reset()
                self._owner = None

    def get_sleep_delay(self) -> int:
        """Return the backoff delay (ms) after the current attempt fails."""
        return get_sleep_delay(
            max(self._current_attempt, 1),
            self._delay,
            self._delay_multiplier,
            self._use_delay_multiplier,
        )

    def _run_sequence(self, cancel_event: Optional[threading.Event]) -> AttemptResult:
        self._last_exception = None

        while True:
            if _is_set(cancel_event):
                return self._handle_cancelled()

            self._current_attempt += 1
            self._state_machine.transition(RetryState.ATTEMPTING)
            error, response = self._invoke()

            if error is None:
                return self._handle_success(response)

            self._last_exception = error
            if not self._quiet:
                log.debug(
                    "retry_attempt_failed",
                    attempt=self._current_attempt,
                    max_attempts=self._max_attempts,
                    error_type=error.error_type,
                    error=error.message,
                )
            should_log = self._should_log()
            if should_log:
                self._log_failed_attempt(error)

            if self._current_attempt >= self._max_attempts:
                return self._handle_exhausted(error, should_log)

            delay = self.get_sleep_delay()
            self._state_machine.transition(RetryState.SLEEPING)
            if _is_set(cancel_event):
                return self._handle_cancelled()
            if not self._quiet:
                log.debug(
                    "retry_sleeping", attempt=self._current_attempt, delay_ms=delay
                )
            if should_log:
                self._log(f"Going to sleep for {delay}ms")
            if self._sleep(delay, cancel_event):
                return self._handle_cancelled()

    def _invoke(self) -> tuple[Optional[AttemptFailedError], Any]:
        """Call the work unit, normalizing any failure to AttemptFailedError.

        Warning filters are restored on every exit path.
        """
        with warnings.catch_warnings():
            if self._warnings_as_errors:
                warnings.simplefilter("error")
            try:
                return None, self._work()
            except Exception as exc:
                error = AttemptFailedError.from_exception(
                    exc,
                    attempt=self._current_attempt,
                    max_attempts=self._max_attempts,
                    trace=capture_trace(exc),
                )
                return error, None

    def _sleep(self, delay: int, cancel_event: Optional[threading.Event]) -> bool:
        """Wait out the delay. Returns True if cancelled while waiting."""
        if cancel_event is None:
            sleep_ms(delay)
            return False
        return cancel_event.wait(delay / 1000.0)

    def _handle_success(self, response: T) -> Success[T]:
        attempts = self._current_attempt
        self._state_machine.transition(RetryState.SUCCEEDED)
        if attempts > 1:
            self._log(f"Subsequent success on attempt #{attempts}")
        self._current_attempt = 0
        return Success(value=response, attempts=attempts)

    def _handle_exhausted(self, error: AttemptFailedError, should_log: bool) -> Failure:
        attempts = self._current_attempt
        self._state_machine.transition(RetryState.EXHAUSTED)
        if should_log:
            self._log(f"RetryExecutor failed after {attempts} attempt(s)")
            self._log_trace(error.trace or capture_trace())
        self._current_attempt = 0
        return Failure(error=error, attempts=attempts)

    def _handle_cancelled(self) -> Cancelled:
        attempts = self._current_attempt
        self._state_machine.transition(RetryState.CANCELLED)
        self._log(f"Retry sequence cancelled after {attempts} attempt(s)")
        self._current_attempt = 0
        return Cancelled(attempts=attempts, error=self._last_exception)

    # ------------------------------------------------------------------
    # Logging
    # ------------------------------------------------------------------

    def _should_log(self) -> bool:
        if self._should_log_function is None:
            return True
        return bool(self._should_log_function(self))

    def _log_failed_attempt(self, error: AttemptFailedError) -> None:
        self._log(
            f"Failed attempt ({self._current_attempt} of {self._max_attempts})"
        )
        self._log(error.message)

    def _log(self, *messages: str) -> bool:
        if self._quiet:
            return False
        if self._log_function is None:
            default_log_sink(*messages)
            return False
        self._log_function(*messages)
        return True

    def _log_trace(self, frames: Sequence[str]) -> bool:
        if self._quiet:
            return False
        trace = format_trace(frames, self._trace_format)
        if self._log_trace_function is None:
            default_trace_sink(trace, self)
            return False
        self._log_trace_function(trace, self)
        return True

    def __repr__(self) -> str:
        return (
            f"RetryExecutor(max_attempts={self._max_attempts!r}, "
            f"delay={self._delay!r}, delay_multiplier={self._delay_multiplier!r}, "
            f"state={str(self.state)!r})"
        )


def attempt(
    work: Callable[[], T],
    *,
    cancel_event: Optional[threading.Event] = None,
    **options: Any,
) -> AttemptResult:
    """Run ``work`` once through a fresh RetryExecutor.

    Convenience wrapper; ``options`` are RetryExecutor keyword arguments.
    """
    return RetryExecutor(work, **options).attempt(cancel_event)


def _is_set(event: Optional[threading.Event]) -> bool:
    return event is not None and event.is_set()


def _check_max_attempts(value: int) -> int:
    if value < 1:
        raise ValueError("max_attempts must be >= 1")
    return value


def _check_delay(value: int) -> int:
    if value < 0:
        raise ValueError("delay must be >= 0")
    return value


def _check_delay_multiplier(value: float) -> float:
    if value < 1.0:
        raise ValueError("delay_multiplier must be >= 1.0")
    return value
