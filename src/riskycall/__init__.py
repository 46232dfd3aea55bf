"""
riskycall - bounded retries with backoff for flaky work units.

Wraps a zero-argument callable, retries it on failure with a growing delay,
and hands back a tagged result instead of raising.
"""

from riskycall.core.exceptions import (
    AttemptCancelledError,
    AttemptFailedError,
    RiskyCallError,
)
from riskycall.core.models import (
    AttemptResult,
    Cancelled,
    Failure,
    Success,
    TraceFormat,
)
from riskycall.retry import RetryExecutor, RetryState, attempt

__version__ = "1.0.0"

__all__ = [
    "AttemptCancelledError",
    "AttemptFailedError",
    "RiskyCallError",
    "AttemptResult",
    "Cancelled",
    "Failure",
    "Success",
    "TraceFormat",
    "RetryExecutor",
    "RetryState",
    "attempt",
]
