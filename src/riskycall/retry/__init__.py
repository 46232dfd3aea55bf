from .backoff import get_sleep_delay, sleep_ms
from .executor import RetryExecutor, attempt
from .state_machine import (
    RetryState,
    RetryStateMachine,
    get_valid_targets,
    is_valid_transition,
)
from .trace import capture_trace, format_trace

__all__ = [
    "get_sleep_delay",
    "sleep_ms",
    "RetryExecutor",
    "attempt",
    "RetryState",
    "RetryStateMachine",
    "get_valid_targets",
    "is_valid_transition",
    "capture_trace",
    "format_trace",
]
