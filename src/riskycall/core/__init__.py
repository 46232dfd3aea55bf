"""Core module for riskycall.

Exports the core components: exceptions, result models, configuration
and logging setup.
"""

from riskycall.core.exceptions import (
    RiskyCallError,
    AttemptFailedError,
    AttemptCancelledError,
    RetryInProgressError,
    InvalidStateTransition,
    ConfigurationError,
)
from riskycall.core.models import (
    Success,
    Failure,
    Cancelled,
    AttemptResult,
    TraceFormat,
)
from riskycall.core.config import (
    get_settings,
    reset_settings,
    Settings,
    RetryConfig,
    LoggingConfig,
)
from riskycall.core.logs import (
    configure_logging,
    default_log_sink,
    default_trace_sink,
)

__all__ = [
    # Exceptions
    "RiskyCallError",
    "AttemptFailedError",
    "AttemptCancelledError",
    "RetryInProgressError",
    "InvalidStateTransition",
    "ConfigurationError",
    # Results
    "Success",
    "Failure",
    "Cancelled",
    "AttemptResult",
    "TraceFormat",
    # Configuration
    "get_settings",
    "reset_settings",
    "Settings",
    "RetryConfig",
    "LoggingConfig",
    # Logging
    "configure_logging",
    "default_log_sink",
    "default_trace_sink",
]
