"""Retry Sequence State Machine.

This module defines the lifecycle of a single attempt sequence.

States:
    IDLE: No sequence in progress
    ATTEMPTING: Work unit is being invoked
    SLEEPING: Waiting out the backoff delay before the next attempt
    SUCCEEDED: Work unit returned a value (terminal)
    EXHAUSTED: Final attempt failed (terminal)
    CANCELLED: Cancellation event was set (terminal)

Valid Transitions:
    IDLE → ATTEMPTING / CANCELLED
    ATTEMPTING → SUCCEEDED / EXHAUSTED / SLEEPING / CANCELLED
    SLEEPING → ATTEMPTING / CANCELLED
    SUCCEEDED / EXHAUSTED / CANCELLED → IDLE

Usage:
    from riskycall.retry.state_machine import RetryState, RetryStateMachine

    sm = RetryStateMachine()
    sm.transition(RetryState.ATTEMPTING)
    sm.transition(RetryState.SUCCEEDED)
    sm.reset()  # back to IDLE
"""

from enum import StrEnum

import structlog

from riskycall.core.exceptions import InvalidStateTransition


log = structlog.get_logger()


class RetryState(StrEnum):
    """Retry sequence states."""

    IDLE = "IDLE"
    ATTEMPTING = "ATTEMPTING"
    SLEEPING = "SLEEPING"
    SUCCEEDED = "SUCCEEDED"
    EXHAUSTED = "EXHAUSTED"
    CANCELLED = "CANCELLED"


TERMINAL_STATES: frozenset[RetryState] = frozenset([
    RetryState.SUCCEEDED,
    RetryState.EXHAUSTED,
    RetryState.CANCELLED,
])

VALID_TRANSITIONS: frozenset[tuple[RetryState, RetryState]] = frozenset([
    (RetryState.IDLE, RetryState.ATTEMPTING),
    (RetryState.IDLE, RetryState.CANCELLED),
    (RetryState.ATTEMPTING, RetryState.SUCCEEDED),
    (RetryState.ATTEMPTING, RetryState.EXHAUSTED),
    (RetryState.ATTEMPTING, RetryState.SLEEPING),
    (RetryState.ATTEMPTING, RetryState.CANCELLED),
    (RetryState.SLEEPING, RetryState.ATTEMPTING),
    (RetryState.SLEEPING, RetryState.CANCELLED),
    (RetryState.SUCCEEDED, RetryState.IDLE),
    (RetryState.EXHAUSTED, RetryState.IDLE),
    (RetryState.CANCELLED, RetryState.IDLE),
])


def is_valid_transition(from_state: RetryState, to_state: RetryState) -> bool:
    """Check if a state transition is valid."""
    return (from_state, to_state) in VALID_TRANSITIONS


def get_valid_targets(from_state: RetryState) -> set[RetryState]:
    """Get all valid target states from a given state."""
    return {to for (frm, to) in VALID_TRANSITIONS if frm == from_state}


class RetryStateMachine:
    """Strict retry sequence state machine.

    Invalid transitions raise InvalidStateTransition.

    Attributes:
        current_state: Current state (read-only).
        quiet: If True, transitions are not logged.
    """

    def __init__(self, quiet: bool = False) -> None:
        self._current_state = RetryState.IDLE
        self.quiet = quiet

    @property
    def current_state(self) -> RetryState:
        """Current sequence state."""
        return self._current_state

    @property
    def is_terminal(self) -> bool:
        """True if the sequence has reached an outcome."""
        return self._current_state in TERMINAL_STATES

    def transition(self, to_state: RetryState) -> None:
        """Transition to a new state.

        Args:
            to_state: Target state.

        Raises:
            InvalidStateTransition: If transition is not valid.
        """
        from_state = self._current_state

        if not is_valid_transition(from_state, to_state):
            raise InvalidStateTransition(
                from_state=str(from_state),
                to_state=str(to_state),
            )

        self._current_state = to_state
        if self.quiet:
            return
        log.debug(
            "retry_state_changed",
            from_state=str(from_state),
            to_state=str(to_state),
        )

    def reset(self) -> None:
        """Return to IDLE.

        From a terminal state this is a normal transition. From ATTEMPTING
        or SLEEPING the sequence was abandoned (something escaped the work
        unit), so the machine is forced back to IDLE.
        """
        if self._current_state is RetryState.IDLE:
            return
        if self.is_terminal:
            self.transition(RetryState.IDLE)
            return

        if not self.quiet:
            log.warning("retry_sequence_abandoned", from_state=str(self._current_state))
        self._current_state = RetryState.IDLE
