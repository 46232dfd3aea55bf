"""Backoff delay computation for retry sequences.

Delays are whole milliseconds. The first retry waits the base delay; later
retries grow geometrically from it:

    delay(n) = floor(base * multiplier ** (n - 1))

where ``n`` is the attempt that just failed. With base 2000 and multiplier
1.25 that gives 2000, 2500, 3125, ...

Every delay is capped at MAX_SLEEP_DELAY, so long sequences never overflow.
"""

import math
import time

# ~24.8 days, the largest signed 32-bit millisecond timer value.
MAX_SLEEP_DELAY = 2**31 - 1


def get_sleep_delay(
    current_attempt: int,
    delay: int,
    delay_multiplier: float = 1.25,
    use_delay_multiplier: bool = True,
) -> int:
    """Return how long to wait after a failed attempt.

    Args:
        current_attempt: Attempt number that just failed (>= 1).
        delay: Base delay in milliseconds.
        delay_multiplier: Growth factor (>= 1.0).
        use_delay_multiplier: If False, every retry waits the base delay.

    Returns:
        Delay in milliseconds, at most MAX_SLEEP_DELAY.

    Raises:
        ValueError: If current_attempt < 1.
    """
    if current_attempt < 1:
        raise ValueError("current_attempt must be >= 1")
    if delay == 0:
        return 0
    if current_attempt == 1 or not use_delay_multiplier:
        return min(delay, MAX_SLEEP_DELAY)
    try:
        grown = delay * delay_multiplier ** (current_attempt - 1)
    except OverflowError:
        return MAX_SLEEP_DELAY
    if grown >= MAX_SLEEP_DELAY:
        return MAX_SLEEP_DELAY
    return math.floor(grown)


def sleep_ms(delay: int) -> None:
    """Block the calling thread for ``delay`` milliseconds."""
    if delay > 0:
        time.sleep(delay / 1000.0)
