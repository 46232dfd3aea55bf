"""Unit tests for backoff delay computation."""

from unittest.mock import patch

import pytest

from riskycall.retry.backoff import MAX_SLEEP_DELAY, get_sleep_delay, sleep_ms


class TestGetSleepDelay:
    """Tests for get_sleep_delay()."""

    def test_first_attempt_uses_base_delay(self) -> None:
        assert get_sleep_delay(1, 2000, 1.25) == 2000

    def test_default_sequence(self) -> None:
        delays = [get_sleep_delay(n, 2000, 1.25) for n in (1, 2, 3, 4)]
        assert delays == [2000, 2500, 3125, 3906]

    def test_result_is_floored(self) -> None:
        # 1000 * 1.3 ** 2 = 1690.0000000000002
        assert get_sleep_delay(3, 1000, 1.3) == 1690
        assert get_sleep_delay(2, 999, 1.5) == 1498

    def test_returns_int(self) -> None:
        assert isinstance(get_sleep_delay(3, 2000, 1.25), int)

    def test_multiplier_disabled(self) -> None:
        for attempt in range(1, 6):
            assert get_sleep_delay(attempt, 700, 3.0, use_delay_multiplier=False) == 700

    def test_multiplier_of_one_is_constant(self) -> None:
        assert get_sleep_delay(10, 500, 1.0) == 500

    def test_zero_base_delay(self) -> None:
        assert get_sleep_delay(5, 0, 2.0) == 0

    def test_zero_base_delay_on_very_late_attempt(self) -> None:
        assert get_sleep_delay(5000, 0, 2.0) == 0

    def test_growth_is_capped(self) -> None:
        assert get_sleep_delay(70, 2000, 1.25) == MAX_SLEEP_DELAY

    def test_overflowing_growth_is_capped(self) -> None:
        # 1.25 ** 3999 does not fit in a float
        assert get_sleep_delay(4000, 2000, 1.25) == MAX_SLEEP_DELAY
        assert get_sleep_delay(1100, 1, 2.0) == MAX_SLEEP_DELAY

    def test_base_delay_is_capped(self) -> None:
        assert get_sleep_delay(1, MAX_SLEEP_DELAY + 5) == MAX_SLEEP_DELAY
        assert get_sleep_delay(
            3, MAX_SLEEP_DELAY + 5, use_delay_multiplier=False
        ) == MAX_SLEEP_DELAY

    def test_attempt_below_one_raises(self) -> None:
        with pytest.raises(ValueError, match="current_attempt must be >= 1"):
            get_sleep_delay(0, 2000)


class TestSleepMs:
    """Tests for sleep_ms()."""

    def test_converts_to_seconds(self) -> None:
        with patch("riskycall.retry.backoff.time.sleep") as sleep_mock:
            sleep_ms(1500)
        sleep_mock.assert_called_once_with(1.5)

    def test_keeps_millisecond_granularity(self) -> None:
        with patch("riskycall.retry.backoff.time.sleep") as sleep_mock:
            sleep_ms(1)
        sleep_mock.assert_called_once_with(0.001)

    def test_zero_does_not_sleep(self) -> None:
        with patch("riskycall.retry.backoff.time.sleep") as sleep_mock:
            sleep_ms(0)
        sleep_mock.assert_not_called()
