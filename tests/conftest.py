"""
riskycall Test Configuration

Shared pytest fixtures and configuration for all test types.
"""

import os
from typing import Any, Callable, Generator
from unittest.mock import patch

import pytest
import structlog

from riskycall.core.config import reset_settings


# Configure pytest collection
def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test categorization."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")


@pytest.fixture(autouse=True)
def clean_environment() -> Generator[None, None, None]:
    """Reset settings, RISKYCALL_ env vars and structlog around each test."""
    reset_settings()
    for key in list(os.environ.keys()):
        if key.startswith("RISKYCALL_"):
            del os.environ[key]

    yield

    reset_settings()
    structlog.reset_defaults()
    for key in list(os.environ.keys()):
        if key.startswith("RISKYCALL_"):
            del os.environ[key]


@pytest.fixture
def test_config_dir(tmp_path):
    """Provide a temporary configuration directory for tests."""
    config_dir = tmp_path / ".riskycall"
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def no_sleep() -> Generator[Any, None, None]:
    """Patch time.sleep used by the backoff module and yield the mock."""
    with patch("riskycall.retry.backoff.time.sleep") as sleep_mock:
        yield sleep_mock


@pytest.fixture
def flaky_work() -> Callable[..., Callable[[], str]]:
    """
    Factory fixture for a work unit that fails a fixed number of times.

    Args:
        failures: Number of leading calls that raise.
        error: Exception instance to raise.

    Returns:
        Callable with a ``calls`` list recording each invocation number.
    """
    def _make(failures: int, error: Exception | None = None) -> Callable[[], str]:
        calls: list[int] = []

        def work() -> str:
            calls.append(len(calls) + 1)
            if len(calls) <= failures:
                raise error or ConnectionError(f"boom {len(calls)}")
            return "ok"

        work.calls = calls  # type: ignore[attr-defined]
        return work

    return _make
