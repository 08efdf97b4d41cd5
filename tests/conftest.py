"""Pytest configuration and shared fixtures."""

import threading
from typing import Callable

import pytest

from together import TogetherConfig, interruption
from together.utils.logging_config import ComponentLogger


# Register scenario markers for test selection/documentation
def pytest_configure(config):
    config.addinivalue_line("markers", "unit: Fast tests of a single component")
    config.addinivalue_line("markers", "concurrency: Tests racing real threads")


@pytest.fixture
def config() -> TogetherConfig:
    """Harness settings independent of the environment, with a short shutdown bound."""
    return TogetherConfig(shutdown_timeout_secs=5.0)


@pytest.fixture
def quick_config() -> TogetherConfig:
    """Settings for tests that expect the pool to hang on shutdown."""
    return TogetherConfig(shutdown_timeout_secs=0.2)


@pytest.fixture
def barrier_factory() -> Callable[[int], threading.Barrier]:
    """Factory for creating threading barriers for synchronizing concurrent tests.

    Returns:
        Callable that creates threading.Barrier for N threads
    """
    return lambda n: threading.Barrier(n)


@pytest.fixture(autouse=True)
def clear_interrupt_flag():
    """Make sure no test leaves the main thread interrupted."""
    yield
    interruption.interrupted()


@pytest.fixture
def clean_logging():
    """Detach harness log handlers after the test."""
    yield
    ComponentLogger.reset()
