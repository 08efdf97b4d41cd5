"""pytest plugin providing the ``together`` fixture.

Registered through the ``pytest11`` entry point, so installing the package
is enough::

    def test_cache_is_thread_safe(together):
        cache = Cache()
        assert all(together(lambda t: cache.put(t, t)).as_list())
"""

from typing import Callable, Optional

import pytest

from .config import TogetherConfig, get_config
from .core import Action, Together
from .utils.logging_config import get_logger, initialize_logging

logger = get_logger('plugin')


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "together: race test running its body in simultaneous threads"
    )


@pytest.fixture(scope="session")
def together_config() -> TogetherConfig:
    """Harness settings for the whole session, read from the environment once."""
    settings = get_config()
    if settings.debug:
        initialize_logging(debug=True)
    logger.debug(f"Session configuration: {settings}")
    return settings


@pytest.fixture
def together(together_config) -> Callable[..., Together]:
    """Factory building a :class:`Together` bound to the session configuration."""
    def _maker(action: Action, threads: Optional[int] = None) -> Together:
        return Together(action, threads, config=together_config)
    return _maker
