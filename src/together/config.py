"""Configuration management for the together harness.

Settings come from environment variables with sensible defaults, so a test
suite can tune the harness (for example a shorter shutdown bound on CI)
without touching test code.
"""

import os
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field  # type: ignore

from .utils.logging_config import get_logger

logger = get_logger('config')


class TogetherConfig(BaseModel):
    """Validated settings shared by all invocations."""

    model_config = ConfigDict(frozen=True)

    threads: Optional[int] = Field(
        None, gt=0, description="Default worker count, overrides host parallelism"
    )
    min_threads: int = Field(
        3, gt=0, description="Lower bound for the worker count derived from the host"
    )
    shutdown_timeout_secs: float = Field(
        60.0, gt=0, description="Bound for each of the two pool termination waits"
    )
    thread_name_prefix: str = Field(
        "together", min_length=1, description="Prefix of worker thread names"
    )
    debug: bool = Field(False, description="Enable debug logging")


def _env_int(name: str) -> Optional[int]:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return None
    return int(value)


def _env_float(name: str) -> Optional[float]:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return None
    return float(value)


def read_from_env() -> TogetherConfig:
    """Read configuration from environment variables."""
    settings = {
        "threads": _env_int("TOGETHER_THREADS"),
        "min_threads": _env_int("TOGETHER_MIN_THREADS"),
        "shutdown_timeout_secs": _env_float("TOGETHER_SHUTDOWN_TIMEOUT"),
        "thread_name_prefix": os.getenv("TOGETHER_THREAD_NAME_PREFIX"),
        "debug": os.getenv("TOGETHER_DEBUG", "0").lower() in ("1", "true", "yes"),
    }
    # Unset variables fall back to the model defaults
    config = TogetherConfig(**{k: v for k, v in settings.items() if v is not None})
    logger.debug(f"Loaded configuration: {config}")
    return config


def get_config() -> TogetherConfig:
    """Get harness configuration with precedence: environment -> defaults."""
    return read_from_env()


def host_parallelism() -> int:
    """Number of CPUs available on the host, at least one."""
    return os.cpu_count() or 1


def default_threads(config: Optional[TogetherConfig] = None) -> int:
    """
    Worker count used when none is given explicitly.

    At least ``min_threads`` workers race even on a single-core host.
    """
    if config is None:
        config = get_config()
    if config.threads is not None:
        return config.threads
    return max(host_parallelism(), config.min_threads)
