"""Run a function in many threads at once to expose race conditions."""

from .config import TogetherConfig, default_threads, get_config
from .core import Results, Together
from .errors import ActionFailed, ShutdownTimeout, TogetherError, WaitInterrupted
from .gate import ReleaseGate
from .interruption import Interrupted, interrupt, interrupted, is_interrupted, sleep
from .pool import WorkerPool
from .shuffled import Shuffled

__version__ = "0.1.0"

__all__ = [
    "ActionFailed",
    "Interrupted",
    "ReleaseGate",
    "Results",
    "ShutdownTimeout",
    "Shuffled",
    "Together",
    "TogetherConfig",
    "TogetherError",
    "WaitInterrupted",
    "WorkerPool",
    "default_threads",
    "get_config",
    "interrupt",
    "interrupted",
    "is_interrupted",
    "sleep",
]
