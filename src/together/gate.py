"""One-shot release gate shared by the workers of one invocation."""

import threading
from typing import Optional, Set

from . import interruption
from .utils.logging_config import get_logger

logger = get_logger('gate')


class ReleaseGate:
    """
    Countdown latch with a count of one.

    Every thread calling :meth:`wait` blocks until :meth:`open` is called once;
    then all of them become runnable together.  The gate never closes again.
    """

    def __init__(self):
        self._open = False
        self._lock = threading.Lock()
        self._waiters: Set[threading.Thread] = set()

    @property
    def is_open(self) -> bool:
        return self._open

    def open(self) -> None:
        """Release all waiters. Calling it again has no effect."""
        with self._lock:
            if self._open:
                return
            self._open = True
            waiters = list(self._waiters)
        logger.debug(f"Release gate opened for {len(waiters)} waiting thread(s)")
        for thread in waiters:
            interruption.notify(thread)

    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        Block until the gate is open.

        Args:
            timeout: Maximum time to wait in seconds, ``None`` waits forever

        Returns:
            True if the gate opened, False on timeout

        Raises:
            Interrupted: If the waiting thread is interrupted
        """
        current = threading.current_thread()
        with self._lock:
            if self._open:
                return True
            self._waiters.add(current)
        try:
            return interruption.wait_for(lambda: self._open, timeout=timeout)
        finally:
            with self._lock:
                self._waiters.discard(current)
