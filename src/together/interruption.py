"""Cooperative thread interruption.

Python threads cannot be interrupted from the outside, so the harness keeps
its own per-thread interrupt flag.  Blocking calls that go through
:func:`wait_for` (the release gate, result waits, pool termination waits and
:func:`sleep`) observe the flag and raise :class:`Interrupted` promptly.

Raising :class:`Interrupted` clears the flag of the waiting thread.  Code that
catches it and cannot handle the interruption itself should set the flag
again with ``interrupt(threading.current_thread())`` so that callers further
up still see it.
"""

import threading
import time
import weakref
from typing import Callable, Optional


class Interrupted(Exception):
    """Raised by an interruptible wait when its thread was interrupted."""

    pass


class _Signal:
    """Interrupt flag and wakeup event of a single thread."""

    def __init__(self):
        self.flag = False
        self.wakeup = threading.Event()


_signals: "weakref.WeakKeyDictionary[threading.Thread, _Signal]" = weakref.WeakKeyDictionary()
_lock = threading.Lock()


def _signal(thread: Optional[threading.Thread] = None) -> _Signal:
    if thread is None:
        thread = threading.current_thread()
    with _lock:
        signal = _signals.get(thread)
        if signal is None:
            signal = _Signal()
            _signals[thread] = signal
        return signal


def interrupt(thread: threading.Thread) -> None:
    """Set the interrupt flag of ``thread`` and wake it if it is waiting."""
    signal = _signal(thread)
    signal.flag = True
    signal.wakeup.set()


def is_interrupted(thread: Optional[threading.Thread] = None) -> bool:
    """Return the interrupt flag of ``thread`` (default: current) without clearing it."""
    return _signal(thread).flag


def interrupted() -> bool:
    """Return and clear the interrupt flag of the current thread."""
    signal = _signal()
    flag = signal.flag
    signal.flag = False
    return flag


def notify(thread: threading.Thread) -> None:
    """Wake ``thread`` so that it re-checks the condition it waits for."""
    _signal(thread).wakeup.set()


def wait_for(is_done: Callable[[], bool], timeout: Optional[float] = None) -> bool:
    """
    Block the current thread until ``is_done()`` returns true.

    Whoever makes ``is_done()`` true must call :func:`notify` for the waiting
    thread afterwards.

    Args:
        is_done: Condition to wait for
        timeout: Maximum time to wait in seconds, ``None`` waits forever

    Returns:
        True if the condition holds, False if the timeout elapsed first

    Raises:
        Interrupted: If the current thread is or becomes interrupted
    """
    signal = _signal()
    deadline = None if timeout is None else time.monotonic() + timeout
    while True:
        if signal.flag:
            signal.flag = False
            raise Interrupted(f"{threading.current_thread().name} was interrupted")
        if is_done():
            return True
        if deadline is None:
            signal.wakeup.wait()
        else:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return False
            signal.wakeup.wait(remaining)
        signal.wakeup.clear()


def sleep(seconds: float) -> None:
    """Interruptible replacement for :func:`time.sleep`."""
    wait_for(lambda: False, timeout=seconds)
