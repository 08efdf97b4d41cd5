"""Failures surfaced by a ``Together`` invocation."""

from typing import List, Optional


class TogetherError(Exception):
    """Base exception for a failed invocation."""

    pass


class ActionFailed(TogetherError):
    """The action raised on at least one worker.

    The first observed failure is the ``__cause__``.  Failures of other workers
    that had already finished when the pool was torn down are kept in
    ``suppressed``.
    """

    def __init__(self, worker: int, cause: BaseException):
        super().__init__(
            f"Action failed in thread #{worker}: {type(cause).__name__}: {cause}"
        )
        self.worker = worker
        self.suppressed: List[BaseException] = []


class WaitInterrupted(TogetherError):
    """The coordinating thread was interrupted while it was waiting."""

    def __init__(self, message: str, worker: Optional[int] = None):
        super().__init__(message)
        self.worker = worker


class ShutdownTimeout(TogetherError):
    """The worker pool did not terminate, even after forced cancellation."""

    def __init__(self, alive: List[str], timeout_secs: float):
        super().__init__(
            f"Can't shutdown: {len(alive)} worker thread(s) still alive "
            f"after 2 x {timeout_secs}s: {', '.join(alive)}"
        )
        self.alive = alive
        self.timeout_secs = timeout_secs
