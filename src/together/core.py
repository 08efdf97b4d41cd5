"""Runs one action in many threads that start at the same moment.

Use it in a test to hit the object under test from several threads at once::

    from together import Together

    def test_counter_is_thread_safe():
        counter = Counter()
        results = Together(lambda thread: counter.increment()).as_list()
        assert len(set(results)) == len(results)

Every worker waits on a shared release gate until all of them have been
handed to the pool, then the gate opens and they race.  The results come back
ordered by worker number; if any worker raises, the whole run fails.
"""

import threading
from concurrent.futures import Future
from typing import Callable, Generic, Iterator, List, Optional, TypeVar

from . import interruption
from .config import TogetherConfig, default_threads, get_config
from .errors import ActionFailed, ShutdownTimeout, WaitInterrupted
from .gate import ReleaseGate
from .interruption import Interrupted
from .pool import WorkerPool
from .shuffled import Shuffled
from .utils.logging_config import get_logger

logger = get_logger('core')

T = TypeVar("T")

Action = Callable[[int], T]


class Results(Iterator[T]):
    """Single-use iterator over the results of one invocation.

    ``str()`` lists all values in worker order, however far iteration went,
    which keeps assertion messages readable.
    """

    def __init__(self, items: List[T]):
        self._items = items
        self._iterator = iter(items)

    def __iter__(self) -> "Results[T]":
        return self

    def __next__(self) -> T:
        return next(self._iterator)

    def __str__(self) -> str:
        return "[" + ", ".join(str(item) for item in self._items) + "]"

    __repr__ = __str__


class Together(Generic[T]):
    """
    Action executed simultaneously in a number of threads.

    Each iteration over the object is a separate invocation with its own pool
    and gate, so ``list(together)`` twice runs the action twice.

    Args:
        action: Called once per worker with the worker number ``0..threads-1``
        threads: Number of concurrent workers. Defaults to the host CPU
                 count, but never fewer than three.
        config: Harness settings, read from the environment when omitted
    """

    def __init__(
        self,
        action: Action,
        threads: Optional[int] = None,
        *,
        config: Optional[TogetherConfig] = None,
    ):
        self.config = config or get_config()
        if threads is None:
            threads = default_threads(self.config)
        if threads < 1:
            raise ValueError(f"Number of threads must be positive, got {threads}")
        self.threads = threads
        self.action = action

    def __iter__(self) -> Results[T]:
        gate = ReleaseGate()
        pool = WorkerPool(self.threads, name=self.config.thread_name_prefix)
        futures: List[Optional[Future]] = [None] * self.threads
        failure: Optional[ActionFailed] = None
        aborted = False
        logger.debug(f"Starting {self.threads} thread(s) for {self.action!r}")
        try:
            for pos in Shuffled(self.threads):
                futures[pos] = pool.submit(self._gated, gate, pos)
            gate.open()
            results = [self._await(futures[index], index) for index in range(self.threads)]
            return Results(results)
        except ActionFailed as error:
            failure = error
            raise
        except (KeyboardInterrupt, SystemExit):
            # Ends the run without the bounded teardown waits
            aborted = True
            raise
        finally:
            if aborted:
                pool.shutdown_now()
            else:
                if not gate.is_open:
                    # Started workers would block on the closed gate forever
                    pool.shutdown_now()
                self._shutdown(pool)
            if failure is not None:
                failure.suppressed.extend(
                    self._secondary(futures, failure.worker, pool.is_forced)
                )

    def as_list(self) -> List[T]:
        """Run the action and return all results, ordered by worker number."""
        return list(self)

    def _gated(self, gate: ReleaseGate, pos: int) -> T:
        gate.wait()
        return self.action(pos)

    def _await(self, future: Future, worker: int) -> T:
        current = threading.current_thread()
        future.add_done_callback(lambda _: interruption.notify(current))
        try:
            interruption.wait_for(future.done)
        except Interrupted as e:
            interruption.interrupt(current)
            raise WaitInterrupted(
                f"Interrupted while waiting for thread #{worker}", worker
            ) from e
        error = future.exception()
        if error is not None:
            logger.warning(f"Thread #{worker} failed: {type(error).__name__}: {error}")
            raise ActionFailed(worker, error) from error
        return future.result()

    def _shutdown(self, pool: WorkerPool) -> None:
        timeout = self.config.shutdown_timeout_secs
        pool.shutdown()
        try:
            if pool.await_termination(timeout):
                return
            logger.warning(
                f"Pool {pool.name} still running after {timeout}s, cancelling its threads"
            )
            pool.shutdown_now()
            if not pool.await_termination(timeout):
                alive = pool.alive_thread_names()
                logger.error(f"Pool {pool.name} can't shutdown, alive: {alive}")
                raise ShutdownTimeout(alive, timeout)
        except Interrupted as e:
            pool.shutdown_now()
            interruption.interrupt(threading.current_thread())
            raise WaitInterrupted(
                "Interrupted while waiting for the pool to terminate"
            ) from e
        except (KeyboardInterrupt, SystemExit):
            pool.shutdown_now()
            raise

    @staticmethod
    def _secondary(
        futures: List[Optional[Future]], first: int, forced: bool
    ) -> List[BaseException]:
        """Failures of other workers, without the interrupts a forced shutdown caused."""
        errors: List[BaseException] = []
        for index, future in enumerate(futures):
            if index == first or future is None or not future.done() or future.cancelled():
                continue
            error = future.exception()
            if error is None or (forced and isinstance(error, Interrupted)):
                continue
            errors.append(error)
        return errors
