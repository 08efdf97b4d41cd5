"""Fixed-size worker pool with orderly and forced shutdown.

Unlike :class:`concurrent.futures.ThreadPoolExecutor` the pool can wait for
its threads with a bound (:meth:`WorkerPool.await_termination`) and can
interrupt them (:meth:`WorkerPool.shutdown_now`), which the harness needs to
guarantee that no worker thread outlives an invocation unnoticed.
"""

import queue
import threading
from concurrent.futures import Future
from typing import Any, Callable, List, Optional, Set

from . import interruption
from .utils.logging_config import get_logger

logger = get_logger('pool')


class WorkerPool:
    """Pool of at most ``size`` daemon threads consuming a FIFO task queue."""

    def __init__(self, size: int, name: str = "together"):
        if size < 1:
            raise ValueError(f"Pool size must be positive, got {size}")
        self.size = size
        self.name = name
        self._queue: "queue.SimpleQueue[Optional[tuple]]" = queue.SimpleQueue()
        self._lock = threading.Lock()
        self._workers: List[threading.Thread] = []
        self._alive = 0
        self._shutdown = False
        self._forced = False
        self._waiters: Set[threading.Thread] = set()

    @property
    def is_shutdown(self) -> bool:
        return self._shutdown

    @property
    def is_forced(self) -> bool:
        """True once :meth:`shutdown_now` interrupted the workers."""
        return self._forced

    @property
    def is_terminated(self) -> bool:
        return self._shutdown and self._alive == 0

    @property
    def threads(self) -> List[threading.Thread]:
        """Worker threads started so far, finished or not."""
        with self._lock:
            return list(self._workers)

    def submit(self, fn: Callable[..., Any], *args: Any) -> Future:
        """
        Queue ``fn(*args)`` for execution.

        A new worker thread is started for every submission until the pool
        reaches its size.

        Raises:
            RuntimeError: If the pool has been shut down
        """
        future: Future = Future()
        with self._lock:
            if self._shutdown:
                raise RuntimeError(f"Pool {self.name} is shut down, task rejected")
            self._queue.put((future, fn, args))
            if len(self._workers) < self.size:
                self._start_worker()
        return future

    def _start_worker(self) -> None:
        thread = threading.Thread(
            target=self._work,
            name=f"{self.name}-{len(self._workers)}",
            daemon=True,
        )
        self._workers.append(thread)
        self._alive += 1
        thread.start()

    def _work(self) -> None:
        try:
            while True:
                item = self._queue.get()
                if item is None:
                    break
                future, fn, args = item
                if not future.set_running_or_notify_cancel():
                    continue
                try:
                    result = fn(*args)
                except BaseException as e:
                    future.set_exception(e)
                else:
                    future.set_result(result)
        finally:
            with self._lock:
                self._alive -= 1
                waiters = list(self._waiters)
            for waiter in waiters:
                interruption.notify(waiter)

    def shutdown(self) -> None:
        """Stop accepting tasks; queued tasks still run before the threads exit."""
        with self._lock:
            if self._shutdown:
                return
            self._shutdown = True
            for _ in self._workers:
                self._queue.put(None)

    def shutdown_now(self) -> List[Future]:
        """
        Cancel queued tasks and interrupt all worker threads.

        Tasks that are already running keep running unless they block in an
        interruptible wait.

        Returns:
            Futures of the tasks that were cancelled before they started
        """
        cancelled: List[Future] = []
        with self._lock:
            self._shutdown = True
            self._forced = True
            while True:
                try:
                    item = self._queue.get_nowait()
                except queue.Empty:
                    break
                if item is not None and item[0].cancel():
                    cancelled.append(item[0])
            for _ in self._workers:
                self._queue.put(None)
            workers = list(self._workers)
        for thread in workers:
            if thread.is_alive():
                interruption.interrupt(thread)
        logger.info(
            f"Pool {self.name} forced down: {len(cancelled)} task(s) cancelled, "
            f"{len(workers)} thread(s) interrupted"
        )
        return cancelled

    def await_termination(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for every worker thread to exit after a shutdown.

        Args:
            timeout: Maximum time to wait in seconds, ``None`` waits forever

        Returns:
            True if the pool terminated, False on timeout

        Raises:
            Interrupted: If the waiting thread is interrupted
        """
        current = threading.current_thread()
        with self._lock:
            self._waiters.add(current)
        try:
            return interruption.wait_for(lambda: self.is_terminated, timeout=timeout)
        finally:
            with self._lock:
                self._waiters.discard(current)

    def alive_thread_names(self) -> List[str]:
        return [thread.name for thread in self.threads if thread.is_alive()]
