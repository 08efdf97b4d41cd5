"""Interrupting the coordinating thread of an invocation."""

import os
import signal
import sys
import threading
import time
from typing import List

import pytest

from together import Together, TogetherConfig, TogetherError, WaitInterrupted, interruption
from together.interruption import Interrupted

from helpers.concurrency import all_finished, start_in_thread


@pytest.mark.concurrency
class TestInterruptPropagation:
    """Test that an interrupt fails the run and stays visible to the caller."""

    def test_interrupt_fails_invocation_and_keeps_flag(self, config):
        started = threading.Event()
        workers: List[threading.Thread] = []

        def action(t):
            workers.append(threading.current_thread())
            started.set()
            interruption.sleep(30)
            return t

        coordinator, outcome = start_in_thread(
            lambda: Together(action, 2, config=config).as_list()
        )
        assert started.wait(5.0)
        time.sleep(0.05)

        interruption.interrupt(coordinator)
        coordinator.join(timeout=5.0)

        assert not coordinator.is_alive(), "coordinator hangs after interrupt"
        assert isinstance(outcome["error"], WaitInterrupted)
        assert isinstance(outcome["error"], TogetherError)
        assert outcome["interrupted"] is True
        assert outcome["result"] is None
        # Forced shutdown interrupts the sleeping workers too
        assert all_finished(workers, timeout=5.0)

    def test_interrupt_while_waiting_for_result(self, config):
        """Test the cause chain when the interrupt hits a result wait."""
        started = threading.Event()

        def action(t):
            started.set()
            interruption.sleep(30)
            return t

        coordinator, outcome = start_in_thread(
            lambda: Together(action, 1, config=config).as_list()
        )
        assert started.wait(5.0)
        time.sleep(0.05)
        interruption.interrupt(coordinator)
        coordinator.join(timeout=5.0)

        error = outcome["error"]
        assert isinstance(error, WaitInterrupted)
        assert isinstance(error.__cause__, Interrupted)
        # The result wait failed first, teardown reports on top of it
        first = error.__cause__.__context__
        assert isinstance(first, WaitInterrupted)
        assert first.worker == 0

    def test_already_interrupted_caller(self, config):
        """Test that a caller with the flag set fails fast and keeps the flag."""
        interruption.interrupt(threading.current_thread())

        with pytest.raises(WaitInterrupted):
            Together(lambda t: t, 3, config=config).as_list()

        assert interruption.is_interrupted() is True

    def test_uninterruptible_action_does_not_block_caller(self, config):
        """Test that the coordinator returns even while workers keep running."""
        release = threading.Event()
        started = threading.Event()

        def action(t):
            started.set()
            release.wait(10.0)
            return t

        coordinator, outcome = start_in_thread(
            lambda: Together(action, 2, config=config).as_list()
        )
        try:
            assert started.wait(5.0)
            time.sleep(0.05)
            interruption.interrupt(coordinator)
            coordinator.join(timeout=5.0)

            assert not coordinator.is_alive()
            assert isinstance(outcome["error"], WaitInterrupted)
            assert outcome["interrupted"] is True
        finally:
            release.set()


@pytest.mark.concurrency
@pytest.mark.skipif(sys.platform == "win32", reason="needs POSIX signal delivery")
class TestKeyboardInterrupt:
    """Test that Ctrl-C on the caller ends the run at once."""

    def test_ctrl_c_skips_teardown_waits(self):
        if (
            threading.current_thread() is not threading.main_thread()
            or signal.getsignal(signal.SIGINT) is not signal.default_int_handler
        ):
            pytest.skip("SIGINT is not raised as KeyboardInterrupt in this runner")

        release = threading.Event()
        started = threading.Event()
        workers: List[threading.Thread] = []

        def action(t):
            workers.append(threading.current_thread())
            started.set()
            release.wait(10.0)
            return t

        def press_ctrl_c():
            if started.wait(5.0):
                time.sleep(0.1)
                os.kill(os.getpid(), signal.SIGINT)

        threading.Thread(target=press_ctrl_c, daemon=True).start()
        begin = time.monotonic()
        try:
            with pytest.raises(KeyboardInterrupt):
                Together(action, 2, config=TogetherConfig(shutdown_timeout_secs=5.0)).as_list()
            elapsed = time.monotonic() - begin
        finally:
            release.set()

        assert elapsed < 2.0
        assert all_finished(workers)
