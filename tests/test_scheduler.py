"""
Scheduler Tests - Background Step Timer

Tests IncrementalScheduler in isolation with plain callbacks:
- repeated stepping until the callback stops the run
- cancellation and restart
- cancel from inside the callback

Threaded tests wait on Events with timeouts instead of sleeping.

Run with: pytest tests/test_scheduler.py -v
"""

import threading
import time

import pytest

from stepmcmc.mcmc.scheduler import IncrementalScheduler

TIMEOUT = 10.0


class Counter:
    """Step callback that stops after ``limit`` calls."""

    def __init__(self, limit=None):
        self.calls = 0
        self.limit = limit
        self.reached = threading.Event()
        self.threads = set()

    def __call__(self, cancel):
        self.calls += 1
        self.threads.add(threading.current_thread().name)
        if self.limit is not None and self.calls >= self.limit:
            self.reached.set()
            return False
        return True


# ============================================================================
# STEPPING
# ============================================================================

class TestSchedulerStepping:
    """Callback invocation on the worker thread."""

    def test_runs_until_callback_returns_false(self):
        counter = Counter(limit=5)
        scheduler = IncrementalScheduler(counter, interval_ms=1)
        scheduler.start()

        assert counter.reached.wait(TIMEOUT)
        scheduler.cancel()
        assert counter.calls == 5
        assert not scheduler.is_running

    def test_steps_on_named_background_thread(self):
        counter = Counter(limit=2)
        scheduler = IncrementalScheduler(counter, interval_ms=1, name='test-worker')
        scheduler.start()
        assert counter.reached.wait(TIMEOUT)
        scheduler.cancel()
        assert counter.threads == {'test-worker'}

    def test_start_twice_is_noop(self):
        started = threading.Event()
        release = threading.Event()
        active = []

        def step(cancel):
            active.append(threading.current_thread())
            started.set()
            release.wait(TIMEOUT)
            return False

        scheduler = IncrementalScheduler(step, interval_ms=1)
        scheduler.start()
        assert started.wait(TIMEOUT)
        scheduler.start()
        release.set()
        scheduler.cancel()
        assert len(active) == 1


# ============================================================================
# CANCELLATION
# ============================================================================

class TestSchedulerCancel:
    """cancel() stops pending steps."""

    def test_cancel_stops_stepping(self):
        counter = Counter()
        scheduler = IncrementalScheduler(counter, interval_ms=1)
        scheduler.start()
        deadline = time.monotonic() + TIMEOUT
        while counter.calls < 3 and time.monotonic() < deadline:
            time.sleep(0.001)

        scheduler.cancel()
        calls = counter.calls
        time.sleep(0.05)
        assert counter.calls == calls
        assert not scheduler.is_running

    def test_restart_after_cancel(self):
        counter = Counter()
        scheduler = IncrementalScheduler(counter, interval_ms=1)
        scheduler.start()
        scheduler.cancel()
        first = counter.calls

        counter.limit = first + 3
        scheduler.start()
        assert counter.reached.wait(TIMEOUT)
        scheduler.cancel()
        assert counter.calls == first + 3

    def test_cancel_when_idle(self):
        scheduler = IncrementalScheduler(lambda cancel: False, interval_ms=1)
        assert scheduler.cancel() is None
        assert not scheduler.is_running

    def test_cancel_without_wait_returns_worker(self):
        release = threading.Event()
        entered = threading.Event()

        def step(cancel):
            entered.set()
            release.wait(TIMEOUT)
            return True

        scheduler = IncrementalScheduler(step, interval_ms=1)
        scheduler.start()
        assert entered.wait(TIMEOUT)

        worker = scheduler.cancel(wait=False)
        assert not scheduler.is_running
        assert worker.is_alive()

        release.set()
        IncrementalScheduler.join(worker, TIMEOUT)
        assert not worker.is_alive()

    def test_cancel_from_callback_does_not_deadlock(self):
        done = threading.Event()
        holder = {}

        def step(cancel):
            holder['scheduler'].cancel(wait=True)
            done.set()
            return True

        scheduler = IncrementalScheduler(step, interval_ms=1)
        holder['scheduler'] = scheduler
        scheduler.start()
        assert done.wait(TIMEOUT)
        assert not scheduler.is_running

    def test_callback_sees_cancel_event(self):
        seen = threading.Event()
        events = []

        def step(cancel):
            events.append(cancel)
            seen.set()
            return True

        scheduler = IncrementalScheduler(step, interval_ms=1)
        scheduler.start()
        assert seen.wait(TIMEOUT)
        scheduler.cancel()
        assert events[0].is_set()


# ============================================================================
# CONFIGURATION
# ============================================================================

class TestSchedulerInterval:
    """Interval handling."""

    @pytest.mark.parametrize("interval", [0, -5])
    def test_invalid_interval(self, interval):
        with pytest.raises(ValueError):
            IncrementalScheduler(lambda cancel: False, interval_ms=interval)

    def test_set_interval(self):
        scheduler = IncrementalScheduler(lambda cancel: False, interval_ms=20)
        assert scheduler.interval_ms == 20
        scheduler.set_interval(50)
        assert scheduler.interval_ms == 50
        with pytest.raises(ValueError):
            scheduler.set_interval(0)
