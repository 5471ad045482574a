"""
Incremental Scheduler.

Drives a step callback at a fixed wall-clock cadence on a background daemon
thread. Each start() creates a fresh run with its own cancel Event; the
callback receives that Event and returns whether the run should continue.

Guarantees:
- at most one worker thread per scheduler is live at a time, and a worker
  only calls the callback sequentially, so steps never overlap;
- cancel() sets the run's Event before returning, and the Event wait doubles
  as the pacing sleep, so a pending step is abandoned immediately;
- cancel() never joins from the worker thread itself (a callback may pause
  or reset its own engine).

Callers that share state with the callback must re-check the Event under
their own lock before stepping; see SamplerEngine._scheduled_step.
"""

import threading
from typing import Callable, Optional

import logging
logger = logging.getLogger('stepmcmc')

StepCallback = Callable[[threading.Event], bool]


class IncrementalScheduler:
    """Cooperative, cancellable repeating timer around a step callback."""

    def __init__(self, step_fn: StepCallback, interval_ms: int, name: str = 'stepmcmc-scheduler'):
        if interval_ms < 1:
            raise ValueError(f"interval_ms must be >= 1, got {interval_ms}")
        self._step_fn = step_fn
        self._interval = interval_ms / 1000.0
        self._name = name
        self._lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None
        self._cancel: Optional[threading.Event] = None

    @property
    def interval_ms(self) -> int:
        return int(round(self._interval * 1000))

    @property
    def is_running(self) -> bool:
        with self._lock:
            return self._cancel is not None and not self._cancel.is_set()

    def set_interval(self, interval_ms: int) -> None:
        """Change the cadence; takes effect from the next tick."""
        if interval_ms < 1:
            raise ValueError(f"interval_ms must be >= 1, got {interval_ms}")
        self._interval = interval_ms / 1000.0

    def start(self) -> None:
        """Begin a new run. No-op if a run is already active."""
        with self._lock:
            if self._cancel is not None and not self._cancel.is_set():
                return
            cancel = threading.Event()
            thread = threading.Thread(target=self._run_loop, args=(cancel,),
                                      name=self._name, daemon=True)
            self._cancel = cancel
            self._thread = thread
        thread.start()

    def cancel(self, wait: bool = True, timeout: Optional[float] = None) -> Optional[threading.Thread]:
        """
        Stop the active run.

        Args:
            wait: Join the worker thread (skipped when called from the worker)
            timeout: Join timeout in seconds (None waits for the in-flight step)

        Returns:
            The stopped worker thread (None if no run was active), so a caller
            holding its own lock can cancel under it and join() after releasing it
        """
        with self._lock:
            cancel, thread = self._cancel, self._thread
            self._cancel = None
            self._thread = None

        if cancel is not None:
            cancel.set()
        if wait:
            self.join(thread, timeout)
        return thread

    @staticmethod
    def join(thread: Optional[threading.Thread], timeout: Optional[float] = None) -> None:
        """Wait for a worker returned by cancel(wait=False). No-op from the worker itself."""
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)

    def _run_loop(self, cancel: threading.Event) -> None:
        """Background thread calling the step callback once per interval."""
        try:
            while not cancel.wait(self._interval):
                if not self._step_fn(cancel):
                    break
        except Exception:
            logger.exception(f"{self._name}: step callback raised; run stopped")
            raise
        finally:
            cancel.set()
