"""
Sampler Engine - Incremental MCMC orchestrator.

SamplerEngine wires a target, a transition kernel and a RunConfig into one
chain that advances a step at a time, either on the IncrementalScheduler's
timer or synchronously via step_once() / run().

Lifecycle:
    IDLE --start()--> RUNNING --pause()--> PAUSED --start()--> RUNNING
    RUNNING --(iteration == max_iterations)--> COMPLETED
    any --reset()--> IDLE

Each step:
    1. kernel.advance() produces the next vector (MH accept/reject or Gibbs sweep)
    2. SamplerState is updated in place
    3. once iteration > burn_in the vector is appended to the TraceBuffer and
       the convergence report is recomputed
    4. the engine completes when iteration reaches max_iterations

A step is computed in full before any state is touched, so a snapshot never
shows a partially applied step. All mutators and get_snapshot() serialize on
one re-entrant lock; the scheduler re-checks its cancel Event under that lock
so pause() and reset() win over any pending tick.
"""

import threading
from typing import Callable, List, Optional, Union

import jax.random as random

from ..error_handling import InvalidConfig
from ..kernels import TransitionKernel, make_kernel
from .config import RunConfig, gen_rng_keys
from .diagnostics import check_convergence, trace_mean
from .scheduler import IncrementalScheduler
from .trace import TraceBuffer
from .types import ConvergenceReport, Phase, SamplerState, Snapshot, as_vector

import logging
logger = logging.getLogger('stepmcmc')

Listener = Callable[[Snapshot], None]


class SamplerEngine:
    """
    Incremental MCMC engine hosting one chain.

    Args:
        target: TargetModel to sample
        kernel: TransitionKernel (RandomWalkMH or GibbsStep)
        run_config: RunConfig or plain dict (defaults filled in)

    Raises:
        InvalidConfig: malformed config, kernel/target mismatch or bad initial vector
    """

    def __init__(self, target, kernel: TransitionKernel,
                 run_config: Union[RunConfig, dict, None] = None):
        self._target = target
        self._base_kernel = kernel
        self._lock = threading.RLock()
        self._changed = threading.Condition(self._lock)
        self._listeners: List[Listener] = []
        self._reseed_count = 0
        self._snapshot: Optional[Snapshot] = None

        self._install(self._coerce_config(run_config))
        self._scheduler = IncrementalScheduler(self._scheduled_step, self._config.step_interval_ms)

    # ------------------------------------------------------------------
    # Properties

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def config(self) -> RunConfig:
        return self._config

    @property
    def target(self):
        return self._target

    @property
    def kernel(self) -> TransitionKernel:
        return self._kernel

    @property
    def iteration(self) -> int:
        return self._state.iteration

    # ------------------------------------------------------------------
    # Chain construction

    @staticmethod
    def _coerce_config(run_config) -> RunConfig:
        if run_config is None:
            return RunConfig()
        if isinstance(run_config, RunConfig):
            return run_config
        if isinstance(run_config, dict):
            return RunConfig.from_dict(run_config)
        raise InvalidConfig(f"run_config must be a RunConfig or dict, got {type(run_config).__name__}")

    def _build_kernel(self, config: RunConfig) -> TransitionKernel:
        kernel = self._base_kernel
        if config.kernel_settings:
            kernel = make_kernel(kernel.kernel_type, {**kernel.settings(), **config.kernel_settings})
        kernel.validate_target(self._target)
        return kernel

    def _initial_vector(self, config: RunConfig, init_key):
        if config.initial is not None:
            if len(config.initial) != self._target.dimension:
                raise InvalidConfig(
                    f"initial has {len(config.initial)} entries but "
                    f"{type(self._target).__name__} has {self._target.dimension} dimensions"
                )
            return as_vector(config.initial)
        if config.randomize_initial:
            return as_vector(self._target.random_initial(init_key))
        return as_vector(self._target.default_initial())

    def _install(self, config: RunConfig) -> None:
        """Build a fresh IDLE chain from ``config``; nothing changes if this raises."""
        kernel = self._build_kernel(config)

        chain_key, init_key = gen_rng_keys(config.rng_seed)
        if self._reseed_count:
            chain_key = random.fold_in(chain_key, self._reseed_count)
            init_key = random.fold_in(init_key, self._reseed_count)

        initial = self._initial_vector(config, init_key)
        state = SamplerState(
            iteration=0,
            current=initial,
            last_accepted=True,
            log_density=self._target.log_density(initial),
        )
        dimension = self._target.dimension

        if config.trace_cap < config.min_convergence_samples:
            logger.warning(
                f"trace_cap ({config.trace_cap}) is smaller than the {config.min_convergence_samples} "
                f"samples the convergence check needs; convergence will never be reported"
            )

        self._config = config
        self._kernel = kernel
        self._key = chain_key
        self._state = state
        self._trace = TraceBuffer(config.trace_cap, dimension)
        self._convergence = ConvergenceReport.not_converged(dimension, config.convergence_method)
        self._phase = Phase.IDLE
        self._snapshot = None

    # ------------------------------------------------------------------
    # Lifecycle

    def start(self) -> None:
        """IDLE/PAUSED -> RUNNING. No-op when RUNNING or COMPLETED."""
        with self._lock:
            if self._phase in (Phase.RUNNING, Phase.COMPLETED):
                return
            self._set_phase(Phase.RUNNING)
            self._scheduler.start()
            logger.info(
                f"Sampler started at iteration {self._state.iteration}/{self._config.max_iterations} "
                f"({self._kernel!r} on {self._target!r})"
            )
            snapshot = self._build_snapshot() if self._listeners else None
        self._notify(snapshot)

    def pause(self) -> None:
        """RUNNING -> PAUSED. No-op otherwise. Returns after any in-flight step finishes."""
        with self._lock:
            if self._phase is not Phase.RUNNING:
                return
            self._set_phase(Phase.PAUSED)
            worker = self._scheduler.cancel(wait=False)
        self._scheduler.join(worker)
        logger.info(f"Sampler paused at iteration {self._state.iteration}")
        self._notify()

    def reset(self, run_config: Union[RunConfig, dict, None] = None, rerandomize: bool = False) -> None:
        """
        Any phase -> IDLE with a fresh chain.

        Args:
            run_config: Replacement configuration (keeps the current one if None)
            rerandomize: Derive a new seed stream so the restarted chain (and a
                         randomized start) differs from the previous one

        Raises:
            InvalidConfig: The replacement configuration is malformed. The engine
                           is still reset to IDLE using the previous configuration.
        """
        error = None
        with self._lock:
            if rerandomize:
                self._reseed_count += 1
            previous = self._config
            try:
                config = previous if run_config is None else self._coerce_config(run_config)
                self._install(config)
            except InvalidConfig as exc:
                self._install(previous)
                config, error = previous, exc
            self._scheduler.set_interval(config.step_interval_ms)
            self._changed.notify_all()
            # The new chain is visible before the worker is joined; a pending
            # tick sees IDLE under the lock and exits without stepping.
            worker = self._scheduler.cancel(wait=False)
        self._scheduler.join(worker)

        if error is not None:
            logger.error("Reset rejected the new run configuration; kept the previous one")
            self._notify()
            raise error
        logger.info(f"Sampler reset (max_iterations={config.max_iterations}, burn_in={config.burn_in})")
        self._notify()

    # ------------------------------------------------------------------
    # Stepping

    def _set_phase(self, phase: Phase) -> None:
        self._phase = phase
        self._snapshot = None
        self._changed.notify_all()

    def _step(self) -> None:
        """Advance the chain by one iteration. Caller holds the lock."""
        state = self._state
        config = self._config

        transition, next_key = self._kernel.advance(
            self._key, state.current, self._target, state.log_density
        )

        self._key = next_key
        state.iteration += 1
        state.current = as_vector(transition.vector)
        state.last_accepted = bool(transition.accepted)
        state.log_density = float(transition.log_density)
        state.num_proposals += 1
        if transition.accepted:
            state.num_accepted += 1

        if state.iteration > config.burn_in:
            self._trace.append(state.iteration, state.current)
            self._convergence = check_convergence(
                self._trace,
                window=config.convergence_window,
                threshold=config.convergence_threshold,
                method=config.convergence_method,
            )

        self._snapshot = None
        if state.iteration >= config.max_iterations:
            self._set_phase(Phase.COMPLETED)
            logger.info(
                f"Sampler completed {state.iteration} iterations "
                f"(acceptance rate {state.acceptance_rate * 100:.1f}%, "
                f"converged={self._convergence.per_dimension_converged})"
            )
        else:
            self._changed.notify_all()

    def _scheduled_step(self, cancel: threading.Event) -> bool:
        """Scheduler callback: one step if the run is still live."""
        with self._lock:
            if cancel.is_set() or self._phase is not Phase.RUNNING:
                return False
            try:
                self._step()
            except Exception:
                self._set_phase(Phase.PAUSED)
                logger.exception(f"Step {self._state.iteration + 1} failed; sampler paused")
                raise
            keep_going = self._phase is Phase.RUNNING
            snapshot = self._build_snapshot() if self._listeners else None
        if snapshot is not None:
            self._notify(snapshot)
        return keep_going

    def step_once(self) -> bool:
        """
        Take exactly one synchronous step.

        Allowed from IDLE (which then becomes PAUSED, since the chain has
        progressed) and PAUSED. Ignored while RUNNING (the scheduler owns
        stepping) and once COMPLETED.

        Returns:
            True if a step was taken
        """
        with self._lock:
            if self._phase in (Phase.RUNNING, Phase.COMPLETED):
                return False
            self._step()
            if self._phase is Phase.IDLE:
                self._set_phase(Phase.PAUSED)
        self._notify()
        return True

    def run(self, num_steps: Optional[int] = None) -> Snapshot:
        """
        Step synchronously without the timer.

        Args:
            num_steps: Maximum steps to take (None runs to completion)

        Returns:
            Snapshot after the last step

        Raises:
            RuntimeError: If the scheduler is currently running the chain
        """
        with self._lock:
            if self._phase is Phase.RUNNING:
                raise RuntimeError("Sampler is running on its scheduler; pause() before run()")
            taken = 0
            while self._phase is not Phase.COMPLETED and (num_steps is None or taken < num_steps):
                self._step()
                taken += 1
            if taken and self._phase is Phase.IDLE:
                self._set_phase(Phase.PAUSED)
            snapshot = self._build_snapshot()
        self._notify(snapshot)
        return snapshot

    # ------------------------------------------------------------------
    # Read path

    def _build_snapshot(self) -> Snapshot:
        if self._snapshot is None:
            state = self._state
            self._snapshot = Snapshot(
                state=state.freeze(),
                trace=self._trace.entries(),
                convergence=self._convergence,
                phase=self._phase,
                acceptance_rate=state.acceptance_rate,
                progress=state.iteration / self._config.max_iterations,
                trace_mean=trace_mean(self._trace),
            )
        return self._snapshot

    def get_snapshot(self) -> Snapshot:
        """Immutable view of the chain; cached until the next mutation."""
        with self._lock:
            return self._build_snapshot()

    def trace_array(self):
        """Retained trace as a numpy array (n_samples, dimension)."""
        with self._lock:
            return self._trace.as_array()

    def wait_for(self, predicate: Callable[[Snapshot], bool], timeout: Optional[float] = None) -> bool:
        """
        Block until ``predicate(snapshot)`` holds or ``timeout`` seconds pass.

        Returns:
            The final predicate value
        """
        with self._changed:
            return self._changed.wait_for(lambda: predicate(self._build_snapshot()), timeout)

    def wait_until_stopped(self, timeout: Optional[float] = None) -> bool:
        """Block until the engine leaves RUNNING (completion or pause)."""
        return self.wait_for(lambda snap: snap.phase is not Phase.RUNNING, timeout)

    # ------------------------------------------------------------------
    # Subscriptions

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a callback receiving a Snapshot after every step and lifecycle change.

        Scheduled steps notify from the scheduler thread.

        Returns:
            Function that removes the listener
        """
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe():
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, snapshot: Optional[Snapshot] = None) -> None:
        with self._lock:
            listeners = list(self._listeners)
            if listeners and snapshot is None:
                snapshot = self._build_snapshot()
        for listener in listeners:
            try:
                listener(snapshot)
            except Exception:
                logger.exception(f"Snapshot listener {listener!r} raised")

    def __repr__(self):
        return (f"SamplerEngine(target={self._target!r}, kernel={self._kernel!r}, "
                f"phase={self._phase}, iteration={self._state.iteration})")
