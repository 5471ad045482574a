"""
Sampler Data Structures and Type Definitions.

This module contains the core data structures shared by the engine:
- ParameterVector: immutable position in parameter space
- SamplerState: the single mutable record of chain progress
- StateView: frozen copy of a SamplerState carried by snapshots
- TraceEntry: one retained post-burn-in sample
- ConvergenceReport: per-dimension convergence flags
- Phase: engine lifecycle state
- Snapshot: read-only view handed to renderers
"""

from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple, Optional, Tuple

ParameterVector = Tuple[float, ...]


def as_vector(values) -> ParameterVector:
    """Convert any flat sequence or array of numbers to a ParameterVector."""
    return tuple(float(v) for v in values)


class Phase(Enum):
    """Engine lifecycle phase."""
    IDLE = 'idle'
    RUNNING = 'running'
    PAUSED = 'paused'
    COMPLETED = 'completed'

    def __str__(self):
        return self.name.title()


@dataclass
class SamplerState:
    """
    Mutable record of the chain's progress.

    Exactly one live instance exists per engine; it is mutated in place by
    each step and replaced on reset. Snapshots receive a frozen StateView.

    last_accepted is only meaningful for Metropolis-Hastings kernels and is
    always True for Gibbs sweeps.
    """
    iteration: int
    current: ParameterVector
    last_accepted: bool
    log_density: float
    num_proposals: int = 0
    num_accepted: int = 0

    @property
    def acceptance_rate(self) -> float:
        """Fraction of steps whose transition was accepted (0.0 before any step)."""
        return _acceptance_rate(self.num_accepted, self.num_proposals)

    def freeze(self) -> 'StateView':
        return StateView(**vars(self))


@dataclass(frozen=True)
class StateView:
    """Immutable copy of a SamplerState at one point in time."""
    iteration: int
    current: ParameterVector
    last_accepted: bool
    log_density: float
    num_proposals: int = 0
    num_accepted: int = 0

    @property
    def acceptance_rate(self) -> float:
        return _acceptance_rate(self.num_accepted, self.num_proposals)


def _acceptance_rate(num_accepted: int, num_proposals: int) -> float:
    if num_proposals == 0:
        return 0.0
    return num_accepted / num_proposals


class TraceEntry(NamedTuple):
    """One retained post-burn-in sample."""
    iteration: int
    vector: ParameterVector


@dataclass(frozen=True)
class ConvergenceReport:
    """Per-dimension convergence flags from a trace heuristic."""
    per_dimension_converged: Tuple[bool, ...]
    method: str = 'moving-mean-delta'
    num_samples: int = 0

    @property
    def converged(self) -> bool:
        """True when every dimension is flagged converged."""
        return bool(self.per_dimension_converged) and all(self.per_dimension_converged)

    @classmethod
    def not_converged(cls, dimension: int, method: str = 'moving-mean-delta',
                      num_samples: int = 0) -> 'ConvergenceReport':
        return cls((False,) * dimension, method, num_samples)


@dataclass(frozen=True)
class Snapshot:
    """
    Read-only view of an engine at one point in time.

    The trace is a tuple of TraceEntry values, bounded by the run's trace_cap.
    Consumers must treat every field as immutable; nothing here aliases the
    engine's live state.
    """
    state: StateView
    trace: Tuple[TraceEntry, ...]
    convergence: ConvergenceReport
    phase: Phase
    acceptance_rate: float
    progress: float
    trace_mean: Optional[ParameterVector] = None

    @property
    def iteration(self) -> int:
        return self.state.iteration
