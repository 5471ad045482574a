"""
MCMC Subpackage - Incremental sampling engine.

This package contains the engine and its supporting pieces:
- engine: SamplerEngine lifecycle, stepping and snapshots
- scheduler: Background timer driving scheduled steps
- config: RunConfig validation and JAX precision / key setup
- diagnostics: Convergence heuristics and run summaries
- trace: Bounded post-burn-in trace buffer
- types: Core data structures (SamplerState, Snapshot, Phase)
"""

# Import types first (needed by other modules)
from .types import (
    ConvergenceReport,
    ParameterVector,
    Phase,
    SamplerState,
    Snapshot,
    StateView,
    TraceEntry,
    as_vector,
)
from .trace import TraceBuffer
from .config import RunConfig, clean_config, configure_precision, gen_rng_keys
from .diagnostics import (
    check_convergence,
    summarize_trace,
    trace_mean,
    print_run_summary,
)
from .scheduler import IncrementalScheduler

# Main entry point
from .engine import SamplerEngine

__all__ = [
    # Main entry point
    'SamplerEngine',
    # Types
    'ConvergenceReport',
    'ParameterVector',
    'Phase',
    'SamplerState',
    'Snapshot',
    'StateView',
    'TraceEntry',
    'as_vector',
    'TraceBuffer',
    # Config
    'RunConfig',
    'clean_config',
    'configure_precision',
    'gen_rng_keys',
    # Diagnostics
    'check_convergence',
    'summarize_trace',
    'trace_mean',
    'print_run_summary',
    # Scheduling
    'IncrementalScheduler',
]
