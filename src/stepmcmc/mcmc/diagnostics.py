"""
Sampler Diagnostics.

Convergence heuristics and summaries for a single incremental chain:
- check_convergence: per-dimension convergence flags from the retained trace
- summarize_trace: per-dimension mean / std / min / max
- print_run_summary: log the end-of-run statistics

Both convergence methods are heuristics over one chain, not formal
multi-chain diagnostics such as Gelman-Rubin R-hat:

    moving-mean-delta: |mean(last window) - mean(previous window)| < threshold
    recent-std:        std(last window) < threshold

Each needs 2 * window post-burn-in samples before it can report convergence
and returns all-False before then.
"""

from typing import Any, Dict, Optional

import numpy as np

from .trace import TraceBuffer
from .types import ConvergenceReport

import logging
logger = logging.getLogger('stepmcmc')


def _moving_mean_delta(recent: np.ndarray, earlier: np.ndarray, threshold: float) -> np.ndarray:
    return np.abs(recent.mean(axis=0) - earlier.mean(axis=0)) < threshold


def _recent_std(recent: np.ndarray, earlier: np.ndarray, threshold: float) -> np.ndarray:
    del earlier  # Unused
    return recent.std(axis=0) < threshold


CONVERGENCE_CHECKS = {
    'moving-mean-delta': _moving_mean_delta,
    'recent-std': _recent_std,
}


def check_convergence(trace: TraceBuffer, window: int = 100, threshold: float = 0.01,
                      method: str = 'moving-mean-delta') -> ConvergenceReport:
    """
    Flag per-dimension convergence from the most recent trace entries.

    Args:
        trace: TraceBuffer of post-burn-in samples
        window: Samples per comparison window
        threshold: Tolerance for the chosen method
        method: 'moving-mean-delta' or 'recent-std'

    Returns:
        ConvergenceReport (all-False when fewer than 2 * window samples exist)
    """
    if method not in CONVERGENCE_CHECKS:
        raise ValueError(f"Unknown convergence method '{method}'")

    n_samples = len(trace)
    if n_samples < 2 * window:
        return ConvergenceReport.not_converged(trace.dimension, method, n_samples)

    samples = trace.as_array(last=2 * window)
    earlier, recent = samples[:window], samples[window:]
    flags = CONVERGENCE_CHECKS[method](recent, earlier, threshold)

    return ConvergenceReport(tuple(bool(f) for f in flags), method, n_samples)


def summarize_trace(trace: TraceBuffer) -> Dict[str, Any]:
    """
    Per-dimension summary statistics of the retained trace.

    Returns:
        Dict with 'count' and, when non-empty, 'mean', 'std', 'min', 'max'
        (each a tuple with one value per dimension)
    """
    samples = trace.as_array()
    summary = {'count': samples.shape[0]}
    if samples.shape[0] == 0:
        return summary

    summary['mean'] = tuple(samples.mean(axis=0).tolist())
    summary['std'] = tuple(samples.std(axis=0).tolist())
    summary['min'] = tuple(samples.min(axis=0).tolist())
    summary['max'] = tuple(samples.max(axis=0).tolist())
    return summary


def trace_mean(trace: TraceBuffer) -> Optional[tuple]:
    """Per-dimension mean of the retained trace, or None when it is empty."""
    if len(trace) == 0:
        return None
    return tuple(trace.as_array().mean(axis=0).tolist())


def print_run_summary(snapshot, labels=()) -> None:
    """
    Log end-of-run statistics for a snapshot.

    Args:
        snapshot: Snapshot from SamplerEngine.get_snapshot()
        labels: Optional dimension names
    """
    state = snapshot.state
    logger.info("--- Sampler Run Summary ---")
    logger.info(f"  Phase: {snapshot.phase}")
    logger.info(f"  Iterations: {state.iteration}")
    logger.info(f"  Acceptance rate: {snapshot.acceptance_rate * 100:.1f}%")
    logger.info(f"  Retained trace: {len(snapshot.trace)} samples")

    names = labels or tuple(f"dim_{i}" for i in range(len(state.current)))
    if snapshot.trace_mean is not None:
        for name, value, flag in zip(names, snapshot.trace_mean,
                                     snapshot.convergence.per_dimension_converged):
            status = "converged" if flag else "not converged"
            logger.info(f"  {name}: mean={value:.4f} ({status})")
    else:
        logger.info("  No post-burn-in samples")
