"""
Error Handling and Validation Utilities for the Sampler Engine

This module provides the exception taxonomy, run configuration validation,
and trace health diagnostics for incremental MCMC runs.

Exceptions:
    InvalidConfig - bad run configuration, bad kernel settings, or a
                    kernel paired with a target it cannot drive
    InvalidDimension - conditional requested for a dimension the target
                       does not have (a wiring bug, not a data issue)

Degenerate numerics (zero density, sigma <= 0, NaN proposals) are never
raised: the kernels clamp or reject them through the acceptance test.
"""

from typing import Any, Dict

import numpy as np

import logging
logger = logging.getLogger('stepmcmc')


class InvalidConfig(ValueError):
    """Raised when a RunConfig, kernel or target is malformed or mismatched."""


class InvalidDimension(IndexError):
    """Raised when a target is queried for a dimension outside its range."""


CONVERGENCE_METHODS = ('moving-mean-delta', 'recent-std')


def validate_run_config(run_config: Dict[str, Any]) -> None:
    """
    Validates that a run configuration is sensible.

    Every problem is collected first so the caller sees them all at once.

    Args:
        run_config: Configuration dictionary (lowercase keys)

    Raises:
        InvalidConfig: If configuration is invalid
    """
    errors = []

    required_keys = ['max_iterations', 'burn_in', 'step_interval_ms', 'trace_cap']
    for key in required_keys:
        if key not in run_config:
            errors.append(f"Missing required config key: '{key}'")

    def is_int(value):
        return isinstance(value, (int, np.integer)) and not isinstance(value, bool)

    max_iterations = run_config.get('max_iterations')
    if max_iterations is not None:
        if not is_int(max_iterations) or max_iterations < 1:
            errors.append(f"max_iterations must be a positive integer, got {max_iterations!r}")

    burn_in = run_config.get('burn_in')
    if burn_in is not None:
        if not is_int(burn_in) or burn_in < 0:
            errors.append(f"burn_in must be a non-negative integer, got {burn_in!r}")
        elif is_int(max_iterations) and burn_in >= max_iterations:
            errors.append(
                f"burn_in ({burn_in}) must be smaller than max_iterations ({max_iterations})"
            )

    step_interval_ms = run_config.get('step_interval_ms')
    if step_interval_ms is not None:
        if not is_int(step_interval_ms) or step_interval_ms < 1:
            errors.append(f"step_interval_ms must be a positive integer, got {step_interval_ms!r}")

    trace_cap = run_config.get('trace_cap')
    if trace_cap is not None:
        if not is_int(trace_cap) or trace_cap < 1:
            errors.append(f"trace_cap must be a positive integer, got {trace_cap!r}")

    method = run_config.get('convergence_method', 'moving-mean-delta')
    if method not in CONVERGENCE_METHODS:
        errors.append(
            f"convergence_method must be one of {list(CONVERGENCE_METHODS)}, got {method!r}"
        )

    window = run_config.get('convergence_window', 100)
    if not is_int(window) or window < 1:
        errors.append(f"convergence_window must be a positive integer, got {window!r}")

    threshold = run_config.get('convergence_threshold', 0.01)
    if not isinstance(threshold, (int, float)) or not np.isfinite(threshold) or threshold <= 0:
        errors.append(f"convergence_threshold must be a positive number, got {threshold!r}")

    rng_seed = run_config.get('rng_seed', 42)
    if not is_int(rng_seed) or rng_seed < 0:
        errors.append(f"rng_seed must be a non-negative integer, got {rng_seed!r}")

    kernel_settings = run_config.get('kernel_settings', {})
    if not isinstance(kernel_settings, dict):
        errors.append(f"kernel_settings must be a dict, got {type(kernel_settings).__name__}")

    initial = run_config.get('initial')
    if initial is not None:
        try:
            values = np.asarray(initial, dtype=float)
        except (TypeError, ValueError):
            errors.append(f"initial must be a sequence of numbers, got {initial!r}")
        else:
            if values.ndim != 1 or values.size == 0:
                errors.append(f"initial must be a non-empty flat sequence, got {initial!r}")
            elif not np.all(np.isfinite(values)):
                errors.append(f"initial must contain finite values, got {initial!r}")

    if errors:
        raise InvalidConfig("Invalid run configuration:\n  " + "\n  ".join(errors))


def diagnose_trace(trace: np.ndarray, diagnostics: Dict[str, Any] = None) -> Dict[str, Any]:
    """
    Analyzes a retained trace to identify common issues.

    Args:
        trace: Trace array (n_samples, n_dims)
        diagnostics: Existing diagnostics dict to extend

    Returns:
        diagnostics: Dictionary with issues, warnings, and info
    """
    diagnostics = (diagnostics or {}) | {
        'issues': [],
        'warnings': [],
        'info': []
    }

    if trace.shape[0] == 0:
        diagnostics['warnings'].append("Trace is empty - no post-burn-in samples yet")
        return diagnostics

    if not np.all(np.isfinite(trace)):
        diagnostics['issues'].append(
            "Trace contains NaN or Inf values - sampler became unstable"
        )

    # A dimension that never moves usually means every proposal is rejected
    if trace.shape[0] > 1:
        dim_vars = np.var(trace, axis=0)
        stuck = np.flatnonzero(dim_vars < 1e-12)
        if stuck.size > 0:
            diagnostics['warnings'].append(
                f"{stuck.size} dimension(s) appear stuck (near-zero variance): {stuck.tolist()}"
            )

    diagnostics['info'].append(f"Total samples: {trace.shape[0]}")
    diagnostics['info'].append(f"Number of dimensions: {trace.shape[1]}")

    return diagnostics


def print_diagnostics(diagnostics: Dict[str, Any]) -> None:
    """Pretty-print diagnostics from diagnose_trace."""
    if diagnostics['issues']:
        logger.error("[ERROR] ISSUES:")
        for issue in diagnostics['issues']:
            logger.error(f"  - {issue}")

    if diagnostics['warnings']:
        logger.warning("[WARN] WARNINGS:")
        for warning in diagnostics['warnings']:
            logger.warning(f"  - {warning}")

    if diagnostics['info']:
        logger.info("[INFO] INFO:")
        for info in diagnostics['info']:
            logger.info(f"  - {info}")

    if not diagnostics['issues'] and not diagnostics['warnings']:
        logger.info("[OK] No issues detected")
