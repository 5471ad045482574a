"""
Run Configuration.

This module handles building and validating run configurations:
- RunConfig: frozen, validated configuration for one chain
- clean_config: apply defaults to a plain config dict
- configure_precision: switch JAX between 32 and 64 bit floats
- gen_rng_keys: Generate JAX random keys

All config keys use lowercase with underscores (e.g., 'max_iterations', 'burn_in').
A RunConfig is supplied once at engine construction or re-supplied to reset().
"""

from dataclasses import dataclass, field, fields, asdict
from typing import Any, Dict, Optional, Tuple

import jax
import jax.random as random

from ..error_handling import validate_run_config

import logging
logger = logging.getLogger('stepmcmc')


DEFAULT_CONVERGENCE_WINDOW = 100
DEFAULT_CONVERGENCE_THRESHOLD = 0.01


def clean_config(run_config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Cleans a config dict and sets defaults.
    All config keys use lowercase with underscores.
    """
    run_config = dict(run_config)

    run_config.setdefault('max_iterations', 1000)
    run_config.setdefault('burn_in', 0)
    run_config.setdefault('step_interval_ms', 20)
    run_config.setdefault('trace_cap', 1000)
    run_config.setdefault('kernel_settings', {})
    run_config.setdefault('convergence_method', 'moving-mean-delta')
    run_config.setdefault('convergence_window', DEFAULT_CONVERGENCE_WINDOW)
    run_config.setdefault('convergence_threshold', DEFAULT_CONVERGENCE_THRESHOLD)
    run_config.setdefault('rng_seed', 42)
    run_config.setdefault('initial', None)
    run_config.setdefault('randomize_initial', False)

    known = {f.name for f in fields(RunConfig)}
    unknown = sorted(set(run_config) - known)
    if unknown:
        logger.warning(f"Ignoring unknown run config keys: {unknown}")
        for key in unknown:
            del run_config[key]

    return run_config


@dataclass(frozen=True)
class RunConfig:
    """
    Configuration for a single incremental chain.

    Required semantics:
        max_iterations: Steps until the engine completes (> 0)
        burn_in: Iterations discarded before tracing (0 <= burn_in < max_iterations)
        step_interval_ms: Wall-clock pacing of the scheduler (> 0)
        trace_cap: Maximum retained post-burn-in samples (> 0)

    Optional:
        kernel_settings: Kernel tuning forwarded by the registry
                         (e.g. {'proposal_scale': 0.5, 'noise': 'uniform'})
        convergence_method: 'moving-mean-delta' or 'recent-std'
        convergence_window: Samples per comparison window
        convergence_threshold: Convergence tolerance
        rng_seed: Seed for the chain's JAX PRNG key
        initial: Explicit starting vector (overrides the target's default)
        randomize_initial: Draw the start from the target's random initializer

    Construction validates eagerly and raises InvalidConfig. Configs compare
    by value but are unhashable, since kernel_settings is a dict.
    """
    max_iterations: int = 1000
    burn_in: int = 0
    step_interval_ms: int = 20
    trace_cap: int = 1000
    kernel_settings: Dict[str, Any] = field(default_factory=dict)
    convergence_method: str = 'moving-mean-delta'
    convergence_window: int = DEFAULT_CONVERGENCE_WINDOW
    convergence_threshold: float = DEFAULT_CONVERGENCE_THRESHOLD
    rng_seed: int = 42
    initial: Optional[Tuple[float, ...]] = None
    randomize_initial: bool = False

    __hash__ = None

    def __post_init__(self):
        self.validate()
        if self.initial is not None:
            object.__setattr__(self, 'initial', tuple(float(v) for v in self.initial))
        object.__setattr__(self, 'kernel_settings', dict(self.kernel_settings))

    def validate(self) -> None:
        """Raise InvalidConfig listing every problem with this configuration."""
        validate_run_config(asdict(self))

    @classmethod
    def from_dict(cls, run_config: Dict[str, Any]) -> 'RunConfig':
        """Build a RunConfig from a plain dict, filling defaults."""
        return cls(**clean_config(run_config))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def replace(self, **changes) -> 'RunConfig':
        """Return a new, re-validated RunConfig with ``changes`` applied."""
        values = self.to_dict()
        values.update(changes)
        return RunConfig(**values)

    @property
    def min_convergence_samples(self) -> int:
        """Trace length needed before the convergence heuristic can fire."""
        return 2 * self.convergence_window


def configure_precision(use_double: bool) -> None:
    """
    Configure JAX precision for the whole process.

    The package enables 64-bit floats once at import. Precision is global to
    JAX, so switch it before building engines, never between steps of a live
    chain.
    """
    jax.config.update("jax_enable_x64", bool(use_double))


def gen_rng_keys(rng_seed: int) -> Tuple[Any, Any]:
    """Generate JAX random keys from seed.

    Returns:
        (chain_key, init_key): Tuple of JAX PRNGKeys
    """
    mkey = jax.random.PRNGKey(rng_seed)
    chain_key, init_key = random.split(mkey, 2)
    return chain_key, init_key
