"""
Pytest configuration and shared fixtures for stepmcmc tests.
"""

import pytest
import jax

from stepmcmc.mcmc.config import RunConfig, configure_precision
from stepmcmc.mcmc.trace import TraceBuffer
from stepmcmc.kernels import GibbsStep, RandomWalkMH
from stepmcmc.targets import BivariateNormalTarget, EmpiricalNormalPosterior
from stepmcmc.registry import _REGISTRY
from stepmcmc.presets import HEIGHT_DATA, HEIGHT_START, register_presets


@pytest.fixture(autouse=True, scope='session')
def double_precision():
    """All tests compare against float64 references."""
    configure_precision(True)


@pytest.fixture
def rng_seed():
    """Default RNG seed for reproducible tests."""
    return 42


@pytest.fixture
def key(rng_seed):
    return jax.random.PRNGKey(rng_seed)


@pytest.fixture
def bivariate_target():
    """Standard bivariate normal, rho = 0.7."""
    return BivariateNormalTarget(mean=(0.0, 0.0), scale=(1.0, 1.0), correlation=0.7)


@pytest.fixture
def height_target():
    """Normal (mu, sigma) posterior over the ten height measurements."""
    return EmpiricalNormalPosterior(HEIGHT_DATA, sigma_floor=0.1, start=HEIGHT_START)


@pytest.fixture
def gibbs_kernel():
    return GibbsStep()


@pytest.fixture
def rw_kernel():
    return RandomWalkMH(proposal_scale=(1.0, 0.5), noise='normal')


@pytest.fixture
def small_config():
    """Short synchronous run: 10 iterations, first 5 discarded."""
    return RunConfig(max_iterations=10, burn_in=5, step_interval_ms=1, trace_cap=100,
                     convergence_window=2)


@pytest.fixture
def fast_config():
    """Long run paced at 1 ms for scheduler tests."""
    return RunConfig(max_iterations=100000, burn_in=0, step_interval_ms=1, trace_cap=100000)


@pytest.fixture
def filled_trace():
    """TraceBuffer of 2-D samples with iterations 1..20 and vector (i, -i)."""
    trace = TraceBuffer(cap=100, dimension=2)
    for i in range(1, 21):
        trace.append(i, (float(i), float(-i)))
    return trace


@pytest.fixture
def clean_registry():
    """
    Fixture giving a test an empty registry and restoring the presets afterwards.

    Usage:
        def test_something(clean_registry):
            register_model(...)
    """
    saved = dict(_REGISTRY)
    _REGISTRY.clear()

    yield  # Run the test

    _REGISTRY.clear()
    _REGISTRY.update(saved)
    register_presets()
