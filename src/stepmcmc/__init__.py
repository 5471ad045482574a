"""
stepmcmc - Incremental MCMC Sampling Package

Public API:
    Engine:
        SamplerEngine - Start / pause / reset / step a single chain
        RunConfig - Validated run configuration
        configure_precision - Switch JAX between 32 and 64 bit floats (64 at import)
        Snapshot - Read-only view of the chain for renderers
        Phase - Engine lifecycle phase (IDLE, RUNNING, PAUSED, COMPLETED)

    Targets:
        TargetModel - Base class for sampler targets
        EmpiricalNormalPosterior - (mu, sigma) posterior of a normal likelihood
        BivariateNormalTarget - Correlated bivariate normal with closed-form conditionals

    Kernels:
        RandomWalkMH - Symmetric random-walk Metropolis-Hastings
        GibbsStep - Sequential conditional sweep
        KernelType - Enum of kernel families
        make_kernel - Build a kernel from a type and settings dict

    Registration:
        register_model - Register a named model
        get_model - Retrieve a registered model
        list_models - List all registered models
        build_engine - Build an engine for a registered model

    Diagnostics:
        check_convergence - Per-dimension convergence heuristic
        summarize_trace - Per-dimension summary statistics
        diagnose_trace / print_diagnostics - Trace health checks
        print_run_summary - Log end-of-run statistics

    Price Paths:
        run_horizon_analysis - GBM horizon summaries (VaR, P(loss), Sharpe)

Example:
    from stepmcmc import build_engine

    engine = build_engine('bivariate_gibbs', step_interval_ms=10)
    unsubscribe = engine.subscribe(lambda snap: print(snap.iteration, snap.trace_mean))
    engine.start()
"""
# CRITICAL: Import jax_config FIRST to set environment variables before JAX loads
from . import jax_config  # noqa: F401

from .error_handling import (
    InvalidConfig,
    InvalidDimension,
    diagnose_trace,
    print_diagnostics,
)
from .targets import TargetModel, EmpiricalNormalPosterior, BivariateNormalTarget
from .kernels import (
    KernelType,
    NoiseType,
    TransitionKernel,
    RandomWalkMH,
    GibbsStep,
    make_kernel,
)
from .mcmc import (
    SamplerEngine,
    RunConfig,
    configure_precision,
    Snapshot,
    SamplerState,
    StateView,
    ConvergenceReport,
    TraceEntry,
    Phase,
    check_convergence,
    summarize_trace,
    print_run_summary,
)
from .registry import register_model, get_model, list_models, clear_registry, build_engine
from .presets import register_presets
from .price_paths import (
    HorizonSummary,
    estimate_gbm_parameters,
    simulate_price_paths,
    summarize_horizon,
    run_horizon_analysis,
)

# Process-wide; call configure_precision(False) before building engines for float32
configure_precision(True)
register_presets()
