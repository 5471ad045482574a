"""
Model Registration System

This module provides a registry of named sampler models. A model pairs a
target factory with a kernel type and default run settings; build_engine()
turns a registered name into a ready SamplerEngine.

Example usage:
    from stepmcmc import register_model, build_engine, KernelType
    from stepmcmc.targets import BivariateNormalTarget

    register_model('tight_gibbs', {
        'target': lambda: BivariateNormalTarget(correlation=0.95),
        'kernel_type': KernelType.GIBBS,
        # optional:
        'kernel_settings': {},
        'run_config': {'max_iterations': 2000, 'burn_in': 200},
        'description': 'Strongly correlated bivariate normal',
    })

    engine = build_engine('tight_gibbs', rng_seed=7)
    engine.start()
"""

from .kernels import make_kernel
from .mcmc.config import RunConfig
from .mcmc.engine import SamplerEngine

import logging
logger = logging.getLogger('stepmcmc')

_REGISTRY = {}


def register_model(name, config):
    """
    Register a sampler model.

    Args:
        name: Unique model identifier string (e.g., 'bivariate_gibbs')
        config: Dict with keys:

            Required:
                target: fn() -> TargetModel
                    Builds a fresh target for each engine.

                kernel_type: KernelType (or its int / name)
                    Kernel family driving the chain.

            Optional:
                kernel_settings: dict forwarded to make_kernel
                run_config: dict of RunConfig defaults for this model
                description: Human readable summary

    Raises:
        ValueError: If required keys are missing or name is already registered.
    """
    if name in _REGISTRY:
        raise ValueError(f"Model '{name}' is already registered")

    required_keys = ['target', 'kernel_type']
    missing = [k for k in required_keys if k not in config]
    if missing:
        raise ValueError(f"Missing required keys for model '{name}': {missing}")

    _REGISTRY[name] = config


def get_model(name):
    """
    Get a registered model configuration by name.

    Raises:
        KeyError: If the model is not registered
    """
    if name not in _REGISTRY:
        available = list(_REGISTRY.keys())
        raise KeyError(f"Unknown model '{name}'. Available: {available}")
    return _REGISTRY[name]


def list_models():
    """List all registered model names."""
    return list(_REGISTRY.keys())


def clear_registry():
    """
    Clear all registered models. Primarily for testing.
    """
    _REGISTRY.clear()


def build_engine(name, **config_overrides):
    """
    Build a SamplerEngine for a registered model.

    Args:
        name: Registered model name
        **config_overrides: RunConfig fields overriding the model's defaults.
            ``kernel_settings`` is merged key by key over the model's settings.

    Returns:
        SamplerEngine in the IDLE phase

    Raises:
        KeyError: Unknown model name
        InvalidConfig: Invalid overrides or kernel settings
    """
    model = get_model(name)

    kernel_settings = dict(model.get('kernel_settings', {}))
    kernel_settings.update(config_overrides.pop('kernel_settings', {}))

    run_config = dict(model.get('run_config', {}))
    run_config.update(config_overrides)
    run_config['kernel_settings'] = kernel_settings

    target = model['target']()
    kernel = make_kernel(model['kernel_type'], kernel_settings)

    logger.debug(f"Building engine for model '{name}' with {kernel!r}")
    return SamplerEngine(target, kernel, RunConfig.from_dict(run_config))
