"""
Transition Kernels for Incremental MCMC

This package implements the kernels the sampler engine can host.

To add a new kernel:
1. Add enum value to KernelType in common.py
2. Create new file in kernels/ directory with a TransitionKernel subclass
3. Add it to KERNEL_REGISTRY and KERNEL_SETTING_KEYS in dispatch.py
4. Export from this __init__.py

All kernels share one entry point:
    advance(key, current, target, current_log_density=None) -> (Transition, new_key)
"""

from .common import (
    KernelType,
    NoiseType,
    Transition,
    TransitionKernel,
    acceptance_probability,
)
from .rand_walk import RandomWalkMH
from .gibbs import GibbsStep
from .dispatch import make_kernel

__all__ = [
    'KernelType',
    'NoiseType',
    'Transition',
    'TransitionKernel',
    'acceptance_probability',
    'RandomWalkMH',
    'GibbsStep',
    'make_kernel',
]
