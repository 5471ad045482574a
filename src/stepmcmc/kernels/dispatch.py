"""
Kernel Dispatch

Builds a kernel from a KernelType and a settings dict, the form used by
registered models and RunConfig.kernel_settings.
"""

from ..error_handling import InvalidConfig
from .common import KernelType
from .gibbs import GibbsStep
from .rand_walk import RandomWalkMH


KERNEL_REGISTRY = {
    int(KernelType.RANDOM_WALK_MH): RandomWalkMH,
    int(KernelType.GIBBS): GibbsStep,
}

# Settings each kernel understands; anything else is a configuration error
KERNEL_SETTING_KEYS = {
    int(KernelType.RANDOM_WALK_MH): {'proposal_scale', 'noise'},
    int(KernelType.GIBBS): set(),
}


def make_kernel(kernel_type, settings=None):
    """
    Create a transition kernel.

    Args:
        kernel_type: KernelType (or its int / name)
        settings: Kernel-specific settings dict

    Returns:
        TransitionKernel instance

    Raises:
        InvalidConfig: Unknown kernel type or unsupported setting
    """
    settings = dict(settings or {})

    if isinstance(kernel_type, str):
        try:
            kernel_type = KernelType[kernel_type.upper()]
        except KeyError:
            raise InvalidConfig(f"Unknown kernel type '{kernel_type}'") from None
    try:
        kernel_type = KernelType(kernel_type)
    except ValueError:
        raise InvalidConfig(f"Unknown kernel type {kernel_type!r}") from None

    unknown = sorted(set(settings) - KERNEL_SETTING_KEYS[int(kernel_type)])
    if unknown:
        raise InvalidConfig(f"{kernel_type} kernel does not accept settings {unknown}")

    return KERNEL_REGISTRY[int(kernel_type)](**settings)
