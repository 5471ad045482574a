"""
Common definitions for transition kernels.

Every kernel exposes the same entry point:

    advance(key, current, target, current_log_density=None) -> (Transition, new_key)

The engine owns the PRNG key; kernels consume the key they are given and
hand back a fresh one, as proposal functions do throughout the package.

Types:
    KernelType: which kernel family to build
    NoiseType: shape of random-walk noise
    Transition: result of one kernel step
"""

import math
from collections import namedtuple
from enum import IntEnum


class KernelType(IntEnum):
    """Enumeration of available transition kernels."""
    RANDOM_WALK_MH = 0   # Symmetric random-walk Metropolis-Hastings
    GIBBS = 1            # Sequential closed-form conditional sweep

    def __str__(self):
        return self.name.replace('_', ' ').title()


class NoiseType(IntEnum):
    """Random-walk increment distributions (both symmetric)."""
    NORMAL = 0    # N(0, scale^2)
    UNIFORM = 1   # U(-scale, scale)

    def __str__(self):
        return self.name.lower()


# vector: next ParameterVector
# log_density: target log density at ``vector``
# accepted: whether the candidate replaced the current state (always True for Gibbs)
# acceptance_prob: alpha for MH, 1.0 for Gibbs
Transition = namedtuple('Transition', ['vector', 'log_density', 'accepted', 'acceptance_prob'])


def acceptance_probability(lp_current, lp_candidate):
    """
    Metropolis acceptance probability min(1, exp(lp_candidate - lp_current)).

    Computed in log space so large differences cannot overflow. Degenerate
    densities are folded in rather than raised:
        - NaN is treated as -inf (zero density)
        - a zero-density candidate is never accepted
        - a finite candidate always replaces a zero-density current state

    Returns:
        float in [0, 1]
    """
    lp_current = -math.inf if math.isnan(lp_current) else lp_current
    lp_candidate = -math.inf if math.isnan(lp_candidate) else lp_candidate

    if lp_candidate == -math.inf:
        return 0.0
    if lp_current == -math.inf:
        return 1.0

    log_ratio = lp_candidate - lp_current
    if math.isnan(log_ratio):
        # +inf - +inf
        return 0.0
    if log_ratio >= 0.0:
        return 1.0
    return math.exp(log_ratio)


class TransitionKernel:
    """
    Base class for transition kernels.

    Subclasses implement ``advance`` and may tighten ``validate_target`` to
    refuse targets they cannot drive.
    """
    kernel_type = None

    def validate_target(self, target) -> None:
        """Raise InvalidConfig if this kernel cannot drive ``target``."""

    def advance(self, key, current, target, current_log_density=None):
        raise NotImplementedError

    def settings(self) -> dict:
        """Settings dict that rebuilds an equivalent kernel via make_kernel."""
        return {}
