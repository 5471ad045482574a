"""
Random Walk Metropolis-Hastings Kernel

Simple random walk with independent symmetric noise on every dimension.

Proposal: x' = x + scale * eps
where:
    - eps ~ N(0, 1)           (noise='normal', default)
    - eps ~ U(-1, 1)          (noise='uniform')
    - scale is a scalar or one value per dimension (proposal_scale)

Acceptance: alpha = min(1, exp(log p(x') - log p(x))), accept iff U(0,1) < alpha.

Hastings ratio: omitted. Both noise shapes are symmetric, q(x'|x) = q(x|x'),
so the correction factor is exactly 1. The target's ``constrain`` hook (e.g.
the sigma floor of EmpiricalNormalPosterior) is applied to the candidate
before the acceptance test; that clamp is a documented simplification.

Settings:
    proposal_scale - positive float or per-dimension sequence (default 1.0)
    noise          - 'normal' or 'uniform' (default 'normal')
"""

import numpy as np
import jax.random as random

from ..error_handling import InvalidConfig
from .common import (
    KernelType,
    NoiseType,
    Transition,
    TransitionKernel,
    acceptance_probability,
)


def _parse_noise(noise) -> NoiseType:
    if isinstance(noise, NoiseType):
        return noise
    if isinstance(noise, str):
        try:
            return NoiseType[noise.upper()]
        except KeyError:
            pass
    raise InvalidConfig(f"noise must be 'normal' or 'uniform', got {noise!r}")


class RandomWalkMH(TransitionKernel):
    """Symmetric random-walk Metropolis-Hastings kernel."""
    kernel_type = KernelType.RANDOM_WALK_MH

    def __init__(self, proposal_scale=1.0, noise='normal'):
        scale = np.atleast_1d(np.asarray(proposal_scale, dtype=float))
        if scale.ndim != 1 or scale.size == 0:
            raise InvalidConfig(f"proposal_scale must be a number or flat sequence, got {proposal_scale!r}")
        if not np.all(np.isfinite(scale)) or np.any(scale <= 0):
            raise InvalidConfig(f"proposal_scale must be > 0, got {proposal_scale!r}")

        self.proposal_scale = scale
        self.noise = _parse_noise(noise)

    def validate_target(self, target) -> None:
        if self.proposal_scale.size not in (1, target.dimension):
            raise InvalidConfig(
                f"proposal_scale has {self.proposal_scale.size} entries but "
                f"{type(target).__name__} has {target.dimension} dimensions"
            )

    def propose(self, key, current):
        """
        Perturb every dimension of ``current`` with symmetric noise.

        Returns:
            candidate: New ParameterVector
            new_key: Updated random key
        """
        new_key, proposal_key = random.split(key)
        shape = (len(current),)
        if self.noise == NoiseType.UNIFORM:
            eps = random.uniform(proposal_key, shape, minval=-1.0, maxval=1.0)
        else:
            eps = random.normal(proposal_key, shape)
        step = np.asarray(eps, dtype=float) * self.proposal_scale
        candidate = tuple(float(c + s) for c, s in zip(current, step))
        return candidate, new_key

    def accept(self, key, current, candidate, target, current_log_density=None):
        """
        Metropolis acceptance test.

        Args:
            key: JAX random key
            current: Current ParameterVector
            candidate: Proposed ParameterVector
            target: TargetModel providing log_density
            current_log_density: Cached log density at ``current`` (recomputed if None)

        Returns:
            Transition with the candidate if accepted, else ``current`` unchanged
            new_key: Updated random key
        """
        if current_log_density is None:
            current_log_density = target.log_density(current)
        candidate_log_density = target.log_density(candidate)

        alpha = acceptance_probability(current_log_density, candidate_log_density)

        new_key, accept_key = random.split(key)
        draw = float(random.uniform(accept_key))
        accepted = draw < alpha

        if accepted:
            return Transition(candidate, candidate_log_density, True, alpha), new_key
        return Transition(current, current_log_density, False, alpha), new_key

    def advance(self, key, current, target, current_log_density=None):
        candidate, key = self.propose(key, current)
        candidate = target.constrain(candidate)
        return self.accept(key, current, candidate, target, current_log_density)

    def settings(self) -> dict:
        scale = self.proposal_scale
        return {
            'proposal_scale': float(scale[0]) if scale.size == 1 else tuple(scale.tolist()),
            'noise': str(self.noise),
        }

    def __repr__(self):
        return f"RandomWalkMH(proposal_scale={self.settings()['proposal_scale']}, noise='{self.noise}')"
