"""
Gibbs Kernel

Sequential sweep over every dimension, each drawn from its exact conditional
given the current values of all the others:

    x_0' ~ p(x_0 | x_1, ..., x_{d-1})
    x_1' ~ p(x_1 | x_0', x_2, ..., x_{d-1})
    ...

Each draw conditions on the dimensions already updated in this sweep. For the
bivariate case this is x | y_old followed by y | x_new; swapping to a
simultaneous update would break the stationary distribution.

Every sweep is accepted, so the returned Transition always has
accepted=True and acceptance_prob=1.0.

Key layout: split(key, d + 1); the first key is handed back to the caller and
key i + 1 drives dimension i.
"""

import jax.random as random

from ..error_handling import InvalidConfig
from .common import KernelType, Transition, TransitionKernel


class GibbsStep(TransitionKernel):
    """Closed-form conditional sweep (requires target.supports_conditionals)."""
    kernel_type = KernelType.GIBBS

    def validate_target(self, target) -> None:
        if not getattr(target, 'supports_conditionals', False):
            raise InvalidConfig(
                f"GibbsStep needs a target with conditional distributions; "
                f"{type(target).__name__} only provides a log density"
            )

    def advance(self, key, current, target, current_log_density=None):
        """
        Run one full sweep.

        Args:
            key: JAX random key
            current: Current ParameterVector
            target: TargetModel with sample_conditional
            current_log_density: Unused (kept for the common kernel interface)

        Returns:
            Transition for the swept state
            new_key: Updated random key
        """
        del current_log_density  # Unused

        keys = random.split(key, len(current) + 1)
        new_key = keys[0]

        state = list(current)
        for dim in range(len(state)):
            state[dim] = float(target.sample_conditional(keys[dim + 1], dim, tuple(state)))

        vector = tuple(state)
        return Transition(vector, target.log_density(vector), True, 1.0), new_key

    def __repr__(self):
        return "GibbsStep()"
