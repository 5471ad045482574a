"""
Target Models - Distributions the sampler engine can explore.

A target defines a log density over a fixed-length parameter vector and,
optionally, closed-form conditional draws for Gibbs sweeps. Targets are pure:
their only state is the fixed parameters given at construction, and all
randomness comes from the JAX key passed in by the caller.

Targets:
    EmpiricalNormalPosterior - (mu, sigma) of a Normal model given a fixed
                               observed dataset; Metropolis-Hastings only
    BivariateNormalTarget - correlated 2-D Normal with analytic conditionals;
                            Gibbs or Metropolis-Hastings
"""

import math

import numpy as np
import jax
import jax.numpy as jnp
import jax.random as random
import jax.scipy.stats as stats

from .error_handling import InvalidConfig, InvalidDimension
from .mcmc.types import ParameterVector, as_vector


@jax.jit
def normal_log_likelihood(mu, sigma, data):
    """Log-likelihood of ``data`` under Normal(mu, sigma)."""
    return jnp.sum(stats.norm.logpdf(data, loc=mu, scale=sigma))


@jax.jit
def bivariate_normal_logpdf(x, mean, scale, correlation):
    """Log density of a 2-D Normal with per-axis scale and one correlation."""
    z = (x - mean) / scale
    one_minus_rho2 = 1.0 - correlation ** 2
    quad = (z[0] ** 2 - 2.0 * correlation * z[0] * z[1] + z[1] ** 2) / one_minus_rho2
    log_norm = jnp.log(2.0 * jnp.pi * scale[0] * scale[1] * jnp.sqrt(one_minus_rho2))
    return -0.5 * quad - log_norm


class TargetModel:
    """
    Base class for sampler targets.

    Subclasses must set ``labels`` and implement ``log_density``. Targets that
    can be swept by a Gibbs kernel also set ``supports_conditionals = True``
    and implement ``sample_conditional``.
    """
    labels = ()
    supports_conditionals = False

    @property
    def dimension(self) -> int:
        return len(self.labels)

    def log_density(self, vector: ParameterVector) -> float:
        raise NotImplementedError

    def constrain(self, vector: ParameterVector) -> ParameterVector:
        """Map a raw proposal onto the support (identity unless overridden)."""
        return vector

    def check_dimension(self, dim: int) -> None:
        if not isinstance(dim, (int, np.integer)) or not 0 <= dim < self.dimension:
            raise InvalidDimension(
                f"{type(self).__name__} has dimensions 0..{self.dimension - 1}, got {dim!r}"
            )

    def sample_conditional(self, key, dim: int, vector: ParameterVector) -> float:
        """Draw dimension ``dim`` from its conditional given the rest of ``vector``."""
        raise NotImplementedError(
            f"{type(self).__name__} does not provide conditional distributions"
        )

    def default_initial(self) -> ParameterVector:
        raise NotImplementedError

    def random_initial(self, key) -> ParameterVector:
        raise NotImplementedError

    def __repr__(self):
        return f"{type(self).__name__}(labels={self.labels})"


class EmpiricalNormalPosterior(TargetModel):
    """
    Posterior over (mu, sigma) for a Normal model of a fixed dataset.

    Model:
        x_i ~ Normal(mu, sigma) for i=1..n     [Likelihood]
        flat prior on mu and on sigma > 0

    The log density is the log-likelihood of the data. sigma <= 0 (or any
    non-finite input) has zero density, so such points are always rejected
    by the acceptance test. Proposals are additionally clamped to
    sigma >= sigma_floor before evaluation.
    """
    labels = ('mu', 'sigma')

    def __init__(self, data, sigma_floor=0.1, start=None):
        data = np.asarray(data, dtype=float)
        if data.ndim != 1 or data.size == 0:
            raise InvalidConfig("EmpiricalNormalPosterior needs a non-empty 1-D dataset")
        if not np.all(np.isfinite(data)):
            raise InvalidConfig("EmpiricalNormalPosterior data must be finite")
        if not sigma_floor > 0:
            raise InvalidConfig(f"sigma_floor must be > 0, got {sigma_floor}")

        self.data = data
        self.sigma_floor = float(sigma_floor)

        if start is None:
            start = (float(round(float(np.mean(data)))), max(2.0, self.sigma_floor))
        if len(start) != 2:
            raise InvalidConfig(f"start must be (mu, sigma), got {start!r}")
        self._start = as_vector(start)

    def log_density(self, vector: ParameterVector) -> float:
        mu, sigma = vector
        if not (math.isfinite(mu) and math.isfinite(sigma)) or sigma <= 0:
            return -math.inf
        return float(normal_log_likelihood(mu, sigma, self.data))

    def constrain(self, vector: ParameterVector) -> ParameterVector:
        mu, sigma = vector
        return (mu, max(self.sigma_floor, sigma))

    def default_initial(self) -> ParameterVector:
        return self._start

    def random_initial(self, key) -> ParameterVector:
        """mu uniform over the data range, sigma uniform over [floor, floor + spread]."""
        mu_key, sigma_key = random.split(key)
        lo, hi = float(self.data.min()), float(self.data.max())
        spread = max(hi - lo, self.sigma_floor)
        mu = random.uniform(mu_key, minval=lo, maxval=hi if hi > lo else lo + 1.0)
        sigma = random.uniform(sigma_key, minval=self.sigma_floor,
                               maxval=self.sigma_floor + spread)
        return (float(mu), float(sigma))

    def __repr__(self):
        return f"EmpiricalNormalPosterior(n={self.data.size}, sigma_floor={self.sigma_floor})"


class BivariateNormalTarget(TargetModel):
    """
    Correlated bivariate Normal with closed-form conditionals.

    Conditionals (i != j):
        x_i | x_j ~ Normal(mean_i + rho * (s_i / s_j) * (x_j - mean_j),
                           s_i * sqrt(1 - rho^2))

    Draws use a proper Gaussian generator.
    """
    labels = ('x', 'y')
    supports_conditionals = True

    def __init__(self, mean=(0.0, 0.0), scale=(1.0, 1.0), correlation=0.7):
        errors = []
        if len(mean) != 2:
            errors.append(f"mean must have 2 entries, got {mean!r}")
        if len(scale) != 2:
            errors.append(f"scale must have 2 entries, got {scale!r}")
        elif not all(s > 0 for s in scale):
            errors.append(f"scale entries must be > 0, got {scale!r}")
        if not -1.0 < correlation < 1.0:
            errors.append(f"correlation must be in (-1, 1), got {correlation}")
        if errors:
            raise InvalidConfig("Invalid BivariateNormalTarget:\n  " + "\n  ".join(errors))

        self.mean = as_vector(mean)
        self.scale = as_vector(scale)
        self.correlation = float(correlation)
        self._conditional_sd = tuple(s * math.sqrt(1.0 - self.correlation ** 2)
                                     for s in self.scale)

    def log_density(self, vector: ParameterVector) -> float:
        if not all(math.isfinite(v) for v in vector):
            return -math.inf
        return float(bivariate_normal_logpdf(
            jnp.asarray(vector), jnp.asarray(self.mean), jnp.asarray(self.scale),
            self.correlation,
        ))

    def conditional_params(self, dim: int, vector: ParameterVector):
        """
        Mean and standard deviation of dimension ``dim`` given the other one.

        Returns:
            (conditional_mean, conditional_sd)
        """
        self.check_dimension(dim)
        other = 1 - dim
        cond_mean = (self.mean[dim]
                     + self.correlation * (self.scale[dim] / self.scale[other])
                     * (vector[other] - self.mean[other]))
        return cond_mean, self._conditional_sd[dim]

    def sample_conditional(self, key, dim: int, vector: ParameterVector) -> float:
        cond_mean, cond_sd = self.conditional_params(dim, vector)
        return cond_mean + cond_sd * float(random.normal(key))

    def default_initial(self) -> ParameterVector:
        return self.mean

    def random_initial(self, key) -> ParameterVector:
        """Uniform within one scale unit of the mean on each axis."""
        offsets = random.uniform(key, (2,), minval=-1.0, maxval=1.0)
        return tuple(m + s * float(o) for m, s, o in zip(self.mean, self.scale, offsets))

    def __repr__(self):
        return (f"BivariateNormalTarget(mean={self.mean}, scale={self.scale}, "
                f"correlation={self.correlation})")
