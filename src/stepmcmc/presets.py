"""
Preset Models - The stock demonstrations shipped with stepmcmc.

normal_posterior_mh:
    Posterior over (mu, sigma) of a normal likelihood given ten height
    measurements, flat prior, random-walk Metropolis-Hastings. Convergence is
    judged by the spread of the last 500 samples.

bivariate_gibbs:
    Standard bivariate normal with correlation 0.7 sampled by alternating
    closed-form conditionals. Starts from a random point in [-1, 1]^2.

bivariate_rw_mh:
    The same bivariate target under random-walk Metropolis-Hastings, for
    comparing mixing against Gibbs.

Call register_presets() to add them to the model registry (the package does
this on import).
"""

from .kernels import KernelType
from .registry import _REGISTRY, register_model
from .targets import BivariateNormalTarget, EmpiricalNormalPosterior

HEIGHT_DATA = (175.0, 172.0, 178.0, 176.0, 174.0, 179.0, 173.0, 177.0, 175.0, 176.0)
HEIGHT_START = (175.0, 2.0)


def _height_posterior():
    return EmpiricalNormalPosterior(HEIGHT_DATA, sigma_floor=0.1, start=HEIGHT_START)


def _bivariate_normal():
    return BivariateNormalTarget(mean=(0.0, 0.0), scale=(1.0, 1.0), correlation=0.7)


PRESET_MODELS = {
    'normal_posterior_mh': {
        'target': _height_posterior,
        'kernel_type': KernelType.RANDOM_WALK_MH,
        'kernel_settings': {'proposal_scale': (1.0, 0.5), 'noise': 'normal'},
        'run_config': {
            'max_iterations': 1000,
            'burn_in': 0,
            'step_interval_ms': 20,
            'trace_cap': 1000,
            'convergence_method': 'recent-std',
            'convergence_window': 500,
            'convergence_threshold': 0.5,
        },
        'description': 'Normal mean/sd posterior for ten height measurements (MH)',
    },
    'bivariate_gibbs': {
        'target': _bivariate_normal,
        'kernel_type': KernelType.GIBBS,
        'run_config': {
            'max_iterations': 5000,
            'burn_in': 1000,
            'step_interval_ms': 50,
            'trace_cap': 5000,
            'convergence_method': 'moving-mean-delta',
            'convergence_window': 100,
            'convergence_threshold': 0.01,
            'randomize_initial': True,
        },
        'description': 'Bivariate normal, rho = 0.7, Gibbs sampling',
    },
    'bivariate_rw_mh': {
        'target': _bivariate_normal,
        'kernel_type': KernelType.RANDOM_WALK_MH,
        'kernel_settings': {'proposal_scale': 1.0, 'noise': 'normal'},
        'run_config': {
            'max_iterations': 5000,
            'burn_in': 1000,
            'step_interval_ms': 50,
            'trace_cap': 5000,
            'convergence_method': 'moving-mean-delta',
            'convergence_window': 100,
            'convergence_threshold': 0.01,
            'randomize_initial': True,
        },
        'description': 'Bivariate normal, rho = 0.7, random-walk MH',
    },
}


def register_presets():
    """Register every preset not already present in the registry."""
    for name, config in PRESET_MODELS.items():
        if name not in _REGISTRY:
            register_model(name, config)
