"""
Registry and Preset Tests

Tests model registration and the shipped presets:
- register / get / list / clear semantics
- build_engine overrides and kernel setting merging
- preset configurations

Run with: pytest tests/test_registry.py -v
"""

import pytest

from stepmcmc.error_handling import InvalidConfig
from stepmcmc.kernels import GibbsStep, KernelType, NoiseType, RandomWalkMH
from stepmcmc.mcmc.types import Phase
from stepmcmc.presets import HEIGHT_DATA, PRESET_MODELS
from stepmcmc.registry import (
    build_engine,
    clear_registry,
    get_model,
    list_models,
    register_model,
)
from stepmcmc.targets import BivariateNormalTarget, EmpiricalNormalPosterior


def _tight_bivariate():
    return BivariateNormalTarget(correlation=0.95)


TIGHT_GIBBS = {
    'target': _tight_bivariate,
    'kernel_type': KernelType.GIBBS,
    'run_config': {'max_iterations': 20, 'burn_in': 2},
}


# ============================================================================
# REGISTRATION
# ============================================================================

class TestRegistration:
    """register_model / get_model / list_models / clear_registry."""

    def test_register_and_get(self, clean_registry):
        register_model('tight_gibbs', TIGHT_GIBBS)
        assert get_model('tight_gibbs') is TIGHT_GIBBS
        assert list_models() == ['tight_gibbs']

    def test_duplicate_name(self, clean_registry):
        register_model('tight_gibbs', TIGHT_GIBBS)
        with pytest.raises(ValueError, match="already registered"):
            register_model('tight_gibbs', TIGHT_GIBBS)

    def test_missing_required_keys(self, clean_registry):
        with pytest.raises(ValueError, match="kernel_type"):
            register_model('broken', {'target': _tight_bivariate})

    def test_unknown_model(self, clean_registry):
        register_model('tight_gibbs', TIGHT_GIBBS)
        with pytest.raises(KeyError, match="tight_gibbs"):
            get_model('missing')

    def test_clear_registry(self, clean_registry):
        register_model('tight_gibbs', TIGHT_GIBBS)
        clear_registry()
        assert list_models() == []


# ============================================================================
# BUILD ENGINE
# ============================================================================

class TestBuildEngine:
    """Engines from registered models."""

    def test_build_uses_model_defaults(self, clean_registry):
        register_model('tight_gibbs', TIGHT_GIBBS)
        engine = build_engine('tight_gibbs')

        assert engine.phase is Phase.IDLE
        assert isinstance(engine.kernel, GibbsStep)
        assert engine.target.correlation == 0.95
        assert engine.config.max_iterations == 20
        assert engine.config.burn_in == 2

    def test_overrides(self, clean_registry):
        register_model('tight_gibbs', TIGHT_GIBBS)
        engine = build_engine('tight_gibbs', max_iterations=8, rng_seed=3)
        assert engine.config.max_iterations == 8
        assert engine.config.rng_seed == 3
        assert engine.run().iteration == 8

    def test_each_engine_gets_its_own_target(self, clean_registry):
        register_model('tight_gibbs', TIGHT_GIBBS)
        assert build_engine('tight_gibbs').target is not build_engine('tight_gibbs').target

    def test_kernel_settings_merged(self):
        engine = build_engine('normal_posterior_mh', kernel_settings={'noise': 'uniform'})
        assert engine.kernel.noise == NoiseType.UNIFORM
        assert engine.kernel.settings()['proposal_scale'] == (1.0, 0.5)

    def test_invalid_override(self):
        with pytest.raises(InvalidConfig):
            build_engine('bivariate_gibbs', burn_in=10000)

    def test_unknown_kernel_setting(self):
        with pytest.raises(InvalidConfig):
            build_engine('bivariate_gibbs', kernel_settings={'proposal_scale': 0.5})

    def test_unknown_model(self):
        with pytest.raises(KeyError):
            build_engine('no_such_model')


# ============================================================================
# PRESETS
# ============================================================================

class TestPresets:
    """Shipped demonstration models."""

    def test_presets_registered_on_import(self):
        for name in PRESET_MODELS:
            assert name in list_models()

    def test_normal_posterior_mh(self):
        engine = build_engine('normal_posterior_mh')
        config = engine.config

        assert isinstance(engine.target, EmpiricalNormalPosterior)
        assert tuple(engine.target.data) == HEIGHT_DATA
        assert isinstance(engine.kernel, RandomWalkMH)
        assert engine.get_snapshot().state.current == (175.0, 2.0)
        assert config.max_iterations == 1000
        assert config.step_interval_ms == 20
        assert config.trace_cap == 1000
        assert config.convergence_method == 'recent-std'
        assert config.convergence_window == 500
        assert config.convergence_threshold == 0.5

    def test_bivariate_gibbs(self):
        engine = build_engine('bivariate_gibbs')
        config = engine.config

        assert isinstance(engine.kernel, GibbsStep)
        assert engine.target.correlation == 0.7
        assert config.max_iterations == 5000
        assert config.burn_in == 1000
        assert config.step_interval_ms == 50
        assert config.randomize_initial

    def test_bivariate_rw_mh(self):
        engine = build_engine('bivariate_rw_mh', max_iterations=50, burn_in=10)
        assert isinstance(engine.kernel, RandomWalkMH)
        snapshot = engine.run()
        assert snapshot.phase is Phase.COMPLETED
        assert len(snapshot.trace) == 40

    def test_short_preset_run(self):
        engine = build_engine('normal_posterior_mh', max_iterations=50)
        snapshot = engine.run()
        assert snapshot.iteration == 50
        assert 0.0 < snapshot.acceptance_rate < 1.0
