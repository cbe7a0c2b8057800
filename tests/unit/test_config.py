"""
Tests for configuration and the tolerance framework.

Verifies frozen settings, environment overrides, validation and the
tolerance registry.
"""

import dataclasses

import pytest

from qmc_pricing.config.settings import (
    SETTINGS,
    CubatureConfig,
    SamplingConfig,
    Settings,
)
from qmc_pricing.config.tolerances import (
    ANALYTICAL_TOLERANCE,
    TOLERANCE_REGISTRY,
    TUTORIAL_ABS_TOLERANCE,
    get_tolerance,
    mc_tolerance,
)


class TestCubatureConfig:
    """Tests for CubatureConfig."""

    def test_defaults(self, monkeypatch):
        """Defaults: 99% confidence, inflation 1.2, 16 replicates."""
        monkeypatch.delenv("QMC_PRICING_MAX_SAMPLES", raising=False)
        monkeypatch.delenv("QMC_PRICING_SEED", raising=False)
        config = CubatureConfig()
        assert config.alpha == 0.01
        assert config.inflation == 1.2
        assert config.n_init == 1024
        assert config.n_replications == 16
        assert config.max_samples == 2**28
        assert config.seed is None

    def test_frozen(self):
        """Configuration cannot be mutated."""
        config = CubatureConfig()
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.alpha = 0.05  # type: ignore[misc]

    def test_env_overrides(self, monkeypatch):
        """Seed and budget can come from the environment."""
        monkeypatch.setenv("QMC_PRICING_SEED", "123")
        monkeypatch.setenv("QMC_PRICING_MAX_SAMPLES", "4096")
        config = CubatureConfig()
        assert config.seed == 123
        assert config.max_samples == 4096

    def test_explicit_values_beat_env(self, monkeypatch):
        """Explicit arguments win over environment variables."""
        monkeypatch.setenv("QMC_PRICING_SEED", "123")
        config = CubatureConfig(seed=5, max_samples=1000)
        assert config.seed == 5
        assert config.max_samples == 1000

    @pytest.mark.parametrize(
        "kwargs,match",
        [
            ({"alpha": 0.0}, "alpha must be in"),
            ({"alpha": 1.0}, "alpha must be in"),
            ({"inflation": 0.5}, "inflation must be >= 1"),
            ({"n_init": 1}, "n_init must be > 1"),
            ({"n_replications": 1}, "n_replications must be >= 2"),
            ({"max_samples": 0}, "max_samples must be > 0"),
            ({"chunk_size": 0}, "chunk_size must be > 0"),
            ({"chunk_size": 1000}, "chunk_size must be a power of two"),
        ],
    )
    def test_invalid(self, kwargs, match):
        """Invalid settings are rejected at construction."""
        with pytest.raises(ValueError, match=match):
            CubatureConfig(**kwargs)


class TestSettings:
    """Tests for the master settings object."""

    def test_singleton_structure(self):
        """SETTINGS bundles sampling and cubature configs."""
        assert isinstance(SETTINGS, Settings)
        assert isinstance(SETTINGS.sampling, SamplingConfig)
        assert isinstance(SETTINGS.cubature, CubatureConfig)

    def test_sampling_defaults(self):
        """32-bit Sobol' points, lattice up to 2**20 nodes."""
        assert SETTINGS.sampling.sobol_bits == 32
        assert SETTINGS.sampling.lattice_max_log2 == 20
        assert 0 < SETTINGS.sampling.normal_clip < 1e-10


class TestTolerances:
    """Tests for the tolerance registry."""

    def test_registry_lookup(self):
        """Named tolerances resolve through the registry."""
        assert get_tolerance("analytical") == ANALYTICAL_TOLERANCE
        assert get_tolerance("tutorial_abs") == TUTORIAL_ABS_TOLERANCE

    def test_unknown_name(self):
        """Unknown names list the available keys."""
        with pytest.raises(KeyError, match="Available"):
            get_tolerance("nope")

    def test_all_non_negative(self):
        """Every registered tolerance is non-negative."""
        assert all(v >= 0 for v in TOLERANCE_REGISTRY.values())

    def test_mc_tolerance_scaling(self):
        """[T1] CLT tolerance shrinks as 1/√N."""
        assert mc_tolerance(10_000, sigma=1.0) == pytest.approx(0.03)
        assert mc_tolerance(40_000, sigma=1.0) == pytest.approx(0.015)
