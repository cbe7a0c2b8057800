"""
Integration tests for the pricing workflow.

Tests request handling end to end: immutable requests, validation before
sampling, budget exhaustion reporting and the environment seed override.
"""

import dataclasses

import pytest

from qmc_pricing import (
    AssetPathParams,
    BrownianConstruction,
    BudgetExhaustedWarning,
    EstimatorState,
    PriceRequest,
    SamplingMethod,
    ToleranceSpec,
    price_option,
)
from qmc_pricing.config.settings import CubatureConfig
from qmc_pricing.options.simulation.gbm import monitoring_times


class TestPriceRequest:
    """Tests for PriceRequest immutability and with_updates."""

    def test_with_updates_returns_new_request(self, tutorial_request):
        """Switching the method leaves the original untouched."""
        sobol = tutorial_request.with_updates(method=SamplingMethod.SOBOL)

        assert sobol is not tutorial_request
        assert sobol.method == SamplingMethod.SOBOL
        assert tutorial_request.method == SamplingMethod.IID
        assert sobol.asset == tutorial_request.asset
        assert sobol.payoff == tutorial_request.payoff

    def test_chained_updates(self, tutorial_request):
        """Each update keeps the earlier ones."""
        lattice_pca = tutorial_request.with_updates(
            method=SamplingMethod.SOBOL
        ).with_updates(
            construction=BrownianConstruction.PCA
        ).with_updates(method=SamplingMethod.LATTICE)

        assert lattice_pca.method == SamplingMethod.LATTICE
        assert lattice_pca.construction == BrownianConstruction.PCA

    def test_frozen(self, tutorial_request):
        """Requests cannot be mutated in place."""
        with pytest.raises(dataclasses.FrozenInstanceError):
            tutorial_request.method = SamplingMethod.SOBOL  # type: ignore[misc]

    def test_unknown_field(self, tutorial_request):
        """Unknown fields are rejected."""
        with pytest.raises(TypeError):
            tutorial_request.with_updates(n_paths=1000)

    def test_too_many_dates_for_lattice(self, tutorial_request):
        """A lattice request beyond the generating vector fails before sampling."""
        long_asset = AssetPathParams(time_vector=monitoring_times(20))
        request = tutorial_request.with_updates(asset=long_asset)
        with pytest.raises(ValueError, match="at most 17 monitoring dates"):
            request.with_updates(method=SamplingMethod.LATTICE)

    def test_iid_has_no_dimension_limit(self, tutorial_request):
        """IID accepts any number of monitoring dates."""
        long_asset = AssetPathParams(time_vector=monitoring_times(52))
        assert tutorial_request.with_updates(asset=long_asset).asset.dimension == 52


class TestPriceOption:
    """End-to-end price_option runs at a loose tolerance."""

    @pytest.mark.parametrize("method", list(SamplingMethod))
    def test_all_methods_converge(
        self, quick_request, tutorial_analytic_price, tolerances, method
    ):
        """Every method converges at abs_tol = 0.05."""
        result = price_option(
            quick_request.with_updates(method=method, construction=BrownianConstruction.PCA)
        )

        assert result.converged
        assert result.method == method
        assert result.n_samples > 0
        assert result.time_elapsed >= 0.0
        assert abs(result.price - tutorial_analytic_price) <= tolerances.quick

    def test_history_ends_at_result(self, quick_request):
        """The last history record is the reported estimate."""
        result = price_option(quick_request.with_updates(method=SamplingMethod.SOBOL))

        last = result.history[-1]
        assert last.n_samples == result.n_samples
        assert last.estimate == result.price
        assert last.met

    def test_budget_exhaustion_is_reported(self, tutorial_request, tiny_budget_config):
        """A tiny budget is flagged, never reported as converged."""
        request = tutorial_request.with_updates(
            method=SamplingMethod.SOBOL,
            tolerance=ToleranceSpec(abs_tol=1e-6),
            config=tiny_budget_config,
        )
        with pytest.warns(BudgetExhaustedWarning):
            result = price_option(request)

        assert result.status == EstimatorState.EXHAUSTED_BUDGET
        assert not result.converged
        assert result.error_bound > 1e-6

    def test_env_seed_makes_runs_reproducible(self, quick_request, monkeypatch):
        """QMC_PRICING_SEED applies when the request has no seed."""
        monkeypatch.setenv("QMC_PRICING_SEED", "77")
        request = quick_request.with_updates(
            seed=None, method=SamplingMethod.LATTICE, config=CubatureConfig()
        )
        a = price_option(request)
        b = price_option(request.with_updates(config=CubatureConfig()))
        assert a.price == b.price
