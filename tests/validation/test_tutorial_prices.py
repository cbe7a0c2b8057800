"""
End-to-end prices against closed forms.

[T1] The weekly-monitored geometric mean call (S0=100, r=2%, σ=50%,
K=100, 13 weeks) has a lognormal closed form. Every sampling method must
land within the requested abs_tol = 0.005 of it.

[T1] The EUROPEAN payoff must reproduce Black-Scholes.

References:
    [T1] Kemna & Vorst (1990) geometric average options
    [T1] Hickernell (2014) pricing options using quasi-Monte Carlo sampling
"""

import numpy as np
import pytest

from qmc_pricing.options.payoffs.base import AveragingType, OptionType, PayoffParams
from qmc_pricing.options.pricing.black_scholes import black_scholes_price
from qmc_pricing.options.pricing.geometric_asian import geometric_asian_price
from qmc_pricing.options.simulation.brownian import BrownianConstruction
from qmc_pricing.options.simulation.cubature import EstimatorState, ToleranceSpec
from qmc_pricing.options.simulation.gbm import AssetPathParams
from qmc_pricing.products.asian import PriceRequest, price_option
from qmc_pricing.sampling.base import SamplingMethod


@pytest.mark.validation
class TestGeometricAsianTutorial:
    """[T1] Estimator vs closed form at abs_tol = 0.005."""

    @pytest.mark.parametrize(
        "method,construction",
        [
            (SamplingMethod.SOBOL, BrownianConstruction.SEQUENTIAL),
            (SamplingMethod.SOBOL, BrownianConstruction.PCA),
            (SamplingMethod.LATTICE, BrownianConstruction.PCA),
        ],
    )
    def test_qmc_within_tolerance(
        self, tutorial_request, tutorial_analytic_price, tolerances, method, construction
    ):
        """Sobol' and lattice estimates are within 0.005 of the closed form."""
        result = price_option(
            tutorial_request.with_updates(method=method, construction=construction)
        )

        assert result.status == EstimatorState.CONVERGED
        assert result.error_bound <= tolerances.tutorial
        assert abs(result.price - tutorial_analytic_price) <= tolerances.tutorial, (
            f"{method.value}/{construction.value}: {result.price:.5f} vs "
            f"{tutorial_analytic_price:.5f}"
        )
        assert result.construction == construction

    @pytest.mark.slow
    def test_iid_within_tolerance(self, tutorial_request, tutorial_analytic_price, tolerances):
        """IID sampling reaches the same accuracy, with many more samples."""
        result = price_option(tutorial_request.with_updates(method=SamplingMethod.IID))

        assert result.converged
        assert abs(result.price - tutorial_analytic_price) <= tolerances.tutorial
        assert result.n_samples > 1_000_000

    def test_pca_needs_fewer_samples(self, tutorial_request):
        """PCA concentrates variance in the leading coordinates, so Sobol' needs fewer points."""
        sobol = tutorial_request.with_updates(method=SamplingMethod.SOBOL)
        sequential = price_option(sobol)
        pca = price_option(sobol.with_updates(construction=BrownianConstruction.PCA))

        assert pca.n_samples <= sequential.n_samples

    def test_put(self, tutorial_request):
        """Geometric put vs closed form."""
        request = tutorial_request.with_updates(
            method=SamplingMethod.SOBOL,
            construction=BrownianConstruction.PCA,
            payoff=PayoffParams(AveragingType.GEOMETRIC, OptionType.PUT, 100.0),
        )
        expected = geometric_asian_price(request.asset, 100.0, OptionType.PUT)

        result = price_option(request)

        assert result.converged
        assert abs(result.price - expected) <= 0.005


@pytest.mark.validation
class TestEuropeanVsBlackScholes:
    """[T1] Terminal-price payoff reproduces Black-Scholes with q = 0."""

    @pytest.mark.parametrize("option_type", list(OptionType))
    @pytest.mark.parametrize("strike", [90.0, 100.0, 110.0])
    def test_european(self, option_type, strike):
        """Sobol' + PCA price within 0.01 of Black-Scholes."""
        asset = AssetPathParams(initial_price=100.0, rate=0.03, volatility=0.25, time_vector=(0.5, 1.0))
        request_payoff = PayoffParams(AveragingType.EUROPEAN, option_type, strike)
        expected = black_scholes_price(100.0, strike, 0.03, 0.0, 0.25, 1.0, option_type)

        result = price_option(
            PriceRequest(
                asset=asset,
                payoff=request_payoff,
                tolerance=ToleranceSpec(abs_tol=0.01),
                method=SamplingMethod.SOBOL,
                construction=BrownianConstruction.PCA,
                seed=31,
            )
        )

        assert result.converged
        assert result.price == pytest.approx(expected, abs=0.01)


@pytest.mark.validation
class TestArithmeticAsian:
    """[T1] AM-GM: arithmetic Asian call >= geometric Asian call."""

    def test_arithmetic_above_geometric(self, tutorial_request, tutorial_analytic_price):
        """The arithmetic call is worth more than the geometric closed form."""
        request = tutorial_request.with_updates(
            method=SamplingMethod.SOBOL,
            construction=BrownianConstruction.PCA,
            payoff=PayoffParams(AveragingType.ARITHMETIC, OptionType.CALL, 100.0),
            tolerance=ToleranceSpec(abs_tol=0.01),
        )
        result = price_option(request)

        assert result.converged
        assert result.price > tutorial_analytic_price
        assert np.isfinite(result.error_bound)


@pytest.mark.validation
class TestZeroVolatility:
    """[T1] σ = 0: deterministic payoff, zero error, no sampling."""

    @pytest.mark.parametrize("method", list(SamplingMethod))
    @pytest.mark.parametrize("averaging", [AveragingType.ARITHMETIC, AveragingType.GEOMETRIC])
    def test_deterministic_price(self, tutorial_request, method, averaging, tolerances):
        """Price equals the discounted payoff on the forward curve."""
        asset = AssetPathParams(volatility=0.0)
        request = tutorial_request.with_updates(
            asset=asset,
            method=method,
            payoff=PayoffParams(averaging, OptionType.CALL, 100.0),
        )
        forward = asset.forward_curve()
        average = forward.mean() if averaging == AveragingType.ARITHMETIC else np.exp(np.log(forward).mean())
        expected = asset.discount_factor * max(average - 100.0, 0.0)

        result = price_option(request)

        assert result.status == EstimatorState.CONVERGED
        assert result.error_bound == 0.0
        assert result.n_samples == 1
        assert result.price == pytest.approx(expected, abs=tolerances.analytical)

    def test_matches_geometric_closed_form(self, tolerances):
        """The degenerate closed form agrees with the short-circuit."""
        asset = AssetPathParams(volatility=0.0, rate=0.05)
        result = price_option(PriceRequest(asset=asset))
        assert result.price == pytest.approx(
            geometric_asian_price(asset, 100.0), abs=tolerances.analytical
        )
