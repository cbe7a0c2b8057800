"""
Tests for closed-form reference prices.

[T1] A geometric Asian option with a single monitoring date is a European
option, so the lognormal closed form must reproduce Black-Scholes.

References:
    - Kemna & Vorst (1990) geometric average options
    - Hull (2018) Ch. 15 - Black-Scholes-Merton
"""

import numpy as np
import pytest

from qmc_pricing.config.tolerances import ANALYTICAL_TOLERANCE
from qmc_pricing.options.payoffs.base import OptionType
from qmc_pricing.options.pricing.black_scholes import (
    black_scholes_call,
    black_scholes_price,
    black_scholes_put,
)
from qmc_pricing.options.pricing.geometric_asian import geometric_asian_price, geometric_mean_moments
from qmc_pricing.options.pricing.lognormal import lognormal_option_price
from qmc_pricing.options.simulation.gbm import AssetPathParams


class TestBlackScholes:
    """Known answers for Black-Scholes."""

    def test_hull_style_call(self):
        """ATM call, S=K=100, r=5%, q=2%, σ=20%, T=1."""
        assert black_scholes_call(100, 100, 0.05, 0.02, 0.20, 1.0) == pytest.approx(9.227, abs=1e-3)

    def test_put_call_parity(self):
        """[T1] C - P = S e^(-qT) - K e^(-rT)."""
        c = black_scholes_call(100, 95, 0.03, 0.01, 0.25, 0.5)
        p = black_scholes_put(100, 95, 0.03, 0.01, 0.25, 0.5)
        expected = 100 * np.exp(-0.01 * 0.5) - 95 * np.exp(-0.03 * 0.5)
        assert c - p == pytest.approx(expected, abs=ANALYTICAL_TOLERANCE)

    def test_expiry_is_intrinsic(self):
        """At T = 0 the price is the intrinsic value."""
        assert black_scholes_call(110, 100, 0.05, 0.0, 0.2, 0.0) == pytest.approx(10.0)
        assert black_scholes_put(110, 100, 0.05, 0.0, 0.2, 0.0) == pytest.approx(0.0)

    def test_dispatch(self):
        """black_scholes_price routes on option type."""
        args = (100, 100, 0.05, 0.0, 0.2, 1.0)
        assert black_scholes_price(*args, OptionType.PUT) == black_scholes_put(*args)

    def test_invalid_volatility(self):
        """Volatility must be positive."""
        with pytest.raises(ValueError, match="volatility must be > 0"):
            black_scholes_call(100, 100, 0.05, 0.0, 0.0, 1.0)


class TestGeometricAsian:
    """Tests for the discrete geometric Asian closed form."""

    @pytest.mark.parametrize("option_type", list(OptionType))
    @pytest.mark.parametrize("strike", [80.0, 100.0, 125.0])
    def test_single_date_equals_black_scholes(self, option_type, strike):
        """[T1] One monitoring date reduces to Black-Scholes with q = 0."""
        params = AssetPathParams(initial_price=100.0, rate=0.03, volatility=0.3, time_vector=(0.75,))
        expected = black_scholes_price(100.0, strike, 0.03, 0.0, 0.3, 0.75, option_type)
        assert geometric_asian_price(params, strike, option_type) == pytest.approx(
            expected, abs=ANALYTICAL_TOLERANCE
        )

    def test_put_call_parity(self):
        """[T1] C - P = e^(-rT) (E[G] - K)."""
        params = AssetPathParams()
        log_mean, log_std = geometric_mean_moments(params)
        call = geometric_asian_price(params, 100.0, OptionType.CALL)
        put = geometric_asian_price(params, 100.0, OptionType.PUT)
        expected = params.discount_factor * (np.exp(log_mean + 0.5 * log_std**2) - 100.0)
        assert call - put == pytest.approx(expected, abs=ANALYTICAL_TOLERANCE)

    def test_averaging_reduces_call_value(self):
        """Averaging lowers volatility: Asian call < European call to the same date."""
        params = AssetPathParams()
        european = black_scholes_call(100.0, 100.0, 0.02, 0.0, 0.5, params.maturity)
        assert geometric_asian_price(params, 100.0) < european

    def test_tutorial_value(self):
        """Weekly geometric mean call: about 5.92."""
        price = geometric_asian_price(AssetPathParams(), 100.0)
        assert 5.8 < price < 6.05

    def test_moments_match_formula(self):
        """[T1] Var[mean W] = Σ_i Σ_j min(t_i, t_j) / d²."""
        params = AssetPathParams(volatility=0.4, time_vector=(1.0, 2.0))
        _, log_std = geometric_mean_moments(params)
        assert log_std == pytest.approx(0.4 * np.sqrt((1 + 1 + 1 + 2) / 4))

    def test_zero_volatility_is_deterministic(self):
        """σ = 0: the price is the discounted intrinsic value of the forward average."""
        params = AssetPathParams(volatility=0.0, rate=0.05, time_vector=(1.0,))
        price = geometric_asian_price(params, 100.0)
        expected = np.exp(-0.05) * (100.0 * np.exp(0.05) - 100.0)
        assert price == pytest.approx(expected, abs=ANALYTICAL_TOLERANCE)

    def test_zero_strike_call(self):
        """K = 0: the call pays the geometric average."""
        assert lognormal_option_price(0.0, 0.2, 0.0, 1.0, OptionType.CALL) == pytest.approx(
            np.exp(0.02)
        )
        assert lognormal_option_price(0.0, 0.2, 0.0, 1.0, OptionType.PUT) == 0.0

    def test_negative_log_std(self):
        """Standard deviation must be non-negative."""
        with pytest.raises(ValueError, match="log_std must be >= 0"):
            lognormal_option_price(0.0, -0.1, 1.0, 1.0, OptionType.CALL)
