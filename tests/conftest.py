"""
Centralized pytest fixtures for qmc-option-pricing test suite.

This module provides shared fixtures used across all test categories:
- unit/
- properties/
- validation/
- integration/

Fixture Categories:
1. Tutorial Parameters - Weekly-monitored geometric Asian call
2. Estimator Configuration - Small budgets for fast runs
3. Random State - Seeded generators
"""

from dataclasses import dataclass

import numpy as np
import pytest

from qmc_pricing.config.settings import CubatureConfig
from qmc_pricing.config.tolerances import (
    ANALYTICAL_TOLERANCE,
    QUICK_ABS_TOLERANCE,
    TUTORIAL_ABS_TOLERANCE,
)
from qmc_pricing.options.payoffs.base import AveragingType, OptionType, PayoffParams
from qmc_pricing.options.pricing.geometric_asian import geometric_asian_price
from qmc_pricing.options.simulation.cubature import ToleranceSpec
from qmc_pricing.options.simulation.gbm import AssetPathParams, monitoring_times
from qmc_pricing.products.asian import PriceRequest

# =============================================================================
# TOLERANCE TIERS
# =============================================================================

@dataclass(frozen=True)
class ToleranceTiers:
    """Tolerance tiers shared by the test categories."""

    # Closed form vs closed form
    analytical: float = ANALYTICAL_TOLERANCE

    # Estimator vs closed form at the tutorial tolerance
    tutorial: float = TUTORIAL_ABS_TOLERANCE

    # Quick estimator runs
    quick: float = QUICK_ABS_TOLERANCE


TOLERANCES = ToleranceTiers()


@pytest.fixture(scope="session")
def tolerances() -> ToleranceTiers:
    """Provide tiered tolerance settings for all tests."""
    return TOLERANCES


# =============================================================================
# TUTORIAL PARAMETERS
# =============================================================================

@pytest.fixture
def tutorial_asset() -> AssetPathParams:
    """S0=100, r=2%, σ=50%, weekly monitoring for 13 weeks."""
    return AssetPathParams(
        initial_price=100.0,
        rate=0.02,
        volatility=0.5,
        time_vector=monitoring_times(13),
    )


@pytest.fixture
def tutorial_payoff() -> PayoffParams:
    """Geometric mean call struck at 100."""
    return PayoffParams(
        averaging=AveragingType.GEOMETRIC,
        option_type=OptionType.CALL,
        strike=100.0,
    )


@pytest.fixture
def tutorial_analytic_price(tutorial_asset, tutorial_payoff) -> float:
    """Closed-form geometric Asian call price."""
    return geometric_asian_price(
        tutorial_asset, tutorial_payoff.strike, tutorial_payoff.option_type
    )


@pytest.fixture
def tutorial_request(tutorial_asset, tutorial_payoff) -> PriceRequest:
    """Tutorial request at abs_tol = 0.005, seeded."""
    return PriceRequest(
        asset=tutorial_asset,
        payoff=tutorial_payoff,
        tolerance=ToleranceSpec(abs_tol=0.005, rel_tol=0.0),
        seed=2024,
    )


@pytest.fixture
def quick_request(tutorial_asset, tutorial_payoff) -> PriceRequest:
    """Tutorial option at a loose tolerance for fast runs."""
    return PriceRequest(
        asset=tutorial_asset,
        payoff=tutorial_payoff,
        tolerance=ToleranceSpec(abs_tol=0.05, rel_tol=0.0),
        seed=7,
    )


# =============================================================================
# ESTIMATOR CONFIGURATION
# =============================================================================

@pytest.fixture
def small_config() -> CubatureConfig:
    """Small batches and a seed so unit runs stay fast and reproducible."""
    return CubatureConfig(n_init=256, n_replications=8, max_samples=2**22, seed=11)


@pytest.fixture
def tiny_budget_config() -> CubatureConfig:
    """A budget far too small for any realistic tolerance."""
    return CubatureConfig(n_init=64, n_replications=4, max_samples=2**10, seed=3)


# =============================================================================
# RANDOM STATE
# =============================================================================

@pytest.fixture
def reproducible_rng() -> np.random.Generator:
    """Seeded generator for test data."""
    return np.random.default_rng(42)
