"""
qmc-option-pricing: Asian option pricing with IID and quasi-Monte Carlo sampling.

Quick Start
-----------
>>> from qmc_pricing import PriceRequest, SamplingMethod, ToleranceSpec, price_option
>>> request = PriceRequest(tolerance=ToleranceSpec(abs_tol=0.05), seed=7)
>>> result = price_option(request.with_updates(method=SamplingMethod.SOBOL))
>>> result.converged
True

See Also
--------
- qmc_pricing.tutorial for the IID / Sobol' / lattice comparison

Version: 0.1.0
"""

__version__ = "0.1.0"

# =============================================================================
# Pricing - Primary API
# =============================================================================
from qmc_pricing.products.asian import PriceRequest, payoff_function, price_option

# =============================================================================
# Parameters
# =============================================================================
from qmc_pricing.options.payoffs.base import AveragingType, OptionType, PayoffParams
from qmc_pricing.options.simulation.gbm import AssetPathParams, monitoring_times
from qmc_pricing.options.simulation.brownian import BrownianConstruction

# =============================================================================
# Adaptive Cubature
# =============================================================================
from qmc_pricing.options.simulation.cubature import (
    BudgetExhaustedWarning,
    CubatureEngine,
    EstimatorState,
    PriceEstimate,
    ToleranceSpec,
)

# =============================================================================
# Point Sets
# =============================================================================
from qmc_pricing.sampling import (
    PointSet,
    SamplingMethod,
    centered_discrepancy,
    generate_iid,
    generate_lattice,
    generate_points,
    generate_sobol,
)

# =============================================================================
# Closed Forms
# =============================================================================
from qmc_pricing.options.pricing import (
    black_scholes_call,
    black_scholes_put,
    geometric_asian_price,
)

# =============================================================================
# Configuration
# =============================================================================
from qmc_pricing.config.settings import SETTINGS

__all__ = [
    # Version
    "__version__",
    # Pricing
    "PriceRequest",
    "payoff_function",
    "price_option",
    # Parameters
    "AssetPathParams",
    "AveragingType",
    "BrownianConstruction",
    "OptionType",
    "PayoffParams",
    "monitoring_times",
    # Cubature
    "BudgetExhaustedWarning",
    "CubatureEngine",
    "EstimatorState",
    "PriceEstimate",
    "ToleranceSpec",
    # Point sets
    "PointSet",
    "SamplingMethod",
    "centered_discrepancy",
    "generate_iid",
    "generate_lattice",
    "generate_points",
    "generate_sobol",
    # Closed forms
    "black_scholes_call",
    "black_scholes_put",
    "geometric_asian_price",
    # Config
    "SETTINGS",
]
