"""
Path simulation and adaptive cubature for option pricing.

Provides:
- Brownian motion construction (sequential / PCA)
- GBM asset paths at discrete monitoring dates
- Adaptive IID and randomized-QMC cubature engine
"""

from qmc_pricing.options.simulation.brownian import (
    BrownianConstruction,
    brownian_matrix,
    brownian_paths,
    covariance_matrix,
    uniform_to_normal,
)
from qmc_pricing.options.simulation.cubature import (
    BudgetExhaustedWarning,
    CubatureEngine,
    EstimatorState,
    IterationRecord,
    PriceEstimate,
    RunningStats,
    ToleranceSpec,
)
from qmc_pricing.options.simulation.gbm import (
    AssetPathParams,
    generate_asset_paths,
    monitoring_times,
    validate_asset_simulation,
)

__all__ = [
    # Brownian
    "BrownianConstruction",
    "brownian_matrix",
    "brownian_paths",
    "covariance_matrix",
    "uniform_to_normal",
    # GBM
    "AssetPathParams",
    "generate_asset_paths",
    "monitoring_times",
    "validate_asset_simulation",
    # Cubature
    "BudgetExhaustedWarning",
    "CubatureEngine",
    "EstimatorState",
    "IterationRecord",
    "PriceEstimate",
    "RunningStats",
    "ToleranceSpec",
]
