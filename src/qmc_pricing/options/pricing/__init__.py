"""
Closed-form option prices used as validation references.

Provides:
- Black-Scholes European call/put
- Discretely monitored geometric Asian call/put (Kemna-Vorst)
"""

from qmc_pricing.options.pricing.black_scholes import (
    black_scholes_call,
    black_scholes_price,
    black_scholes_put,
)
from qmc_pricing.options.pricing.geometric_asian import (
    geometric_asian_price,
    geometric_mean_moments,
)
from qmc_pricing.options.pricing.lognormal import lognormal_option_price

__all__ = [
    # Black-Scholes
    "black_scholes_call",
    "black_scholes_put",
    "black_scholes_price",
    # Geometric Asian
    "geometric_asian_price",
    "geometric_mean_moments",
    # Log-normal
    "lognormal_option_price",
]
