"""
Option pricers built on the adaptive cubature engine.

Provides:
- PriceRequest: immutable pricing request with with_updates()
- price_option: Asian / European pricing to a target tolerance
"""

from qmc_pricing.products.asian import (
    PriceRequest,
    deterministic_price,
    payoff_function,
    price_option,
)

__all__ = [
    "PriceRequest",
    "deterministic_price",
    "payoff_function",
    "price_option",
]
