"""
Option payoffs on monitored price paths.

Provides:
- Call/put and averaging type enumerations
- PayoffParams specification
- Vectorized Asian (arithmetic / geometric) and European payoffs
"""

from qmc_pricing.options.payoffs.asian import AsianPayoff
from qmc_pricing.options.payoffs.base import AveragingType, OptionType, PayoffParams

__all__ = [
    "AsianPayoff",
    "AveragingType",
    "OptionType",
    "PayoffParams",
]
