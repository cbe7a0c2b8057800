"""
Base types for option payoffs.

See: Glasserman (2003) Section 1.2 - Asian options
"""

from dataclasses import dataclass
from enum import Enum

import numpy as np


class OptionType(Enum):
    """Option type enumeration."""

    CALL = "call"
    PUT = "put"


class AveragingType(Enum):
    """How the monitored prices are combined before applying the strike."""

    ARITHMETIC = "amean"  # Arithmetic mean of monitored prices
    GEOMETRIC = "gmean"  # Geometric mean of monitored prices
    EUROPEAN = "euro"  # Price at the last monitoring date only


@dataclass(frozen=True)
class PayoffParams:
    """
    Immutable payoff specification.

    Attributes
    ----------
    averaging : AveragingType
        Arithmetic mean, geometric mean or terminal price
    option_type : OptionType
        CALL or PUT
    strike : float
        Strike price (>= 0)
    """

    averaging: AveragingType = AveragingType.GEOMETRIC
    option_type: OptionType = OptionType.CALL
    strike: float = 100.0

    def __post_init__(self) -> None:
        """Validate parameters."""
        if self.strike < 0:
            raise ValueError(f"CRITICAL: strike must be >= 0, got {self.strike}")

    def intrinsic(self, underlying: np.ndarray) -> np.ndarray:
        """
        Undiscounted payoff given the averaged (or terminal) price.

        [T1] Call: max(A - K, 0)
        [T1] Put:  max(K - A, 0)
        """
        if self.option_type == OptionType.CALL:
            return np.maximum(underlying - self.strike, 0.0)
        return np.maximum(self.strike - underlying, 0.0)
