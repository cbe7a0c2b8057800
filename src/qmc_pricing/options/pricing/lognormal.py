"""
Call and put on a log-normal variable.

Both closed forms in this package reduce to it: the terminal price of a
GBM (Black-Scholes) and the discrete geometric average of a GBM
(Kemna-Vorst) are log-normal.

[T1] If log X ~ N(μ, s²):
     E[(X - K)+] = e^(μ + s²/2) N(d1) - K N(d2)
     d2 = (μ - ln K) / s, d1 = d2 + s
"""

import numpy as np
from scipy import stats

from qmc_pricing.options.payoffs.base import OptionType


def lognormal_option_price(
    log_mean: float,
    log_std: float,
    strike: float,
    discount_factor: float,
    option_type: OptionType,
) -> float:
    """
    Discounted call/put on a log-normal variable X.

    Parameters
    ----------
    log_mean : float
        Mean μ of log X
    log_std : float
        Standard deviation s of log X (>= 0)
    strike : float
        Strike price (>= 0)
    discount_factor : float
        Multiplier applied to the expected payoff
    option_type : OptionType
        CALL or PUT

    Returns
    -------
    float
        Option price

    Examples
    --------
    >>> round(lognormal_option_price(0.0, 0.0, 0.5, 1.0, OptionType.CALL), 2)
    0.5
    """
    if log_std < 0:
        raise ValueError(f"CRITICAL: log_std must be >= 0, got {log_std}")
    if strike < 0:
        raise ValueError(f"CRITICAL: strike must be >= 0, got {strike}")

    expected = np.exp(log_mean + 0.5 * log_std**2)

    if strike == 0:
        value = expected if option_type == OptionType.CALL else 0.0
        return float(discount_factor * value)

    if log_std == 0:
        # Degenerate: X = e^μ with certainty
        x = np.exp(log_mean)
        value = max(x - strike, 0.0) if option_type == OptionType.CALL else max(strike - x, 0.0)
        return float(discount_factor * value)

    d2 = (log_mean - np.log(strike)) / log_std
    d1 = d2 + log_std

    if option_type == OptionType.CALL:
        value = expected * stats.norm.cdf(d1) - strike * stats.norm.cdf(d2)
    else:
        value = strike * stats.norm.cdf(-d2) - expected * stats.norm.cdf(-d1)

    return float(discount_factor * value)
