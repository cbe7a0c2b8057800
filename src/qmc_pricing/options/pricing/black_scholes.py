"""
Black-Scholes prices for European options.

Reference values for the EUROPEAN payoff and for the one-date limit of the
geometric Asian closed form. Written as the log-normal option formula with

    log S(T) ~ N(log S + (r - q - σ²/2) T, σ² T)

References
----------
[T1] Black, F., & Scholes, M. (1973). The pricing of options and corporate liabilities.
[T1] Hull, J. C. (2018). Options, Futures, and Other Derivatives (10th ed.).
"""

import numpy as np

from qmc_pricing.options.payoffs.base import OptionType
from qmc_pricing.options.pricing.lognormal import lognormal_option_price


def black_scholes_price(
    spot: float,
    strike: float,
    rate: float,
    dividend: float,
    volatility: float,
    time_to_expiry: float,
    option_type: OptionType,
) -> float:
    """
    Price a European call or put.

    [T1] C = S e^(-qT) N(d1) - K e^(-rT) N(d2)
    [T1] P = K e^(-rT) N(-d2) - S e^(-qT) N(-d1)

    Parameters
    ----------
    spot : float
        Current spot price (> 0)
    strike : float
        Strike price (> 0)
    rate : float
        Risk-free rate (decimal)
    dividend : float
        Dividend yield (decimal)
    volatility : float
        Volatility (decimal, > 0)
    time_to_expiry : float
        Time to expiry in years (>= 0)
    option_type : OptionType
        CALL or PUT

    Returns
    -------
    float
        Option price

    Examples
    --------
    >>> round(black_scholes_price(100, 100, 0.05, 0.02, 0.20, 1.0, OptionType.CALL), 2)
    9.23
    """
    if spot <= 0:
        raise ValueError(f"CRITICAL: spot must be > 0, got {spot}")
    if strike <= 0:
        raise ValueError(f"CRITICAL: strike must be > 0, got {strike}")
    if volatility <= 0:
        raise ValueError(f"CRITICAL: volatility must be > 0, got {volatility}")
    if time_to_expiry < 0:
        raise ValueError(f"CRITICAL: time_to_expiry must be >= 0, got {time_to_expiry}")

    # At expiry the lognormal collapses onto the spot
    log_mean = np.log(spot) + (rate - dividend - 0.5 * volatility**2) * time_to_expiry
    log_std = volatility * np.sqrt(time_to_expiry)
    if time_to_expiry == 0:
        log_mean = np.log(spot)

    return lognormal_option_price(
        log_mean, log_std, strike, np.exp(-rate * time_to_expiry), option_type
    )


def black_scholes_call(
    spot: float,
    strike: float,
    rate: float,
    dividend: float,
    volatility: float,
    time_to_expiry: float,
) -> float:
    """European call; see black_scholes_price."""
    return black_scholes_price(
        spot, strike, rate, dividend, volatility, time_to_expiry, OptionType.CALL
    )


def black_scholes_put(
    spot: float,
    strike: float,
    rate: float,
    dividend: float,
    volatility: float,
    time_to_expiry: float,
) -> float:
    """European put; see black_scholes_price."""
    return black_scholes_price(
        spot, strike, rate, dividend, volatility, time_to_expiry, OptionType.PUT
    )
