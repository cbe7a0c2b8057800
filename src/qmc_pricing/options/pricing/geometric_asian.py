"""
Closed-form price of discretely monitored geometric Asian options.

The geometric mean of log-normal prices is log-normal:

    log G = log S(0) + (r - σ²/2) * mean(t) + σ * mean(W)
    Var[mean(W)] = (1/d²) Σ_i Σ_j min(t_i, t_j)

so the option is a Black-Scholes-type formula on G, discounted from the
last monitoring date.

References
----------
[T1] Kemna, A. & Vorst, A. (1990). A pricing method for options based on
     average asset values. J. Banking & Finance 14, 113-129.
[T1] Glasserman (2003) Section 4.1.2 - Control variates for Asian options.
"""

import numpy as np

from qmc_pricing.options.payoffs.base import OptionType
from qmc_pricing.options.pricing.lognormal import lognormal_option_price
from qmc_pricing.options.simulation.gbm import AssetPathParams


def geometric_mean_moments(params: AssetPathParams) -> tuple[float, float]:
    """
    Mean and standard deviation of log G for the monitoring dates.

    Returns
    -------
    tuple[float, float]
        (μ_G, σ_G)
    """
    t = np.asarray(params.time_vector)
    d = t.size

    log_mean = np.log(params.initial_price) + params.drift * t.mean()
    var_mean_w = np.minimum.outer(t, t).sum() / d**2
    log_std = params.volatility * np.sqrt(var_mean_w)

    return float(log_mean), float(log_std)


def geometric_asian_price(
    params: AssetPathParams,
    strike: float,
    option_type: OptionType = OptionType.CALL,
) -> float:
    """
    Price a discretely monitored geometric Asian option in closed form.

    Parameters
    ----------
    params : AssetPathParams
        Asset parameters and monitoring dates
    strike : float
        Strike price
    option_type : OptionType
        CALL or PUT

    Returns
    -------
    float
        Option price, discounted from the last monitoring date
    """
    log_mean, log_std = geometric_mean_moments(params)
    return lognormal_option_price(
        log_mean, log_std, strike, params.discount_factor, option_type
    )
