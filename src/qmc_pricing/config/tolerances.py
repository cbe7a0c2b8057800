"""
Tolerance tiers for quasi-Monte Carlo option pricing tests and checks.

Each value follows from the precision of the computation it guards.

Tiers:
    Tier 1 (Analytical): closed forms and deterministic paths
    Tier 2 (Point Sets): marginal moments of low-discrepancy sets
    Tier 3 (Stochastic): CLT half-widths and estimator targets

References:
    [T1] Higham (2002) "Accuracy and Stability of Numerical Algorithms"
    [T1] Glasserman (2003) Ch. 3-5 - Monte Carlo and quasi-Monte Carlo
    [T1] Dick & Pillichshammer (2010) "Digital Nets and Sequences"
"""

from typing import Final

import numpy as np

# =============================================================================
# Tier 1: Closed Forms
# =============================================================================

#: Closed-form vs closed-form (e.g. geometric Asian with one date vs BS)
ANALYTICAL_TOLERANCE: Final[float] = 1e-10

#: Deterministic payoff under zero volatility, floating accumulation only
DEGENERATE_PAYOFF_TOLERANCE: Final[float] = 1e-9

#: Covariance reconstruction A @ A.T == min(t_i, t_j)
COVARIANCE_TOLERANCE: Final[float] = 1e-12


# =============================================================================
# Tier 2: Point Sets
# =============================================================================

#: Mean of each coordinate for n >= 1024 low-discrepancy points
QMC_MARGINAL_MEAN_TOLERANCE: Final[float] = 1e-3

#: IID uniform mean for 10k points: 3 * sqrt(1/12) / 100
IID_MARGINAL_MEAN_TOLERANCE: Final[float] = 0.009


# =============================================================================
# Tier 3: Estimator Targets
# =============================================================================

#: Absolute tolerance of the weekly-monitored geometric Asian tutorial
TUTORIAL_ABS_TOLERANCE: Final[float] = 0.005

#: Loose absolute tolerance for quick pricing runs
QUICK_ABS_TOLERANCE: Final[float] = 0.05


def mc_tolerance(n_paths: int, sigma: float = 0.20, confidence: float = 3.0) -> float:
    """
    CLT half-width for an IID sample mean.

    [T1] Standard error of the sample mean is σ/√N; 3σ ≈ 99.7% coverage.

    Parameters
    ----------
    n_paths : int
        Number of samples
    sigma : float
        Standard deviation of the integrand
    confidence : float
        Number of standard errors

    Returns
    -------
    float
        Half-width to compare an estimate against a closed form

    Examples
    --------
    >>> mc_tolerance(10_000, sigma=1.0)
    0.03
    """
    return float(confidence * sigma / np.sqrt(n_paths))


TOLERANCE_REGISTRY: dict[str, float] = {
    "analytical": ANALYTICAL_TOLERANCE,
    "degenerate_payoff": DEGENERATE_PAYOFF_TOLERANCE,
    "covariance": COVARIANCE_TOLERANCE,
    "qmc_marginal_mean": QMC_MARGINAL_MEAN_TOLERANCE,
    "iid_marginal_mean": IID_MARGINAL_MEAN_TOLERANCE,
    "tutorial_abs": TUTORIAL_ABS_TOLERANCE,
    "quick_abs": QUICK_ABS_TOLERANCE,
}


def get_tolerance(name: str) -> float:
    """
    Look up a tolerance by registry name.

    Raises
    ------
    KeyError
        If the name is not registered
    """
    if name not in TOLERANCE_REGISTRY:
        available = ", ".join(sorted(TOLERANCE_REGISTRY))
        raise KeyError(f"Unknown tolerance '{name}'. Available: {available}")
    return TOLERANCE_REGISTRY[name]
