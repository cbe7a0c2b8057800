"""
Discrepancy of point sets.

Quantifies the "gaps and clusters" of a point set: lower is more uniform.
Delegates to scipy.stats.qmc, which implements the closed-form L2-type
discrepancies of Hickernell (1998).
"""

from scipy.stats import qmc

from qmc_pricing.sampling.base import PointSet

#: Discrepancy types understood by scipy.stats.qmc.discrepancy
DISCREPANCY_METHODS: tuple[str, ...] = ("CD", "WD", "MD", "L2-star")


def discrepancy(point_set: PointSet, method: str = "CD") -> float:
    """
    Compute an L2-type discrepancy of a point set.

    Parameters
    ----------
    point_set : PointSet
        Points in [0, 1)^d
    method : str, default "CD"
        "CD" (centered), "WD" (wrap-around), "MD" (mixture) or "L2-star"

    Returns
    -------
    float
        Discrepancy (non-negative)
    """
    if method not in DISCREPANCY_METHODS:
        raise ValueError(
            f"CRITICAL: method must be one of {DISCREPANCY_METHODS}, got {method!r}"
        )
    return float(qmc.discrepancy(point_set.points, method=method))


def centered_discrepancy(point_set: PointSet) -> float:
    """Centered L2 discrepancy (Hickernell 1998)."""
    return discrepancy(point_set, method="CD")
