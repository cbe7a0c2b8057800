"""
Independent uniform sampling on the unit cube.

Each coordinate of each point is an independent U[0, 1) draw; no
cross-point structure, so gaps and clusters are expected.
"""

from typing import Optional

import numpy as np

from qmc_pricing.sampling.base import PointSet, SamplingMethod, validate_size


def generate_iid(
    d: int,
    n: int,
    seed: Optional[int] = None,
    rng: Optional[np.random.Generator] = None,
) -> PointSet:
    """
    Generate n independent uniform points in [0, 1)^d.

    Parameters
    ----------
    d : int
        Dimension
    n : int
        Number of points
    seed : int, optional
        Random seed for reproducibility (ignored if rng is given)
    rng : np.random.Generator, optional
        Generator to draw from, so successive batches stay independent

    Returns
    -------
    PointSet
        IID points, shape (n, d)
    """
    validate_size(d, n)

    if rng is None:
        rng = np.random.default_rng(seed)

    return PointSet(
        points=rng.random((n, d)),
        method=SamplingMethod.IID,
        seed=seed,
        randomized=True,
    )
