"""
Point-set dispatch by sampling method.

Used by the adaptive estimator to draw a batch without knowing which
construction is behind it.
"""

from typing import Optional, Union

import numpy as np

from qmc_pricing.sampling.base import PointSet, SamplingMethod, validate_size
from qmc_pricing.sampling.iid import generate_iid
from qmc_pricing.sampling.lattice import LATTICE_MAX_DIMENSION, LatticeGenerator
from qmc_pricing.sampling.sobol import SOBOL_MAX_DIMENSION, SobolGenerator


def max_dimension(method: SamplingMethod) -> Optional[int]:
    """Largest supported dimension, or None if unbounded."""
    if method == SamplingMethod.SOBOL:
        return SOBOL_MAX_DIMENSION
    if method == SamplingMethod.LATTICE:
        return LATTICE_MAX_DIMENSION
    return None


def make_generator(
    method: SamplingMethod,
    d: int,
    rng: np.random.Generator,
    randomize: bool = True,
) -> Union[SobolGenerator, LatticeGenerator]:
    """
    Build one randomized instance of a low-discrepancy construction.

    Parameters
    ----------
    method : SamplingMethod
        SOBOL or LATTICE
    d : int
        Dimension
    rng : np.random.Generator
        Source of the scramble / shift
    randomize : bool, default True
        Scramble (Sobol') or shift (lattice)

    Raises
    ------
    ValueError
        For IID, which has no generator state
    """
    if method == SamplingMethod.SOBOL:
        return SobolGenerator(d, scramble=randomize, rng=rng)
    if method == SamplingMethod.LATTICE:
        return LatticeGenerator(d, shift=randomize, rng=rng)
    raise ValueError(f"CRITICAL: no low-discrepancy generator for {method}")


def generate_points(
    method: SamplingMethod,
    d: int,
    n: int,
    seed: Optional[int] = None,
    randomize: bool = True,
) -> PointSet:
    """
    Generate n points in [0, 1)^d with the given method.

    Parameters
    ----------
    method : SamplingMethod
        IID, SOBOL or LATTICE
    d : int
        Dimension
    n : int
        Number of points
    seed : int, optional
        Random seed
    randomize : bool, default True
        Scramble / shift low-discrepancy points (IID is always random)

    Returns
    -------
    PointSet
        Points, shape (n, d)

    Examples
    --------
    >>> ps = generate_points(SamplingMethod.LATTICE, d=2, n=256, seed=1)
    >>> ps.n, ps.dimension
    (256, 2)
    """
    validate_size(d, n)

    if method == SamplingMethod.IID:
        return generate_iid(d, n, seed=seed)

    generator = make_generator(method, d, np.random.default_rng(seed), randomize)
    point_set = generator.points(n)

    # Generators built from an rng do not know the seed; record it
    return PointSet(
        points=point_set.points,
        method=point_set.method,
        seed=seed,
        randomized=point_set.randomized,
    )
