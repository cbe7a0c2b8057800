"""
Rank-1 lattice node sets with a random shift.

[T1] x_k = {k z / n}, k = 0, ..., n-1, for an integer generating vector z.

For n = 2**m the points are emitted in extensible order
x_i = {phi_2(i) z}, with phi_2 the van der Corput radical inverse, so the
first 2**m points of a 2**(m+1) point set are exactly the 2**m point lattice.
A single uniform shift is added modulo 1 to randomize each instance.

See: Cools, Kuo & Nuyens (2006) "Constructing embedded lattice rules for
     multivariate integration", SIAM J. Sci. Comput. 28, 2162-2188
See: Hickernell et al. (2000) "Extensible lattice sequences for quasi-Monte
     Carlo quadrature"
"""

import logging
from typing import Optional

import numpy as np

from qmc_pricing.config.settings import SETTINGS
from qmc_pricing.sampling.base import PointSet, SamplingMethod, is_power_of_two, validate_size

logger = logging.getLogger(__name__)

#: Embedded base-2 generating vector, good for 2**10 <= n <= 2**20 points
CKN_GENERATING_VECTOR: tuple[int, ...] = (
    1, 182667, 469891, 498753, 110745, 446247, 250185, 118627, 245333,
    283199, 408519, 391023, 246327, 126539, 399185, 461527, 250433,
)

#: Highest dimension covered by the generating vector
LATTICE_MAX_DIMENSION: int = len(CKN_GENERATING_VECTOR)


def radical_inverse_base2(index: np.ndarray, m: int) -> np.ndarray:
    """
    Reverse the lowest m binary digits of each index.

    [T1] phi_2(i) = radical_inverse_base2(i, m) / 2**m for i < 2**m

    Parameters
    ----------
    index : np.ndarray
        Non-negative integers below 2**m
    m : int
        Number of digits

    Returns
    -------
    np.ndarray
        Bit-reversed integers, dtype int64
    """
    index = np.asarray(index, dtype=np.int64)
    reversed_ = np.zeros_like(index)
    for b in range(m):
        reversed_ |= ((index >> b) & 1) << (m - 1 - b)
    return reversed_


class LatticeGenerator:
    """
    One (optionally shifted) instance of the rank-1 lattice.

    Parameters
    ----------
    d : int
        Dimension (1 <= d <= LATTICE_MAX_DIMENSION)
    shift : bool, default True
        Add a uniform random shift modulo 1
    seed : int, optional
        Random seed for the shift
    rng : np.random.Generator, optional
        Generator for the shift (takes precedence over seed)
    generating_vector : tuple[int, ...], optional
        Override of the default embedded vector

    Examples
    --------
    >>> gen = LatticeGenerator(d=2, shift=False)
    >>> gen.points(4).points[:, 0]
    array([0.  , 0.5 , 0.25, 0.75])
    """

    def __init__(
        self,
        d: int,
        shift: bool = True,
        seed: Optional[int] = None,
        rng: Optional[np.random.Generator] = None,
        generating_vector: Optional[tuple[int, ...]] = None,
    ):
        z = CKN_GENERATING_VECTOR if generating_vector is None else generating_vector

        if d <= 0:
            raise ValueError(f"CRITICAL: dimension must be > 0, got {d}")
        if d > len(z):
            raise ValueError(
                f"CRITICAL: lattice dimension must be <= {len(z)}, got {d}"
            )

        self.d = d
        self.z = np.array(z[:d], dtype=np.int64)
        self.seed = seed
        self.shifted = shift

        if shift:
            if rng is None:
                rng = np.random.default_rng(seed)
            self._shift = rng.random(d)
        else:
            self._shift = np.zeros(d)

    @property
    def max_points(self) -> int:
        """Largest point count the generating vector was built for."""
        return 2**SETTINGS.sampling.lattice_max_log2

    def unshifted_points(self, n: int, start: int = 0) -> np.ndarray:
        """
        Lattice nodes before the random shift.

        Points i = start, ..., start + n - 1 use the extensible order whenever
        start > 0 or n is a power of two, so consecutive calls extend the same
        embedded lattice.

        Returns
        -------
        np.ndarray
            Shape (n, d), exact multiples of 1/n (or of 2**-m in extensible order)
        """
        validate_size(self.d, n)
        if start < 0:
            raise ValueError(f"CRITICAL: start must be >= 0, got {start}")
        if start + n > self.max_points:
            raise ValueError(
                f"CRITICAL: at most {self.max_points} lattice points, "
                f"requested up to index {start + n}"
            )

        if start == 0 and not is_power_of_two(n):
            logger.debug(f"Lattice point count {n} is not a power of two; not extensible")
            k = np.arange(n, dtype=np.int64)
            return ((k[:, None] * self.z[None, :]) % n) / float(n)

        m = int(start + n - 1).bit_length()
        k = radical_inverse_base2(np.arange(start, start + n), m)
        return ((k[:, None] * self.z[None, :]) % 2**m) / float(2**m)

    def points(self, n: int, start: int = 0) -> PointSet:
        """
        Generate n (shifted) lattice nodes starting at index start.

        Parameters
        ----------
        n : int
            Number of points
        start : int, default 0
            Index of the first point in the extensible order

        Returns
        -------
        PointSet
            Lattice points in [0, 1)^d, shape (n, d)
        """
        x = self.unshifted_points(n, start)
        if self.shifted:
            x = np.mod(x + self._shift, 1.0)

        return PointSet(
            points=x,
            method=SamplingMethod.LATTICE,
            seed=self.seed,
            randomized=self.shifted,
        )


def generate_lattice(
    d: int,
    n: int,
    seed: Optional[int] = None,
    shift: bool = True,
    rng: Optional[np.random.Generator] = None,
) -> PointSet:
    """
    Generate an n-point rank-1 lattice node set.

    Parameters
    ----------
    d : int
        Dimension
    n : int
        Number of points
    seed : int, optional
        Random seed for the shift
    shift : bool, default True
        Add a uniform random shift modulo 1
    rng : np.random.Generator, optional
        Generator for the shift (takes precedence over seed)

    Returns
    -------
    PointSet
        Lattice points, shape (n, d)
    """
    validate_size(d, n)
    return LatticeGenerator(d, shift=shift, seed=seed, rng=rng).points(n)
