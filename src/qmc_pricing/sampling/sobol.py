"""
Sobol' sequence with linear matrix scrambling and digital shift.

Implements the base-2 digital (t, s)-sequence of Sobol' (1967):
- Direction numbers from Joe & Kuo (2008), file new-joe-kuo-6.21201
- Natural (non Gray code) ordering: point k uses the binary digits of k
- Matousek (1998) random linear scramble: each coordinate's generator
  matrix is left-multiplied by a random non-singular lower-triangular
  binary matrix
- Random digital shift (XOR) after the scramble

Each scrambled instance is still a (t, s)-sequence, so the first 2**m points
keep their stratification; independent instances are unbiased estimators of
the integral, which is what the replicated error estimate relies on.

[T1] Points are integers on a 2**-bits grid, so coordinates are exactly
representable in float64 and lie in [0, 1).

See: Joe & Kuo (2008) "Constructing Sobol sequences with better
     two-dimensional projections", SIAM J. Sci. Comput. 30, 2635-2654
See: Matousek (1998) "On the L2-discrepancy for anchored boxes"
See: Owen (2003) "Variance with alternative scramblings of digital nets"
"""

import logging
from typing import Optional

import numpy as np

from qmc_pricing.config.settings import SETTINGS
from qmc_pricing.sampling.base import PointSet, SamplingMethod, is_power_of_two, validate_size

logger = logging.getLogger(__name__)


# (degree s, polynomial coefficients a, initial direction integers m_1..m_s)
# for dimensions 2, 3, ...; dimension 1 uses m_k = 1 for all k.
_JOE_KUO_DIRECTIONS: tuple[tuple[int, int, tuple[int, ...]], ...] = (
    (1, 0, (1,)),
    (2, 1, (1, 3)),
    (3, 1, (1, 3, 1)),
    (3, 2, (1, 1, 1)),
    (4, 1, (1, 1, 3, 3)),
    (4, 4, (1, 3, 5, 13)),
    (5, 2, (1, 1, 5, 5, 17)),
    (5, 4, (1, 1, 5, 5, 5)),
    (5, 7, (1, 1, 7, 11, 19)),
    (5, 11, (1, 1, 5, 1, 1)),
    (5, 13, (1, 1, 1, 3, 11)),
    (5, 14, (1, 3, 5, 5, 31)),
    (6, 1, (1, 3, 3, 9, 7, 49)),
    (6, 13, (1, 1, 1, 15, 21, 21)),
    (6, 16, (1, 3, 1, 13, 27, 49)),
    (6, 19, (1, 1, 1, 15, 7, 5)),
    (6, 22, (1, 3, 1, 15, 13, 25)),
    (6, 25, (1, 1, 5, 5, 19, 61)),
    (7, 1, (1, 3, 7, 11, 23, 15, 103)),
    (7, 4, (1, 3, 7, 13, 13, 15, 69)),
    (7, 7, (1, 1, 3, 13, 7, 35, 63)),
    (7, 8, (1, 3, 5, 9, 1, 25, 53)),
    (7, 14, (1, 3, 1, 13, 9, 35, 107)),
    (7, 19, (1, 3, 1, 5, 27, 61, 31)),
    (7, 21, (1, 1, 5, 11, 19, 41, 61)),
    (7, 28, (1, 3, 5, 3, 3, 13, 69)),
    (7, 31, (1, 1, 7, 13, 1, 19, 1)),
    (7, 32, (1, 3, 7, 5, 13, 19, 59)),
    (7, 37, (1, 1, 3, 9, 25, 29, 41)),
    (7, 41, (1, 3, 5, 13, 23, 1, 55)),
    (7, 42, (1, 3, 7, 3, 13, 59, 17)),
)

#: Highest dimension with tabulated direction numbers
SOBOL_MAX_DIMENSION: int = len(_JOE_KUO_DIRECTIONS) + 1


def direction_numbers(d: int, bits: int = SETTINGS.sampling.sobol_bits) -> np.ndarray:
    """
    Compute Sobol' direction numbers as left-aligned integers.

    [T1] Recurrence (Joe & Kuo 2008, eq. 2):
    m_k = 2 a_1 m_{k-1} ^ 4 a_2 m_{k-2} ^ ... ^ 2^s m_{k-s} ^ m_{k-s}

    Parameters
    ----------
    d : int
        Dimension
    bits : int
        Precision; direction number k is m_k * 2**(bits - k)

    Returns
    -------
    np.ndarray
        Shape (d, bits), dtype uint64; column k generates digit k of the index
    """
    if d <= 0:
        raise ValueError(f"CRITICAL: dimension must be > 0, got {d}")
    if d > SOBOL_MAX_DIMENSION:
        raise ValueError(
            f"CRITICAL: Sobol' dimension must be <= {SOBOL_MAX_DIMENSION}, got {d}"
        )
    # float64 holds 53 significant bits; more would round points up to 1.0
    if not 1 <= bits <= 53:
        raise ValueError(f"CRITICAL: bits must be in [1, 53], got {bits}")

    v = np.zeros((d, bits), dtype=np.uint64)
    for k in range(bits):
        v[0, k] = 1 << (bits - 1 - k)

    for j in range(1, d):
        s, a, m_init = _JOE_KUO_DIRECTIONS[j - 1]
        m = list(m_init)
        for k in range(s, bits):
            new = m[k - s] ^ (m[k - s] << s)
            for i in range(1, s):
                if (a >> (s - 1 - i)) & 1:
                    new ^= m[k - i] << i
            m.append(new)
        for k in range(bits):
            v[j, k] = m[k] << (bits - 1 - k)

    return v


def _to_digits(values: np.ndarray, bits: int) -> np.ndarray:
    """Split integers into binary digits, most significant first."""
    shifts = np.arange(bits - 1, -1, -1, dtype=np.uint64)
    return ((values[..., None] >> shifts) & np.uint64(1)).astype(np.int64)


def _from_digits(digits: np.ndarray, bits: int) -> np.ndarray:
    """Inverse of _to_digits."""
    weights = np.uint64(1) << np.arange(bits - 1, -1, -1, dtype=np.uint64)
    return (digits.astype(np.uint64) * weights).sum(axis=-1, dtype=np.uint64)


def linear_matrix_scramble(
    directions: np.ndarray,
    bits: int,
    rng: np.random.Generator,
) -> np.ndarray:
    """
    Apply a random lower-triangular matrix scramble to direction numbers.

    [T1] C'_j = L_j C_j over GF(2), with L_j unit lower-triangular, so C'_j
    is non-singular whenever C_j is and the net property is preserved.

    Parameters
    ----------
    directions : np.ndarray
        Direction numbers, shape (d, n_columns), left-aligned to bits
    bits : int
        Precision of the integers
    rng : np.random.Generator
        Source of the random matrix entries

    Returns
    -------
    np.ndarray
        Scrambled direction numbers, same shape and dtype
    """
    d = directions.shape[0]
    lower = np.tril(rng.integers(0, 2, size=(d, bits, bits)), k=-1)
    lower[:, np.arange(bits), np.arange(bits)] = 1

    digits = _to_digits(directions, bits)  # (d, n_columns, bits)
    scrambled = np.einsum("jrc,jkc->jkr", lower, digits) % 2

    return _from_digits(scrambled, bits)


class SobolGenerator:
    """
    One (optionally randomized) instance of the Sobol' sequence.

    Holds the scrambled generator matrices and digital shift so that
    successive calls to points() continue the same sequence.

    Parameters
    ----------
    d : int
        Dimension
    scramble : bool, default True
        Apply linear matrix scramble and digital shift
    seed : int, optional
        Random seed for the scramble
    rng : np.random.Generator, optional
        Generator for the scramble (takes precedence over seed)
    bits : int
        Precision of the integer representation

    Examples
    --------
    >>> gen = SobolGenerator(d=2, scramble=False)
    >>> gen.points(4).points[:, 0]
    array([0.  , 0.5 , 0.25, 0.75])
    """

    def __init__(
        self,
        d: int,
        scramble: bool = True,
        seed: Optional[int] = None,
        rng: Optional[np.random.Generator] = None,
        bits: int = SETTINGS.sampling.sobol_bits,
    ):
        directions = direction_numbers(d, bits)

        self.d = d
        self.bits = bits
        self.scramble = scramble
        self.seed = seed

        if scramble:
            if rng is None:
                rng = np.random.default_rng(seed)
            self._directions = linear_matrix_scramble(directions, bits, rng)
            self._shift = rng.integers(0, 2**bits, size=d, dtype=np.uint64)
        else:
            self._directions = directions
            self._shift = np.zeros(d, dtype=np.uint64)

    @property
    def max_points(self) -> int:
        """Number of distinct indices representable with the chosen precision."""
        return 2**self.bits

    def integer_points(self, n: int, start: int = 0) -> np.ndarray:
        """
        Points k = start, ..., start + n - 1 as integers on the 2**-bits grid.

        Returns
        -------
        np.ndarray
            Shape (n, d), dtype uint64
        """
        validate_size(self.d, n)
        if start < 0:
            raise ValueError(f"CRITICAL: start must be >= 0, got {start}")
        if start + n > self.max_points:
            raise ValueError(
                f"CRITICAL: at most {self.max_points} Sobol' points with "
                f"{self.bits} bits, requested up to index {start + n}"
            )

        index = np.arange(start, start + n, dtype=np.uint64)
        x = np.zeros((n, self.d), dtype=np.uint64)

        # x_k = XOR of direction numbers selected by the binary digits of k
        n_digits = int(start + n - 1).bit_length()
        for b in range(n_digits):
            selected = ((index >> np.uint64(b)) & np.uint64(1)).astype(bool)
            x[selected] ^= self._directions[:, b]

        return x ^ self._shift

    def points(self, n: int, start: int = 0) -> PointSet:
        """
        Generate n points of this instance, starting at index start.

        Parameters
        ----------
        n : int
            Number of points (a power of two realizes the net property)
        start : int, default 0
            Index of the first point

        Returns
        -------
        PointSet
            Points in [0, 1)^d, shape (n, d)
        """
        if not is_power_of_two(n):
            logger.debug(
                f"Sobol' point count {n} is not a power of two; "
                "equidistribution guarantees are weaker"
            )

        x = self.integer_points(n, start)
        return PointSet(
            points=x.astype(np.float64) / float(2**self.bits),
            method=SamplingMethod.SOBOL,
            seed=self.seed,
            randomized=self.scramble,
        )


def generate_sobol(
    d: int,
    n: int,
    seed: Optional[int] = None,
    scramble: bool = True,
    rng: Optional[np.random.Generator] = None,
) -> PointSet:
    """
    Generate the first n points of a (scrambled) Sobol' sequence.

    Parameters
    ----------
    d : int
        Dimension (1 <= d <= SOBOL_MAX_DIMENSION)
    n : int
        Number of points
    seed : int, optional
        Random seed for the scramble
    scramble : bool, default True
        Apply linear matrix scramble plus digital shift
    rng : np.random.Generator, optional
        Generator for the scramble (takes precedence over seed)

    Returns
    -------
    PointSet
        Sobol' points, shape (n, d)

    Examples
    --------
    >>> ps = generate_sobol(d=13, n=1024, seed=7)
    >>> ps.points.shape
    (1024, 13)
    """
    validate_size(d, n)
    generator = SobolGenerator(d, scramble=scramble, seed=seed, rng=rng)
    return generator.points(n)
