"""
Base types for point sets in the unit cube.

See: Dick & Pillichshammer (2010) "Digital Nets and Sequences"
See: Glasserman (2003) Ch. 5 - Quasi-Monte Carlo
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

import numpy as np


class SamplingMethod(Enum):
    """Point-set generation method."""

    IID = "iid"
    SOBOL = "sobol"
    LATTICE = "lattice"

    @property
    def is_low_discrepancy(self) -> bool:
        """True for deterministic constructions (Sobol', lattice)."""
        return self is not SamplingMethod.IID


@dataclass(frozen=True)
class PointSet:
    """
    Immutable set of n points in [0, 1)^d.

    Attributes
    ----------
    points : np.ndarray
        Coordinates, shape (n, d)
    method : SamplingMethod
        How the points were generated
    seed : int, optional
        Seed of the randomization (None when unrandomized or unseeded)
    randomized : bool
        Whether a scramble / shift was applied
    """

    points: np.ndarray
    method: SamplingMethod
    seed: Optional[int] = None
    randomized: bool = True

    def __post_init__(self) -> None:
        """Validate shape and range, then freeze a private copy of the array."""
        object.__setattr__(self, "points", np.array(self.points, dtype=float, copy=True))
        if self.points.ndim != 2:
            raise ValueError(
                f"CRITICAL: points must be 2-D (n, d), got shape {self.points.shape}"
            )
        if self.points.size and (self.points.min() < 0.0 or self.points.max() >= 1.0):
            raise ValueError("CRITICAL: points must lie in [0, 1)")
        self.points.setflags(write=False)

    @property
    def n(self) -> int:
        """Number of points."""
        return self.points.shape[0]

    @property
    def dimension(self) -> int:
        """Dimension of each point."""
        return self.points.shape[1]

    def coordinate_pairs(self, i: int = 0, j: int = 1) -> tuple[np.ndarray, np.ndarray]:
        """
        Return two coordinates as read-only arrays, e.g. for a scatter plot.

        Parameters
        ----------
        i, j : int
            Coordinate indices (0-based)
        """
        if not (0 <= i < self.dimension and 0 <= j < self.dimension):
            raise ValueError(
                f"CRITICAL: coordinates must be in [0, {self.dimension}), got ({i}, {j})"
            )
        return self.points[:, i], self.points[:, j]


def validate_size(d: int, n: int) -> None:
    """
    Reject non-positive dimension or sample count.

    Raises
    ------
    ValueError
        If d <= 0 or n <= 0
    """
    if d <= 0:
        raise ValueError(f"CRITICAL: dimension must be > 0, got {d}")
    if n <= 0:
        raise ValueError(f"CRITICAL: n must be > 0, got {n}")


def is_power_of_two(n: int) -> bool:
    """Check whether n is a positive power of two."""
    return n > 0 and (n & (n - 1)) == 0
