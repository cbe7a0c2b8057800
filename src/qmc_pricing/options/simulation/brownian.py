"""
Brownian motion construction from standard normals.

A discretely observed Brownian motion W = (W(t_1), ..., W(t_d)) has
covariance C_ij = min(t_i, t_j). Any A with A A^T = C maps independent
standard normals Z to W = A Z; the choice of A matters for QMC because it
decides which input coordinates carry the most variance.

- SEQUENTIAL: time stepping, W(t_i) = W(t_{i-1}) + sqrt(t_i - t_{i-1}) Z_i
  (the Cholesky factor of C)
- PCA: A = V diag(sqrt(λ)) from the eigendecomposition of C, columns in
  decreasing eigenvalue order, so the first few coordinates explain most
  of the path variance and the effective dimension drops

See: Glasserman (2003) Section 3.1 - Generating sample paths
See: Acworth, Broadie & Glasserman (1998) "A comparison of some Monte Carlo
     and quasi Monte Carlo techniques for option pricing"
"""

from enum import Enum

import numpy as np
from scipy import special

from qmc_pricing.config.settings import SETTINGS


class BrownianConstruction(Enum):
    """Path construction method."""

    SEQUENTIAL = "sequential"
    PCA = "pca"


def _as_time_vector(times) -> np.ndarray:
    """Validate and convert monitoring times."""
    t = np.asarray(times, dtype=float)
    if t.ndim != 1 or t.size == 0:
        raise ValueError("CRITICAL: time vector must be a non-empty 1-D sequence")
    if t[0] <= 0:
        raise ValueError(f"CRITICAL: monitoring times must be > 0, got {t[0]}")
    if np.any(np.diff(t) <= 0):
        raise ValueError("CRITICAL: monitoring times must be strictly increasing")
    return t


def covariance_matrix(times) -> np.ndarray:
    """
    Covariance of Brownian motion at the monitoring times.

    [T1] Cov(W(s), W(t)) = min(s, t)
    """
    t = _as_time_vector(times)
    return np.minimum.outer(t, t)


def brownian_matrix(times, construction: BrownianConstruction) -> np.ndarray:
    """
    Factor A of the Brownian covariance, A A^T = C.

    Parameters
    ----------
    times : sequence of float
        Strictly increasing positive monitoring times
    construction : BrownianConstruction
        SEQUENTIAL or PCA

    Returns
    -------
    np.ndarray
        Shape (d, d)
    """
    t = _as_time_vector(times)

    if construction == BrownianConstruction.SEQUENTIAL:
        increments = np.sqrt(np.diff(t, prepend=0.0))
        return np.tril(np.ones((t.size, t.size))) * increments[None, :]

    if construction == BrownianConstruction.PCA:
        eigenvalues, eigenvectors = np.linalg.eigh(covariance_matrix(t))
        order = np.argsort(eigenvalues)[::-1]
        eigenvalues = np.clip(eigenvalues[order], 0.0, None)
        return eigenvectors[:, order] * np.sqrt(eigenvalues)[None, :]

    raise ValueError(f"CRITICAL: unknown construction {construction}")


def uniform_to_normal(
    uniforms: np.ndarray,
    clip: float = SETTINGS.sampling.normal_clip,
) -> np.ndarray:
    """
    Map uniforms to standard normals by the inverse CDF.

    Uniforms are clipped to [clip, 1 - clip] first: lattice and unscrambled
    Sobol' sets contain the origin, where the inverse CDF is -inf.
    """
    return special.ndtri(np.clip(uniforms, clip, 1.0 - clip))


def brownian_paths(
    normals: np.ndarray,
    times,
    construction: BrownianConstruction = BrownianConstruction.SEQUENTIAL,
) -> np.ndarray:
    """
    Brownian motion at the monitoring times.

    Parameters
    ----------
    normals : np.ndarray
        Independent standard normals, shape (n_paths, d)
    times : sequence of float
        Monitoring times, length d
    construction : BrownianConstruction
        SEQUENTIAL or PCA

    Returns
    -------
    np.ndarray
        W(t_i) per path, shape (n_paths, d)
    """
    a = brownian_matrix(times, construction)
    normals = np.atleast_2d(normals)
    if normals.shape[1] != a.shape[0]:
        raise ValueError(
            f"CRITICAL: normals must have {a.shape[0]} columns, got {normals.shape[1]}"
        )
    return normals @ a.T
