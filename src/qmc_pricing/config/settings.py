"""
Frozen configuration settings for quasi-Monte Carlo pricing.

All configuration is immutable (frozen dataclasses) to ensure reproducibility.
See: qmc_pricing/config/tolerances.py for test and validation tolerances.
"""

import os
from dataclasses import dataclass
from typing import Optional


def _resolve_seed() -> Optional[int]:
    """
    Resolve the default random seed with environment variable override.

    Priority:
    1. QMC_PRICING_SEED environment variable (if set)
    2. Default: None (fresh OS entropy per run)

    Returns
    -------
    int or None
        Seed used when a request does not carry its own
    """
    env_seed = os.environ.get("QMC_PRICING_SEED")
    if env_seed:
        return int(env_seed)
    return None


def _resolve_max_samples() -> int:
    """
    Resolve the sample budget with environment variable override.

    Priority:
    1. QMC_PRICING_MAX_SAMPLES environment variable (if set)
    2. Default: 2**28 integrand evaluations
    """
    env_budget = os.environ.get("QMC_PRICING_MAX_SAMPLES")
    if env_budget:
        return int(env_budget)
    return 2**28


# =============================================================================
# Sampling Configuration
# =============================================================================

@dataclass(frozen=True)
class SamplingConfig:
    """
    Immutable point-set configuration. [T1: Published constructions]

    Attributes
    ----------
    sobol_bits : int
        Binary digits per Sobol' coordinate (points live on a 2**-bits grid)
    lattice_max_log2 : int
        The embedded lattice generating vector is built for up to 2**m points
    normal_clip : float
        Uniforms are clipped to [clip, 1 - clip] before the inverse normal CDF
    """

    sobol_bits: int = 32  # [T1] Joe & Kuo (2008) tables fit 32-bit integers
    lattice_max_log2: int = 20  # [T1] Cools, Kuo & Nuyens (2006), 2**20 points
    normal_clip: float = 2.0**-40  # Keeps lattice point 0 finite


# =============================================================================
# Adaptive Cubature Configuration
# =============================================================================

@dataclass(frozen=True)
class CubatureConfig:
    """
    Immutable adaptive estimator configuration. [T3: Assumptions]

    Attributes
    ----------
    alpha : float
        Uncertainty level; the error bound holds with probability 1 - alpha
    inflation : float
        Variance inflation factor applied to the sample standard deviation
    n_init : int
        Initial batch size (IID) or initial points per replicate (QMC)
    n_replications : int
        Independently randomized copies per QMC round
    max_samples : int
        Total integrand evaluations allowed before giving up
    chunk_size : int
        Maximum number of points evaluated in one vectorized call
    seed : int, optional
        Default seed when a request does not supply one
    """

    alpha: float = 0.01  # [T3] 99% confidence
    inflation: float = 1.2  # [T3] Hickernell et al. (2013) fudge factor
    n_init: int = 1024
    n_replications: int = 16
    max_samples: int = None  # type: ignore[assignment]  # Set in __post_init__
    chunk_size: int = 2**16
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        """Resolve environment overrides and validate."""
        # Frozen dataclass workaround: use object.__setattr__
        if self.max_samples is None:
            object.__setattr__(self, "max_samples", _resolve_max_samples())
        if self.seed is None:
            object.__setattr__(self, "seed", _resolve_seed())

        if not 0 < self.alpha < 1:
            raise ValueError(f"CRITICAL: alpha must be in (0, 1), got {self.alpha}")
        if self.inflation < 1:
            raise ValueError(f"CRITICAL: inflation must be >= 1, got {self.inflation}")
        if self.n_init <= 1:
            raise ValueError(f"CRITICAL: n_init must be > 1, got {self.n_init}")
        if self.n_replications < 2:
            raise ValueError(
                f"CRITICAL: n_replications must be >= 2, got {self.n_replications}"
            )
        if self.max_samples <= 0:
            raise ValueError(f"CRITICAL: max_samples must be > 0, got {self.max_samples}")
        if self.chunk_size <= 0:
            raise ValueError(f"CRITICAL: chunk_size must be > 0, got {self.chunk_size}")
        if self.chunk_size & (self.chunk_size - 1):
            # QMC rounds are split into chunks; each chunk must stay a full net
            raise ValueError(
                f"CRITICAL: chunk_size must be a power of two, got {self.chunk_size}"
            )


# =============================================================================
# Master Configuration
# =============================================================================

@dataclass(frozen=True)
class Settings:
    """
    Master frozen configuration combining all sub-configs.

    Usage
    -----
    >>> from qmc_pricing.config.settings import SETTINGS
    >>> SETTINGS.cubature.alpha
    0.01
    """

    sampling: SamplingConfig = SamplingConfig()
    cubature: CubatureConfig = CubatureConfig()


# Singleton instance - import this
SETTINGS = Settings()
