"""
Geometric Brownian Motion (GBM) at discrete monitoring dates.

Maps points of the unit cube to asset price paths, so the same payoff code
runs on IID, Sobol' or lattice inputs:

    u in [0,1)^d  ->  Z = Φ^{-1}(u)  ->  W = A Z  ->  S(t_i)

[T1] Exact log-normal solution: S(t) = S(0) * exp((r - σ²/2) t + σ W(t))

See: Glasserman (2003) "Monte Carlo Methods in Financial Engineering"
"""

from dataclasses import dataclass
from typing import Optional

import numpy as np

from qmc_pricing.options.simulation.brownian import (
    BrownianConstruction,
    brownian_paths,
    uniform_to_normal,
)
from qmc_pricing.sampling.base import SamplingMethod
from qmc_pricing.sampling.points import generate_points


def monitoring_times(n_dates: int, step: float = 1.0 / 52.0) -> tuple[float, ...]:
    """
    Equally spaced monitoring dates step, 2*step, ..., n_dates*step.

    Examples
    --------
    >>> len(monitoring_times(13))  # weekly for three months
    13
    """
    if n_dates <= 0:
        raise ValueError(f"CRITICAL: n_dates must be > 0, got {n_dates}")
    if step <= 0:
        raise ValueError(f"CRITICAL: step must be > 0, got {step}")
    return tuple(float(k * step) for k in range(1, n_dates + 1))


@dataclass(frozen=True)
class AssetPathParams:
    """
    Parameters of the simulated asset.

    Attributes
    ----------
    initial_price : float
        Spot price S(0)
    rate : float
        Risk-free rate (annualized, decimal)
    volatility : float
        Volatility (annualized, decimal)
    time_vector : tuple[float, ...]
        Monitoring dates in years, strictly increasing and positive
    """

    initial_price: float = 100.0
    rate: float = 0.02
    volatility: float = 0.5
    time_vector: tuple[float, ...] = monitoring_times(13)

    def __post_init__(self) -> None:
        """Validate parameters."""
        # Accept lists / arrays but store an immutable tuple
        object.__setattr__(self, "time_vector", tuple(float(t) for t in self.time_vector))

        if self.initial_price <= 0:
            raise ValueError(f"CRITICAL: initial_price must be > 0, got {self.initial_price}")
        if self.volatility < 0:
            raise ValueError(f"CRITICAL: volatility must be >= 0, got {self.volatility}")
        if len(self.time_vector) == 0:
            raise ValueError("CRITICAL: time_vector must not be empty")
        if self.time_vector[0] <= 0:
            raise ValueError(
                f"CRITICAL: time_vector entries must be > 0, got {self.time_vector[0]}"
            )
        if any(b <= a for a, b in zip(self.time_vector, self.time_vector[1:])):
            raise ValueError("CRITICAL: time_vector must be strictly increasing")

    @property
    def dimension(self) -> int:
        """Number of monitoring dates (dimension of the integration problem)."""
        return len(self.time_vector)

    @property
    def maturity(self) -> float:
        """Last monitoring date."""
        return self.time_vector[-1]

    @property
    def drift(self) -> float:
        """Risk-neutral log drift: r - σ²/2."""
        return self.rate - 0.5 * self.volatility**2

    @property
    def discount_factor(self) -> float:
        """exp(-r T) to the last monitoring date."""
        return float(np.exp(-self.rate * self.maturity))

    @property
    def is_degenerate(self) -> bool:
        """Zero volatility: every path is the deterministic forward curve."""
        return self.volatility == 0

    def forward_curve(self) -> np.ndarray:
        """
        Expected price at each monitoring date.

        [T1] E[S(t)] = S(0) * exp(r t)
        """
        return self.initial_price * np.exp(self.rate * np.asarray(self.time_vector))


def generate_asset_paths(
    params: AssetPathParams,
    uniforms: np.ndarray,
    construction: BrownianConstruction = BrownianConstruction.SEQUENTIAL,
) -> np.ndarray:
    """
    Asset prices at the monitoring dates from points of the unit cube.

    Parameters
    ----------
    params : AssetPathParams
        Asset and monitoring parameters
    uniforms : np.ndarray
        Points in [0, 1)^d, shape (n_paths, d) with d = params.dimension
    construction : BrownianConstruction
        SEQUENTIAL or PCA

    Returns
    -------
    np.ndarray
        Prices, shape (n_paths, d)
    """
    uniforms = np.atleast_2d(uniforms)
    if uniforms.shape[1] != params.dimension:
        raise ValueError(
            f"CRITICAL: uniforms must have {params.dimension} columns, "
            f"got {uniforms.shape[1]}"
        )

    times = np.asarray(params.time_vector)
    w = brownian_paths(uniform_to_normal(uniforms), times, construction)

    log_paths = params.drift * times[None, :] + params.volatility * w
    return params.initial_price * np.exp(log_paths)


def validate_asset_simulation(
    params: AssetPathParams,
    n_paths: int = 2**16,
    method: SamplingMethod = SamplingMethod.SOBOL,
    construction: BrownianConstruction = BrownianConstruction.PCA,
    seed: Optional[int] = 42,
) -> dict:
    """
    Validate simulated paths against theoretical moments.

    [T1] Under risk-neutral measure:
    - E[S(t_i)] = S(0) * exp(r t_i)
    - Var[log S(t_i)] = σ² t_i

    Returns
    -------
    dict
        Validation results with theoretical vs simulated values
    """
    uniforms = generate_points(method, params.dimension, n_paths, seed=seed).points
    paths = generate_asset_paths(params, uniforms, construction)

    expected_mean = params.forward_curve()
    simulated_mean = paths.mean(axis=0)
    expected_log_var = params.volatility**2 * np.asarray(params.time_vector)
    simulated_log_var = np.log(paths).var(axis=0)

    mean_error_pct = np.abs(simulated_mean - expected_mean) / expected_mean * 100

    return {
        "n_paths": n_paths,
        "method": method.value,
        "construction": construction.value,
        "theoretical_mean": expected_mean,
        "simulated_mean": simulated_mean,
        "max_mean_error_pct": float(mean_error_pct.max()),
        "theoretical_log_variance": expected_log_var,
        "simulated_log_variance": simulated_log_var,
        "validation_passed": bool(mean_error_pct.max() < 1.0),
    }
