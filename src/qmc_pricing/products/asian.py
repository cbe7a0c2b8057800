"""
Asian option pricer on top of the adaptive cubature engine.

A request bundles the asset, the payoff, the tolerance and the sampling
choices. Requests are immutable; switching one field (e.g. from IID to
Sobol' sampling) goes through with_updates(), which returns a new request.

See: Glasserman (2003) Section 5.5 - Quasi-Monte Carlo in option pricing
"""

import dataclasses
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

import numpy as np

from qmc_pricing.config.settings import CubatureConfig
from qmc_pricing.options.payoffs.asian import AsianPayoff
from qmc_pricing.options.payoffs.base import PayoffParams
from qmc_pricing.options.simulation.brownian import BrownianConstruction
from qmc_pricing.options.simulation.cubature import (
    CubatureEngine,
    EstimatorState,
    PriceEstimate,
    ToleranceSpec,
)
from qmc_pricing.options.simulation.gbm import AssetPathParams, generate_asset_paths
from qmc_pricing.sampling.base import SamplingMethod
from qmc_pricing.sampling.points import max_dimension

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PriceRequest:
    """
    Immutable pricing request.

    Attributes
    ----------
    asset : AssetPathParams
        Asset parameters and monitoring dates
    payoff : PayoffParams
        Averaging type, call/put and strike
    tolerance : ToleranceSpec
        Target error
    method : SamplingMethod
        IID, SOBOL or LATTICE
    construction : BrownianConstruction
        SEQUENTIAL or PCA path construction
    seed : int, optional
        Random seed (falls back to the configured seed)
    config : CubatureConfig, optional
        Estimator settings (falls back to SETTINGS.cubature)

    Examples
    --------
    >>> request = PriceRequest(tolerance=ToleranceSpec(abs_tol=0.05), seed=1)
    >>> sobol = request.with_updates(method=SamplingMethod.SOBOL)
    >>> request.method, sobol.method
    (<SamplingMethod.IID: 'iid'>, <SamplingMethod.SOBOL: 'sobol'>)
    """

    asset: AssetPathParams = field(default_factory=AssetPathParams)
    payoff: PayoffParams = field(default_factory=PayoffParams)
    tolerance: ToleranceSpec = field(default_factory=ToleranceSpec)
    method: SamplingMethod = SamplingMethod.IID
    construction: BrownianConstruction = BrownianConstruction.SEQUENTIAL
    seed: Optional[int] = None
    config: Optional[CubatureConfig] = None

    def __post_init__(self) -> None:
        """Validate the combination before any sampling."""
        limit = max_dimension(self.method)
        if limit is not None and self.asset.dimension > limit:
            raise ValueError(
                f"CRITICAL: {self.method.value} supports at most {limit} monitoring dates, "
                f"got {self.asset.dimension}"
            )

    def with_updates(self, **changes: Any) -> "PriceRequest":
        """
        Return a copy with the given fields replaced.

        Raises
        ------
        TypeError
            If a field name does not exist
        ValueError
            If the updated request is invalid
        """
        return dataclasses.replace(self, **changes)


def payoff_function(
    asset: AssetPathParams,
    payoff: PayoffParams,
    construction: BrownianConstruction = BrownianConstruction.SEQUENTIAL,
) -> Callable[[np.ndarray], np.ndarray]:
    """
    Close asset, payoff and path construction into an integrand.

    Parameters
    ----------
    asset : AssetPathParams
        Asset parameters and monitoring dates
    payoff : PayoffParams
        Payoff specification
    construction : BrownianConstruction
        SEQUENTIAL or PCA

    Returns
    -------
    Callable
        f(uniforms) -> discounted payoffs, (n, d) -> (n,)
    """
    evaluator = AsianPayoff(payoff)

    def f(uniforms: np.ndarray) -> np.ndarray:
        paths = generate_asset_paths(asset, uniforms, construction)
        return evaluator.discounted(paths, asset.rate, asset.maturity)

    return f


def deterministic_price(asset: AssetPathParams, payoff: PayoffParams) -> float:
    """
    Discounted payoff when every path is the forward curve.

    [T1] σ = 0 => S(t_i) = S(0) * exp(r t_i)
    """
    forward = asset.forward_curve()[None, :]
    value = AsianPayoff(payoff).discounted(forward, asset.rate, asset.maturity)
    return float(value[0])


def price_option(request: PriceRequest) -> PriceEstimate:
    """
    Price an Asian (or European) option to the requested tolerance.

    Zero volatility has a single deterministic path, so the price is returned
    directly with zero error and one evaluation.

    Parameters
    ----------
    request : PriceRequest
        Pricing request

    Returns
    -------
    PriceEstimate
        Estimate with status CONVERGED or EXHAUSTED_BUDGET

    Examples
    --------
    >>> flat = AssetPathParams(volatility=0.0)
    >>> result = price_option(PriceRequest(asset=flat))
    >>> result.error_bound, result.n_samples
    (0.0, 1)
    """
    asset = request.asset

    if asset.is_degenerate:
        logger.info("Zero volatility: returning the deterministic payoff")
        start_time = time.perf_counter()
        price = deterministic_price(asset, request.payoff)
        return PriceEstimate(
            price=price,
            error_bound=0.0,
            n_samples=1,
            time_elapsed=time.perf_counter() - start_time,
            status=EstimatorState.CONVERGED,
            method=request.method,
            construction=request.construction,
            tolerance=request.tolerance.bound(price),
        )

    engine = CubatureEngine(
        method=request.method,
        tolerance=request.tolerance,
        config=request.config,
        seed=request.seed,
    )
    f = payoff_function(asset, request.payoff, request.construction)
    result = engine.integrate(f, asset.dimension)

    return dataclasses.replace(result, construction=request.construction)
