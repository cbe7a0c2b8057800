"""
Adaptive (quasi-)Monte Carlo cubature with guaranteed-style stopping.

Estimates μ = ∫_[0,1)^d f(u) du until, with probability about 1 - α,

    |estimate - μ| <= max(abs_tol, rel_tol * |estimate|)

or the sample budget runs out.

- IID: batches of independent points, running mean and variance; the
  half-width is z_{1-α/2} * inflation * s / √n (CLT). Batch size doubles.
- SOBOL / LATTICE: R independently randomized instances of the same
  construction; the estimate is the mean of the R replicate means and the
  half-width is t_{R-1, 1-α/2} * inflation * s_R / √R. Points per
  replicate double (extending each instance) until the tolerance is met.

State machine:
    INITIALIZING -> SAMPLING -> CHECKING_TOLERANCE -> CONVERGED
                                       |  ^
                                       v  |
                                     SAMPLING
    CHECKING_TOLERANCE -> EXHAUSTED_BUDGET (reported, never CONVERGED)

See: Hickernell, Jiang, Liu & Owen (2013) "Guaranteed conservative fixed
     width confidence intervals via Monte Carlo sampling"
See: L'Ecuyer & Lemieux (2002) "Recent advances in randomized quasi-Monte
     Carlo methods"
"""

import logging
import time
import warnings
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

import numpy as np
from scipy import stats

from qmc_pricing.config.settings import SETTINGS, CubatureConfig
from qmc_pricing.options.simulation.brownian import BrownianConstruction
from qmc_pricing.sampling.base import SamplingMethod
from qmc_pricing.sampling.iid import generate_iid
from qmc_pricing.sampling.points import make_generator, max_dimension

logger = logging.getLogger(__name__)

#: Integrand: points of shape (n, d) -> values of shape (n,)
Integrand = Callable[[np.ndarray], np.ndarray]


class EstimatorState(Enum):
    """State of an adaptive cubature run."""

    INITIALIZING = "initializing"
    SAMPLING = "sampling"
    CHECKING_TOLERANCE = "checking_tolerance"
    CONVERGED = "converged"
    EXHAUSTED_BUDGET = "exhausted_budget"

    @property
    def is_terminal(self) -> bool:
        """True for CONVERGED and EXHAUSTED_BUDGET."""
        return self in (EstimatorState.CONVERGED, EstimatorState.EXHAUSTED_BUDGET)


#: Allowed state transitions
_TRANSITIONS: dict[EstimatorState, frozenset[EstimatorState]] = {
    EstimatorState.INITIALIZING: frozenset({EstimatorState.SAMPLING}),
    EstimatorState.SAMPLING: frozenset({EstimatorState.CHECKING_TOLERANCE}),
    EstimatorState.CHECKING_TOLERANCE: frozenset(
        {
            EstimatorState.SAMPLING,
            EstimatorState.CONVERGED,
            EstimatorState.EXHAUSTED_BUDGET,
        }
    ),
    EstimatorState.CONVERGED: frozenset(),
    EstimatorState.EXHAUSTED_BUDGET: frozenset(),
}


class BudgetExhaustedWarning(UserWarning):
    """Sampling stopped at the budget without meeting the tolerance."""


@dataclass(frozen=True)
class ToleranceSpec:
    """
    Error tolerance of the estimate.

    Attributes
    ----------
    abs_tol : float
        Absolute tolerance (>= 0)
    rel_tol : float
        Relative tolerance (0 <= rel_tol <= 1)
    """

    abs_tol: float = 0.01
    rel_tol: float = 0.0

    def __post_init__(self) -> None:
        """Validate tolerances."""
        if self.abs_tol < 0:
            raise ValueError(f"CRITICAL: abs_tol must be >= 0, got {self.abs_tol}")
        if not 0 <= self.rel_tol <= 1:
            raise ValueError(f"CRITICAL: rel_tol must be in [0, 1], got {self.rel_tol}")
        if self.abs_tol == 0 and self.rel_tol == 0:
            raise ValueError("CRITICAL: abs_tol and rel_tol cannot both be 0")

    def bound(self, estimate: float) -> float:
        """
        Hybrid tolerance at the current estimate.

        [T1] tol = max(abs_tol, rel_tol * |estimate|)
        """
        return max(self.abs_tol, self.rel_tol * abs(estimate))


@dataclass(frozen=True)
class RunningStats:
    """
    Count, mean and sum of squared deviations of a stream of values.

    merge() is commutative and associative (up to rounding), so batches can
    be combined in any order or grouping.
    """

    count: int = 0
    mean: float = 0.0
    m2: float = 0.0

    @classmethod
    def from_values(cls, values: np.ndarray) -> "RunningStats":
        """Statistics of one batch."""
        values = np.asarray(values, dtype=float).ravel()
        if values.size == 0:
            return cls()
        mean = float(values.mean())
        return cls(
            count=int(values.size),
            mean=mean,
            m2=float(((values - mean) ** 2).sum()),
        )

    def merge(self, other: "RunningStats") -> "RunningStats":
        """
        Pairwise combination (Chan, Golub & LeVeque 1979).

        [T1] M2 = M2_a + M2_b + δ² n_a n_b / n
        """
        if other.count == 0:
            return self
        if self.count == 0:
            return other

        n = self.count + other.count
        delta = other.mean - self.mean
        mean = (self.count * self.mean + other.count * other.mean) / n
        m2 = self.m2 + other.m2 + delta**2 * self.count * other.count / n
        return RunningStats(count=n, mean=mean, m2=m2)

    @property
    def variance(self) -> float:
        """Sample variance (ddof=1); 0 for fewer than two values."""
        if self.count < 2:
            return 0.0
        return self.m2 / (self.count - 1)

    @property
    def std(self) -> float:
        """Sample standard deviation."""
        return float(np.sqrt(self.variance))


@dataclass(frozen=True)
class IterationRecord:
    """
    One pass through CHECKING_TOLERANCE.

    Attributes
    ----------
    n_samples : int
        Total integrand evaluations so far
    estimate : float
        Estimate after this pass
    error_bound : float
        Half-width of the confidence interval
    tolerance : float
        Hybrid tolerance at the estimate
    """

    n_samples: int
    estimate: float
    error_bound: float
    tolerance: float

    @property
    def met(self) -> bool:
        """Whether this pass satisfied the tolerance."""
        return self.error_bound <= self.tolerance


@dataclass(frozen=True)
class PriceEstimate:
    """
    Immutable result of an adaptive cubature run.

    Attributes
    ----------
    price : float
        Estimate of the integral (the option price when f is a discounted payoff)
    error_bound : float
        Half-width of the (1 - α) confidence interval achieved
    n_samples : int
        Total integrand evaluations
    time_elapsed : float
        Wall-clock seconds
    status : EstimatorState
        CONVERGED or EXHAUSTED_BUDGET
    method : SamplingMethod
        Point-set construction used
    construction : BrownianConstruction, optional
        Path construction, when the integrand is a simulated payoff
    tolerance : float
        Hybrid tolerance at the final estimate
    history : tuple[IterationRecord, ...]
        One record per tolerance check
    """

    price: float
    error_bound: float
    n_samples: int
    time_elapsed: float
    status: EstimatorState
    method: SamplingMethod
    construction: Optional[BrownianConstruction] = None
    tolerance: float = 0.0
    history: tuple[IterationRecord, ...] = field(default=(), repr=False)

    @property
    def converged(self) -> bool:
        """True only if the tolerance was met."""
        return self.status == EstimatorState.CONVERGED

    @property
    def confidence_interval(self) -> tuple[float, float]:
        """price ± error_bound."""
        return (self.price - self.error_bound, self.price + self.error_bound)


class CubatureEngine:
    """
    Adaptive cubature engine.

    Parameters
    ----------
    method : SamplingMethod, default IID
        IID, SOBOL or LATTICE
    tolerance : ToleranceSpec, optional
        Error tolerance (default abs_tol=0.01)
    config : CubatureConfig, optional
        Confidence level, budget and batch sizes (default SETTINGS.cubature)
    seed : int, optional
        Random seed; falls back to config.seed

    Examples
    --------
    >>> engine = CubatureEngine(SamplingMethod.SOBOL, ToleranceSpec(abs_tol=1e-3), seed=7)
    >>> result = engine.integrate(lambda u: u.sum(axis=1), d=3)
    >>> result.converged, round(result.price, 2)
    (True, 1.5)
    """

    def __init__(
        self,
        method: SamplingMethod = SamplingMethod.IID,
        tolerance: Optional[ToleranceSpec] = None,
        config: Optional[CubatureConfig] = None,
        seed: Optional[int] = None,
    ):
        self.method = method
        self.tolerance = tolerance if tolerance is not None else ToleranceSpec()
        self.config = config if config is not None else SETTINGS.cubature
        self.seed = seed if seed is not None else self.config.seed
        self.state = EstimatorState.INITIALIZING

    # ------------------------------------------------------------------
    # State machine
    # ------------------------------------------------------------------

    def _transition(self, new_state: EstimatorState) -> None:
        """Move to new_state, rejecting transitions the machine does not allow."""
        if new_state not in _TRANSITIONS[self.state]:
            raise RuntimeError(
                f"CRITICAL: invalid estimator transition {self.state.value} -> {new_state.value}"
            )
        logger.debug(f"Estimator state: {self.state.value} -> {new_state.value}")
        self.state = new_state

    def _check(
        self,
        n_samples: int,
        estimate: float,
        half_width: float,
        budget_left: bool,
        history: list[IterationRecord],
    ) -> EstimatorState:
        """CHECKING_TOLERANCE: decide the next state and record the pass."""
        self._transition(EstimatorState.CHECKING_TOLERANCE)

        record = IterationRecord(
            n_samples=n_samples,
            estimate=estimate,
            error_bound=half_width,
            tolerance=self.tolerance.bound(estimate),
        )
        history.append(record)
        logger.debug(
            f"n={n_samples:,} estimate={estimate:.6f} "
            f"error_bound={half_width:.2e} tol={record.tolerance:.2e}"
        )

        if record.met:
            next_state = EstimatorState.CONVERGED
        elif budget_left:
            next_state = EstimatorState.SAMPLING
        else:
            next_state = EstimatorState.EXHAUSTED_BUDGET

        self._transition(next_state)
        return next_state

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def integrate(self, f: Integrand, d: int) -> PriceEstimate:
        """
        Estimate ∫ f over [0, 1)^d to the engine's tolerance.

        Parameters
        ----------
        f : Integrand
            Vectorized integrand, (n, d) -> (n,)
        d : int
            Dimension

        Returns
        -------
        PriceEstimate
            Estimate with status CONVERGED or EXHAUSTED_BUDGET

        Raises
        ------
        ValueError
            If d is not positive or exceeds the construction's dimension
        """
        if d <= 0:
            raise ValueError(f"CRITICAL: dimension must be > 0, got {d}")
        limit = max_dimension(self.method)
        if limit is not None and d > limit:
            raise ValueError(
                f"CRITICAL: {self.method.value} supports dimension <= {limit}, got {d}"
            )

        self.state = EstimatorState.INITIALIZING
        logger.info(
            f"Cubature start: method={self.method.value} d={d} "
            f"abs_tol={self.tolerance.abs_tol} rel_tol={self.tolerance.rel_tol}"
        )
        start_time = time.perf_counter()

        if self.method.is_low_discrepancy:
            price, half_width, n_samples, history = self._integrate_replicated(f, d)
        else:
            price, half_width, n_samples, history = self._integrate_iid(f, d)

        elapsed = time.perf_counter() - start_time
        result = PriceEstimate(
            price=price,
            error_bound=half_width,
            n_samples=n_samples,
            time_elapsed=elapsed,
            status=self.state,
            method=self.method,
            tolerance=self.tolerance.bound(price),
            history=tuple(history),
        )

        if result.converged:
            logger.info(
                f"Cubature converged: {price:.6f} ± {half_width:.2e} "
                f"with n={n_samples:,} in {elapsed:.3f}s"
            )
        else:
            message = (
                f"Sample budget of {self.config.max_samples:,} exhausted: "
                f"error bound {half_width:.2e} > tolerance {result.tolerance:.2e}"
            )
            logger.warning(message)
            warnings.warn(message, BudgetExhaustedWarning, stacklevel=2)

        return result

    # ------------------------------------------------------------------
    # IID sampling
    # ------------------------------------------------------------------

    def _evaluate_chunked(self, f: Integrand, points: Callable[[int], np.ndarray], n: int) -> RunningStats:
        """Evaluate f on n points drawn chunk by chunk."""
        batch_stats = RunningStats()
        remaining = n
        while remaining > 0:
            m = min(remaining, self.config.chunk_size)
            batch_stats = batch_stats.merge(RunningStats.from_values(f(points(m))))
            remaining -= m
        return batch_stats

    def _integrate_iid(
        self, f: Integrand, d: int
    ) -> tuple[float, float, int, list[IterationRecord]]:
        """IID sampling with a CLT confidence interval."""
        cfg = self.config
        rng = np.random.default_rng(self.seed)
        z = stats.norm.ppf(1 - cfg.alpha / 2)

        running = RunningStats()
        history: list[IterationRecord] = []
        batch = min(cfg.n_init, cfg.max_samples)
        half_width = float("inf")

        self._transition(EstimatorState.SAMPLING)
        while True:
            running = running.merge(
                self._evaluate_chunked(f, lambda m: generate_iid(d, m, rng=rng).points, batch)
            )
            if running.count < 2:
                # One sample has no spread to measure
                half_width = float("inf")
            else:
                half_width = float(z * cfg.inflation * running.std / np.sqrt(running.count))

            budget_left = running.count < cfg.max_samples
            if self._check(running.count, running.mean, half_width, budget_left, history).is_terminal:
                break

            batch = min(2 * batch, cfg.max_samples - running.count)

        return running.mean, half_width, running.count, history

    # ------------------------------------------------------------------
    # Replicated randomized QMC
    # ------------------------------------------------------------------

    def _integrate_replicated(
        self, f: Integrand, d: int
    ) -> tuple[float, float, int, list[IterationRecord]]:
        """Randomized QMC with independent replicates."""
        cfg = self.config
        n_rep = cfg.n_replications
        rng = np.random.default_rng(self.seed)
        generators = [make_generator(self.method, d, rng) for _ in range(n_rep)]
        t_quantile = stats.t.ppf(1 - cfg.alpha / 2, df=n_rep - 1)

        # Points per replicate: a power of two so every round is a full net / lattice
        n_new = 1 << max(int(cfg.n_init - 1).bit_length(), 0)
        n_per_rep = 0
        replicate_stats = [RunningStats() for _ in range(n_rep)]
        history: list[IterationRecord] = []
        estimate, half_width = 0.0, float("inf")

        if n_rep * n_new > cfg.max_samples:
            # Not even one round fits; report without sampling
            self._transition(EstimatorState.SAMPLING)
            self._transition(EstimatorState.CHECKING_TOLERANCE)
            self._transition(EstimatorState.EXHAUSTED_BUDGET)
            return float("nan"), half_width, 0, history

        self._transition(EstimatorState.SAMPLING)
        while True:
            for r, gen in enumerate(generators):
                start = n_per_rep
                replicate_stats[r] = replicate_stats[r].merge(
                    self._evaluate_chunked(f, _sequential_points(gen, start), n_new)
                )
            n_per_rep += n_new

            means = np.array([s.mean for s in replicate_stats])
            estimate = float(means.mean())
            half_width = float(t_quantile * cfg.inflation * means.std(ddof=1) / np.sqrt(n_rep))
            n_samples = n_rep * n_per_rep

            # Next round doubles the points per replicate
            budget_left = (
                2 * n_samples <= cfg.max_samples
                and 2 * n_per_rep <= generators[0].max_points
            )
            if self._check(n_samples, estimate, half_width, budget_left, history).is_terminal:
                break

            n_new = n_per_rep

        return estimate, half_width, n_rep * n_per_rep, history


def _sequential_points(generator, start: int) -> Callable[[int], np.ndarray]:
    """Draw consecutive chunks from one generator instance, starting at start."""
    position = [start]

    def draw(m: int) -> np.ndarray:
        pts = generator.points(m, start=position[0]).points
        position[0] += m
        return pts

    return draw
