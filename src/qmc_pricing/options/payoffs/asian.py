"""
Asian (average-price) option payoffs on discretely monitored paths.

[T1] Arithmetic mean:  A = (1/d) Σ S(t_i)
[T1] Geometric mean:   G = exp((1/d) Σ log S(t_i))
[T1] European:         S(t_d)

The average excludes S(0): only the monitoring dates count.

See: Kemna & Vorst (1990) "A pricing method for options based on average
     asset values"
"""

import numpy as np

from qmc_pricing.options.payoffs.base import AveragingType, PayoffParams


class AsianPayoff:
    """
    Vectorized payoff on a batch of monitored price paths.

    Parameters
    ----------
    params : PayoffParams
        Averaging type, call/put and strike

    Examples
    --------
    >>> payoff = AsianPayoff(PayoffParams(AveragingType.ARITHMETIC))
    >>> payoff.calculate_vectorized(np.array([[90.0, 110.0, 130.0]]))
    array([10.])
    """

    def __init__(self, params: PayoffParams):
        self.params = params

    def average(self, paths: np.ndarray) -> np.ndarray:
        """
        Combine monitored prices into the underlying of the payoff.

        Parameters
        ----------
        paths : np.ndarray
            Prices at the monitoring dates, shape (n_paths, d)

        Returns
        -------
        np.ndarray
            Averaged price per path, shape (n_paths,)
        """
        paths = np.atleast_2d(paths)
        averaging = self.params.averaging

        if averaging == AveragingType.ARITHMETIC:
            return paths.mean(axis=1)
        if averaging == AveragingType.GEOMETRIC:
            return np.exp(np.log(paths).mean(axis=1))
        return paths[:, -1]

    def calculate_vectorized(self, paths: np.ndarray) -> np.ndarray:
        """Undiscounted payoff per path, shape (n_paths,)."""
        return self.params.intrinsic(self.average(paths))

    def discounted(self, paths: np.ndarray, rate: float, maturity: float) -> np.ndarray:
        """
        Present value of the payoff per path.

        [T1] PV = exp(-r T) * payoff, T = last monitoring date

        Returns
        -------
        np.ndarray
            Non-negative discounted payoffs, shape (n_paths,)
        """
        return np.exp(-rate * maturity) * self.calculate_vectorized(paths)
