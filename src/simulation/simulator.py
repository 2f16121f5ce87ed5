"""
Synthetic data generator for Bayesian teaching examples.

Generates the datasets the grid posteriors and regression models are
exercised on:
- Bernoulli outcome sequences and repeated binomial experiments
- Simple linear regression data y = β₀ + β₁ x + ε, ε ~ N(0, σ²)
- Outlier injection for robust regression
- Heteroscedastic data with noise scale softplus(γ₀ + γ₁ x)
"""

from typing import Dict, Optional, Sequence, Tuple
import numpy as np
from numpy.typing import NDArray

from likelihoods.kernels import softplus
from posterior.observation import Observation


class DataSimulator:
    """
    Random data generator with a reproducible seed.

    Every method accepts ``random_seed``; when given, it reseeds NumPy's
    global generator before drawing.

    Attributes
    ----------
    n_obs : int
        Default number of observations per dataset
    """

    def __init__(self, n_obs: int = 50) -> None:
        """
        Initialize data simulator.

        Parameters
        ----------
        n_obs : int
            Default number of observations. Default 50.
        """
        if n_obs <= 0:
            raise ValueError(f"n_obs must be positive. Got {n_obs}")
        self.n_obs = n_obs

    def _size(self, n_obs: Optional[int]) -> int:
        n = self.n_obs if n_obs is None else n_obs
        if n <= 0:
            raise ValueError(f"n_obs must be positive. Got {n}")
        return n

    def bernoulli_outcomes(
        self,
        theta: float,
        n_obs: Optional[int] = None,
        random_seed: Optional[int] = None,
    ) -> NDArray[np.int64]:
        """
        Draw a sequence of 0/1 outcomes with success probability θ.

        Returns
        -------
        NDArray[np.int64]
            Outcomes, shape (n_obs,)
        """
        if not (0.0 <= theta <= 1.0):
            raise ValueError(f"theta must be in [0, 1]. Got {theta}")
        if random_seed is not None:
            np.random.seed(random_seed)

        n = self._size(n_obs)
        return (np.random.random_sample(n) < theta).astype(np.int64)

    def bernoulli_observation(
        self,
        theta: float,
        n_obs: Optional[int] = None,
        random_seed: Optional[int] = None,
    ) -> Observation:
        """Draw outcomes and summarise them as an Observation."""
        return Observation.from_outcomes(
            self.bernoulli_outcomes(theta, n_obs=n_obs, random_seed=random_seed)
        )

    def binomial_experiments(
        self,
        theta: float,
        trials: int,
        n_experiments: int,
        random_seed: Optional[int] = None,
    ) -> NDArray[np.int64]:
        """
        Repeat a binomial experiment; used to check frequentist coverage.

        Returns
        -------
        NDArray[np.int64]
            Success counts, shape (n_experiments,)
        """
        if not (0.0 <= theta <= 1.0):
            raise ValueError(f"theta must be in [0, 1]. Got {theta}")
        if trials < 0 or n_experiments <= 0:
            raise ValueError(
                f"trials must be >= 0 and n_experiments positive. "
                f"Got trials={trials}, n_experiments={n_experiments}"
            )
        if random_seed is not None:
            np.random.seed(random_seed)

        return np.random.binomial(trials, theta, size=n_experiments).astype(np.int64)

    def linear_data(
        self,
        beta0: float = 3.0,
        beta1: float = 3.0,
        sigma2: float = 0.5,
        n_obs: Optional[int] = None,
        random_seed: Optional[int] = None,
    ) -> Tuple[NDArray[np.float64], NDArray[np.float64]]:
        """
        Simulate y = β₀ + β₁ x + ε with x ~ U(0, 1), ε ~ N(0, σ²).

        Parameters
        ----------
        beta0, beta1 : float
            True intercept and slope. Default 3 and 3.
        sigma2 : float
            True observation variance. Default 0.5.
        n_obs : int, optional
            Number of observations. If None, self.n_obs.
        random_seed : int, optional
            Random seed for reproducibility.

        Returns
        -------
        x : NDArray[np.float64]
            Predictor, shape (n_obs,)
        y : NDArray[np.float64]
            Targets, shape (n_obs,)
        """
        if sigma2 <= 0:
            raise ValueError(f"sigma2 must be positive. Got {sigma2}")
        if random_seed is not None:
            np.random.seed(random_seed)

        n = self._size(n_obs)
        x = np.random.random_sample(n)
        y = beta0 + beta1 * x + np.sqrt(sigma2) * np.random.randn(n)
        return x, y

    def multiple_linear_data(
        self,
        intercept: float,
        coefficients: Sequence[float],
        sigma2: float = 0.5,
        n_obs: Optional[int] = None,
        random_seed: Optional[int] = None,
    ) -> Tuple[NDArray[np.float64], NDArray[np.float64]]:
        """
        Simulate y = β₀ + Xβ₁ + ε with standard normal predictors.

        Returns
        -------
        X : NDArray[np.float64]
            Predictors, shape (n_obs, D)
        y : NDArray[np.float64]
            Targets, shape (n_obs,)
        """
        beta1 = np.asarray(coefficients, dtype=np.float64)
        if beta1.ndim != 1 or beta1.size == 0:
            raise ValueError(f"coefficients must be a non-empty 1-D sequence. Got {coefficients}")
        if sigma2 <= 0:
            raise ValueError(f"sigma2 must be positive. Got {sigma2}")
        if random_seed is not None:
            np.random.seed(random_seed)

        n = self._size(n_obs)
        X = np.random.randn(n, beta1.size)
        y = intercept + X @ beta1 + np.sqrt(sigma2) * np.random.randn(n)
        return X, y

    @staticmethod
    def add_outliers(
        x: NDArray[np.float64],
        y: NDArray[np.float64],
        x_outliers: Sequence[float] = (0.1, 0.15),
        y_outliers: Sequence[float] = (13.0, 13.5),
    ) -> Tuple[NDArray[np.float64], NDArray[np.float64]]:
        """
        Append outlying points to a dataset.

        The defaults sit far above the line y = 3 + 3x near x = 0.
        """
        x_out = np.asarray(x_outliers, dtype=np.float64)
        y_out = np.asarray(y_outliers, dtype=np.float64)
        if x_out.shape != y_out.shape:
            raise ValueError(
                f"x_outliers and y_outliers must have the same shape. "
                f"Got {x_out.shape} and {y_out.shape}"
            )
        return np.concatenate([x, x_out]), np.concatenate([y, y_out])

    def heteroscedastic_data(
        self,
        beta0: float = 3.0,
        beta1: float = 3.0,
        gamma0: float = -2.0,
        gamma1: float = 3.0,
        n_obs: Optional[int] = None,
        random_seed: Optional[int] = None,
    ) -> Dict[str, NDArray[np.float64]]:
        """
        Simulate data whose noise grows with x.

            σ(x) = softplus(γ₀ + γ₁ x),  y = β₀ + β₁ x + σ(x) ε

        Returns
        -------
        Dict[str, NDArray[np.float64]]
            - x: predictor, shape (n_obs,)
            - y: targets, shape (n_obs,)
            - sigma: true noise scale per observation
        """
        if random_seed is not None:
            np.random.seed(random_seed)

        n = self._size(n_obs)
        x = np.random.random_sample(n)
        sigma = np.asarray(softplus(gamma0 + gamma1 * x))
        y = beta0 + beta1 * x + sigma * np.random.randn(n)
        return {"x": x, "y": y, "sigma": sigma}

    def __repr__(self) -> str:
        """String representation."""
        return f"DataSimulator(n_obs={self.n_obs})"
