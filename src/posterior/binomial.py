"""
Log-space grid posterior for binomial proportions.

This module computes discretised posteriors over a success probability θ
(one seller / coin) or over a pair (θ_A, θ_B) (two independent sellers).
Everything is carried in log space and normalised with the log-sum-exp
trick, so the posterior stays exact even when the raw likelihood at the
mode underflows to 0.0 in double precision.

Mathematical formulation:
    log p(θ | D) = log p(θ) + log p(D | θ) − log Z
    log Z        = m + log Σ_θ exp(log p(θ) + log p(D | θ) − m),   m = max

For two independent sellers:
    log p(D | θ_A, θ_B) = log p(D_A | θ_A) + log p(D_B | θ_B)
"""

import logging
from typing import Callable, Optional, Sequence, Tuple, Union
import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy.special import logsumexp

from likelihoods.kernels import binomial_log_likelihood
from posterior.errors import DegenerateDistribution, GridMismatch
from posterior.grid import Grid
from posterior.hpdi import HPDIResult, find_hpdi
from posterior.observation import Observation
from posterior.region import GridRegionQuery

logger = logging.getLogger(__name__)

GridLike = Union[Grid, Sequence[float], NDArray[np.float64]]


def _as_grid(grid: GridLike) -> Grid:
    """Accept a Grid or an explicit sequence of grid values."""
    if isinstance(grid, Grid):
        return grid
    return Grid(grid)


def log_likelihood_grid(grid: GridLike, observation: Observation) -> NDArray[np.float64]:
    """
    Binomial log-likelihood at every grid point.

    Parameters
    ----------
    grid : Grid or sequence of float
        Values of θ in [0, 1], shape (n,).
    observation : Observation
        Observed successes out of trials.

    Returns
    -------
    NDArray[np.float64]
        log P(N⁺ | θ, N) for each grid point, shape (n,). Boundary points
        with zero counts give finite values (never NaN).
    """
    grid = _as_grid(grid)
    grid.check_unit_interval()
    return np.asarray(
        binomial_log_likelihood(observation.successes, observation.trials, grid.values),
        dtype=np.float64,
    )


def joint_log_likelihood_grid(
    grid_a: GridLike,
    grid_b: GridLike,
    observation_a: Observation,
    observation_b: Observation,
) -> NDArray[np.float64]:
    """
    Joint log-likelihood of two independent binomial observations.

    Returns
    -------
    NDArray[np.float64]
        Matrix of shape (len(grid_a), len(grid_b)) with entry [i, j] equal to
        log p(D_A | grid_a[i]) + log p(D_B | grid_b[j]).
    """
    log_l_a = log_likelihood_grid(grid_a, observation_a)
    log_l_b = log_likelihood_grid(grid_b, observation_b)
    return log_l_a[:, np.newaxis] + log_l_b[np.newaxis, :]


def log_prior_from_weights(
    prior: ArrayLike,
    shape: Tuple[int, ...],
) -> NDArray[np.float64]:
    """
    Convert non-negative prior weights into a normalised log prior.

    Parameters
    ----------
    prior : ArrayLike
        Prior weight per grid point (or grid cell). Need not sum to 1.
        Zero weight excludes a point (log prior -inf).
    shape : Tuple[int, ...]
        Expected shape (the grid or joint-grid shape).

    Returns
    -------
    NDArray[np.float64]
        Log prior that sums to 1 in linear space.

    Raises
    ------
    GridMismatch
        If the prior shape differs from ``shape``.
    ValueError
        If weights are negative, non-finite or all zero.
    """
    weights = np.asarray(prior, dtype=np.float64)
    if weights.shape != tuple(shape):
        raise GridMismatch(
            f"prior must have shape {tuple(shape)}. Got {weights.shape}"
        )
    if not np.all(np.isfinite(weights)) or np.any(weights < 0):
        raise ValueError("Prior weights must be finite and non-negative")
    if not np.any(weights > 0):
        raise ValueError("Prior weights must not all be zero")

    with np.errstate(divide="ignore"):
        log_w = np.log(weights)
    return log_w - logsumexp(log_w)


def log_evidence(log_joint: ArrayLike) -> float:
    """
    Log normalising constant log Σ exp(log_joint) via log-sum-exp.

    When ``log_joint`` is log prior + log-likelihood with a normalised prior,
    this is the log marginal likelihood log p(D).

    Raises
    ------
    DegenerateDistribution
        If the array is empty, contains NaN or +inf, or is -inf everywhere.
    """
    x = np.asarray(log_joint, dtype=np.float64)
    if x.size == 0:
        raise DegenerateDistribution("Cannot normalise an empty log-density array")
    if np.any(np.isnan(x)):
        raise DegenerateDistribution("Log-density contains NaN")
    if np.any(x == np.inf):
        raise DegenerateDistribution("Log-density contains +inf")

    m = np.max(x)
    if m == -np.inf:
        raise DegenerateDistribution(
            "Every log-density entry is -inf: no grid point is consistent with the data"
        )
    return float(logsumexp(x))


def normalize(log_joint: ArrayLike) -> NDArray[np.float64]:
    """
    Normalise a log-joint-density array into a probability mass function.

    Uses exp(log_joint − log Z) with log Z from the log-sum-exp trick; the
    unnormalised densities are never exponentiated directly.

    Parameters
    ----------
    log_joint : ArrayLike
        Log prior + log-likelihood, any shape (vector or matrix).

    Returns
    -------
    NDArray[np.float64]
        Non-negative masses with the input shape, summing to 1.

    Raises
    ------
    DegenerateDistribution
        See ``log_evidence``.
    """
    x = np.asarray(log_joint, dtype=np.float64)
    log_z = log_evidence(x)
    logger.debug("Normalised %s log-density, log Z = %.6g", x.shape, log_z)
    return np.exp(x - log_z)


def marginal(joint_mass: ArrayLike, dimension: int) -> NDArray[np.float64]:
    """
    Marginal distribution of one dimension of a 2-D posterior mass.

    Parameters
    ----------
    joint_mass : ArrayLike
        Joint mass, shape (n_a, n_b).
    dimension : int
        0 for θ_A (sum over θ_B), 1 for θ_B (sum over θ_A).

    Returns
    -------
    NDArray[np.float64]
        Marginal mass of the requested dimension.
    """
    mass = np.asarray(joint_mass, dtype=np.float64)
    if mass.ndim != 2:
        raise GridMismatch(f"joint_mass must be 2-D. Got shape {mass.shape}")
    if dimension not in (0, 1):
        raise GridMismatch(f"dimension must be 0 or 1. Got {dimension}")
    return mass.sum(axis=1 - dimension)


class BinomialGridPosterior:
    """
    Posterior over a single success probability on a 1-D grid.

    Attributes
    ----------
    grid : Grid
        Values of θ.
    observation : Observation
        Observed data.
    log_likelihood : NDArray[np.float64]
        log p(D | θ) per grid point.
    log_joint : NDArray[np.float64]
        log p(θ) + log p(D | θ) per grid point.
    log_evidence : float
        log p(D) under the (normalised) discrete prior.
    mass : NDArray[np.float64]
        Posterior mass p(θ | D) per grid point.
    """

    def __init__(
        self,
        grid: GridLike,
        observation: Observation,
        prior: Optional[ArrayLike] = None,
    ) -> None:
        """
        Compute the posterior.

        Parameters
        ----------
        grid : Grid or sequence of float
            Values of θ in [0, 1].
        observation : Observation
            Observed successes out of trials.
        prior : ArrayLike, optional
            Prior weight per grid point. If None, uniform.
        """
        self.grid = _as_grid(grid)
        self.observation = observation
        self.log_likelihood = log_likelihood_grid(self.grid, observation)

        shape = (len(self.grid),)
        if prior is None:
            log_prior = np.full(shape, -np.log(len(self.grid)))
        else:
            log_prior = log_prior_from_weights(prior, shape)

        self.log_joint = self.log_likelihood + log_prior
        self.log_evidence = log_evidence(self.log_joint)
        self.mass = np.exp(self.log_joint - self.log_evidence)

    def likelihood(self) -> NDArray[np.float64]:
        """Likelihood p(D | θ) per grid point (may underflow to 0)."""
        return np.exp(self.log_likelihood)

    def mode(self) -> float:
        """Grid value with the largest posterior mass (first on ties)."""
        return float(self.grid.values[np.argmax(self.mass)])

    def mean(self) -> float:
        """Posterior mean E[θ | D]."""
        return float(np.sum(self.grid.values * self.mass))

    def predictive_probability(self) -> float:
        """
        Posterior predictive probability of a success on the next trial.

            P(Y_{N+1} = 1 | D) = Σ_θ θ p(θ | D)

        Unlike the plug-in MLE, this is strictly between 0 and 1 whenever the
        posterior puts mass on interior grid points.
        """
        return self.mean()

    def hpdi(self, alpha: float = 0.95, multimodal: str = "warn") -> HPDIResult:
        """Highest posterior density interval covering at least ``alpha``."""
        return find_hpdi(self.mass, alpha=alpha, multimodal=multimodal)

    def credible_interval(self, alpha: float = 0.95) -> Tuple[float, float]:
        """HPDI bounds as grid values (lower, upper)."""
        return self.hpdi(alpha).bounds(self.grid)

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"BinomialGridPosterior(grid={self.grid!r}, "
            f"successes={self.observation.successes}, trials={self.observation.trials})"
        )


class TwoSellerGridPosterior:
    """
    Joint posterior over two independent success probabilities (θ_A, θ_B).

    Entry [i, j] of every matrix corresponds to (grid_a[i], grid_b[j]).
    """

    def __init__(
        self,
        grid_a: GridLike,
        grid_b: GridLike,
        observation_a: Observation,
        observation_b: Observation,
        prior: Optional[ArrayLike] = None,
    ) -> None:
        """
        Compute the joint posterior.

        Parameters
        ----------
        grid_a, grid_b : Grid or sequence of float
            Values of θ_A and θ_B in [0, 1].
        observation_a, observation_b : Observation
            Observed data for each seller.
        prior : ArrayLike, optional
            Prior weight per cell, shape (len(grid_a), len(grid_b)).
            If None, uniform.
        """
        self.grid_a = _as_grid(grid_a)
        self.grid_b = _as_grid(grid_b)
        self.observation_a = observation_a
        self.observation_b = observation_b

        self.log_likelihood = joint_log_likelihood_grid(
            self.grid_a, self.grid_b, observation_a, observation_b
        )

        shape = self.log_likelihood.shape
        if prior is None:
            log_prior = np.full(shape, -np.log(self.log_likelihood.size))
        else:
            log_prior = log_prior_from_weights(prior, shape)

        self.log_joint = self.log_likelihood + log_prior
        self.log_evidence = log_evidence(self.log_joint)
        self.mass = np.exp(self.log_joint - self.log_evidence)

    def marginal(self, dimension: int) -> NDArray[np.float64]:
        """Marginal posterior of θ_A (dimension=0) or θ_B (dimension=1)."""
        return marginal(self.mass, dimension)

    def region(self) -> GridRegionQuery:
        """Region-probability query over this posterior's grid mass."""
        return GridRegionQuery(self.grid_a, self.grid_b, self.mass)

    def probability(
        self,
        predicate: Callable[[NDArray[np.float64], NDArray[np.float64]], NDArray[np.bool_]],
    ) -> float:
        """Posterior probability P(predicate(θ_A, θ_B) | D)."""
        return self.region().probability(predicate)

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"TwoSellerGridPosterior(shape={self.mass.shape}, "
            f"A={self.observation_a.successes}/{self.observation_a.trials}, "
            f"B={self.observation_b.successes}/{self.observation_b.trials})"
        )
