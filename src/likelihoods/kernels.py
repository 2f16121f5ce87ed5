"""
Numerically safe log-likelihood kernels.

This module implements the pure log-density evaluators shared by the grid
posterior engine and by the regression log-joint densities handed to the
MCMC sampler.

Mathematical formulation:
    log Binom(N⁺; N, θ) = log C(N, N⁺) + N⁺ log θ + (N − N⁺) log(1 − θ)
    log C(N, k)          = lnΓ(N + 1) − lnΓ(k + 1) − lnΓ(N − k + 1)
    log Bern(y; θ)       = y log θ + (1 − y) log(1 − θ)

The products x·log(y) are evaluated through ``safe_xlogy`` so that the limit
0·log(0) = 0 holds at the grid boundaries θ ∈ {0, 1}.
"""

from typing import Union
import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy.special import gammaln, xlogy
from scipy.stats import cauchy, halfcauchy, norm


FloatOrArray = Union[float, NDArray[np.float64]]


def _as_result(value: NDArray[np.float64]) -> FloatOrArray:
    """Return a Python float for 0-d results, the array otherwise."""
    if np.ndim(value) == 0:
        return float(value)
    return value


def safe_xlogy(x: ArrayLike, y: ArrayLike) -> FloatOrArray:
    """
    Compute x * log(y) with the convention 0 * log(y) = 0.

    Parameters
    ----------
    x : ArrayLike
        Multiplier (typically a count).
    y : ArrayLike
        Argument of the logarithm (typically a probability).

    Returns
    -------
    float or NDArray[np.float64]
        Exactly 0 wherever x == 0 (for any y, including 0 and NaN),
        -inf where x > 0 and y == 0, x * log(y) elsewhere.
    """
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    with np.errstate(divide="ignore", invalid="ignore"):
        out = np.where(x == 0, 0.0, xlogy(x, y))
    return _as_result(out)


def log_binomial_coefficient(n: ArrayLike, k: ArrayLike) -> FloatOrArray:
    """
    Log of the binomial coefficient C(n, k) via log-gamma.

    Stays finite for n in the tens of thousands where factorials overflow.
    C(n, k) = 0 outside 0 <= k <= n, so the log is -inf there.

    Parameters
    ----------
    n : ArrayLike
        Number of trials.
    k : ArrayLike
        Number of successes.

    Returns
    -------
    float or NDArray[np.float64]
        log C(n, k).
    """
    n = np.asarray(n, dtype=np.float64)
    k = np.asarray(k, dtype=np.float64)
    valid = (k >= 0) & (k <= n)
    # Keep gammaln away from its poles on the invalid entries
    k_safe = np.where(valid, k, 0.0)
    n_safe = np.where(valid, n, 0.0)
    out = gammaln(n_safe + 1) - gammaln(k_safe + 1) - gammaln(n_safe - k_safe + 1)
    return _as_result(np.where(valid, out, -np.inf))


def binomial_log_likelihood(
    successes: int,
    trials: int,
    theta: ArrayLike,
) -> FloatOrArray:
    """
    Binomial log-likelihood log P(N⁺ | θ, N), vectorised over θ.

    Parameters
    ----------
    successes : int
        Observed successes N⁺.
    trials : int
        Number of trials N.
    theta : ArrayLike
        Success probabilities in [0, 1].

    Returns
    -------
    float or NDArray[np.float64]
        Log-likelihood for each θ. -inf everywhere when N⁺ is outside [0, N].
    """
    theta = np.asarray(theta, dtype=np.float64)
    log_coef = log_binomial_coefficient(trials, successes)
    if not np.isfinite(log_coef):
        return _as_result(np.full(theta.shape, -np.inf))

    log_l = (
        log_coef
        + np.asarray(safe_xlogy(successes, theta))
        + np.asarray(safe_xlogy(trials - successes, 1.0 - theta))
    )
    return _as_result(log_l)


def binomial_likelihood(
    successes: int,
    trials: int,
    theta: ArrayLike,
) -> FloatOrArray:
    """Binomial likelihood P(N⁺ | θ, N) = exp(log-likelihood)."""
    return _as_result(np.exp(binomial_log_likelihood(successes, trials, theta)))


def bernoulli_log_likelihood(
    outcomes: ArrayLike,
    theta: ArrayLike,
) -> FloatOrArray:
    """
    Log-likelihood of i.i.d. Bernoulli outcomes, vectorised over θ.

        log p(y_1..y_N | θ) = Σ_i y_i log θ + (1 − y_i) log(1 − θ)

    Parameters
    ----------
    outcomes : ArrayLike
        Observed outcomes in {0, 1}, shape (N,).
    theta : ArrayLike
        Success probabilities in [0, 1], any shape.

    Returns
    -------
    float or NDArray[np.float64]
        Log-likelihood with the shape of theta.
    """
    y = np.asarray(outcomes, dtype=np.float64).ravel()
    theta = np.asarray(theta, dtype=np.float64)
    # Broadcast observations along a trailing axis, then reduce it
    theta_b = theta[..., np.newaxis]
    terms = np.asarray(safe_xlogy(y, theta_b)) + np.asarray(safe_xlogy(1.0 - y, 1.0 - theta_b))
    return _as_result(terms.sum(axis=-1))


def bernoulli_likelihood(outcomes: ArrayLike, theta: ArrayLike) -> FloatOrArray:
    """Bernoulli likelihood of i.i.d. outcomes = exp(log-likelihood)."""
    return _as_result(np.exp(bernoulli_log_likelihood(outcomes, theta)))


def gaussian_logpdf(y: ArrayLike, loc: ArrayLike, scale: ArrayLike) -> FloatOrArray:
    """
    Gaussian log-density log N(y; loc, scale²).

    ``scale`` is the standard deviation. Non-positive scales give -inf
    rather than NaN so that a log-joint-density stays well defined at the
    edge of its support.
    """
    scale = np.asarray(scale, dtype=np.float64)
    safe_scale = np.where(scale > 0, scale, 1.0)
    out = np.where(scale > 0, norm.logpdf(y, loc=loc, scale=safe_scale), -np.inf)
    return _as_result(out)


def cauchy_logpdf(y: ArrayLike, loc: ArrayLike, scale: ArrayLike) -> FloatOrArray:
    """Cauchy log-density; -inf for non-positive scales."""
    scale = np.asarray(scale, dtype=np.float64)
    safe_scale = np.where(scale > 0, scale, 1.0)
    out = np.where(scale > 0, cauchy.logpdf(y, loc=loc, scale=safe_scale), -np.inf)
    return _as_result(out)


def half_cauchy_logpdf(x: ArrayLike, scale: float) -> FloatOrArray:
    """
    Half-Cauchy log-density on [0, ∞).

    Used as the weakly informative prior on the observation variance.
    Returns -inf for x < 0.
    """
    if scale <= 0:
        raise ValueError(f"scale must be positive. Got {scale}")
    return _as_result(np.asarray(halfcauchy.logpdf(x, loc=0.0, scale=scale)))


def softplus(x: ArrayLike) -> FloatOrArray:
    """
    Softplus transform log(1 + exp(x)), an R → R⁺ map.

    Computed as logaddexp(0, x) to avoid overflow for large x.
    """
    return _as_result(np.logaddexp(0.0, np.asarray(x, dtype=np.float64)))
