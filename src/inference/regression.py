"""
Bayesian linear regression models as log-joint-density functions.

Each model turns data (x, y) and a prior specification into a function
log p(θ, D) of an unconstrained parameter vector θ, built from the kernels in
``likelihoods.kernels``. The function is handed to the external MCMC sampler
(``inference.sampler.sample_log_density``); nothing here implements a
transition kernel.

Mathematical models:
    Linear (Gaussian) regression
        β₀ ~ N(0, v₀),  β₁ ~ N(0, V₀ I),  σ² ~ HalfCauchy(s₀)
        y_n ~ N(β₀ + x_nᵀβ₁, σ)                         σ = sqrt(σ²)
    Robust regression
        same priors,  y_n ~ Cauchy(β₀ + x_nᵀβ₁, σ)
    Heteroscedastic regression
        β₀, β₁, γ₀, γ₁ ~ N(0, v₀)
        σ_n = softplus(γ₀ + γ₁ x_n)
        y_n ~ N(β₀ + β₁ x_n, σ_n)

σ² is sampled on the log scale; the log-Jacobian log σ² is added to the
prior so the posterior over σ² is unchanged.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Tuple
import numpy as np
from numpy.typing import ArrayLike, NDArray

from likelihoods.kernels import (
    cauchy_logpdf,
    gaussian_logpdf,
    half_cauchy_logpdf,
    softplus,
)
from inference.sampler import InferenceSummary, PosteriorSampleSet, sample_log_density


class RegressionPriorSpec:
    """Specification of priors for regression parameters."""

    def __init__(
        self,
        intercept_var: float = 100.0,
        coefficient_var: float = 100.0,
        noise_scale: float = 5.0,
    ) -> None:
        """
        Initialize prior specification.

        Parameters
        ----------
        intercept_var : float
            Prior variance v₀ of the intercept (Gaussian, mean 0). Default 10².
        coefficient_var : float
            Prior variance V₀ of each coefficient (Gaussian, mean 0).
            Default 10². The zero mean shrinks estimates towards 0 (ridge).
        noise_scale : float
            Half-Cauchy scale s₀ of the observation variance. Default 5.
            Larger → weaker prior.
        """
        for name, value in (
            ("intercept_var", intercept_var),
            ("coefficient_var", coefficient_var),
            ("noise_scale", noise_scale),
        ):
            if not value > 0:
                raise ValueError(f"{name} must be positive. Got {value}")

        self.intercept_var = float(intercept_var)
        self.coefficient_var = float(coefficient_var)
        self.noise_scale = float(noise_scale)

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"RegressionPriorSpec(v₀={self.intercept_var}, "
            f"V₀={self.coefficient_var}, s₀={self.noise_scale})"
        )


def ols_estimate(X: ArrayLike, y: ArrayLike) -> NDArray[np.float64]:
    """
    Ordinary least squares with an intercept column.

    Parameters
    ----------
    X : ArrayLike
        Predictors, shape (N,) or (N, D).
    y : ArrayLike
        Targets, shape (N,).

    Returns
    -------
    NDArray[np.float64]
        [β₀, β₁...], shape (D + 1,).
    """
    X = np.asarray(X, dtype=np.float64)
    if X.ndim == 1:
        X = X[:, np.newaxis]
    design = np.column_stack([np.ones(X.shape[0]), X])
    beta, *_ = np.linalg.lstsq(design, np.asarray(y, dtype=np.float64), rcond=None)
    return beta


def conjugate_update(
    x: ArrayLike,
    y: float,
    mean: ArrayLike,
    cov: ArrayLike,
    noise_var: float,
) -> Tuple[NDArray[np.float64], NDArray[np.float64]]:
    """
    Update a Gaussian posterior over [β₀, β₁...] with one observation.

    With known noise variance σ², the posterior after observing (x, y) is

        m' = m + V h (hᵀ V h + σ²)⁻¹ (y − hᵀ m),     h = [1, x]
        V' = (h hᵀ / σ² + V⁻¹)⁻¹

    Parameters
    ----------
    x : ArrayLike
        Predictor value(s) of the observation, scalar or shape (D,).
    y : float
        Observed target.
    mean : ArrayLike
        Current mean, shape (D + 1,).
    cov : ArrayLike
        Current covariance, shape (D + 1, D + 1).
    noise_var : float
        Known observation variance σ².

    Returns
    -------
    Tuple[NDArray[np.float64], NDArray[np.float64]]
        Updated (mean, covariance).
    """
    if noise_var <= 0:
        raise ValueError(f"noise_var must be positive. Got {noise_var}")

    h = np.concatenate([[1.0], np.atleast_1d(np.asarray(x, dtype=np.float64))])
    m = np.asarray(mean, dtype=np.float64)
    V = np.asarray(cov, dtype=np.float64)
    if m.shape != h.shape or V.shape != (h.size, h.size):
        raise ValueError(
            f"mean and cov must have shapes ({h.size},) and ({h.size}, {h.size}). "
            f"Got {m.shape} and {V.shape}"
        )

    gain = V @ h / (h @ V @ h + noise_var)
    m_new = m + gain * (y - h @ m)
    V_new = np.linalg.inv(np.outer(h, h) / noise_var + np.linalg.inv(V))
    # Symmetrise against round-off
    return m_new, 0.5 * (V_new + V_new.T)


def conjugate_posterior(
    X: ArrayLike,
    y: ArrayLike,
    mean: ArrayLike,
    cov: ArrayLike,
    noise_var: float,
) -> Tuple[NDArray[np.float64], NDArray[np.float64]]:
    """
    Batch Gaussian posterior over [β₀, β₁...] with known noise variance.

        V_N = (V₀⁻¹ + Hᵀ H / σ²)⁻¹
        m_N = V_N (V₀⁻¹ m₀ + Hᵀ y / σ²)

    where H is the design matrix with a leading column of ones. Equal to
    applying ``conjugate_update`` once per observation.
    """
    if noise_var <= 0:
        raise ValueError(f"noise_var must be positive. Got {noise_var}")

    X = np.asarray(X, dtype=np.float64)
    if X.ndim == 1:
        X = X[:, np.newaxis]
    H = np.column_stack([np.ones(X.shape[0]), X])
    y = np.asarray(y, dtype=np.float64)

    prior_precision = np.linalg.inv(np.asarray(cov, dtype=np.float64))
    V_n = np.linalg.inv(prior_precision + H.T @ H / noise_var)
    m_n = V_n @ (prior_precision @ np.asarray(mean, dtype=np.float64) + H.T @ y / noise_var)
    return m_n, 0.5 * (V_n + V_n.T)


class RegressionModel(ABC):
    """
    Base class: data plus a log-joint-density over named parameters.

    Subclasses define ``parameter_names``, ``log_prior``,
    ``log_likelihood``, ``initial_point``, ``predict_mean`` and
    ``simulate``.

    Attributes
    ----------
    X : NDArray[np.float64]
        Predictors, shape (N, D).
    y : NDArray[np.float64]
        Targets, shape (N,).
    parameter_names : List[str]
        Names of the entries of the parameter vector θ.
    """

    parameter_names: List[str]

    def __init__(self, X: ArrayLike, y: ArrayLike) -> None:
        X = np.asarray(X, dtype=np.float64)
        y = np.asarray(y, dtype=np.float64)
        if X.ndim == 1:
            X = X[:, np.newaxis]

        if X.ndim != 2:
            raise ValueError(f"X must be 1-D or 2-D. Got shape {X.shape}")
        if y.ndim != 1 or y.shape[0] != X.shape[0]:
            raise ValueError(
                f"y must have shape ({X.shape[0]},). Got {y.shape}"
            )
        if X.shape[0] == 0:
            raise ValueError("At least one observation is required")
        if not (np.all(np.isfinite(X)) and np.all(np.isfinite(y))):
            raise ValueError("X and y must be finite")

        self.X = X
        self.y = y

    @property
    def n_obs(self) -> int:
        return self.X.shape[0]

    def _check_theta(self, theta: ArrayLike) -> NDArray[np.float64]:
        theta = np.asarray(theta, dtype=np.float64)
        if theta.shape != (len(self.parameter_names),):
            raise ValueError(
                f"theta must have shape ({len(self.parameter_names)},). Got {theta.shape}"
            )
        return theta

    @abstractmethod
    def log_prior(self, theta: ArrayLike) -> float:
        """log p(θ) on the sampled (unconstrained) scale."""

    @abstractmethod
    def log_likelihood(self, theta: ArrayLike) -> float:
        """log p(D | θ)."""

    def log_joint_density(self, theta: ArrayLike) -> float:
        """
        log p(θ) + log p(D | θ); the function handed to the sampler.

        Returns -inf (never NaN) outside the support.
        """
        theta = self._check_theta(theta)
        lp = self.log_prior(theta)
        if not np.isfinite(lp):
            return -np.inf
        ll = self.log_likelihood(theta)
        if np.isnan(ll):
            return -np.inf
        return float(lp + ll)

    @abstractmethod
    def initial_point(self) -> NDArray[np.float64]:
        """Starting θ inside the posterior support."""

    @abstractmethod
    def predict_mean(self, theta: ArrayLike, X: ArrayLike) -> NDArray[np.float64]:
        """Regression line E[y | x, θ] at each row of X."""

    @abstractmethod
    def simulate(self, theta: ArrayLike) -> NDArray[np.float64]:
        """Draw one synthetic dataset of targets at self.X given θ."""

    def sample(
        self,
        draws: int = 1000,
        chains: int = 2,
        tune: int = 1000,
        random_seed: Optional[int] = None,
        step: str = "slice",
    ) -> InferenceSummary:
        """Sample the posterior with the external MCMC engine."""
        return sample_log_density(
            self.log_joint_density,
            self.parameter_names,
            initial_point=self.initial_point(),
            draws=draws,
            chains=chains,
            tune=tune,
            random_seed=random_seed,
            step=step,
        )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"{type(self).__name__}(n_obs={self.n_obs}, "
            f"parameters={self.parameter_names})"
        )


class LinearRegression(RegressionModel):
    """
    Linear regression with Gaussian or Cauchy observation noise.

    Parameter vector: [intercept, coefficients[0..D-1], log_sigma2].
    """

    LIKELIHOODS = {"gaussian": gaussian_logpdf, "cauchy": cauchy_logpdf}

    def __init__(
        self,
        X: ArrayLike,
        y: ArrayLike,
        prior: Optional[RegressionPriorSpec] = None,
        likelihood: str = "gaussian",
    ) -> None:
        """
        Parameters
        ----------
        X : ArrayLike
            Predictors, shape (N,) or (N, D).
        y : ArrayLike
            Targets, shape (N,).
        prior : RegressionPriorSpec, optional
            Prior specification. If None, use defaults.
        likelihood : str
            "gaussian" (default) or "cauchy" (robust to outliers).
        """
        super().__init__(X, y)
        if likelihood not in self.LIKELIHOODS:
            raise ValueError(
                f"likelihood must be one of {sorted(self.LIKELIHOODS)}. Got {likelihood!r}"
            )

        self.prior = prior or RegressionPriorSpec()
        self.likelihood = likelihood
        self.n_features = self.X.shape[1]
        self.parameter_names = (
            ["intercept"]
            + [f"coefficients[{d}]" for d in range(self.n_features)]
            + ["log_sigma2"]
        )

    def unpack(self, theta: ArrayLike) -> Dict[str, NDArray[np.float64]]:
        """Split θ into intercept, coefficients and σ²."""
        theta = self._check_theta(theta)
        with np.errstate(over="ignore"):
            sigma2 = np.exp(theta[-1])
        return {
            "intercept": theta[0],
            "coefficients": theta[1:-1],
            "log_sigma2": theta[-1],
            "sigma2": sigma2,
        }

    def log_prior(self, theta: ArrayLike) -> float:
        p = self.unpack(theta)
        return float(
            gaussian_logpdf(p["intercept"], 0.0, np.sqrt(self.prior.intercept_var))
            + np.sum(gaussian_logpdf(p["coefficients"], 0.0, np.sqrt(self.prior.coefficient_var)))
            + half_cauchy_logpdf(p["sigma2"], self.prior.noise_scale)
            + p["log_sigma2"]  # log-Jacobian of σ² = exp(log σ²)
        )

    def log_likelihood(self, theta: ArrayLike) -> float:
        p = self.unpack(theta)
        mu = p["intercept"] + self.X @ p["coefficients"]
        scale = np.sqrt(p["sigma2"])
        return float(np.sum(self.LIKELIHOODS[self.likelihood](self.y, mu, scale)))

    def initial_point(self) -> NDArray[np.float64]:
        """OLS coefficients and log residual variance."""
        beta = ols_estimate(self.X, self.y)
        resid = self.y - (beta[0] + self.X @ beta[1:])
        sigma2 = max(float(np.var(resid)), 1e-6)
        return np.concatenate([beta, [np.log(sigma2)]])

    def predict_mean(self, theta: ArrayLike, X: ArrayLike) -> NDArray[np.float64]:
        """Regression line β₀ + Xβ₁ at new inputs."""
        p = self.unpack(theta)
        X = np.asarray(X, dtype=np.float64)
        if X.ndim == 1:
            X = X[:, np.newaxis]
        return p["intercept"] + X @ p["coefficients"]

    def simulate(self, theta: ArrayLike) -> NDArray[np.float64]:
        p = self.unpack(theta)
        mu = p["intercept"] + self.X @ p["coefficients"]
        scale = np.sqrt(p["sigma2"])
        if self.likelihood == "cauchy":
            return mu + scale * np.random.standard_cauchy(self.n_obs)
        return mu + scale * np.random.standard_normal(self.n_obs)


class SimpleLinearRegression(LinearRegression):
    """One-predictor linear regression; parameters beta0, beta1, log_sigma2."""

    def __init__(
        self,
        x: ArrayLike,
        y: ArrayLike,
        prior: Optional[RegressionPriorSpec] = None,
        likelihood: str = "gaussian",
    ) -> None:
        x = np.asarray(x, dtype=np.float64)
        if x.ndim != 1:
            raise ValueError(f"x must be 1-D. Got shape {x.shape}")
        super().__init__(x, y, prior=prior, likelihood=likelihood)
        self.parameter_names = ["beta0", "beta1", "log_sigma2"]


class MultipleLinearRegression(LinearRegression):
    """Linear regression on a (N, D) design matrix (Gaussian noise)."""

    def __init__(
        self,
        X: ArrayLike,
        y: ArrayLike,
        prior: Optional[RegressionPriorSpec] = None,
    ) -> None:
        super().__init__(X, y, prior=prior, likelihood="gaussian")


class RobustLinearRegression(SimpleLinearRegression):
    """
    Simple regression with Cauchy noise.

    Heavy tails make the fit resilient to a handful of outliers.
    The default coefficient prior variance is widened to 20².
    """

    def __init__(
        self,
        x: ArrayLike,
        y: ArrayLike,
        prior: Optional[RegressionPriorSpec] = None,
    ) -> None:
        prior = prior or RegressionPriorSpec(coefficient_var=20.0 ** 2)
        super().__init__(x, y, prior=prior, likelihood="cauchy")


class HeteroscedasticRegression(RegressionModel):
    """
    Simple regression whose noise scale depends on the predictor.

    Parameter vector: [beta0, beta1, gamma0, gamma1], with
    σ_n = softplus(γ₀ + γ₁ x_n).
    """

    def __init__(self, x: ArrayLike, y: ArrayLike, prior_var: float = 100.0) -> None:
        """
        Parameters
        ----------
        x : ArrayLike
            Predictor, shape (N,).
        y : ArrayLike
            Targets, shape (N,).
        prior_var : float
            Variance v₀ of the N(0, v₀) prior on all four parameters.
        """
        x = np.asarray(x, dtype=np.float64)
        if x.ndim != 1:
            raise ValueError(f"x must be 1-D. Got shape {x.shape}")
        if prior_var <= 0:
            raise ValueError(f"prior_var must be positive. Got {prior_var}")
        super().__init__(x, y)

        self.x = x
        self.prior_var = float(prior_var)
        self.parameter_names = ["beta0", "beta1", "gamma0", "gamma1"]

    def generated_quantities(
        self,
        theta: ArrayLike,
        x: Optional[ArrayLike] = None,
    ) -> Dict[str, NDArray[np.float64]]:
        """
        Per-observation mean, pre-transform scale and noise scale.

        Returns
        -------
        Dict[str, NDArray[np.float64]]
            - mu: β₀ + β₁ x
            - rho: γ₀ + γ₁ x
            - sigma: softplus(rho)
        """
        beta0, beta1, gamma0, gamma1 = self._check_theta(theta)
        x = self.x if x is None else np.asarray(x, dtype=np.float64)
        rho = gamma0 + gamma1 * x
        return {
            "mu": beta0 + beta1 * x,
            "rho": rho,
            "sigma": np.asarray(softplus(rho)),
        }

    def log_prior(self, theta: ArrayLike) -> float:
        theta = self._check_theta(theta)
        return float(np.sum(gaussian_logpdf(theta, 0.0, np.sqrt(self.prior_var))))

    def log_likelihood(self, theta: ArrayLike) -> float:
        g = self.generated_quantities(theta)
        return float(np.sum(gaussian_logpdf(self.y, g["mu"], g["sigma"])))

    def initial_point(self) -> NDArray[np.float64]:
        """OLS line with a constant noise scale (inverse softplus of the residual sd)."""
        beta = ols_estimate(self.x, self.y)
        resid = self.y - (beta[0] + beta[1] * self.x)
        sd = max(float(np.std(resid)), 1e-3)
        # Inverse softplus in a form that does not overflow for large sd
        gamma0 = sd + np.log(-np.expm1(-sd))
        return np.array([beta[0], beta[1], gamma0, 0.0])

    def predict_mean(self, theta: ArrayLike, X: ArrayLike) -> NDArray[np.float64]:
        return self.generated_quantities(theta, np.asarray(X, dtype=np.float64).ravel())["mu"]

    def simulate(self, theta: ArrayLike) -> NDArray[np.float64]:
        g = self.generated_quantities(theta)
        return g["mu"] + g["sigma"] * np.random.standard_normal(self.n_obs)


def posterior_predictive(
    model: RegressionModel,
    sample_set: PosteriorSampleSet,
    random_seed: Optional[int] = None,
) -> NDArray[np.float64]:
    """
    Simulate one pseudo dataset per posterior draw.

    Parameters
    ----------
    model : RegressionModel
        Model whose parameters were sampled.
    sample_set : PosteriorSampleSet
        Posterior draws containing every name in model.parameter_names.
    random_seed : int, optional
        Random seed for reproducibility.

    Returns
    -------
    NDArray[np.float64]
        Simulated targets, shape (S, N) with S = chains * draws.
    """
    if random_seed is not None:
        np.random.seed(random_seed)

    thetas = sample_set.matrix(model.parameter_names)
    return np.vstack([model.simulate(theta) for theta in thetas])


def predictive_mean_band(
    model: RegressionModel,
    sample_set: PosteriorSampleSet,
    X: ArrayLike,
) -> Tuple[NDArray[np.float64], NDArray[np.float64]]:
    """
    Posterior mean and standard deviation of the regression line at X.

    Returns
    -------
    Tuple[NDArray[np.float64], NDArray[np.float64]]
        (E[μ(x) | D], std[μ(x) | D]) at each row of X.
    """
    thetas = sample_set.matrix(model.parameter_names)
    lines = np.vstack([model.predict_mean(theta, X) for theta in thetas])
    return lines.mean(axis=0), lines.std(axis=0)
