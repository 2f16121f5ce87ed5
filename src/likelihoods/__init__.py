"""
Log-likelihood kernels for grid and sampler-based inference.

**Kernels (kernels.py):**
- safe_xlogy: x·log(y) with 0·log(0) = 0 at the parameter boundaries
- Binomial / Bernoulli log-likelihoods (log-gamma binomial coefficient)
- Gaussian, Cauchy and half-Cauchy log-densities for regression models
- Softplus transform for positive noise scales
"""

from likelihoods.kernels import (
    safe_xlogy,
    log_binomial_coefficient,
    binomial_log_likelihood,
    binomial_likelihood,
    bernoulli_log_likelihood,
    bernoulli_likelihood,
    gaussian_logpdf,
    cauchy_logpdf,
    half_cauchy_logpdf,
    softplus,
)

__all__ = [
    # Binomial / Bernoulli
    "safe_xlogy",
    "log_binomial_coefficient",
    "binomial_log_likelihood",
    "binomial_likelihood",
    "bernoulli_log_likelihood",
    "bernoulli_likelihood",
    # Regression densities
    "gaussian_logpdf",
    "cauchy_logpdf",
    "half_cauchy_logpdf",
    "softplus",
]
