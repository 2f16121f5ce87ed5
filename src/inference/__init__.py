"""
Bayesian inference module for black-box log-joint densities.

This module connects NumPy log-joint-densities to PyMC:
1. ModelBuilder: Wrap the density in a pytensor op on a flat parameter vector
2. LogDensitySampler: Gradient-free sampling (slice, Metropolis, DEMetropolisZ)
3. DiagnosticsComputer: Rhat and ESS per parameter
4. PosteriorPredictiveCheck: Model validation
5. Regression models: log-joint-densities for linear, robust and
   heteroscedastic regression

**Usage:**
```python
from inference.regression import SimpleLinearRegression
from inference.sampler import PosteriorPredictiveCheck
from inference.regression import posterior_predictive

# 1. Define the model
model = SimpleLinearRegression(x, y)

# 2. Sample
summary = model.sample(draws=1000, tune=1000, chains=2, random_seed=1)

# 3. Check convergence diagnostics (auto-computed)
print(summary.diagnostics)

# 4. Posterior predictive check
pp = posterior_predictive(model, summary.samples, random_seed=2)
PosteriorPredictiveCheck.compute_ppcheck(pp, y)
```

**Key Classes:**
- ModelBuilder: PyMC model assembly
- LogDensitySampler: Sampling orchestration
- PosteriorSampleSet: Named draws of shape (chains, draws)
- DiagnosticsComputer: Rhat and ESS
- PosteriorPredictiveCheck: PPCs and summary statistics
- InferenceSummary: Sampling results and diagnostics
"""

from inference.model_builder import ModelBuilder, LogDensityOp
from inference.sampler import (
    LogDensitySampler,
    sample_log_density,
    DiagnosticsComputer,
    PosteriorPredictiveCheck,
    PosteriorSampleSet,
    InferenceSummary,
)
from inference.regression import (
    RegressionPriorSpec,
    RegressionModel,
    LinearRegression,
    SimpleLinearRegression,
    MultipleLinearRegression,
    RobustLinearRegression,
    HeteroscedasticRegression,
    posterior_predictive,
    predictive_mean_band,
    ols_estimate,
    conjugate_update,
    conjugate_posterior,
)

__all__ = [
    "ModelBuilder",
    "LogDensityOp",
    "LogDensitySampler",
    "sample_log_density",
    "DiagnosticsComputer",
    "PosteriorPredictiveCheck",
    "PosteriorSampleSet",
    "InferenceSummary",
    "RegressionPriorSpec",
    "RegressionModel",
    "LinearRegression",
    "SimpleLinearRegression",
    "MultipleLinearRegression",
    "RobustLinearRegression",
    "HeteroscedasticRegression",
    "posterior_predictive",
    "predictive_mean_band",
    "ols_estimate",
    "conjugate_update",
    "conjugate_posterior",
]
