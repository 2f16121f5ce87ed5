"""
Discrete-grid Bayesian posteriors for binomial proportions.

This module implements the grid posterior engine and its queries:

**Data model (grid.py, observation.py):**
- Immutable, uniformly spaced parameter grids
- Binomial observations (successes out of trials)

**Posterior engine (binomial.py):**
- Log-likelihood grids for one seller and two independent sellers
- Log-sum-exp normalisation, log evidence and marginals

**Queries (hpdi.py, region.py):**
- Highest posterior density interval by greedy expansion from the mode
- Region probabilities P(predicate(θ_A, θ_B) | D) on grids or samples

**Comparison (frequentist.py):**
- MLE, Wald confidence interval, χ² test of equal rates
"""

from posterior.errors import (
    PosteriorError,
    InvalidObservation,
    DegenerateDistribution,
    GridMismatch,
)
from posterior.grid import Grid
from posterior.observation import Observation
from posterior.hpdi import HPDIResult, find_hpdi, count_modes
from posterior.region import (
    RegionQuery,
    GridRegionQuery,
    SampleRegionQuery,
    greater_than_scaled,
    probability_sweep,
)
from posterior.binomial import (
    log_likelihood_grid,
    joint_log_likelihood_grid,
    log_prior_from_weights,
    log_evidence,
    normalize,
    marginal,
    BinomialGridPosterior,
    TwoSellerGridPosterior,
)
from posterior.frequentist import (
    maximum_likelihood_estimate,
    wald_confidence_interval,
    chi_square_test,
)

__all__ = [
    # Errors
    "PosteriorError",
    "InvalidObservation",
    "DegenerateDistribution",
    "GridMismatch",
    # Data model
    "Grid",
    "Observation",
    # Engine
    "log_likelihood_grid",
    "joint_log_likelihood_grid",
    "log_prior_from_weights",
    "log_evidence",
    "normalize",
    "marginal",
    "BinomialGridPosterior",
    "TwoSellerGridPosterior",
    # Queries
    "HPDIResult",
    "find_hpdi",
    "count_modes",
    "RegionQuery",
    "GridRegionQuery",
    "SampleRegionQuery",
    "greater_than_scaled",
    "probability_sweep",
    # Frequentist comparison
    "maximum_likelihood_estimate",
    "wald_confidence_interval",
    "chi_square_test",
]
